"""
Export constants.

Fixed limits and names dictated by the Anki package format and by the
interactivity budget of the APKG builder. No runtime configuration here.
"""
# Cards per package. Each card inserts two rows.
MAX_APKG_CARDS: int = 2000

# Cards inserted between cooperative yields.
APKG_BATCH_SIZE: int = 100

# DEFLATE level for the package archive (favours speed over ratio).
APKG_COMPRESS_LEVEL: int = 6

# Archive member names read by the Anki importer.
APKG_COLLECTION_MEMBER: str = "collection.anki2"
APKG_MEDIA_MEMBER: str = "media"
APKG_EMPTY_MEDIA_MANIFEST: str = "{}"

# Anki collection schema version 11 is the most broadly importable.
ANKI_SCHEMA_VERSION: int = 11

# Joins the fields of a note in notes.flds.
FIELD_SEPARATOR: str = "\x1f"

# Alphabet Anki uses for note GUIDs (base91).
GUID_CHARS: str = (
    "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "!#$%&()*+,-./:;<=>?@[]^_`{|}~"
)
GUID_LENGTH: int = 10

DEFAULT_DECK_NAME: str = "Memogenesis Export"

# Deck-derived filename stems are cut to this many characters.
MAX_FILENAME_STEM: int = 50

CSV_FILENAME: str = "flashcards.csv"
JSON_FILENAME: str = "flashcards.json"
