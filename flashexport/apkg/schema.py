"""
Anki collection schema (version 11) and the collection metadata row.

An .apkg file is a ZIP archive holding:
- collection.anki2: an SQLite database with this schema
- media: JSON object mapping archive indices to filenames ({} without media)
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from ..constants import ANKI_SCHEMA_VERSION

APKG_SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS col (
        id              integer primary key,
        crt             integer not null,
        mod             integer not null,
        scm             integer not null,
        ver             integer not null,
        dty             integer not null,
        usn             integer not null,
        ls              integer not null,
        conf            text not null,
        models          text not null,
        decks           text not null,
        dconf           text not null,
        tags            text not null
    );

    CREATE TABLE IF NOT EXISTS notes (
        id              integer primary key,
        guid            text not null,
        mid             integer not null,
        mod             integer not null,
        usn             integer not null,
        tags            text not null,
        flds            text not null,
        sfld            integer not null,
        csum            integer not null,
        flags           integer not null,
        data            text not null
    );

    CREATE TABLE IF NOT EXISTS cards (
        id              integer primary key,
        nid             integer not null,
        did             integer not null,
        ord             integer not null,
        mod             integer not null,
        usn             integer not null,
        type            integer not null,
        queue           integer not null,
        due             integer not null,
        ivl             integer not null,
        factor          integer not null,
        reps            integer not null,
        lapses          integer not null,
        left            integer not null,
        odue            integer not null,
        odid            integer not null,
        flags           integer not null,
        data            text not null
    );

    CREATE TABLE IF NOT EXISTS revlog (
        id              integer primary key,
        cid             integer not null,
        usn             integer not null,
        ease            integer not null,
        ivl             integer not null,
        lastIvl         integer not null,
        factor          integer not null,
        time            integer not null,
        type            integer not null
    );

    CREATE TABLE IF NOT EXISTS graves (
        usn             integer not null,
        oid             integer not null,
        type            integer not null
    );

    CREATE INDEX IF NOT EXISTS ix_notes_usn ON notes (usn);
    CREATE INDEX IF NOT EXISTS ix_cards_usn ON cards (usn);
    CREATE INDEX IF NOT EXISTS ix_revlog_usn ON revlog (usn);
    CREATE INDEX IF NOT EXISTS ix_cards_nid ON cards (nid);
    CREATE INDEX IF NOT EXISTS ix_cards_sched ON cards (did, queue, due);
    CREATE INDEX IF NOT EXISTS ix_revlog_cid ON revlog (cid);
    CREATE INDEX IF NOT EXISTS ix_notes_csum ON notes (csum);
"""

INSERT_COL_SQL = "INSERT INTO col VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
INSERT_NOTE_SQL = "INSERT INTO notes VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
INSERT_CARD_SQL = (
    "INSERT INTO cards VALUES "
    "(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)

BASIC_MODEL_CSS = (
    ".card {\n"
    " font-family: arial;\n"
    " font-size: 20px;\n"
    " text-align: center;\n"
    " color: black;\n"
    " background-color: white;\n"
    "}\n"
)
LATEX_PRE = (
    "\\documentclass[12pt]{article}\n"
    "\\special{papersize=3in,5in}\n"
    "\\usepackage{amssymb,amsmath}\n"
    "\\pagestyle{empty}\n"
    "\\setlength{\\parindent}{0in}\n"
    "\\begin{document}\n"
)
LATEX_POST = "\\end{document}"

# Scheduling options group every exported deck points at.
DECK_CONFIG_ID = 1


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _collection_conf(deck_id: int, model_id: int) -> Dict[str, Any]:
    return {
        "activeDecks": [deck_id],
        "curDeck": deck_id,
        "newSpread": 0,
        "collapseTime": 1200,
        "timeLim": 0,
        "estTimes": True,
        "dueCounts": True,
        "curModel": model_id,
        "nextPos": 1,
        "sortType": "noteFld",
        "sortBackwards": False,
        "addToCur": True,
    }


def _field(name: str, ord_: int) -> Dict[str, Any]:
    return {
        "name": name,
        "ord": ord_,
        "sticky": False,
        "rtl": False,
        "font": "Arial",
        "size": 20,
        "media": [],
    }


def _basic_model(model_id: int, deck_id: int, now: int) -> Dict[str, Any]:
    return {
        "id": model_id,
        "name": "Basic",
        "type": 0,
        "mod": now,
        "usn": -1,
        "sortf": 0,
        "did": deck_id,
        "tmpls": [
            {
                "name": "Card 1",
                "ord": 0,
                "qfmt": "{{Front}}",
                "afmt": "{{FrontSide}}<hr id=answer>{{Back}}",
                "bqfmt": "",
                "bafmt": "",
                "did": None,
                "bfont": "",
                "bsize": 0,
            }
        ],
        "flds": [_field("Front", 0), _field("Back", 1)],
        "css": BASIC_MODEL_CSS,
        "latexPre": LATEX_PRE,
        "latexPost": LATEX_POST,
        "latexsvg": False,
        "req": [[0, "any", [0]]],
        "vers": [],
        "tags": [],
    }


def _deck(deck_id: int, deck_name: str, now: int) -> Dict[str, Any]:
    return {
        "id": deck_id,
        "name": deck_name,
        "mod": now,
        "usn": -1,
        "lrnToday": [0, 0],
        "revToday": [0, 0],
        "newToday": [0, 0],
        "timeToday": [0, 0],
        "collapsed": False,
        "browserCollapsed": False,
        "desc": "",
        "dyn": 0,
        "conf": DECK_CONFIG_ID,
        "extendNew": 10,
        "extendRev": 50,
    }


def _deck_config() -> Dict[str, Any]:
    return {
        "id": DECK_CONFIG_ID,
        "name": "Default",
        "mod": 0,
        "usn": 0,
        "maxTaken": 60,
        "autoplay": True,
        "timer": 0,
        "replayq": True,
        "new": {
            "bury": True,
            "delays": [1, 10],
            "initialFactor": 2500,
            "ints": [1, 4, 7],
            "order": 1,
            "perDay": 20,
        },
        "rev": {
            "bury": True,
            "ease4": 1.3,
            "fuzz": 0.05,
            "ivlFct": 1,
            "maxIvl": 36500,
            "perDay": 200,
            "hardFactor": 1.2,
        },
        "lapse": {
            "delays": [10],
            "leechAction": 0,
            "leechFails": 8,
            "minInt": 1,
            "mult": 0,
        },
        "dyn": False,
    }


@dataclass(frozen=True)
class ColRow:
    """The single row of the ``col`` table, in column order."""

    id: int
    crt: int
    mod: int
    scm: int
    ver: int
    dty: int
    usn: int
    ls: int
    conf: str
    models: str
    decks: str
    dconf: str
    tags: str

    def as_params(self) -> Tuple[Any, ...]:
        return (
            self.id,
            self.crt,
            self.mod,
            self.scm,
            self.ver,
            self.dty,
            self.usn,
            self.ls,
            self.conf,
            self.models,
            self.decks,
            self.dconf,
            self.tags,
        )


def build_col_row(deck_name: str, deck_id: int, model_id: int) -> ColRow:
    """
    Build the collection metadata row an importer reads first.

    The decks blob holds exactly one deck, the caller's; no "Default" deck is
    added next to it.
    """
    now_ms = time.time_ns() // 1_000_000
    now = now_ms // 1000
    return ColRow(
        id=1,
        crt=now,
        mod=now_ms,
        scm=now_ms,
        ver=ANKI_SCHEMA_VERSION,
        dty=0,
        usn=0,
        ls=0,
        conf=_to_json(_collection_conf(deck_id, model_id)),
        models=_to_json({str(model_id): _basic_model(model_id, deck_id, now)}),
        decks=_to_json({str(deck_id): _deck(deck_id, deck_name, now)}),
        dconf=_to_json({str(DECK_CONFIG_ID): _deck_config()}),
        tags="{}",
    )
