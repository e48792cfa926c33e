"""
Plain-text rendering of rich card text for the flat export formats.
"""

import html
import re

_RUBY_BLOCK_RE = re.compile(
    r"<ruby\b[^>]*>(?P<inner>.*?)</ruby\s*>", re.IGNORECASE | re.DOTALL
)
# One base/annotation pair inside a ruby block, with optional <rp> fallbacks
# on either side of the <rt>.
_RUBY_PAIR_RE = re.compile(
    r"(?P<base>.*?)"
    r"(?:<rp\b[^>]*>.*?</rp\s*>\s*)?"
    r"<rt\b[^>]*>(?P<annotation>.*?)</rt\s*>"
    r"(?:\s*<rp\b[^>]*>.*?</rp\s*>)?",
    re.IGNORECASE | re.DOTALL,
)
_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_PARAGRAPH_BOUNDARY_RE = re.compile(r"</p>\s*<p\b[^>]*>", re.IGNORECASE)
_MARKUP_TAG_RE = re.compile(
    r"</?(?:div|p|span|section|h[1-6]|ul|ol|li|ruby|rb|rt|rp|table|thead"
    r"|tbody|tr|td|th|pre|code|blockquote|a|em|strong|b|i|u|s|sub|sup|hr)"
    r"\b[^>]*>",
    re.IGNORECASE,
)
_INLINE_WHITESPACE_RE = re.compile(r"[^\S\n]+")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


def _rewrite_ruby(match: re.Match) -> str:
    return _RUBY_PAIR_RE.sub(
        lambda pair: f"{pair.group('base')}({pair.group('annotation')})",
        match.group("inner"),
    )


def strip_html(text: str) -> str:
    """
    Convert rich card text to plain text.

    Ruby annotations become ``base(annotation)`` before any tag is removed,
    otherwise the reading would be deleted with its tags. Line breaks become
    newlines, paragraph boundaries blank lines, known markup tags are dropped
    with their content kept, entities are decoded, inline whitespace is
    collapsed and the result trimmed.
    """
    text = _RUBY_BLOCK_RE.sub(_rewrite_ruby, text)
    text = _BREAK_RE.sub("\n", text)
    text = _PARAGRAPH_BOUNDARY_RE.sub("\n\n", text)
    text = _MARKUP_TAG_RE.sub("", text)
    text = html.unescape(text)
    text = _INLINE_WHITESPACE_RE.sub(" ", text)
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    return text.strip()
