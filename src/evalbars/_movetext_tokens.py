"""Reduce PGN movetext to bare SAN tokens."""

from __future__ import annotations

import re

_COMMENT_RE = re.compile(r"\{[^}]*\}")
_LINE_COMMENT_RE = re.compile(r";[^\n]*")
_INNER_VARIATION_RE = re.compile(r"\([^()]*\)")
_NAG_RE = re.compile(r"\$\d+")
_MOVE_NUMBER_RE = re.compile(r"\b\d+\s*\.(?:\s*\.\.)?|\b\d+\.+")
_RESULT_TOKENS = frozenset({"1-0", "0-1", "1/2-1/2", "½-½", "*"})
_GLYPH_CHARS = "!?"


def _strip_variations(text: str) -> str:
    previous = None
    while previous != text:
        previous = text
        text = _INNER_VARIATION_RE.sub(" ", text)
    # An unterminated variation from a partial stream runs to the end of the text.
    return text.split("(", 1)[0]


def strip_movetext(movetext: str) -> str:
    """Remove comments, variations, NAGs and move-number labels."""
    text = _COMMENT_RE.sub(" ", movetext or "")
    # A comment still open at the end of a partial block is dropped entirely.
    text = text.split("{", 1)[0]
    text = _LINE_COMMENT_RE.sub(" ", text)
    text = _strip_variations(text)
    text = _NAG_RE.sub(" ", text)
    return _MOVE_NUMBER_RE.sub(" ", text)


def result_token(movetext: str) -> str | None:
    """Return the trailing result token of the movetext, if present."""
    tokens = strip_movetext(movetext).split()
    if tokens and tokens[-1] in _RESULT_TOKENS:
        return tokens[-1]
    return None


def san_tokens(movetext: str) -> list[str]:
    """Return the SAN move tokens in playing order."""
    tokens = []
    for token in strip_movetext(movetext).split():
        if token in _RESULT_TOKENS:
            continue
        cleaned = token.rstrip(_GLYPH_CHARS)
        if cleaned:
            tokens.append(cleaned)
    return tokens
