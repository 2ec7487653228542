"""Castling notation normalization."""

import re

_CASTLING_RE = re.compile(r"^([0O])-\1(-\1)?([+#]?)$")


def _normalize_castling(token: str) -> str:
    """Rewrite zero-style or mixed castling tokens as `O-O` / `O-O-O`.

    Chess960 back ranks make the king's destination depend on the rook file, so
    castling has to reach the board as the side-neutral `O-O` form rather than as
    a king move.
    """
    match = _CASTLING_RE.match(token)
    if not match:
        return token
    long_side = match.group(2) is not None
    return ("O-O-O" if long_side else "O-O") + match.group(3)
