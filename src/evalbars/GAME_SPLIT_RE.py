"""Regex separating consecutive games in a broadcast PGN feed."""

# pylint: disable=invalid-name

import re

GAME_SPLIT_RE: re.Pattern[str] = re.compile(r"\n{3,}")
