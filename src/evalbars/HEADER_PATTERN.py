"""Regex for PGN tag pair lines."""

# pylint: disable=invalid-name

import re

HEADER_PATTERN: re.Pattern[str] = re.compile(r'^\s*\[\s*([A-Za-z0-9_]+)\s+"((?:[^"\\]|\\.)*)"\s*\]\s*$')
