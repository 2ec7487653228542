"""Regex for clock annotations embedded in PGN comments."""

# pylint: disable=invalid-name

import re

CLK_PATTERN = re.compile(r"\[%clk\s+([^\]\s]*)\s*\]")
