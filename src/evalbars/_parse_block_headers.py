"""Split a raw PGN block into tag pairs and movetext."""

from evalbars.HEADER_PATTERN import HEADER_PATTERN


def _unescape_header_value(value: str) -> str:
    return value.replace('\\"', '"').replace("\\\\", "\\")


def _parse_block_headers(text: str) -> tuple[dict[str, str], str]:
    """Return the tag pairs and the remaining movetext of a PGN block.

    Header lines are recognised anywhere in the block so a partially streamed
    block whose header section is still growing keeps its tags. The first value
    wins when a tag is repeated.
    """
    headers: dict[str, str] = {}
    movetext_lines: list[str] = []
    for line in text.splitlines():
        match = HEADER_PATTERN.match(line)
        if match:
            headers.setdefault(match.group(1), _unescape_header_value(match.group(2)))
            continue
        if line.strip():
            movetext_lines.append(line.strip())
    return headers, "\n".join(movetext_lines)
