from evalbars.GAME_SPLIT_RE import GAME_SPLIT_RE


def split_pgn_blocks(text: str) -> list[str]:
    """Split broadcast PGN text into per-game blocks, trailing partial game included."""
    if not text:
        return []
    normalized = text.replace("\r\n", "\n")
    return [block.strip() for block in GAME_SPLIT_RE.split(normalized) if block.strip()]
