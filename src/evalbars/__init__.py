"""EVALBARS package entrypoints."""

from evalbars.config import Settings, get_settings


def main() -> None:
    """Serve the overlay API with the feed and tracker running in the background."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("evalbars.api:app", host=settings.host, port=settings.port)


__all__ = [
    "Settings",
    "get_settings",
    "main",
]
