"""FastAPI lifespan hook that owns the process runtime."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from evalbars.wiring import build_runtime


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the feed and tracker threads on startup and tear them down on shutdown."""
    runtime = getattr(app.state, "runtime", None)
    if runtime is None:
        runtime = build_runtime()
        app.state.runtime = runtime
    runtime.start()
    try:
        yield
    finally:
        runtime.stop()
