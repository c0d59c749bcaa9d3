"""Entry point for the SpriteLoop preview service."""

from __future__ import annotations

import logging
import os
import sys


def configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("SPRITELOOP_LOG_LEVEL", "INFO").upper(),
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def run() -> int:
    """Serve the FastAPI app with uvicorn."""

    import uvicorn

    configure_logging()
    host = os.environ.get("SPRITELOOP_HOST", "127.0.0.1")
    port = int(os.environ.get("SPRITELOOP_PORT", "8000"))
    uvicorn.run("spriteloop.web.server:app", host=host, port=port)
    return 0


if __name__ == "__main__":
    sys.exit(run())
