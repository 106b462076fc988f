#!/usr/bin/env python
"""Entry point for running the textrazor-fastapi application."""

import uvicorn

from textrazor_fastapi.app.config import settings


def main() -> None:
    """Run the application using uvicorn server."""
    uvicorn.run(
        "textrazor_fastapi.app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
