"""
Postboard - server entry point.

    uvicorn postboard.main:app --reload
or
    python -m postboard.main
"""

from __future__ import annotations

import uvicorn

from postboard.api import create_app
from postboard.config import get_settings

app = create_app()


def run() -> None:
    """Serve the API with uvicorn using configured host and port."""
    settings = get_settings()
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
