"""
VisConnect entry point.
Serves FIVB VIS tournament data over HTTP.
"""

import uvicorn
from loguru import logger

from visconnect.api import create_app
from visconnect.datasource import create_tournament_source
from visconnect.log import setup_logging
from visconnect.settings import load_settings


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)

    logger.info("Starting VisConnect...")
    source = create_tournament_source(settings)
    app = create_app(source)

    logger.info(f"Listening on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
