"""Run the ApiKit service under uvicorn."""

import os

import uvicorn
from loguru import logger

from apikit.api.main import app
from apikit.core.config import Settings, get_settings
from apikit.core.logging import setup_logging

APP_IMPORT_PATH = "apikit.api.main:app"


def resolve_port(settings: Settings) -> int:
    """Return the port to listen on; the platform's ``PORT`` wins over settings."""
    return int(os.environ.get("PORT", settings.api_port))


def main() -> None:
    """Configure logging and serve the application."""
    settings = get_settings()
    setup_logging(settings)

    port = resolve_port(settings)
    logger.info(
        "Starting {} on http://{}:{}{}",
        settings.app_name,
        settings.api_host,
        port,
        " with auto-reload" if settings.debug else "",
    )

    # uvicorn's loggers already go through loguru; log_config=None keeps
    # uvicorn from replacing those handlers. Reload needs an import string.
    uvicorn.run(
        APP_IMPORT_PATH if settings.debug else app,
        host=settings.api_host,
        port=port,
        reload=settings.debug,
        log_config=None,
        log_level=(settings.log_config.log_level or "INFO").lower(),
    )


if __name__ == "__main__":
    main()
