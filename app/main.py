"""
Main application entry point.
Configures logging and serves the intraday aggregation API.
"""
import logging
import sys

import uvicorn

from app.api.routes import api
from app.config.settings import settings

# Configure logging for stdout/stderr collectors
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,
)

logger = logging.getLogger(__name__)


def main():
    """Run the application."""
    logger.info(
        "Configuration loaded",
        extra={
            "host": settings.host,
            "port": settings.port,
            "log_level": settings.log_level,
            "alphavantage_base_url": settings.alphavantage_base_url,
            "request_timeout_seconds": settings.request_timeout_seconds,
        },
    )

    uvicorn.run(
        api,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        lifespan="on",
        access_log=True,
    )


if __name__ == "__main__":
    main()
