"""HTTP server runner for transcodeplan."""

import sys

import uvicorn

from transcodeplan.api.app import create_app
from transcodeplan.config import Config
from transcodeplan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def start_server(config: Config) -> None:
    """Serve the API with uvicorn until interrupted.

    Args:
        config: Application configuration
    """
    setup_logging(config.logging)
    app = create_app(config)

    logger.info("Starting API server", host=config.api.host, port=config.api.port)

    try:
        uvicorn.run(
            app,
            host=config.api.host,
            port=config.api.port,
            log_level=config.logging.level,
            access_log=False,  # RequestLoggingMiddleware logs requests
        )
    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
    except Exception as e:
        logger.exception("Server error", error=str(e))
        sys.exit(1)
    finally:
        logger.info("Server stopped")
