import sys

from loguru import logger

from courtbook.api.booking_server import run_server
from courtbook.config import get_settings


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    )


if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting booking server")
    run_server(settings.api_host, settings.api_port)
