import uvicorn

from .constants import HOST, LOG_FILE, LOG_LEVEL, PORT
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
    logger.info(f"Starting room relay on {HOST}:{PORT}")
    uvicorn.run("roomrelay.app:app", host=HOST, port=PORT)


if __name__ == "__main__":
    main()
