"""
Chirpy Entry Point

Allows running `python -m chirpy` to initialize the store from the
environment and report what it holds. Logging goes to stderr.
"""

import logging
import sys

from .core.config import ChirpyConfig
from .core.constants import LOG_FORMAT, SECTION_USERS, SECTION_REVOCATIONS
from .core.errors import ChirpyError
from .persistence import ChirpDatabase


def setup_logging():
    """Configure logging to stderr"""
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def main() -> int:
    """Main entry point"""
    setup_logging()
    logger = logging.getLogger("main")

    try:
        config = ChirpyConfig.from_env()
    except ValueError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 2

    try:
        database = ChirpDatabase(config.db_path)
        chirps = database.get_chirps()
        with database.store.read() as snapshot:
            users = len(snapshot.get(SECTION_USERS, {}))
            revocations = len(snapshot.get(SECTION_REVOCATIONS, {}))
    except ChirpyError as e:
        logger.critical(f"Store unavailable: {e}", exc_info=True)
        return 1

    logger.info(
        f"Store {config.db_path}: {len(chirps)} chirps, {users} users, "
        f"{revocations} revoked tokens"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
