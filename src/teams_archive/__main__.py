"""Command-line entry point — runs one archive from environment configuration."""

import logging
import sys

from teams_archive.config import load_config
from teams_archive.orchestration.run import SetupError, archive_run_from_config

logger = logging.getLogger("teams_archive")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    try:
        summary = archive_run_from_config(load_config()).run()
    except SetupError:
        logger.exception("Archive run could not start")
        return 1
    logger.info("Archive finished — see %s", summary.export_root)
    return 0


if __name__ == "__main__":
    sys.exit(main())
