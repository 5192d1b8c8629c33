import logging
import sys

from config import ConfigError, load_config
from services.inspector import Inspector

logger = logging.getLogger(__name__)


def main(argv=None):
    try:
        config = load_config(argv)
    except ConfigError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.critical("Invalid configuration: %s", exc)
        sys.exit(1)

    logging.basicConfig(level=config.log_level)
    logger.info("Starting Candidate Inspector...")
    inspector = Inspector(config)
    inspector.run()


if __name__ == "__main__":
    main()
