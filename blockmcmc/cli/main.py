"""CLI Entry Point for blockmcmc
=============================

Entry point for console script: blockmcmc [args]
"""

import sys

from blockmcmc.cli.args_parser import create_parser
from blockmcmc.cli.commands import dispatch_command
from blockmcmc.utils.logging import get_logger

logger = get_logger(__name__)


def main(argv=None) -> None:
    """Main CLI entry point.

    Processes command-line arguments and dispatches the sampling run.
    """
    try:
        parser = create_parser()
        args = parser.parse_args(argv)

        logger.info("Starting blockmcmc run...")
        logger.debug(f"Arguments: {vars(args)}")

        result = dispatch_command(args)

        if result and result.get("success", False):
            logger.info("Sampling completed successfully")
            sys.exit(0)
        else:
            error_msg = (
                result.get("error", "Unknown error") if result else "Command failed"
            )
            logger.error(f"Sampling failed: {error_msg}")
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Sampling interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
