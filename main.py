import argparse
import dataclasses
import logging

from examwatch.config import load_settings
from examwatch.worker import run_check_once

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="examwatch: Goethe exam slot watcher (single check per run)")
    parser.add_argument("--state-file", help="Override the state file location (default: STATE_FILE or package dir)")
    args = parser.parse_args(argv)

    _setup_logging()

    try:
        settings = load_settings()
        if args.state_file:
            settings = dataclasses.replace(settings, state_file=args.state_file)
        run_check_once(settings)
        return 0
    except Exception:
        logger.exception("Check failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
