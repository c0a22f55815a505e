import argparse
import logging
from dataclasses import replace

from examcheck.config import load_settings
from examcheck.worker import run_check_once, run_forever

DESCRIPTION = """\
examcheck watches the Swedish Transport Administration's booking site for
newly opened driving exam times. Only motorcycle exam times are checked.

It needs a file, "personnummer.txt" by default, with one personnummer per
line. Each check picks one of them at random. Once a person has passed the
exam, remove their personnummer from the file: it can no longer be used for
searching. The file is re-read before every check, so no restart is needed.

Locations are numeric office codes. The defaults search Västra Haninge,
Västra Haninge 2 and Gillinge. To search elsewhere, look up the codes of the
offices you want and pass them with --location1..--location4 (0 disables a
nearby slot).

Notifications go through ntfy.sh: install the ntfy app and subscribe to the
topic given with --topic.

The tool polls at a modest pace in the hope that it lowers the load on the
booking site and gives everyone an equal chance at a cancelled slot. Use it
at your own discretion; it comes with no guarantees.
"""


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    # httpx logs every request at INFO; the worker already reports what matters.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="examcheck",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--topic", help="ntfy.sh topic to publish found times to")
    parser.add_argument("--location1", type=int, help="primary location code")
    parser.add_argument("--location2", type=int, help="secondary location code")
    parser.add_argument("--location3", type=int, help="tertiary location code")
    parser.add_argument("--location4", type=int, help="quaternary location code")
    parser.add_argument("--once", action="store_true", help="Run single check and exit")
    parser.add_argument("--env-file", help="path to a .env file with settings")
    return parser


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)

    _setup_logging()
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(dotenv_path=args.env_file)
        settings = settings.with_locations(args.location1, args.location2, args.location3, args.location4)
        if args.topic:
            settings = replace(settings, ntfy_topic=args.topic)

        if args.once:
            message = run_check_once(settings)
            if not message:
                logger.info("No occasions found.")
            return 0

        run_forever(settings)
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted, exiting.")
        return 130

    except Exception as e:
        logger.error("Error: %s: %s", type(e).__name__, e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
