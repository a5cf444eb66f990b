from pathlib import Path
import argparse
import logging
import os
import random
import sys

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from warrior.application.services.balance_tables import create_config
from warrior.bootstrap import create_save_service
from warrior.domain.models.state import ActivityMode
from warrior.domain.repositories import SaveStoreError
from warrior.presentation.cli import run_session

load_dotenv()


def _print_help_surface() -> None:
    print("\nHelp:")
    print("- Run `python -m warrior --seconds 60` to simulate a minute of play.")
    print("- Saves: set WARRIOR_SAVE_PATH for a JSON file or WARRIOR_DATABASE_URL for a database.")
    print("- Use --no-save to leave the stored game untouched.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="warrior", description="Run a headless idle-combat session.")
    parser.add_argument("--seconds", type=float, default=60.0, help="simulated seconds to play")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ActivityMode],
        default=ActivityMode.BATTLE.value,
        help="activity mode for the session",
    )
    parser.add_argument(
        "--flow",
        type=float,
        nargs=3,
        metavar=("BODY", "MIND", "SPIRIT"),
        help="cultivation flow weights",
    )
    parser.add_argument("--seed", type=int, help="seed for a reproducible session")
    parser.add_argument("--no-save", action="store_true", help="do not write the session back")
    return parser


def _configure_logging() -> None:
    level_name = os.getenv("WARRIOR_LOG_LEVEL", "WARNING").strip().upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.WARNING))


def _play(args) -> None:
    config = create_config()
    save_service = create_save_service()
    rng = random.Random(args.seed) if args.seed is not None else None
    run_session(
        save_service,
        config,
        seconds=args.seconds,
        mode=args.mode,
        flow=args.flow,
        rng=rng,
        save=not args.no_save,
    )


def main(argv=None):
    args = _build_parser().parse_args(argv)
    _configure_logging()
    try:
        _play(args)
    except KeyboardInterrupt:
        print("\nSession ended.")
    except Exception as exc:
        if os.getenv("WARRIOR_DATABASE_URL") and isinstance(exc, SaveStoreError):
            print("Database save store unavailable; retrying in-memory mode.")
            os.environ.pop("WARRIOR_DATABASE_URL", None)
            try:
                _play(args)
                return
            except KeyboardInterrupt:
                print("\nSession ended.")
                return
            except Exception as fallback_exc:
                exc = fallback_exc
        print("An unexpected error occurred. The session closed safely.")
        print(f"Reason: {exc}")
        _print_help_surface()


if __name__ == "__main__":
    main()
