import logging
import os
import sys

from ledger_replay.engine import PaymentsEngine
from ledger_replay.exporter import write_snapshot

LOG_LEVEL_ENV = "LEDGER_LOG_LEVEL"
DEFAULT_INPUT_PATH = "transactions.csv"
DEFAULT_OUTPUT_PATH = "accounts.csv"


def configure_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) > 2:
        print(f"Usage: ledger-replay [input.csv (default {DEFAULT_INPUT_PATH})] [output.csv (default {DEFAULT_OUTPUT_PATH})]", file=sys.stderr)
        return 1

    configure_logging()

    input_path = args[0] if len(args) >= 1 else DEFAULT_INPUT_PATH
    output_path = args[1] if len(args) == 2 else DEFAULT_OUTPUT_PATH

    engine = PaymentsEngine()
    try:
        engine.process_file(input_path)
    except OSError as e:
        print(f"Cannot read {input_path}: {e}", file=sys.stderr)
        return 1

    snapshots = engine.snapshot()
    write_snapshot(snapshots, sys.stdout)

    try:
        with open(output_path, "w", newline="") as f:
            write_snapshot(snapshots, f)
    except OSError as e:
        print(f"Cannot write {output_path}: {e}", file=sys.stderr)
        return 1

    print(engine.stats.summary(), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
