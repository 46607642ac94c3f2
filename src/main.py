import sys
import logging
from typing import List, Optional

from config import get_settings
from csv_io import process_file, write_accounts


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format=settings.log_format,
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: ledger-engine <input.csv>", file=sys.stderr)
        return 1

    configure_logging()

    filepath = args[0]
    try:
        engine = process_file(filepath)
    except OSError as e:
        print(f"failed to open file {filepath}: {e.strerror}", file=sys.stderr)
        return 1

    write_accounts(engine.all_summaries(), sys.stdout, sort=get_settings().sort_output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
