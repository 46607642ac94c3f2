"""
CSV adapters around the ledger engine.

Input rows look like ``type, client, tx, amount``; output rows like
``client,available,held,total,locked``. Neither side makes ledger decisions:
rows that cannot be decoded are logged and skipped, everything else goes to
the engine as-is.
"""

import csv
import logging
from decimal import Decimal, InvalidOperation, getcontext
from typing import Dict, Iterable, Iterator, Optional, TextIO, Tuple

from ledger_engine import LedgerEngine
from models import (
    Transaction,
    TransactionType,
    AccountSummary,
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
)

logger = logging.getLogger(__name__)

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


def format_decimal(value: Decimal) -> str:
    """Format decimal without exponent or trailing zeros."""
    normalized = value.normalize()
    return f"{normalized:f}"


def _reject_separators(value: str, name: str) -> None:
    # int() and Decimal() both accept "1_000"; digit separators are not valid input
    if "_" in value:
        raise ValueError(f"{name} {value!r} contains a digit separator")


def _parse_id(value: str, upper_bound: int, name: str) -> int:
    _reject_separators(value, name)
    parsed = int(value)
    if not 0 <= parsed <= upper_bound:
        raise ValueError(f"{name} {parsed} out of range")
    return parsed


def _parse_amount(value: str) -> Decimal:
    _reject_separators(value, "amount")
    amount = Decimal(value)
    if not amount.is_finite():
        raise ValueError(f"amount {value} is not finite")
    if amount.adjusted() > getcontext().Emax:
        raise ValueError(f"amount {value} out of range")
    return amount


def parse_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction. Returns None for rows that cannot be decoded."""
    try:
        normalized = {
            k.strip().lower(): (v or "").strip()
            for k, v in row.items()
            if k is not None
        }

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = _parse_id(normalized["client"], MAX_CLIENT_ID, "client")
        transaction_id = _parse_id(normalized["tx"], MAX_TRANSACTION_ID, "tx")

        amount = None
        if transaction_type.moves_funds:
            amount_str = normalized.get("amount", "")
            if not amount_str:
                raise ValueError(f"{transaction_type.value} without amount")
            amount = _parse_amount(amount_str)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except (KeyError, ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {row}: {e!r}")
        return None


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """Lazily decode transactions from a CSV stream, skipping undecodable rows."""
    reader = csv.DictReader(stream, skipinitialspace=True)
    for row in reader:
        transaction = parse_row(row)
        if transaction is not None:
            yield transaction


def write_accounts(summaries: Iterable[Tuple[int, AccountSummary]], stream: TextIO, sort: bool = True) -> int:
    """Write account summaries as CSV. Returns the number of rows written."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)

    if sort:
        summaries = sorted(summaries, key=lambda item: item[0])

    count = 0
    for client_id, summary in summaries:
        writer.writerow([
            client_id,
            format_decimal(summary.available),
            format_decimal(summary.held),
            format_decimal(summary.total),
            str(summary.locked).lower(),
        ])
        count += 1
    return count


def process_file(filepath: str, engine: Optional[LedgerEngine] = None) -> LedgerEngine:
    """Stream a CSV file into the engine and return it."""
    if engine is None:
        engine = LedgerEngine()

    logger.info(f"Processing {filepath}")
    with open(filepath, "r", newline="") as f:
        engine.apply_all(read_transactions(f))

    logger.info(
        f"Applied: {engine.stats.applied}, "
        f"Ignored: {engine.stats.ignored}, "
        f"Accounts: {len(engine)}"
    )
    return engine
