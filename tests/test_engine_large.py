import sys
import os
import random
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from csv_io import process_file
from ledger_engine import LedgerEngine
from models import Transaction


class TestLedgerEngineLargeScale:
    def test_many_clients_from_csv(self, tmp_path):
        """1000 clients, each with three deposits and two withdrawals, interleaved."""
        num_clients = 1000
        amounts = [("deposit", 100), ("deposit", 200), ("withdrawal", 50), ("deposit", 300), ("withdrawal", 100)]
        rows = ["type, client, tx, amount"]
        tx_id = 1

        # round-robin over clients so every client's records are spread across the file
        for kind, amount in amounts:
            for client_id in range(1, num_clients + 1):
                rows.append(f"{kind}, {client_id}, {tx_id}, {amount}")
                tx_id += 1

        csv_file = tmp_path / "large_test.csv"
        csv_file.write_text('\n'.join(rows))

        engine = process_file(str(csv_file))
        accounts = dict(engine.all_summaries())

        assert len(accounts) == num_clients
        assert engine.stats.applied == num_clients * len(amounts)
        assert engine.stats.ignored == 0
        for client_id, summary in accounts.items():
            assert summary.available == Decimal("450"), f"Client {client_id}"
            assert summary.held == Decimal("0")
            assert summary.locked is False

    def test_dispute_lifecycles_by_client_group(self):
        engine = LedgerEngine()

        def tx(client_id, n):
            return client_id * 100 + n

        for client_id in range(1, 41):
            engine.apply(Transaction.deposit(client_id, tx(client_id, 1), Decimal("100")))
            engine.apply(Transaction.deposit(client_id, tx(client_id, 2), Decimal("150")))
            engine.apply(Transaction.withdrawal(client_id, tx(client_id, 3), Decimal("50")))

        # 1-10 untouched, 11-20 resolved, 21-30 charged back, 31-40 left open
        for client_id in range(11, 41):
            engine.apply(Transaction.dispute(client_id, tx(client_id, 1)))
        for client_id in range(11, 21):
            engine.apply(Transaction.resolve(client_id, tx(client_id, 1)))
        for client_id in range(21, 31):
            engine.apply(Transaction.chargeback(client_id, tx(client_id, 1)))
            engine.apply(Transaction.deposit(client_id, tx(client_id, 4), Decimal("1000")))

        for client_id in range(1, 21):
            summary = engine.account_summary(client_id)
            assert (summary.available, summary.held, summary.locked) == (Decimal("200"), Decimal("0"), False)

        for client_id in range(21, 31):
            summary = engine.account_summary(client_id)
            assert (summary.available, summary.held, summary.total, summary.locked) == (
                Decimal("100"), Decimal("0"), Decimal("100"), True,
            )

        for client_id in range(31, 41):
            summary = engine.account_summary(client_id)
            assert (summary.available, summary.held, summary.total) == (Decimal("100"), Decimal("100"), Decimal("200"))

    def test_random_deposits_and_withdrawals_conserve_total(self):
        rng = random.Random(1234)
        engine = LedgerEngine()
        expected = {}

        for tx_id in range(1, 5001):
            client_id = rng.randint(1, 50)
            amount = Decimal(rng.randint(0, 100000)) / Decimal("10000")
            balance = expected.setdefault(client_id, Decimal("0"))
            if rng.random() < 0.6:
                engine.apply(Transaction.deposit(client_id, tx_id, amount))
                expected[client_id] = balance + amount
            else:
                engine.apply(Transaction.withdrawal(client_id, tx_id, amount))
                if amount <= balance:
                    expected[client_id] = balance - amount

        summaries = dict(engine.all_summaries())
        assert summaries.keys() == expected.keys()
        for client_id, total in expected.items():
            assert summaries[client_id].total == total
            assert summaries[client_id].available >= 0
