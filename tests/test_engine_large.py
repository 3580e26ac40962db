import sys
import os
import io
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from payments_engine import PaymentsEngine
from snapshot_sink import write_snapshot


class TestPaymentsEngineLargeScale:
    def test_1000_accounts_6000_transactions(self, tmp_path):
        num_clients = 1000
        rows = ["type, client, tx, amount"]
        tx_id = 1

        # Each client: deposits of 100, 200, 300 and withdrawals of 50, 100, then one more deposit of 50
        for client_id in range(1, num_clients + 1):
            for kind, amount in (("deposit", "100"), ("deposit", "200"), ("deposit", "300"),
                                 ("withdrawal", "50"), ("withdrawal", "100")):
                rows.append(f"{kind}, {client_id}, {tx_id}, {amount}")
                tx_id += 1
        for client_id in range(1, num_clients + 1):
            rows.append(f"deposit, {client_id}, {tx_id}, 50")
            tx_id += 1

        csv_file = tmp_path / "large_test.csv"
        csv_file.write_text('\n'.join(rows))

        engine = PaymentsEngine()
        accounts = engine.process_file(str(csv_file))

        assert len(accounts) == num_clients
        assert engine.stats.applied == 6 * num_clients
        assert engine.rejections == []

        for client_id in range(1, num_clients + 1):
            assert accounts[client_id].available == Decimal("500"), \
                f"Client {client_id}: expected 500, got {accounts[client_id].available}"
            assert accounts[client_id].held == Decimal("0")
            assert accounts[client_id].locked is False

    def test_with_disputes_resolves_chargebacks(self, tmp_path):
        rows = ["type, client, tx, amount"]

        def deposits(client_id, *amounts):
            for offset, amount in enumerate(amounts, start=1):
                rows.append(f"deposit, {client_id}, {client_id * 100 + offset}, {amount}")

        # Clients 1-10: deposits only
        for client_id in range(1, 11):
            deposits(client_id, "100", "150", "250")

        # Clients 11-20: dispute then resolve the first deposit
        for client_id in range(11, 21):
            deposits(client_id, "100", "150", "250")
        for client_id in range(11, 21):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 1},")
        for client_id in range(11, 21):
            rows.append(f"resolve, {client_id}, {client_id * 100 + 1},")

        # Clients 21-30: dispute and charge back the first deposit, then try to deposit again
        for client_id in range(21, 31):
            deposits(client_id, "100", "150", "250")
        for client_id in range(21, 31):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 1},")
        for client_id in range(21, 31):
            rows.append(f"chargeback, {client_id}, {client_id * 100 + 1},")
        for client_id in range(21, 31):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 9}, 1000")

        # Clients 31-40: withdrawal, then the withdrawal itself is disputed
        for client_id in range(31, 41):
            deposits(client_id, "150", "250")
            rows.append(f"withdrawal, {client_id}, {client_id * 100 + 3}, 100")
        for client_id in range(31, 41):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 3},")

        # Clients 41-50: dispute another client's deposit (rejected), then resolve an undisputed one (rejected)
        for client_id in range(41, 51):
            deposits(client_id, "100", "200", "300")
        for client_id in range(41, 51):
            rows.append(f"dispute, {client_id}, {(client_id - 40) * 100 + 1},")
            rows.append(f"resolve, {client_id}, {client_id * 100 + 2},")

        csv_file = tmp_path / "disputes_test.csv"
        csv_file.write_text('\n'.join(rows))

        engine = PaymentsEngine()
        accounts = engine.process_file(str(csv_file))

        for account in accounts.values():
            assert account.total == account.available + account.held

        for client_id in range(1, 21):
            assert accounts[client_id].available == Decimal("500"), f"Client {client_id}"
            assert accounts[client_id].held == Decimal("0")
            assert accounts[client_id].locked is False

        for client_id in range(21, 31):
            assert accounts[client_id].available == Decimal("400"), f"Client {client_id}"
            assert accounts[client_id].held == Decimal("0")
            assert accounts[client_id].total == Decimal("400")
            assert accounts[client_id].locked is True

        # 400 - 100 withdrawn, then the 100 withdrawal is held
        for client_id in range(31, 41):
            assert accounts[client_id].available == Decimal("200"), f"Client {client_id}"
            assert accounts[client_id].held == Decimal("100")
            assert accounts[client_id].total == Decimal("300")
            assert accounts[client_id].locked is False

        for client_id in range(41, 51):
            assert accounts[client_id].available == Decimal("600"), f"Client {client_id}"
            assert accounts[client_id].held == Decimal("0")

        # 10 locked deposits + 10 client mismatches + 10 resolves without dispute
        assert engine.stats.rejected == 30

        output = io.StringIO()
        write_snapshot(engine.snapshot(), output)
        lines = output.getvalue().splitlines()
        assert lines[0] == "client,available,held,total,locked"
        assert len(lines) == 51
        assert lines[21] == "21,400,0,400,true"
        assert lines[31] == "31,200,100,300,false"
