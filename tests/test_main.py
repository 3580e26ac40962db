import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import main


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    monkeypatch.delenv("PAYMENTS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PAYMENTS_DISPUTABLE_TYPES", raising=False)


class TestMain:
    def test_prints_snapshot(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 2, 1, 2.0",
            "deposit, 1, 2, 1.0",
            "deposit, 1, 3, 2.0",
            "withdrawal, 1, 4, 1.5",
            "withdrawal, 2, 5, 3.0",
        ]))

        exit_code = main.main([str(csv_file)])

        assert exit_code == 0
        assert capsys.readouterr().out == (
            "client,available,held,total,locked\n"
            "1,1.5,0,1.5,false\n"
            "2,2,0,2,false\n"
        )

    def test_deposit_disputes_only_flag(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 10",
            "withdrawal, 1, 2, 4",
            "dispute, 1, 2,",
        ]))

        exit_code = main.main(["--deposit-disputes-only", str(csv_file)])

        assert exit_code == 0
        assert capsys.readouterr().out.splitlines()[1] == "1,6,0,6,false"

    def test_large_balances_are_printed(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 1000000000000000000000000",
            "deposit, 2, 2, 12345678901234567890123.456789",
        ]))

        exit_code = main.main([str(csv_file)])

        assert exit_code == 0
        assert capsys.readouterr().out == (
            "client,available,held,total,locked\n"
            "1,1000000000000000000000000,0,1000000000000000000000000,false\n"
            "2,12345678901234567890123.4568,0,12345678901234567890123.4568,false\n"
        )

    def test_missing_file(self, tmp_path, capsys):
        exit_code = main.main([str(tmp_path / "missing.csv")])

        assert exit_code == 1
        assert capsys.readouterr().out == ""

    def test_invalid_log_level(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text("type, client, tx, amount\n")

        exit_code = main.main(["--log-level", "chatty", str(csv_file)])

        assert exit_code == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_missing_argument(self):
        with pytest.raises(SystemExit) as exc_info:
            main.main([])
        assert exc_info.value.code == 2
