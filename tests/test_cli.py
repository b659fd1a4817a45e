"""命令行测试"""
import pytest
from click.testing import CliRunner

from cli import cli


@pytest.fixture
def data_file(tmp_path):
    return str(tmp_path / "ledger.xlsx")


def invoke(*args):
    return CliRunner().invoke(cli, ["--log-level", "WARNING", *args])


def _seed(data_file):
    invoke("set-initial-balance", "--data-file", data_file, "--amount", "50000", "--date", "2024-01-01")
    invoke("add-loan", "--data-file", data_file, "--loan-id", "L1", "--customer-name", "张三",
           "--date", "2024-01-01", "--loan-amount", "10000", "--deduction", "500",
           "--daily-pay", "100", "--days", "100")


class TestCli:
    def test_add_and_list(self, data_file):
        _seed(data_file)
        result = invoke("list-loans", "--data-file", data_file)
        assert result.exit_code == 0
        assert "L1" in result.output
        assert "Ongoing" in result.output

    def test_ledger_csv(self, data_file):
        _seed(data_file)
        result = invoke("ledger", "--data-file", data_file, "--csv")
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].startswith("id,date,description")
        assert lines[-1].endswith("40500.0,loan")

    def test_bulk_collect(self, data_file):
        _seed(data_file)
        result = invoke("bulk-collect", "--data-file", data_file, "--loan-id", "L1")
        assert result.exit_code == 0
        assert "Completed" in result.output

    def test_rejected_write_exits_nonzero(self, data_file):
        _seed(data_file)
        result = invoke("bulk-collect", "--data-file", data_file, "--loan-id", "L1",
                        "--mode", "custom", "--amount", "50000")
        assert result.exit_code == 1

    def test_duplicate_initial_balance(self, data_file):
        _seed(data_file)
        result = invoke("set-initial-balance", "--data-file", data_file, "--amount", "1")
        assert result.exit_code == 1

    def test_delete_cascades(self, data_file):
        _seed(data_file)
        invoke("add-collection", "--data-file", data_file, "--loan-id", "L1", "--amount", "100")
        result = invoke("delete-loan", "--data-file", data_file, "--loan-id", "L1")
        assert result.exit_code == 0
        assert "1 collection(s)" in result.output

    def test_report(self, data_file):
        _seed(data_file)
        result = invoke("report", "--data-file", data_file, "--as-of", "2024-01-10")
        assert result.exit_code == 0
        assert "cash_in_hand" in result.output
        assert "Payment delayed: L1" in result.output

    def test_statement_unknown_loan(self, data_file):
        result = invoke("statement", "--data-file", data_file, "--loan-id", "nope")
        assert result.exit_code == 1

    def test_export(self, data_file, tmp_path):
        _seed(data_file)
        out = tmp_path / "report.xlsx"
        result = invoke("export", "--data-file", data_file, "--output", str(out))
        assert result.exit_code == 0
        assert out.exists()

    @pytest.mark.parametrize("args", [
        ("report", "--as-of", "2024-13-45"),
        ("set-initial-balance", "--amount", "100", "--date", "yesterday"),
        ("statement", "--loan-id", "L1", "--start-date", "01/02/2024"),
    ])
    def test_malformed_date_is_usage_error(self, data_file, args):
        result = invoke(args[0], "--data-file", data_file, *args[1:])
        assert result.exit_code == 2
        assert "%Y-%m-%d" in result.output
