"""Excel 数据层测试"""
import pytest
import pandas as pd

from data_manager.excel_handler import (
    init_excel, read_sheet, write_sheet, backup_excel,
    write_loans, read_loan_rows, write_funds, read_fund_rows,
    get_config, set_config, get_all_config, get_int_config, check_schema_version,
)
from config.constants import (
    SHEET_LOANS, SHEET_COLLECTIONS, SHEET_FUNDS, SHEET_CONFIG, SCHEMA_VERSION, FUND_COLUMNS,
)
from data_manager.data_validator import normalize_fund


@pytest.fixture
def temp_excel(tmp_path):
    """创建临时 Excel 文件"""
    filepath = tmp_path / "test_data.xlsx"
    init_excel(filepath)
    return filepath


class TestInitExcel:
    def test_creates_file(self, temp_excel):
        assert temp_excel.exists()

    def test_has_all_sheets(self, temp_excel):
        xls = pd.ExcelFile(temp_excel, engine="openpyxl")
        assert SHEET_LOANS in xls.sheet_names
        assert SHEET_COLLECTIONS in xls.sheet_names
        assert SHEET_FUNDS in xls.sheet_names
        assert SHEET_CONFIG in xls.sheet_names

    def test_default_config(self, temp_excel):
        assert get_int_config("near_closing_days", 0, temp_excel) == 10
        assert get_int_config("payment_delay_days", 0, temp_excel) == 3
        assert get_config("default_collector", temp_excel) == "System"

    def test_existing_file_untouched(self, temp_excel):
        set_config("default_collector", "前台", filepath=temp_excel)
        init_excel(temp_excel)
        assert get_config("default_collector", temp_excel) == "前台"


class TestRecords:
    def test_loans_round_trip(self, temp_excel, make_loan):
        write_loans([make_loan(), make_loan(id="L2", is_disabled=True)], temp_excel)
        rows = read_loan_rows(temp_excel)
        assert [r["id"] for r in rows] == ["L1", "L2"]
        assert rows[0]["date"] == "2024-01-01"
        assert bool(rows[1]["is_disabled"]) is True

    def test_missing_cells_become_none(self, temp_excel):
        df = pd.DataFrame(
            [{"id": "f1", "date": "2024-01-01", "description": "Capital", "inflow": 100}],
            columns=FUND_COLUMNS,
        )
        write_sheet(df, SHEET_FUNDS, temp_excel)
        rows = read_fund_rows(temp_excel)
        assert rows[0]["outflow"] is None
        assert normalize_fund(rows[0]).outflow == 0.0

    def test_write_keeps_other_sheets(self, temp_excel, make_fund):
        write_funds([make_fund()], temp_excel)
        assert not read_sheet(SHEET_CONFIG, temp_excel).empty
        assert read_sheet(SHEET_FUNDS, temp_excel).iloc[0]["inflow"] == 50000

    def test_empty_sheet(self, temp_excel):
        assert read_loan_rows(temp_excel) == []


class TestConfig:
    def test_set_and_get(self, temp_excel):
        set_config("near_closing_days", "7", filepath=temp_excel)
        assert get_int_config("near_closing_days", 10, temp_excel) == 7

    def test_new_key(self, temp_excel):
        set_config("custom_key", "abc", "自定义", temp_excel)
        assert get_config("custom_key", temp_excel) == "abc"
        assert "custom_key" in get_all_config(temp_excel)["key"].values

    def test_missing_and_malformed(self, temp_excel):
        assert get_config("nope", temp_excel) is None
        set_config("near_closing_days", "abc", filepath=temp_excel)
        assert get_int_config("near_closing_days", 10, temp_excel) == 10

    def test_schema_version(self, temp_excel):
        assert check_schema_version(temp_excel) == SCHEMA_VERSION


class TestBackup:
    def test_keeps_recent_backups(self, temp_excel):
        for _ in range(8):
            backup_excel(temp_excel)
        backups = list(temp_excel.parent.glob("test_data.xlsx.bak_*"))
        assert len(backups) == 5
