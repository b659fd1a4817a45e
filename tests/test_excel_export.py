"""报表导出测试"""
from datetime import date

import pandas as pd

from core.ledger import build_ledger, recompute_fund_balances
from core.loan_metrics import derive_loans
from data_manager.excel_export import (
    build_export_frames, default_export_name, export_workbook, generate_collection_statement,
)


def _dataset(make_loan, make_collection, make_fund):
    inputs = [make_loan()]
    collections = [make_collection(amount_paid=100)]
    funds = recompute_fund_balances([make_fund()])
    return derive_loans(inputs, collections), collections, funds, build_ledger(funds, inputs, collections)


class TestExport:
    def test_default_name(self):
        assert default_export_name(date(2024, 5, 1)) == "Financial_Dashboard_2024-05-01.xlsx"

    def test_frames_use_report_headers(self, make_loan, make_collection, make_fund):
        frames = build_export_frames(*_dataset(make_loan, make_collection, make_fund))
        assert list(frames) == ["Loan Summary", "Daily Collections", "Fund Tracker", "Ledger"]
        loans = frames["Loan Summary"]
        assert loans.columns[0] == "Loan ID"
        assert loans.iloc[0]["Balance"] == 9900
        assert loans.iloc[0]["Status"] == "Ongoing"
        assert frames["Daily Collections"].iloc[0]["Amount Paid"] == 100
        assert frames["Ledger"]["Type"].tolist() == ["opening", "loan", "collection"]

    def test_workbook(self, tmp_path, make_loan, make_collection, make_fund):
        path = export_workbook(*_dataset(make_loan, make_collection, make_fund), tmp_path / "out" / "report.xlsx")
        assert path.exists()
        xls = pd.ExcelFile(path, engine="openpyxl")
        assert xls.sheet_names == ["Loan Summary", "Daily Collections", "Fund Tracker", "Ledger"]

    def test_empty_export(self):
        frames = build_export_frames([], [], [], [])
        assert all(df.empty for df in frames.values())
        assert "Customer Name" in frames["Loan Summary"].columns


class TestStatement:
    def test_hundred_days(self, make_loan):
        loan = derive_loans([make_loan()], [])[0]
        df = generate_collection_statement(loan, date(2024, 1, 1))
        assert len(df) == 100
        assert df.iloc[0]["date"] == "2024-01-01"
        assert df.iloc[-1]["date"] == "2024-04-09"
        assert df.iloc[-1]["day"] == 100
        assert set(df["amount_due"]) == {100}
        assert set(df["status"]) == {"Pending"}

    def test_custom_length(self, make_loan):
        loan = derive_loans([make_loan()], [])[0]
        assert len(generate_collection_statement(loan, date(2024, 1, 1), days=7)) == 7
