"""报表导出：汇总工作簿与收款单"""
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from config.constants import (
    EXPORT_SHEET_LOANS, EXPORT_SHEET_COLLECTIONS, EXPORT_SHEET_FUNDS, EXPORT_SHEET_LEDGER,
    EXPORT_LOAN_HEADERS, EXPORT_COLLECTION_HEADERS, EXPORT_FUND_HEADERS, EXPORT_LEDGER_HEADERS,
    COLLECTION_COLUMNS, FUND_COLUMNS,
)
from config.settings import DEFAULT_STATEMENT_DAYS
from core.aggregates import loans_to_frame
from core.ledger import ledger_to_frame
from data_manager.schema import Collection, Fund, LedgerRow, Loan
from utils.logger import get_logger

logger = get_logger(__name__)


def default_export_name(today: Optional[date] = None) -> str:
    return f"Financial_Dashboard_{(today or date.today()).isoformat()}.xlsx"


def _select(df: pd.DataFrame, headers: dict) -> pd.DataFrame:
    return df[list(headers)].rename(columns=headers)


def build_export_frames(
    loans: Iterable[Loan],
    collections: Iterable[Collection],
    funds: Iterable[Fund],
    ledger: List[LedgerRow],
) -> dict:
    """各 Sheet 的 DataFrame，键为 Sheet 名"""
    loan_df = loans_to_frame(loans)
    collection_df = pd.DataFrame([c.to_dict() for c in collections], columns=COLLECTION_COLUMNS)
    fund_df = pd.DataFrame([f.to_dict() for f in funds], columns=FUND_COLUMNS)
    ledger_df = ledger_to_frame(ledger)

    return {
        EXPORT_SHEET_LOANS: _select(loan_df, EXPORT_LOAN_HEADERS),
        EXPORT_SHEET_COLLECTIONS: _select(collection_df, EXPORT_COLLECTION_HEADERS),
        EXPORT_SHEET_FUNDS: _select(fund_df, EXPORT_FUND_HEADERS),
        EXPORT_SHEET_LEDGER: _select(ledger_df, EXPORT_LEDGER_HEADERS),
    }


def export_workbook(
    loans: Iterable[Loan],
    collections: Iterable[Collection],
    funds: Iterable[Fund],
    ledger: List[LedgerRow],
    filepath: Path,
) -> Path:
    """导出全部数据到一个 Excel 文件"""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    frames = build_export_frames(loans, collections, funds, ledger)
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        for sheet_name, df in frames.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    logger.info("exported %s", filepath)
    return filepath


def generate_collection_statement(
    loan: Loan,
    start_date: Optional[date] = None,
    days: int = DEFAULT_STATEMENT_DAYS,
) -> pd.DataFrame:
    """N 天收款单：每天应收 daily_pay，状态均为待收"""
    start_date = start_date or date.today()
    records = [{
        "day": i + 1,
        "date": (start_date + timedelta(days=i)).isoformat(),
        "amount_due": loan.daily_pay,
        "status": "Pending",
    } for i in range(days)]
    return pd.DataFrame(records, columns=["day", "date", "amount_due", "status"])
