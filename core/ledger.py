"""
统一资金流水

把手工资金记录、放款、按日汇总的收款合并成一张按时间排序的流水表，并计算滚动余额。
手工记录（含期初余额）的余额是权威值：遇到时滚动余额直接重置为该记录录入时的余额；
放款和收款在其基础上累加。
"""
from datetime import date
from typing import Dict, Iterable, List

import pandas as pd

from config.constants import LedgerRowType, LEDGER_COLUMNS, INITIAL_BALANCE_DESCRIPTION
from data_manager.schema import Collection, Fund, LedgerRow, LoanInput
from utils.date_utils import fmt_iso, parse_date_or_today


def recompute_fund_balances(funds: Iterable[Fund]) -> List[Fund]:
    """资金记录按日期排序后重算各自余额（仅资金记录之间的滚动余额）"""
    ordered = sorted(funds, key=lambda f: parse_date_or_today(f.date))
    running = 0.0
    for fund in ordered:
        running += fund.inflow - fund.outflow
        fund.balance = running
    return ordered


def _fund_rows(funds: List[Fund]) -> List[LedgerRow]:
    rows = []
    opening_seen = False
    # 重复的期初余额只认最早的一条，其余按手工记录处理
    for fund in sorted(funds, key=lambda f: parse_date_or_today(f.date)):
        d = parse_date_or_today(fund.date)
        if fund.description == INITIAL_BALANCE_DESCRIPTION and not opening_seen:
            row_type = LedgerRowType.OPENING
            opening_seen = True
        else:
            row_type = LedgerRowType.MANUAL
        rows.append(LedgerRow(
            id=fund.id,
            date=fmt_iso(d),
            sort_key=(d, row_type.priority),
            description=fund.description,
            inflow=fund.inflow,
            outflow=fund.outflow,
            balance=fund.balance,
            type=row_type,
        ))
    return rows


def _loan_rows(loans: Iterable[LoanInput]) -> List[LedgerRow]:
    rows = []
    for loan in loans:
        if loan.is_disabled:
            continue
        d = parse_date_or_today(loan.date)
        rows.append(LedgerRow(
            id=f"loan-{loan.id}",
            date=fmt_iso(d),
            sort_key=(d, LedgerRowType.LOAN.priority),
            description=f"Loan to {loan.customer_name}",
            inflow=0.0,
            outflow=loan.net_given,
            balance=0.0,
            type=LedgerRowType.LOAN,
        ))
    return rows


def _collection_rows(collections: Iterable[Collection]) -> List[LedgerRow]:
    by_date: Dict[date, List[Collection]] = {}
    for c in collections:
        by_date.setdefault(parse_date_or_today(c.date), []).append(c)

    rows = []
    for d in sorted(by_date):
        day_collections = by_date[d]
        total_amount = sum(c.amount_paid for c in day_collections)
        if total_amount <= 0:
            continue
        rows.append(LedgerRow(
            id=f"collection-{fmt_iso(d)}",
            date=fmt_iso(d),
            sort_key=(d, LedgerRowType.COLLECTION.priority),
            description=f"Daily collections ({len(day_collections)} payments)",
            inflow=total_amount,
            outflow=0.0,
            balance=0.0,
            type=LedgerRowType.COLLECTION,
        ))
    return rows


def build_ledger(
    funds: Iterable[Fund],
    loans: Iterable[LoanInput],
    collections: Iterable[Collection],
) -> List[LedgerRow]:
    """生成统一流水表，每次调用返回新的列表"""
    rows = _fund_rows(list(funds)) + _loan_rows(loans) + _collection_rows(collections)

    # 排序键为 (日期, 层级)，同键保持原有顺序
    rows.sort(key=lambda r: r.sort_key)

    running = 0.0
    for row in rows:
        if row.type.is_checkpoint:
            running = row.balance
        else:
            running += row.inflow - row.outflow
            row.balance = running
    return rows


def summarize_ledger(rows: List[LedgerRow]) -> dict:
    return {
        "current_balance": rows[-1].balance if rows else 0.0,
        "total_inflow": sum(r.inflow for r in rows),
        "total_outflow": sum(r.outflow for r in rows),
        "negative_balance_rows": sum(1 for r in rows if r.balance < 0),
        "row_count": len(rows),
    }


def ledger_to_frame(rows: List[LedgerRow]) -> pd.DataFrame:
    return pd.DataFrame([r.to_dict() for r in rows], columns=LEDGER_COLUMNS)
