"""组合层面汇总指标与预警"""
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

import pandas as pd

from config.constants import LoanStatus, DERIVED_LOAN_COLUMNS
from config.settings import DEFAULT_NEAR_CLOSING_DAYS, DEFAULT_PAYMENT_DELAY_DAYS, RATE_PRECISION
from core.ledger import build_ledger, summarize_ledger
from data_manager.schema import Collection, Fund, Loan
from utils.date_utils import days_between, parse_date_or_today


@dataclass
class NearClosingLoan:
    loan: Loan
    remaining_amount: float
    remaining_days: int


@dataclass
class DelayedLoan:
    loan: Loan
    last_activity: date
    days_since_payment: int


@dataclass
class AggregateReport:
    as_of: date
    cash_in_hand: float
    total_invested: float
    total_loan_amount: float
    total_collections: float
    outstanding: float
    expected_profit: float
    recovery_rate: float
    profit_margin: float
    outstanding_ratio: float
    active_loans: int
    completed_loans: int
    disabled_loans: int
    collection_count: int
    negative_balance_rows: int
    near_closing: List[NearClosingLoan] = field(default_factory=list)
    payment_delayed: List[DelayedLoan] = field(default_factory=list)

    def to_dict(self) -> dict:
        """平铺为一行，用于表格/导出"""
        return {
            "as_of": self.as_of.isoformat(),
            "cash_in_hand": self.cash_in_hand,
            "total_invested": self.total_invested,
            "total_loan_amount": self.total_loan_amount,
            "total_collections": self.total_collections,
            "outstanding": self.outstanding,
            "expected_profit": self.expected_profit,
            "recovery_rate": self.recovery_rate,
            "profit_margin": self.profit_margin,
            "outstanding_ratio": self.outstanding_ratio,
            "active_loans": self.active_loans,
            "completed_loans": self.completed_loans,
            "disabled_loans": self.disabled_loans,
            "collection_count": self.collection_count,
            "negative_balance_rows": self.negative_balance_rows,
            "near_closing": len(self.near_closing),
            "payment_delayed": len(self.payment_delayed),
        }


def safe_rate(numerator: float, denominator: float) -> float:
    """百分比，分母为 0 时返回 0"""
    if denominator == 0:
        return 0.0
    return round(numerator / denominator * 100, RATE_PRECISION)


def remaining_days(loan: Loan) -> Optional[int]:
    """按日还款额估算剩余天数，日还款额为 0 时返回 None（视为无限）"""
    if loan.daily_pay <= 0:
        return None
    remaining = max(0.0, loan.loan_amount - loan.collected)
    return math.ceil(remaining / loan.daily_pay)


def find_near_closing(loans: Iterable[Loan], threshold_days: int = DEFAULT_NEAR_CLOSING_DAYS) -> List[NearClosingLoan]:
    result = []
    for loan in loans:
        if loan.status != LoanStatus.ONGOING:
            continue
        days = remaining_days(loan)
        if days is None or not 0 < days <= threshold_days:
            continue
        result.append(NearClosingLoan(
            loan=loan,
            remaining_amount=max(0.0, loan.loan_amount - loan.collected),
            remaining_days=days,
        ))
    return result


def find_payment_delayed(
    loans: Iterable[Loan],
    collections: Iterable[Collection],
    as_of: date,
    threshold_days: int = DEFAULT_PAYMENT_DELAY_DAYS,
) -> List[DelayedLoan]:
    """距最近一次收款（无收款则距放款日）已满 threshold_days 天的在还贷款"""
    latest: Dict[str, date] = {}
    for c in collections:
        d = parse_date_or_today(c.date)
        if c.loan_id not in latest or d > latest[c.loan_id]:
            latest[c.loan_id] = d

    result = []
    for loan in loans:
        if loan.status != LoanStatus.ONGOING:
            continue
        last_activity = parse_date_or_today(loan.date)
        if loan.id in latest and latest[loan.id] > last_activity:
            last_activity = latest[loan.id]
        elapsed = days_between(last_activity, as_of)
        if elapsed >= threshold_days:
            result.append(DelayedLoan(loan=loan, last_activity=last_activity, days_since_payment=elapsed))
    return result


def compute_aggregates(
    loans: Iterable[Loan],
    collections: Iterable[Collection],
    funds: Iterable[Fund],
    as_of: Optional[date] = None,
    near_closing_days: int = DEFAULT_NEAR_CLOSING_DAYS,
    payment_delay_days: int = DEFAULT_PAYMENT_DELAY_DAYS,
) -> AggregateReport:
    """汇总指标；现金余额统一取流水表最后一行的滚动余额"""
    loans = list(loans)
    collections = list(collections)
    funds = list(funds)
    as_of = as_of or date.today()

    ledger_summary = summarize_ledger(build_ledger(funds, loans, collections))

    total_invested = sum(l.net_given for l in loans)
    total_loan_amount = sum(l.total_to_receive for l in loans)
    total_collections = sum(c.amount_paid for c in collections)
    outstanding = sum(
        l.balance for l in loans
        if not l.is_disabled and l.status != LoanStatus.COMPLETED
    )
    expected_profit = sum(l.profit for l in loans)

    return AggregateReport(
        as_of=as_of,
        cash_in_hand=ledger_summary["current_balance"],
        total_invested=total_invested,
        total_loan_amount=total_loan_amount,
        total_collections=total_collections,
        outstanding=outstanding,
        expected_profit=expected_profit,
        recovery_rate=safe_rate(total_collections, total_invested),
        profit_margin=safe_rate(expected_profit, total_invested),
        outstanding_ratio=safe_rate(outstanding, total_loan_amount),
        active_loans=sum(1 for l in loans if l.status == LoanStatus.ONGOING),
        completed_loans=sum(1 for l in loans if l.status == LoanStatus.COMPLETED),
        disabled_loans=sum(1 for l in loans if l.status == LoanStatus.DISABLED),
        collection_count=len(collections),
        negative_balance_rows=ledger_summary["negative_balance_rows"],
        near_closing=find_near_closing(loans, near_closing_days),
        payment_delayed=find_payment_delayed(loans, collections, as_of, payment_delay_days),
    )


def loans_to_frame(loans: Iterable[Loan]) -> pd.DataFrame:
    return pd.DataFrame([l.to_dict() for l in loans], columns=DERIVED_LOAN_COLUMNS)
