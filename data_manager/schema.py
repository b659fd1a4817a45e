from dataclasses import dataclass, field, fields, asdict
from datetime import date
from typing import Tuple

from config.constants import LoanStatus, LedgerRowType


@dataclass
class LoanInput:
    """贷款的录入字段（派生字段不在此处）"""
    id: str
    customer_name: str
    date: date
    loan_amount: float
    deduction: float
    net_given: float
    daily_pay: float
    days: int
    is_disabled: bool = False

    def to_dict(self) -> dict:
        d = asdict(self)
        d["date"] = self.date.isoformat()
        return d


@dataclass
class Loan(LoanInput):
    """带派生字段的贷款，派生字段每次读取时由收款记录重新计算"""
    total_to_receive: float = 0.0
    collected: float = 0.0
    balance: float = 0.0
    status: LoanStatus = LoanStatus.ONGOING
    profit: float = 0.0

    def to_input(self) -> LoanInput:
        return LoanInput(**{f.name: getattr(self, f.name) for f in fields(LoanInput)})

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["status"] = self.status.value
        return d


@dataclass
class Collection:
    id: str
    date: date
    loan_id: str
    customer: str
    amount_paid: float
    collected_by: str = ""
    remarks: str = ""

    def to_dict(self) -> dict:
        d = asdict(self)
        d["date"] = self.date.isoformat()
        return d


@dataclass
class Fund:
    """手工资金记录，balance 为录入时按日期排序后的资金流水余额"""
    id: str
    date: date
    description: str
    inflow: float = 0.0
    outflow: float = 0.0
    balance: float = 0.0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["date"] = self.date.isoformat()
        return d


@dataclass
class LedgerRow:
    id: str
    date: str
    sort_key: Tuple[date, int] = field(repr=False)
    description: str
    inflow: float
    outflow: float
    balance: float
    type: LedgerRowType

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "inflow": self.inflow,
            "outflow": self.outflow,
            "balance": self.balance,
            "type": self.type.value,
        }
