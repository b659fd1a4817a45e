"""边界层：录入数据的解析、补默认值与校验

核心计算假定所有字段类型完整、数值非空，所有外部数据必须先经过这里。
"""
import math
from typing import Mapping, Optional, Tuple

from config.constants import INITIAL_BALANCE_DESCRIPTION
from data_manager.schema import Collection, Fund, LoanInput
from utils.date_utils import parse_date_or_today
from utils.id_generator import generate_collection_id, generate_fund_id


def _to_float(value, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        result = float(value)
    except (ValueError, TypeError):
        return default
    if math.isnan(result):
        return default
    return result


def _to_int(value, default: int = 0) -> int:
    return int(_to_float(value, float(default)))


def _to_str(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


# ---- 解析 / 补默认值 ----

def normalize_loan(raw: Mapping) -> LoanInput:
    """把表单/表格中的一行贷款数据转为 LoanInput，未给出 net_given 时按 loan_amount - deduction 计算"""
    loan_amount = _to_float(raw.get("loan_amount"))
    deduction = _to_float(raw.get("deduction"))
    net_given_raw = raw.get("net_given")
    net_given = _to_float(net_given_raw, loan_amount - deduction)
    return LoanInput(
        id=_to_str(raw.get("id")),
        customer_name=_to_str(raw.get("customer_name")),
        date=parse_date_or_today(raw.get("date")),
        loan_amount=loan_amount,
        deduction=deduction,
        net_given=net_given,
        daily_pay=_to_float(raw.get("daily_pay")),
        days=_to_int(raw.get("days")),
        is_disabled=_to_bool(raw.get("is_disabled", False)),
    )


def normalize_collection(raw: Mapping, customer_default: str = "") -> Collection:
    return Collection(
        id=_to_str(raw.get("id")) or generate_collection_id(),
        date=parse_date_or_today(raw.get("date")),
        loan_id=_to_str(raw.get("loan_id")),
        customer=_to_str(raw.get("customer")) or customer_default,
        amount_paid=_to_float(raw.get("amount_paid")),
        collected_by=_to_str(raw.get("collected_by")),
        remarks=_to_str(raw.get("remarks")),
    )


def normalize_fund(raw: Mapping) -> Fund:
    """balance 一律置 0，由资金流水重算"""
    return Fund(
        id=_to_str(raw.get("id")) or generate_fund_id(),
        date=parse_date_or_today(raw.get("date")),
        description=_to_str(raw.get("description")),
        inflow=_to_float(raw.get("inflow")),
        outflow=_to_float(raw.get("outflow")),
        balance=0.0,
    )


# ---- 校验 ----

def validate_loan(loan: LoanInput) -> Tuple[bool, str, str]:
    """校验贷款，返回 (是否合法, 出错字段, 错误信息)"""
    if not loan.id:
        return False, "id", "贷款编号不能为空"

    if not loan.customer_name:
        return False, "customer_name", "客户姓名不能为空"

    for name in ("loan_amount", "deduction", "net_given", "daily_pay"):
        if getattr(loan, name) < 0:
            return False, name, f"{name} 不能为负数"

    if loan.days < 0:
        return False, "days", "期限天数不能为负数"

    return True, "", ""


def validate_collection(collection: Collection) -> Tuple[bool, str, str]:
    if not collection.loan_id:
        return False, "loan_id", "必须选择贷款"

    if collection.amount_paid <= 0:
        return False, "amount_paid", "收款金额必须大于0"

    return True, "", ""


def validate_fund(fund: Fund) -> Tuple[bool, str, str]:
    if not fund.description:
        return False, "description", "摘要不能为空"

    if fund.inflow < 0:
        return False, "inflow", "流入金额不能为负数"

    if fund.outflow < 0:
        return False, "outflow", "流出金额不能为负数"

    if fund.inflow == 0 and fund.outflow == 0:
        return False, "inflow", "流入与流出至少填写一项"

    return True, "", ""


def validate_custom_amount(amount: Optional[float], balance: float) -> Tuple[bool, str]:
    """校验自定义收款金额"""
    if amount is None or amount <= 0:
        return False, "收款金额必须大于0"

    if amount > balance:
        return False, f"收款金额不能超过剩余余额 {balance:,.2f}"

    return True, ""


def is_initial_balance(fund: Fund) -> bool:
    return fund.description == INITIAL_BALANCE_DESCRIPTION
