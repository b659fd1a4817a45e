"""贷款指标计算：已收、余额、状态、利润

派生字段只由这里写入，看板、导出等处一律读取结果，不自行计算。
"""
from dataclasses import fields
from typing import Dict, Iterable, List

from config.constants import LoanStatus
from data_manager.schema import Collection, Loan, LoanInput


def collected_for(loan_id: str, collections: Iterable[Collection]) -> float:
    """某笔贷款的累计收款"""
    return sum(c.amount_paid for c in collections if c.loan_id == loan_id)


def loan_status(balance: float, is_disabled: bool) -> LoanStatus:
    if is_disabled:
        return LoanStatus.DISABLED
    return LoanStatus.COMPLETED if balance <= 0 else LoanStatus.ONGOING


def calc_profit(deduction: float, collected: float, net_given: float) -> float:
    """利润 = 预扣费用 + 超出实际放款部分的收款"""
    return deduction + max(0.0, collected - net_given)


def derive_loan(loan_input: LoanInput, collections: Iterable[Collection]) -> Loan:
    """由录入字段和全部收款记录计算派生字段，纯函数"""
    base = {f.name: getattr(loan_input, f.name) for f in fields(LoanInput)}

    total_to_receive = loan_input.loan_amount
    collected = collected_for(loan_input.id, collections)
    balance = max(0.0, total_to_receive - collected)

    return Loan(
        **base,
        total_to_receive=total_to_receive,
        collected=collected,
        balance=balance,
        status=loan_status(balance, loan_input.is_disabled),
        profit=calc_profit(loan_input.deduction, collected, loan_input.net_given),
    )


def derive_loans(loan_inputs: Iterable[LoanInput], collections: Iterable[Collection]) -> List[Loan]:
    """批量计算，收款按 loan_id 只汇总一遍"""
    collections = list(collections)
    by_loan: Dict[str, List[Collection]] = {}
    for c in collections:
        by_loan.setdefault(c.loan_id, []).append(c)
    return [derive_loan(li, by_loan.get(li.id, [])) for li in loan_inputs]


def loan_cash_flow(loan: Loan, collections: Iterable[Collection]) -> dict:
    """单笔贷款的现金流（客户对账单）"""
    loan_collections = sorted(
        (c for c in collections if c.loan_id == loan.id),
        key=lambda c: c.date,
    )
    total_inflow = sum(c.amount_paid for c in loan_collections)
    total_outflow = loan.net_given
    return {
        "loan": loan,
        "collections": loan_collections,
        "total_inflow": total_inflow,
        "total_outflow": total_outflow,
        "net_flow": total_inflow - total_outflow,
        "profit": loan.profit,
    }
