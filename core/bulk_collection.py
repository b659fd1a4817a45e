"""整笔收款：结清剩余余额或按自定义金额收款

只生成一条收款记录，不直接改动贷款；余额变化完全由重新计算得到。
"""
from datetime import date
from typing import Optional

from config.constants import BulkMode
from config.settings import DEFAULT_COLLECTOR, DEFAULT_STATEMENT_DAYS
from core.exceptions import InvalidStateError, ValidationError
from data_manager.data_validator import validate_custom_amount
from data_manager.schema import Collection, Loan
from utils.formatters import fmt_money
from utils.id_generator import generate_bulk_collection_id, generate_custom_collection_id


def resolve_bulk_collection(
    loan: Loan,
    mode: str,
    custom_amount: Optional[float] = None,
    collected_by: Optional[str] = None,
    remarks: Optional[str] = None,
    today: Optional[date] = None,
) -> Collection:
    """根据模式生成收款记录

    Args:
        loan: 已计算派生字段的贷款
        mode: "full" 结清余额 / "custom" 自定义金额
        custom_amount: 自定义模式下的金额
        collected_by: 收款人，缺省为 DEFAULT_COLLECTOR
        remarks: 备注，缺省按模式生成
        today: 收款日期，缺省为今天

    Raises:
        ValidationError: 模式无效，或自定义金额 <= 0 / 超过余额
        InvalidStateError: 结清模式下余额已为 0
    """
    try:
        bulk_mode = BulkMode(mode)
    except ValueError:
        raise ValidationError("mode", f"无效的收款方式: {mode}")

    if bulk_mode == BulkMode.FULL:
        if loan.balance <= 0:
            raise InvalidStateError(f"贷款 {loan.id} 余额为 0，无需收款")
        amount = loan.balance
        collection_id = generate_bulk_collection_id()
        default_remarks = f"{DEFAULT_STATEMENT_DAYS} days bulk collection"
    else:
        ok, msg = validate_custom_amount(custom_amount, loan.balance)
        if not ok:
            raise ValidationError("custom_amount", msg)
        amount = float(custom_amount)
        collection_id = generate_custom_collection_id()
        default_remarks = f"Custom collection of {fmt_money(amount)}"

    return Collection(
        id=collection_id,
        date=today or date.today(),
        loan_id=loan.id,
        customer=loan.customer_name,
        amount_paid=amount,
        collected_by=collected_by or DEFAULT_COLLECTOR,
        remarks=remarks or default_remarks,
    )
