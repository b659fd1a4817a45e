"""整笔收款测试"""
from datetime import date

import pytest

from config.constants import LoanStatus
from core.bulk_collection import resolve_bulk_collection
from core.exceptions import InvalidStateError, ValidationError
from core.loan_metrics import derive_loan


@pytest.fixture
def open_loan(make_loan, make_collection):
    """余额 3000 的在还贷款"""
    return derive_loan(make_loan(), [make_collection(amount_paid=7000)])


class TestFullMode:
    def test_collects_balance(self, open_loan, make_loan, make_collection):
        collection = resolve_bulk_collection(open_loan, "full", today=date(2024, 2, 1))
        assert collection.amount_paid == 3000
        assert collection.loan_id == "L1"
        assert collection.customer == "张三"
        assert collection.date == date(2024, 2, 1)
        assert collection.id.startswith("bulk-")
        assert collection.remarks == "100 days bulk collection"
        assert collection.collected_by == "System"

        after = derive_loan(make_loan(), [make_collection(amount_paid=7000), collection])
        assert after.balance == 0
        assert after.status == LoanStatus.COMPLETED

    def test_zero_balance_rejected(self, make_loan, make_collection):
        loan = derive_loan(make_loan(), [make_collection(amount_paid=10000)])
        with pytest.raises(InvalidStateError):
            resolve_bulk_collection(loan, "full")

    def test_custom_remarks_and_collector(self, open_loan):
        collection = resolve_bulk_collection(open_loan, "full", collected_by="王五", remarks="结清")
        assert collection.collected_by == "王五"
        assert collection.remarks == "结清"


class TestCustomMode:
    def test_custom_amount(self, open_loan):
        collection = resolve_bulk_collection(open_loan, "custom", custom_amount=1200)
        assert collection.amount_paid == 1200
        assert collection.id.startswith("custom-")
        assert collection.remarks == "Custom collection of 1,200.00"

    def test_exceeds_balance(self, open_loan):
        with pytest.raises(ValidationError) as exc:
            resolve_bulk_collection(open_loan, "custom", custom_amount=5000)
        assert exc.value.field == "custom_amount"
        assert open_loan.balance == 3000

    @pytest.mark.parametrize("amount", [None, 0, -10])
    def test_non_positive(self, open_loan, amount):
        with pytest.raises(ValidationError):
            resolve_bulk_collection(open_loan, "custom", custom_amount=amount)

    def test_exact_balance_allowed(self, open_loan):
        assert resolve_bulk_collection(open_loan, "custom", custom_amount=3000).amount_paid == 3000


def test_invalid_mode(open_loan):
    with pytest.raises(ValidationError) as exc:
        resolve_bulk_collection(open_loan, "half")
    assert exc.value.field == "mode"
