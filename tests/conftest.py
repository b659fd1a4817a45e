import sys
import pytest
from datetime import date
from pathlib import Path

# 确保项目根目录在 sys.path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from data_manager.schema import Collection, Fund, LoanInput


@pytest.fixture
def make_loan():
    """按需覆盖字段的贷款录入数据"""
    def _make(**overrides):
        values = {
            "id": "L1",
            "customer_name": "张三",
            "date": date(2024, 1, 1),
            "loan_amount": 10000.0,
            "deduction": 500.0,
            "net_given": 9500.0,
            "daily_pay": 100.0,
            "days": 100,
            "is_disabled": False,
        }
        values.update(overrides)
        return LoanInput(**values)
    return _make


@pytest.fixture
def make_collection():
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "id": f"c{counter['n']}",
            "date": date(2024, 1, 2),
            "loan_id": "L1",
            "customer": "张三",
            "amount_paid": 100.0,
            "collected_by": "",
            "remarks": "",
        }
        values.update(overrides)
        return Collection(**values)
    return _make


@pytest.fixture
def make_fund():
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "id": f"f{counter['n']}",
            "date": date(2024, 1, 1),
            "description": "Initial Balance",
            "inflow": 50000.0,
            "outflow": 0.0,
            "balance": 0.0,
        }
        values.update(overrides)
        return Fund(**values)
    return _make
