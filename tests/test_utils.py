"""工具函数测试"""
from datetime import date, datetime

import pandas as pd
import pytest

from utils.date_utils import days_between, fmt_iso, parse_date, parse_date_or_today
from utils.formatters import fmt_amount, fmt_days, fmt_money, fmt_rate


class TestParseDate:
    @pytest.mark.parametrize("value", [
        "2024-01-05", date(2024, 1, 5), datetime(2024, 1, 5, 13, 0), pd.Timestamp("2024-01-05"),
    ])
    def test_supported_types(self, value):
        assert parse_date(value) == date(2024, 1, 5)

    @pytest.mark.parametrize("value", [None, "", "   ", "garbage", float("nan"), pd.NaT])
    def test_unparseable(self, value):
        assert parse_date(value) is None

    def test_fallback_to_today(self):
        assert parse_date_or_today("garbage") == date.today()

    def test_helpers(self):
        assert fmt_iso(date(2024, 3, 9)) == "2024-03-09"
        assert days_between(date(2024, 2, 28), date(2024, 3, 1)) == 2


class TestFormatters:
    def test_amount_units(self):
        assert fmt_amount(1234.5) == "1,234.50 元"
        assert fmt_amount(25000) == "2.50 万元"
        assert fmt_amount(-300000000) == "-3.00 亿元"

    def test_others(self):
        assert fmt_money(1200) == "1,200.00"
        assert fmt_rate(45.6) == "45.60%"
        assert fmt_days(0) == "今天"
        assert fmt_days(3) == "3天"
