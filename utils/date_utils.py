from datetime import date, datetime
from typing import Optional

import pandas as pd
from dateutil import parser as date_parser


def parse_date(value) -> Optional[date]:
    """解析日期，支持字符串、datetime、Timestamp 或 date 对象，无法解析时返回 None"""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date_parser.parse(text).date()
        except (ValueError, OverflowError):
            return None
    return None


def parse_date_or_today(value) -> date:
    """解析失败时回退到今天"""
    return parse_date(value) or date.today()


def fmt_iso(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def days_between(start: date, end: date) -> int:
    """两个日期相差的整天数"""
    return (end - start).days
