def fmt_amount(value: float, unit: str = "元") -> str:
    """格式化金额：1234567.89 -> 1,234,567.89 元"""
    if abs(value) >= 1e8:
        return f"{value / 1e8:,.2f} 亿元"
    if abs(value) >= 1e4:
        return f"{value / 1e4:,.2f} 万元"
    return f"{value:,.2f} {unit}"


def fmt_money(value: float) -> str:
    """表格中使用的金额：不换算单位"""
    return f"{value:,.2f}"


def fmt_rate(value: float) -> str:
    """格式化百分比数值：45.6 -> 45.60%"""
    return f"{value:.2f}%"


def fmt_days(days: int) -> str:
    """格式化天数：0 -> 今天"""
    if days <= 0:
        return "今天"
    return f"{days}天"
