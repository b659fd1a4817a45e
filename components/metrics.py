"""指标卡片组件"""
import streamlit as st

from core.aggregates import AggregateReport
from utils.formatters import fmt_amount, fmt_rate


def render_overview_metrics(report: AggregateReport):
    """渲染看板概览指标卡片"""
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        st.metric("现金余额", fmt_amount(report.cash_in_hand),
                  delta="正" if report.cash_in_hand > 0 else "负",
                  delta_color="normal" if report.cash_in_hand > 0 else "inverse")
    with c2:
        st.metric("累计放款", fmt_amount(report.total_invested))
    with c3:
        st.metric("累计收款", fmt_amount(report.total_collections))
    with c4:
        st.metric("在外余额", fmt_amount(report.outstanding))

    c5, c6, c7, c8 = st.columns(4)
    with c5:
        st.metric("预期利润", fmt_amount(report.expected_profit))
    with c6:
        st.metric("回收率", fmt_rate(report.recovery_rate))
    with c7:
        st.metric("利润率", fmt_rate(report.profit_margin))
    with c8:
        st.metric("在外占比", fmt_rate(report.outstanding_ratio))


def render_portfolio_counts(report: AggregateReport):
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        st.metric("在还贷款", f"{report.active_loans}笔")
    with c2:
        st.metric("已结清", f"{report.completed_loans}笔")
    with c3:
        st.metric("已停用", f"{report.disabled_loans}笔")
    with c4:
        st.metric("收款笔数", f"{report.collection_count}笔")


def render_ledger_summary_metrics(summary: dict):
    """资金流水页的摘要"""
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        st.metric("当前余额", fmt_amount(summary["current_balance"]))
    with c2:
        st.metric("总流入", fmt_amount(summary["total_inflow"]))
    with c3:
        st.metric("总流出", fmt_amount(summary["total_outflow"]))
    with c4:
        st.metric("负余额记录", f"{summary['negative_balance_rows']}条")
