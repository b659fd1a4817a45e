"""格式化表格组件"""
from typing import List

import pandas as pd
import streamlit as st

from config.constants import LoanStatus, LedgerRowType
from core.aggregates import DelayedLoan, NearClosingLoan
from utils.formatters import fmt_days


def _format_money_cols(df: pd.DataFrame, cols: List[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = df[col].apply(lambda x: f"{x:,.2f}")
    return df


def render_loan_table(loans_df: pd.DataFrame):
    """渲染贷款汇总表"""
    if loans_df.empty:
        st.info("暂无贷款数据")
        return

    col_map = {
        "id": "编号",
        "customer_name": "客户",
        "date": "放款日",
        "loan_amount": "贷款金额",
        "deduction": "预扣",
        "net_given": "实放",
        "daily_pay": "日还款",
        "days": "天数",
        "collected": "已收",
        "balance": "余额",
        "status": "状态",
        "profit": "利润",
    }
    display_df = loans_df[[c for c in col_map if c in loans_df.columns]].rename(columns=col_map)
    display_df = _format_money_cols(display_df, ["贷款金额", "预扣", "实放", "日还款", "已收", "余额", "利润"])
    display_df["状态"] = display_df["状态"].apply(lambda x: LoanStatus(x).label)
    st.dataframe(display_df, width='stretch')


def render_collection_table(collections_df: pd.DataFrame):
    if collections_df.empty:
        st.info("暂无收款记录")
        return

    col_map = {
        "date": "日期",
        "loan_id": "贷款编号",
        "customer": "客户",
        "amount_paid": "金额",
        "collected_by": "收款人",
        "remarks": "备注",
    }
    display_df = collections_df[list(col_map)].rename(columns=col_map)
    display_df = _format_money_cols(display_df, ["金额"])
    st.dataframe(display_df, width='stretch')


def render_ledger_table(ledger_df: pd.DataFrame):
    """渲染统一流水表，负余额标红"""
    if ledger_df.empty:
        st.info("暂无资金流水，请先录入期初余额")
        return

    col_map = {
        "date": "日期",
        "type": "类型",
        "description": "摘要",
        "inflow": "流入",
        "outflow": "流出",
        "balance": "余额",
    }
    display_df = ledger_df[list(col_map)].rename(columns=col_map)
    display_df["类型"] = display_df["类型"].apply(lambda x: LedgerRowType(x).label)

    def _highlight(row):
        color = "color: #d62728" if row["余额"] < 0 else ""
        return [color] * len(row)

    styled = display_df.style.apply(_highlight, axis=1).format(
        {"流入": "{:,.2f}", "流出": "{:,.2f}", "余额": "{:,.2f}"})
    st.dataframe(styled, width='stretch', height=600 if len(display_df) > 24 else None)


def render_near_closing_table(items: List[NearClosingLoan]):
    if not items:
        st.caption("暂无即将结清的贷款")
        return
    df = pd.DataFrame([{
        "编号": i.loan.id,
        "客户": i.loan.customer_name,
        "剩余金额": f"{i.remaining_amount:,.2f}",
        "预计剩余天数": fmt_days(i.remaining_days),
    } for i in items])
    st.dataframe(df, width='stretch')


def render_delayed_table(items: List[DelayedLoan]):
    if not items:
        st.caption("暂无逾期贷款")
        return
    df = pd.DataFrame([{
        "编号": i.loan.id,
        "客户": i.loan.customer_name,
        "最近收款/放款日": i.last_activity.isoformat(),
        "未收款天数": i.days_since_payment,
        "余额": f"{i.loan.balance:,.2f}",
    } for i in items])
    st.dataframe(df, width='stretch')
