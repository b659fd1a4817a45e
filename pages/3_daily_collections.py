"""每日收款"""
from datetime import date

import streamlit as st
import pandas as pd

from components.forms import render_collection_form, render_bulk_collection_form
from components.session import get_service, show_result
from components.tables import render_collection_table
from config.constants import LoanStatus
from config.settings import DEFAULT_STATEMENT_DAYS
from data_manager.excel_export import generate_collection_statement

st.set_page_config(page_title="每日收款", page_icon="💵", layout="wide")
st.title("💵 每日收款")

service = get_service()
loans = service.get_derived_loans()
open_loans = [loan for loan in loans if loan.balance > 0]

tab_single, tab_bulk, tab_history, tab_statement = st.tabs(["单笔收款", "整笔收款", "收款记录", "收款单"])

with tab_single:
    data = render_collection_form([loan for loan in open_loans if loan.status == LoanStatus.ONGOING])
    if data is not None:
        collection, error = service.add_collection(data)
        if show_result(error, "收款已记录"):
            st.rerun()

with tab_bulk:
    if not open_loans:
        st.info("暂无未结清的贷款")
    else:
        loan_map = {loan.id: loan for loan in open_loans}
        selected = st.selectbox(
            "选择贷款", options=list(loan_map),
            format_func=lambda x: f"{x} - {loan_map[x].customer_name}",
            key="bulk_loan",
        )
        data = render_bulk_collection_form(loan_map[selected], key_prefix=f"bulk_{selected}")
        if data is not None:
            collection, error = service.submit_bulk_collection(
                selected, data["mode"], data["amount"], data["collected_by"], data["remarks"])
            if show_result(error, "整笔收款已记录"):
                st.rerun()

with tab_history:
    collections = service.list_collections()
    df = pd.DataFrame([c.to_dict() for c in collections])
    if not df.empty:
        df = df.sort_values("date", ascending=False, kind="stable")
        total = df["amount_paid"].sum()
        st.metric("收款合计", f"{total:,.2f} 元", delta=f"{len(df)} 笔", delta_color="off")
    render_collection_table(df)

with tab_statement:
    if not loans:
        st.info("暂无贷款")
    else:
        loan_map = {loan.id: loan for loan in loans}
        selected = st.selectbox(
            "选择贷款", options=list(loan_map),
            format_func=lambda x: f"{x} - {loan_map[x].customer_name}",
            key="statement_loan",
        )
        c1, c2 = st.columns(2)
        with c1:
            start = st.date_input("起始日期", value=date.today(), key="statement_start")
        with c2:
            days = st.number_input("天数", min_value=1, value=DEFAULT_STATEMENT_DAYS, key="statement_days")
        statement = generate_collection_statement(loan_map[selected], start, int(days))
        st.dataframe(statement, width='stretch', height=400)
        st.download_button(
            "下载收款单 CSV",
            data=statement.to_csv(index=False).encode("utf-8-sig"),
            file_name=f"statement_{selected}.csv",
            mime="text/csv",
        )
