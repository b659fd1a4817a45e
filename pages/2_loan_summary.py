"""贷款汇总"""
import streamlit as st
import pandas as pd

from components.forms import render_loan_form
from components.session import get_service, show_result
from components.tables import render_loan_table, render_collection_table
from config.constants import LoanStatus
from core.aggregates import loans_to_frame

st.set_page_config(page_title="贷款汇总", page_icon="📋", layout="wide")
st.title("📋 贷款汇总")

service = get_service()

tab_list, tab_new, tab_edit = st.tabs(["贷款列表", "新建贷款", "编辑/停用/删除"])

with tab_list:
    loans = service.get_derived_loans()
    status_filter = st.multiselect(
        "状态筛选",
        options=[s.value for s in LoanStatus],
        default=[s.value for s in LoanStatus],
        format_func=lambda x: LoanStatus(x).label,
    )
    keyword = st.text_input("搜索客户或编号")

    shown = [
        loan for loan in loans
        if loan.status.value in status_filter
        and (not keyword or keyword.lower() in loan.customer_name.lower() or keyword.lower() in loan.id.lower())
    ]
    render_loan_table(loans_to_frame(shown))

    if loans:
        st.subheader("客户对账单")
        loan_map = {loan.id: loan for loan in loans}
        selected = st.selectbox(
            "选择贷款", options=list(loan_map),
            format_func=lambda x: f"{x} - {loan_map[x].customer_name}",
            key="flow_loan",
        )
        flow, error = service.get_loan_cash_flow(selected)
        if error is not None:
            st.error(str(error))
        else:
            c1, c2, c3, c4 = st.columns(4)
            c1.metric("实际放款", f"{flow['total_outflow']:,.2f}")
            c2.metric("累计收款", f"{flow['total_inflow']:,.2f}")
            c3.metric("净现金流", f"{flow['net_flow']:,.2f}")
            c4.metric("利润", f"{flow['profit']:,.2f}")
            render_collection_table(pd.DataFrame([c.to_dict() for c in flow["collections"]]))

with tab_new:
    st.subheader("新建贷款")
    data = render_loan_form("new")
    if data is not None:
        loan, error = service.add_loan(data)
        if show_result(error, f"贷款 {data['id']} 已创建"):
            st.rerun()

with tab_edit:
    loans = service.get_derived_loans()
    if not loans:
        st.info("暂无贷款")
    else:
        loan_map = {loan.id: loan for loan in loans}
        selected = st.selectbox(
            "选择贷款", options=list(loan_map),
            format_func=lambda x: f"{x} - {loan_map[x].customer_name} ({loan_map[x].status.label})",
            key="edit_loan",
        )
        loan = loan_map[selected]

        st.subheader("编辑贷款")
        data = render_loan_form(f"edit_{selected}", loan)
        if data is not None:
            data.pop("id")
            if data["net_given"] is None:
                data.pop("net_given")
            _, error = service.update_loan(selected, data)
            if show_result(error, "修改已保存"):
                st.rerun()

        c1, c2 = st.columns(2)
        with c1:
            label = "启用贷款" if loan.is_disabled else "停用贷款"
            if st.button(label, width='stretch'):
                _, error = service.toggle_loan(selected)
                if show_result(error, f"{label}成功"):
                    st.rerun()
        with c2:
            confirm = st.checkbox("确认删除（同时删除该贷款的全部收款记录）")
            if st.button("删除贷款", width='stretch', type="primary", disabled=not confirm):
                removed, error = service.delete_loan(selected)
                if show_result(error, f"已删除贷款及 {removed} 条收款记录"):
                    st.rerun()
