"""表单组件"""
from datetime import date
from typing import List, Optional

import streamlit as st

from config.constants import BulkMode
from data_manager.schema import Loan


def render_loan_form(
    key_prefix: str = "new",
    loan: Optional[Loan] = None,
) -> dict | None:
    """渲染贷款新建/编辑表单，返回表单数据 dict 或 None（未提交）

    Args:
        key_prefix: 用于表单控件的 key 前缀
        loan: 如果是编辑模式，传入现有贷款
    """
    is_edit = loan is not None

    if is_edit:
        default_id = loan.id
        default_name = loan.customer_name
        default_date = loan.date
        default_amount = float(loan.loan_amount)
        default_deduction = float(loan.deduction)
        default_net_given = float(loan.net_given)
        default_daily_pay = float(loan.daily_pay)
        default_days = int(loan.days)
    else:
        default_id = ""
        default_name = ""
        default_date = date.today()
        default_amount = 10000.0
        default_deduction = 0.0
        default_net_given = 0.0
        default_daily_pay = 100.0
        default_days = 100

    with st.form(f"{key_prefix}_loan_form"):
        c1, c2, c3 = st.columns(3)
        with c1:
            loan_id = st.text_input("贷款编号", value=default_id, disabled=is_edit,
                                    key=f"{key_prefix}_id")
        with c2:
            customer_name = st.text_input("客户姓名", value=default_name, key=f"{key_prefix}_name")
        with c3:
            loan_date = st.date_input("放款日期", value=default_date, key=f"{key_prefix}_date")

        c1, c2, c3 = st.columns(3)
        with c1:
            loan_amount = st.number_input("贷款金额(元)", min_value=0.0, value=default_amount,
                                          step=1000.0, key=f"{key_prefix}_amount")
        with c2:
            deduction = st.number_input("预扣金额(元)", min_value=0.0, value=default_deduction,
                                        step=100.0, key=f"{key_prefix}_deduction")
        with c3:
            net_given = st.number_input(
                "实际放款(元)", min_value=0.0, value=default_net_given, step=1000.0,
                help="为 0 时按 贷款金额 - 预扣金额 计算",
                key=f"{key_prefix}_net")

        c1, c2 = st.columns(2)
        with c1:
            daily_pay = st.number_input("日还款(元)", min_value=0.0, value=default_daily_pay,
                                        step=10.0, key=f"{key_prefix}_daily")
        with c2:
            days = st.number_input("期限(天)", min_value=1, value=default_days,
                                   key=f"{key_prefix}_days")

        submitted = st.form_submit_button("保存修改" if is_edit else "确认提交",
                                          width='stretch', type="primary")

        if submitted:
            return {
                "id": loan_id,
                "customer_name": customer_name,
                "date": loan_date,
                "loan_amount": loan_amount,
                "deduction": deduction,
                "net_given": net_given if net_given > 0 else None,
                "daily_pay": daily_pay,
                "days": int(days),
            }
    return None


def render_collection_form(loans: List[Loan], key_prefix: str = "col") -> dict | None:
    """单笔收款录入"""
    if not loans:
        st.info("暂无可收款的贷款")
        return None

    loan_map = {loan.id: loan for loan in loans}
    with st.form(f"{key_prefix}_form"):
        c1, c2 = st.columns(2)
        with c1:
            loan_id = st.selectbox(
                "贷款", options=list(loan_map),
                format_func=lambda x: f"{x} - {loan_map[x].customer_name}",
                key=f"{key_prefix}_loan")
        with c2:
            collection_date = st.date_input("收款日期", value=date.today(), key=f"{key_prefix}_date")

        c1, c2 = st.columns(2)
        with c1:
            amount = st.number_input("收款金额(元)", min_value=0.0, value=0.0, step=10.0,
                                     key=f"{key_prefix}_amount")
        with c2:
            collected_by = st.text_input("收款人", key=f"{key_prefix}_by")
        remarks = st.text_input("备注", key=f"{key_prefix}_remarks")

        submitted = st.form_submit_button("记录收款", width='stretch', type="primary")
        if submitted:
            return {
                "loan_id": loan_id,
                "date": collection_date,
                "amount_paid": amount,
                "collected_by": collected_by,
                "remarks": remarks,
            }
    return None


def render_bulk_collection_form(loan: Loan, key_prefix: str = "bulk") -> dict | None:
    """整笔收款：结清余额或自定义金额"""
    st.write(f"当前余额: **{loan.balance:,.2f} 元**，日还款 {loan.daily_pay:,.2f} 元")

    # 模式放在 form 外部，切换时立即重渲染
    mode = st.radio(
        "收款方式",
        options=[m.value for m in BulkMode],
        format_func=lambda x: BulkMode(x).label,
        horizontal=True,
        key=f"{key_prefix}_mode",
    )

    with st.form(f"{key_prefix}_form"):
        amount = None
        if mode == BulkMode.CUSTOM.value:
            amount = st.number_input(
                "收款金额(元)", min_value=0.0, max_value=max(float(loan.balance), 0.0),
                value=0.0, step=10.0, key=f"{key_prefix}_amount")
        collected_by = st.text_input("收款人", key=f"{key_prefix}_by")
        remarks = st.text_input("备注", key=f"{key_prefix}_remarks")

        submitted = st.form_submit_button("提交", width='stretch', type="primary")
        if submitted:
            return {
                "mode": mode,
                "amount": amount,
                "collected_by": collected_by or None,
                "remarks": remarks or None,
            }
    return None


def render_fund_form(has_initial_balance: bool, key_prefix: str = "fund") -> dict | None:
    """资金流水录入；未录入期初余额时先录期初"""
    with st.form(f"{key_prefix}_form"):
        if not has_initial_balance:
            st.warning("尚未录入期初余额，请先录入期初现金。")
            c1, c2 = st.columns(2)
            with c1:
                amount = st.number_input("期初余额(元)", min_value=0.0, value=0.0, step=1000.0,
                                         key=f"{key_prefix}_initial")
            with c2:
                fund_date = st.date_input("期初日期", value=date.today(), key=f"{key_prefix}_date")
            submitted = st.form_submit_button("录入期初余额", width='stretch', type="primary")
            if submitted:
                return {"initial": True, "amount": amount, "date": fund_date}
            return None

        description = st.text_input("摘要", key=f"{key_prefix}_desc")
        c1, c2, c3 = st.columns(3)
        with c1:
            inflow = st.number_input("流入(元)", min_value=0.0, value=0.0, step=100.0,
                                     key=f"{key_prefix}_in")
        with c2:
            outflow = st.number_input("流出(元)", min_value=0.0, value=0.0, step=100.0,
                                      key=f"{key_prefix}_out")
        with c3:
            fund_date = st.date_input("日期", value=date.today(), key=f"{key_prefix}_date")

        submitted = st.form_submit_button("记录流水", width='stretch', type="primary")
        if submitted:
            return {
                "initial": False,
                "description": description,
                "inflow": inflow,
                "outflow": outflow,
                "date": fund_date,
            }
    return None
