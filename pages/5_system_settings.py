"""系统配置管理"""
import io
from datetime import date

import streamlit as st
import pandas as pd

from config.settings import DEFAULT_COLLECTOR, DEFAULT_NEAR_CLOSING_DAYS, DEFAULT_PAYMENT_DELAY_DAYS
from components.session import get_service
from data_manager.excel_export import default_export_name, build_export_frames
from data_manager.excel_handler import get_all_config, get_config, get_int_config, set_config

st.set_page_config(page_title="系统配置", page_icon="⚙️", layout="wide")
st.title("⚙️ 系统配置")

service = get_service()

current_near = get_int_config("near_closing_days", DEFAULT_NEAR_CLOSING_DAYS)
current_delay = get_int_config("payment_delay_days", DEFAULT_PAYMENT_DELAY_DAYS)
current_collector = get_config("default_collector") or DEFAULT_COLLECTOR

st.info("""
**说明**：在此页面修改的配置将持久化保存到 Excel 中，并立即用于仪表盘预警和整笔收款。
""")

with st.form("system_settings_form"):
    st.subheader("预警阈值")
    c1, c2 = st.columns(2)
    with c1:
        new_near = st.number_input(
            "即将结清（剩余天数 ≤）", min_value=1, max_value=365, value=current_near,
            help="按 余额 ÷ 日还款 估算的剩余天数")
    with c2:
        new_delay = st.number_input(
            "逾期未收（天数 ≥）", min_value=1, max_value=365, value=current_delay,
            help="距最近一次收款（或放款日）的天数")

    st.subheader("收款")
    new_collector = st.text_input("默认收款人", value=current_collector)

    submitted = st.form_submit_button("保存配置", width='stretch', type="primary")

    if submitted:
        set_config("near_closing_days", str(int(new_near)), "即将结清预警天数")
        set_config("payment_delay_days", str(int(new_delay)), "逾期未收预警天数")
        set_config("default_collector", new_collector.strip() or DEFAULT_COLLECTOR, "默认收款人")
        service.near_closing_days = int(new_near)
        service.payment_delay_days = int(new_delay)
        service.default_collector = new_collector.strip() or DEFAULT_COLLECTOR
        # 阈值变化后报表需重算
        service.clear_cache()
        st.success("配置已保存！")
        st.rerun()

st.divider()

st.subheader("数据导出")
frames = build_export_frames(
    service.get_derived_loans(),
    service.list_collections(),
    service.list_funds(),
    service.get_ledger(),
)
buffer = io.BytesIO()
with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
    for sheet_name, df in frames.items():
        df.to_excel(writer, sheet_name=sheet_name, index=False)
st.download_button(
    "下载 Excel 报表",
    data=buffer.getvalue(),
    file_name=default_export_name(date.today()),
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    width='stretch',
)

st.divider()

st.subheader("当前配置")
config_df = get_all_config()
if not config_df.empty:
    st.dataframe(config_df, width='stretch')
