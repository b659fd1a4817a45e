"""资金流水"""
import streamlit as st

from components.charts import create_balance_line
from components.forms import render_fund_form
from components.metrics import render_ledger_summary_metrics
from components.session import get_service, show_result
from components.tables import render_ledger_table
from core.ledger import ledger_to_frame

st.set_page_config(page_title="资金流水", page_icon="📒", layout="wide")
st.title("📒 资金流水")

service = get_service()

data = render_fund_form(service.store.has_initial_balance())
if data is not None:
    if data["initial"]:
        fund, error = service.set_initial_balance(data["amount"], data["date"])
        ok = show_result(error, "期初余额已录入")
    else:
        data.pop("initial")
        fund, error = service.add_fund(data)
        ok = show_result(error, "流水已记录")
    if ok:
        st.rerun()

st.divider()

summary = service.get_ledger_summary()
render_ledger_summary_metrics(summary)
if summary["negative_balance_rows"]:
    st.warning(f"有 {summary['negative_balance_rows']} 条记录余额为负，存在资金缺口。")

ledger_df = ledger_to_frame(service.get_ledger())
st.plotly_chart(create_balance_line(ledger_df), width='stretch')
render_ledger_table(ledger_df)
