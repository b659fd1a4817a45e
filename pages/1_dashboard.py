"""主仪表盘"""
import streamlit as st

from components.charts import (
    create_balance_line, create_daily_collections_bar, create_status_pie, create_portfolio_bar,
)
from components.metrics import render_overview_metrics, render_portfolio_counts
from components.session import get_service
from components.tables import render_near_closing_table, render_delayed_table
from core.ledger import ledger_to_frame

st.set_page_config(page_title="主仪表盘", page_icon="📊", layout="wide")
st.title("📊 主仪表盘")

service = get_service()
as_of = st.sidebar.date_input("统计日期")
report = service.get_aggregate_report(as_of)
loans = service.get_derived_loans()

if not loans and not service.list_funds():
    st.info("暂无数据，请先在「资金流水」录入期初余额，再在「贷款汇总」录入贷款。")
    st.stop()

if report.cash_in_hand < 0:
    st.error(f"现金余额为负：{report.cash_in_hand:,.2f} 元，请核对资金流水。")
elif report.negative_balance_rows:
    st.warning(f"流水中有 {report.negative_balance_rows} 条记录余额为负。")

render_overview_metrics(report)
render_portfolio_counts(report)

st.divider()

c1, c2 = st.columns(2)
with c1:
    st.plotly_chart(create_portfolio_bar(
        report.total_invested, report.total_collections,
        report.outstanding, report.expected_profit,
    ), width='stretch')
with c2:
    st.plotly_chart(create_status_pie(loans), width='stretch')

st.plotly_chart(create_balance_line(ledger_to_frame(service.get_ledger())), width='stretch')
st.plotly_chart(create_daily_collections_bar(service.list_collections()), width='stretch')

st.divider()

c1, c2 = st.columns(2)
with c1:
    st.subheader(f"⏳ 即将结清（{service.near_closing_days} 天内）")
    render_near_closing_table(report.near_closing)
with c2:
    st.subheader(f"⚠️ 逾期未收（{service.payment_delay_days} 天以上）")
    render_delayed_table(report.payment_delayed)
