"""Plotly 图表工厂"""
from typing import List

import plotly.graph_objects as go
import plotly.express as px
import pandas as pd

import plotly.io as pio
from config.constants import LoanStatus, LedgerRowType
from config.settings import COLORS
from data_manager.schema import Collection, Loan

# 自定义 Plotly 主题
pio.templates["ledger_light"] = go.layout.Template(
    layout=go.Layout(
        font=dict(family="sans-serif", color="#333"),
        title_font=dict(size=20, color="#333"),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        xaxis=dict(
            gridcolor="#e0e0e0",
            linecolor="#e0e0e0",
            zerolinecolor="#e0e0e0",
            tickfont=dict(color="#666"),
            title_font=dict(color="#666"),
        ),
        yaxis=dict(
            gridcolor="#e0e0e0",
            linecolor="#e0e0e0",
            zerolinecolor="#e0e0e0",
            tickfont=dict(color="#666"),
            title_font=dict(color="#666"),
        ),
        legend=dict(
            font=dict(color="#666"),
            bgcolor="rgba(255,255,255,0.5)",
            bordercolor="#e0e0e0",
            borderwidth=1,
        ),
        colorway=px.colors.qualitative.Plotly,
    )
)

pio.templates.default = "ledger_light"


def create_balance_line(ledger_df: pd.DataFrame, template: str = "ledger_light") -> go.Figure:
    """现金余额走势，按流水类型标注"""
    fig = go.Figure()
    if ledger_df.empty:
        return fig

    x = list(range(1, len(ledger_df) + 1))
    fig.add_trace(go.Scatter(
        x=x,
        y=ledger_df["balance"],
        mode="lines",
        name="余额",
        line=dict(color=COLORS["primary"], width=2),
        customdata=ledger_df[["date", "description"]],
        hovertemplate="%{customdata[0]}<br>%{customdata[1]}<br>余额: %{y:,.2f}元<extra></extra>",
    ))

    for row_type in LedgerRowType:
        mask = ledger_df["type"] == row_type.value
        if not mask.any():
            continue
        fig.add_trace(go.Scatter(
            x=[i for i, m in zip(x, mask) if m],
            y=ledger_df.loc[mask, "balance"],
            mode="markers",
            name=row_type.label,
            marker=dict(color=COLORS[row_type.value], size=8),
            hoverinfo="skip",
        ))

    # 余额为负的区域
    fig.add_hline(y=0, line=dict(color=COLORS["danger"], dash="dot"))

    fig.update_layout(
        title="现金余额走势",
        xaxis_title="流水序号",
        yaxis_title="金额(元)",
        hovermode="closest",
        margin=dict(t=60, b=60, l=60, r=20),
        height=400,
        template=template,
    )
    return fig


def create_daily_collections_bar(collections: List[Collection], template: str = "ledger_light") -> go.Figure:
    """每日收款柱状图"""
    fig = go.Figure()
    if not collections:
        return fig

    df = pd.DataFrame([c.to_dict() for c in collections])
    daily = df.groupby("date", as_index=False)["amount_paid"].sum().sort_values("date")

    fig.add_trace(go.Bar(
        x=daily["date"],
        y=daily["amount_paid"],
        name="收款",
        marker_color=COLORS["collection"],
        hovertemplate="%{x}<br>收款: %{y:,.2f}元<extra></extra>",
    ))
    fig.update_layout(
        title="每日收款",
        xaxis_title="日期",
        yaxis_title="金额(元)",
        margin=dict(t=60, b=60, l=60, r=20),
        height=380,
        template=template,
    )
    return fig


def create_status_pie(loans: List[Loan], template: str = "ledger_light") -> go.Figure:
    """贷款状态分布环形图"""
    counts = {status: 0 for status in LoanStatus}
    for loan in loans:
        counts[loan.status] += 1

    fig = go.Figure(data=[go.Pie(
        labels=[s.label for s in counts],
        values=list(counts.values()),
        hole=0.45,
        marker_colors=[COLORS["ongoing"], COLORS["completed"], COLORS["disabled"]],
        textinfo="label+value",
        textposition="outside",
    )])
    fig.update_layout(
        title="贷款状态",
        showlegend=True,
        margin=dict(t=60, b=20, l=20, r=20),
        height=380,
        template=template,
    )
    return fig


def create_portfolio_bar(
    total_invested: float,
    total_collections: float,
    outstanding: float,
    expected_profit: float,
    template: str = "ledger_light",
) -> go.Figure:
    """放款/收款/在外/利润对比"""
    fig = go.Figure(data=[go.Bar(
        x=["累计放款", "累计收款", "在外余额", "预期利润"],
        y=[total_invested, total_collections, outstanding, expected_profit],
        marker_color=[COLORS["loan"], COLORS["collection"], COLORS["ongoing"], COLORS["info"]],
        hovertemplate="%{x}: %{y:,.2f}元<extra></extra>",
    )])
    fig.update_layout(
        title="资金概况",
        yaxis_title="金额(元)",
        margin=dict(t=60, b=40, l=60, r=20),
        height=380,
        template=template,
    )
    return fig
