"""放贷账本 Dashboard - 主入口"""
import streamlit as st

from config.settings import PAGE_TITLE, PAGE_ICON, LAYOUT, EXCEL_FILE
from components.session import get_service

st.set_page_config(
    page_title=PAGE_TITLE,
    page_icon=PAGE_ICON,
    layout=LAYOUT,
    initial_sidebar_state="expanded",
)

# 加载数据
get_service()

st.title(f"{PAGE_ICON} {PAGE_TITLE}")

st.markdown("""
欢迎使用放贷账本 Dashboard！本工具帮助你管理日还款贷款、收款与现金流水。

### 功能导航

| 页面 | 功能 |
|------|------|
| 📊 **主仪表盘** | 现金余额、放款收款汇总、预警列表 |
| 📋 **贷款汇总** | 新建、编辑、停用、删除贷款，查看客户对账单 |
| 💵 **每日收款** | 单笔收款、整笔结清、自定义收款、收款单 |
| 📒 **资金流水** | 期初余额、手工记账、统一流水与余额走势 |
| ⚙️ **系统配置** | 预警阈值、默认收款人、数据导出 |

### 快速开始

1. 在 **资金流水** 录入期初余额
2. 在 **贷款汇总** 录入贷款
3. 在 **每日收款** 记录收款，回到 **主仪表盘** 查看汇总

---

### 计算口径

- **余额** = 贷款金额 - 已收金额；余额为 0 时自动结清
- **利润** = 预扣金额 + max(0, 已收 - 实际放款)
- **现金余额** 取统一流水最后一行余额；手工资金记录的余额为准，其余行累加
""")

# 侧边栏
with st.sidebar:
    st.markdown("### 关于")
    st.markdown("放贷账本 Dashboard v1.0")
    st.markdown(f"数据存储在 `{EXCEL_FILE}`")
