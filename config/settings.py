import os
from pathlib import Path

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 数据文件路径
DATA_DIR = Path(os.getenv("LEDGER_DATA_DIR", str(PROJECT_ROOT / "data")))
EXCEL_FILE = DATA_DIR / "ledger_data.xlsx"
BACKUP_DIR = DATA_DIR
BACKUP_KEEP = 5

# 预警阈值（天）
DEFAULT_NEAR_CLOSING_DAYS = 10
DEFAULT_PAYMENT_DELAY_DAYS = 3

# 收款人缺省值
DEFAULT_COLLECTOR = "System"

# 整笔收款默认天数（用于备注和收款单）
DEFAULT_STATEMENT_DAYS = 100

# 日志
LOG_LEVEL = os.getenv("LEDGER_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LEDGER_LOG_FORMAT", "standard")

# 页面配置
PAGE_TITLE = "放贷账本 Dashboard"
PAGE_ICON = "💰"
LAYOUT = "wide"

# 图表配色
COLORS = {
    "primary": "#1f77b4",
    "secondary": "#ff7f0e",
    "success": "#2ca02c",
    "danger": "#d62728",
    "warning": "#bcbd22",
    "info": "#17becf",
    "opening": "#1f77b4",
    "manual": "#9467bd",
    "loan": "#d62728",
    "collection": "#2ca02c",
    "ongoing": "#ff7f0e",
    "completed": "#2ca02c",
    "disabled": "#7f7f7f",
}

# 比率精度
RATE_PRECISION = 2
