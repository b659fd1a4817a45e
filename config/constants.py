from enum import Enum


class LoanStatus(str, Enum):
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    DISABLED = "Disabled"

    @property
    def label(self) -> str:
        return {
            "Ongoing": "还款中",
            "Completed": "已结清",
            "Disabled": "已停用",
        }[self.value]


class LedgerRowType(str, Enum):
    OPENING = "opening"
    MANUAL = "manual"
    LOAN = "loan"
    COLLECTION = "collection"

    @property
    def priority(self) -> int:
        """同一日期内的排序层级：期初 < 手工 < 放款 < 收款"""
        return {
            "opening": 0,
            "manual": 1,
            "loan": 2,
            "collection": 3,
        }[self.value]

    @property
    def is_checkpoint(self) -> bool:
        """手工录入的资金记录余额为权威值"""
        return self in (LedgerRowType.OPENING, LedgerRowType.MANUAL)

    @property
    def label(self) -> str:
        return {
            "opening": "期初余额",
            "manual": "手工记账",
            "loan": "放款",
            "collection": "收款",
        }[self.value]


class BulkMode(str, Enum):
    FULL = "full"  # 一次性结清
    CUSTOM = "custom"  # 自定义金额

    @property
    def label(self) -> str:
        return {
            "full": "结清剩余余额",
            "custom": "自定义金额",
        }[self.value]


# 期初余额标记
INITIAL_BALANCE_DESCRIPTION = "Initial Balance"

# 存储格式版本
SCHEMA_VERSION = 1

# Sheet 名称
SHEET_LOANS = "贷款汇总"
SHEET_COLLECTIONS = "每日收款"
SHEET_FUNDS = "资金流水"
SHEET_CONFIG = "系统配置"

# 导出 Sheet 名称
EXPORT_SHEET_LOANS = "Loan Summary"
EXPORT_SHEET_COLLECTIONS = "Daily Collections"
EXPORT_SHEET_FUNDS = "Fund Tracker"
EXPORT_SHEET_LEDGER = "Ledger"

# 列定义
LOAN_COLUMNS = [
    "id", "customer_name", "date", "loan_amount", "deduction",
    "net_given", "daily_pay", "days", "is_disabled",
]

DERIVED_LOAN_COLUMNS = LOAN_COLUMNS + [
    "total_to_receive", "collected", "balance", "status", "profit",
]

COLLECTION_COLUMNS = [
    "id", "date", "loan_id", "customer", "amount_paid", "collected_by", "remarks",
]

FUND_COLUMNS = ["id", "date", "description", "inflow", "outflow", "balance"]

LEDGER_COLUMNS = ["id", "date", "description", "inflow", "outflow", "balance", "type"]

CONFIG_COLUMNS = ["key", "value", "description", "updated_at"]

# 导出表头（英文报表）
EXPORT_LOAN_HEADERS = {
    "id": "Loan ID",
    "customer_name": "Customer Name",
    "date": "Date",
    "loan_amount": "Loan Amount",
    "deduction": "Deduction",
    "net_given": "Net Given",
    "daily_pay": "Daily Pay",
    "days": "Days",
    "total_to_receive": "Total to Receive",
    "collected": "Collected",
    "balance": "Balance",
    "status": "Status",
    "profit": "Profit",
}

EXPORT_COLLECTION_HEADERS = {
    "date": "Date",
    "loan_id": "Loan ID",
    "customer": "Customer",
    "amount_paid": "Amount Paid",
    "collected_by": "Collected By",
    "remarks": "Remarks",
}

EXPORT_FUND_HEADERS = {
    "date": "Date",
    "description": "Description",
    "inflow": "Inflow",
    "outflow": "Outflow",
    "balance": "Balance",
}

EXPORT_LEDGER_HEADERS = {
    "date": "Date",
    "description": "Description",
    "inflow": "Inflow",
    "outflow": "Outflow",
    "balance": "Balance",
    "type": "Type",
}
