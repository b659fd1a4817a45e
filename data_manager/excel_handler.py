import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from config.constants import (
    SHEET_LOANS, SHEET_COLLECTIONS, SHEET_FUNDS, SHEET_CONFIG,
    LOAN_COLUMNS, COLLECTION_COLUMNS, FUND_COLUMNS, CONFIG_COLUMNS,
    SCHEMA_VERSION,
)
from config.settings import (
    EXCEL_FILE, BACKUP_KEEP, DEFAULT_NEAR_CLOSING_DAYS,
    DEFAULT_PAYMENT_DELAY_DAYS, DEFAULT_COLLECTOR,
)
from data_manager.schema import Collection, Fund, LoanInput
from utils.logger import get_logger

logger = get_logger(__name__)


def _default_config_rows() -> List[dict]:
    now = datetime.now().isoformat()
    return [
        {"key": "schema_version", "value": str(SCHEMA_VERSION), "description": "存储格式版本", "updated_at": now},
        {"key": "near_closing_days", "value": str(DEFAULT_NEAR_CLOSING_DAYS), "description": "即将结清预警天数", "updated_at": now},
        {"key": "payment_delay_days", "value": str(DEFAULT_PAYMENT_DELAY_DAYS), "description": "逾期预警天数", "updated_at": now},
        {"key": "default_collector", "value": DEFAULT_COLLECTOR, "description": "默认收款人", "updated_at": now},
    ]


def init_excel(filepath: Path = EXCEL_FILE):
    """初始化 Excel 文件，创建所有 Sheet 和表头"""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    if filepath.exists():
        return

    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        pd.DataFrame(columns=LOAN_COLUMNS).to_excel(
            writer, sheet_name=SHEET_LOANS, index=False)
        pd.DataFrame(columns=COLLECTION_COLUMNS).to_excel(
            writer, sheet_name=SHEET_COLLECTIONS, index=False)
        pd.DataFrame(columns=FUND_COLUMNS).to_excel(
            writer, sheet_name=SHEET_FUNDS, index=False)
        config_df = pd.DataFrame(_default_config_rows(), columns=CONFIG_COLUMNS)
        config_df.to_excel(writer, sheet_name=SHEET_CONFIG, index=False)
    logger.info("created workbook %s", filepath)


def backup_excel(filepath: Path = EXCEL_FILE):
    """写入前自动备份"""
    if filepath.exists():
        ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_path = filepath.with_suffix(f".xlsx.bak_{ts}")
        shutil.copy2(filepath, backup_path)
        # 只保留最近几个备份
        backups = sorted(filepath.parent.glob(f"{filepath.stem}.xlsx.bak_*"))
        for old in backups[:-BACKUP_KEEP]:
            old.unlink()


def read_sheet(sheet_name: str, filepath: Path = EXCEL_FILE) -> pd.DataFrame:
    """读取指定 Sheet"""
    init_excel(filepath)
    try:
        df = pd.read_excel(filepath, sheet_name=sheet_name, engine="openpyxl")
    except ValueError:
        df = pd.DataFrame()
    return df


def write_sheet(df: pd.DataFrame, sheet_name: str, filepath: Path = EXCEL_FILE):
    """写入指定 Sheet（覆盖该 Sheet，保留其他 Sheet）"""
    init_excel(filepath)
    backup_excel(filepath)

    with pd.ExcelWriter(filepath, engine="openpyxl", mode="a", if_sheet_exists="replace") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)


def _records(df: pd.DataFrame) -> List[dict]:
    if df.empty:
        return []
    # NaN 统一转为 None，交给边界层补默认值
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


# ---- 贷款 ----

def read_loan_rows(filepath: Path = EXCEL_FILE) -> List[dict]:
    return _records(read_sheet(SHEET_LOANS, filepath))


def write_loans(loans: Iterable[LoanInput], filepath: Path = EXCEL_FILE):
    """只持久化录入字段，派生字段不落盘"""
    rows = [loan.to_dict() for loan in loans]
    write_sheet(pd.DataFrame(rows, columns=LOAN_COLUMNS), SHEET_LOANS, filepath)


# ---- 收款 ----

def read_collection_rows(filepath: Path = EXCEL_FILE) -> List[dict]:
    return _records(read_sheet(SHEET_COLLECTIONS, filepath))


def write_collections(collections: Iterable[Collection], filepath: Path = EXCEL_FILE):
    rows = [c.to_dict() for c in collections]
    write_sheet(pd.DataFrame(rows, columns=COLLECTION_COLUMNS), SHEET_COLLECTIONS, filepath)


# ---- 资金流水 ----

def read_fund_rows(filepath: Path = EXCEL_FILE) -> List[dict]:
    return _records(read_sheet(SHEET_FUNDS, filepath))


def write_funds(funds: Iterable[Fund], filepath: Path = EXCEL_FILE):
    rows = [f.to_dict() for f in funds]
    write_sheet(pd.DataFrame(rows, columns=FUND_COLUMNS), SHEET_FUNDS, filepath)


# ---- 系统配置 ----

def get_config(key: str, filepath: Path = EXCEL_FILE) -> Optional[str]:
    df = read_sheet(SHEET_CONFIG, filepath)
    if df.empty:
        return None
    match = df[df["key"] == key]
    if match.empty:
        return None
    return str(match.iloc[0]["value"])


def get_all_config(filepath: Path = EXCEL_FILE) -> pd.DataFrame:
    """获取所有系统配置"""
    return read_sheet(SHEET_CONFIG, filepath)


def set_config(key: str, value: str, description: str = "", filepath: Path = EXCEL_FILE):
    df = read_sheet(SHEET_CONFIG, filepath)
    if df.empty:
        df = pd.DataFrame(columns=CONFIG_COLUMNS)
    now = datetime.now().isoformat()
    if key in df["key"].values:
        df.loc[df["key"] == key, "value"] = value
        df.loc[df["key"] == key, "updated_at"] = now
        if description:
            df.loc[df["key"] == key, "description"] = description
    else:
        new_row = pd.DataFrame([{
            "key": key, "value": value,
            "description": description, "updated_at": now,
        }])
        df = pd.concat([df, new_row], ignore_index=True)
    write_sheet(df, SHEET_CONFIG, filepath)


def get_int_config(key: str, default: int, filepath: Path = EXCEL_FILE) -> int:
    """读取整型配置，缺失或格式错误时返回默认值"""
    value = get_config(key, filepath)
    if value is None:
        return default
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return default


def check_schema_version(filepath: Path = EXCEL_FILE) -> int:
    """读取存储格式版本，旧文件缺少版本号时补写当前版本"""
    version = get_config("schema_version", filepath)
    if version is None:
        set_config("schema_version", str(SCHEMA_VERSION), "存储格式版本", filepath)
        return SCHEMA_VERSION
    found = int(float(version))
    if found > SCHEMA_VERSION:
        logger.warning("workbook %s has schema version %s, newer than supported %s",
                       filepath, found, SCHEMA_VERSION)
    return found
