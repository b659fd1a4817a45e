"""页面共享的账本服务"""
import streamlit as st

from config.settings import (
    EXCEL_FILE, LOG_LEVEL, LOG_FORMAT, DEFAULT_COLLECTOR,
    DEFAULT_NEAR_CLOSING_DAYS, DEFAULT_PAYMENT_DELAY_DAYS,
)
from core.ledger_service import LedgerService
from data_manager.excel_handler import get_config, get_int_config
from data_manager.record_store import ExcelRecordStore
from utils.logger import setup_logging


@st.cache_resource
def get_service() -> LedgerService:
    """整个 Streamlit 进程共用一个仓库和服务"""
    setup_logging(LOG_LEVEL, LOG_FORMAT)
    store = ExcelRecordStore(EXCEL_FILE)
    return LedgerService(
        store,
        near_closing_days=get_int_config("near_closing_days", DEFAULT_NEAR_CLOSING_DAYS),
        payment_delay_days=get_int_config("payment_delay_days", DEFAULT_PAYMENT_DELAY_DAYS),
        default_collector=get_config("default_collector") or DEFAULT_COLLECTOR,
    )


def show_result(error, success_msg: str) -> bool:
    """展示写操作结果，成功返回 True"""
    if error is not None:
        st.error(f"操作失败：{error}")
        return False
    st.success(success_msg)
    return True
