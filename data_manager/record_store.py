"""
记录仓库

贷款、收款、资金记录的唯一可变来源。每次成功写入都会递增 version 并通知订阅者，
写入失败时三类记录和 version 均保持不变。核心计算只读取这里返回的副本。
"""
import copy
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Tuple, Union

from core.exceptions import InvalidStateError, NotFoundError, PersistenceError, ValidationError
from core.ledger import recompute_fund_balances
from data_manager import excel_handler
from data_manager.data_validator import (
    normalize_collection, normalize_fund, normalize_loan,
    validate_collection, validate_fund, validate_loan, is_initial_balance,
)
from data_manager.schema import Collection, Fund, LoanInput
from utils.logger import get_logger

logger = get_logger(__name__)

Listener = Callable[[str, object], None]
Snapshot = Tuple[Dict[str, LoanInput], List[Collection], List[Fund], int]

_LOAN_INPUT_FIELDS = {f.name for f in fields(LoanInput)}


def _as_mapping(record) -> Mapping:
    if isinstance(record, Mapping):
        return record
    return record.to_dict()


@dataclass
class RecordStore:
    """内存中的记录仓库，带引用完整性校验与级联删除"""

    loans: Dict[str, LoanInput] = field(default_factory=dict)
    collections: List[Collection] = field(default_factory=list)
    funds: List[Fund] = field(default_factory=list)
    version: int = 0
    _listeners: List[Listener] = field(default_factory=list, repr=False)

    # ---- 订阅 ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """注册变更回调，返回取消订阅函数"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _snapshot(self) -> Snapshot:
        return dict(self.loans), list(self.collections), list(self.funds), self.version

    def _restore(self, snapshot: Snapshot) -> None:
        self.loans, self.collections, self.funds, self.version = snapshot

    def _commit(self, event: str, payload: object, snapshot: Snapshot) -> None:
        """落盘成功后才通知订阅者；落盘失败时回滚到写入前的状态"""
        self.version += 1
        try:
            self._persist(event)
        except Exception as e:
            self._restore(snapshot)
            self._undo_persist(event)
            logger.error("persisting %s failed, rolled back: %s", event, e)
            raise PersistenceError(f"Could not save {event}: {e}") from e
        for listener in list(self._listeners):
            listener(event, payload)

    def _persist(self, event: str) -> None:
        """持久化钩子，内存仓库无需落盘"""

    def _undo_persist(self, event: str) -> None:
        """回滚后把已写出的部分恢复为回滚后的状态"""

    # ---- 读取 ----

    def list_loans(self) -> List[LoanInput]:
        return [copy.copy(loan) for loan in self.loans.values()]

    def list_collections(self) -> List[Collection]:
        return [copy.copy(c) for c in self.collections]

    def list_funds(self) -> List[Fund]:
        return [copy.copy(f) for f in self.funds]

    def get_loan(self, loan_id: str) -> LoanInput:
        if loan_id not in self.loans:
            raise NotFoundError(f"Loan {loan_id} not found")
        return copy.copy(self.loans[loan_id])

    def has_initial_balance(self) -> bool:
        return any(is_initial_balance(f) for f in self.funds)

    # ---- 贷款 ----

    def insert_loan(self, record: Union[LoanInput, Mapping]) -> LoanInput:
        loan = normalize_loan(_as_mapping(record))
        ok, field_name, msg = validate_loan(loan)
        if not ok:
            raise ValidationError(field_name, msg)
        if loan.id in self.loans:
            raise InvalidStateError(f"Loan {loan.id} already exists")

        snapshot = self._snapshot()
        self.loans[loan.id] = loan
        self._commit("loan_added", copy.copy(loan), snapshot)
        logger.info("loan %s added for %s", loan.id, loan.customer_name)
        return copy.copy(loan)

    def update_loan(self, loan_id: str, partial: Mapping) -> LoanInput:
        """合并录入字段后重新校验；派生字段与 id 不可修改"""
        current = self.get_loan(loan_id)
        merged = current.to_dict()
        for key, value in partial.items():
            if key in _LOAN_INPUT_FIELDS and key != "id":
                merged[key] = value
        loan = normalize_loan(merged)
        ok, field_name, msg = validate_loan(loan)
        if not ok:
            raise ValidationError(field_name, msg)

        snapshot = self._snapshot()
        self.loans[loan_id] = loan
        self._commit("loan_updated", copy.copy(loan), snapshot)
        logger.info("loan %s updated: %s", loan_id, sorted(k for k in partial if k in _LOAN_INPUT_FIELDS))
        return copy.copy(loan)

    def toggle_loan(self, loan_id: str) -> LoanInput:
        current = self.get_loan(loan_id)
        loan = replace(current, is_disabled=not current.is_disabled)
        snapshot = self._snapshot()
        self.loans[loan_id] = loan
        self._commit("loan_toggled", copy.copy(loan), snapshot)
        logger.info("loan %s %s", loan_id, "disabled" if loan.is_disabled else "enabled")
        return copy.copy(loan)

    def delete_loan(self, loan_id: str) -> int:
        """删除贷款并级联删除其收款记录，返回删除的收款条数"""
        self.get_loan(loan_id)
        remaining = [c for c in self.collections if c.loan_id != loan_id]
        removed = len(self.collections) - len(remaining)

        snapshot = self._snapshot()
        del self.loans[loan_id]
        self.collections = remaining
        self._commit("loan_deleted", loan_id, snapshot)
        logger.info("loan %s deleted with %d collections", loan_id, removed)
        return removed

    # ---- 收款 ----

    def insert_collection(self, record: Union[Collection, Mapping]) -> Collection:
        raw = _as_mapping(record)
        loan = self.loans.get(str(raw.get("loan_id") or "").strip())
        collection = normalize_collection(raw, customer_default=loan.customer_name if loan else "")
        ok, field_name, msg = validate_collection(collection)
        if not ok:
            raise ValidationError(field_name, msg)
        if loan is None:
            raise InvalidStateError(f"Collection references unknown loan {collection.loan_id}")
        if any(c.id == collection.id for c in self.collections):
            raise InvalidStateError(f"Collection {collection.id} already exists")

        snapshot = self._snapshot()
        self.collections.append(collection)
        self._commit("collection_added", copy.copy(collection), snapshot)
        logger.info("collection %s of %.2f recorded for loan %s",
                    collection.id, collection.amount_paid, collection.loan_id)
        return copy.copy(collection)

    # ---- 资金记录 ----

    def insert_fund(self, record: Union[Fund, Mapping]) -> Fund:
        """新增资金记录，忽略调用方给出的余额，全部资金记录重新排序并重算余额"""
        fund = normalize_fund(_as_mapping(record))
        ok, field_name, msg = validate_fund(fund)
        if not ok:
            raise ValidationError(field_name, msg)
        if is_initial_balance(fund) and self.has_initial_balance():
            raise InvalidStateError("Initial balance already recorded")
        if any(f.id == fund.id for f in self.funds):
            raise InvalidStateError(f"Fund entry {fund.id} already exists")

        snapshot = self._snapshot()
        self.funds = recompute_fund_balances([copy.copy(f) for f in self.funds] + [fund])
        self._commit("fund_added", copy.copy(fund), snapshot)
        logger.info("fund %s recorded: %s (+%.2f / -%.2f)",
                    fund.id, fund.description, fund.inflow, fund.outflow)
        return copy.copy(fund)


class ExcelRecordStore(RecordStore):
    """以 Excel 工作簿持久化的记录仓库"""

    _SHEETS_BY_EVENT = {
        "loan_added": ("loans",),
        "loan_updated": ("loans",),
        "loan_toggled": ("loans",),
        "loan_deleted": ("loans", "collections"),
        "collection_added": ("collections",),
        "fund_added": ("funds",),
    }

    def __init__(self, filepath: Path = excel_handler.EXCEL_FILE):
        super().__init__()
        self.filepath = Path(filepath)
        self._load()

    def _load(self) -> None:
        excel_handler.init_excel(self.filepath)
        excel_handler.check_schema_version(self.filepath)

        for row in excel_handler.read_loan_rows(self.filepath):
            loan = normalize_loan(row)
            self.loans[loan.id] = loan

        for row in excel_handler.read_collection_rows(self.filepath):
            collection = normalize_collection(row)
            if collection.loan_id not in self.loans:
                logger.warning("dropping orphan collection %s (loan %s missing)",
                               collection.id, collection.loan_id)
                continue
            self.collections.append(collection)

        funds = []
        for row in excel_handler.read_fund_rows(self.filepath):
            fund = normalize_fund(row)
            funds.append(fund)
        self.funds = recompute_fund_balances(funds)

        logger.info("loaded %d loans, %d collections, %d funds from %s",
                    len(self.loans), len(self.collections), len(self.funds), self.filepath)

    def _persist(self, event: str) -> None:
        for sheet in self._SHEETS_BY_EVENT.get(event, ()):
            if sheet == "loans":
                excel_handler.write_loans(self.loans.values(), self.filepath)
            elif sheet == "collections":
                excel_handler.write_collections(self.collections, self.filepath)
            elif sheet == "funds":
                excel_handler.write_funds(self.funds, self.filepath)

    def _undo_persist(self, event: str) -> None:
        # 多 Sheet 写入中途失败时，前面已写出的 Sheet 需要改回
        try:
            self._persist(event)
        except Exception as e:
            logger.error("workbook %s may be out of sync after failed %s: %s", self.filepath, event, e)
