"""
账本服务

面向展示层的唯一入口：读取仓库记录，提供派生贷款、统一流水、汇总报表，
以及各类写操作。写操作返回 (结果, 错误)，错误为 None 表示成功；
领域异常不会越过这一层。派生视图按仓库 version 缓存，任何写入都会使缓存失效。
"""
import copy
from datetime import date
from typing import Callable, List, Mapping, Optional, Tuple, TypeVar

from config.constants import INITIAL_BALANCE_DESCRIPTION
from config.settings import DEFAULT_COLLECTOR, DEFAULT_NEAR_CLOSING_DAYS, DEFAULT_PAYMENT_DELAY_DAYS
from core.aggregates import AggregateReport, compute_aggregates
from core.bulk_collection import resolve_bulk_collection
from core.exceptions import LedgerError, NotFoundError
from core.ledger import build_ledger, summarize_ledger
from core.loan_metrics import derive_loan, derive_loans, loan_cash_flow
from data_manager.record_store import RecordStore
from data_manager.schema import Collection, Fund, LedgerRow, Loan
from utils.id_generator import generate_initial_fund_id
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
Result = Tuple[Optional[T], Optional[LedgerError]]


class LedgerService:

    def __init__(
        self,
        store: RecordStore,
        near_closing_days: int = DEFAULT_NEAR_CLOSING_DAYS,
        payment_delay_days: int = DEFAULT_PAYMENT_DELAY_DAYS,
        default_collector: str = DEFAULT_COLLECTOR,
    ):
        self.store = store
        self.near_closing_days = near_closing_days
        self.payment_delay_days = payment_delay_days
        self.default_collector = default_collector
        self._cache: dict = {}
        self._cache_version = store.version
        store.subscribe(self._on_store_change)

    # ---- 缓存 ----

    def _on_store_change(self, event: str, payload: object) -> None:
        logger.debug("store changed (%s), dropping %d cached views", event, len(self._cache))
        self._cache.clear()

    def clear_cache(self) -> None:
        """配置变更等非仓库写入后手动失效"""
        self._cache.clear()

    def _cached(self, key, builder: Callable[[], T]) -> T:
        if self._cache_version != self.store.version:
            self._cache.clear()
            self._cache_version = self.store.version
        if key not in self._cache:
            logger.debug("rebuilding %s at store version %d", key, self.store.version)
            self._cache[key] = builder()
        return self._cache[key]

    def _attempt(self, action: str, fn: Callable[[], T]) -> Result:
        try:
            return fn(), None
        except LedgerError as e:
            logger.warning("%s rejected: %s", action, e)
            return None, e

    # ---- 只读视图 ----

    def get_derived_loans(self) -> List[Loan]:
        loans = self._cached("loans", lambda: derive_loans(
            self.store.list_loans(), self.store.list_collections()))
        return [copy.copy(loan) for loan in loans]

    def get_loan(self, loan_id: str) -> Loan:
        for loan in self.get_derived_loans():
            if loan.id == loan_id:
                return loan
        raise NotFoundError(f"Loan {loan_id} not found")

    def get_ledger(self) -> List[LedgerRow]:
        rows = self._cached("ledger", lambda: build_ledger(
            self.store.list_funds(), self.store.list_loans(), self.store.list_collections()))
        return [copy.copy(row) for row in rows]

    def get_ledger_summary(self) -> dict:
        return summarize_ledger(self.get_ledger())

    def get_aggregate_report(self, as_of: Optional[date] = None) -> AggregateReport:
        as_of = as_of or date.today()
        return self._cached(("report", as_of), lambda: compute_aggregates(
            self.get_derived_loans(),
            self.store.list_collections(),
            self.store.list_funds(),
            as_of,
            self.near_closing_days,
            self.payment_delay_days,
        ))

    def get_loan_cash_flow(self, loan_id: str) -> Result:
        return self._attempt("cash flow", lambda: loan_cash_flow(
            self.get_loan(loan_id), self.store.list_collections()))

    def list_collections(self) -> List[Collection]:
        return self.store.list_collections()

    def list_funds(self) -> List[Fund]:
        return self.store.list_funds()

    # ---- 写操作 ----

    def _derive_one(self, loan_id: str) -> Loan:
        return derive_loan(self.store.get_loan(loan_id), self.store.list_collections())

    def add_loan(self, record) -> Result:
        def _add():
            loan = self.store.insert_loan(record)
            return self._derive_one(loan.id)
        return self._attempt("add loan", _add)

    def update_loan(self, loan_id: str, partial: Mapping) -> Result:
        def _update():
            self.store.update_loan(loan_id, partial)
            return self._derive_one(loan_id)
        return self._attempt("update loan", _update)

    def toggle_loan(self, loan_id: str) -> Result:
        def _toggle():
            self.store.toggle_loan(loan_id)
            return self._derive_one(loan_id)
        return self._attempt("toggle loan", _toggle)

    def delete_loan(self, loan_id: str) -> Result:
        return self._attempt("delete loan", lambda: self.store.delete_loan(loan_id))

    def add_collection(self, record) -> Result:
        return self._attempt("add collection", lambda: self.store.insert_collection(record))

    def add_fund(self, record) -> Result:
        return self._attempt("add fund", lambda: self.store.insert_fund(record))

    def set_initial_balance(self, amount: float, on: Optional[date] = None) -> Result:
        """录入期初余额，已存在时拒绝"""
        return self.add_fund({
            "id": generate_initial_fund_id(),
            "date": on or date.today(),
            "description": INITIAL_BALANCE_DESCRIPTION,
            "inflow": amount,
            "outflow": 0,
        })

    def submit_bulk_collection(
        self,
        loan_id: str,
        mode: str,
        amount: Optional[float] = None,
        collected_by: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> Result:
        """整笔收款：先按当前余额生成收款记录，再写入仓库"""
        def _submit():
            collection = resolve_bulk_collection(
                self.get_loan(loan_id),
                mode,
                custom_amount=amount,
                collected_by=collected_by or self.default_collector,
                remarks=remarks,
            )
            return self.store.insert_collection(collection)
        return self._attempt("bulk collection", _submit)
