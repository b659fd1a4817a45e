"""记录仓库测试"""
from datetime import date

import pytest

from core.exceptions import InvalidStateError, NotFoundError, PersistenceError, ValidationError
from core.ledger_service import LedgerService
from data_manager import excel_handler
from data_manager.record_store import ExcelRecordStore, RecordStore


@pytest.fixture
def store(make_loan):
    s = RecordStore()
    s.insert_loan(make_loan())
    return s


class TestLoans:
    def test_insert_from_mapping_defaults_net_given(self):
        s = RecordStore()
        loan = s.insert_loan({
            "id": "L9", "customer_name": "赵六", "date": "2024-03-01",
            "loan_amount": 5000, "deduction": 300, "daily_pay": 50, "days": 100,
        })
        assert loan.net_given == 4700
        assert loan.date == date(2024, 3, 1)
        assert s.version == 1

    def test_duplicate_id(self, store, make_loan):
        with pytest.raises(InvalidStateError):
            store.insert_loan(make_loan())
        assert store.version == 1

    def test_invalid_loan(self, make_loan):
        s = RecordStore()
        with pytest.raises(ValidationError) as exc:
            s.insert_loan(make_loan(customer_name=""))
        assert exc.value.field == "customer_name"
        assert s.loans == {}
        assert s.version == 0

    def test_update_keeps_id(self, store):
        loan = store.update_loan("L1", {"id": "X", "daily_pay": 200, "balance": 1})
        assert loan.id == "L1"
        assert loan.daily_pay == 200
        assert "X" not in store.loans

    def test_update_invalid_leaves_state(self, store):
        with pytest.raises(ValidationError):
            store.update_loan("L1", {"loan_amount": -1})
        assert store.get_loan("L1").loan_amount == 10000
        assert store.version == 1

    def test_update_missing(self, store):
        with pytest.raises(NotFoundError):
            store.update_loan("nope", {"days": 1})

    def test_toggle(self, store):
        assert store.toggle_loan("L1").is_disabled is True
        assert store.toggle_loan("L1").is_disabled is False
        assert store.version == 3

    def test_reads_are_copies(self, store):
        store.list_loans()[0].loan_amount = 1
        assert store.get_loan("L1").loan_amount == 10000


class TestCascadeDelete:
    def test_delete_removes_collections(self, store, make_loan):
        store.insert_loan(make_loan(id="L2", customer_name="李四"))
        store.insert_collection({"loan_id": "L1", "amount_paid": 100})
        store.insert_collection({"loan_id": "L1", "amount_paid": 200})
        store.insert_collection({"loan_id": "L2", "amount_paid": 300})

        removed = store.delete_loan("L1")
        assert removed == 2
        assert "L1" not in store.loans
        assert [c.loan_id for c in store.list_collections()] == ["L2"]
        assert all(c.loan_id in store.loans for c in store.list_collections())

    def test_delete_missing(self, store):
        with pytest.raises(NotFoundError):
            store.delete_loan("nope")
        assert store.version == 1


class TestCollections:
    def test_customer_defaults_to_loan(self, store):
        c = store.insert_collection({"loan_id": "L1", "amount_paid": 100})
        assert c.customer == "张三"
        assert c.id.startswith("col-")

    def test_duplicate_id(self, store):
        store.insert_collection({"id": "c1", "loan_id": "L1", "amount_paid": 100})
        with pytest.raises(InvalidStateError):
            store.insert_collection({"id": "c1", "loan_id": "L1", "amount_paid": 200})
        assert [c.id for c in store.list_collections()] == ["c1"]
        assert store.version == 2

    def test_unknown_loan(self, store):
        with pytest.raises(InvalidStateError):
            store.insert_collection({"loan_id": "L9", "amount_paid": 100})
        assert store.list_collections() == []

    def test_non_positive_amount(self, store):
        with pytest.raises(ValidationError):
            store.insert_collection({"loan_id": "L1", "amount_paid": 0})
        assert store.version == 1


class TestFunds:
    def test_balances_recomputed_in_date_order(self):
        s = RecordStore()
        s.insert_fund({"date": "2024-01-05", "description": "Rent", "outflow": 1000})
        s.insert_fund({"date": "2024-01-01", "description": "Initial Balance", "inflow": 5000, "balance": 99})
        funds = s.list_funds()
        assert [f.description for f in funds] == ["Initial Balance", "Rent"]
        assert [f.balance for f in funds] == [5000, 4000]

    def test_second_initial_balance_rejected(self):
        s = RecordStore()
        s.insert_fund({"description": "Initial Balance", "inflow": 5000})
        with pytest.raises(InvalidStateError):
            s.insert_fund({"description": "Initial Balance", "inflow": 100})
        assert len(s.list_funds()) == 1
        assert s.has_initial_balance()

    def test_duplicate_id(self):
        s = RecordStore()
        s.insert_fund({"id": "f1", "description": "Capital", "inflow": 100})
        with pytest.raises(InvalidStateError):
            s.insert_fund({"id": "f1", "description": "Rent", "outflow": 50})
        assert [f.description for f in s.list_funds()] == ["Capital"]

    def test_empty_fund_rejected(self):
        s = RecordStore()
        with pytest.raises(ValidationError):
            s.insert_fund({"description": "Nothing"})


class TestSubscribe:
    def test_listener_called_after_commit(self, store):
        events = []
        unsubscribe = store.subscribe(lambda event, payload: events.append((event, store.version)))
        store.insert_collection({"loan_id": "L1", "amount_paid": 100})
        assert events == [("collection_added", 2)]

        unsubscribe()
        store.toggle_loan("L1")
        assert len(events) == 1

    def test_listener_not_called_on_failure(self, store):
        events = []
        store.subscribe(lambda event, payload: events.append(event))
        with pytest.raises(InvalidStateError):
            store.insert_collection({"loan_id": "L9", "amount_paid": 100})
        assert events == []


class TestExcelRecordStore:
    def test_round_trip(self, tmp_path, make_loan):
        path = tmp_path / "ledger.xlsx"
        s = ExcelRecordStore(path)
        s.insert_loan(make_loan())
        s.insert_collection({"loan_id": "L1", "amount_paid": 250, "date": "2024-01-02"})
        s.insert_fund({"description": "Initial Balance", "inflow": 50000, "date": "2024-01-01"})

        reloaded = ExcelRecordStore(path)
        loan = reloaded.get_loan("L1")
        assert loan.customer_name == "张三"
        assert loan.date == date(2024, 1, 1)
        assert loan.is_disabled is False
        assert [c.amount_paid for c in reloaded.list_collections()] == [250]
        assert reloaded.list_funds()[0].balance == 50000
        assert reloaded.version == 0

    def test_cascade_persisted(self, tmp_path, make_loan):
        path = tmp_path / "ledger.xlsx"
        s = ExcelRecordStore(path)
        s.insert_loan(make_loan())
        s.insert_collection({"loan_id": "L1", "amount_paid": 250})
        s.delete_loan("L1")

        reloaded = ExcelRecordStore(path)
        assert reloaded.list_loans() == []
        assert reloaded.list_collections() == []


class TestFailedSave:
    @pytest.fixture
    def locked(self, monkeypatch):
        def _raise(*args, **kwargs):
            raise PermissionError("workbook locked")
        return lambda name: monkeypatch.setattr(excel_handler, name, _raise)

    def test_insert_rolled_back(self, tmp_path, make_loan, locked):
        path = tmp_path / "ledger.xlsx"
        s = ExcelRecordStore(path)
        events = []
        s.subscribe(lambda event, payload: events.append(event))
        locked("write_loans")

        with pytest.raises(PersistenceError):
            s.insert_loan(make_loan())
        assert s.list_loans() == []
        assert s.version == 0
        assert events == []
        assert excel_handler.read_loan_rows(path) == []

    def test_cascade_delete_rolled_back(self, tmp_path, make_loan, locked):
        s = ExcelRecordStore(tmp_path / "ledger.xlsx")
        s.insert_loan(make_loan())
        s.insert_collection({"loan_id": "L1", "amount_paid": 250})
        locked("write_collections")

        with pytest.raises(PersistenceError):
            s.delete_loan("L1")
        assert s.get_loan("L1").id == "L1"
        assert len(s.list_collections()) == 1
        assert s.version == 2
        assert [r["id"] for r in excel_handler.read_loan_rows(tmp_path / "ledger.xlsx")] == ["L1"]

    def test_fund_balances_restored(self, tmp_path, locked):
        s = ExcelRecordStore(tmp_path / "ledger.xlsx")
        s.insert_fund({"description": "Initial Balance", "inflow": 5000, "date": "2024-01-02"})
        locked("write_funds")

        with pytest.raises(PersistenceError):
            s.insert_fund({"description": "Capital", "inflow": 1000, "date": "2024-01-01"})
        assert [(f.description, f.balance) for f in s.list_funds()] == [("Initial Balance", 5000)]

    def test_service_returns_error(self, tmp_path, make_loan, locked):
        service = LedgerService(ExcelRecordStore(tmp_path / "ledger.xlsx"))
        locked("write_loans")

        loan, error = service.add_loan(make_loan())
        assert loan is None
        assert isinstance(error, PersistenceError)
        assert service.get_derived_loans() == []
        assert service.store.version == 0
