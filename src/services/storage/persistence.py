"""
Persistence Adapter

Bridges the in-memory ExpenseStore to an optional KeyValueStore.

DESIGN DECISION: Persistence is BEST EFFORT.
- Loading falls back to defaults on any failure
- Saving is fire-and-forget, never raises and never blocks the caller
- Failures are logged (audit trail) but never shown to the user

Saves are coalesced: at most one save is queued at a time, and it writes
the store's snapshot as it is WHEN THE WRITE HAPPENS. Ten quick mutations
therefore produce at most two writes, and the last one always wins.
"""

import asyncio
import json
import threading
from typing import Optional

from pydantic import ValidationError as SchemaError

from src.audit import AuditLogger
from src.models.expense import ExpenseRecord, ExpenseSnapshot
from src.services.storage.interface import KeyValueStore, PersistenceError
from src.store import ExpenseStore
from src.validation import ExpenseValidator


EXPENSES_KEY = "budget-expenses"
BUDGET_KEY = "budget-limit"


def serialize_expenses(snapshot: ExpenseSnapshot) -> str:
    return json.dumps(
        [record.to_storage_dict() for record in snapshot.records],
        ensure_ascii=False,
    )


def deserialize_expenses(raw: str) -> list[ExpenseRecord]:
    """
    Parse the stored expense list.

    Raises:
        PersistenceError: not a JSON list of valid records
    """
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise PersistenceError("Stored expenses are not a list")
        return [ExpenseRecord.model_validate(item) for item in data]
    except (json.JSONDecodeError, SchemaError, TypeError) as e:
        raise PersistenceError(f"Stored expenses are unreadable: {e}")


class PersistenceAdapter:
    """
    Loads and saves ExpenseStore state through a KeyValueStore.

    With no backend every operation is a no-op and the session is
    purely in-memory.
    """

    def __init__(
        self,
        backend: Optional[KeyValueStore] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._audit_logger = audit_logger
        self._store: Optional[ExpenseStore] = None
        self._save_requested = False
        self._draining = False
        self._lock = threading.Lock()
        self._worker: Optional[asyncio.Task] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def enabled(self) -> bool:
        return self._backend is not None

    def _report_failure(self, operation: str, error: Exception) -> None:
        if self._audit_logger:
            self._audit_logger.log_persistence_failed(operation, str(error))

    async def load(self, store: ExpenseStore) -> bool:
        """
        Restore saved records and budget into the store.

        A missing key keeps the store's default for that value. Any read or
        decode failure leaves the store untouched.

        Returns:
            True if anything was restored
        """
        if self._backend is None:
            return False

        try:
            raw_expenses = await self._backend.get(EXPENSES_KEY)
            raw_budget = await self._backend.get(BUDGET_KEY)

            records = deserialize_expenses(raw_expenses) if raw_expenses else None
            budget = ExpenseValidator().parse_budget(raw_budget) if raw_budget else None
        except Exception as e:
            self._report_failure("load", e)
            return False

        if records is None and budget is None:
            return False

        store.replace_all(records if records is not None else store.records, budget)
        if self._audit_logger:
            self._audit_logger.log_state_loaded(len(store), str(store.budget))
        return True

    async def save(self, store: ExpenseStore) -> bool:
        """
        Write the store's current state. Never raises.

        Returns:
            True if both keys were written
        """
        if self._backend is None:
            return False

        snapshot = store.snapshot()
        try:
            await self._backend.set(EXPENSES_KEY, serialize_expenses(snapshot))
            await self._backend.set(BUDGET_KEY, str(snapshot.budget))
            return True
        except Exception as e:
            self._report_failure("save", e)
            return False

    def schedule_save(self, store: ExpenseStore) -> None:
        """
        Fire-and-forget save after a mutation. Returns immediately.

        Inside a running event loop the save runs as a background task.
        Without a loop (e.g. a Streamlit script run) it runs on a daemon
        thread, so a slow backend never blocks the caller. Either way it
        coalesces with any save already queued.
        """
        if self._backend is None:
            return

        with self._lock:
            self._store = store
            self._save_requested = True
            if self._draining and self._worker_alive():
                return
            self._draining = True

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            self._thread = threading.Thread(
                target=asyncio.run,
                args=(self._drain(),),
                name="budget-tracker-save",
                daemon=True,
            )
            self._thread.start()
        else:
            self._worker = loop.create_task(self._drain())

    def _worker_alive(self) -> bool:
        if self._worker is not None and not self._worker.done():
            return True
        return self._thread is not None and self._thread.is_alive()

    async def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._save_requested or self._store is None:
                    self._draining = False
                    return
                self._save_requested = False
                store = self._store
            await self.save(store)

    def join(self, timeout: Optional[float] = None) -> None:
        """Block until a save running on the background thread finishes."""
        if self._thread is not None:
            self._thread.join(timeout)

    async def flush(self) -> None:
        """Wait for any queued background save to finish."""
        if self._worker is not None:
            await self._worker
        if self._thread is not None and self._thread.is_alive():
            await asyncio.get_running_loop().run_in_executor(None, self._thread.join)
