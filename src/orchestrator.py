"""
Main Orchestrator for Budget Tracker

This module ties the components together and defines the two flows the
UI drives:
1. Expense flow (intent -> store mutation -> recompute -> background save)
2. Advisory flow (question -> summary -> remote model -> answer or failure)

DESIGN DECISION: All application state lives in ONE explicit object,
BudgetTracker, and is changed only through its methods. The UI holds a
reference to it and never touches the store directly.

Nothing here raises to the UI:
- bad input becomes a Notice
- remote failures become an AdvisoryOutcome
- storage failures are logged and ignored
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel

from src.agents import AdvisoryAgent, compose_summary
from src.analytics import build_analytics
from src.audit import AuditLogger
from src.config import AppSettings, get_settings
from src.models.advisory import AdvisoryOutcome, AdvisoryState
from src.models.analytics import AnalyticsSnapshot
from src.models.expense import DEFAULT_CATEGORY, ExpenseRecord
from src.services.llm import (
    AdvisoryError,
    CompletionClient,
    ConfigurationError,
    EmptyResponseError,
    GeminiCompletionClient,
    NetworkError,
    ProxyCompletionClient,
)
from src.services.storage import KeyValueStore, PersistenceAdapter
from src.store import ExpenseStore
from src.validation import ExpenseValidator, ValidationError


NETWORK_ERROR_MESSAGE = "Network error. Please try again."
EMPTY_RESPONSE_MESSAGE = "Sorry, I couldn't get a response."
NOT_CONFIGURED_MESSAGE = "The AI advisor is not configured yet."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."
UNEXPECTED_ERROR_KIND = "unknown"


def user_message_for(error: AdvisoryError) -> str:
    """What the advisory panel shows for each failure kind."""
    if isinstance(error, NetworkError):
        return NETWORK_ERROR_MESSAGE
    if isinstance(error, EmptyResponseError):
        return EMPTY_RESPONSE_MESSAGE
    if isinstance(error, ConfigurationError):
        return NOT_CONFIGURED_MESSAGE
    return error.message


class View(str, Enum):
    """Dashboard tabs."""
    DASHBOARD = "dashboard"
    ADD = "add"
    AI = "ai"
    HISTORY = "history"


class Notice(BaseModel):
    """Transient toast shown after a user action."""

    message: str
    kind: str = "success"  # success | error | info


class AdvisoryFlow:
    """
    Runs advisory requests and owns what the advisory panel displays.

    Every request gets a sequence number. Requests are never cancelled,
    but only the NEWEST one may update the displayed message; an older
    request finishing late is discarded (returned with stale=True).
    """

    def __init__(
        self,
        agent: AdvisoryAgent,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._agent = agent
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().app
        self._validator = ExpenseValidator()
        self._sequence = 0
        self._state = AdvisoryState.IDLE
        self._message = ""
        self._last_outcome: Optional[AdvisoryOutcome] = None

    @property
    def state(self) -> AdvisoryState:
        return self._state

    @property
    def message(self) -> str:
        return self._message

    @property
    def loading(self) -> bool:
        return self._state in (AdvisoryState.COMPOSING, AdvisoryState.AWAITING_RESPONSE)

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    @property
    def last_outcome(self) -> Optional[AdvisoryOutcome]:
        return self._last_outcome

    def reset(self) -> None:
        """Back to Idle (the panel was dismissed)."""
        self._state = AdvisoryState.IDLE
        self._message = ""

    def compose(self, store: ExpenseStore, today: Optional[date] = None) -> str:
        snapshot = store.snapshot()
        analytics = build_analytics(
            snapshot,
            today=today,
            trend_months=self._settings.trend_months,
        )
        return compose_summary(snapshot, analytics.category_breakdown, analytics.monthly_trend)

    async def ask(
        self,
        question: Optional[str],
        store: ExpenseStore,
        today: Optional[date] = None,
    ) -> Optional[AdvisoryOutcome]:
        """
        Ask the advisor about the store's current numbers.

        Returns None (and sends nothing) for a blank question.
        """
        cleaned = self._validator.clean_question(question)
        if cleaned is None:
            return None

        self._sequence += 1
        sequence = self._sequence
        self._state = AdvisoryState.COMPOSING
        self._message = ""
        if self._audit_logger:
            self._audit_logger.log_advice_requested(sequence, len(cleaned))

        try:
            summary = self.compose(store, today)
            self._state = AdvisoryState.AWAITING_RESPONSE
            answer = await self._agent.ask(cleaned, summary)
            outcome = AdvisoryOutcome(
                sequence=sequence,
                question=cleaned,
                answer=answer.text,
                message=answer.text,
            )
        except AdvisoryError as e:
            outcome = AdvisoryOutcome(
                sequence=sequence,
                question=cleaned,
                error_kind=e.kind,
                message=user_message_for(e),
            )
            if self._audit_logger:
                self._audit_logger.log_advice_failed(sequence, e.kind, e.message)
        except Exception as e:
            outcome = AdvisoryOutcome(
                sequence=sequence,
                question=cleaned,
                error_kind=UNEXPECTED_ERROR_KIND,
                message=UNEXPECTED_ERROR_MESSAGE,
            )
            if self._audit_logger:
                self._audit_logger.log_advice_failed(
                    sequence, UNEXPECTED_ERROR_KIND, f"{type(e).__name__}: {e}"
                )

        if sequence != self._sequence:
            if self._audit_logger:
                self._audit_logger.log_advice_discarded(sequence, self._sequence)
            return outcome.model_copy(update={"stale": True})

        if outcome.ok and self._audit_logger:
            self._audit_logger.log_advice_answered(sequence, len(outcome.message))

        self._state = AdvisoryState.ANSWERED if outcome.ok else AdvisoryState.FAILED
        self._message = outcome.message
        self._last_outcome = outcome
        return outcome


class BudgetTracker:
    """
    The application-state controller.

    Owns the expense store, the current view and the last notice, and
    wires mutations to persistence and the audit log.
    """

    def __init__(
        self,
        store: Optional[ExpenseStore] = None,
        persistence: Optional[PersistenceAdapter] = None,
        advisory_flow: Optional[AdvisoryFlow] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        self._settings = settings or get_settings().app
        self._audit_logger = audit_logger or AuditLogger()
        self._today = today
        if store is None:
            store = ExpenseStore(budget=self._settings.default_budget, today=today)
        self.store = store
        self._persistence = persistence or PersistenceAdapter(audit_logger=self._audit_logger)
        self.advisory = advisory_flow or AdvisoryFlow(
            AdvisoryAgent(),
            audit_logger=self._audit_logger,
            settings=self._settings,
        )
        self.view = View.DASHBOARD
        self._notice: Optional[Notice] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def load(self) -> bool:
        """Restore persisted state (if any) at session start."""
        return await self._persistence.load(self.store)

    async def flush(self) -> None:
        await self._persistence.flush()

    def wait_for_saves(self, timeout: Optional[float] = None) -> None:
        """Block until a background save started outside an event loop finishes."""
        self._persistence.join(timeout)

    def _saved(self) -> None:
        self._persistence.schedule_save(self.store)

    # -------------------------------------------------------------------------
    # Notices and navigation
    # -------------------------------------------------------------------------

    @property
    def notice(self) -> Optional[Notice]:
        return self._notice

    def pop_notice(self) -> Optional[Notice]:
        notice, self._notice = self._notice, None
        return notice

    def set_view(self, view: Any) -> None:
        self.view = View(view)

    # -------------------------------------------------------------------------
    # User intents
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        amount: Any,
        category: Optional[str] = DEFAULT_CATEGORY,
        note: Optional[str] = "",
        expense_date: Optional[date] = None,
    ) -> Optional[ExpenseRecord]:
        """Add an expense; on bad input leave a notice and return None."""
        try:
            record = self.store.add_expense(amount, category, note, expense_date)
        except ValidationError as e:
            self._audit_logger.log_expense_rejected(e.field, e.message)
            self._notice = Notice(message=e.message, kind="error")
            return None

        self._audit_logger.log_expense_added(record.id, str(record.amount), record.category)
        self._notice = Notice(message="Expense added!")
        self.view = View.DASHBOARD
        self._saved()
        return record

    def delete_expense(self, expense_id: int) -> bool:
        removed = self.store.delete_expense(expense_id)
        self._audit_logger.log_expense_deleted(expense_id, removed)
        self._notice = Notice(message="Deleted", kind="info")
        if removed:
            self._saved()
        return removed

    def set_budget(self, value: Any) -> bool:
        try:
            self.store.set_budget(value)
        except ValidationError as e:
            self._notice = Notice(message=e.message, kind="error")
            return False

        self._audit_logger.log_budget_updated(str(self.store.budget))
        self._notice = Notice(message="Budget updated!")
        self._saved()
        return True

    async def ask(self, question: Optional[str]) -> Optional[AdvisoryOutcome]:
        return await self.advisory.ask(question, self.store, self._today())

    # -------------------------------------------------------------------------
    # View-model
    # -------------------------------------------------------------------------

    def analytics(self, today: Optional[date] = None) -> AnalyticsSnapshot:
        """Recomputed on every call; never cached across mutations."""
        return build_analytics(
            self.store.snapshot(),
            today=today or self._today(),
            recent_limit=self._settings.recent_limit,
            trend_months=self._settings.trend_months,
            danger_threshold_percent=Decimal(self._settings.danger_threshold_percent),
        )


def _build_completion_client() -> CompletionClient:
    """Use the proxy when one is configured, otherwise call Gemini directly."""
    if get_settings().proxy.url:
        return ProxyCompletionClient()
    return GeminiCompletionClient()


def _build_storage_backend(audit_logger: AuditLogger) -> Optional[KeyValueStore]:
    try:
        from src.services.storage.google_sheets import GoogleSheetsKeyValueStore
        return GoogleSheetsKeyValueStore()
    except Exception as e:
        # Storage not configured - continue in memory
        audit_logger.log_persistence_failed("connect", str(e))
        return None


def create_app_components(
    use_storage: bool = True,
    backend: Optional[KeyValueStore] = None,
    client: Optional[CompletionClient] = None,
) -> BudgetTracker:
    """
    Factory function to build a ready-to-use BudgetTracker.

    Args:
        use_storage: Whether to try the Google Sheets backend.
                    Set to False for a purely in-memory session.
        backend: Explicit KeyValueStore (wins over use_storage)
        client: Explicit CompletionClient (default: proxy or Gemini)
    """
    settings = get_settings().app
    audit_logger = AuditLogger()

    if backend is None and use_storage:
        backend = _build_storage_backend(audit_logger)

    persistence = PersistenceAdapter(backend, audit_logger=audit_logger)
    agent = AdvisoryAgent(client or _build_completion_client())
    advisory_flow = AdvisoryFlow(agent, audit_logger=audit_logger, settings=settings)

    return BudgetTracker(
        persistence=persistence,
        advisory_flow=advisory_flow,
        audit_logger=audit_logger,
        settings=settings,
    )
