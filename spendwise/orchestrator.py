"""
Main Orchestrator for SpendWise

This module ties together the components and defines the expense form
flow as an explicit state machine:

    CLOSED ──open_new()──▶ CREATING ──submit() ok / cancel()──▶ CLOSED
    CLOSED ──open_edit()─▶ EDITING  ──submit() ok / cancel()──▶ CLOSED

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is saved unless it passes validation on submit
- AI helpers only fill in form fields, they never save
- A helper answer that arrives after the form was closed or switched
  to another record is discarded, not applied to the wrong form

The UI layer only dispatches user intents into this controller.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from spendwise.agents import (
    AssistantUnavailableError,
    CategorySuggestionAgent,
    ReceiptAnalysisAgent,
)
from spendwise.audit import AuditLogger, create_correlation_id
from spendwise.config import get_settings
from spendwise.models.category import match_label
from spendwise.models.expense import (
    AssistOutcome,
    AssistStatus,
    Expense,
    ExpenseFormValues,
    FormMode,
    ValidationIssue,
    ValidationResult,
)
from spendwise.repository import ExpenseRepository
from spendwise.services.image import ReceiptImageError, encode_receipt_image
from spendwise.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    NotFoundError,
    PersistentStore,
)
from spendwise.validation import ExpenseValidator


RECEIPT_ACTION = "receipt_analysis"
SUGGEST_ACTION = "category_suggestion"


class FormStateError(Exception):
    """An action was dispatched in a state that does not allow it."""
    pass


def parse_receipt_date(raw: Optional[str], today: Optional[date] = None) -> date:
    """
    Parse the date returned by receipt analysis.

    Accepts YYYY-MM-DD or an ISO datetime. Anything else, or a date the
    form would not accept (in the future or before the minimum date),
    falls back to today rather than rejecting the whole analysis.
    """
    today = today or date.today()
    if not raw:
        return today
    raw = raw.strip()
    try:
        parsed = date.fromisoformat(raw)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            return today

    if parsed > today or parsed < get_settings().app.min_expense_date:
        return today
    return parsed


class ExpenseFormController:
    """
    Drives the add/edit expense form.

    Holds the form mode, the current (unvalidated) values, and a session
    id that changes every time the form is opened. AI helper results are
    only applied if the session they were requested in is still current.
    """

    def __init__(
        self,
        repository: ExpenseRepository,
        validator: Optional[ExpenseValidator] = None,
        receipt_agent: Optional[ReceiptAnalysisAgent] = None,
        category_agent: Optional[CategorySuggestionAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._validator = validator or ExpenseValidator()
        # Agents are created on first use, so the app runs without an AI key
        self._receipt_agent = receipt_agent
        self._category_agent = category_agent
        self._audit_logger = audit_logger or AuditLogger()
        self._app_settings = get_settings().app

        self._mode = FormMode.CLOSED
        self._values = ExpenseFormValues()
        self._editing_id: Optional[str] = None
        self._session_id: Optional[UUID] = None
        self._busy: set[str] = set()

        self.last_result: Optional[ValidationResult] = None
        self.last_saved: Optional[Expense] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def mode(self) -> FormMode:
        return self._mode

    @property
    def is_open(self) -> bool:
        return self._mode != FormMode.CLOSED

    @property
    def values(self) -> ExpenseFormValues:
        return self._values.model_copy()

    @property
    def editing_id(self) -> Optional[str]:
        return self._editing_id

    @property
    def session_id(self) -> Optional[UUID]:
        return self._session_id

    def is_busy(self, action: str) -> bool:
        return action in self._busy

    def _open(self, mode: FormMode, values: ExpenseFormValues, editing_id: Optional[str]) -> None:
        if self.is_open:
            raise FormStateError(f"Form is already open ({self._mode.value})")
        self._mode = mode
        self._values = values
        self._editing_id = editing_id
        self._session_id = create_correlation_id()
        self._busy = set()
        self.last_result = None

    def _close(self) -> None:
        self._mode = FormMode.CLOSED
        self._values = ExpenseFormValues()
        self._editing_id = None
        self._session_id = None
        self._busy = set()

    def _is_current(self, session_id: Optional[UUID]) -> bool:
        return self.is_open and session_id is not None and session_id == self._session_id

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def open_new(self) -> None:
        """CLOSED → CREATING with empty values and today's date."""
        self._open(FormMode.CREATING, ExpenseFormValues(), None)

    def open_edit(self, expense_id: str) -> None:
        """
        CLOSED → EDITING, pre-populated from the stored expense.

        Raises:
            NotFoundError: No expense with this id
        """
        expense = self._repository.get(expense_id)
        if expense is None:
            raise NotFoundError(f"No expense with id {expense_id}")
        self._open(FormMode.EDITING, ExpenseFormValues.from_expense(expense), expense.id)

    def cancel(self) -> None:
        """Any state → CLOSED. Pending helper results will be discarded."""
        self._close()

    def set_values(self, **changes) -> None:
        """
        Apply user edits to the form.

        Raises:
            FormStateError: The form is closed
            ValidationError: A value has the wrong type (e.g. a non-numeric amount)
        """
        if not self.is_open:
            raise FormStateError("Form is closed")
        for field, value in changes.items():
            if field not in ExpenseFormValues.model_fields:
                raise ValueError(f"Unknown form field: {field}")
            setattr(self._values, field, value)

    def submit(self) -> ValidationResult:
        """
        Validate and commit the form.

        Invalid values keep the form open. Valid values are added
        (CREATING) or replace the original record (EDITING), and the
        form closes.

        Raises:
            FormStateError: The form is closed
        """
        if not self.is_open:
            raise FormStateError("Cannot submit a closed form")

        result = self._validator.validate(self._values)
        self.last_result = result

        if not result.is_valid:
            self._audit_logger.log_validation_failed(
                issues=[
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in result.issues
                ],
                correlation_id=self._session_id,
            )
            return result

        if self._mode == FormMode.CREATING:
            saved = self._repository.add(result.draft, correlation_id=self._session_id)
        else:
            try:
                saved = self._repository.update(
                    Expense.from_draft(result.draft, expense_id=self._editing_id),
                    correlation_id=self._session_id,
                )
            except NotFoundError:
                # Deleted while the form was open; nothing left to edit
                self._close()
                result = ValidationResult.invalid([ValidationIssue(
                    field="form",
                    issue_type="not_found",
                    message="This expense no longer exists.",
                )])
                self.last_result = result
                return result

        self.last_saved = saved
        self._close()
        return result

    # -------------------------------------------------------------------------
    # AI helpers
    # -------------------------------------------------------------------------

    def _get_receipt_agent(self) -> ReceiptAnalysisAgent:
        if self._receipt_agent is None:
            self._receipt_agent = ReceiptAnalysisAgent()
        return self._receipt_agent

    def _get_category_agent(self) -> CategorySuggestionAgent:
        if self._category_agent is None:
            self._category_agent = CategorySuggestionAgent()
        return self._category_agent

    def _begin(self, action: str) -> Optional[AssistOutcome]:
        """Gate a helper request; returns an outcome if it must not be sent."""
        if not self.is_open:
            return AssistOutcome(
                status=AssistStatus.REJECTED,
                title="Form closed",
                message="Open the expense form first.",
            )
        if action in self._busy:
            return AssistOutcome(
                status=AssistStatus.REJECTED,
                title="Please wait",
                message="A request is already in progress.",
            )
        return None

    def _finish(self, action: str, session_id: UUID) -> None:
        if self._is_current(session_id):
            self._busy.discard(action)

    def _not_configured(self, action: str, error: Exception) -> AssistOutcome:
        self._audit_logger.log_assist_failed(action, str(error), self._session_id)
        return AssistOutcome(
            status=AssistStatus.FAILED,
            title="AI not configured",
            message="Set GEMINI_API_KEY to enable AI features.",
        )

    async def scan_receipt(self, image_bytes: bytes) -> AssistOutcome:
        """
        Pre-fill amount, date and notes from a receipt photo.

        Never saves. An unparseable date becomes today.
        """
        blocked = self._begin(RECEIPT_ACTION)
        if blocked:
            return blocked

        try:
            image = encode_receipt_image(image_bytes)
        except ReceiptImageError as e:
            return AssistOutcome(status=AssistStatus.REJECTED, title="Error", message=str(e))

        try:
            agent = self._get_receipt_agent()
        except ValidationError as e:
            return self._not_configured(RECEIPT_ACTION, e)

        session_id = self._session_id
        self._busy.add(RECEIPT_ACTION)
        try:
            analysis = await agent.analyze(image)
        except AssistantUnavailableError as e:
            if not self._is_current(session_id):
                self._audit_logger.log_assist_discarded(RECEIPT_ACTION, session_id)
                return AssistOutcome(status=AssistStatus.DISCARDED, title="Discarded")
            self._audit_logger.log_assist_failed(RECEIPT_ACTION, str(e), session_id)
            return AssistOutcome(
                status=AssistStatus.FAILED,
                title="Error",
                message="Failed to analyze the receipt.",
            )
        finally:
            self._finish(RECEIPT_ACTION, session_id)

        if not self._is_current(session_id):
            self._audit_logger.log_assist_discarded(RECEIPT_ACTION, session_id)
            return AssistOutcome(status=AssistStatus.DISCARDED, title="Discarded")

        self._values.amount = analysis.amount
        self._values.date = parse_receipt_date(analysis.date)
        self._values.notes = analysis.notes

        self._audit_logger.log_receipt_analyzed(
            mime_type=image.mime_type,
            size_bytes=image.size_bytes,
            correlation_id=session_id,
        )

        message = "We've pre-filled the form with the extracted details."
        if image.quality_issues:
            message += " " + " ".join(image.quality_issues) + "; please double-check."
        return AssistOutcome(status=AssistStatus.APPLIED, title="Receipt Analyzed!", message=message)

    async def suggest_category(self) -> AssistOutcome:
        """
        Set the category from an AI suggestion based on the notes.

        The suggested label must match a registry label (case-insensitive);
        otherwise the category is left as it was.
        """
        blocked = self._begin(SUGGEST_ACTION)
        if blocked:
            return blocked

        notes = self._values.notes.strip()
        if len(notes) < self._app_settings.suggestion_min_chars:
            return AssistOutcome(
                status=AssistStatus.REJECTED,
                title="Oh-oh!",
                message="Please enter a more descriptive note to get a suggestion.",
            )

        try:
            agent = self._get_category_agent()
        except ValidationError as e:
            return self._not_configured(SUGGEST_ACTION, e)

        session_id = self._session_id
        self._busy.add(SUGGEST_ACTION)
        try:
            suggestion = await agent.suggest(notes)
        except AssistantUnavailableError as e:
            if not self._is_current(session_id):
                self._audit_logger.log_assist_discarded(SUGGEST_ACTION, session_id)
                return AssistOutcome(status=AssistStatus.DISCARDED, title="Discarded")
            self._audit_logger.log_assist_failed(SUGGEST_ACTION, str(e), session_id)
            return AssistOutcome(
                status=AssistStatus.FAILED,
                title="Error",
                message="Failed to get an AI suggestion.",
            )
        finally:
            self._finish(SUGGEST_ACTION, session_id)

        if not self._is_current(session_id):
            self._audit_logger.log_assist_discarded(SUGGEST_ACTION, session_id)
            return AssistOutcome(status=AssistStatus.DISCARDED, title="Discarded")

        category = match_label(suggestion.category)
        self._audit_logger.log_category_suggested(
            suggested_label=suggestion.category,
            applied=category is not None,
            correlation_id=session_id,
        )
        if category is None:
            return AssistOutcome(
                status=AssistStatus.NOT_APPLIED,
                title="Suggestion unclear",
                message="We couldn't find a matching category.",
            )

        self._values.category = category.value.value
        return AssistOutcome(
            status=AssistStatus.APPLIED,
            title="Suggestion applied!",
            message=f'We\'ve set the category to "{category.label}".',
        )


def create_app_components(
    use_file_storage: bool = True,
    backend: Optional[KeyValueStore] = None,
) -> tuple[ExpenseRepository, ExpenseFormController, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        use_file_storage: Store expenses in the configured JSON file.
                          Set to False for an in-memory session.
        backend: Explicit storage backend (overrides use_file_storage)

    Returns:
        (repository, form_controller, audit_logger)
    """
    settings = get_settings()
    audit_logger = AuditLogger()

    if backend is None:
        if use_file_storage:
            backend = JsonFileKeyValueStore(settings.storage.data_path)
        else:
            backend = InMemoryKeyValueStore()

    store = PersistentStore(backend, audit_logger=audit_logger)
    repository = ExpenseRepository(
        store,
        storage_key=settings.storage.expenses_key,
        audit_logger=audit_logger,
    )
    controller = ExpenseFormController(repository, audit_logger=audit_logger)

    return repository, controller, audit_logger
