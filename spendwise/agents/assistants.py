"""
AI Assistants for SpendWise

DESIGN DECISION: The AI only ever pre-fills the form.

CRITICAL BOUNDARIES:

1. RECEIPT ANALYSIS:
   - CAN: Read amount, date and a short description off a receipt photo
   - MUST: Return a sensible default for any field it cannot read
     (amount 0, today's date, "N/A") instead of failing the call
   - CANNOT: Save anything

2. CATEGORY SUGGESTION:
   - CAN: Pick one label from the category registry for a description
   - CANNOT: Invent a category (the caller ignores unknown labels)
   - CANNOT: Save anything

A call fails (AssistantUnavailableError) only when the model cannot be
reached or errors out. Odd or incomplete answers are not errors.
No retries here: the user decides whether to try again.
"""

import json
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from spendwise.config import get_settings
from spendwise.models.category import category_labels
from spendwise.services.image import ReceiptImage


logger = structlog.get_logger(__name__)

NOTES_PLACEHOLDER = "N/A"


class AssistantError(Exception):
    """Base exception for AI assistant errors."""
    pass


class AssistantUnavailableError(AssistantError):
    """The model could not be reached or returned an error."""

    def __init__(self, assistant: str, message: str):
        self.assistant = assistant
        super().__init__(message)


class ReceiptAnalysis(BaseModel):
    """
    Fields read off a receipt.

    The date is kept as the raw string the model returned;
    the form decides what to do if it does not parse.
    """

    amount: Decimal = Field(default=Decimal("0"), ge=0)
    date: str = Field(default_factory=lambda: date.today().isoformat())
    notes: str = NOTES_PLACEHOLDER


class CategorySuggestion(BaseModel):
    """AI's suggestion for an expense category (a registry label)."""

    category: str = ""


def _extract_json(text: str) -> Optional[dict]:
    """Find and parse the first JSON object in a model response."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        return None
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _response_text(response: Any) -> str:
    """Text of a model response; blocked or empty responses give ''."""
    try:
        return (response.text or "").strip()
    except (ValueError, AttributeError):
        # Raised by the SDK when the response has no text part
        return ""


def _parse_amount(value: Any) -> Decimal:
    """Lenient amount parsing; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, str):
        value = re.sub(r"[^0-9.\-]", "", value.replace(",", ""))
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return amount


class _GeminiAgent:
    """Shared model setup for the assistants."""

    name = "assistant"
    max_output_tokens: Optional[int] = None

    def __init__(self, model: Optional[Any] = None):
        """
        Args:
            model: Object with an async generate_content_async(); a Gemini
                   GenerativeModel is created from settings if omitted.
        """
        self._model = model if model is not None else self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        settings = get_settings().gemini
        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": self.max_output_tokens or settings.max_tokens,
                "response_mime_type": "application/json",
            },
        )

    async def _generate(self, contents: Any) -> str:
        try:
            response = await self._model.generate_content_async(contents)
        except Exception as e:
            logger.error("assistant_call_failed", assistant=self.name, error=str(e))
            raise AssistantUnavailableError(self.name, f"{self.name} request failed: {e}") from e
        return _response_text(response)


class ReceiptAnalysisAgent(_GeminiAgent):
    """Extracts amount, date and notes from a receipt photo."""

    name = "receipt_analysis"
    max_output_tokens = 256

    def _build_prompt(self, today: date) -> str:
        return f"""You are an expert receipt analyzer. Analyze the attached receipt image and extract:
- the total amount paid,
- the date of the purchase in YYYY-MM-DD format,
- a brief summary of the items purchased or the vendor, for the notes (max 100 characters).

If you cannot determine a value, use a sensible default: 0 for the amount, {today.isoformat()} for the date, or "{NOTES_PLACEHOLDER}" for the notes.

Respond with ONLY a JSON object in this exact format:
{{"amount": 12.5, "date": "YYYY-MM-DD", "notes": "brief description"}}"""

    async def analyze(self, image: ReceiptImage) -> ReceiptAnalysis:
        """
        Analyze a receipt image.

        Raises:
            AssistantUnavailableError: The model call itself failed
        """
        today = date.today()
        text = await self._generate([
            self._build_prompt(today),
            {"mime_type": image.mime_type, "data": image.data},
        ])

        data = _extract_json(text) or {}
        if not data:
            logger.warning("receipt_analysis_unparseable", response_preview=text[:200])

        raw_date = data.get("date")
        raw_notes = data.get("notes")

        return ReceiptAnalysis(
            amount=_parse_amount(data.get("amount")),
            date=str(raw_date).strip() if raw_date else today.isoformat(),
            notes=str(raw_notes).strip() if raw_notes and str(raw_notes).strip() else NOTES_PLACEHOLDER,
        )


class CategorySuggestionAgent(_GeminiAgent):
    """Suggests one registry label for a free-text description."""

    name = "category_suggestion"
    max_output_tokens = 64

    def _build_prompt(self, description: str) -> str:
        labels = category_labels()
        return f"""Given the following expense description, suggest an appropriate category for the expense from the available options.

Description: {description}

Available categories: {', '.join(labels)}

Respond with ONLY a JSON object in this exact format:
{{"category": "{labels[0]}"}}

If unsure, use "{labels[-1]}"."""

    async def suggest(self, description: str) -> CategorySuggestion:
        """
        Suggest a category label for a description.

        The label is returned as given by the model; mapping it to a
        registry value (and rejecting unknown labels) is up to the caller.

        Raises:
            AssistantUnavailableError: The model call itself failed
        """
        text = await self._generate(self._build_prompt(description))

        data = _extract_json(text)
        if data is not None:
            label = data.get("category")
            return CategorySuggestion(category=str(label).strip() if label else "")

        # Bare-label answers such as "Food." are still usable
        return CategorySuggestion(category=text.strip().strip('."\'').strip())
