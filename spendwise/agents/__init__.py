"""AI assistants package."""

from spendwise.agents.assistants import (
    NOTES_PLACEHOLDER,
    AssistantError,
    AssistantUnavailableError,
    CategorySuggestion,
    CategorySuggestionAgent,
    ReceiptAnalysis,
    ReceiptAnalysisAgent,
)

__all__ = [
    "NOTES_PLACEHOLDER",
    "AssistantError",
    "AssistantUnavailableError",
    "CategorySuggestion",
    "CategorySuggestionAgent",
    "ReceiptAnalysis",
    "ReceiptAnalysisAgent",
]
