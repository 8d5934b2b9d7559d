"""
Advisory Agent for Budget Tracker

DESIGN DECISION: The model is GROUNDED in a deterministic summary.
compose_summary() renders the dashboard's numbers into plain text and
that text is embedded in the system instruction. The model is asked to
advise on THESE numbers; it never sees raw records.

BOUNDARIES:
- CAN: Explain spending, suggest cuts, sketch a budget plan
- CANNOT: Change any data (it only ever returns text)
- The question is sent verbatim as the user message
"""

import html
from decimal import Decimal
from typing import Iterable, Optional

from src.config import get_settings
from src.models.advisory import Answer
from src.models.analytics import CategoryTotal, MonthlyTotal
from src.models.expense import ExpenseSnapshot
from src.analytics import total_spent
from src.services.llm import (
    CompletionClient,
    CompletionRequest,
    GeminiCompletionClient,
)


SYSTEM_PROMPT_TEMPLATE = (
    "You are a friendly personal finance advisor. The user has shared their "
    "expense data. Give concise, actionable, warm advice. Use ₹ for currency. "
    "Keep responses under 200 words. Use bullet points when listing tips. "
    "Data: {summary}"
)

QUICK_QUESTIONS = [
    "Am I overspending?",
    "Where can I cut costs?",
    "How's my savings trend?",
    "Give me a budget plan",
]


def _amount(value: Decimal) -> str:
    """Plain number without exponent or trailing zeros: 2000, 700.5"""
    return format(Decimal(value).normalize(), "f")


def compose_summary(
    snapshot: ExpenseSnapshot,
    breakdown: Iterable[CategoryTotal],
    trend: Iterable[MonthlyTotal],
) -> str:
    """
    Render the numbers the advisor is grounded in.

    Includes budget, spent, remaining, every category total, every month
    of the trend and the transaction count. Deterministic for a given input.
    """
    spent = total_spent(snapshot)
    remaining = snapshot.budget - spent

    categories = ", ".join(
        f"{item.category}: ₹{_amount(item.total)}" for item in breakdown
    ) or "none"
    months = ", ".join(
        f"{item.label}: ₹{_amount(item.total)}" for item in trend
    ) or "none"

    return (
        f"Budget: ₹{_amount(snapshot.budget)}. "
        f"Spent: ₹{_amount(spent)}. "
        f"Remaining: ₹{_amount(remaining)}.\n"
        f"Expenses by category: {categories}.\n"
        f"Monthly trend: {months}.\n"
        f"Total transactions: {snapshot.transaction_count}."
    )


def answer_html(text: str) -> str:
    """Escape advisor or error text for the HTML answer box, keeping line breaks."""
    return html.escape(text or "").replace("\n", "<br>")


class AdvisoryAgent:
    """
    Sends a grounded question to the completion client.

    ask() either returns an Answer or raises one of the typed
    AdvisoryError subclasses. It never returns an empty answer.
    """

    def __init__(
        self,
        client: Optional[CompletionClient] = None,
        max_output_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        settings = get_settings().gemini
        self._client = client or GeminiCompletionClient()
        self._max_output_tokens = max_output_tokens or settings.max_tokens
        self._temperature = temperature if temperature is not None else settings.temperature

    def build_request(self, question: str, summary: str) -> CompletionRequest:
        return CompletionRequest(
            prompt=question,
            system_instruction=SYSTEM_PROMPT_TEMPLATE.format(summary=summary),
            max_output_tokens=self._max_output_tokens,
            temperature=self._temperature,
        )

    async def ask(self, question: str, summary: str) -> Answer:
        """
        Ask the remote model a question about the summarised finances.

        Raises:
            NetworkError, ProviderError, EmptyResponseError, ConfigurationError
        """
        text = await self._client.complete(self.build_request(question, summary))
        return Answer(text=text)
