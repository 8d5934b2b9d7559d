"""AI Agents package."""

from src.agents.advisor import (
    QUICK_QUESTIONS,
    SYSTEM_PROMPT_TEMPLATE,
    AdvisoryAgent,
    answer_html,
    compose_summary,
)

__all__ = [
    "QUICK_QUESTIONS",
    "SYSTEM_PROMPT_TEMPLATE",
    "AdvisoryAgent",
    "answer_html",
    "compose_summary",
]
