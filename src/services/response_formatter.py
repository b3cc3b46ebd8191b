"""
Natural-language summaries and follow-up suggestions for chat answers.

Suggestions are a fixed lookup per dispatcher branch; they are plain questions
the client can send back verbatim.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from models.customer import CustomerResult
from models.query import Timeframe
from models.revenue import RevenueResult

DEFAULT_SUGGESTIONS = [
    "Who is my best customer this month?",
    "How much revenue did I make today?",
    "Show me today's appointments",
]

SUGGESTIONS: Dict[str, List[str]] = {
    "best_customer": [
        "Show me their appointment history",
        "Who are my other top customers?",
        "Send them a thank you message",
    ],
    "best_customer_empty": [
        "Show me all customers",
        "Who are my customers at risk?",
        "How many customers do I have total?",
    ],
    "at_risk": [
        "Send follow-up messages to at-risk customers",
        "Show me customer retention rate",
        "Who are my most loyal customers?",
    ],
    "customer_search": [
        "Who is my best customer this month?",
        "Show me customers at risk",
        "Add a new customer",
    ],
    "revenue": [
        "Compare with last month",
        "Show me my top services by revenue",
        "Who were my best customers this period?",
    ],
    "revenue_empty": [
        "Show me this month's revenue",
        "What's my busiest day this week?",
        "Add a new appointment",
    ],
    "appointments": [
        "Show me tomorrow's appointments",
        "Who has the most appointments?",
        "Schedule a new appointment",
    ],
    "clarify": DEFAULT_SUGGESTIONS,
    "error": DEFAULT_SUGGESTIONS,
}

CLARIFY_SUMMARY = (
    "I didn't understand your question. "
    "Try asking about customers, revenue, or appointments."
)
ERROR_SUMMARY = "I encountered an error processing your request. Please try again."


def suggestions_for(branch: str) -> List[str]:
    """Return a fresh copy of the suggestions for a dispatcher branch."""
    return list(SUGGESTIONS.get(branch, DEFAULT_SUGGESTIONS))


def timeframe_text(timeframe: Timeframe) -> str:
    """Human words for a timeframe keyword, e.g. "this-month" -> "this month"."""
    value = timeframe.value if isinstance(timeframe, Timeframe) else str(timeframe)
    if value == Timeframe.CUSTOM.value:
        return "in the selected period"
    return value.replace("-", " ")


def format_currency(amount: Optional[float]) -> str:
    return f"${float(amount or 0):,.2f}"


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def best_customer_summary(customer: CustomerResult, timeframe: Timeframe) -> str:
    return (
        f"Your best customer {timeframe_text(timeframe)} is {customer.name} with "
        f"{format_currency(customer.total_spent)} in revenue from "
        f"{pluralize(customer.appointment_count, 'appointment')}."
    )


def no_customers_summary(timeframe: Timeframe) -> str:
    return f"No customers found {timeframe_text(timeframe)}."


def at_risk_summary(count: int, days_threshold: int) -> str:
    return (
        f"Found {pluralize(count, 'customer')} who haven't visited "
        f"in {days_threshold}+ days."
    )


def customer_search_summary(count: int, entity: Optional[str]) -> str:
    if entity:
        return f'Found {pluralize(count, "customer")} matching "{entity}".'
    return "Showing your recent customers."


def revenue_summary(revenue: RevenueResult, timeframe: Timeframe) -> str:
    period = timeframe_text(timeframe)
    return (
        f"{period[:1].upper()}{period[1:]}, you made {format_currency(revenue.total_revenue)} "
        f"from {pluralize(revenue.appointment_count, 'appointment')} with "
        f"{pluralize(revenue.unique_customers, 'customer')}. "
        f"Average transaction: {format_currency(revenue.avg_transaction_value)}."
    )


def no_revenue_summary(timeframe: Timeframe) -> str:
    return f"No revenue data found {timeframe_text(timeframe)}."


def appointments_summary(count: int, timeframe: Timeframe) -> str:
    return f"You have {pluralize(count, 'appointment')} {timeframe_text(timeframe)}."
