"""
Display helpers for money and rates.

Kept outside the Streamlit app so the messages can be tested.
"""

from income_ledger.models.transaction import Transaction


def format_currency(amount: float, currency_code: str) -> str:
    """Amount with two decimals, thousands separators and the currency code."""
    return f"{amount:,.2f} {currency_code}"


def format_uah(amount: float) -> str:
    return format_currency(amount, "UAH")


def format_rate(rate: float) -> str:
    """Rates are shown with four decimals, as the bank publishes them."""
    return f"{rate:.4f}"


def describe_created(transaction: Transaction) -> str:
    """Confirmation shown after a transaction is recorded."""
    return (
        f"Added: {format_currency(transaction.amount, transaction.currency)} "
        f"at rate {format_rate(transaction.rate)} UAH = "
        f"{format_uah(transaction.amount_local)}."
    )
