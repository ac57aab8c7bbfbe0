"""
Streamlit Frontend for Income Ledger

This is the page an individual entrepreneur uses to record foreign
income and read off quarterly totals for the tax declaration.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Explicit confirmation before deleting anything
3. Clear error messages
4. Visual feedback for all operations

The UI never touches the ledger directly. It only calls the
TransactionService and renders what the service returns.
"""

import asyncio
from datetime import date

import streamlit as st

from income_ledger.audit import create_correlation_id
from income_ledger.config import get_settings
from income_ledger.formatting import (
    describe_created,
    format_currency,
    format_rate,
    format_uah,
)
from income_ledger.orchestrator import TransactionService, create_app_components
from income_ledger.services.rates import RateFetchError
from income_ledger.validation import ValidationError


# Page configuration
st.set_page_config(
    page_title="Income Ledger",
    page_icon="💵",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .total-card {
        padding: 16px;
        background-color: #e0e7ff;
        border-radius: 10px;
        border: 1px solid #a5b4fc;
        margin: 6px 0;
    }
    .quarter-card {
        padding: 16px;
        background-color: #f9fafb;
        border-radius: 10px;
        border: 1px solid #e5e7eb;
        margin: 6px 0;
    }
    .big-number {
        font-size: 1.6em;
        font-weight: bold;
        color: #1f2937;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components():
    """
    Get this session's components.

    Each browser session owns its own ledger; nothing is shared
    between users and nothing survives a page reload.
    """
    if "service" not in st.session_state:
        service, audit_logger = create_app_components()
        st.session_state.service = service
        st.session_state.audit_logger = audit_logger
    return st.session_state.service, st.session_state.audit_logger


def main():
    """Main application entry point."""
    service, audit_logger = get_components()

    # Sidebar navigation
    st.sidebar.title("💵 Income Ledger")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Income", "📋 Transactions", "📊 Quarterly Summary", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Enter the date, amount and currency of a payment
        2. The NBU rate for that date is fetched automatically
        3. Read quarterly totals for your declaration

        Data is kept for this session only.
        """
    )

    if page == "➕ Add Income":
        render_add_page(service)
    elif page == "📋 Transactions":
        render_transactions_page(service)
    elif page == "📊 Quarterly Summary":
        render_summary_page(service)
    elif page == "⚙️ Settings":
        render_settings_page(audit_logger)


def render_add_page(service: TransactionService):
    """Render the add-income form."""
    st.title("➕ Add Income")
    st.markdown("The amount is converted to UAH at the NBU rate for the chosen date.")

    currencies = get_settings().app.supported_currencies_list

    with st.form("add_income", clear_on_submit=False):
        col1, col2, col3 = st.columns(3)
        with col1:
            income_date = st.date_input("Date *", value=date.today())
        with col2:
            amount = st.number_input(
                "Amount *",
                min_value=0.0,
                step=0.01,
                format="%.2f",
            )
        with col3:
            currency = st.selectbox("Currency *", options=currencies)

        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        with st.spinner("Requesting rate..."):
            try:
                transaction = run_async(
                    service.create_transaction(
                        on_date=income_date,
                        amount=amount,
                        currency_code=currency,
                        correlation_id=create_correlation_id(),
                    )
                )
                st.success(describe_created(transaction))
            except ValidationError as e:
                st.warning(str(e))
            except RateFetchError as e:
                st.error(str(e))
            except Exception as e:
                st.error(f"Unexpected error: {e}")


def render_transactions_page(service: TransactionService):
    """Render the ledger table with delete controls."""
    st.title("📋 Transactions")

    transactions = service.list_transactions()
    if not transactions:
        st.info("No income recorded yet.")
        return

    header = st.columns([2, 1, 2, 2, 2, 1])
    for col, title in zip(header, ["Date", "Currency", "Amount", "NBU rate", "Amount (UAH)", ""]):
        col.markdown(f"**{title}**")

    pending = st.session_state.get("pending_delete")

    for t in transactions:
        cols = st.columns([2, 1, 2, 2, 2, 1])
        cols[0].write(t.date.isoformat())
        cols[1].write(t.currency)
        cols[2].write(format_currency(t.amount, t.currency))
        cols[3].write(format_rate(t.rate))
        cols[4].write(format_uah(t.amount_local))
        if cols[5].button("🗑️", key=f"delete_{t.id}", help="Delete"):
            st.session_state.pending_delete = t.id
            st.rerun()

        if pending == t.id:
            st.warning("Are you sure you want to delete this record?")
            confirm_col, cancel_col = st.columns(2)
            if confirm_col.button("Yes, delete", key=f"confirm_{t.id}", type="primary"):
                service.delete_transaction(t.id, confirmed=True)
                st.session_state.pending_delete = None
                st.rerun()
            if cancel_col.button("Cancel", key=f"cancel_{t.id}"):
                st.session_state.pending_delete = None
                st.rerun()


def render_summary_page(service: TransactionService):
    """Render quarterly totals."""
    st.title("📊 Quarterly Summary")

    summary = service.summarize()
    if summary.is_empty:
        st.info("Add transactions to see quarterly totals.")
        return

    cols = st.columns(4)
    cols[0].markdown(f"""
    <div class="total-card">
        <p>Total income</p>
        <p class="big-number">{format_uah(summary.annual_total)}</p>
        <p>All transactions</p>
    </div>
    """, unsafe_allow_html=True)

    for i, quarter in enumerate(summary.quarters, start=1):
        cols[i % 4].markdown(f"""
        <div class="quarter-card">
            <p>{quarter.label} (quarter)</p>
            <p class="big-number">{format_uah(quarter.total_local)}</p>
            <p>{quarter.transaction_count} transaction(s), income for the declaration</p>
        </div>
        """, unsafe_allow_html=True)

    if len(summary.per_year) > 1:
        st.markdown("### By calendar year")
        for year, total in summary.per_year.items():
            st.write(f"{year}: {format_uah(total)}")


def render_settings_page(audit_logger):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration")

    from income_ledger.config import validate_all_settings

    status = validate_all_settings()
    for name, key in [("PrivatBank API", "privatbank"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    if status.get("privatbank"):
        pb = get_settings().privatbank
        st.markdown(
            f"- Endpoint: `{pb.api_url}`\n"
            f"- Attempts per lookup: {pb.max_attempts}\n"
            f"- Timeout: {pb.timeout_seconds:g} s"
        )

    st.markdown("---")
    st.markdown("### Recent activity")
    events = audit_logger.recent_events(limit=20)
    if not events:
        st.info("No activity yet.")
    for event in events:
        st.write(f"`{event.timestamp:%H:%M:%S}` {event.description}")


if __name__ == "__main__":
    main()
