"""
Streamlit Frontend for fintrack

This is the user interface people use to record income and expenses
and see where their money went.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. Visual feedback for all operations
4. No hidden actions

The view never talks to storage directly:
- Sign-up and login go through AccountFlow
- Recording and reporting go through TransactionFlow
- After a save, the whole transaction list is fetched again
"""

import asyncio
from datetime import date

import streamlit as st

from fintrack.audit import create_correlation_id
from fintrack.config import get_settings, validate_all_settings
from fintrack.models.transaction import CATEGORY_LABELS, TransactionType, suggested_categories
from fintrack.orchestrator import (
    AccountFlow,
    AuthenticationFailedError,
    InputRejectedError,
    TransactionFlow,
    create_app_components,
)
from fintrack.services.storage import DuplicateEmailError, StorageError


# Page configuration
st.set_page_config(
    page_title="fintrack",
    page_icon="💰",
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
    .income {
        color: #28a745;
        font-weight: bold;
    }
    .expense {
        color: #dc3545;
        font-weight: bold;
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


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def money(amount) -> str:
    symbol = get_settings().app.currency_symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category.title())


def load_transactions(transaction_flow: TransactionFlow, refresh: bool = False):
    """The logged-in user's transactions, fetched once and kept in session state."""
    if refresh or st.session_state.get("transactions") is None:
        st.session_state.transactions = run_async(
            transaction_flow.list_transactions(st.session_state.user.id)
        )
    return st.session_state.transactions


def main():
    """Main application entry point."""
    try:
        account_flow, transaction_flow, _ = get_components()
    except StorageError as e:
        st.error(f"Could not open the database: {e}")
        st.stop()

    if "user" not in st.session_state:
        st.session_state.user = None
        st.session_state.transactions = None

    if st.session_state.user is None:
        render_auth_page(account_flow)
        return

    user = st.session_state.user

    # Sidebar navigation
    st.sidebar.title("💰 fintrack")
    st.sidebar.markdown(f"Signed in as **{user.display_name}**")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "➕ Add Transaction", "📅 Monthly Spending", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        st.session_state.user = None
        st.session_state.transactions = None
        st.rerun()

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(transaction_flow)
    elif page == "➕ Add Transaction":
        render_add_transaction_page(transaction_flow)
    elif page == "📅 Monthly Spending":
        render_monthly_page(transaction_flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_auth_page(account_flow: AccountFlow):
    """Render the login / sign-up page."""
    st.title("💰 fintrack")
    st.markdown("Track your income and expenses.")

    login_tab, sign_up_tab = st.tabs(["Log in", "Sign up"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input("Email", key="login_email")
            password = st.text_input("Password", type="password", key="login_password")
            submitted = st.form_submit_button("Log in", type="primary", key="login_submit")

        if submitted:
            try:
                user = run_async(account_flow.login(email, password, raise_on_failure=True))
            except AuthenticationFailedError as e:
                st.error(str(e))
            except StorageError as e:
                st.error(f"Could not log in right now: {e}")
            else:
                st.session_state.user = user
                st.session_state.transactions = None
                st.rerun()

    with sign_up_tab:
        with st.form("sign_up_form"):
            name = st.text_input("Name (optional)")
            email = st.text_input("Email")
            password = st.text_input(
                "Password",
                type="password",
                help=f"At least {get_settings().security.password_min_length} characters",
            )
            submitted = st.form_submit_button("Create account", type="primary")

        if submitted:
            try:
                user = run_async(account_flow.sign_up(email, password, name))
            except InputRejectedError as e:
                st.error(str(e))
            except DuplicateEmailError:
                st.error("An account with this email already exists. Please log in.")
            except StorageError as e:
                st.error(f"Could not create the account: {e}")
            else:
                st.session_state.user = user
                st.session_state.transactions = None
                st.rerun()


def render_transaction_row(transaction):
    sign, css = ("+", "income") if transaction.is_income else ("-", "expense")
    col1, col2, col3 = st.columns([3, 2, 2])
    with col1:
        st.markdown(f"**{transaction.description or category_label(transaction.category)}**")
        st.caption(category_label(transaction.category))
    with col2:
        st.markdown(transaction.date.strftime("%d %b %Y"))
    with col3:
        st.markdown(
            f'<span class="{css}">{sign}{money(transaction.amount)}</span>',
            unsafe_allow_html=True,
        )


def render_dashboard_page(transaction_flow: TransactionFlow):
    """Render the dashboard page."""
    st.title("📊 Dashboard")

    query = st.text_input(
        "Search",
        placeholder="Search by description or category",
    )

    transactions = load_transactions(transaction_flow)
    summary = transaction_flow.dashboard(transactions, query=query)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Balance", money(summary.balance))
    with col2:
        st.metric("Spent this month", money(summary.monthly_spend))
    with col3:
        st.metric("Saved this month", money(summary.monthly_savings))

    st.markdown("---")
    st.subheader("Spending over time")
    st.bar_chart(
        {
            "Month": [point.label for point in summary.spending_series],
            "Spent": [float(point.amount) for point in summary.spending_series],
        },
        x="Month",
        y="Spent",
    )

    st.markdown("---")
    st.subheader("Recent transactions")
    if not summary.recent_transactions:
        st.info(
            "📋 Your transactions will appear here once you add them. "
            "Use the 'Add Transaction' page to record your first one."
        )
    for transaction in summary.recent_transactions:
        render_transaction_row(transaction)


def render_add_transaction_page(transaction_flow: TransactionFlow):
    """Render the add-transaction form."""
    st.title("➕ Add Transaction")

    transaction_type = st.radio(
        "Type",
        options=list(TransactionType),
        format_func=lambda x: x.value.title(),
        horizontal=True,
    )

    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)

        with col1:
            amount = st.number_input(
                "Amount *",
                min_value=0.0,
                step=0.01,
                format="%.2f",
            )
            category = st.selectbox(
                "Category *",
                options=list(suggested_categories(transaction_type)),
                format_func=category_label,
            )

        with col2:
            transaction_date = st.date_input("Date *", value=date.today())
            description = st.text_input(
                "Description *",
                placeholder="e.g., Lunch at the café",
            )

        submitted = st.form_submit_button("✅ Save", type="primary")

    if submitted:
        try:
            run_async(
                transaction_flow.add_transaction(
                    user_id=st.session_state.user.id,
                    type=transaction_type,
                    # number_input hands back a float; go through str to keep cents exact
                    amount=f"{amount:.2f}",
                    category=category,
                    description=description,
                    date=transaction_date,
                    correlation_id=create_correlation_id(),
                )
            )
        except InputRejectedError as e:
            st.error(str(e))
        except StorageError as e:
            st.error(f"Failed to save: {e}")
        else:
            load_transactions(transaction_flow, refresh=True)
            st.success("Transaction saved.")


def render_monthly_page(transaction_flow: TransactionFlow):
    """Render the monthly spending breakdown."""
    st.title("📅 Monthly Spending")

    reference_date = st.date_input(
        "Month",
        value=date.today(),
        help="Any day in the month you want to see",
    )

    transactions = load_transactions(transaction_flow)
    breakdown = transaction_flow.monthly_breakdown(transactions, reference_date)

    st.metric(f"Total spent in {breakdown.month_label}", money(breakdown.total_spend))

    if not breakdown.has_spending:
        st.info("No expenses recorded for this month.")
        return

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("By category")
        st.bar_chart(
            {
                "Category": [category_label(c) for c in breakdown.by_category],
                "Spent": [float(v) for v in breakdown.by_category.values()],
            },
            x="Category",
            y="Spent",
        )
    with col2:
        st.subheader("By day")
        st.line_chart(
            {
                "Day": list(breakdown.by_day),
                "Spent": [float(v) for v in breakdown.by_day.values()],
            },
            x="Day",
            y="Spent",
        )

    st.markdown("---")
    st.subheader("Expenses")
    for transaction in breakdown.expenses:
        render_transaction_row(transaction)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    for name in ("database", "security", "app"):
        if status.get(name, False):
            st.success(f"✅ {name.title()} settings loaded")
        else:
            error = status.get(f"{name}_error", "Not configured")
            st.error(f"❌ {name.title()} settings - {error}")

    settings = get_settings()
    st.markdown("---")
    st.markdown(f"**Database file:** `{settings.database.path}`")
    st.markdown(f"**Starting balance:** {money(settings.app.starting_balance)}")
    st.markdown(
        "To change these, set `FINTRACK_DB_*` or `FINTRACK_SECURITY_*` variables, "
        "or app variables such as `STARTING_BALANCE`, in the environment or a `.env` file."
    )


if __name__ == "__main__":
    main()
