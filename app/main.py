"""
Streamlit Frontend for Expense Tracker

This is the user interface for recording expenses and watching the
monthly budget.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every action gives visible feedback
3. Clear error messages in simple language
4. The UI only renders what the session computes

The UI never calculates totals or budget status itself; after each
action it asks the session for a fresh DashboardView.
"""

from datetime import date

import streamlit as st

from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.ledger import (
    EmptyExportError,
    budget_message,
    format_money,
    format_percentage,
)
from expense_tracker.models.expense import (
    BudgetStatus,
    DashboardView,
    ExpenseCategory,
    PeriodFilter,
)
from expense_tracker.orchestrator import ExpenseSession, create_app_components
from expense_tracker.services.accounts import AccountExistsError, AuthError
from expense_tracker.services.storage import LocalKeyValueStore, StorageError
from expense_tracker.validation import ValidationError


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .budget-box {
        padding: 20px;
        border-radius: 10px;
        margin: 10px 0;
    }
    .budget-box.safe {
        background-color: #d4edda;
        border-left: 5px solid #28a745;
    }
    .budget-box.warning {
        background-color: #fff3cd;
        border-left: 5px solid #ffc107;
    }
    .budget-box.exceeded {
        background-color: #f8d7da;
        border-left: 5px solid #dc3545;
    }
    .empty-state {
        padding: 20px;
        text-align: center;
        color: #6c757d;
    }
</style>
""", unsafe_allow_html=True)


PERIOD_LABELS = {
    PeriodFilter.ALL: "All Time",
    PeriodFilter.TODAY: "Today",
    PeriodFilter.LAST_7_DAYS: "Last 7 Days",
    PeriodFilter.THIS_MONTH: "This Month",
}

STATUS_EMOJI = {
    BudgetStatus.SAFE: "✅",
    BudgetStatus.WARNING: "⚠️",
    BudgetStatus.EXCEEDED: "🚨",
}


@st.cache_resource
def get_store():
    """Shared key-value store (cached for the whole server process)."""
    return LocalKeyValueStore()


def get_session() -> ExpenseSession:
    """One ExpenseSession per browser session; restores the last login once."""
    if "expense_session" not in st.session_state:
        session = create_app_components(store=get_store())
        session.restore()
        st.session_state.expense_session = session
    return st.session_state.expense_session


def flash(message: str, level: str = "warning"):
    """Queue a message to show after the next rerun."""
    st.session_state.setdefault("flash_messages", []).append((level, message))


def show_flash_messages():
    for level, message in st.session_state.pop("flash_messages", []):
        getattr(st, level)(message)


def main():
    """Main application entry point."""
    status = validate_all_settings()
    if not (status["storage"] and status["app"]):
        st.error("Configuration error. Check your .env file (see .env.example).")
        for key in ("storage_error", "app_error"):
            if key in status:
                st.code(status[key])
        st.stop()

    session = get_session()
    show_flash_messages()

    if not session.is_authenticated:
        render_auth_page(session)
        return

    render_sidebar(session)
    render_dashboard(session)


def render_auth_page(session: ExpenseSession):
    """Sign in / create account."""
    st.title("💰 Expense Tracker")

    sign_in, sign_up = st.tabs(["Sign In", "Create Account"])

    with sign_in:
        with st.form("login_form"):
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In", type="primary")

        if submitted:
            try:
                session.login(username, password)
                st.rerun()
            except ValidationError as e:
                st.error(str(e))
            except AuthError as e:
                st.error(str(e))
            except StorageError as e:
                st.error(f"Could not read your account: {e}")

    with sign_up:
        with st.form("signup_form", clear_on_submit=False):
            username = st.text_input("Username", key="signup_username")
            email = st.text_input("Email", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password")
            confirm = st.text_input("Confirm Password", type="password", key="signup_confirm")
            submitted = st.form_submit_button("Create Account", type="primary")

        if submitted:
            try:
                session.signup(username, email, password, confirm)
                st.success("Account created successfully! Please sign in.")
            except ValidationError as e:
                for issue in e.result.errors:
                    st.error(issue.message)
            except AccountExistsError as e:
                st.error(str(e))
            except StorageError:
                st.error("Error creating account. Please try again.")


def render_sidebar(session: ExpenseSession):
    """User badge, logout and budget form."""
    username = session.username
    st.sidebar.title("💰 Expense Tracker")
    st.sidebar.markdown(f"### {username[:1].upper()} · {username}")

    if st.sidebar.button("Logout"):
        st.session_state.pop("pending_delete", None)
        session.logout()
        st.rerun()

    st.sidebar.markdown("---")
    st.sidebar.markdown("### Monthly Budget")
    current = session.ledger.monthly_budget
    budget_input = st.sidebar.number_input(
        "Budget",
        value=float(current),
        min_value=0.0,
        step=100.0,
        format="%.2f",
    )
    if st.sidebar.button("Set Budget"):
        try:
            session.set_budget(str(budget_input))
            st.rerun()
        except ValidationError as e:
            st.sidebar.error(str(e))
        except StorageError as e:
            flash(f"Budget applied but not saved: {e}")
            st.rerun()

    if session.debug_mode:
        render_recent_activity(session)


def render_recent_activity(session: ExpenseSession):
    """Audit trail for the current user (debug mode only)."""
    with st.sidebar.expander("Recent activity"):
        events = session.audit_logger.recent_events(session.username, limit=20)
        if not events:
            st.caption("No activity recorded yet.")
        for event in events:
            st.caption(f"{event.timestamp:%Y-%m-%d %H:%M} · {event.description}")


def render_dashboard(session: ExpenseSession):
    """Stats, budget, add form, filtered list and export."""
    symbol = get_settings().app.currency_symbol

    if session.load_error:
        st.warning("Your saved expenses could not be loaded. Starting with an empty list.")

    col1, col2 = st.columns(2)
    with col1:
        category = st.selectbox(
            "Filter by Category",
            options=[None] + list(ExpenseCategory),
            format_func=lambda x: "All Categories" if x is None else x.value,
        )
    with col2:
        period = st.selectbox(
            "Filter by Period",
            options=list(PeriodFilter),
            format_func=lambda x: PERIOD_LABELS[x],
        )

    view = session.dashboard(category=category, period=period)

    render_stats(view, symbol)
    render_budget(view, symbol)

    st.markdown("---")
    left, right = st.columns([1, 2])
    with left:
        render_add_expense_form(session)
    with right:
        render_expense_list(session, view, symbol)
        render_export(session, category, period)


def render_stats(view: DashboardView, symbol: str):
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Expenses", format_money(view.stats.total, symbol))
    col2.metric("This Month", format_money(view.stats.this_month, symbol))
    col3.metric("Last 7 Days", format_money(view.stats.last_7_days, symbol))
    col4.metric("Today", format_money(view.stats.today, symbol))


def render_budget(view: DashboardView, symbol: str):
    budget = view.budget
    if not budget.is_set:
        return

    message = budget_message(budget, symbol)
    st.markdown(f"""
    <div class="budget-box {budget.status.value}">
        <h4>{STATUS_EMOJI[budget.status]} {message.headline}</h4>
        <p>{message.detail}</p>
        <p>Spent: {format_money(budget.spent, symbol)} · Budget: {format_money(budget.monthly_budget, symbol)}</p>
    </div>
    """, unsafe_allow_html=True)
    st.progress(float(budget.progress_width) / 100, text=format_percentage(budget))


def render_add_expense_form(session: ExpenseSession):
    st.subheader("Add Expense")
    with st.form("expense_form", clear_on_submit=True):
        name = st.text_input("Expense Name", key="expense_name")
        amount = st.number_input(
            "Amount", min_value=0.0, step=0.01, format="%.2f", key="expense_amount"
        )
        category = st.selectbox(
            "Category",
            options=list(ExpenseCategory),
            format_func=lambda x: x.value,
        )
        expense_date = st.date_input("Date", value=date.today())
        notes = st.text_area("Notes (optional)")
        submitted = st.form_submit_button("Add Expense", type="primary")

    if submitted:
        try:
            _, result = session.submit_expense(
                name=name,
                amount=str(amount),
                category=category,
                expense_date=expense_date,
                notes=notes,
            )
            if result.warnings:
                flash(session.validator.get_user_friendly_summary(result))
        except ValidationError as e:
            st.error(session.validator.get_user_friendly_summary(e.result))
            return
        except StorageError as e:
            flash(f"Expense added but not saved: {e}")
        st.rerun()


def render_expense_list(session: ExpenseSession, view: DashboardView, symbol: str):
    st.subheader("Expenses")

    if view.is_empty:
        st.markdown(
            '<div class="empty-state">No expenses found for the selected filters.</div>',
            unsafe_allow_html=True,
        )
        return

    pending = st.session_state.get("pending_delete")

    for record in view.records:
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            st.markdown(f"**{record.name}**  \n{record.category.value} · {record.date.strftime('%d/%m/%Y')}")
            if record.notes:
                st.caption(record.notes)
        with col2:
            st.markdown(f"**{format_money(record.amount, symbol)}**")
        with col3:
            if pending != record.id and st.button("Delete", key=f"delete_{record.id}"):
                st.session_state.pending_delete = record.id
                st.rerun()

        if pending == record.id:
            render_delete_confirmation(session, record.id)


def render_delete_confirmation(session: ExpenseSession, expense_id: int):
    st.warning("Are you sure you want to delete this expense?")
    confirm, cancel = st.columns(2)
    if confirm.button("Yes, delete", key=f"confirm_delete_{expense_id}", type="primary"):
        st.session_state.pop("pending_delete", None)
        try:
            session.delete_expense(expense_id)
        except StorageError as e:
            flash(f"Deleted but not saved: {e}")
        st.rerun()
    if cancel.button("Cancel", key=f"cancel_delete_{expense_id}"):
        st.session_state.pop("pending_delete", None)
        st.rerun()


def render_export(session: ExpenseSession, category, period):
    if not st.button("📥 Export CSV"):
        return

    try:
        filename, payload = session.export_csv(category=category, period=period)
    except EmptyExportError as e:
        st.warning(str(e))
        return

    st.download_button(
        f"Download {filename}",
        data=payload.encode("utf-8"),
        file_name=filename,
        mime="text/csv",
    )


if __name__ == "__main__":
    main()
