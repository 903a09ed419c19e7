"""
Streamlit Frontend for HomeLedger

The screens a household uses day to day: first-run setup, login,
dashboard, expense list and form, reports, and for admins the
category and user management pages.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. Every form shows all of its problems at once
4. Nothing is deleted without an explicit confirmation

Which screen shows is decided by AppComponents.startup():
- Not initialized → first-run setup
- No session      → login
- Otherwise       → the app
"""

import asyncio
from datetime import date

import streamlit as st

from homeledger.config import validate_all_settings
from homeledger.exceptions import AlreadyInitializedError, HomeLedgerError, ValidationError
from homeledger.formatters import format_currency, format_date
from homeledger.models import (
    AppState,
    ExpensePatch,
    NewUser,
    ReportPeriod,
    Session,
    SetupRequest,
    UserRole,
)
from homeledger.orchestrator import AppComponents, create_app_components
from homeledger.queries import can_edit, sort_expenses


# Page configuration
st.set_page_config(
    page_title="HomeLedger",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
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
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    return create_app_components()


def show_errors(error: HomeLedgerError) -> None:
    if isinstance(error, ValidationError) and error.issues:
        for issue in error.issues:
            st.error(f"❌ {issue.message}")
    else:
        st.error(f"❌ {error}")


def main():
    """Main application entry point."""
    components = get_components()

    if "started" not in st.session_state:
        state = run_async(components.startup())
        st.session_state.started = True
    else:
        state = run_async(components.state())

    try:
        if not state.initialized:
            render_setup_page(components)
        elif state.session is None:
            render_login_page(components)
        else:
            render_app(components, state)
    except Exception as e:
        components.audit.log_error(type(e).__name__, str(e))
        st.error(f"❌ Something went wrong: {e}")


def render_app(components: AppComponents, state: AppState):
    session = state.session

    st.sidebar.title("💰 HomeLedger")
    st.sidebar.markdown(f"Logged in as **{session.name}** ({session.role.value})")
    st.sidebar.markdown("---")

    pages = ["🏠 Dashboard", "📋 Expenses", "➕ Add Expense", "📊 Reports"]
    if session.is_admin:
        pages += ["🏷️ Categories", "👥 Users", "⚙️ Settings"]

    page = st.sidebar.radio("Navigate to:", pages, index=0)

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        run_async(components.auth.logout())
        st.rerun()

    if page == "🏠 Dashboard":
        render_dashboard_page(components)
    elif page == "📋 Expenses":
        render_expenses_page(components, session)
    elif page == "➕ Add Expense":
        render_add_expense_page(components, session)
    elif page == "📊 Reports":
        render_reports_page(components)
    elif page == "🏷️ Categories":
        render_categories_page(components, session)
    elif page == "👥 Users":
        render_users_page(components, session)
    elif page == "⚙️ Settings":
        render_settings_page()


# =============================================================================
# Setup and login
# =============================================================================

def render_setup_page(components: AppComponents):
    st.title("👋 Welcome to HomeLedger")
    st.markdown(
        "Create the administrator account to get started. "
        "Default expense categories will be added for you."
    )

    with st.form("setup"):
        name = st.text_input("Full name", value="Administrator")
        username = st.text_input("Username", value="admin")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Create account")

    if submitted:
        try:
            admin = run_async(components.sequencer.run_first_run_setup(SetupRequest(
                name=name,
                username=username,
                password=password,
                confirm_password=confirm,
            )))
        except AlreadyInitializedError as e:
            st.session_state.flash = f"ℹ️ {e}"
            st.rerun()
        except HomeLedgerError as e:
            show_errors(e)
            return
        st.session_state.flash = f"✅ Account '{admin.username}' created. Please log in."
        st.rerun()


def render_login_page(components: AppComponents):
    st.title("🔐 Log in")

    flash = st.session_state.pop("flash", None)
    if flash:
        st.success(flash)

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in")

    if submitted:
        session = run_async(components.auth.login(username.strip(), password))
        if session is None:
            st.error("❌ Wrong username or password")
            return
        st.rerun()


# =============================================================================
# Expenses
# =============================================================================

def render_dashboard_page(components: AppComponents):
    st.title("🏠 Dashboard")
    summary = run_async(components.reports.dashboard())
    names = run_async(components.reports.category_names())

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Total spending", format_currency(summary.total), f"{summary.count} expenses")
    with col2:
        st.metric("Today", format_currency(summary.today_total), f"{summary.today_count} expenses")

    st.markdown("### Recent expenses")
    if not summary.recent:
        st.info("No expenses yet. Use 'Add Expense' to log your first one.")
        return
    for expense in summary.recent:
        st.markdown(
            f"**{expense.title}** · {names[expense.category_id]} · "
            f"{format_date(expense.date)} · {format_currency(expense.amount)}"
        )


def render_expenses_page(components: AppComponents, session: Session):
    st.title("📋 Expenses")

    sort_by = st.selectbox(
        "Sort by",
        options=["date", "amount"],
        format_func=lambda x: x.title(),
    )

    expenses = sort_expenses(run_async(components.expenses.get_all()), by=sort_by)
    names = run_async(components.reports.category_names())
    categories = run_async(components.category_flow.list_categories())

    if not expenses:
        st.info("📋 Your expenses will appear here once you add them.")
        return

    for expense in expenses:
        header = f"{format_date(expense.date)} · {expense.title} · {format_currency(expense.amount)}"
        with st.expander(header):
            st.markdown(f"Category: **{names[expense.category_id]}**")
            if expense.notes:
                st.markdown(f"Notes: {expense.notes}")

            if not can_edit(expense, session):
                continue

            with st.form(f"edit-{expense.id}"):
                title = st.text_input("Title", value=expense.title)
                amount = st.number_input("Amount", value=float(expense.amount), min_value=0.0)
                category_ids = [category.id for category in categories]
                category_id = st.selectbox(
                    "Category",
                    options=category_ids or [expense.category_id],
                    index=category_ids.index(expense.category_id) if expense.category_id in category_ids else 0,
                    format_func=lambda x: names[x],
                )
                expense_date = st.date_input("Date", value=expense.date, max_value=date.today())
                notes = st.text_area("Notes", value=expense.notes or "")
                save = st.form_submit_button("💾 Save")

            if save:
                try:
                    run_async(components.expense_flow.update_expense(
                        session,
                        expense.id,
                        ExpensePatch(
                            title=title,
                            amount=str(amount),
                            category_id=category_id,
                            date=expense_date,
                            notes=notes or None,
                        ),
                    ))
                except HomeLedgerError as e:
                    show_errors(e)
                else:
                    st.rerun()

            confirm = st.checkbox("Yes, delete this expense", key=f"confirm-{expense.id}")
            if st.button("🗑️ Delete", key=f"delete-{expense.id}", disabled=not confirm):
                run_async(components.expense_flow.delete_expense(session, expense.id))
                st.rerun()


def render_add_expense_page(components: AppComponents, session: Session):
    st.title("➕ Add Expense")
    categories = run_async(components.category_flow.list_categories())

    if not categories:
        st.warning("There are no categories yet. Ask an administrator to add one.")
        return

    with st.form("add-expense", clear_on_submit=True):
        title = st.text_input("Title")
        amount = st.number_input("Amount", min_value=0.0, step=1000.0)
        category = st.selectbox(
            "Category",
            options=categories,
            format_func=lambda c: c.name,
        )
        expense_date = st.date_input("Date", value=date.today(), max_value=date.today())
        notes = st.text_area("Notes (optional)")
        submitted = st.form_submit_button("💾 Save expense")

    if submitted:
        try:
            expense = run_async(components.expense_flow.add_expense(
                session,
                title=title,
                amount=str(amount),
                category_id=category.id,
                expense_date=expense_date,
                notes=notes,
            ))
        except HomeLedgerError as e:
            show_errors(e)
            return
        st.success(f"✅ Saved {expense.title} ({format_currency(expense.amount)})")


# =============================================================================
# Reports
# =============================================================================

def render_reports_page(components: AppComponents):
    st.title("📊 Reports")

    period = st.radio(
        "Period",
        options=list(ReportPeriod),
        index=1,
        format_func=lambda p: p.value.title(),
        horizontal=True,
    )
    report = run_async(components.reports.period_report(period))

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Total", format_currency(report.total))
    with col2:
        st.metric("Expenses", report.count)
    with col3:
        st.metric("Average", format_currency(report.average))

    if not report.has_data:
        st.info(f"No expenses between {format_date(report.start)} and {format_date(report.end)}.")
        return

    st.markdown("### By category")
    st.bar_chart(
        {
            "Category": [item.name for item in report.by_category],
            "Amount": [float(item.amount) for item in report.by_category],
        },
        x="Category",
        y="Amount",
    )
    for item in report.by_category:
        st.markdown(
            f"<span style='color:{item.color}'>●</span> {item.name}: "
            f"{format_currency(item.amount)} ({item.share:.1f}%)",
            unsafe_allow_html=True,
        )

    st.markdown("### Trend")
    st.line_chart(
        {
            "Period": [point.label for point in report.trend],
            "Amount": [float(point.amount) for point in report.trend],
        },
        x="Period",
        y="Amount",
    )


# =============================================================================
# Admin pages
# =============================================================================

def render_categories_page(components: AppComponents, session: Session):
    st.title("🏷️ Categories")

    with st.form("add-category", clear_on_submit=True):
        name = st.text_input("Name")
        color = st.color_picker("Color", value="#C9CBCF")
        submitted = st.form_submit_button("➕ Add category")

    if submitted:
        try:
            run_async(components.category_flow.add_category(session, name, color.upper()))
        except HomeLedgerError as e:
            show_errors(e)
        else:
            st.rerun()

    st.markdown("---")
    for category in run_async(components.category_flow.list_categories()):
        in_use = run_async(components.expenses.count_by_category(category.id))
        col1, col2 = st.columns([4, 1])
        with col1:
            st.markdown(
                f"<span style='color:{category.color}'>●</span> **{category.name}** "
                f"({in_use} expenses)",
                unsafe_allow_html=True,
            )
        with col2:
            if st.button("🗑️ Delete", key=f"delete-category-{category.id}"):
                run_async(components.category_flow.delete_category(session, category.id))
                st.rerun()


def render_users_page(components: AppComponents, session: Session):
    st.title("👥 Users")

    with st.form("add-user", clear_on_submit=True):
        name = st.text_input("Full name")
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        role = st.selectbox("Role", options=list(UserRole), format_func=lambda r: r.value.title())
        submitted = st.form_submit_button("➕ Add user")

    if submitted:
        try:
            user = run_async(components.auth.create_user_as(
                session,
                NewUser(name=name, username=username, password=password, role=role),
            ))
        except HomeLedgerError as e:
            show_errors(e)
        else:
            st.success(f"✅ Added {user.username}")

    st.markdown("---")
    for user in run_async(components.auth.list_users(session)):
        col1, col2 = st.columns([4, 1])
        with col1:
            st.markdown(f"**{user.name}** (@{user.username}) · {user.role.value}")
        with col2:
            if user.id != session.user_id and st.button("🗑️ Delete", key=f"delete-user-{user.id}"):
                try:
                    run_async(components.auth.delete_user(session, user.id))
                except HomeLedgerError as e:
                    show_errors(e)
                else:
                    st.rerun()


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    groups = [
        ("Storage", "storage"),
        ("Authentication", "auth"),
        ("Application", "app"),
    ]

    for name, key in groups:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "Settings are read from environment variables and a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
