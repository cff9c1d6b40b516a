"""
Streamlit Frontend for FinLedger

The screens people use day to day: sign in, see where the month's
money went, record spending, track goals and linked accounts, run
the family chore and savings board, and read notifications.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every write goes through the ledger services (never raw storage)
3. Services are shared across visitors; the login is kept per visitor
4. Clear error messages in simple language
5. Visual feedback for all operations
"""

from datetime import date
from decimal import Decimal

import streamlit as st

from finledger.aggregation import (
    budget_status,
    budget_usage_percentage,
    category_totals,
    daily_totals,
    days_left,
    expense_categories,
    filter_expenses,
    goal_progress,
    recent_expenses,
    remaining_budget,
    savings_progress,
    savings_rate,
    total_amount,
)
from finledger.auth import SessionStore
from finledger.config import get_settings, validate_all_settings
from finledger.family import FamilyError
from finledger.models import (
    Account,
    AccountType,
    BudgetStatus,
    Expense,
    ExpenseSort,
    FamilyRole,
    FamilyTask,
    Goal,
    Income,
    NotificationType,
    TaskStatus,
)
from finledger.notifications import NotificationInbox
from finledger.orchestrator import AppComponents, create_app_components
from finledger.services.storage import InMemoryStorage, StorageError


# Page configuration
st.set_page_config(
    page_title="FinLedger",
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

EXPENSE_CATEGORIES = [
    "Food", "Transport", "Housing", "Utilities", "Health",
    "Entertainment", "Shopping", "Education", "Other",
]

STATUS_MESSAGES = {
    BudgetStatus.EXCELLENT: ("success", "Excellent! You're well within budget."),
    BudgetStatus.ON_TRACK: ("info", "On track. Keep an eye on spending."),
    BudgetStatus.APPROACHING_LIMIT: ("warning", "Approaching your limit."),
    BudgetStatus.OVER_BUDGET: ("error", "Over budget this month."),
}


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    try:
        return create_app_components()
    except StorageError as e:
        st.error(f"Storage unavailable, using a temporary in-memory ledger: {e}")
        return create_app_components(storage=InMemoryStorage())


def get_session(components: AppComponents) -> SessionStore:
    """This visitor's session, kept in Streamlit session state."""
    if "session" not in st.session_state:
        st.session_state.session = components.open_session()
    return st.session_state.session


def money(value: Decimal) -> str:
    return f"${value:,.2f}"


def main():
    """Main application entry point."""
    components = get_components()
    session = get_session(components)
    user = session.current_user

    if user is None:
        render_auth_page(session)
        return

    st.sidebar.title("💰 FinLedger")
    st.sidebar.markdown(f"Signed in as **{user.full_name or user.email}**")
    inbox = components.inbox_for(user.id)
    st.sidebar.markdown("---")

    unread = inbox.unread_count
    inbox_label = f"🔔 Notifications ({unread})" if unread else "🔔 Notifications"

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🧾 Expenses", "🎯 Goals", "🏦 Accounts",
         "👨‍👩‍👧 Family Hub", inbox_label, "⚙️ Settings"],
        index=0,
    )

    if st.sidebar.button("Log out"):
        session.logout()
        st.rerun()

    ledger = components.ledger_for(user.id)

    if page == "📊 Dashboard":
        render_dashboard_page(ledger)
    elif page == "🧾 Expenses":
        render_expenses_page(ledger)
    elif page == "🎯 Goals":
        render_goals_page(ledger)
    elif page == "🏦 Accounts":
        render_accounts_page(ledger)
    elif page == "👨‍👩‍👧 Family Hub":
        render_family_page(components.family)
    elif page == inbox_label:
        render_notifications_page(inbox)
    elif page == "⚙️ Settings":
        render_settings_page(session)


def render_auth_page(session: SessionStore):
    """Login and signup forms."""
    st.title("💰 FinLedger")
    login_tab, signup_tab = st.tabs(["Log in", "Sign up"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")
        if submitted:
            result = session.login(email, password)
            if result.success:
                st.rerun()
            st.error(result.message)

    with signup_tab:
        with st.form("signup"):
            full_name = st.text_input("Full name")
            email = st.text_input("Email", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password")
            profession = st.text_input("Profession")
            submitted = st.form_submit_button("Create account", type="primary")
        if submitted:
            try:
                result = session.signup({
                    "email": email,
                    "password": password,
                    "full_name": full_name,
                    "profession": profession,
                })
            except ValueError as e:
                st.error(f"Please check your details: {e}")
            else:
                if result.success:
                    st.rerun()
                st.error(result.message)


def render_dashboard_page(ledger):
    """Monthly overview: income, spending, budget and savings."""
    st.title("📊 Dashboard")
    settings = get_settings().app
    today = date.today()

    expenses = ledger.list_expenses()
    month_expenses = [
        e for e in expenses if e.date.year == today.year and e.date.month == today.month
    ]
    month_incomes = [
        i for i in ledger.list_incomes()
        if i.date.year == today.year and i.date.month == today.month
    ]
    income = total_amount(month_incomes)
    spent = total_amount(month_expenses)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income", money(income))
    col2.metric("Spent", money(spent))
    col3.metric("Remaining", money(remaining_budget(income, spent)))
    col4.metric("Savings rate", f"{savings_rate(income, spent):.1f}%")

    usage = budget_usage_percentage(income, spent)
    st.progress(int(usage), text=f"Budget used: {usage:.0f}%")
    kind, message = STATUS_MESSAGES[budget_status(usage)]
    getattr(st, kind)(message)

    with st.expander("Add income"):
        with st.form("income"):
            amount = st.number_input("Amount", min_value=0.0, step=100.0)
            source = st.text_input("Source", value="Salary")
            when = st.date_input("Date", value=today)
            if st.form_submit_button("Save income"):
                try:
                    ledger.add_income(Income(amount=Decimal(str(amount)), source=source, date=when))
                except (ValueError, StorageError) as e:
                    st.error(f"Could not save income: {e}")
                else:
                    st.rerun()

    st.markdown("### Spending by category")
    by_category = category_totals(expenses, today.year, today.month)
    if by_category:
        st.bar_chart({k: float(v) for k, v in by_category.items()})
    else:
        st.info("No spending recorded this month yet.")

    st.markdown(f"### Last {settings.daily_window_days} days")
    st.line_chart({
        str(point.day): float(point.amount)
        for point in daily_totals(expenses, settings.daily_window_days, today)
    })

    st.markdown("### Savings this month")
    points = savings_progress(expenses, ledger.list_goals(), income, today.year, today.month)
    st.line_chart({str(p.day): float(p.savings) for p in points})

    st.markdown("### Recent expenses")
    for expense in recent_expenses(expenses, settings.recent_expenses_limit):
        st.markdown(f"- {expense.date} · **{expense.category}** · {money(expense.amount)} {expense.note}")


def render_expenses_page(ledger):
    """Record, search and remove expenses."""
    st.title("🧾 Expenses")

    with st.form("expense"):
        col1, col2, col3 = st.columns(3)
        amount = col1.number_input("Amount", min_value=0.0, step=1.0)
        category = col2.selectbox("Category", EXPENSE_CATEGORIES)
        when = col3.date_input("Date", value=date.today())
        note = st.text_input("Note")
        if st.form_submit_button("Add expense", type="primary"):
            try:
                ledger.add_expense(Expense(
                    amount=Decimal(str(amount)), category=category, date=when, note=note,
                ))
            except (ValueError, StorageError) as e:
                st.error(f"Could not save expense: {e}")
            else:
                st.success("Expense saved")

    expenses = ledger.list_expenses()

    col1, col2, col3 = st.columns(3)
    search = col1.text_input("Search")
    category_filter = col2.selectbox(
        "Filter by Category", ["all"] + expense_categories(expenses),
        format_func=lambda x: "All Categories" if x == "all" else x,
    )
    sort_by = col3.selectbox(
        "Sort", list(ExpenseSort),
        format_func=lambda x: x.value.replace("-", " ").title(),
    )

    st.markdown("---")
    shown = filter_expenses(expenses, search, category_filter, sort_by)
    if not shown:
        st.info("No expenses match.")
    for expense in shown:
        col1, col2 = st.columns([5, 1])
        col1.markdown(
            f"{expense.date} · **{expense.category}** · {money(expense.amount)} {expense.note}"
        )
        if col2.button("Delete", key=f"del_{expense.id}"):
            ledger.delete_expense(expense.id)
            st.rerun()


def render_goals_page(ledger):
    """Savings goals with progress and contributions."""
    st.title("🎯 Goals")

    with st.expander("New goal"):
        with st.form("goal"):
            name = st.text_input("Name")
            target = st.number_input("Target", min_value=1.0, step=100.0)
            deadline = st.date_input("Deadline", value=date.today())
            if st.form_submit_button("Create goal"):
                try:
                    ledger.add_goal(Goal(
                        name=name, target_amount=Decimal(str(target)), deadline=deadline,
                    ))
                except (ValueError, StorageError) as e:
                    st.error(f"Please check your details: {e}")
                else:
                    st.rerun()

    for goal in ledger.list_goals():
        st.markdown(f"### {goal.name}")
        progress = goal_progress(goal)
        st.progress(min(progress, 100), text=(
            f"{money(goal.current_amount)} of {money(goal.target_amount)} "
            f"({progress}%) · {days_left(goal)} days left"
        ))
        if goal.completed:
            st.success("Goal reached!")
            continue
        col1, col2 = st.columns([3, 1])
        amount = col1.number_input("Add", min_value=0.0, step=10.0, key=f"amt_{goal.id}")
        if col2.button("Contribute", key=f"add_{goal.id}") and amount > 0:
            try:
                ledger.contribute_to_goal(goal.id, Decimal(str(amount)))
            except (ValueError, StorageError) as e:
                st.error(f"Could not save contribution: {e}")
            else:
                st.rerun()


def render_accounts_page(ledger):
    """Linked bank and card accounts."""
    st.title("🏦 Accounts")

    accounts = ledger.list_accounts()
    st.metric("Total balance", money(total_balance(accounts)))

    with st.expander("Link account"):
        with st.form("account"):
            name = st.text_input("Account name")
            account_type = st.selectbox("Type", list(AccountType), format_func=lambda x: x.value.title())
            institution = st.text_input("Institution")
            balance = st.number_input("Balance", step=100.0)
            if st.form_submit_button("Link"):
                try:
                    ledger.link_account(Account(
                        name=name, type=account_type, institution=institution or None,
                        balance=Decimal(str(balance)),
                    ))
                except (ValueError, StorageError) as e:
                    st.error(f"Could not link account: {e}")
                else:
                    st.rerun()

    for account in accounts:
        col1, col2 = st.columns([5, 1])
        col1.markdown(
            f"**{account.name}** ({account.type.value}) · {account.institution or ''} · "
            f"{money(account.balance)}"
        )
        if col2.button("Unlink", key=f"unlink_{account.id}"):
            ledger.unlink_account(account.id)
            st.rerun()


def total_balance(accounts: list[Account]) -> Decimal:
    return sum((a.balance for a in accounts), Decimal("0"))


def render_family_page(family):
    """Household members, chores and shared goals."""
    st.title("👨‍👩‍👧 Family Hub")
    members = family.list_members()
    names = {m.id: m.name for m in members}

    st.markdown("### Members")
    cols = st.columns(max(len(members), 1))
    for col, member in zip(cols, members):
        col.metric(f"{member.name} ({member.role.value})", money(member.balance))

    st.markdown("### Chores")
    parents = [m for m in members if m.role == FamilyRole.PARENT]
    if parents:
        with st.expander("Assign a chore"):
            with st.form("task"):
                title = st.text_input("Title")
                assignee = st.selectbox("Assign to", list(names), format_func=names.get)
                value = st.number_input("Reward", min_value=0.0, step=5.0)
                proof_required = st.checkbox("Proof required")
                if st.form_submit_button("Assign"):
                    try:
                        family.add_task(FamilyTask(
                            title=title, assigned_to=assignee,
                            value=Decimal(str(value)), proof_required=proof_required,
                        ))
                    except (FamilyError, ValueError, StorageError) as e:
                        st.error(f"Could not assign chore: {e}")
                    else:
                        st.rerun()

    for task in family.list_tasks():
        st.markdown(
            f"**{task.title}** for {names.get(task.assigned_to, 'unknown')} · "
            f"{money(task.value)} · {task.status.value}"
        )
        try:
            if task.status in (TaskStatus.ASSIGNED, TaskStatus.REJECTED):
                proof = st.text_input("Proof", key=f"proof_{task.id}") if task.proof_required else None
                if st.button("Mark done", key=f"done_{task.id}"):
                    family.complete_task(task.id, proof or None)
                    st.rerun()
            elif task.status == TaskStatus.SUBMITTED:
                col1, col2 = st.columns(2)
                if col1.button("Approve", key=f"ok_{task.id}"):
                    family.approve_task(task.id, True)
                    st.rerun()
                if col2.button("Reject", key=f"no_{task.id}"):
                    family.approve_task(task.id, False)
                    st.rerun()
        except (FamilyError, StorageError) as e:
            st.error(str(e))

    st.markdown("### Shared goals")
    for goal in family.list_goals():
        st.markdown(f"**{goal.name}** · {money(goal.current_amount)} of {money(goal.target_amount)}")
        st.progress(min(goal_progress(goal), 100))
        col1, col2, col3 = st.columns([2, 2, 1])
        member_id = col1.selectbox("From", list(names), format_func=names.get, key=f"from_{goal.id}")
        amount = col2.number_input("Amount", min_value=0.0, step=10.0, key=f"give_{goal.id}")
        if col3.button("Contribute", key=f"give_btn_{goal.id}") and amount > 0:
            try:
                family.contribute_to_goal(goal.id, member_id, Decimal(str(amount)))
            except (FamilyError, ValueError, StorageError) as e:
                st.error(str(e))
            else:
                st.rerun()


NOTIFICATION_ICONS = {
    NotificationType.INFO: "ℹ️",
    NotificationType.SUCCESS: "✅",
    NotificationType.WARNING: "⚠️",
    NotificationType.ERROR: "❌",
}


def render_notifications_page(inbox: NotificationInbox):
    """The signed-in user's inbox."""
    st.title("🔔 Notifications")

    notifications = inbox.list_notifications()
    if not notifications:
        st.info("You're all caught up.")
        return

    col1, col2 = st.columns(2)
    if col1.button("Mark all as read"):
        inbox.mark_all_as_read()
        st.rerun()
    if col2.button("Clear all"):
        inbox.clear_notifications()
        st.rerun()

    st.markdown("---")
    for notification in notifications:
        col1, col2, col3 = st.columns([6, 1, 1])
        title = notification.title if notification.read else f"**{notification.title}**"
        col1.markdown(
            f"{NOTIFICATION_ICONS[notification.type]} {title}  \n"
            f"{notification.message}  \n"
            f"_{notification.created_at:%Y-%m-%d %H:%M}_"
        )
        if notification.action_url and notification.action_text:
            col1.caption(f"{notification.action_text}: {notification.action_url}")
        if not notification.read and col2.button("Read", key=f"read_{notification.id}"):
            inbox.mark_as_read(notification.id)
            st.rerun()
        if col3.button("Delete", key=f"dismiss_{notification.id}"):
            inbox.delete_notification(notification.id)
            st.rerun()


def render_settings_page(session: SessionStore):
    """Profile and connection status."""
    st.title("⚙️ Settings")
    user = session.current_user

    st.markdown("### Profile")
    with st.form("profile"):
        full_name = st.text_input("Full name", value=user.full_name)
        profession = st.text_input("Profession", value=user.profession)
        hobby = st.text_input("Hobby", value=user.hobby)
        if st.form_submit_button("Save profile"):
            result = session.update_user(
                full_name=full_name, profession=profession, hobby=hobby,
            )
            (st.success if result.success else st.error)(result.message)

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for key in ("storage", "app", "google_sheets"):
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {key.replace('_', ' ').title()} - OK")
        else:
            st.error(f"❌ {key.replace('_', ' ').title()} - {status.get(f'{key}_error')}")


if __name__ == "__main__":
    main()
