"""
Streamlit Frontend for EduFin

The screens a student uses: a rotating saving tip, the need-or-want
quiz, savings goals, the expense tracker with its summary, the savings
calculators and the resource library.

DESIGN PRINCIPLES:
1. Every number shown comes from the API or a pure helper
2. Errors are shown in plain language, never as tracebacks
3. Signed-out users still get tips, quiz, calculators and resources

Run with:
    streamlit run app/main.py
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import streamlit as st

from edufin.client import (
    RANGE_LABELS,
    ApiClient,
    ApiError,
    add_savings,
    daily_target,
    goal_progress,
    grade_quiz,
    range_bounds,
    savings_duration,
    score_message,
)
from edufin.config import get_settings, validate_all_settings
from edufin.models import ExpenseCategory, GoalStatus
from edufin.tips import JsonFileBagStore, TipCarousel, bag_key


# Page configuration
st.set_page_config(
    page_title="EduFin",
    page_icon="💡",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .tip-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
        font-size: 1.2em;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


PAGES = [
    "🏠 Dashboard",
    "💡 Tips",
    "❓ Quiz",
    "🎯 Goals",
    "💸 Expenses",
    "🧮 Calculators",
    "📚 Resources",
    "⚙️ Settings",
]

SIGNED_IN_PAGES = {"🎯 Goals", "💸 Expenses"}


def money(value) -> str:
    return f"${Decimal(value):,.2f}"


def get_client() -> ApiClient:
    """One API client per browser session; it holds the user's token."""
    if "client" not in st.session_state:
        st.session_state.client = ApiClient(get_settings().app.api_base_url)
    return st.session_state.client


def main():
    """Main application entry point."""
    client = get_client()

    st.sidebar.title("💡 EduFin")
    st.sidebar.markdown("---")

    page = st.sidebar.radio("Navigate to:", PAGES, index=0)

    st.sidebar.markdown("---")
    render_account_box(client)

    if page in SIGNED_IN_PAGES and not client.token:
        st.title(page)
        st.info("Sign in from the sidebar to use this page.")
        return

    try:
        if page == "🏠 Dashboard":
            render_dashboard(client)
        elif page == "💡 Tips":
            render_tips_page(client)
        elif page == "❓ Quiz":
            render_quiz_page(client)
        elif page == "🎯 Goals":
            render_goals_page(client)
        elif page == "💸 Expenses":
            render_expenses_page(client)
        elif page == "🧮 Calculators":
            render_calculators_page()
        elif page == "📚 Resources":
            render_resources_page(client)
        elif page == "⚙️ Settings":
            render_settings_page(client)
    except ApiError as e:
        if e.status_code == 401:
            client.logout()
            st.warning("Your session has expired. Please sign in again.")
        else:
            st.error(f"Something went wrong: {e.message}")
    except OSError as e:
        st.error(f"Could not reach the EduFin server: {e}")


def render_account_box(client: ApiClient):
    """Sign in, register or sign out, in the sidebar."""
    if client.token:
        user = st.session_state.get("user")
        st.sidebar.markdown(f"Signed in as **{user.name or user.email if user else 'you'}**")
        if st.sidebar.button("Sign out"):
            client.logout()
            st.session_state.pop("user", None)
            st.rerun()
        return

    mode = st.sidebar.radio("Account", ["Sign in", "Register"], horizontal=True)
    with st.sidebar.form("account"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        name = st.text_input("Name") if mode == "Register" else ""
        submitted = st.form_submit_button(mode)

    if submitted:
        try:
            if mode == "Register":
                user = client.register(email, password, name)
            else:
                user = client.login(email, password)
        except ApiError as e:
            st.sidebar.error(e.message)
        else:
            st.session_state.user = user
            st.rerun()


def render_dashboard(client: ApiClient):
    st.title("🏠 Dashboard")
    render_tip_card(client)

    if not client.token:
        st.info("Sign in to see your goals and spending.")
        return

    st.markdown("---")
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("🎯 Goals")
        goals = [g for g in client.goals() if g.status == GoalStatus.ACTIVE]
        if not goals:
            st.write("No active goals yet.")
        for goal in goals[:3]:
            progress = goal_progress(goal)
            st.write(f"**{goal.item_name}**: {money(goal.saved_amount)} of {money(goal.target_price)}")
            st.progress(min(int(progress.percent), 100))

    with col2:
        st.subheader("💸 This month")
        date_from, date_to = range_bounds("1m")
        summary = client.expense_summary(date_from, date_to)
        st.markdown(f'<div class="big-number">{money(summary.total)}</div>', unsafe_allow_html=True)
        if summary.top_category:
            st.write(f"Most spent on **{summary.top_category.category.value}**")


# =============================================================================
# TIPS
# =============================================================================

def bag_owner() -> str:
    """The signed-in user, else an id minted once for this browser session."""
    user = st.session_state.get("user")
    if user:
        return f"user:{user.id}"
    if "browser_id" not in st.session_state:
        st.session_state.browser_id = uuid4().hex
    return f"browser:{st.session_state.browser_id}"


def get_carousel(client: ApiClient) -> TipCarousel:
    """Rebuilt when the tip set or the owner changes; the bag itself lives on disk."""
    tips = client.tips()
    owner = bag_owner()
    key = (owner, tuple(tip.id for tip in tips))
    if st.session_state.get("carousel_key") != key:
        store = JsonFileBagStore(get_settings().app.tip_bag_file, key=bag_key(owner))
        st.session_state.carousel = TipCarousel(tips, store)
        st.session_state.carousel_key = key
    return st.session_state.carousel


def render_tip_card(client: ApiClient):
    carousel = get_carousel(client)
    if not carousel.available:
        st.info("No tips available yet")
        return

    tip = carousel.start()
    st.markdown(f'<div class="tip-box">💡 {tip.text}</div>', unsafe_allow_html=True)

    seen, total = carousel.progress
    col1, col2 = st.columns([3, 1])
    with col1:
        st.caption(f"{seen} of {total} tips seen this round, {carousel.remaining} to go")
    with col2:
        if st.button("Next tip ➡️"):
            carousel.next_tip()
            st.rerun()


def render_tips_page(client: ApiClient):
    st.title("💡 Saving Tips")
    st.markdown("One tip at a time. You'll see every tip before any repeats.")
    render_tip_card(client)


# =============================================================================
# QUIZ
# =============================================================================

def render_quiz_page(client: ApiClient):
    st.title("❓ Need or Want?")
    items = client.quiz()
    if not items:
        st.info("No quiz questions yet.")
        return

    answers = st.session_state.setdefault("quiz_answers", {})

    for item in items:
        choice = st.radio(
            item.prompt,
            ["need", "want"],
            index=None if item.id not in answers else ["need", "want"].index(answers[item.id]),
            horizontal=True,
            key=f"quiz_{item.id}",
        )
        if choice:
            answers[item.id] = choice
            if choice == item.answer.value:
                st.success(f"Correct! {item.explanation or ''}")
            else:
                st.error(f"Not quite. {item.explanation or ''}")

    result = grade_quiz(items, answers)
    st.markdown("---")
    st.progress(int(result.answered * 100 / result.total))

    if result.answered_all:
        st.markdown(f'<div class="big-number">{result.percentage}%</div>', unsafe_allow_html=True)
        st.write(score_message(result.percentage))
        st.write(f"You scored {result.score} out of {result.total} questions correctly.")
        if st.button("Try again"):
            st.session_state.quiz_answers = {}
            for item in items:
                st.session_state.pop(f"quiz_{item.id}", None)
            st.rerun()


# =============================================================================
# GOALS
# =============================================================================

def render_goals_page(client: ApiClient):
    st.title("🎯 Savings Goals")

    with st.expander("➕ New goal", expanded=False):
        with st.form("new_goal"):
            item_name = st.text_input("What are you saving for?")
            target = st.number_input("Target price", min_value=0.0, step=10.0)
            saved = st.number_input("Already saved", min_value=0.0, step=10.0)
            if st.form_submit_button("Create Savings Goal", type="primary") and item_name:
                client.create_goal(item_name, Decimal(str(target)), Decimal(str(saved)))
                st.rerun()

    goals = client.goals()
    if not goals:
        st.info("No goals yet. Create your first savings goal to get started!")
        return

    for goal in goals:
        progress = goal_progress(goal)
        st.markdown("---")
        st.subheader(goal.item_name)

        if goal.status == GoalStatus.PURCHASED:
            st.success(
                f"✅ Purchased for {money(goal.purchase_price or 0)}"
                f" on {goal.purchased_at.isoformat() if goal.purchased_at else 'unknown date'}"
            )
            continue

        st.write(f"{money(goal.saved_amount)} of {money(goal.target_price)} ({round(progress.percent)}%)")
        st.progress(min(int(progress.percent), 100))

        col1, col2, col3 = st.columns(3)
        with col1:
            amount = st.number_input("Add money", min_value=0.0, step=5.0, key=f"add_{goal.id}")
            if st.button("Add", key=f"add_btn_{goal.id}") and amount > 0:
                new_amount = add_savings(goal, Decimal(str(amount)))
                if new_amount < goal.saved_amount + Decimal(str(amount)):
                    st.warning(f"You can only add up to {money(progress.remaining)} to reach your target.")
                client.update_goal(goal.id, saved_amount=new_amount)
                st.rerun()
        with col2:
            price = st.number_input(
                "Price paid",
                min_value=0.0,
                value=float(goal.target_price),
                key=f"price_{goal.id}",
            )
            if st.button("Mark purchased", key=f"buy_{goal.id}", disabled=not progress.funded):
                client.purchase_goal(goal.id, Decimal(str(price)), date.today())
                st.rerun()
        with col3:
            if st.button("🗑️ Delete", key=f"del_{goal.id}"):
                client.delete_goal(goal.id)
                st.rerun()


# =============================================================================
# EXPENSES
# =============================================================================

def render_expenses_page(client: ApiClient):
    st.title("💸 Expenses")

    range_key = st.radio(
        "Range",
        list(RANGE_LABELS),
        index=1,
        format_func=lambda key: RANGE_LABELS[key],
        horizontal=True,
    )
    date_from, date_to = range_bounds(range_key)

    with st.expander("➕ Add expense"):
        with st.form("new_expense"):
            col1, col2 = st.columns(2)
            with col1:
                amount = st.number_input("Amount", min_value=0.0, step=1.0)
                category = st.selectbox(
                    "Category",
                    options=list(ExpenseCategory),
                    index=list(ExpenseCategory).index(ExpenseCategory.OTHER),
                    format_func=lambda c: c.value.title(),
                )
            with col2:
                spent_on = st.date_input("Date", value=date.today())
                note = st.text_input("Note")
            if st.form_submit_button("Add", type="primary"):
                client.create_expense(
                    Decimal(str(amount)),
                    category=category,
                    date=spent_on,
                    note=note,
                )
                st.rerun()

    summary = client.expense_summary(date_from, date_to)

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("### Total")
        st.markdown(f'<div class="big-number">{money(summary.total)}</div>', unsafe_allow_html=True)
    with col2:
        st.markdown("### Top category")
        if summary.top_category:
            top = summary.top_category
            st.write(f"**{top.category.value.title()}**: {money(top.total)} ({float(top.share):.0%})")
        else:
            st.write("Nothing spent yet.")

    if summary.by_category:
        st.markdown("### By category")
        st.bar_chart({c.category.value: float(c.total) for c in summary.by_category})
    if summary.by_month:
        st.markdown("### By month")
        st.bar_chart({m.month: float(m.total) for m in summary.by_month})

    st.markdown("### Entries")
    expenses = client.expenses(date_from, date_to)
    if not expenses:
        st.info("No expenses in this range.")
    for expense in expenses:
        col1, col2, col3, col4 = st.columns([2, 2, 4, 1])
        col1.write(expense.date.isoformat())
        col2.write(f"{money(expense.amount)} · {expense.category.value}")
        col3.write(expense.note or "")
        if col4.button("🗑️", key=f"del_exp_{expense.id}"):
            client.delete_expense(expense.id)
            st.rerun()


# =============================================================================
# CALCULATORS
# =============================================================================

def render_calculators_page():
    st.title("🧮 Calculators")
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Daily target")
        st.caption("How much to save each day to reach a goal in time")
        target = st.number_input("Target amount", min_value=0.0, step=10.0, key="dt_target")
        days = st.number_input("Days", min_value=0, step=1, key="dt_days")
        per_day = daily_target(Decimal(str(target)), Decimal(days))
        if per_day is not None:
            st.markdown(f'<div class="big-number">{money(per_day)}/day</div>', unsafe_allow_html=True)

    with col2:
        st.subheader("Saving duration")
        st.caption("How long it takes when you save a fixed amount each day")
        per_day_in = st.number_input("Saved per day", min_value=0.0, step=1.0, key="sd_daily")
        price = st.number_input("Price", min_value=0.0, step=10.0, key="sd_price")
        estimate = savings_duration(Decimal(str(per_day_in)), Decimal(str(price)))
        if estimate is not None:
            st.markdown(f'<div class="big-number">{estimate.text}</div>', unsafe_allow_html=True)
            st.caption(f"{estimate.total_days} days in total")


# =============================================================================
# RESOURCES
# =============================================================================

def render_resources_page(client: ApiClient):
    st.title("📚 Resources")

    col1, col2, col3 = st.columns([3, 2, 1])
    with col1:
        q = st.text_input("Search")
    with col2:
        category = st.text_input("Category")
    with col3:
        language = st.text_input("Language")

    resources = client.resources(q=q, category=category, language=language)
    if not resources:
        st.info("No resources match.")
    for resource in resources:
        pin = "📌 " if resource.pinned else ""
        st.markdown(f"{pin}**[{resource.title}]({resource.url})**")
        if resource.summary:
            st.write(resource.summary)
        meta = [m for m in (resource.source, resource.category, resource.language) if m]
        if meta or resource.tags:
            st.caption(" · ".join(meta + [f"#{t}" for t in resource.tags]))


def render_settings_page(client: ApiClient):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")
    try:
        healthy = client.health()
    except (ApiError, OSError):
        healthy = False
    if healthy:
        st.success(f"✅ API - {get_settings().app.api_base_url}")
    else:
        st.error(f"❌ API - not reachable at {get_settings().app.api_base_url}")

    status = validate_all_settings()
    for name, key in (("MongoDB", "mongo"), ("Tokens", "auth"), ("Application", "app")):
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            st.warning(f"⚠️ {name} - {status.get(f'{key}_error', 'Not configured')}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
