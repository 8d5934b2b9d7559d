"""
Streamlit Frontend for Budget Tracker

Four views:
1. Dashboard - budget ring, category bars, monthly trend, recent list
2. Add       - log a new expense
3. AI        - ask the advisor about your numbers
4. History   - every expense, with delete

DESIGN PRINCIPLES:
1. The UI only calls BudgetTracker methods; it never edits state itself
2. Every action leaves a visible notice
3. Nothing shown here is computed in the UI (analytics builds it all)
"""

import asyncio
from datetime import date

import streamlit as st

from src.agents import QUICK_QUESTIONS, answer_html
from src.analytics import format_currency, format_short_date, trend_chart_rows
from src.models.expense import CATEGORIES, DEFAULT_CATEGORY
from src.orchestrator import BudgetTracker, View, create_app_components


# Page configuration
st.set_page_config(
    page_title="Budget Tracker",
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
    .answer-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
    .danger {
        color: #dc3545;
    }
</style>
""", unsafe_allow_html=True)


VIEW_LABELS = {
    View.DASHBOARD: "📊 Dashboard",
    View.ADD: "➕ Add Expense",
    View.AI: "🤖 AI Advisor",
    View.HISTORY: "📜 History",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_tracker() -> BudgetTracker:
    """One tracker per browser session, restored from storage on first use."""
    if "tracker" not in st.session_state:
        try:
            tracker = create_app_components(use_storage=True)
        except Exception as e:
            st.error(f"Failed to initialize: {e}")
            tracker = create_app_components(use_storage=False)
        run_async(tracker.load())
        st.session_state.tracker = tracker
    return st.session_state.tracker


def show_notice(tracker: BudgetTracker):
    notice = tracker.pop_notice()
    if notice is None:
        return
    if notice.kind == "error":
        st.error(notice.message)
    elif notice.kind == "info":
        st.info(notice.message)
    else:
        st.success(notice.message)


def main():
    """Main application entry point."""
    tracker = get_tracker()

    st.sidebar.title("💰 Budget Tracker")
    st.sidebar.markdown("---")

    views = list(VIEW_LABELS)
    selected = st.sidebar.radio(
        "Navigate to:",
        views,
        index=views.index(tracker.view),
        format_func=lambda view: VIEW_LABELS[view],
    )
    if selected != tracker.view:
        tracker.set_view(selected)

    render_connection_status()

    show_notice(tracker)

    if tracker.view == View.DASHBOARD:
        render_dashboard(tracker)
    elif tracker.view == View.ADD:
        render_add_page(tracker)
    elif tracker.view == View.AI:
        render_advisor_page(tracker)
    elif tracker.view == View.HISTORY:
        render_history_page(tracker)


def render_connection_status():
    """Sidebar panel showing which services are configured."""
    from src.config import validate_all_settings

    status = validate_all_settings()
    services = [
        ("Gemini (AI)", "gemini"),
        ("Gemini proxy", "proxy"),
        ("Google Sheets (Storage)", "google_sheets"),
    ]

    with st.sidebar.expander("⚙️ Connection Status"):
        for name, key in services:
            if status.get(key, False):
                st.success(f"✅ {name}")
            else:
                st.warning(f"⚠️ {name} - {status.get(f'{key}_error', 'Not configured')}")


def render_dashboard(tracker: BudgetTracker):
    """Render the dashboard."""
    st.title("📊 Dashboard")
    analytics = tracker.analytics()

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Budget", format_currency(analytics.budget))
    with col2:
        st.metric("Spent", format_currency(analytics.total_spent))
    with col3:
        st.metric("Remaining", format_currency(analytics.remaining))

    percent = int(analytics.spend_ratio_percent)
    css = "big-number danger" if analytics.danger_zone else "big-number"
    st.markdown(f'<div class="{css}">{percent}% used</div>', unsafe_allow_html=True)
    st.progress(float(analytics.spend_ratio))

    with st.expander("✏️ Edit budget"):
        new_budget = st.number_input(
            "Monthly budget (₹)",
            value=float(analytics.budget),
            step=500.0,
        )
        if st.button("Save budget"):
            tracker.set_budget(new_budget)
            st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        st.markdown(f"**Transactions:** {analytics.transaction_count}")
    with col2:
        st.markdown(
            f"**Average per active day:** {format_currency(analytics.average_per_active_day)}"
        )

    st.markdown("---")
    st.subheader("By category")
    if not analytics.category_breakdown:
        st.info("No expenses yet. Use 'Add Expense' to log your first one.")
    for item in analytics.category_breakdown:
        st.markdown(f"{item.icon} **{item.category}** - {format_currency(item.total)}")
        st.progress(float(item.share_percent) / 100)

    st.markdown("---")
    st.subheader("Monthly trend")
    st.bar_chart(
        trend_chart_rows(analytics.monthly_trend),
        x="month",
        y="total",
    )

    st.markdown("---")
    st.subheader("Recent")
    for record in analytics.recent_transactions:
        cat = record.display_category
        st.markdown(
            f"{cat.icon} {record.title} · {format_short_date(record.date)} · "
            f"**{format_currency(record.amount)}**"
        )


def render_add_page(tracker: BudgetTracker):
    """Render the add-expense form."""
    st.title("➕ Add Expense")

    names = [cat.name for cat in CATEGORIES]
    with st.form("add_expense", clear_on_submit=True):
        amount = st.text_input("Amount (₹) *", placeholder="e.g. 250")
        category = st.selectbox(
            "Category",
            options=names,
            index=names.index(DEFAULT_CATEGORY),
            format_func=lambda name: f"{CATEGORIES[names.index(name)].icon} {name}",
        )
        note = st.text_input("Note (optional)")
        expense_date = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Add Expense", type="primary")

    if submitted:
        tracker.add_expense(amount, category, note, expense_date)
        st.rerun()


def render_advisor_page(tracker: BudgetTracker):
    """Render the advisor panel."""
    st.title("🤖 AI Advisor")
    st.markdown("Ask anything about your spending.")

    question = None
    cols = st.columns(len(QUICK_QUESTIONS))
    for col, quick in zip(cols, QUICK_QUESTIONS):
        with col:
            if st.button(quick):
                question = quick

    typed = st.text_input("Your question:", placeholder="e.g. Am I overspending?")
    if st.button("🔍 Ask", type="primary"):
        question = typed

    if question:
        with st.spinner("Thinking..."):
            try:
                run_async(tracker.ask(question))
            except Exception as e:
                st.error(f"Error: {e}")

    advisory = tracker.advisory
    if advisory.message:
        st.markdown(
            f'<div class="answer-box">{answer_html(advisory.message)}</div>',
            unsafe_allow_html=True,
        )
        if st.button("Clear"):
            advisory.reset()
            st.rerun()


def render_history_page(tracker: BudgetTracker):
    """Render every expense, newest first, with delete buttons."""
    st.title("📜 History")
    analytics = tracker.analytics()

    records = sorted(tracker.store.records, key=lambda record: record.date, reverse=True)
    if not records:
        st.info("Nothing logged yet.")
        return

    st.markdown(f"**{analytics.transaction_count} expenses, {format_currency(analytics.total_spent)} total**")
    for record in records:
        col1, col2 = st.columns([5, 1])
        with col1:
            st.markdown(
                f"{record.display_category.icon} {record.title} · "
                f"{format_short_date(record.date)} · **{format_currency(record.amount)}**"
            )
        with col2:
            if st.button("🗑️", key=f"delete-{record.id}"):
                tracker.delete_expense(record.id)
                st.rerun()


if __name__ == "__main__":
    main()
