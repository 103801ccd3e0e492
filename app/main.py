"""
Streamlit Frontend for SpendWise

A thin layer over the core: it renders the repository and the
aggregation results, and dispatches user intents (add, edit, delete,
scan receipt, suggest category) into the form controller.

DESIGN PRINCIPLES:
1. Nothing is saved without pressing "Add Expense" / "Save Changes"
2. AI helpers only pre-fill the form
3. Errors are shown as dismissible notices, never crash the page
"""

import asyncio
from datetime import date
from decimal import Decimal

import plotly.express as px
import streamlit as st

from spendwise.config import get_settings, validate_all_settings
from spendwise.models.category import CATEGORIES, category_label, get_category
from spendwise.models.expense import AssistOutcome, FormMode
from spendwise.orchestrator import (
    RECEIPT_ACTION,
    SUGGEST_ACTION,
    ExpenseFormController,
    create_app_components,
)
from spendwise.queries import build_chart_slices, summarize
from spendwise.repository import ExpenseRepository


st.set_page_config(
    page_title="SpendWise AI",
    page_icon="💸",
    layout="wide",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .big-number {
        font-size: 2.2em;
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
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_file_storage=True)
    except Exception as e:
        st.error(f"Failed to open local storage, using a temporary session: {e}")
        return create_app_components(use_file_storage=False)


def get_controller(repository: ExpenseRepository, audit_logger) -> ExpenseFormController:
    """One form controller per browser session."""
    if "form_controller" not in st.session_state:
        st.session_state.form_controller = ExpenseFormController(
            repository,
            audit_logger=audit_logger,
        )
    return st.session_state.form_controller


def show_notice(outcome: AssistOutcome) -> None:
    """Keep an AI outcome until the user dismisses it."""
    st.session_state.notice = outcome


def render_notice() -> None:
    outcome = st.session_state.get("notice")
    if not outcome or outcome.discarded:
        return
    text = f"**{outcome.title}** {outcome.message}"
    col1, col2 = st.columns([6, 1])
    with col1:
        if outcome.is_error:
            st.error(text)
        else:
            st.success(text)
    with col2:
        if st.button("Dismiss", key="dismiss_notice"):
            st.session_state.notice = None
            st.rerun()


def render_overview(repository: ExpenseRepository) -> None:
    summary = summarize(repository.snapshot())
    col1, col2 = st.columns([3, 2])

    with col1:
        st.subheader("Spending Overview")
        slices = build_chart_slices(summary.by_category)
        fig = px.pie(
            names=[s.label for s in slices],
            values=[float(s.total) for s in slices],
            color=[s.label for s in slices],
            color_discrete_map={s.label: s.color for s in slices},
            hole=0.5,
        )
        fig.update_layout(margin=dict(t=10, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

    with col2:
        st.subheader("Total Spending")
        st.markdown(
            f'<div class="big-number">${summary.total:,.2f}</div>',
            unsafe_allow_html=True,
        )
        count = summary.transaction_count
        st.caption(f"Across {count} transaction{'s' if count != 1 else ''}")


def render_expense_list(repository: ExpenseRepository, controller: ExpenseFormController) -> None:
    st.subheader("Recent Expenses")

    header = st.columns([2, 2, 4, 2, 1, 1])
    for column, title in zip(header, ["Date", "Category", "Notes", "Amount", "", ""]):
        column.markdown(f"**{title}**")

    for expense in repository.list_expenses():
        category = get_category(expense.category)
        cols = st.columns([2, 2, 4, 2, 1, 1])
        cols[0].write(expense.date.strftime("%b %d, %Y"))
        cols[1].write(f"{category.icon if category else ''} {category_label(expense.category)}")
        cols[2].write(expense.notes)
        cols[3].write(f"${expense.amount:,.2f}")

        if cols[4].button("✏️", key=f"edit_{expense.id}", help="Edit"):
            controller.cancel()
            controller.open_edit(expense.id)
            st.rerun()
        if cols[5].button("🗑️", key=f"delete_{expense.id}", help="Delete"):
            st.session_state.pending_delete = expense.id
            st.rerun()

    pending = st.session_state.get("pending_delete")
    if pending:
        st.warning(
            "This action cannot be undone. This will permanently delete this "
            "expense from your records."
        )
        col1, col2 = st.columns(2)
        if col1.button("Continue", type="primary", key="confirm_delete"):
            repository.remove(pending)
            if controller.editing_id == pending:
                controller.cancel()
            st.session_state.pending_delete = None
            st.rerun()
        if col2.button("Cancel", key="cancel_delete"):
            st.session_state.pending_delete = None
            st.rerun()


def _sync_form(controller: ExpenseFormController, key: str) -> None:
    """Copy widget values into the controller."""
    amount = st.session_state.get(f"{key}_amount")
    category = st.session_state.get(f"{key}_category")
    controller.set_values(
        amount=Decimal(str(amount)) if amount is not None else None,
        date=st.session_state.get(f"{key}_date"),
        notes=st.session_state.get(f"{key}_notes") or "",
        category=category.value.value if category else "",
    )


def render_form(controller: ExpenseFormController) -> None:
    editing = controller.mode == FormMode.EDITING
    settings = get_settings().app

    st.markdown("---")
    st.subheader("Edit Expense" if editing else "Add New Expense")
    st.caption(
        "Update the details of your expense." if editing
        else "Fill in the details or scan a receipt to start."
    )

    # Widget keys change when the controller's values change underneath them
    revision = st.session_state.setdefault("form_revision", 0)
    key = f"form_{controller.session_id}_{revision}"
    values = controller.values

    receipt = st.file_uploader(
        "Receipt photo",
        type=settings.supported_formats_list + ["jpg"],
        key=f"{key}_receipt",
    )
    scanning = controller.is_busy(RECEIPT_ACTION)
    if st.button(
        "Analyzing..." if scanning else "🧾 Scan Receipt with AI",
        disabled=receipt is None or scanning,
        key=f"{key}_scan",
    ):
        _sync_form(controller, key)
        with st.spinner("Analyzing receipt..."):
            outcome = run_async(controller.scan_receipt(receipt.getvalue()))
        show_notice(outcome)
        st.session_state.form_revision = revision + 1
        st.rerun()

    st.caption("Or fill manually")

    col1, col2 = st.columns(2)
    with col1:
        st.number_input(
            "Amount",
            value=float(values.amount) if values.amount is not None else 0.0,
            min_value=0.0,
            step=0.01,
            format="%.2f",
            key=f"{key}_amount",
        )
        st.date_input(
            "Date",
            value=min(max(values.date or date.today(), settings.min_expense_date), date.today()),
            min_value=settings.min_expense_date,
            max_value=date.today(),
            key=f"{key}_date",
        )
    with col2:
        current = get_category(values.category)
        options = [None] + list(CATEGORIES)
        st.selectbox(
            "Category",
            options=options,
            index=options.index(current) if current else 0,
            format_func=lambda c: "Select a category" if c is None else f"{c.icon} {c.label}",
            key=f"{key}_category",
        )
        suggesting = controller.is_busy(SUGGEST_ACTION)
        if st.button("✨ Suggest Category", disabled=suggesting, key=f"{key}_suggest"):
            _sync_form(controller, key)
            with st.spinner("Thinking..."):
                outcome = run_async(controller.suggest_category())
            show_notice(outcome)
            st.session_state.form_revision = revision + 1
            st.rerun()

    st.text_area(
        "Notes",
        value=values.notes,
        placeholder="e.g., Coffee with a friend",
        key=f"{key}_notes",
    )

    result = controller.last_result
    if result is not None and not result.is_valid:
        for issue in result.issues:
            st.error(f"{issue.field.capitalize()}: {issue.message}")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Cancel", key=f"{key}_cancel"):
            controller.cancel()
            st.rerun()
    with col2:
        if st.button("Save Changes" if editing else "Add Expense", type="primary", key=f"{key}_submit"):
            _sync_form(controller, key)
            result = controller.submit()
            if result.is_valid:
                for warning in result.warnings:
                    st.toast(warning)
            st.session_state.form_revision = revision + 1
            st.rerun()


def render_sidebar() -> None:
    with st.sidebar:
        st.header("⚙️ System Status")
        status = validate_all_settings()
        services = [
            ("Gemini (AI helpers)", "gemini"),
            ("Local storage", "storage"),
        ]
        for name, key in services:
            if status.get(key, False):
                st.success(f"✅ {name} - Configured")
            else:
                error = status.get(f"{key}_error", "Not configured")
                st.error(f"❌ {name} - {error}")


def main():
    """Main application entry point."""
    repository, _, audit_logger = get_components()
    controller = get_controller(repository, audit_logger)
    render_sidebar()

    title_col, button_col = st.columns([5, 1])
    with title_col:
        st.title("💸 SpendWise AI")
    with button_col:
        if st.button("➕ Add Expense", key="open_new"):
            controller.cancel()
            controller.open_new()
            st.rerun()

    if not repository.last_save_ok:
        st.warning("Your last change could not be saved to disk. It is kept for this session only.")

    render_notice()

    if controller.is_open:
        render_form(controller)

    if len(repository) == 0:
        if not controller.is_open:
            st.markdown("### Welcome to SpendWise AI")
            st.markdown("You haven't added any expenses yet.")
            if st.button("Add Your First Expense", key="open_first"):
                controller.open_new()
                st.rerun()
        return

    st.markdown("---")
    render_overview(repository)
    st.markdown("---")
    render_expense_list(repository, controller)


if __name__ == "__main__":
    main()
