"""
Weight Distribution Editor

Run with: streamlit run main.py

This app lets you split 100% across a short list of creatives. Weights are
whole percentages and always rebalance to a total of 100.

Controls:
1) Chart of the current distribution (pink = unlocked, amber = locked)
2) One slider per creative to drag its weight (disabled while locked)
3) Table with Name, Weight (%), lock toggle and remove button
4) Sidebar: quick distributions, add creative, reorder

Locking behavior:
- A locked creative keeps its weight; every rebalance only moves the unlocked ones.
- Bell Curve and Exponential need every creative unlocked.
- If the locked weights alone reach 100% nothing can be rebalanced and the
  total warning stays visible until you unlock something.
"""

from __future__ import annotations

import logging
from typing import List

import streamlit as st

from chart import build_weight_chart
from editor import WeightEditor
from engine import Item, Strategy
from logging_config import configure_logging
from settings import get_settings

logger = logging.getLogger(__name__)

WIDGET_PREFIXES = ("name_", "weight_", "slider_", "reorder_")

STRATEGY_BUTTONS = [
    (Strategy.EVEN, "Evenly", "Distribute weights evenly among unlocked creatives"),
    (Strategy.RANDOM, "Random", "Distribute weights randomly"),
    (Strategy.BELL, "Bell Curve", "Distribute weights in a bell curve (normal distribution)"),
    (Strategy.EXPONENTIAL, "Exponential", "Distribute weights exponentially (decreasing)"),
]
LOCKED_HELP = "Unlock all items to use this distribution"

# --------------------------- State Initialization ---------------------------


def clear_widget_state() -> None:
    """Drop widget-managed keys so the next run renders the new snapshot."""
    for k in list(st.session_state.keys()):
        if isinstance(k, str) and k.startswith(WIDGET_PREFIXES):
            del st.session_state[k]


def ensure_initialized() -> WeightEditor:
    """Create the editor on first run and return it."""
    if "editor" not in st.session_state:
        settings = get_settings()
        st.session_state.editor = WeightEditor.from_settings(settings)
        clear_widget_state()
        logger.info("editor initialised with %d items", len(st.session_state.editor.items))
    return st.session_state.editor


def commit(before: List[Item], after: List[Item]) -> None:
    """Rerun when a command changed the snapshot."""
    if after != before:
        clear_widget_state()
        st.rerun()


def load_css(path: str = "styles.css") -> str:
    """Load CSS from a file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        logger.warning("CSS file not found: %s", path)
        return ""

# --------------------------- UI Rendering ---------------------------


def render_sidebar(editor: WeightEditor) -> None:
    items = editor.items
    with st.sidebar:
        st.markdown("### Quick distribution")
        for kind, label, tip in STRATEGY_BUTTONS:
            allowed = editor.strategy_allowed(kind)
            if st.button(label, key=f"strategy_{kind.value}", disabled=not allowed,
                         help=tip if allowed else LOCKED_HELP, use_container_width=True):
                commit(items, editor.apply_strategy(kind))

        st.markdown("### Creatives")
        if st.button("Add creative", use_container_width=True):
            commit(items, editor.add_item())

        if len(items) > 1:
            st.markdown("### Reorder")
            labels = {item.id: item.name for item in items}
            ids = [item.id for item in items]
            source_id = st.selectbox("Move", ids, format_func=labels.get, key="reorder_source")
            target_id = st.selectbox("To the position of", ids, format_func=labels.get,
                                     index=len(ids) - 1, key="reorder_target")
            if st.button("Move", use_container_width=True):
                commit(items, editor.reorder(source_id, target_id))


def render_status(editor: WeightEditor) -> None:
    # Fixed slot for the warning so the layout does not jump
    status = st.empty()
    if editor.has_significant_deviation:
        status.markdown(
            f"<p class='total-warning'>Total must equal 100% (currently: {editor.total}%)</p>",
            unsafe_allow_html=True,
        )
    else:
        status.markdown("<p class='total-ok'>&nbsp;</p>", unsafe_allow_html=True)


def render_sliders(editor: WeightEditor) -> None:
    items = editor.items
    cols = st.columns(len(items), gap="small")
    for col, item in zip(cols, items):
        with col:
            new_val = st.slider(
                label=item.name,
                min_value=0,
                max_value=100,
                step=1,
                value=int(item.weight),
                key=f"slider_{item.id}",
                disabled=item.locked,
            )
            if not item.locked and new_val != item.weight:
                commit(items, editor.set_weight(item.id, new_val))


def render_table(editor: WeightEditor) -> None:
    items = editor.items
    widths = [3.0, 1.4, 0.8, 0.8]
    header_cols = st.columns(widths, gap="small")
    for col, h in zip(header_cols, ["Name", "Weight (%)", "Lock", ""]):
        col.markdown(f"**{h}**")

    for item in items:
        c1, c2, c3, c4 = st.columns(widths, gap="small")
        with c1:
            name = st.text_input("Name", value=item.name, key=f"name_{item.id}",
                                 label_visibility="collapsed")
            if name != item.name:
                commit(items, editor.rename_item(item.id, name))
        with c2:
            raw = st.text_input("Weight", value=str(item.weight), key=f"weight_{item.id}",
                                disabled=item.locked, label_visibility="collapsed")
            if not item.locked and raw != str(item.weight):
                after = editor.set_weight(item.id, raw)
                if after == items:
                    # Non-numeric or no-op input: restore the field on the next run
                    st.session_state.pop(f"weight_{item.id}", None)
                commit(items, after)
        with c3:
            icon = "🔒" if item.locked else "🔓"
            if st.button(icon, key=f"lockbtn_{item.id}",
                         help="Unlock creative" if item.locked else "Lock creative at its current weight"):
                commit(items, editor.toggle_lock(item.id))
        with c4:
            if st.button("✕", key=f"removebtn_{item.id}", disabled=len(items) <= 1,
                         help="Remove creative"):
                commit(items, editor.remove_item(item.id))

    c1, c2, c3, c4 = st.columns(widths, gap="small")
    with c1:
        st.markdown("**Total**")
    with c2:
        st.markdown(f"**{editor.total}%**")


def main() -> None:
    settings = get_settings()
    configure_logging(log_level=settings.log_level, app_env=settings.app_env)

    st.set_page_config(page_title=settings.page_title, layout="wide")
    # Load compact UI spacing from external CSS
    css = load_css()
    if css:
        st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)

    st.title(settings.page_title)
    editor = ensure_initialized()

    render_sidebar(editor)
    render_status(editor)
    st.altair_chart(build_weight_chart(editor.items), use_container_width=True)
    render_sliders(editor)
    st.divider()
    render_table(editor)

    with st.expander("Details & Notes"):
        locked = [item.name for item in editor.items if item.locked]
        if locked:
            st.markdown(f"- Locked: {', '.join(locked)}. Their weights are preserved.")
        st.markdown(f"- Equal share: {100 / len(editor.items):.0f}% per creative")
        if editor.has_locked_items:
            st.info("Bell Curve and Exponential are disabled while any creative is locked.")


if __name__ == "__main__":

    main()
