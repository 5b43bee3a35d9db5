# src/utils/ui.py
from __future__ import annotations

import hashlib
from contextlib import contextmanager
from typing import Any, Callable, MutableMapping, Optional

import streamlit as st

from tools.receipt_schema import CurrentUser, DraftExtraction
from utils.session import SupabaseSession
from utils.supabase_utils import get_supabase_client

MENU = [
    {"label": "Home", "path": "Home.py"},
    {"label": "Scan Receipt", "path": "pages/1_scan_receipt.py"},
    {"label": "Manual Entry", "path": "pages/2_manual_entry.py"},
    {"label": "Reports", "path": "pages/3_reports.py"},
    {"label": "Settings", "path": "pages/4_settings.py"},
]

FLASH_KEY = "flash"


def get_session() -> SupabaseSession:
    return SupabaseSession(get_supabase_client(), st.session_state)


def require_user() -> CurrentUser:
    """Stop the page unless someone is signed in."""
    user = get_session().current_user()
    if user is None:
        st.warning("Please sign in on the Home page first.")
        st.page_link("Home.py", label="Go to sign in")
        st.stop()
    return user


def _state(state: Optional[MutableMapping[str, Any]]) -> MutableMapping[str, Any]:
    return st.session_state if state is None else state


def flash(message: str, state: Optional[MutableMapping[str, Any]] = None) -> None:
    """Queue a message for the next page shown (survives st.switch_page)."""
    _state(state)[FLASH_KEY] = message


def pop_flash(state: Optional[MutableMapping[str, Any]] = None) -> Optional[str]:
    return _state(state).pop(FLASH_KEY, None)


def draft_key(image_bytes: bytes) -> str:
    return f"draft_{hashlib.md5(image_bytes).hexdigest()}"


def cached_draft(
    state: MutableMapping[str, Any],
    image_bytes: bytes,
    scan: Callable[[], Optional[DraftExtraction]],
) -> Optional[DraftExtraction]:
    """Run `scan` once per image per session. A failed read (None) stays cached until forget_draft."""
    key = draft_key(image_bytes)
    if key not in state:
        state[key] = scan()
    return state[key]


def forget_draft(state: MutableMapping[str, Any], image_bytes: bytes) -> None:
    state.pop(draft_key(image_bytes), None)


@contextmanager
def card(title: str, subtitle: str | None = None, *, border: bool = True):
    """Bordered panel with a bold header, used across pages."""
    with st.container(border=border):
        st.markdown(f"**{title}**")
        if subtitle:
            st.caption(subtitle)
        yield


def render_sidebar(active: str) -> None:
    """Left menu from MENU, active page disabled."""
    with st.sidebar:
        st.markdown("### Receipt Ledger")
        for item in MENU:
            st.page_link(item["path"], label=item["label"], disabled=(active == item["label"]))
        user = st.session_state.get("current_user")
        if user:
            st.caption(f"Signed in as {user.get('email') or user.get('id')}")
