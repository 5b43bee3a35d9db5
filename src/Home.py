import os
import sys

import pandas as pd
import streamlit as st

sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))  # /app/src

from tools.report_aggregation import total_amount
from tools.report_charts import format_currency
from tools.receipt_schema import category_label
from utils.errors import AuthError, ReceiptStoreError
from utils.logging_setup import configure_logging
from utils.receipts_repo import fetch_receipts
from utils.supabase_utils import doppler_bootstrap, get_supabase_client
from utils.ui import card, get_session, pop_flash, render_sidebar

doppler_bootstrap()
configure_logging()

st.set_page_config(page_title="Receipt Ledger", layout="centered")
render_sidebar("Home")

session = get_session()
user = session.current_user()

# -------------------------
# SIGNED OUT: sign in / sign up / reset
# -------------------------
if user is None:
    st.title("🧾 Receipt Ledger")
    st.caption("Scan receipts, keep your books, see where the money goes.")

    tab_in, tab_up, tab_reset = st.tabs(["Sign in", "Create account", "Forgot password"])
    with tab_in:
        with st.form("sign_in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Sign in"):
                try:
                    session.sign_in(email.strip(), password)
                    st.rerun()
                except AuthError as e:
                    st.error(str(e))
    with tab_up:
        with st.form("sign_up"):
            email = st.text_input("Email", key="su_email")
            password = st.text_input("Password", type="password", key="su_password")
            if st.form_submit_button("Create account"):
                try:
                    if session.sign_up(email.strip(), password):
                        st.rerun()
                    st.success("Check your inbox to confirm your email, then sign in.")
                except AuthError as e:
                    st.error(str(e))
    with tab_reset:
        with st.form("reset"):
            email = st.text_input("Email", key="rs_email")
            if st.form_submit_button("Send reset link"):
                try:
                    session.reset_password(email.strip())
                    st.success("If that address has an account, a reset link is on its way.")
                except AuthError as e:
                    st.error(str(e))
    st.stop()

# -------------------------
# SIGNED IN: dashboard
# -------------------------
st.title("🧾 Receipt Ledger")
message = pop_flash()
if message:
    st.success(message)
if st.sidebar.button("Sign out"):
    try:
        session.sign_out()
    except AuthError as e:
        st.sidebar.warning(str(e))
    st.rerun()

try:
    receipts = fetch_receipts(get_supabase_client(), user.id)
except ReceiptStoreError as e:
    st.error(str(e))
    receipts = []

col1, col2, col3 = st.columns(3)
col1.metric("Net total", format_currency(total_amount(receipts)))
col2.metric("Receipts", len(receipts))
col3.metric("Latest", format_currency(receipts[0].amount) if receipts else "—")

c1, c2, c3 = st.columns(3)
if c1.button("Scan a receipt"):
    st.switch_page("pages/1_scan_receipt.py")
if c2.button("Manual entry"):
    st.switch_page("pages/2_manual_entry.py")
if c3.button("Reports"):
    st.switch_page("pages/3_reports.py")

with card("Recent receipts", "Newest first"):
    if receipts:
        df = pd.DataFrame(
            [
                {
                    "Date": r.date.isoformat() if r.date else "—",
                    "Vendor": r.vendor,
                    "Category": category_label(r.category_key),
                    "Type": r.type.value,
                    "Amount": format_currency(r.amount),
                }
                for r in receipts[:25]
            ]
        )
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.info("No receipts yet. Scan one or add it by hand.")
