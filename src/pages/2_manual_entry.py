# src/pages/2_manual_entry.py
import streamlit as st

from tools.receipt_schema import CATEGORY_LABELS, Transaction, TransactionType
from utils.errors import ReceiptStoreError
from utils.receipts_repo import insert_receipt
from utils.supabase_utils import get_supabase_client
from utils.ui import card, flash, render_sidebar, require_user

st.set_page_config(page_title="Manual Entry", layout="centered")
render_sidebar("Manual Entry")
user = require_user()

st.title("📝 Manual Receipt Entry")

with card("Receipt details"):
    with st.form("manual_entry"):
        txn_type = st.radio(
            "Type",
            [TransactionType.EXPENSE.value, TransactionType.INCOME.value],
            format_func=str.capitalize,
            horizontal=True,
        )
        date_value = st.date_input("Date", value="today")
        amount = st.text_input("Amount ($)")
        vendor = st.text_input("Vendor")
        category = st.selectbox("Tax category", list(CATEGORY_LABELS), format_func=CATEGORY_LABELS.get)
        notes = st.text_area("Notes")
        submitted = st.form_submit_button("Save receipt")

if submitted:
    try:
        txn = Transaction.from_form(
            user_id=user.id,
            type=txn_type,
            date=date_value,
            amount=amount,
            vendor=vendor,
            category=category,
            notes=notes,
        )
        insert_receipt(get_supabase_client(), txn)
    except ValueError as e:
        st.error(str(e))
    except ReceiptStoreError as e:
        st.error(f"Error saving receipt: {e}")
    else:
        flash("✅ Receipt saved")
        st.switch_page("Home.py")
