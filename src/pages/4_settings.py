# src/pages/4_settings.py
import streamlit as st

from tools.receipt_schema import CompanySettings
from utils.company_service import fetch_company, save_company
from utils.errors import ReceiptStoreError
from utils.supabase_utils import get_supabase_client
from utils.ui import card, render_sidebar, require_user

st.set_page_config(page_title="Settings", layout="centered")
render_sidebar("Settings")
user = require_user()

st.title("⚙️ Company Settings")

supabase = get_supabase_client()
try:
    current = fetch_company(supabase, user.id) or CompanySettings(user_id=user.id)
except ReceiptStoreError as e:
    st.warning(str(e))
    current = CompanySettings(user_id=user.id)

with card("Company"):
    with st.form("company"):
        name = st.text_input("Company Name", value=current.name)
        info = st.text_area("Company Info", value=current.info)
        submitted = st.form_submit_button("Save")

if submitted:
    if not name.strip():
        st.error("Company name is required.")
    else:
        try:
            save_company(supabase, CompanySettings(user_id=user.id, name=name, info=info))
            st.success("Settings saved!")
        except ReceiptStoreError as e:
            st.error(str(e))
