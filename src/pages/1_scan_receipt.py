# src/pages/1_scan_receipt.py
import streamlit as st

from tools.receipt_extraction import MistralOcrClient, scan_receipt
from tools.receipt_schema import CATEGORY_LABELS, Transaction, TransactionType, parse_receipt_date
from utils.errors import ReceiptStoreError
from utils.receipts_repo import insert_receipt, upload_receipt_image
from utils.supabase_utils import get_mistral_api_key, get_receipts_bucket, get_supabase_client
from utils.ui import cached_draft, card, flash, forget_draft, render_sidebar, require_user

st.set_page_config(page_title="Scan Receipt", layout="centered")
render_sidebar("Scan Receipt")
user = require_user()

st.title("📸 Scan Receipt")

# ---------------------------------
# 1. Income or expense?
# ---------------------------------
txn_type = st.radio(
    "What is this receipt?",
    [TransactionType.EXPENSE.value, TransactionType.INCOME.value],
    format_func=str.capitalize,
    horizontal=True,
)

# ---------------------------------
# 2. Upload or camera
# ---------------------------------
source = st.segmented_control("Image source", ["Upload", "Camera"], default="Upload")
if source == "Camera":
    image = st.camera_input("Take a photo of the receipt")
else:
    image = st.file_uploader("Upload your receipt", type=["jpg", "jpeg", "png"])

if not image:
    st.info("Add a receipt image to pre-fill the form, or use Manual Entry.")
    st.stop()

file_bytes = image.getvalue()
st.image(file_bytes, caption="🖼️ Preview", use_container_width=True)

# ---------------------------------
# 3. OCR once per image
# ---------------------------------
def _scan():
    ocr = MistralOcrClient(api_key=get_mistral_api_key())
    return scan_receipt(file_bytes, image.type or "image/jpeg", ocr)


with st.spinner("Reading receipt…"):
    draft = cached_draft(st.session_state, file_bytes, _scan)

if draft is None or draft.is_empty:
    st.warning("Couldn't read this receipt. Retry, or fill in the details by hand.")
    if st.button("Retry OCR"):
        forget_draft(st.session_state, file_bytes)
        st.rerun()

# ---------------------------------
# 4. Review + save
# ---------------------------------
with card("Receipt details", "Check every field before saving"):
    with st.form("scan_receipt"):
        default_date = parse_receipt_date(draft.date) if draft else None
        date_value = st.date_input("Date", value=default_date or "today")
        amount = st.text_input("Amount ($)", value=draft.amount if draft else "")
        vendor = st.text_input("Vendor", value=draft.vendor if draft else "")
        category = st.selectbox(
            "Tax category",
            list(CATEGORY_LABELS),
            index=list(CATEGORY_LABELS).index("income" if txn_type == "income" else "business"),
            format_func=CATEGORY_LABELS.get,
        )
        notes = st.text_area("Notes")
        if draft and draft.full_text:
            with st.expander("Recognized text"):
                st.text(draft.full_text)
        submitted = st.form_submit_button("Save receipt")

if submitted:
    if not vendor.strip() or not amount.strip():
        st.error("Please provide at least a vendor and an amount.")
        st.stop()
    supabase = get_supabase_client()
    try:
        image_url = upload_receipt_image(
            supabase, get_receipts_bucket(), user.id, file_bytes, image.name or "receipt.jpg", image.type
        )
        txn = Transaction.from_form(
            user_id=user.id,
            type=txn_type,
            date=date_value,
            amount=amount,
            vendor=vendor,
            category=category,
            notes=notes,
            image_url=image_url,
        )
        insert_receipt(supabase, txn)
    except ValueError as e:
        st.error(str(e))
    except ReceiptStoreError as e:
        st.error(f"Failed to save the receipt: {e}")
    else:
        forget_draft(st.session_state, file_bytes)
        flash("✅ Receipt saved")
        st.switch_page("Home.py")
