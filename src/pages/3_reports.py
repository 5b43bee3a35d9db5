# src/pages/3_reports.py
import streamlit as st

from tools.receipt_schema import ALL_CATEGORIES, ReportFilter, category_label
from tools.report_aggregation import aggregate, category_options, month_options
from tools.report_charts import category_bar, expense_doughnut, income_pie, monthly_line
from utils.errors import ReceiptStoreError
from utils.receipts_repo import fetch_receipts
from utils.supabase_utils import get_supabase_client
from utils.ui import card, render_sidebar, require_user

st.set_page_config(page_title="Reports", layout="wide")
render_sidebar("Reports")
user = require_user()

st.title("📊 Reports")

try:
    receipts = fetch_receipts(get_supabase_client(), user.id)
except ReceiptStoreError as e:
    st.error(str(e))
    st.stop()

if not receipts:
    st.info("No receipts yet.")
    st.stop()

# -------------------------
# Filters
# -------------------------
col1, col2, col3 = st.columns(3)
month = col1.selectbox("Month", [None, *month_options(receipts)], format_func=lambda m: m or "Any month")
date_range = col2.date_input("Custom range", value=(), disabled=month is not None)
category = col3.selectbox(
    "Category",
    [ALL_CATEGORIES, *category_options(receipts)],
    format_func=lambda c: "All" if c == ALL_CATEGORIES else category_label(c),
)

start, end = (date_range if isinstance(date_range, tuple) and len(date_range) == 2 else (None, None))
flt = ReportFilter(month=month, start_date=start, end_date=end, category=category)
result = aggregate(receipts, flt)
st.caption(f"{result.record_count} receipts match")

# -------------------------
# Charts
# -------------------------
left, right = st.columns(2)
with left:
    with card("Over time"):
        st.plotly_chart(monthly_line(result.monthly_totals), use_container_width=True)
    with card("Income breakdown"):
        st.plotly_chart(income_pie(result.income_totals), use_container_width=True)
with right:
    with card("By category"):
        st.plotly_chart(category_bar(result.category_totals), use_container_width=True)
    with card("Expense breakdown"):
        st.plotly_chart(expense_doughnut(result.expense_totals), use_container_width=True)
