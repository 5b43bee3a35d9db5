# src/utils/receipts_repo.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from tools.receipt_schema import (
    Transaction,
    TransactionType,
    parse_amount,
    parse_receipt_date,
)
from utils.errors import ReceiptStoreError
from utils.logging_setup import get_logger

log = get_logger("receipt_ledger.store")

RECEIPTS_TABLE = "receipts"


# ---------- helpers ----------
def _coalesce(*vals):
    for v in vals:
        if v is not None and str(v).strip().lower() not in ("", "null", "none"):
            return v
    return None


def _dict_ci_get(d: Dict[str, Any], keys: Iterable[str]) -> Optional[Any]:
    if not isinstance(d, dict):
        return None
    lower_map = {str(k).lower(): k for k in d.keys()}
    for k in keys:
        lk = k.lower()
        if lk in lower_map:
            return d[lower_map[lk]]
    return None


# ---------- normalization (store boundary) ----------
def normalize_receipt_row(row: Dict[str, Any]) -> Transaction:
    """
    Turn one loosely-typed row into a Transaction. Older rows use merchant/total
    or category instead of vendor/amount/tax_category. A date that can't be
    read becomes None. Raises ValidationError when user_id or amount is missing.
    """
    amount = parse_amount(_coalesce(_dict_ci_get(row, ["amount"]), _dict_ci_get(row, ["total"])))
    raw_type = _coalesce(_dict_ci_get(row, ["type"]))
    if raw_type is None and amount is not None:
        raw_type = (TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME).value

    ident = _coalesce(_dict_ci_get(row, ["id"]))
    user_id = _coalesce(_dict_ci_get(row, ["user_id"]))
    created = _coalesce(_dict_ci_get(row, ["created_at"]))
    return Transaction.model_validate({
        "id": str(ident) if ident is not None else None,
        "user_id": str(user_id) if user_id is not None else None,
        "date": parse_receipt_date(_coalesce(_dict_ci_get(row, ["date"]))),
        "amount": amount,
        "vendor": str(_coalesce(_dict_ci_get(row, ["vendor"]), _dict_ci_get(row, ["merchant"])) or "").strip(),
        "category": _coalesce(_dict_ci_get(row, ["tax_category"]), _dict_ci_get(row, ["category"])),
        "notes": _coalesce(_dict_ci_get(row, ["notes"])),
        "image_url": _coalesce(_dict_ci_get(row, ["image_url"])),
        "type": str(raw_type).lower() if raw_type is not None else None,
        "created_at": str(created) if created is not None else None,
    })


def normalize_rows(rows: Iterable[Dict[str, Any]]) -> List[Transaction]:
    out: List[Transaction] = []
    for row in rows or []:
        try:
            out.append(normalize_receipt_row(row))
        except ValidationError as e:
            log.warning("dropping receipt row id=%r: %s", (row or {}).get("id"), e.errors()[0].get("msg"))
    return out


def to_row(txn: Transaction) -> Dict[str, Any]:
    """Column payload for a write. The amount sign is re-derived from type here."""
    signed = txn.signed()
    data = signed.model_dump(mode="json", exclude={"id", "created_at", "category"})
    data["tax_category"] = signed.category
    return data


# ---------- public repo ops ----------
def fetch_receipts(supabase, user_id: str, *, newest_first: bool = True) -> List[Transaction]:
    """All receipts owned by user_id, validated."""
    try:
        res = (
            supabase.table(RECEIPTS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("date", desc=newest_first)
            .execute()
        )
    except Exception as e:
        raise ReceiptStoreError(f"Could not load receipts: {e}") from e
    return normalize_rows(getattr(res, "data", None) or [])


def insert_receipt(supabase, txn: Transaction) -> Transaction:
    row = to_row(txn)
    try:
        res = supabase.table(RECEIPTS_TABLE).insert(row).execute()
    except Exception as e:
        raise ReceiptStoreError(f"Could not save receipt: {e}") from e

    data = getattr(res, "data", None) or []
    saved = normalize_rows(data[:1])
    log.info("inserted receipt for user=%s amount=%s", txn.user_id, row["amount"])
    return saved[0] if saved else txn.signed()


def update_receipt(supabase, txn: Transaction) -> Transaction:
    """Rewrite a stored receipt; the sign rule is enforced just like on insert."""
    if not txn.id:
        raise ReceiptStoreError("Cannot update a receipt without an id")
    row = to_row(txn)
    try:
        res = (
            supabase.table(RECEIPTS_TABLE)
            .update(row)
            .eq("id", txn.id)
            .eq("user_id", txn.user_id)
            .execute()
        )
    except Exception as e:
        raise ReceiptStoreError(f"Could not update receipt {txn.id}: {e}") from e

    saved = normalize_rows((getattr(res, "data", None) or [])[:1])
    return saved[0] if saved else txn.signed()


def delete_receipt(supabase, receipt_id: str, user_id: str) -> None:
    try:
        supabase.table(RECEIPTS_TABLE).delete().eq("id", receipt_id).eq("user_id", user_id).execute()
    except Exception as e:
        raise ReceiptStoreError(f"Could not delete receipt {receipt_id}: {e}") from e


# ---------- storage ----------
def receipt_image_path(user_id: str, filename: str, now: Optional[datetime] = None) -> str:
    """<user_id>/<clean_name>_<timestamp>.<ext>"""
    stamp = (now or datetime.utcnow()).strftime("%Y%m%d_%H%M%S")
    name = filename or "receipt"
    ext = "jpg"
    m = re.search(r"\.([A-Za-z0-9]+)$", name)
    if m:
        ext = m.group(1).lower()
        name = name[: m.start()]
    clean = re.sub(r"[^a-zA-Z0-9_-]", "_", name).lower() or "receipt"
    return f"{user_id}/{clean}_{stamp}.{ext}"


def upload_receipt_image(
    supabase,
    bucket: str,
    user_id: str,
    image_bytes: bytes,
    filename: str,
    mime_type: Optional[str] = None,
) -> str:
    """Upload to object storage and return a retrievable URL."""
    path = receipt_image_path(user_id, filename)
    try:
        supabase.storage.from_(bucket).upload(
            path=path,
            file=image_bytes,
            file_options={"content-type": mime_type or "image/jpeg", "x-upsert": "false"},
        )
        url = supabase.storage.from_(bucket).get_public_url(path)
    except Exception as e:
        raise ReceiptStoreError(f"Could not upload receipt image: {e}") from e
    log.info("uploaded receipt image %s/%s", bucket, path)
    return url
