from typing import Optional

from tools.receipt_schema import CompanySettings
from utils.errors import ReceiptStoreError

COMPANY_TABLE = "company"


def fetch_company(supabase, user_id: str) -> Optional[CompanySettings]:
    """Company name/info for user_id, or None before the first save."""
    if not user_id:
        return None
    try:
        result = (
            supabase.table(COMPANY_TABLE)
            .select("name, info")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise ReceiptStoreError(f"Could not load company settings: {e}") from e
    if not result.data:
        return None
    row = result.data[0]
    return CompanySettings(user_id=user_id, name=row.get("name") or "", info=row.get("info") or "")


def save_company(supabase, settings: CompanySettings) -> CompanySettings:
    row = {"user_id": settings.user_id, "name": settings.name.strip(), "info": settings.info.strip()}
    try:
        supabase.table(COMPANY_TABLE).upsert(row, on_conflict="user_id").execute()
    except Exception as e:
        raise ReceiptStoreError(f"Could not save company settings: {e}") from e
    return CompanySettings(**row)
