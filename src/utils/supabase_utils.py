# src/utils/supabase_utils.py
"""
Secrets helper + Supabase client creator.

Resolution order for secrets:
1) st.secrets (Streamlit Cloud / local .streamlit/secrets.toml)
2) Environment variables (.env, Doppler, GH Actions, Docker)

Aliases supported:
- SUPABASE_URL  or SUPABASE__URL
- SUPABASE_KEY  or SUPABASE_ANON_KEY  or SUPABASE__KEY
- MISTRAL_API_KEY  or MISTRAL__API_KEY
- RECEIPTS_BUCKET  (defaults to "receipts")
"""

from __future__ import annotations

import os
from typing import Any, MutableMapping, Optional

import requests
import streamlit as st
from dotenv import load_dotenv
from supabase import Client, create_client

from utils.logging_setup import get_logger

load_dotenv()

log = get_logger("receipt_ledger.config")

DEFAULT_BUCKET = "receipts"
CLIENT_KEY = "supabase_client"

# Doppler names -> names the app expects
SECRET_ALIASES = {
    "SUPABASE__URL": "SUPABASE_URL",
    "SUPABASE_URL": "SUPABASE_URL",
    "SUPABASE__KEY": "SUPABASE_KEY",
    "SUPABASE_ANON_KEY": "SUPABASE_KEY",
    "SUPABASE_KEY": "SUPABASE_KEY",
    "MISTRAL__API__KEY": "MISTRAL_API_KEY",
    "MISTRAL__API_KEY": "MISTRAL_API_KEY",
    "MISTRAL_API_KEY": "MISTRAL_API_KEY",
}


def sget(*names: str) -> str | None:
    """
    Return the first non-empty value among names,
    checking Streamlit secrets first, then environment.
    """
    for n in names:
        try:
            if hasattr(st, "secrets") and n in st.secrets:
                v = st.secrets[n]
                if v:
                    return str(v)
        except Exception:
            # no secrets.toml outside Streamlit
            pass
        v = os.getenv(n)
        if v:
            return v
    return None


def _missing_msg(missing: list[str]) -> str:
    return (
        "Missing required secrets: "
        + ", ".join(missing)
        + "\nAdd them to .streamlit/secrets.toml or export them as env vars.\n"
        "Aliases supported for Supabase: SUPABASE__URL, SUPABASE_ANON_KEY, SUPABASE__KEY."
    )


def get_supabase_settings() -> tuple[str, str]:
    url = sget("SUPABASE_URL", "SUPABASE__URL")
    key = sget("SUPABASE_KEY", "SUPABASE_ANON_KEY", "SUPABASE__KEY")

    missing = []
    if not url:
        missing.append("SUPABASE_URL")
    if not key:
        missing.append("SUPABASE_KEY")
    if missing:
        raise RuntimeError(_missing_msg(missing))
    return url, key


def get_supabase_client(state: Optional[MutableMapping[str, Any]] = None) -> Client:
    """
    Supabase client for one browser session (st.session_state by default).
    The client holds the signed-in user's auth tokens, so it is never shared
    across sessions.
    """
    store = st.session_state if state is None else state
    client = store.get(CLIENT_KEY)
    if client is None:
        url, key = get_supabase_settings()
        client = create_client(url, key)
        store[CLIENT_KEY] = client
    return client


def get_mistral_api_key(required: bool = True) -> str | None:
    """Returns Mistral key from secrets/env; raises if required and missing."""
    key = sget("MISTRAL_API_KEY", "MISTRAL__API_KEY")
    if required and not key:
        raise RuntimeError("Missing Mistral API key. Set MISTRAL_API_KEY in secrets or env.")
    return key


def get_receipts_bucket() -> str:
    return sget("RECEIPTS_BUCKET") or DEFAULT_BUCKET


def doppler_bootstrap() -> int:
    """
    Pull secrets from Doppler into os.environ when DOPPLER_TOKEN,
    DOPPLER_PROJECT and DOPPLER_CONFIG are all set. Existing env vars win.
    Returns the number of variables exported.
    """
    token = sget("DOPPLER_TOKEN")
    project = sget("DOPPLER_PROJECT")
    config = sget("DOPPLER_CONFIG")
    if not (token and project and config):
        return 0

    r = requests.get(
        "https://api.doppler.com/v3/configs/config/secrets",
        params={"project": project, "config": config},
        headers={"Authorization": f"Bearer {token}"},
        timeout=10,
    )
    r.raise_for_status()
    secrets = r.json().get("secrets", {})

    exported = 0
    for k, v in secrets.items():
        val = v.get("computed") if isinstance(v, dict) else v
        if not val:
            continue
        target = SECRET_ALIASES.get(k, k)
        if not os.getenv(target):
            os.environ[target] = str(val)
            exported += 1
    log.info("doppler: exported %d secrets", exported)
    return exported
