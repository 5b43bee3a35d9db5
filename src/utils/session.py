# src/utils/session.py
"""
Session provider over Supabase auth.

Pages ask the provider for the signed-in user and hand its id to the repo and
report functions. Nothing below the pages reads session state on its own.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, MutableMapping, Optional, Protocol

from tools.receipt_schema import CurrentUser
from utils.errors import AuthError
from utils.logging_setup import get_logger

log = get_logger("receipt_ledger.session")

USER_KEY = "current_user"
PROFILES_TABLE = "profiles"


class SessionProvider(Protocol):
    def current_user(self) -> Optional[CurrentUser]: ...
    def sign_in(self, email: str, password: str) -> CurrentUser: ...
    def sign_up(self, email: str, password: str) -> Optional[CurrentUser]: ...
    def sign_out(self) -> None: ...
    def reset_password(self, email: str) -> None: ...


def _user_from_auth(user: Any) -> Optional[CurrentUser]:
    if user is None:
        return None
    created = getattr(user, "created_at", None)
    if isinstance(created, datetime):
        created = created.isoformat()
    return CurrentUser(id=str(user.id), email=getattr(user, "email", None), created_at=created)


class SupabaseSession:
    """SessionProvider backed by supabase.auth; `state` is st.session_state in the app."""

    def __init__(self, client, state: MutableMapping[str, Any]):
        self.client = client
        self.state = state

    # ---- reads ----
    def current_user(self) -> Optional[CurrentUser]:
        """The user signed in through this session's state, if any."""
        cached = self.state.get(USER_KEY)
        return CurrentUser.model_validate(cached) if cached else None

    # ---- writes ----
    def sign_in(self, email: str, password: str) -> CurrentUser:
        try:
            resp = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            raise AuthError(f"Sign in failed: {e}") from e
        user = _user_from_auth(getattr(resp, "user", None))
        if user is None:
            raise AuthError("Sign in failed: no user returned")
        self.ensure_profile(user)
        self._remember(user)
        log.info("signed in user=%s", user.id)
        return user

    def sign_up(self, email: str, password: str) -> Optional[CurrentUser]:
        """Returns the user when the project signs in immediately, None when email confirmation is pending."""
        try:
            resp = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            raise AuthError(f"Sign up failed: {e}") from e
        user = _user_from_auth(getattr(resp, "user", None))
        if user is not None and getattr(resp, "session", None) is not None:
            self.ensure_profile(user)
            self._remember(user)
            return user
        return None

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            raise AuthError(f"Sign out failed: {e}") from e
        finally:
            self.state.pop(USER_KEY, None)

    def reset_password(self, email: str) -> None:
        try:
            self.client.auth.reset_password_for_email(email)
        except Exception as e:
            raise AuthError(f"Password reset failed: {e}") from e

    # ---- helpers ----
    def ensure_profile(self, user: CurrentUser) -> None:
        """Create the profiles row on first sign in."""
        try:
            found = (
                self.client.table(PROFILES_TABLE)
                .select("id")
                .eq("id", user.id)
                .limit(1)
                .execute()
            )
            if getattr(found, "data", None):
                return
            self.client.table(PROFILES_TABLE).insert({
                "id": user.id,
                "email": user.email,
                "created_at": datetime.utcnow().isoformat(),
            }).execute()
        except Exception as e:
            # a missing profile doesn't block sign in
            log.warning("could not ensure profile for %s: %s", user.id, e)

    def _remember(self, user: CurrentUser) -> None:
        self.state[USER_KEY] = user.model_dump()
