"""Identity provider: the injected context holding the signed-in user."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from memory.accounts import AccountStore
from models.errors import AuthError, PasswordMismatch, ValidationError
from weatherwear_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6
SIGN_IN_FAILED = "Failed to sign in. Please check your credentials."
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

AUTH_ERROR_MESSAGES = {
    "auth/email-already-in-use": "This email is already registered",
    "auth/invalid-email": "Invalid email address",
    "auth/operation-not-allowed": "Email/password sign up is not enabled",
    "auth/weak-password": "Password is too weak",
}


def auth_error_message(code: str, operation: str = "sign_up") -> str:
    """Map a provider error code to the text shown to the user."""

    if operation == "sign_in":
        return SIGN_IN_FAILED
    return AUTH_ERROR_MESSAGES.get(code, f"Error: {code}")


def validate_sign_up_form(password: str, confirm_password: str) -> None:
    """Form-level checks run before the provider is contacted."""

    if password != confirm_password:
        raise PasswordMismatch()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


@dataclass(frozen=True)
class UserIdentity:
    user_id: str
    email: str


IdentityListener = Callable[[Optional[UserIdentity]], None]


class IdentityProvider:
    """Holds the current user and notifies subscribers on every change."""

    def __init__(self, accounts: AccountStore, allow_sign_up: bool = True) -> None:
        self.accounts = accounts
        self.allow_sign_up = allow_sign_up
        self._current: Optional[UserIdentity] = None
        self._listeners: List[IdentityListener] = []

    @property
    def current_user(self) -> Optional[UserIdentity]:
        return self._current

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_up(self, email: str, password: str) -> UserIdentity:
        if not self.allow_sign_up:
            raise AuthError("auth/operation-not-allowed")
        if not _EMAIL_PATTERN.match(email.strip()):
            raise AuthError("auth/invalid-email")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError("auth/weak-password")
        account = await asyncio.to_thread(self.accounts.create, email, password)
        log_event(LOGGER, logging.INFO, "identity_signed_up", user_id=account.user_id)
        return self._set_current(UserIdentity(user_id=account.user_id, email=account.email))

    async def sign_in(self, email: str, password: str) -> UserIdentity:
        if not _EMAIL_PATTERN.match(email.strip()):
            raise AuthError("auth/invalid-email")
        account = await asyncio.to_thread(self.accounts.verify, email, password)
        log_event(LOGGER, logging.INFO, "identity_signed_in", user_id=account.user_id)
        return self._set_current(UserIdentity(user_id=account.user_id, email=account.email))

    async def sign_out(self) -> None:
        if self._current is not None:
            log_event(LOGGER, logging.INFO, "identity_signed_out", user_id=self._current.user_id)
        self._set_current(None)

    def _set_current(self, identity: Optional[UserIdentity]) -> Optional[UserIdentity]:
        self._current = identity
        for listener in list(self._listeners):
            listener(identity)
        return identity


__all__ = [
    "AUTH_ERROR_MESSAGES",
    "IdentityProvider",
    "MIN_PASSWORD_LENGTH",
    "SIGN_IN_FAILED",
    "UserIdentity",
    "auth_error_message",
    "validate_sign_up_form",
]
