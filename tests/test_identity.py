"""Account storage and the identity provider."""

from __future__ import annotations

import asyncio

import pytest

from memory.accounts import AccountStore
from memory.identity import (
    SIGN_IN_FAILED,
    IdentityProvider,
    auth_error_message,
    validate_sign_up_form,
)
from models.errors import AuthError, PasswordMismatch, TransportError, ValidationError


def test_passwords_are_stored_hashed(account_store: AccountStore) -> None:
    account = account_store.create("Ada@Example.com", "hunter22")

    raw = account_store.path.read_text()
    assert "hunter22" not in raw
    assert account.email == "ada@example.com"
    assert account_store.verify("ada@example.com", "hunter22").user_id == account.user_id


def test_duplicate_email_is_rejected(account_store: AccountStore) -> None:
    account_store.create("ada@example.com", "hunter22")

    with pytest.raises(AuthError) as excinfo:
        account_store.create("ADA@example.com", "another1")
    assert excinfo.value.code == "auth/email-already-in-use"


def test_verify_reports_unknown_user_and_wrong_password(account_store: AccountStore) -> None:
    account_store.create("ada@example.com", "hunter22")

    with pytest.raises(AuthError) as unknown:
        account_store.verify("bob@example.com", "hunter22")
    with pytest.raises(AuthError) as wrong:
        account_store.verify("ada@example.com", "hunter23")

    assert unknown.value.code == "auth/user-not-found"
    assert wrong.value.code == "auth/wrong-password"


def test_sign_up_sign_in_sign_out_notify_subscribers(account_store: AccountStore) -> None:
    provider = IdentityProvider(account_store)
    seen = []
    provider.subscribe(seen.append)

    async def scenario():
        await provider.sign_up("ada@example.com", "hunter22")
        await provider.sign_out()
        await provider.sign_in("ada@example.com", "hunter22")

    asyncio.run(scenario())

    assert [identity.email if identity else None for identity in seen] == [
        "ada@example.com",
        None,
        "ada@example.com",
    ]
    assert provider.current_user is not None


@pytest.mark.parametrize(
    ("email", "password", "allow", "code"),
    [
        ("not-an-email", "hunter22", True, "auth/invalid-email"),
        ("ada@example.com", "abc", True, "auth/weak-password"),
        ("ada@example.com", "hunter22", False, "auth/operation-not-allowed"),
    ],
)
def test_sign_up_error_codes(account_store: AccountStore, email: str, password: str, allow: bool, code: str) -> None:
    provider = IdentityProvider(account_store, allow_sign_up=allow)

    with pytest.raises(AuthError) as excinfo:
        asyncio.run(provider.sign_up(email, password))
    assert excinfo.value.code == code
    assert provider.current_user is None


def test_auth_error_messages() -> None:
    assert auth_error_message("auth/email-already-in-use") == "This email is already registered"
    assert auth_error_message("auth/invalid-email") == "Invalid email address"
    assert auth_error_message("auth/weak-password") == "Password is too weak"
    assert auth_error_message("auth/operation-not-allowed") == "Email/password sign up is not enabled"
    assert auth_error_message("auth/quota") == "Error: auth/quota"
    assert auth_error_message("auth/wrong-password", operation="sign_in") == SIGN_IN_FAILED


def test_sign_up_form_validation() -> None:
    with pytest.raises(PasswordMismatch) as mismatch:
        validate_sign_up_form("hunter22", "hunter23")
    with pytest.raises(ValidationError) as short:
        validate_sign_up_form("abc", "abc")

    assert str(mismatch.value) == "Passwords do not match"
    assert "at least 6 characters" in str(short.value)
    validate_sign_up_form("hunter22", "hunter22")


def test_corrupt_account_file_is_a_storage_failure(account_store: AccountStore) -> None:
    account_store.path.write_text("{not json")

    with pytest.raises(TransportError):
        account_store.verify("ada@example.com", "hunter22")
    with pytest.raises(TransportError):
        account_store.create("ada@example.com", "hunter22")


def test_account_path_that_is_a_directory_is_a_storage_failure(account_store: AccountStore) -> None:
    account_store.path.mkdir()

    with pytest.raises(TransportError):
        account_store.create("ada@example.com", "hunter22")


def test_session_reports_account_storage_failures(session, account_store: AccountStore) -> None:
    account_store.path.write_text("[]")

    async def scenario():
        signed_up = await session.sign_up("ada@example.com", "hunter22", "hunter22")
        signed_in = await session.sign_in("ada@example.com", "hunter22")
        return signed_up, signed_in

    assert asyncio.run(scenario()) == (None, None)
    assert [notice.message for notice in session.pop_notices()] == [
        "Failed to create account: Account storage is corrupt",
        SIGN_IN_FAILED,
    ]
    assert session.identity.current_user is None
