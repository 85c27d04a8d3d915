"""JSON-backed account storage for the local identity provider."""

from __future__ import annotations

import hashlib
import hmac
import json
import secrets
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional
from uuid import uuid4

from models.errors import AuthError, TransportError

_PBKDF2_ROUNDS = 120_000


@dataclass
class Account:
    user_id: str
    email: str
    salt: str
    password_hash: str
    created_at: float


def hash_password(password: str, salt: str) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), _PBKDF2_ROUNDS)
    return digest.hex()


class AccountStore:
    """Simple JSON-backed account store keyed by lower-cased email."""

    def __init__(self, path: str | Path = "data/accounts.json") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Dict]:
        if not self.path.exists():
            return {}
        try:
            accounts = json.loads(self.path.read_text())
        except (OSError, ValueError) as exc:
            raise TransportError("Account storage is unavailable") from exc
        if not isinstance(accounts, dict):
            raise TransportError("Account storage is corrupt")
        return accounts

    def _save(self, accounts: Dict[str, Dict]) -> None:
        try:
            self.path.write_text(json.dumps(accounts, indent=2))
        except OSError as exc:
            raise TransportError("Account storage is unavailable") from exc

    def find(self, email: str) -> Optional[Account]:
        data = self._load().get(email.strip().lower())
        return Account(**data) if data else None

    def create(self, email: str, password: str) -> Account:
        key = email.strip().lower()
        with self._lock:
            accounts = self._load()
            if key in accounts:
                raise AuthError("auth/email-already-in-use")
            salt = secrets.token_hex(16)
            account = Account(
                user_id=uuid4().hex,
                email=key,
                salt=salt,
                password_hash=hash_password(password, salt),
                created_at=time.time(),
            )
            accounts[key] = asdict(account)
            self._save(accounts)
        return account

    def verify(self, email: str, password: str) -> Account:
        account = self.find(email)
        if account is None:
            raise AuthError("auth/user-not-found")
        candidate = hash_password(password, account.salt)
        if not hmac.compare_digest(candidate, account.password_hash):
            raise AuthError("auth/wrong-password")
        return account


__all__ = ["Account", "AccountStore", "hash_password"]
