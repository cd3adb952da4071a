"""
Session Guard - holds the credential and identity of the logged-in user.

The credential is persisted to a small JSON file so the CLI keeps the
session between invocations. The guard is injected into every component
that needs it.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import httpx

from .protocols import ISessionGuard

logger = logging.getLogger(__name__)

ME_ENDPOINT = "/auth/me"
LOGIN_ENDPOINT = "/auth/google"


class CredentialStore:
    """JSON file holding `token` and cached `user` identity."""

    def __init__(self, path: Path):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Tuple[Optional[str], Optional[Dict[str, Any]]]:
        """Return (token, user); (None, None) when missing or unreadable."""
        if not self._path.is_file():
            return None, None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self._path, exc)
            return None, None
        if not isinstance(data, dict):
            return None, None
        token = data.get("token") or None
        user = data.get("user") if isinstance(data.get("user"), dict) else None
        return token, user

    def save(self, token: str, user: Optional[Dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({"token": token, "user": user}), encoding="utf-8")
        try:
            os.chmod(self._path, 0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self._path)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class SessionGuard(ISessionGuard):
    """
    Current authentication state.

    Usage:
        session = SessionGuard(CredentialStore(settings.session_file))
        if not session.is_authenticated():
            print(session.login_url(settings.backend_url))
    """

    def __init__(self, store: Optional[CredentialStore] = None):
        self._store = store
        self._token: Optional[str] = None
        self._user: Optional[Dict[str, Any]] = None
        if store is not None:
            self._token, self._user = store.load()

    def is_authenticated(self) -> bool:
        return bool(self._token) and self._user is not None

    def current_credential(self) -> Optional[str]:
        return self._token

    @property
    def identity(self) -> Optional[Dict[str, Any]]:
        return dict(self._user) if self._user else None

    def handle_auth_success(self, token: str, user: Dict[str, Any]) -> None:
        """Record a fresh login."""
        self._token = token
        self._user = dict(user)
        if self._store is not None:
            self._store.save(token, self._user)

    def sign_out(self) -> None:
        self._token = None
        self._user = None
        if self._store is not None:
            self._store.clear()

    @staticmethod
    def login_url(backend_url: str) -> str:
        return f"{backend_url.rstrip('/')}{LOGIN_ENDPOINT}"

    async def verify(self, http: httpx.AsyncClient) -> bool:
        """
        Check the credential against the service and refresh the identity.

        Any failure signs the user out.

        Args:
            http: client configured with the service base URL

        Returns:
            True if the session is still valid
        """
        if not self._token:
            return False
        try:
            response = await http.get(
                ME_ENDPOINT,
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Content-Type": "application/json",
                },
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.info("Session is no longer valid: %s", exc)
            self.sign_out()
            return False

        user = data.get("user") if isinstance(data, dict) else None
        if isinstance(user, dict):
            self._user = user
            if self._store is not None:
                self._store.save(self._token, user)
        elif self._user is None:
            self.sign_out()
            return False
        return True
