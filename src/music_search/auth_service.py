from __future__ import annotations

import logging
import re
import secrets
import threading
from datetime import datetime, timedelta, timezone

from werkzeug.security import check_password_hash, generate_password_hash

from music_search.credential_store import CredentialStore
from music_search.errors import InvalidCredentials, ValidationError
from music_search.models import Session, UserCredential

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    def __init__(self, store: CredentialStore, session_ttl_seconds: int = 3600) -> None:
        self.store = store
        self.session_ttl = timedelta(seconds=session_ttl_seconds)
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def signup(self, email: str, password: str) -> UserCredential:
        """Create a credential record. Raises DuplicateUser or ValidationError."""
        email = normalize_email(email)
        if not _EMAIL_RE.match(email):
            raise ValidationError("A valid email address is required.")
        if not password:
            raise ValidationError("Password is required.")

        credential = UserCredential(email=email, password_hash=generate_password_hash(password))
        self.store.insert(credential)
        logger.info("Created user %s", email)
        return credential

    def signin(self, email: str, password: str) -> Session:
        email = normalize_email(email)
        credential = self.store.find(email) if email else None
        if credential is None or not password or not check_password_hash(credential.password_hash, password):
            logger.info("Rejected sign-in for %s", email or "<empty>")
            raise InvalidCredentials()

        now = datetime.now(timezone.utc)
        session = Session(
            token=secrets.token_urlsafe(32),
            email=credential.email,
            expires_at=now + self.session_ttl,
        )
        with self._lock:
            expired = [token for token, s in self._sessions.items() if s.expires_at <= now]
            for token in expired:
                del self._sessions[token]
            self._sessions[session.token] = session
        return session

    def resolve_session(self, token: str) -> str:
        with self._lock:
            session = self._sessions.get(token or "")
            if session is None:
                raise InvalidCredentials("Session is not valid.")
            if session.expires_at <= datetime.now(timezone.utc):
                del self._sessions[session.token]
                raise InvalidCredentials("Session has expired.")
        return session.email

    def signout(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token or "", None)
