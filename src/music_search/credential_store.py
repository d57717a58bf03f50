"""Persistence for user credentials.

Records live in a single ``users`` collection keyed by a unique email.
"""
from __future__ import annotations

import logging
import threading
from typing import Protocol

from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError

from music_search.errors import DuplicateUser
from music_search.models import UserCredential

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class CredentialStore(Protocol):
    def insert(self, credential: UserCredential) -> None: ...

    def find(self, email: str) -> UserCredential | None: ...


class InMemoryCredentialStore:
    def __init__(self) -> None:
        self._records: dict[str, UserCredential] = {}
        self._lock = threading.Lock()

    def insert(self, credential: UserCredential) -> None:
        with self._lock:
            if credential.email in self._records:
                raise DuplicateUser()
            self._records[credential.email] = credential

    def find(self, email: str) -> UserCredential | None:
        return self._records.get(email)


class MongoCredentialStore:
    def __init__(self, uri: str, db_name: str = "project4", client: MongoClient | None = None) -> None:
        self.client = client or MongoClient(uri)
        self.collection = self.client[db_name][USERS_COLLECTION]
        self.collection.create_index([("email", ASCENDING)], unique=True)
        logger.info("Connected to MongoDB database %s", db_name)

    def insert(self, credential: UserCredential) -> None:
        try:
            self.collection.insert_one({"email": credential.email, "password_hash": credential.password_hash})
        except DuplicateKeyError as exc:
            raise DuplicateUser() from exc

    def find(self, email: str) -> UserCredential | None:
        doc = self.collection.find_one({"email": email})
        if not doc:
            return None
        return UserCredential(email=doc["email"], password_hash=doc["password_hash"])


def build_credential_store(uri: str | None, db_name: str = "project4") -> CredentialStore:
    if not uri:
        logger.warning("MONGODB_URI not set; using in-memory credential store")
        return InMemoryCredentialStore()
    return MongoCredentialStore(uri, db_name)
