"""
Chirp Database - Entity operations over the JSON snapshot

Module: persistence.database
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Chirps, users and revocations in one snapshot file
  - Monotonic id sequences persisted alongside the entities
  - Idempotent user creation (duplicate email returns existing row)
  - Append-only revocation set

ARCHITECTURE:
ChirpDatabase provides:
  - Write operations as single JSONStore transactions (exclusive lock held
    across load, mutate and write)
  - Read-only queries under the shared lock
  - Typed records (Chirp, User, Revocation) converted to and from JSON

SNAPSHOT LAYOUT:
  {
    "chirps":      {"<id>": {"id", "body", "author_id"}},
    "users":       {"<id>": {"id", "email", "hashed_password", "is_chirpy_red"}},
    "revocations": {"<token>": {"token", "revoked_at"}},
    "sequences":   {"chirps": <last id>, "users": <last id>}
  }
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.constants import (
    SECTION_CHIRPS,
    SECTION_USERS,
    SECTION_REVOCATIONS,
    SECTION_SEQUENCES,
)
from ..core.errors import NotFound, ConflictError
from .json_store import JSONStore, StoreFormatError


def empty_snapshot() -> Dict[str, Any]:
    """Snapshot written to a fresh store"""
    return {
        SECTION_CHIRPS: {},
        SECTION_USERS: {},
        SECTION_REVOCATIONS: {},
        SECTION_SEQUENCES: {SECTION_CHIRPS: 0, SECTION_USERS: 0},
    }


@dataclass(frozen=True)
class Chirp:
    """A short text post owned by a user"""
    id: int
    body: str
    author_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "body": self.body, "author_id": self.author_id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Chirp":
        return cls(id=int(data["id"]), body=data["body"], author_id=int(data["author_id"]))


@dataclass(frozen=True)
class User:
    """Registered account"""
    id: int
    email: str
    hashed_password: str
    is_chirpy_red: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage"""
        return {
            "id": self.id,
            "email": self.email,
            "hashed_password": self.hashed_password,
            "is_chirpy_red": self.is_chirpy_red,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Convert to dictionary safe to return to clients (no password hash)"""
        return {
            "id": self.id,
            "email": self.email,
            "is_chirpy_red": self.is_chirpy_red,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Create from dictionary (from JSON)"""
        return cls(
            id=int(data["id"]),
            email=data["email"],
            hashed_password=data["hashed_password"],
            is_chirpy_red=bool(data.get("is_chirpy_red", False)),
        )


@dataclass(frozen=True)
class Revocation:
    """Refresh token that must no longer be honored"""
    token: str
    revoked_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "revoked_at": self.revoked_at.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Revocation":
        return cls(
            token=data["token"],
            revoked_at=datetime.fromisoformat(data["revoked_at"]),
        )


class ChirpDatabase:
    """
    Entity store for chirps, users and revocations.

    All entities share one JSONStore file. Ids come from persisted counters
    and are never reused after a delete.
    """

    def __init__(self, db_path: str):
        """
        Open (and create if needed) the database file

        Args:
            db_path: Path to the snapshot file

        Raises:
            StoreIOError: If the file cannot be created
        """
        self.logger = logging.getLogger("persistence.database")
        self.store = JSONStore(db_path, empty_snapshot)
        self.store.ensure_initialized()
        self.logger.info(f"ChirpDatabase initialized (file={self.store.file_path})")

    # ------------------------------------------------------------------
    # Chirps
    # ------------------------------------------------------------------

    def create_chirp(self, body: str, author_id: int) -> Chirp:
        """
        Store a new chirp

        Args:
            body: Already validated chirp text
            author_id: Id of the posting user

        Returns:
            The stored Chirp
        """
        with self.store.transaction() as data:
            chirps = self._section(data, SECTION_CHIRPS)
            chirp = Chirp(id=self._next_id(data, SECTION_CHIRPS), body=body, author_id=author_id)
            chirps[str(chirp.id)] = chirp.to_dict()

        self.logger.info(f"Chirp created: {chirp.id} by user {author_id}")
        return chirp

    def get_chirps(self) -> List[Chirp]:
        """All chirps, ordered by id"""
        with self.store.read() as data:
            chirps = self._section(data, SECTION_CHIRPS)
            return sorted((Chirp.from_dict(c) for c in chirps.values()), key=lambda c: c.id)

    def get_chirp(self, chirp_id: int) -> Chirp:
        """
        Get chirp by id

        Raises:
            NotFound: If no chirp has this id
        """
        with self.store.read() as data:
            chirp = self._section(data, SECTION_CHIRPS).get(str(chirp_id))
        if chirp is None:
            raise NotFound(f"Chirp {chirp_id} not found")
        return Chirp.from_dict(chirp)

    def get_chirps_by_author(self, author_id: int) -> List[Chirp]:
        """Chirps written by one user, ordered by id"""
        return [c for c in self.get_chirps() if c.author_id == author_id]

    def delete_chirp(self, chirp_id: int) -> Chirp:
        """
        Remove a chirp

        Returns:
            The deleted Chirp

        Raises:
            NotFound: If no chirp has this id
        """
        with self.store.transaction() as data:
            chirp = self._section(data, SECTION_CHIRPS).pop(str(chirp_id), None)
            if chirp is None:
                raise NotFound(f"Chirp {chirp_id} not found")

        self.logger.info(f"Chirp deleted: {chirp_id}")
        return Chirp.from_dict(chirp)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, email: str, hashed_password: str) -> User:
        """
        Create a user, or return the existing one for this email

        Signup is idempotent: a second create with the same email returns the
        first row unchanged (the new password hash is ignored).

        Args:
            email: Unique email address
            hashed_password: bcrypt hash

        Returns:
            The new or existing User
        """
        with self.store.transaction() as data:
            users = self._section(data, SECTION_USERS)
            existing = self._find_user_by_email(users, email)
            if existing is not None:
                # Transaction writes back an unchanged snapshot
                self.logger.info(f"User already exists for {email}, returning id {existing.id}")
                return existing

            user = User(
                id=self._next_id(data, SECTION_USERS),
                email=email,
                hashed_password=hashed_password,
            )
            users[str(user.id)] = user.to_dict()

        self.logger.info(f"User created: {user.id}")
        return user

    def update_user(self, user_id: int, email: str, hashed_password: str) -> User:
        """
        Replace a user's email and password hash

        Raises:
            NotFound: If the user does not exist
            ConflictError: If another user already has this email
        """
        with self.store.transaction() as data:
            users = self._section(data, SECTION_USERS)
            current = users.get(str(user_id))
            if current is None:
                raise NotFound(f"User {user_id} not found")

            owner = self._find_user_by_email(users, email)
            if owner is not None and owner.id != user_id:
                raise ConflictError(f"Email {email} is already in use")

            user = User(
                id=user_id,
                email=email,
                hashed_password=hashed_password,
                is_chirpy_red=bool(current.get("is_chirpy_red", False)),
            )
            users[str(user_id)] = user.to_dict()

        self.logger.info(f"User updated: {user_id}")
        return user

    def get_user(self, user_id: int) -> User:
        """
        Get user by id

        Raises:
            NotFound: If the user does not exist
        """
        with self.store.read() as data:
            user = self._section(data, SECTION_USERS).get(str(user_id))
        if user is None:
            raise NotFound(f"User {user_id} not found")
        return User.from_dict(user)

    def get_user_by_email(self, email: str) -> User:
        """
        Get user by email

        Raises:
            NotFound: If no user has this email
        """
        with self.store.read() as data:
            user = self._find_user_by_email(self._section(data, SECTION_USERS), email)
        if user is None:
            raise NotFound(f"No user with email {email}")
        return user

    def upgrade_user(self, user_id: int) -> User:
        """
        Set the Chirpy Red flag (idempotent)

        Raises:
            NotFound: If the user does not exist
        """
        with self.store.transaction() as data:
            users = self._section(data, SECTION_USERS)
            record = users.get(str(user_id))
            if record is None:
                raise NotFound(f"User {user_id} not found")
            record["is_chirpy_red"] = True
            user = User.from_dict(record)

        self.logger.info(f"User upgraded: {user_id}")
        return user

    # ------------------------------------------------------------------
    # Revocations
    # ------------------------------------------------------------------

    def revoke_token(self, token: str) -> Revocation:
        """
        Add a refresh token to the revocation set

        Revoking an already revoked token keeps the original timestamp.

        Returns:
            The Revocation record
        """
        with self.store.transaction() as data:
            revocations = self._section(data, SECTION_REVOCATIONS)
            existing = revocations.get(token)
            if existing is not None:
                return Revocation.from_dict(existing)

            revocation = Revocation(token=token, revoked_at=datetime.now(timezone.utc))
            revocations[token] = revocation.to_dict()

        self.logger.info("Refresh token revoked")
        return revocation

    def is_token_revoked(self, token: str) -> bool:
        """
        Check the revocation set

        Raises:
            StoreIOError: If the store cannot be read (never reported as False)
        """
        with self.store.read() as data:
            return token in self._section(data, SECTION_REVOCATIONS)

    def get_revocation(self, token: str) -> Optional[Revocation]:
        """Revocation record for a token, or None"""
        with self.store.read() as data:
            record = self._section(data, SECTION_REVOCATIONS).get(token)
        return Revocation.from_dict(record) if record is not None else None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = data.setdefault(name, {})
        if not isinstance(section, dict):
            raise StoreFormatError(f"Section '{name}' must be a JSON object")
        return section

    @classmethod
    def _next_id(cls, data: Dict[str, Any], name: str) -> int:
        """
        Advance and return the sequence for a section

        Must be called inside a transaction. Snapshots written without a
        sequence start from the highest existing id.
        """
        sequences = cls._section(data, SECTION_SEQUENCES)
        last = sequences.get(name)
        if last is None:
            last = max((int(k) for k in cls._section(data, name)), default=0)
        next_id = int(last) + 1
        sequences[name] = next_id
        return next_id

    @staticmethod
    def _find_user_by_email(users: Dict[str, Any], email: str) -> Optional[User]:
        for record in users.values():
            if record["email"] == email:
                return User.from_dict(record)
        return None
