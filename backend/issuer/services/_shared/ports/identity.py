from __future__ import annotations

from typing import Protocol


class IdentityDirectory(Protocol):
    """
    Port to the external identity collaborator.

    Credential storage and hashing live behind this interface; the token
    core only asks whether a subject exists and, for login, whether a
    credential pair is valid.
    """

    def exists(self, subject_id: str) -> bool: ...
    def verify_credentials(self, subject_id: str, password: str) -> bool: ...


class InMemoryIdentityDirectory(IdentityDirectory):
    """Simple in-memory directory for unit tests and local development."""

    def __init__(self, users: dict[str, str] | None = None) -> None:
        self._users: dict[str, str] = dict(users or {})

    def add(self, subject_id: str, password: str = "") -> None:
        self._users[subject_id] = password

    def remove(self, subject_id: str) -> None:
        self._users.pop(subject_id, None)

    def exists(self, subject_id: str) -> bool:
        return subject_id in self._users

    def verify_credentials(self, subject_id: str, password: str) -> bool:
        # Plain comparison is fine for the test double only.
        return subject_id in self._users and self._users[subject_id] == password
