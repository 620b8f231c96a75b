"""
NoteKeep Backend — Password Hashing
===================================

What:  Salted one-way password hashing and verification via passlib.
Why:   Raw passwords are never stored; verification must also report when a
       stored hash is outdated (deprecated scheme) but still matched.
How:   A CryptContext built from settings.password_schemes. The first scheme
       hashes new passwords; the rest are "deprecated" and still verify.
"""

import enum
import logging
from typing import List, Optional

from passlib.context import CryptContext

from notekeep.config import settings

logger = logging.getLogger(__name__)


class PasswordVerification(enum.Enum):
    FAILED = "failed"
    SUCCESS = "success"
    SUCCESS_REHASH_NEEDED = "success_rehash_needed"

    @property
    def succeeded(self) -> bool:
        return self is not PasswordVerification.FAILED


class PasswordHasher:
    """Thin wrapper around a passlib CryptContext."""

    def __init__(self, schemes: Optional[List[str]] = None):
        self.context = CryptContext(
            schemes=schemes or settings.password_schemes_list,
            deprecated="auto",
        )

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, password: str, stored_hash: Optional[str]) -> PasswordVerification:
        """
        Compare a candidate password against a stored hash.

        An empty, malformed or unrecognised stored hash is a mismatch, not an error.
        """
        if not stored_hash:
            return PasswordVerification.FAILED
        try:
            matched, new_hash = self.context.verify_and_update(password, stored_hash)
        except ValueError:
            logger.warning("Stored password hash could not be identified")
            return PasswordVerification.FAILED

        if not matched:
            return PasswordVerification.FAILED
        if new_hash is not None:
            return PasswordVerification.SUCCESS_REHASH_NEEDED
        return PasswordVerification.SUCCESS


password_hasher = PasswordHasher()
