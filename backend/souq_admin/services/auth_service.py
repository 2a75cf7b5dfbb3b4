# Overview: Admin user accounts with bcrypt password hashing.

"""
Admin user service.

SECURITY:
- Passwords hashed with bcrypt (cost factor 12)
- Password strength is checked before hashing
- password_hash never leaves the store layer (AdminUser.to_dict omits it)
"""

from __future__ import annotations

import logging
import re

import bcrypt

from ..validation import ValidationError
from .query_builder import QuerySpec, SortOption
from .records import clean_create, delete_record, update_record

logger = logging.getLogger(__name__)


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    """
    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Not a bcrypt hash
        return False


class AdminUserService:
    def __init__(self, store):
        self.store = store

    def list_admin_users(self) -> list[dict]:
        return self.store.select(QuerySpec(table="admin_users", sort=SortOption("created_at", descending=True)))

    def create_admin_user(self, fields: dict) -> dict:
        payload = dict(fields)
        password = payload.pop("password", None) or ""
        payload["email"] = (payload.get("email") or "").strip().lower()
        payload["password_hash"] = hash_password(password)
        user = self.store.insert("admin_users", clean_create("admin_users", payload))
        logger.info("Created admin user %s with role %s", user["email"], user["role"])
        return user

    def update_admin_user(self, user_id: str, fields: dict) -> dict:
        payload = dict(fields)
        if "password" in payload:
            payload["password_hash"] = hash_password(payload.pop("password") or "")
        if isinstance(payload.get("email"), str):
            payload["email"] = payload["email"].strip().lower()
        return update_record(self.store, "admin_users", user_id, payload)

    def delete_admin_user(self, user_id: str) -> None:
        delete_record(self.store, "admin_users", user_id)
