from __future__ import annotations

from ..extensions import db
from souq_admin.time_utils import to_utc_z, utcnow
from .catalog import new_id


ADMIN_ROLES = ("super_admin", "admin", "editor", "viewer")


class AdminUser(db.Model):
    """
    Storefront admin account.

    SECURITY: password_hash is bcrypt and is never part of to_dict().
    """
    __tablename__ = "admin_users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(32), nullable=False, default="viewer")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<AdminUser id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "is_active": self.is_active,
            "last_login_at": to_utc_z(self.last_login_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
