from __future__ import annotations

from ..extensions import db
from souq_admin.time_utils import to_utc_z, utcnow
from .catalog import new_id


DISCOUNT_TYPES = ("percentage", "fixed")


class Coupon(db.Model):
    __tablename__ = "coupons"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    # Stored upper-case; the service normalizes on create/update
    code = db.Column(db.String(64), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    discount_type = db.Column(db.String(16), nullable=False)
    discount_value = db.Column(db.Numeric(12, 2), nullable=False)
    min_purchase_amount = db.Column(db.Numeric(12, 2), nullable=True)
    max_discount_amount = db.Column(db.Numeric(12, 2), nullable=True)
    usage_limit = db.Column(db.Integer, nullable=True)
    usage_count = db.Column(db.Integer, nullable=False, default=0)
    customer_usage_limit = db.Column(db.Integer, nullable=True)
    start_date = db.Column(db.DateTime, nullable=True)
    end_date = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "description": self.description,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "min_purchase_amount": self.min_purchase_amount,
            "max_discount_amount": self.max_discount_amount,
            "usage_limit": self.usage_limit,
            "usage_count": self.usage_count,
            "customer_usage_limit": self.customer_usage_limit,
            "start_date": to_utc_z(self.start_date),
            "end_date": to_utc_z(self.end_date),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Currency(db.Model):
    """
    Display currency.

    INVARIANT: at most one row has is_default = true. Enforced by
    currency_service clearing the flag elsewhere before setting it; the two
    steps are not atomic.
    """
    __tablename__ = "currencies"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    code = db.Column(db.String(8), nullable=False, unique=True, index=True)
    name = db.Column(db.String(120), nullable=False)
    symbol = db.Column(db.String(8), nullable=False)
    exchange_rate = db.Column(db.Numeric(18, 6), nullable=False, default=1)
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "symbol": self.symbol,
            "exchange_rate": self.exchange_rate,
            "is_default": self.is_default,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class PaymentMethod(db.Model):
    __tablename__ = "payment_methods"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False)
    code = db.Column(db.String(64), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)
    icon = db.Column(db.String(64), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "icon": self.icon,
            "is_active": self.is_active,
            "sort_order": self.sort_order,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
