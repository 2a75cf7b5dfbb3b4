# Overview: Coupon CRUD; codes are stored upper-case.

from __future__ import annotations

from ..time_utils import parse_iso_datetime
from ..validation import enforce_rules_coupon
from .query_builder import QuerySpec, SortOption
from .records import clean_update, create_record, delete_record, update_record


def _normalize(fields: dict) -> dict:
    payload = dict(fields)
    if isinstance(payload.get("code"), str):
        payload["code"] = payload["code"].strip().upper()
    return payload


class CouponService:
    def __init__(self, store):
        self.store = store

    def list_coupons(self, *, is_active: bool | None = None) -> list[dict]:
        return self.store.select(QuerySpec(
            table="coupons",
            equals={"is_active": is_active},
            sort=SortOption("created_at", descending=True),
        ))

    def create_coupon(self, fields: dict) -> dict:
        return create_record(self.store, "coupons", _normalize(fields), rules=enforce_rules_coupon)

    def update_coupon(self, coupon_id: str, fields: dict) -> dict:
        payload = _normalize(fields)
        rule_keys = {"discount_type", "discount_value", "start_date", "end_date"}
        if rule_keys & payload.keys():
            # Rules span fields; check the patch merged over the stored row
            current = self.store.fetch_one("coupons", id=coupon_id)
            patch = clean_update("coupons", payload)
            merged = {
                "discount_type": patch.get("discount_type", current["discount_type"]),
                "discount_value": patch.get("discount_value", current["discount_value"]),
                "start_date": patch.get("start_date", _stored_datetime(current["start_date"])),
                "end_date": patch.get("end_date", _stored_datetime(current["end_date"])),
            }
            enforce_rules_coupon(merged)
        return update_record(self.store, "coupons", coupon_id, payload)

    def delete_coupon(self, coupon_id: str) -> None:
        delete_record(self.store, "coupons", coupon_id)


def _stored_datetime(value):
    return parse_iso_datetime(value) if value else None
