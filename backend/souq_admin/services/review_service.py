# Overview: Product review moderation.

from __future__ import annotations

from ..validation import ValidationError
from .query_builder import Include, QuerySpec, SortOption, Window
from .records import delete_record, update_record


class ReviewService:
    """
    Moderation only. average_rating and review_count on products are kept
    up to date by the database, not here.
    """

    def __init__(self, store, *, page_size: int = 50):
        self.store = store
        self.page_size = page_size

    def list_reviews(
        self,
        *,
        product_id: str | None = None,
        is_approved: bool | None = None,
        rating: int | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict]:
        if rating is not None and not 1 <= rating <= 5:
            raise ValidationError("rating must be between 1 and 5")
        return self.store.select(QuerySpec(
            table="product_reviews",
            equals={"product_id": product_id, "is_approved": is_approved, "rating": rating},
            sort=SortOption("created_at", descending=True),
            window=Window.from_args(limit, offset, default_size=self.page_size),
            include=Include("product", ("name",)),
        ))

    def approve_review(self, review_id: str, is_approved: bool) -> dict:
        return update_record(self.store, "product_reviews", review_id, {"is_approved": is_approved})

    def respond_to_review(self, review_id: str, admin_response: str) -> dict:
        if not admin_response or not admin_response.strip():
            raise ValidationError("admin_response cannot be blank")
        return update_record(self.store, "product_reviews", review_id, {"admin_response": admin_response})

    def delete_review(self, review_id: str) -> None:
        delete_record(self.store, "product_reviews", review_id)
