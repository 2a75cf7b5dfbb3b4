# Overview: Storefront content: settings singletons, footer, payment methods and pages.

from __future__ import annotations

from ..validation import ValidationError
from .query_builder import QuerySpec, SortOption, Window
from .records import clean_create, create_record, delete_record, update_record


class ContentService:
    def __init__(self, store):
        self.store = store

    # Singletons (store_settings, hero_settings)

    def get_singleton(self, table: str) -> dict:
        rows = self.store.select(QuerySpec(table=table, sort=SortOption("created_at"), window=Window(size=1)))
        return rows[0] if rows else {}

    def upsert_singleton(self, table: str, fields: dict) -> dict:
        """
        Update the first row, or insert it when the table is empty.
        Two first-time upserts racing each other can both insert.
        """
        current = self.get_singleton(table)
        if current:
            return update_record(self.store, table, current["id"], fields)
        return self.store.insert(table, clean_create(table, fields))

    # Footer

    def list_footer_sections(self) -> list[dict]:
        sections = self.store.select(QuerySpec(table="footer_sections", sort=SortOption("display_order")))
        links = self.store.select(QuerySpec(table="footer_links", sort=SortOption("display_order")))
        by_section: dict[str, list[dict]] = {}
        for link in links:
            by_section.setdefault(link["section_id"], []).append(link)
        for section in sections:
            section["links"] = by_section.get(section["id"], [])
        return sections

    def create_footer_section(self, fields: dict) -> dict:
        return create_record(self.store, "footer_sections", fields)

    def create_footer_link(self, fields: dict) -> dict:
        patch = clean_create("footer_links", fields)
        self.store.fetch_one("footer_sections", id=patch["section_id"])
        return self.store.insert("footer_links", patch)

    def update_footer_link(self, link_id: str, fields: dict) -> dict:
        return update_record(self.store, "footer_links", link_id, fields)

    def delete_footer_link(self, link_id: str) -> None:
        delete_record(self.store, "footer_links", link_id)

    # Payment methods

    def list_payment_methods(self) -> list[dict]:
        return self.store.select(QuerySpec(table="payment_methods", sort=SortOption("sort_order")))

    def create_payment_method(self, fields: dict) -> dict:
        return create_record(self.store, "payment_methods", fields)

    def update_payment_method(self, method_id: str, fields: dict) -> dict:
        return update_record(self.store, "payment_methods", method_id, fields)

    def delete_payment_method(self, method_id: str) -> None:
        delete_record(self.store, "payment_methods", method_id)

    # Pages

    def list_pages(self, *, is_active: bool | None = None) -> list[dict]:
        return self.store.select(QuerySpec(
            table="pages", equals={"is_active": is_active}, sort=SortOption("title"),
        ))

    def get_page(self, *, id: str | None = None, slug: str | None = None) -> dict:
        if id:
            return self.store.fetch_one("pages", id=id)
        if slug:
            return self.store.fetch_one("pages", slug=slug)
        raise ValidationError("Either id or slug is required")

    def create_page(self, fields: dict) -> dict:
        return create_record(self.store, "pages", fields)

    def update_page(self, page_id: str, fields: dict) -> dict:
        return update_record(self.store, "pages", page_id, fields)

    def delete_page(self, page_id: str) -> None:
        delete_record(self.store, "pages", page_id)
