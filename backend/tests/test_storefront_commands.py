"""
Storefront commands: settings singletons, footer, pages, payment methods,
coupons, customers and review moderation. Exercised through dispatch so the
argument schema and the envelope are covered too.
"""

from souq_admin.extensions import db
from souq_admin.models import FooterLink, Product, ProductReview, StoreSettings
from conftest import payload_of


class TestSettings:
    def test_empty_singleton_reads_as_empty_object(self, call, db_session):
        assert payload_of(call("get_store_settings")) == {}

    def test_update_inserts_then_updates_same_row(self, call, db_session):
        first = payload_of(call("update_store_settings", store_name="Souq", tax_rate=15))
        second = payload_of(call("update_store_settings", contact_email="hi@souq.example"))

        assert first["id"] == second["id"]
        assert second["store_name"] == "Souq"
        assert second["tax_rate"] == 15.0
        assert db.session.query(StoreSettings).count() == 1

    def test_hero_lists_round_trip(self, call, db_session):
        features = [{"icon": "truck", "text": "Free shipping"}]
        call("update_hero_settings", title="Welcome", features=features)

        hero = payload_of(call("get_hero_settings"))
        assert hero["features"] == features
        assert hero["stats"] == []

    def test_hero_features_must_be_a_list(self, call, db_session):
        envelope = call("update_hero_settings", features="Free shipping")
        assert envelope == {"content": "Error: features must be an array", "error": True}


class TestFooter:
    def test_sections_nest_their_links(self, call, db_session):
        about = payload_of(call("create_footer_section", title="About", display_order=1))
        help_ = payload_of(call("create_footer_section", title="Help", display_order=2))
        call("create_footer_link", section_id=help_["id"], label="Returns", url="/returns", display_order=2)
        call("create_footer_link", section_id=help_["id"], label="FAQ", url="/faq", display_order=1)

        sections = payload_of(call("list_footer_sections"))

        assert [s["title"] for s in sections] == ["About", "Help"]
        assert sections[0]["links"] == []
        assert [link["label"] for link in sections[1]["links"]] == ["FAQ", "Returns"]
        assert about["id"] != help_["id"]

    def test_link_needs_existing_section(self, call, db_session):
        envelope = call("create_footer_link", section_id="nope", label="X", url="/x")

        assert envelope == {"content": "Error: No footer_sections record matches id=nope", "error": True}
        assert db.session.query(FooterLink).count() == 0


class TestPages:
    def test_page_lifecycle(self, call, db_session):
        page = payload_of(call("create_page", slug="about-us", title="About", content="Hello"))

        assert payload_of(call("get_page", slug="about-us"))["id"] == page["id"]
        updated = payload_of(call("update_page", id=page["id"], is_active=False))
        assert updated["is_active"] is False
        assert payload_of(call("list_pages", is_active=True)) == []

        assert call("delete_page", id=page["id"]) == {"content": f"Page {page['id']} deleted successfully"}
        missing = call("get_page", slug="about-us")
        assert missing == {"content": "Error: No pages record matches slug=about-us", "error": True}


def test_payment_methods_sorted(call, db_session):
    call("create_payment_method", name="Cash on delivery", code="cod", sort_order=2)
    call("create_payment_method", name="Card", code="card", sort_order=1)

    methods = payload_of(call("list_payment_methods"))
    assert [m["code"] for m in methods] == ["card", "cod"]


class TestCoupons:
    def test_code_upper_cased(self, call, db_session):
        coupon = payload_of(call("create_coupon", code="eid10", discount_type="percentage", discount_value=10))
        assert coupon["code"] == "EID10"

    def test_percentage_capped(self, call, db_session):
        envelope = call("create_coupon", code="BIG", discount_type="percentage", discount_value=150)
        assert envelope["content"] == "Error: discount_value cannot exceed 100 for percentage coupons"

    def test_update_checks_rules_against_stored_row(self, call, db_session):
        coupon = payload_of(call("create_coupon", code="FLAT", discount_type="fixed", discount_value=150))

        envelope = call("update_coupon", id=coupon["id"], discount_type="percentage")

        assert envelope["error"] is True
        assert "cannot exceed 100" in envelope["content"]

    def test_end_before_start(self, call, db_session):
        envelope = call(
            "create_coupon", code="LATE", discount_type="fixed", discount_value=5,
            start_date="2026-05-01", end_date="2026-04-01",
        )
        assert envelope["content"] == "Error: end_date must not be before start_date"


class TestCustomers:
    def test_get_by_email_includes_recent_orders(self, call, make_customer, make_product):
        make_customer(email="layla@example.com")
        ring = make_product(name="Ring", stock=3)
        call("create_order", customer_email="layla@example.com", customer_name="Layla Haddad",
             items=[{"product_id": ring.id, "quantity": 1}])

        customer = payload_of(call("get_customer", email="layla@example.com"))

        assert len(customer["recent_orders"]) == 1
        assert set(customer["recent_orders"][0]) == {"id", "order_number", "total_amount", "status", "created_at"}

    def test_search(self, call, make_customer):
        make_customer(email="layla@example.com", first_name="Layla")
        make_customer(email="omar@example.com", first_name="Omar")

        rows = payload_of(call("list_customers", search="OMAR"))
        assert [r["email"] for r in rows] == ["omar@example.com"]


class TestReviews:
    def _review(self, db_session, product, **fields):
        review = ProductReview(product_id=product.id, customer_name="Layla", rating=fields.pop("rating", 4), **fields)
        db_session.add(review)
        db_session.commit()
        return review

    def test_moderation_flow(self, call, db_session, make_product):
        ring = make_product(name="Ring")
        review = self._review(db_session, ring)

        pending = payload_of(call("list_reviews", is_approved=False))
        assert [r["product"] for r in pending] == [{"name": "Ring"}]

        approved = call("approve_review", id=review.id)
        assert approved["content"].startswith("Review approved:\n")
        unapproved = call("approve_review", id=review.id, is_approved=False)
        assert unapproved["content"].startswith("Review unapproved:\n")

        responded = payload_of(call("respond_to_review", id=review.id, admin_response="Thanks!"))
        assert responded["admin_response"] == "Thanks!"

        assert call("delete_review", id=review.id) == {"content": f"Review {review.id} deleted successfully"}

    def test_rating_filter_range(self, call, db_session):
        envelope = call("list_reviews", rating=6)
        assert envelope == {"content": "Error: rating must be between 1 and 5", "error": True}

    def test_deleting_product_removes_reviews(self, call, db_session, make_product):
        ring = make_product(name="Ring")
        self._review(db_session, ring)

        call("delete_product", id=ring.id)

        db.session.expire_all()
        assert db.session.query(Product).count() == 0
        assert db.session.query(ProductReview).count() == 0
