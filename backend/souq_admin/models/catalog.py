from __future__ import annotations

import uuid

from ..extensions import db
from souq_admin.time_utils import to_utc_z, utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class Category(db.Model):
    """
    Product category. parent_id forms a tree; cycles are not checked here.
    """
    __tablename__ = "categories"
    __table_args__ = (
        db.Index("ix_categories_parent_sort", "parent_id", "sort_order"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    parent_id = db.Column(db.String(36), db.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    image_url = db.Column(db.String(1024), nullable=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    parent = db.relationship("Category", remote_side=[id], backref=db.backref("children", lazy=True))

    def __repr__(self) -> str:
        return f"<Category id={self.id} slug={self.slug!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "parent_id": self.parent_id,
            "image_url": self.image_url,
            "sort_order": self.sort_order,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(db.Model):
    """
    Product master data.

    PRICING: base_price is the price charged at order time; compare_at_price
    is display-only (the "was" price).

    RATINGS: average_rating and review_count are maintained by the database
    side (trigger on product_reviews) and are never computed by this service.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_active", "category_id", "is_active"),
        db.Index("ix_products_created", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    short_description = db.Column(db.String(512), nullable=True)
    category_id = db.Column(db.String(36), db.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    base_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    compare_at_price = db.Column(db.Numeric(12, 2), nullable=True)

    sku = db.Column(db.String(64), nullable=True, index=True)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=10)

    images = db.Column(db.JSON, nullable=True)
    specifications = db.Column(db.JSON, nullable=True)

    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    average_rating = db.Column(db.Numeric(3, 2), nullable=False, default=0)
    review_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "short_description": self.short_description,
            "category_id": self.category_id,
            "base_price": self.base_price,
            "compare_at_price": self.compare_at_price,
            "sku": self.sku,
            "stock_quantity": self.stock_quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "images": self.images or [],
            "specifications": self.specifications or {},
            "is_featured": self.is_featured,
            "is_active": self.is_active,
            "average_rating": self.average_rating,
            "review_count": self.review_count,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ProductReview(db.Model):
    __tablename__ = "product_reviews"
    __table_args__ = (
        db.Index("ix_product_reviews_product_approved", "product_id", "is_approved"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)
    rating = db.Column(db.Integer, nullable=False)
    title = db.Column(db.String(255), nullable=True)
    comment = db.Column(db.Text, nullable=True)
    images = db.Column(db.JSON, nullable=True)
    is_verified_purchase = db.Column(db.Boolean, nullable=False, default=False)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    helpful_count = db.Column(db.Integer, nullable=False, default=0)
    admin_response = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    product = db.relationship("Product", backref=db.backref("reviews", lazy=True, passive_deletes=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "rating": self.rating,
            "title": self.title,
            "comment": self.comment,
            "images": self.images or [],
            "is_verified_purchase": self.is_verified_purchase,
            "is_approved": self.is_approved,
            "helpful_count": self.helpful_count,
            "admin_response": self.admin_response,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
