from __future__ import annotations

from ..extensions import db
from souq_admin.time_utils import to_utc_z, utcnow
from .catalog import new_id


class StoreSettings(db.Model):
    """Singleton row; update_store_settings upserts it."""
    __tablename__ = "store_settings"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    store_name = db.Column(db.String(255), nullable=True)
    store_description = db.Column(db.Text, nullable=True)
    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(64), nullable=True)
    logo_url = db.Column(db.String(1024), nullable=True)
    tax_rate = db.Column(db.Numeric(6, 3), nullable=True)
    default_currency = db.Column(db.String(8), nullable=True)
    timezone = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_name": self.store_name,
            "store_description": self.store_description,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "logo_url": self.logo_url,
            "tax_rate": self.tax_rate,
            "default_currency": self.default_currency,
            "timezone": self.timezone,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class HeroSettings(db.Model):
    """Singleton row for the storefront hero section."""
    __tablename__ = "hero_settings"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(255), nullable=True)
    subtitle = db.Column(db.Text, nullable=True)
    badge_text = db.Column(db.String(255), nullable=True)
    background_image_url = db.Column(db.String(1024), nullable=True)
    primary_button_text = db.Column(db.String(120), nullable=True)
    primary_button_link = db.Column(db.String(1024), nullable=True)
    secondary_button_text = db.Column(db.String(120), nullable=True)
    secondary_button_link = db.Column(db.String(1024), nullable=True)
    # [{"icon": "truck", "text": "..."}]
    features = db.Column(db.JSON, nullable=True)
    # [{"value": "10K+", "label": "...", "icon": "users"}]
    stats = db.Column(db.JSON, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "badge_text": self.badge_text,
            "background_image_url": self.background_image_url,
            "primary_button_text": self.primary_button_text,
            "primary_button_link": self.primary_button_link,
            "secondary_button_text": self.secondary_button_text,
            "secondary_button_link": self.secondary_button_link,
            "features": self.features or [],
            "stats": self.stats or [],
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class FooterSection(db.Model):
    __tablename__ = "footer_sections"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(255), nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "display_order": self.display_order,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class FooterLink(db.Model):
    __tablename__ = "footer_links"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    section_id = db.Column(db.String(36), db.ForeignKey("footer_sections.id", ondelete="CASCADE"), nullable=False, index=True)
    label = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(1024), nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "section_id": self.section_id,
            "label": self.label,
            "url": self.url,
            "display_order": self.display_order,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Page(db.Model):
    """Static content page (About Us, Privacy Policy, ...)."""
    __tablename__ = "pages"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "content": self.content,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
