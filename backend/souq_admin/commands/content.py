# Overview: Storefront settings, footer, page and admin user commands.

from __future__ import annotations

from ..models import ADMIN_ROLES
from .catalog import _split_id, required, with_id
from .registry import Command, CommandSpec, Reply
from .schema import Arg, Kind

STORE_SETTINGS_FIELDS = {
    "store_name": Arg(Kind.STRING, "Store name"),
    "store_description": Arg(Kind.STRING, "Store description"),
    "contact_email": Arg(Kind.STRING, "Contact email"),
    "contact_phone": Arg(Kind.STRING, "Contact phone"),
    "logo_url": Arg(Kind.STRING, "Logo URL"),
    "tax_rate": Arg(Kind.NUMBER, "Tax rate percentage"),
    "default_currency": Arg(Kind.STRING, "Default currency code"),
    "timezone": Arg(Kind.STRING, "Store timezone"),
}

HERO_SETTINGS_FIELDS = {
    "title": Arg(Kind.STRING, "Hero title"),
    "subtitle": Arg(Kind.STRING, "Hero subtitle"),
    "badge_text": Arg(Kind.STRING, "Badge text"),
    "background_image_url": Arg(Kind.STRING, "Background image URL"),
    "primary_button_text": Arg(Kind.STRING, "Primary button text"),
    "primary_button_link": Arg(Kind.STRING, "Primary button link"),
    "secondary_button_text": Arg(Kind.STRING, "Secondary button text"),
    "secondary_button_link": Arg(Kind.STRING, "Secondary button link"),
    "features": Arg(Kind.ARRAY, "Feature highlights"),
    "stats": Arg(Kind.ARRAY, "Statistics to display"),
    "is_active": Arg(Kind.BOOLEAN, "Active status"),
}

FOOTER_LINK_FIELDS = {
    "section_id": Arg(Kind.STRING, "Footer section ID"),
    "label": Arg(Kind.STRING, "Link label"),
    "url": Arg(Kind.STRING, "Link URL"),
    "display_order": Arg(Kind.INTEGER, "Display order"),
    "is_active": Arg(Kind.BOOLEAN, "Active status"),
}

ADMIN_USER_FIELDS = {
    "email": Arg(Kind.STRING, "Admin email"),
    "password": Arg(Kind.STRING, "Password (8+ chars, upper, lower, digit, special)"),
    "first_name": Arg(Kind.STRING, "First name"),
    "last_name": Arg(Kind.STRING, "Last name"),
    "role": Arg(Kind.STRING, "Admin role", choices=ADMIN_ROLES),
    "is_active": Arg(Kind.BOOLEAN, "Active status"),
}

PAGE_FIELDS = {
    "slug": Arg(Kind.STRING, "URL slug"),
    "title": Arg(Kind.STRING, "Page title"),
    "content": Arg(Kind.STRING, "Page content (HTML or Markdown)"),
    "is_active": Arg(Kind.BOOLEAN, "Active status"),
}


def content_commands(services) -> dict:
    content = services.content
    admins = services.admins

    def get_store_settings(args):
        return Reply(content.get_singleton("store_settings"))

    def update_store_settings(args):
        return Reply(content.upsert_singleton("store_settings", args), "Store settings updated")

    def get_hero_settings(args):
        return Reply(content.get_singleton("hero_settings"))

    def update_hero_settings(args):
        return Reply(content.upsert_singleton("hero_settings", args), "Hero settings updated")

    def list_footer_sections(args):
        return Reply(content.list_footer_sections())

    def create_footer_section(args):
        return Reply(content.create_footer_section(args), "Footer section created")

    def create_footer_link(args):
        return Reply(content.create_footer_link(args), "Footer link created")

    def update_footer_link(args):
        link_id, fields = _split_id(args)
        return Reply(content.update_footer_link(link_id, fields), "Footer link updated")

    def delete_footer_link(args):
        content.delete_footer_link(args["id"])
        return Reply(message=f"Footer link {args['id']} deleted successfully")

    def list_admin_users(args):
        return Reply(admins.list_admin_users())

    def create_admin_user(args):
        return Reply(admins.create_admin_user(args), "Admin user created")

    def update_admin_user(args):
        user_id, fields = _split_id(args)
        return Reply(admins.update_admin_user(user_id, fields), "Admin user updated")

    def delete_admin_user(args):
        admins.delete_admin_user(args["id"])
        return Reply(message=f"Admin user {args['id']} deleted successfully")

    def list_pages(args):
        return Reply(content.list_pages(**args))

    def get_page(args):
        return Reply(content.get_page(**args))

    def create_page(args):
        return Reply(content.create_page(args), "Page created")

    def update_page(args):
        page_id, fields = _split_id(args)
        return Reply(content.update_page(page_id, fields), "Page updated")

    def delete_page(args):
        content.delete_page(args["id"])
        return Reply(message=f"Page {args['id']} deleted successfully")

    return {
        Command.GET_STORE_SETTINGS: CommandSpec("Get store settings", get_store_settings),
        Command.UPDATE_STORE_SETTINGS: CommandSpec(
            "Update store settings (created on first update)",
            update_store_settings,
            STORE_SETTINGS_FIELDS,
        ),
        Command.GET_HERO_SETTINGS: CommandSpec("Get homepage hero section settings", get_hero_settings),
        Command.UPDATE_HERO_SETTINGS: CommandSpec(
            "Update homepage hero section settings (created on first update)",
            update_hero_settings,
            HERO_SETTINGS_FIELDS,
        ),
        Command.LIST_FOOTER_SECTIONS: CommandSpec(
            "List footer sections with their links",
            list_footer_sections,
        ),
        Command.CREATE_FOOTER_SECTION: CommandSpec(
            "Create a footer section",
            create_footer_section,
            {
                "title": Arg(Kind.STRING, "Section title", required=True),
                "display_order": Arg(Kind.INTEGER, "Display order"),
                "is_active": Arg(Kind.BOOLEAN, "Active status"),
            },
        ),
        Command.CREATE_FOOTER_LINK: CommandSpec(
            "Create a link in a footer section",
            create_footer_link,
            required(FOOTER_LINK_FIELDS, "section_id", "label", "url"),
        ),
        Command.UPDATE_FOOTER_LINK: CommandSpec(
            "Update a footer link",
            update_footer_link,
            with_id(FOOTER_LINK_FIELDS, "Footer link ID"),
        ),
        Command.DELETE_FOOTER_LINK: CommandSpec(
            "Delete a footer link",
            delete_footer_link,
            {"id": Arg(Kind.STRING, "Footer link ID", required=True)},
        ),
        Command.LIST_ADMIN_USERS: CommandSpec(
            "List admin users (password hashes are never returned)",
            list_admin_users,
        ),
        Command.CREATE_ADMIN_USER: CommandSpec(
            "Create an admin user; the password is stored as a bcrypt hash",
            create_admin_user,
            required(ADMIN_USER_FIELDS, "email", "password", "first_name", "last_name"),
        ),
        Command.UPDATE_ADMIN_USER: CommandSpec(
            "Update an admin user; a new password is re-hashed",
            update_admin_user,
            with_id(ADMIN_USER_FIELDS, "Admin user ID"),
        ),
        Command.DELETE_ADMIN_USER: CommandSpec(
            "Delete an admin user",
            delete_admin_user,
            {"id": Arg(Kind.STRING, "Admin user ID", required=True)},
        ),
        Command.LIST_PAGES: CommandSpec(
            "List content pages by title",
            list_pages,
            {"is_active": Arg(Kind.BOOLEAN, "Filter by active status")},
        ),
        Command.GET_PAGE: CommandSpec(
            "Get a page by ID or slug",
            get_page,
            {"id": Arg(Kind.STRING, "Page ID"), "slug": Arg(Kind.STRING, "Page slug")},
            one_of=(("id", "slug"),),
        ),
        Command.CREATE_PAGE: CommandSpec(
            "Create a content page",
            create_page,
            required(PAGE_FIELDS, "slug", "title", "content"),
        ),
        Command.UPDATE_PAGE: CommandSpec(
            "Update a content page",
            update_page,
            with_id(PAGE_FIELDS, "Page ID"),
        ),
        Command.DELETE_PAGE: CommandSpec(
            "Delete a content page",
            delete_page,
            {"id": Arg(Kind.STRING, "Page ID", required=True)},
        ),
    }
