# Overview: Export/import, seeding and read-only SQL commands.

from __future__ import annotations

from ..services.exchange_service import EXPORT_ENTITIES, IMPORT_ENTITIES
from .registry import Command, CommandSpec, Reply
from .schema import Arg, Kind


def data_commands(services) -> dict:
    exchange = services.exchange

    def export_data(args):
        return Reply(message=exchange.export_csv(args["entity"]))

    def import_data(args):
        result = exchange.import_csv(args["entity"], args["csv"])
        return Reply(result, f"Import finished: {result['success']} imported, {result['failed']} failed")

    def seed_store_data(args):
        return Reply(services.seed.seed(), "Seed data applied")

    def execute_sql(args):
        rows = services.sql.execute(args["query"])
        return Reply(rows, f"{len(rows)} row(s)")

    return {
        Command.EXPORT_DATA: CommandSpec(
            "Export records as CSV text",
            export_data,
            {"entity": Arg(Kind.STRING, "What to export", required=True, choices=EXPORT_ENTITIES)},
        ),
        Command.IMPORT_DATA: CommandSpec(
            "Import records from CSV text; each row is inserted on its own and failures are listed per row",
            import_data,
            {
                "entity": Arg(Kind.STRING, "What to import", required=True, choices=IMPORT_ENTITIES),
                "csv": Arg(Kind.STRING, "CSV text with a header row", required=True),
            },
        ),
        Command.SEED_STORE_DATA: CommandSpec(
            "Insert the sample categories, products, currencies and pages that are missing. "
            "Existing records are left untouched.",
            seed_store_data,
        ),
        Command.EXECUTE_SQL: CommandSpec(
            "Run one SELECT statement in the database's read-only mode",
            execute_sql,
            {"query": Arg(Kind.STRING, "SQL SELECT statement", required=True)},
        ),
    }
