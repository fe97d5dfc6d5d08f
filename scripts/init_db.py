from __future__ import annotations

from sqlalchemy import inspect

from phonedraw.db.engine import create_schema, get_sessionmaker, make_engine
from phonedraw.models import DrawSettings


def init_db() -> None:
    """Create the settings and export tables and the default settings row."""
    engine = make_engine()
    create_schema(engine)
    Session = get_sessionmaker(engine)
    with Session.begin() as session:
        settings = DrawSettings.load(session)
        print(f"Seed: {settings.seed}  Event: {settings.event_title}")


def print_tables() -> None:
    """Inspect the configured database and print all table names."""
    engine = make_engine()
    insp = inspect(engine)
    print("Current tables:", ", ".join(sorted(insp.get_table_names())))


def main() -> None:
    """Create the schema and report the resulting tables."""
    init_db()
    print_tables()


if __name__ == "__main__":
    main()
