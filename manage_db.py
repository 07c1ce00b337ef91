#!/usr/bin/env python3
"""
Database management script for the SkillLink backend.
Handles Alembic migrations and development table creation.
"""

import sys
from pathlib import Path

from alembic.config import Config
from alembic import command

from skilllink.infrastructure.db.database import engine
from skilllink.infrastructure.db.models import create_all_tables

MIGRATIONS_DIR = Path("skilllink/infrastructure/db/migrations")
ALEMBIC_INI = str(MIGRATIONS_DIR / "alembic.ini")


def _config() -> Config:
    return Config(ALEMBIC_INI)


def init_alembic():
    """Create the versions directory if it is missing."""
    versions_dir = MIGRATIONS_DIR / "versions"
    if not versions_dir.exists():
        print("Creating migrations/versions...")
        versions_dir.mkdir(parents=True, exist_ok=True)
    else:
        print("Alembic is already initialized")


def create_migration(message: str = "Auto-generated migration"):
    """Create a new migration."""
    print(f"Creating migration: {message}")
    command.revision(_config(), message=message, autogenerate=True)


def run_migrations():
    """Run pending migrations."""
    print("Running migrations...")
    command.upgrade(_config(), "head")


def rollback_migration():
    """Rollback last migration."""
    print("Rolling back migration...")
    command.downgrade(_config(), "-1")


def reset_database():
    """Reset database - WARNING: This will drop all data!"""
    response = input("This will drop ALL data. Type 'yes' to continue: ")
    if response.lower() == 'yes':
        print("Resetting database...")
        command.downgrade(_config(), "base")
        command.upgrade(_config(), "head")
    else:
        print("Database reset cancelled.")


def show_current_revision():
    command.current(_config())


def show_history():
    command.history(_config())


def create_tables():
    """Create every table directly from the ORM models (development only)."""
    print("Creating tables...")
    create_all_tables(engine)


def main():
    """Main CLI function."""
    if len(sys.argv) < 2:
        print("Usage: python manage_db.py [command]")
        print("Commands:")
        print("  init           - Initialize Alembic")
        print("  create [msg]   - Create new migration")
        print("  migrate        - Run pending migrations")
        print("  rollback       - Rollback last migration")
        print("  reset          - Reset database (WARNING: drops all data)")
        print("  current        - Show current revision")
        print("  history        - Show migration history")
        print("  create-tables  - Create tables without migrations (development)")
        return

    command_name = sys.argv[1]

    if command_name == "init":
        init_alembic()
    elif command_name == "create":
        message = " ".join(sys.argv[2:]) if len(sys.argv) > 2 else "Auto-generated migration"
        create_migration(message)
    elif command_name == "migrate":
        run_migrations()
    elif command_name == "rollback":
        rollback_migration()
    elif command_name == "reset":
        reset_database()
    elif command_name == "current":
        show_current_revision()
    elif command_name == "history":
        show_history()
    elif command_name == "create-tables":
        create_tables()
    else:
        print(f"Unknown command: {command_name}")


if __name__ == "__main__":
    main()
