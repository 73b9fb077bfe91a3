#!/usr/bin/env python3
"""
Create all tables and purge expired refresh-token revocations.

Safe to run repeatedly: existing tables are left untouched.
Usage: python scripts/init_db.py
"""
from jobmarket.core.config import get_settings, resolve_jwt_secret
from jobmarket.core.logging import configure_logging
from jobmarket.core.security import PasswordHasher
from jobmarket.core.tokens import TokenCodec
from jobmarket.db.database import Database
from jobmarket.db.schema import metadata
from jobmarket.services.auth_service import AuthService


def main():
    settings = get_settings()
    configure_logging(settings.log_level)
    database = Database(settings.sqlalchemy_url, timeout_seconds=settings.db_timeout_seconds)

    print("\n[1] Creating tables...")
    database.create_tables()
    for table in metadata.sorted_tables:
        print(f"    ✅ {table.name}")

    print("\n[2] Purging expired revocations...")
    service = AuthService(database, TokenCodec(resolve_jwt_secret(settings)), PasswordHasher())
    print(f"    Removed {service.purge_expired_revocations()} rows")

    database.dispose()


if __name__ == "__main__":
    main()
