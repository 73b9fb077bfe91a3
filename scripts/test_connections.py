#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the database is reachable and the signing secret is usable.
Usage: python scripts/test_connections.py
"""
from jobmarket.core.config import ConfigurationError, get_settings, resolve_jwt_secret
from jobmarket.db.database import Database


def main():
    settings = get_settings()
    print("=" * 50)
    print("JOB MARKET - CONNECTION TEST")
    print("=" * 50)

    print("\n[1] Testing database...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql+psycopg2://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    database = Database(settings.sqlalchemy_url, timeout_seconds=settings.db_timeout_seconds)
    if database.test_connection():
        print("    ✅ Database: CONNECTED")
    else:
        print("    ❌ Database: FAILED")
    database.dispose()

    print("\n[2] Checking JWT secret...")
    try:
        resolve_jwt_secret(settings)
        print(f"    ✅ JWT secret usable ({settings.environment})")
    except ConfigurationError as e:
        print(f"    ❌ {e}")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
