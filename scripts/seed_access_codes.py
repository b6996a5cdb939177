#!/usr/bin/env python3
"""
Load coach access codes into Snowflake.

The access code directory is administered out of band; the API never
writes to it. This script upserts entries from a JSON file:

    [
      {"code": "COACH-123", "coach_name": "Nasr Akram", "commission_per_workout": 2},
      {"code": "COACH-456", "coach_name": "Sam Lee"}
    ]

Usage:
    python scripts/seed_access_codes.py coaches.json
    python scripts/seed_access_codes.py coaches.json --dry-run
    python scripts/seed_access_codes.py coaches.json --create-tables

Requires:
    - .env file with Snowflake credentials (or SNOWFLAKE_MOCK_MODE=true)
"""

import json
import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from coachbuilder.api.dependencies import snowflake_config_from_settings  # noqa: E402
from coachbuilder.config.settings import get_settings  # noqa: E402
from coachbuilder.core.accounts import AccessCode, Role  # noqa: E402
from coachbuilder.infrastructure.snowflake.base import RepositoryError  # noqa: E402
from coachbuilder.infrastructure.snowflake.client import (  # noqa: E402
    SnowflakeConnectionError,
    create_snowflake_connection,
)
from coachbuilder.infrastructure.snowflake.repositories import AccessCodeRepository  # noqa: E402

SCHEMA_SQL = (
    """
    CREATE TABLE IF NOT EXISTS access_codes (
        code VARCHAR PRIMARY KEY,
        role VARCHAR NOT NULL DEFAULT 'coach',
        coach_name VARCHAR,
        commission_per_workout NUMBER(10, 2)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS workout_logs (
        id VARCHAR PRIMARY KEY,
        coach_code VARCHAR NOT NULL,
        client_name VARCHAR,
        client_gender VARCHAR,
        client_age NUMBER(10, 2),
        client_height_cm NUMBER(10, 2),
        client_weight_kg NUMBER(10, 2),
        exercises_json VARIANT,
        commission_amount NUMBER(10, 2),
        course_name VARCHAR,
        created_at TIMESTAMP_TZ DEFAULT CURRENT_TIMESTAMP()
    )
    """,
)


def parse_access_codes(filepath: str) -> list[AccessCode]:
    """
    Read directory entries from a JSON list.

    Each entry needs a code; role defaults to coach. The admin role is a
    configured sentinel, not a directory row, so it is refused here.
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("Expected a JSON list of access codes")

    entries = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"Entry {index} is not an object")

        role = Role(item.get('role', Role.COACH.value))
        if role is not Role.COACH:
            raise ValueError(f"Entry {index}: only coach codes belong in the directory")

        commission = item.get('commission_per_workout')
        if commission is not None:
            if isinstance(commission, bool) or not isinstance(commission, (int, float)) or commission < 0:
                raise ValueError(f"Entry {index}: commission_per_workout must be a non-negative number")
            commission = float(commission)

        entries.append(AccessCode(
            code=str(item.get('code', '')).strip(),
            role=role,
            coach_name=str(item.get('coach_name') or ''),
            commission_per_workout=commission,
        ))

    codes = [entry.code for entry in entries]
    duplicates = sorted({code for code in codes if codes.count(code) > 1})
    if duplicates:
        raise ValueError(f"Duplicate codes: {', '.join(duplicates)}")

    return entries


def seed_access_codes(entries: list[AccessCode], dry_run: bool = False, create_tables: bool = False) -> bool:
    """Upsert entries. Returns True when every entry was written."""
    settings = get_settings()

    if dry_run:
        print("\n=== DRY RUN - No data will be written ===\n")
        for entry in entries:
            print(f"Would upsert: {entry.code} ({entry.coach_name or 'no name'}, "
                  f"commission {entry.commission_per_workout})")
        print(f"\nTotal: {len(entries)} access codes")
        return True

    missing = settings.validate_required_fields()
    if missing:
        print(f"ERROR: Missing configuration: {', '.join(missing)}")
        return False

    try:
        with create_snowflake_connection(
            config=snowflake_config_from_settings(settings),
            mock_mode=settings.snowflake_mock_mode,
        ) as conn:
            if create_tables:
                cursor = conn.cursor()
                try:
                    for statement in SCHEMA_SQL:
                        cursor.execute(statement)
                finally:
                    cursor.close()
                print("[OK] Tables ready")

            repository = AccessCodeRepository(conn)
            written = 0
            errors = 0

            for entry in entries:
                try:
                    repository.upsert(entry)
                    written += 1
                    print(f"[OK] Upserted: {entry.code}")
                except RepositoryError as e:
                    errors += 1
                    print(f"[ERR] Error upserting {entry.code}: {e}")

    except SnowflakeConnectionError as e:
        print(f"ERROR connecting to Snowflake: {e}")
        return False

    print("\n=== Seed Complete ===")
    print(f"Upserted: {written}")
    print(f"Errors: {errors}")

    return errors == 0


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Load coach access codes into Snowflake')
    parser.add_argument('file', help='JSON file with access codes')
    parser.add_argument('--dry-run', action='store_true', help='Parse only, don\'t write')
    parser.add_argument('--create-tables', action='store_true', help='Create tables if missing')
    args = parser.parse_args()

    if not Path(args.file).exists():
        print(f"ERROR: Cannot find {args.file}")
        sys.exit(1)

    try:
        entries = parse_access_codes(args.file)
    except (ValueError, json.JSONDecodeError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Found {len(entries)} access codes in {args.file}")

    success = seed_access_codes(entries, dry_run=args.dry_run, create_tables=args.create_tables)

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
