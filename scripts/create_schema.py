"""
Create (or verify) the user-store keyspace, users table and email index.

Usage:
    # Uses DB_* settings from the environment / .env
    python scripts/create_schema.py

    # Against a local ScyllaDB (docker run -p 9042:9042 scylladb/scylla)
    python scripts/create_schema.py --contact-points localhost --keyspace express_db
"""

import argparse
import sys

from pydantic import ValidationError

from user_store.core.config import get_settings
from user_store.core.errors import UserStoreError
from user_store.core.log import configure_logging
from user_store.db.schema import EMAIL_INDEX, USERS_TABLE, SchemaBootstrapper
from user_store.main import build_connection_manager


def parse_args(argv=None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Create the user-store schema.")
    parser.add_argument(
        "--contact-points",
        default=",".join(settings.db_contact_points),
        help="Comma-separated hosts (default: DB_CONTACT_POINTS)",
    )
    parser.add_argument("--port", type=int, default=settings.db_port)
    parser.add_argument("--keyspace", default=settings.db_keyspace)
    parser.add_argument("--datacenter", default=settings.db_datacenter)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings().model_copy(
        update={
            "db_contact_points": [h.strip() for h in args.contact_points.split(",") if h.strip()],
            "db_port": args.port,
            "db_keyspace": args.keyspace,
            "db_datacenter": args.datacenter,
        }
    )
    configure_logging(settings.log_level)

    print(f"Target:   {','.join(settings.db_contact_points)}:{settings.db_port}")
    print(f"Keyspace: {settings.db_keyspace}\n")

    connections = build_connection_manager(settings)
    try:
        session = connections.connect(settings.connection_descriptor())
        SchemaBootstrapper(session, settings.db_keyspace).bootstrap()
    except (UserStoreError, ValidationError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        connections.disconnect()

    print(f"Table:    {settings.db_keyspace}.{USERS_TABLE}")
    print(f"Index:    {EMAIL_INDEX} (email)")
    print("\nDone. Schema is ready.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
