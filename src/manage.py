"""Shopfloor database management CLI.

Creates and drops the database schemas of both domains. The schema helpers
are domain-agnostic, so one pair serves identity and fulfillment alike.

Usage:
    python src/manage.py setup-db                        # Create all tables
    python src/manage.py drop-db --domain fulfillment    # Drop one domain's tables
    python src/manage.py seed-roles                      # Create Role records
"""

import argparse
import sys

DOMAIN_NAMES = ["identity", "fulfillment"]


def _domains(names=None):
    from fulfillment.domain import fulfillment
    from identity.domain import identity

    all_domains = {"identity": identity, "fulfillment": fulfillment}
    return {name: all_domains[name] for name in (names or DOMAIN_NAMES)}


def setup_databases(domains=None):
    """Create database schemas for the specified (or all) domains."""
    from shared.db import setup_db

    for name, domain in _domains(domains).items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Creating {name} database schema...")
        setup_db(domain)
        print(f"  {name} schema ready.")

    print("Done.")


def drop_databases(domains=None):
    """Drop database schemas for the specified (or all) domains."""
    from shared.db import drop_db

    for name, domain in _domains(domains).items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Dropping {name} database schema...")
        drop_db(domain)
        print(f"  {name} schema dropped.")

    print("Done.")


def seed_roles():
    """Create a Role record for every ranked role name."""
    from identity.domain import identity
    from identity.role.seeding import SeedRoles

    identity.init()
    with identity.domain_context():
        created = identity.process(SeedRoles(actor_id="system"), asynchronous=False)

    print(f"Created roles: {', '.join(created) if created else 'none'}")


def main():
    parser = argparse.ArgumentParser(description="Shopfloor database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to set up (default: all)",
    )

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to drop (default: all)",
    )

    subparsers.add_parser("seed-roles", help="Create Role records for the role hierarchy")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.domain)
    elif args.command == "drop-db":
        drop_databases(args.domain)
    elif args.command == "seed-roles":
        seed_roles()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
