#!/usr/bin/env python3

import sys
from errors import NotFoundError, SyncError, ValidationError
from ledger.store import LedgerStore
from models.budget_entry import BudgetEntryInput, ENTRY_TYPES
from tools.currency import signed_amount
from logger import get_logger

logger = get_logger()


def open_ledger(args, services) -> LedgerStore:
    """Create a ledger store for the CLI user and load it from the database."""
    user_id = args.user or services.config.user_id
    store = LedgerStore(user_id, persistence=services.entries)
    try:
        store.load()
    except SyncError as e:
        logger.error(f"Could not load budget entries: {e}")
        sys.exit(1)
    return store


def cmd_list(args, services):
    """List all budget entries for the user."""
    store = open_ledger(args, services)
    currency = services.profiles.get_currency(store.user_id)
    entries = store.all()

    if args.type:
        entries = [e for e in entries if e.type == args.type]

    if not entries:
        logger.info("No budget entries found.")
        return

    logger.info(f"\nBudget entries for {store.user_id}:")
    logger.info("=" * 80)
    for entry in entries:
        recurring = " (recurring)" if entry.is_recurring else ""
        logger.info(f"ID: {entry.id}")
        logger.info(f"  {entry.name}{recurring}")
        logger.info(f"  {entry.type} / {entry.category or '-'}")
        logger.info(f"  {signed_amount(entry, currency)}")
        logger.info("-" * 80)

    logger.info(f"\nTotal entries: {len(entries)}")


def cmd_add(args, services):
    """Add a new budget entry."""
    store = open_ledger(args, services)

    try:
        entry = store.add(
            BudgetEntryInput(
                name=args.name,
                amount=args.amount,
                type=args.type,
                category=args.category or "",
                is_recurring=args.recurring,
            )
        )
    except ValidationError as e:
        logger.error(f"Invalid entry: {e}")
        sys.exit(1)
    except SyncError as e:
        logger.error(f"Error saving entry: {e}")
        sys.exit(1)

    logger.info(f"\n✓ Entry created successfully with ID: {entry.id}")
    logger.info(f"  Name: {entry.name}")
    logger.info(f"  Type: {entry.type}")
    logger.info(f"  Amount: {entry.amount}")
    if entry.category:
        logger.info(f"  Category: {entry.category}")


def cmd_update(args, services):
    """Update fields of an existing budget entry."""
    store = open_ledger(args, services)

    fields = {}
    if args.name is not None:
        fields["name"] = args.name
    if args.amount is not None:
        fields["amount"] = args.amount
    if args.type is not None:
        fields["type"] = args.type
    if args.category is not None:
        fields["category"] = args.category
    if args.recurring is not None:
        fields["is_recurring"] = args.recurring == "yes"

    if not fields:
        logger.error("Nothing to update. Pass at least one of --name, --amount, "
                     "--type, --category, --recurring.")
        sys.exit(1)

    try:
        entry = store.update(args.entry_id, fields)
    except (NotFoundError, ValidationError) as e:
        logger.error(str(e))
        sys.exit(1)
    except SyncError as e:
        logger.error(f"Error saving entry: {e}")
        sys.exit(1)

    logger.info(f"✓ Entry '{entry.name}' updated.")


def cmd_delete(args, services):
    """Delete a budget entry by ID."""
    store = open_ledger(args, services)

    try:
        store.remove(args.entry_id)
    except NotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except SyncError as e:
        logger.error(f"Error deleting entry: {e}")
        sys.exit(1)

    logger.info(f"✓ Entry {args.entry_id} deleted.")


def setup_parser(subparsers):
    """Setup entries subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "entries",
        help="Manage budget entries",
        description="Add, list, update and delete income, expense and savings entries",
    )

    entries_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available entry commands",
        dest="subcommand",
        required=True,
    )

    # entries list
    list_parser = entries_subparsers.add_parser("list", help="List budget entries")
    list_parser.add_argument("--type", choices=ENTRY_TYPES, help="Only show this type")
    list_parser.set_defaults(func=cmd_list)

    # entries add
    add_parser = entries_subparsers.add_parser(
        "add",
        help="Add a budget entry",
        epilog="""
Examples:
  python -m cli entries add --name Salary --amount 3500 --type income --recurring
  python -m cli entries add --name Rent --amount 1200 --type expense --category Housing
        """,
    )
    add_parser.add_argument("--name", required=True, help="Entry label")
    add_parser.add_argument("--amount", required=True, help="Non-negative amount")
    add_parser.add_argument("--type", required=True, choices=ENTRY_TYPES)
    add_parser.add_argument("--category", help="Category, e.g. Housing or Lifestyle")
    add_parser.add_argument(
        "--recurring", action="store_true", help="Mark the entry as recurring"
    )
    add_parser.set_defaults(func=cmd_add)

    # entries update
    update_parser = entries_subparsers.add_parser(
        "update", help="Update fields of a budget entry"
    )
    update_parser.add_argument("entry_id", help="ID of the entry to update")
    update_parser.add_argument("--name")
    update_parser.add_argument("--amount")
    update_parser.add_argument("--type", choices=ENTRY_TYPES)
    update_parser.add_argument("--category")
    update_parser.add_argument("--recurring", choices=("yes", "no"))
    update_parser.set_defaults(func=cmd_update)

    # entries delete
    delete_parser = entries_subparsers.add_parser(
        "delete", help="Delete a budget entry by ID"
    )
    delete_parser.add_argument("entry_id", help="ID of the entry to delete")
    delete_parser.set_defaults(func=cmd_delete)
