#!/usr/bin/env python3
"""
Tally CLI - command-line interface for the budget tracker.

Usage:
    python -m cli [--user USER_ID] <command> <subcommand> [options]

Commands:
    entries      Add, list, update and delete budget entries
    budget       Budget totals and 50/30/20 breakdown
    profile      Profile and preferred currency
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli entries add --name Salary --amount 3500 --type income
    python -m cli entries list
    python -m cli budget summary
    python -m cli profile currency EUR
"""

import sys
import argparse
from cli import entries, budget, profile, migrate
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Tally - Personal budget tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--user",
        help="User ID to act as (defaults to [user] id in the config file)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    entries.setup_parser(subparsers)
    budget.setup_parser(subparsers)
    profile.setup_parser(subparsers)
    migrate.setup_parser(subparsers)
    return parser


def main():
    """Main CLI entry point with subcommands."""
    parser = build_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config()
        setup_logging(config)

        # migrate works on the raw database; everything else goes through services
        if args.command == "migrate":
            args.func(args, DatabaseManager(config))
        else:
            services = Services(config)
            if not services.db_manager.has_table("budget_entries"):
                print("Error: database is not initialized. Run 'python -m cli migrate apply'.")
                sys.exit(1)
            args.func(args, services)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
