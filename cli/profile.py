#!/usr/bin/env python3

from logger import get_logger

logger = get_logger()


def cmd_show(args, services):
    """Show the user's profile."""
    user_id = args.user or services.config.user_id
    profile = services.profiles.find(user_id)

    logger.info(f"\nUser: {user_id}")
    if profile is None:
        logger.info(f"Currency: {services.profiles.default_currency} (default)")
        return
    if profile.email:
        logger.info(f"Email: {profile.email}")
    logger.info(f"Currency: {profile.currency}")


def cmd_currency(args, services):
    """Set the user's preferred currency."""
    user_id = args.user or services.config.user_id
    existing = services.profiles.find(user_id)
    email = existing.email if existing else services.config.user_email

    profile = services.profiles.save(user_id, email=email, currency=args.code)
    logger.info(f"✓ Currency set to {profile.currency}")


def setup_parser(subparsers):
    """Setup profile subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "profile",
        help="Manage the user profile",
        description="Show the profile and set the preferred currency",
    )

    profile_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available profile commands",
        dest="subcommand",
        required=True,
    )

    show_parser = profile_subparsers.add_parser("show", help="Show the profile")
    show_parser.set_defaults(func=cmd_show)

    currency_parser = profile_subparsers.add_parser(
        "currency", help="Set the preferred currency"
    )
    currency_parser.add_argument("code", help="Currency code, e.g. USD or EUR")
    currency_parser.set_defaults(func=cmd_currency)
