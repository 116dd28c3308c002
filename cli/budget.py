#!/usr/bin/env python3

import sys
from cli.entries import open_ledger
from models.budget_entry import ENTRY_TYPES
from taxonomy.loader import TaxonomyLoader, DEFAULT_TAXONOMY
from tools.budget import analyze, summarize
from logger import get_logger

logger = get_logger()


def _taxonomy(services):
    return services.config.taxonomy_file or DEFAULT_TAXONOMY


def cmd_summary(args, services):
    """Show totals and the 50/30/20 breakdown for the user's ledger."""
    store = open_ledger(args, services)
    currency = services.profiles.get_currency(store.user_id)

    try:
        category_map = TaxonomyLoader().category_map(_taxonomy(services))
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load category taxonomy: {e}")
        sys.exit(1)

    analysis = analyze(store.all(), category_map)
    lines = summarize(analysis, currency)

    logger.info(f"\nBudget summary for {store.user_id} ({analysis.entry_count} entries)")
    logger.info("=" * 80)
    logger.info(f"Income:     {lines['income']}")
    logger.info(f"Expenses:   {lines['expenses']}")
    logger.info(f"Savings:    {lines['savings']}")
    logger.info(f"Remaining:  {lines['remaining']}")
    logger.info("-" * 80)
    logger.info("50/30/20 rule")
    logger.info(f"  Needs (50%):   {lines['needs']}")
    logger.info(f"  Wants (30%):   {lines['wants']}")
    logger.info(f"  Savings (20%): {lines['savings_goal']}")
    if analysis.unclassified_spent:
        logger.info(f"  Unclassified:  {lines['unclassified']}")
    logger.info("-" * 80)

    if analysis.budget_healthy:
        logger.info("✓ Budget is healthy")
    else:
        logger.warning("Budget is over-spent")


def cmd_categories(args, services):
    """List suggested categories per entry type and the Needs/Wants buckets."""
    loader = TaxonomyLoader()
    taxonomy = _taxonomy(services)

    try:
        category_map = loader.category_map(taxonomy)
        suggestions = {t: loader.suggestions(t, taxonomy) for t in ENTRY_TYPES}
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load category taxonomy: {e}")
        sys.exit(1)

    logger.info("\nSuggested categories:")
    for entry_type, names in suggestions.items():
        logger.info(f"  {entry_type}: {', '.join(names) or '-'}")

    logger.info("\nBuckets:")
    logger.info(f"  Needs: {', '.join(sorted(category_map.needs))}")
    logger.info(f"  Wants: {', '.join(sorted(category_map.wants))}")
    if category_map.savings_category:
        logger.info(f"  Savings (as expense): {category_map.savings_category}")


def setup_parser(subparsers):
    """Setup budget subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "budget",
        help="Analyze the budget",
        description="Budget totals and 50/30/20 allocation",
    )

    budget_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available budget commands",
        dest="subcommand",
        required=True,
    )

    summary_parser = budget_subparsers.add_parser(
        "summary", help="Show totals and the 50/30/20 breakdown"
    )
    summary_parser.set_defaults(func=cmd_summary)

    categories_parser = budget_subparsers.add_parser(
        "categories", help="List suggested categories and bucket mapping"
    )
    categories_parser.set_defaults(func=cmd_categories)
