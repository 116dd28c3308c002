import logging

import pytest

from cli.__main__ import build_parser


def run(services, *argv):
    args = build_parser().parse_args(list(argv))
    args.func(args, services)


class TestCli:
    """Tests for the CLI command functions."""

    def test_add_then_list(self, services, caplog):
        caplog.set_level(logging.INFO, logger="tally")

        run(services, "entries", "add", "--name", "Salary", "--amount", "3500", "--type", "income")
        run(services, "entries", "list")

        assert len(services.entries.list("user-1")) == 1
        assert "+$3,500.00" in caplog.text

    def test_add_rejects_negative_amount(self, services):
        with pytest.raises(SystemExit):
            run(services, "entries", "add", "--name", "Rent", "--amount", "-5", "--type", "expense")

        assert services.entries.list("user-1") == []

    def test_update_and_delete(self, services, make_entry):
        services.entries.create(make_entry(10, entry_id="x"))

        run(services, "entries", "update", "x", "--amount", "25", "--recurring", "yes")
        updated = services.entries.find("user-1", "x")
        assert str(updated.amount) == "25"
        assert updated.is_recurring is True

        run(services, "entries", "delete", "x")
        assert services.entries.find("user-1", "x") is None

    def test_delete_unknown_entry_exits(self, services):
        with pytest.raises(SystemExit):
            run(services, "entries", "delete", "missing")

    def test_user_option_scopes_ledger(self, services):
        run(
            services, "--user", "user-2",
            "entries", "add", "--name", "Gift", "--amount", "50", "--type", "income",
        )

        assert services.entries.list("user-1") == []
        assert len(services.entries.list("user-2")) == 1

    def test_budget_summary(self, services, make_entry, caplog):
        caplog.set_level(logging.INFO, logger="tally")
        services.entries.create(make_entry(4000, type="income"))
        services.entries.create(make_entry(5000, category="Housing"))

        run(services, "budget", "summary")

        assert "Remaining:  -$1,000.00" in caplog.text
        assert "Budget is over-spent" in caplog.text

    def test_profile_currency(self, services):
        run(services, "profile", "currency", "eur")

        assert services.profiles.get_currency("user-1") == "EUR"
