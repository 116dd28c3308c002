"""Tests for budget analysis tools."""

import random
from decimal import Decimal

import pytest

from models.analysis import progress_percent
from models.category_map import CategoryMap
from tools.budget import analyze, summarize


@pytest.fixture
def category_map():
    return CategoryMap.from_lists(
        needs=["Housing", "Food", "Transport", "Healthcare"],
        wants=["Lifestyle", "Entertainment", "Other"],
    )


@pytest.fixture
def sample_snapshot(make_entry):
    return (
        make_entry(3500, type="income", category="Salary", name="Salary"),
        make_entry(1200, category="Housing", name="Rent"),
        make_entry(400, category="Food", name="Groceries"),
        make_entry(200, category="Lifestyle", name="Entertainment"),
    )


class TestAnalyze:
    """Tests for analyze function."""

    def test_sample_budget(self, sample_snapshot, category_map):
        """Test the documented example ledger."""
        result = analyze(sample_snapshot, category_map)

        assert result.total_income == Decimal("3500")
        assert result.total_expenses == Decimal("1800")
        assert result.total_savings == Decimal("0")
        assert result.remaining == Decimal("1700")
        assert result.budget_healthy is True
        assert result.needs_spent == Decimal("1600")
        assert result.wants_spent == Decimal("200")
        assert result.needs_target == Decimal("1750")
        assert result.wants_target == Decimal("1050")
        assert result.savings_target == Decimal("700")
        assert result.entry_count == 4

    def test_empty_snapshot(self, category_map):
        """Test that an empty ledger yields all zeros and a healthy budget."""
        result = analyze((), category_map)

        assert result.total_income == 0
        assert result.total_expenses == 0
        assert result.total_savings == 0
        assert result.remaining == 0
        assert result.budget_healthy is True
        assert result.needs_target == result.wants_target == result.savings_target == 0
        assert result.entry_count == 0

    def test_zero_income_targets_and_progress(self, make_entry, category_map):
        """Test that zero income gives zero targets and zero progress, not an error."""
        snapshot = [
            make_entry(300, category="Housing"),
            make_entry(50, category="Lifestyle"),
            make_entry(25, type="savings"),
        ]

        result = analyze(snapshot, category_map)

        assert result.needs_target == result.wants_target == result.savings_target == 0
        assert result.needs_progress == 0
        assert result.wants_progress == 0
        assert result.savings_progress == 0
        assert result.remaining == Decimal("-375")
        assert result.budget_healthy is False

    def test_savings_type_counts_toward_savings(self, make_entry, category_map):
        """Test that savings entries are totalled separately from expenses."""
        snapshot = [
            make_entry(1000, type="income"),
            make_entry(150, type="savings", category="Emergency Fund"),
            make_entry(100, category="Food"),
        ]

        result = analyze(snapshot, category_map)

        assert result.total_savings == Decimal("150")
        assert result.savings_spent == Decimal("150")
        assert result.total_expenses == Decimal("100")
        assert result.remaining == Decimal("750")

    def test_legacy_savings_expense(self, make_entry, category_map):
        """Test that an expense in the Savings category counts toward savings_spent."""
        snapshot = [
            make_entry(2000, type="income"),
            make_entry(300, category="Savings"),
        ]

        result = analyze(snapshot, category_map)

        assert result.savings_spent == Decimal("300")
        assert result.total_expenses == Decimal("300")
        assert result.total_savings == Decimal("0")
        assert result.needs_spent == 0
        assert result.wants_spent == 0

    def test_legacy_savings_disabled(self, make_entry):
        """Test that legacy savings can be switched off in the category map."""
        category_map = CategoryMap.from_lists(["Housing"], ["Other"], savings_category=None)
        snapshot = [make_entry(300, category="Savings")]

        result = analyze(snapshot, category_map)

        assert result.savings_spent == 0
        assert result.unclassified_spent == Decimal("300")

    def test_unclassified_expense_only_in_total(self, make_entry, category_map):
        """Test that an expense in no bucket still counts toward total_expenses."""
        snapshot = [
            make_entry(100, category="Housing"),
            make_entry(40, category="Pets"),
            make_entry(10, category=""),
        ]

        result = analyze(snapshot, category_map)

        assert result.total_expenses == Decimal("150")
        assert result.needs_spent == Decimal("100")
        assert result.wants_spent == 0
        assert result.unclassified_spent == Decimal("50")
        assert result.total_expenses > result.needs_spent + result.wants_spent

    def test_income_category_is_not_classified(self, make_entry, category_map):
        """Test that only expense entries are placed in Needs/Wants buckets."""
        snapshot = [make_entry(500, type="income", category="Housing")]

        result = analyze(snapshot, category_map)

        assert result.needs_spent == 0
        assert result.total_income == Decimal("500")

    def test_recurring_flag_does_not_affect_totals(self, make_entry, category_map):
        """Test that is_recurring is informational only."""
        once = [make_entry(100, category="Food", entry_id="a")]
        recurring = [make_entry(100, category="Food", entry_id="a", is_recurring=True)]

        assert analyze(once, category_map).to_dict() == analyze(
            recurring, category_map
        ).to_dict()

    def test_custom_taxonomy(self, make_entry):
        """Test analyzing against an arbitrary category taxonomy."""
        category_map = CategoryMap.from_lists(needs=["Rent"], wants=["Games"])
        snapshot = [
            make_entry(1000, type="income"),
            make_entry(400, category="Rent"),
            make_entry(60, category="Games"),
            make_entry(30, category="Housing"),
        ]

        result = analyze(snapshot, category_map)

        assert result.needs_spent == Decimal("400")
        assert result.wants_spent == Decimal("60")
        assert result.unclassified_spent == Decimal("30")

    def test_default_category_map(self, sample_snapshot):
        """Test that analyze falls back to the packaged taxonomy."""
        result = analyze(sample_snapshot)

        assert result.needs_spent == Decimal("1600")
        assert result.wants_spent == Decimal("200")

    def test_remaining_identity(self, make_entry, category_map):
        """Test remaining == income - expenses - savings with fractional amounts."""
        snapshot = [
            make_entry("1234.56", type="income"),
            make_entry("99.99", category="Food"),
            make_entry("0.01", type="savings"),
            make_entry("1500.10", category="Housing"),
        ]

        result = analyze(snapshot, category_map)

        assert result.remaining == (
            result.total_income - result.total_expenses - result.total_savings
        )
        assert result.remaining == Decimal("-365.54")

    def test_idempotent(self, sample_snapshot, category_map):
        """Test that analyzing the same snapshot twice gives identical results."""
        assert analyze(sample_snapshot, category_map) == analyze(
            sample_snapshot, category_map
        )

    def test_order_independent(self, make_entry, category_map):
        """Test that permuting the snapshot does not change the result."""
        snapshot = [
            make_entry("0.1", type="income"),
            make_entry("0.2", type="income"),
            make_entry("0.3", category="Food"),
            make_entry("1e10", type="income"),
            make_entry("17.35", category="Lifestyle"),
            make_entry("3.333", type="savings"),
            make_entry("42", category="Pets"),
        ]
        expected = analyze(snapshot, category_map)

        rng = random.Random(7)
        for _ in range(20):
            shuffled = list(snapshot)
            rng.shuffle(shuffled)
            assert analyze(shuffled, category_map) == expected

    def test_expenses_cover_needs_and_wants(self, make_entry, category_map):
        """Test total_expenses >= needs_spent + wants_spent on random ledgers."""
        rng = random.Random(11)
        categories = ["Housing", "Food", "Lifestyle", "Other", "Pets", "Savings", ""]
        types = ["income", "expense", "expense", "savings"]

        for _ in range(25):
            snapshot = [
                make_entry(
                    Decimal(rng.randint(0, 500000)) / 100,
                    type=rng.choice(types),
                    category=rng.choice(categories),
                )
                for _ in range(rng.randint(0, 15))
            ]
            result = analyze(snapshot, category_map)

            assert result.total_expenses >= result.needs_spent + result.wants_spent
            assert result.total_income >= 0
            assert result.total_expenses >= 0
            assert result.total_savings >= 0


class TestProgressPercent:
    """Tests for progress_percent."""

    def test_zero_target(self):
        assert progress_percent(Decimal("50"), Decimal("0")) == 0

    def test_partial(self):
        assert progress_percent(Decimal("1600"), Decimal("1750")) == (
            Decimal("1600") * 100 / Decimal("1750")
        )

    def test_capped_at_hundred(self):
        assert progress_percent(Decimal("900"), Decimal("300")) == Decimal("100")

    def test_analysis_properties(self, sample_snapshot, category_map):
        result = analyze(sample_snapshot, category_map)

        assert result.wants_progress == Decimal("200") * 100 / Decimal("1050")
        assert result.savings_progress == 0


class TestSummarize:
    """Tests for summarize function."""

    def test_summary_strings(self, sample_snapshot, category_map):
        lines = summarize(analyze(sample_snapshot, category_map), "USD")

        assert lines["income"] == "$3,500.00"
        assert lines["expenses"] == "$1,800.00"
        assert lines["remaining"] == "$1,700.00"
        assert lines["needs"] == "$1,600.00 / $1,750.00 (91%)"
        assert lines["wants"] == "$200.00 / $1,050.00 (19%)"
        assert lines["savings_goal"] == "$0.00 / $700.00 (0%)"

    def test_overspent_remaining_has_minus(self, make_entry, category_map):
        snapshot = [make_entry(100, type="income"), make_entry(250, category="Food")]

        lines = summarize(analyze(snapshot, category_map), "EUR")

        assert lines["remaining"] == "-EUR150.00"
