"""Tests for expense split, balance and currency helpers."""

import pytest

from tripplanner.modules.expenses.calculations import (
    SplitError,
    build_splits,
    calculate_balances,
    calculate_equal_split,
    format_currency,
    round_cents,
)


class TestSplits:
    """Tests for building participant shares."""

    def test_equal_split_rounds_to_cents(self):
        assert calculate_equal_split(100, 3) == 33.33
        assert calculate_equal_split(10, 4) == 2.5

    def test_equal_split_rounds_half_up(self):
        assert round_cents(0.125) == 0.13
        assert calculate_equal_split(0.05, 2) == 0.03

    def test_equal_split_needs_participants(self):
        with pytest.raises(SplitError):
            calculate_equal_split(50, 0)

    def test_equal_split_deduplicates_participants(self):
        splits = build_splits("equal", 90, participant_ids=["a", "b", "a", "c"])
        assert splits == [("a", 30.0), ("b", 30.0), ("c", 30.0)]

    def test_by_amount_accepts_a_cent_of_tolerance(self):
        splits = build_splits("by_amount", 100, amounts={"a": 33.33, "b": 33.33, "c": 33.33})
        assert [amount for _, amount in splits] == [33.33, 33.33, 33.33]

    def test_by_amount_rejects_mismatched_total(self):
        with pytest.raises(SplitError) as exc:
            build_splits("by_amount", 100, amounts={"a": 40, "b": 40})
        assert str(exc.value) == "Split amounts ($80.00) don't match total amount ($100.00)"

    def test_by_percentage_converts_to_amounts(self):
        splits = build_splits("by_percentage", 200, percentages={"a": 25, "b": 75})
        assert splits == [("a", 50.0), ("b", 150.0)]

    def test_by_percentage_must_add_up_to_100(self):
        with pytest.raises(SplitError) as exc:
            build_splits("by_percentage", 200, percentages={"a": 50, "b": 40})
        assert "90%" in str(exc.value)

    def test_unknown_method(self):
        with pytest.raises(SplitError):
            build_splits("by_vibes", 10, participant_ids=["a"])


class TestBalances:
    """Tests for trip balances."""

    def _expense(self, paid_by, total, shares, settled=()):
        return {
            "paid_by": paid_by,
            "total_amount": total,
            "participants": [
                {"user_id": uid, "amount_owed": amount, "is_settled": uid in settled}
                for uid, amount in shares.items()
            ],
        }

    def test_payer_is_owed_by_other_participants(self):
        balances = {
            b["user_id"]: b
            for b in calculate_balances([self._expense("a", 90, {"a": 30, "b": 30, "c": 30})])
        }
        assert balances["a"]["balance"] == 60.0
        assert balances["b"]["balance"] == -30.0
        assert balances["c"]["balance"] == -30.0
        assert [o["user_id"] for o in balances["a"]["owed_by"]] == ["b", "c"]
        assert balances["b"]["owes_to"] == [
            {"user_id": "a", "username": None, "full_name": None, "amount": 30.0}
        ]

    def test_balances_sum_to_zero(self):
        expenses = [
            self._expense("a", 90, {"a": 30, "b": 30, "c": 30}),
            self._expense("b", 40, {"a": 20, "b": 20}),
        ]
        assert round(sum(b["balance"] for b in calculate_balances(expenses)), 2) == 0

    def test_settled_shares_are_ignored(self):
        balances = {
            b["user_id"]: b
            for b in calculate_balances([self._expense("a", 60, {"a": 30, "b": 30}, settled={"b"})])
        }
        assert balances["b"]["total_owed"] == 0
        assert balances["b"]["owes_to"] == []
        assert balances["a"]["owed_by"] == []

    def test_mutual_debts_are_netted(self):
        expenses = [
            self._expense("a", 50, {"a": 25, "b": 25}),
            self._expense("b", 20, {"a": 10, "b": 10}),
        ]
        balances = {b["user_id"]: b for b in calculate_balances(expenses)}
        assert balances["b"]["owes_to"][0]["amount"] == 15.0
        assert balances["a"]["owes_to"] == []

    def test_profiles_are_attached(self):
        balances = calculate_balances(
            [self._expense("a", 10, {"a": 5, "b": 5})],
            {"a": {"username": "alice", "full_name": "Alice"}},
        )
        assert balances[0]["username"] == "alice"
        assert balances[0]["owed_by"][0]["username"] is None


class TestCurrency:
    """Tests for currency display."""

    def test_known_symbol(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(12, "eur") == "€12.00"

    def test_negative_amount(self):
        assert format_currency(-5) == "-$5.00"

    def test_zero_decimal_currency(self):
        assert format_currency(1234.6, "JPY") == "¥1,235"

    def test_unmapped_code_is_used_as_prefix(self):
        assert format_currency(10, "CHF") == "CHF 10.00"
