"""Split, balance and currency helpers for trip expenses.

Pure functions over rows already fetched from Supabase; no I/O happens here.
Amounts are rounded half-up to cents, matching how the amounts are shown to
users. Residual cents from an equal split are not redistributed.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

SPLIT_TOLERANCE = 0.01

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}
ZERO_DECIMAL_CURRENCIES = {"JPY", "KRW"}


class SplitError(ValueError):
    pass


def round_cents(amount: float) -> float:
    return float(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _exceeds_tolerance(actual: float, expected: float) -> bool:
    diff = abs(Decimal(str(actual)) - Decimal(str(expected)))
    return diff > Decimal(str(SPLIT_TOLERANCE))


def calculate_equal_split(total_amount: float, participant_count: int) -> float:
    """Per-participant share of an equal split, rounded to cents."""
    if participant_count <= 0:
        raise SplitError("At least one participant is required")
    return round_cents(total_amount / participant_count)


def build_splits(
    split_method: str,
    total_amount: float,
    participant_ids: Optional[List[str]] = None,
    amounts: Optional[Dict[str, float]] = None,
    percentages: Optional[Dict[str, float]] = None,
) -> List[Tuple[str, float]]:
    """Return (user_id, amount_owed) pairs for an expense.

    equal: every participant owes the equal share.
    by_amount: explicit amounts that must add up to the total within a cent.
    by_percentage: percentages that must add up to 100.
    """
    if split_method == "equal":
        ids = list(dict.fromkeys(participant_ids or []))
        share = calculate_equal_split(total_amount, len(ids))
        return [(user_id, share) for user_id in ids]

    if split_method == "by_amount":
        if not amounts:
            raise SplitError("At least one participant is required")
        if any(a < 0 for a in amounts.values()):
            raise SplitError("Split amounts cannot be negative")
        total_split = round_cents(sum(amounts.values()))
        if _exceeds_tolerance(total_split, total_amount):
            raise SplitError(
                f"Split amounts ({format_currency(total_split)}) don't match total amount ({format_currency(total_amount)})"
            )
        return [(user_id, round_cents(a)) for user_id, a in amounts.items()]

    if split_method == "by_percentage":
        if not percentages:
            raise SplitError("At least one participant is required")
        if any(p < 0 for p in percentages.values()):
            raise SplitError("Split percentages cannot be negative")
        total_pct = round_cents(sum(percentages.values()))
        if _exceeds_tolerance(total_pct, 100):
            raise SplitError(f"Split percentages add up to {total_pct:g}%, expected 100%")
        return [(user_id, round_cents(total_amount * p / 100)) for user_id, p in percentages.items()]

    raise SplitError(f"Unknown split method: {split_method}")


def calculate_balances(expenses: Iterable[dict], profiles: Optional[Dict[str, dict]] = None) -> List[dict]:
    """Net balance per user across a trip's expenses.

    balance = total paid - unsettled amount owed. Positive means the user is
    owed money, negative means they owe. owes_to / owed_by hold the unsettled
    debts from participants to payers, netted per pair of users.
    """
    profiles = profiles or {}
    totals: Dict[str, Dict[str, float]] = {}
    debts: Dict[Tuple[str, str], float] = {}

    def _touch(user_id: str) -> Dict[str, float]:
        if user_id not in totals:
            totals[user_id] = {"paid": 0.0, "owed": 0.0}
        return totals[user_id]

    for expense in expenses:
        payer = expense["paid_by"]
        _touch(payer)["paid"] += float(expense["total_amount"])
        for participant in expense.get("participants") or []:
            user_id = participant["user_id"]
            entry = _touch(user_id)
            if participant.get("is_settled"):
                continue
            amount = float(participant["amount_owed"])
            entry["owed"] += amount
            if user_id != payer:
                debts[(user_id, payer)] = debts.get((user_id, payer), 0.0) + amount

    net_debts: Dict[Tuple[str, str], float] = {}
    for (debtor, creditor), amount in debts.items():
        if (creditor, debtor) in net_debts:
            continue
        diff = amount - debts.get((creditor, debtor), 0.0)
        if diff > 0:
            net_debts[(debtor, creditor)] = diff
        elif diff < 0:
            net_debts[(creditor, debtor)] = -diff

    def _person(user_id: str, amount: float) -> dict:
        profile = profiles.get(user_id, {})
        return {
            "user_id": user_id,
            "username": profile.get("username"),
            "full_name": profile.get("full_name"),
            "amount": round_cents(amount),
        }

    balances = []
    for user_id, entry in totals.items():
        profile = profiles.get(user_id, {})
        balances.append({
            "user_id": user_id,
            "username": profile.get("username"),
            "full_name": profile.get("full_name"),
            "total_paid": round_cents(entry["paid"]),
            "total_owed": round_cents(entry["owed"]),
            "balance": round_cents(entry["paid"] - entry["owed"]),
            "owes_to": [_person(c, a) for (d, c), a in net_debts.items() if d == user_id and round_cents(a) > 0],
            "owed_by": [_person(d, a) for (d, c), a in net_debts.items() if c == user_id and round_cents(a) > 0],
        })
    return balances


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format an amount for display, e.g. 1234.5 -> "$1,234.50"."""
    code = (currency or "USD").upper()
    digits = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    sign = "-" if amount < 0 else ""
    number = f"{abs(amount):,.{digits}f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{number}"
    return f"{sign}{code} {number}"
