"""Date range helpers and availability aggregation for trips."""
import calendar
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple, Union

DEFAULT_STATUS = "available"

DateLike = Union[date, str]


def _as_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def generate_date_range(start_date: DateLike, end_date: DateLike) -> List[str]:
    """ISO dates from start to end inclusive; empty when end is before start."""
    current = _as_date(start_date)
    end = _as_date(end_date)
    dates = []
    while current <= end:
        dates.append(current.isoformat())
        current += timedelta(days=1)
    return dates


def next_n_days(days: int, today: Optional[date] = None) -> Tuple[str, str]:
    start = today or date.today()
    return start.isoformat(), (start + timedelta(days=days)).isoformat()


def month_date_range(year: int, month: int) -> Tuple[str, str]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def effective_availability(
    member_ids: Iterable[str],
    dates: Iterable[str],
    central_rows: Iterable[dict],
    trip_rows: Iterable[dict],
) -> List[dict]:
    """Resolve every member x date cell: trip override, then personal calendar, then available."""
    central: Dict[Tuple[str, str], dict] = {
        (r["user_id"], str(r["date"])[:10]): r for r in central_rows
    }
    trip: Dict[Tuple[str, str], dict] = {
        (r["user_id"], str(r["date"])[:10]): r for r in trip_rows
    }
    dates = list(dates)
    grid = []
    for user_id in member_ids:
        for day in dates:
            trip_row = trip.get((user_id, day))
            central_row = central.get((user_id, day))
            if trip_row:
                grid.append({
                    "user_id": user_id,
                    "date": day,
                    "status": trip_row["availability_status"],
                    "is_override": True,
                    "override_reason": trip_row.get("override_reason"),
                    "notes": None,
                })
            elif central_row:
                grid.append({
                    "user_id": user_id,
                    "date": day,
                    "status": central_row["availability_status"],
                    "is_override": False,
                    "override_reason": None,
                    "notes": central_row.get("notes"),
                })
            else:
                grid.append({
                    "user_id": user_id,
                    "date": day,
                    "status": DEFAULT_STATUS,
                    "is_override": False,
                    "override_reason": None,
                    "notes": None,
                })
    return grid


def availability_percentage(available_count: int, total_members: int) -> int:
    if total_members <= 0:
        return 0
    ratio = Decimal(available_count * 100) / Decimal(total_members)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_heatmap(grid: Iterable[dict], dates: Iterable[str], total_members: int) -> List[dict]:
    """Per-date counts of available / maybe / unavailable members."""
    counts: Dict[str, Dict[str, int]] = {
        day: {"available": 0, "maybe": 0, "unavailable": 0} for day in dates
    }
    for cell in grid:
        day_counts = counts.get(cell["date"])
        if day_counts is not None and cell["status"] in day_counts:
            day_counts[cell["status"]] += 1
    return [
        {
            "date": day,
            "total_members": total_members,
            "available_count": c["available"],
            "maybe_count": c["maybe"],
            "unavailable_count": c["unavailable"],
            "availability_percentage": availability_percentage(c["available"], total_members),
        }
        for day, c in counts.items()
    ]


def summarize_heatmap(heatmap: List[dict]) -> dict:
    """Bucket days by how many members are available."""
    if not heatmap:
        return {
            "total_days": 0,
            "perfect_days": 0,
            "good_days": 0,
            "okay_days": 0,
            "poor_days": 0,
            "avg_availability": 0.0,
            "total_members": 0,
        }
    pcts = [d["availability_percentage"] for d in heatmap]
    return {
        "total_days": len(heatmap),
        "perfect_days": sum(1 for p in pcts if p == 100),
        "good_days": sum(1 for p in pcts if 80 <= p < 100),
        "okay_days": sum(1 for p in pcts if 60 <= p < 80),
        "poor_days": sum(1 for p in pcts if p < 60),
        "avg_availability": round(sum(pcts) / len(pcts), 1),
        "total_members": heatmap[0]["total_members"],
    }


def best_dates(heatmap: List[dict], limit: int = 5) -> List[dict]:
    """Days with the highest availability, earliest first among ties."""
    ranked = sorted(heatmap, key=lambda d: (-d["availability_percentage"], -d["maybe_count"], d["date"]))
    return ranked[:limit]
