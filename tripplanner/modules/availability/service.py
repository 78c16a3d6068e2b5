from supabase import Client
from tripplanner.config import settings
from tripplanner.modules.availability.schemas import (
    AvailabilityEntry, TripAvailabilityEntry, UserAvailabilityResponse,
    TripUserAvailabilityResponse, MemberAvailabilityCell, HeatmapResponse, SyncStatus
)
from tripplanner.modules.availability.heatmap import (
    generate_date_range, effective_availability, build_heatmap, summarize_heatmap, best_dates
)
from typing import List, Optional
from fastapi import HTTPException
from datetime import date, datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise HTTPException(status_code=422, detail="end_date must be on or after start_date")
    days = (end_date - start_date).days + 1
    if days > settings.max_availability_range_days:
        raise HTTPException(
            status_code=422,
            detail=f"Date range is limited to {settings.max_availability_range_days} days"
        )


class AvailabilityService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Personal calendar

    def _central_rows(self, user_ids: List[str], start_date: date, end_date: date) -> List[dict]:
        if not user_ids:
            return []
        result = self.supabase.table("user_availability")\
            .select("*")\
            .in_("user_id", user_ids)\
            .gte("date", start_date.isoformat())\
            .lte("date", end_date.isoformat())\
            .order("date")\
            .execute()
        return result.data or []

    def get_user_central_availability(self, user_id: str, start_date: date, end_date: date) -> List[UserAvailabilityResponse]:
        validate_range(start_date, end_date)
        try:
            rows = self._central_rows([user_id], start_date, end_date)
            return [UserAvailabilityResponse(**r) for r in rows]
        except Exception as e:
            logger.error(f"Error fetching central availability: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def set_user_central_availability(self, user_id: str, entries: List[AvailabilityEntry]) -> List[UserAvailabilityResponse]:
        """Upsert personal calendar entries, one per date"""
        try:
            now = _now()
            result = self.supabase.table("user_availability").upsert(
                [
                    {
                        "user_id": user_id,
                        "date": e.date.isoformat(),
                        "availability_status": e.availability_status,
                        "notes": e.notes,
                        "updated_at": now
                    }
                    for e in entries
                ],
                on_conflict="user_id,date"
            ).execute()
            logger.info(f"User {user_id} set {len(entries)} central availability date(s)")
            return [UserAvailabilityResponse(**r) for r in (result.data or [])]
        except Exception as e:
            logger.error(f"Error setting central availability: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def clear_user_central_availability(self, user_id: str, dates: List[date]) -> int:
        try:
            result = self.supabase.table("user_availability")\
                .delete()\
                .eq("user_id", user_id)\
                .in_("date", [d.isoformat() for d in dates])\
                .execute()
            return len(result.data or [])
        except Exception as e:
            logger.error(f"Error clearing central availability: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    # Trip calendar

    def _trip_rows(self, trip_id: str, start_date: date, end_date: date, user_id: Optional[str] = None) -> List[dict]:
        query = self.supabase.table("trip_user_availability")\
            .select("*")\
            .eq("trip_id", trip_id)
        if user_id:
            query = query.eq("user_id", user_id)
        result = query\
            .gte("date", start_date.isoformat())\
            .lte("date", end_date.isoformat())\
            .order("date")\
            .execute()
        return result.data or []

    def get_trip_user_availability(
        self, trip_id: str, user_id: str, start_date: date, end_date: date
    ) -> List[TripUserAvailabilityResponse]:
        validate_range(start_date, end_date)
        try:
            rows = self._trip_rows(trip_id, start_date, end_date, user_id)
            return [TripUserAvailabilityResponse(**r) for r in rows]
        except Exception as e:
            logger.error(f"Error fetching trip availability: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def set_trip_user_availability(
        self, trip_id: str, user_id: str, entries: List[TripAvailabilityEntry]
    ) -> List[TripUserAvailabilityResponse]:
        """Upsert trip-specific entries; these override the personal calendar for this trip"""
        try:
            now = _now()
            result = self.supabase.table("trip_user_availability").upsert(
                [
                    {
                        "trip_id": trip_id,
                        "user_id": user_id,
                        "date": e.date.isoformat(),
                        "availability_status": e.availability_status,
                        "override_reason": e.override_reason,
                        "synced_from_central": e.synced_from_central,
                        "updated_at": now
                    }
                    for e in entries
                ],
                on_conflict="trip_id,user_id,date"
            ).execute()
            return [TripUserAvailabilityResponse(**r) for r in (result.data or [])]
        except Exception as e:
            logger.error(f"Error setting trip availability: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def clear_trip_user_availability(self, trip_id: str, user_id: str, dates: List[date]) -> int:
        try:
            result = self.supabase.table("trip_user_availability")\
                .delete()\
                .eq("trip_id", trip_id)\
                .eq("user_id", user_id)\
                .in_("date", [d.isoformat() for d in dates])\
                .execute()
            return len(result.data or [])
        except Exception as e:
            logger.error(f"Error clearing trip availability: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    # Sync

    def sync_central_to_trip(self, user_id: str, trip_id: str, start_date: date, end_date: date) -> int:
        """Copy personal calendar entries into the trip calendar.

        Dates the user set manually for this trip (rows not marked
        synced_from_central) are left alone. Returns the number of dates copied.
        """
        validate_range(start_date, end_date)
        try:
            central = self._central_rows([user_id], start_date, end_date)
            manual_dates = {
                str(r["date"])[:10]
                for r in self._trip_rows(trip_id, start_date, end_date, user_id)
                if not r.get("synced_from_central")
            }
            now = _now()
            rows = [
                {
                    "trip_id": trip_id,
                    "user_id": user_id,
                    "date": str(r["date"])[:10],
                    "availability_status": r["availability_status"],
                    "synced_from_central": True,
                    "last_sync_date": now,
                    "updated_at": now
                }
                for r in central
                if str(r["date"])[:10] not in manual_dates
            ]
            if not rows:
                return 0
            self.supabase.table("trip_user_availability")\
                .upsert(rows, on_conflict="trip_id,user_id,date")\
                .execute()
            logger.info(f"Synced {len(rows)} date(s) for user {user_id} into trip {trip_id}")
            return len(rows)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error syncing availability: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def check_sync_status(self, user_id: str, trip_id: str, start_date: date, end_date: date) -> SyncStatus:
        """Whether the trip calendar is behind the personal calendar in the range"""
        validate_range(start_date, end_date)
        try:
            central = self._central_rows([user_id], start_date, end_date)
            trip_rows = self._trip_rows(trip_id, start_date, end_date, user_id)
        except Exception as e:
            logger.error(f"Error checking sync status: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        by_date = {str(r["date"])[:10]: r for r in trip_rows}
        needs_sync = False
        for row in central:
            trip_row = by_date.get(str(row["date"])[:10])
            if trip_row is None:
                needs_sync = True
                break
            if trip_row.get("synced_from_central") and trip_row["availability_status"] != row["availability_status"]:
                needs_sync = True
                break

        sync_dates = [r["last_sync_date"] for r in trip_rows if r.get("synced_from_central") and r.get("last_sync_date")]
        return SyncStatus(
            needs_sync=needs_sync,
            central_count=len(central),
            trip_count=len(trip_rows),
            last_sync=max(sync_dates) if sync_dates else None
        )

    # Trip-wide views

    def get_trip_members_availability(
        self, trip_id: str, member_ids: List[str], start_date: date, end_date: date
    ) -> List[MemberAvailabilityCell]:
        """Effective status of every member on every date of the range"""
        validate_range(start_date, end_date)
        try:
            central = self._central_rows(member_ids, start_date, end_date)
            trip_rows = self._trip_rows(trip_id, start_date, end_date)
        except Exception as e:
            logger.error(f"Error fetching members availability: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        dates = generate_date_range(start_date, end_date)
        grid = effective_availability(member_ids, dates, central, trip_rows)
        return [MemberAvailabilityCell(**cell) for cell in grid]

    def get_trip_availability_heatmap(
        self, trip_id: str, member_ids: List[str], start_date: date, end_date: date
    ) -> HeatmapResponse:
        cells = self.get_trip_members_availability(trip_id, member_ids, start_date, end_date)
        grid = [{"date": c.date.isoformat(), "status": c.status} for c in cells]
        days = build_heatmap(grid, generate_date_range(start_date, end_date), len(member_ids))
        return HeatmapResponse(
            days=days,
            summary=summarize_heatmap(days),
            best_dates=best_dates(days)
        )
