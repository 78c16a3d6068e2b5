"""
Core dependencies for route protection and trip membership checks
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from tripplanner.database.supabase_client import get_supabase
from tripplanner.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

TRIP_ROLES = ("owner", "co-owner", "member")
TRIP_ADMIN_ROLES = ("owner", "co-owner")

# child table -> (foreign key column, parent table) for resources that only reach a trip through a parent
_PARENT_OF = {
    "expense_participants": ("expense_id", "expenses"),
    "expense_payments": ("expense_id", "expenses"),
    "recipe_ingredients": ("recipe_id", "recipes"),
    "shopping_list_items": ("list_id", "shopping_lists"),
}

_LABELS = {
    "expenses": "Expense",
    "expense_participants": "Expense participant",
    "expense_payments": "Payment",
    "recipes": "Recipe",
    "recipe_ingredients": "Ingredient",
    "meal_plans": "Meal plan",
    "shopping_lists": "Shopping list",
    "shopping_list_items": "Shopping list item",
    "date_proposals": "Date proposal",
    "destination_proposals": "Destination proposal",
    "proposal_discussions": "Comment",
}


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache of trip_id -> role lookups."""
    if not hasattr(request.state, "membership_cache"):
        request.state.membership_cache = {}
    return request.state.membership_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def get_trip_role(trip_id: str, user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Return the user's role in the trip, or None when they are not a member."""
    if cache is not None and trip_id in cache:
        return cache[trip_id]
    try:
        result = supabase.table("trip_members")\
            .select("role")\
            .eq("trip_id", trip_id)\
            .eq("user_id", user_id)\
            .execute()
    except Exception as e:
        logger.error(f"Error checking trip membership: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    role = result.data[0]["role"] if result.data else None
    if cache is not None:
        cache[trip_id] = role
    return role


def check_trip_member(
    trip_id: str,
    user_data: dict,
    supabase: Client,
    cache: Optional[Dict[str, Any]] = None
) -> str:
    """Require membership of the trip. Returns the member's role."""
    role = get_trip_role(trip_id, user_data["id"], supabase, cache)
    if role is None:
        logger.warning(f"User {user_data['id']} is not a member of trip {trip_id} or trip does not exist")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Access denied or trip not found."
        )
    return role


def check_trip_admin(
    trip_id: str,
    user_data: dict,
    supabase: Client,
    cache: Optional[Dict[str, Any]] = None
) -> str:
    """Require an owner or co-owner of the trip."""
    role = check_trip_member(trip_id, user_data, supabase, cache)
    if role not in TRIP_ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only trip owners or co-owners can perform this action"
        )
    return role


def resolve_trip_id(table: str, record_id: str, supabase: Client) -> str:
    """Walk from a trip-owned record (directly or through its parent) to its trip_id."""
    label = _LABELS.get(table, "Record")
    try:
        if table in _PARENT_OF:
            fk, parent_table = _PARENT_OF[table]
            result = supabase.table(table).select(fk).eq("id", record_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail=f"{label} not found")
            return resolve_trip_id(parent_table, result.data[0][fk], supabase)
        result = supabase.table(table).select("trip_id").eq("id", record_id).execute()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error resolving trip for {table} {record_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    if not result.data:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return result.data[0]["trip_id"]


def check_record_access(
    table: str,
    record_id: str,
    user_data: dict,
    supabase: Client,
    cache: Optional[Dict[str, Any]] = None
) -> str:
    """Require membership of the trip that owns the record. Returns the trip_id."""
    trip_id = resolve_trip_id(table, record_id, supabase)
    check_trip_member(trip_id, user_data, supabase, cache)
    return trip_id


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns the request-scoped membership cache."""
    return _get_request_cache(request)
