from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional, Literal
from datetime import date, datetime

TripRole = Literal["owner", "co-owner", "member"]


class TripCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_date_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TripUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_date_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TripResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TripMemberResponse(BaseModel):
    trip_id: str
    user_id: str
    role: str
    joined_at: Optional[datetime] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class MemberInvite(BaseModel):
    email: EmailStr


class MemberRoleUpdate(BaseModel):
    role: TripRole


class InvitationCreate(BaseModel):
    email: Optional[EmailStr] = None


class InvitationResponse(BaseModel):
    invitation_id: str
    token: str
    expires_at: datetime
    join_url: str


class InvitationAccept(BaseModel):
    token: str = Field(min_length=1)


class InvitationAcceptResponse(BaseModel):
    trip_id: str
    message: str
