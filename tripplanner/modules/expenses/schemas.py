from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal
from datetime import datetime

SplitMethod = Literal["equal", "by_amount", "by_percentage"]


class ExpenseSplit(BaseModel):
    user_id: str
    amount: Optional[float] = Field(default=None, ge=0)
    percentage: Optional[float] = Field(default=None, ge=0, le=100)


class ExpenseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    total_amount: float = Field(gt=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    category: Optional[str] = None
    paid_by: str
    split_method: SplitMethod = "equal"
    expense_date: Optional[datetime] = None
    participant_ids: Optional[List[str]] = None  # equal split
    splits: Optional[List[ExpenseSplit]] = None  # by_amount / by_percentage

    @model_validator(mode="after")
    def require_participants(self):
        if self.split_method == "equal":
            if not self.participant_ids and not self.splits:
                raise ValueError("Please select at least one participant")
        else:
            if not self.splits:
                raise ValueError("Please provide the split for each participant")
            field = "amount" if self.split_method == "by_amount" else "percentage"
            if any(getattr(s, field) is None for s in self.splits):
                raise ValueError(f"Every split needs a {field} for split_method={self.split_method}")
        return self


class ExpenseUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    total_amount: Optional[float] = Field(default=None, gt=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    category: Optional[str] = None
    expense_date: Optional[datetime] = None


class ExpenseParticipantResponse(BaseModel):
    id: str
    expense_id: str
    user_id: str
    amount_owed: float
    is_settled: bool = False
    settled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExpensePaymentResponse(BaseModel):
    id: str
    expense_id: str
    from_user: str
    to_user: str
    amount: float
    payment_method: Optional[str] = None
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    id: str
    trip_id: str
    name: str
    description: Optional[str] = None
    total_amount: float
    currency: str = "USD"
    category: Optional[str] = None
    paid_by: str
    split_method: str = "equal"
    receipt_url: Optional[str] = None
    expense_date: datetime
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    participants: List[ExpenseParticipantResponse] = []
    payments: List[ExpensePaymentResponse] = []

    class Config:
        from_attributes = True


class ParticipantUpdate(BaseModel):
    amount_owed: Optional[float] = Field(default=None, ge=0)
    is_settled: Optional[bool] = None


class ParticipantAdd(BaseModel):
    user_id: str
    amount: Optional[float] = Field(default=None, ge=0)  # defaults to an equal share including the new member


class PaymentCreate(BaseModel):
    from_user: str
    to_user: str
    amount: float = Field(gt=0)
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_distinct_users(self):
        if self.from_user == self.to_user:
            raise ValueError("from_user and to_user must differ")
        return self


class Counterparty(BaseModel):
    user_id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    amount: float


class BalanceResponse(BaseModel):
    user_id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    total_paid: float
    total_owed: float
    balance: float  # positive: owed money, negative: owes money
    owes_to: List[Counterparty] = []
    owed_by: List[Counterparty] = []
