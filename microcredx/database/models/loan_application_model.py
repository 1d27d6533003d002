from beanie import Document
from pydantic import Field
from pymongo import IndexModel, ASCENDING
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ApplicationStatusEnum(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class ApplicationFeeStatusEnum(str, Enum):
    unpaid = "unpaid"
    paid = "paid"


# Form fields a borrower may (re)submit; status and fee status are not among them
APPLICATION_FORM_FIELDS = (
    "loan_title",
    "interest_rate",
    "first_name",
    "last_name",
    "contact_number",
    "national_id",
    "income_source",
    "monthly_income",
    "loan_amount",
    "reason",
    "address",
    "extra_notes",
)


class LoanApplication(Document):
    email: str = Field(..., description="Email of the applicant")
    loan_title: Optional[str] = Field(None, alias="loanTitle", description="Title of the catalog product applied for")
    interest_rate: Optional[float] = Field(None, alias="interestRate")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    contact_number: Optional[str] = Field(None, alias="contactNumber")
    national_id: Optional[str] = Field(None, alias="nationalId")
    income_source: Optional[str] = Field(None, alias="incomeSource")
    monthly_income: Optional[float] = Field(None, alias="monthlyIncome")
    loan_amount: Optional[float] = Field(None, alias="loanAmount")
    reason: Optional[str] = Field(None, description="Purpose of the loan")
    address: Optional[str] = Field(None)
    extra_notes: Optional[str] = Field(None, alias="extraNotes")
    status: ApplicationStatusEnum = Field(default=ApplicationStatusEnum.pending, description="Review status")
    application_fee_status: ApplicationFeeStatusEnum = Field(
        default=ApplicationFeeStatusEnum.unpaid, alias="applicationFeeStatus"
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Settings:
        name = "loan-application"
        indexes = [
            # At most one non-terminal application per email
            IndexModel(
                [("email", ASCENDING)],
                name="one_pending_application_per_email",
                unique=True,
                partialFilterExpression={"status": ApplicationStatusEnum.pending.value},
            ),
        ]

    class Config:
        populate_by_name = True
        json_encoders = {datetime: lambda v: v.isoformat()}
