from pydantic import BaseModel, Field
from typing import Optional


class LoanApplicationSubmit(BaseModel):
    """Body of POST /save-loan."""
    email: str = Field(..., min_length=1, description="Email of the applicant")
    loan_title: Optional[str] = Field(None, alias="loanTitle")
    interest_rate: Optional[float] = Field(None, alias="interestRate")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    contact_number: Optional[str] = Field(None, alias="contactNumber")
    national_id: Optional[str] = Field(None, alias="nationalId")
    income_source: Optional[str] = Field(None, alias="incomeSource")
    monthly_income: Optional[float] = Field(None, alias="monthlyIncome")
    loan_amount: Optional[float] = Field(None, alias="loanAmount")
    reason: Optional[str] = None
    address: Optional[str] = None
    extra_notes: Optional[str] = Field(None, alias="extraNotes")

    class Config:
        populate_by_name = True


class StatusUpdate(BaseModel):
    status: str = Field(..., description="Pending, Approved or Rejected")
