from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict, Any


class LoanProductCreate(BaseModel):
    """Body of POST /add-loan."""
    title: str = Field(..., description="Display title of the loan product")
    image: Optional[str] = None
    short_desc: Optional[str] = Field(None, alias="shortDesc")
    description: Optional[str] = None
    category: Optional[str] = None
    interest_rate: Optional[float] = Field(None, alias="interestRate")
    max_limit: Optional[float] = Field(None, alias="maxLimit")
    emi_plans: Optional[List[Dict[str, Any]]] = Field(None, alias="emiPlans")
    show_on_home: bool = Field(default=False, alias="showOnHome")
    created_by: Optional[str] = Field(None, alias="createdBy")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True


class LoanProductUpdate(BaseModel):
    """Fields a manager may change through PUT /update-loan/{id}."""
    title: Optional[str] = None
    short_desc: Optional[str] = Field(None, alias="shortDesc")
    interest_rate: Optional[float] = Field(None, alias="interestRate")
    max_limit: Optional[float] = Field(None, alias="maxLimit")
    category: Optional[str] = None
    image: Optional[str] = None

    class Config:
        populate_by_name = True


class LoanProductAdminUpdate(LoanProductUpdate):
    """Full field set an admin may change through PUT /update-adminloan/{id}."""
    description: Optional[str] = None
    emi_plans: Optional[List[Dict[str, Any]]] = Field(None, alias="emiPlans")
    show_on_home: Optional[bool] = Field(None, alias="showOnHome")
