from beanie import Document
from pydantic import Field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any


class LoanProduct(Document):
    title: Optional[str] = Field(None, description="Display title of the loan product")
    image: Optional[str] = Field(None, description="URL of the product image")
    short_desc: Optional[str] = Field(None, alias="shortDesc", description="One-line summary shown on cards")
    description: Optional[str] = Field(None, description="Full product description")
    category: Optional[str] = Field(None, description="Product category")
    interest_rate: Optional[float] = Field(None, alias="interestRate", description="Interest rate in percent")
    max_limit: Optional[float] = Field(None, alias="maxLimit", description="Maximum loanable amount")
    emi_plans: Optional[List[Dict[str, Any]]] = Field(None, alias="emiPlans", description="Available EMI plans")
    show_on_home: bool = Field(default=False, alias="showOnHome", description="Whether the product is featured on the home page")
    created_by: Optional[str] = Field(None, alias="createdBy", description="Email of the manager/admin who created the product")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createdAt")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="updatedAt")

    class Settings:
        name = "allloan"

    class Config:
        populate_by_name = True
        json_encoders = {datetime: lambda v: v.isoformat()}
