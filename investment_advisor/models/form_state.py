# Role: Investment-preference form fields. This is the "source of truth" the derived query is built from.
# validate_assignment makes update_field() reject bad risk levels at the point of the edit.

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict

RiskAppetite = Literal["low", "medium", "high"]

RISK_LEVELS: List[str] = ["low", "medium", "high"]

# Key line: required for submit, in form order (investment_amount is optional).
REQUIRED_FIELDS: List[str] = [
    "company_share",
    "share_type",
    "investment_type",
    "investment_years",
]

FIELD_LABELS: Dict[str, str] = {
    "company_share": "Company Share",
    "share_type": "Share Type",
    "investment_type": "Investment Type",
    "investment_years": "Investment Years",
    "risk_appetite": "Risk Appetite",
    "investment_amount": "Investment Amount",
}


class FormState(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    company_share: str = ""
    share_type: str = ""
    investment_type: str = ""
    investment_years: str = ""
    risk_appetite: RiskAppetite = "medium"
    investment_amount: str = ""

    def set_field(self, name: str, value: str) -> None:
        if name not in type(self).model_fields:
            raise ValueError(f"Unknown form field: {name!r}")
        setattr(self, name, value)
