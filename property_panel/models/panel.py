"""Pydantic schemas for the property panel response."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .property import Comparable, Demographics, GeocodeResult, SubjectProperty

MAX_SALE_COMP_LIMIT = 20
MAX_RENTAL_COMP_LIMIT = 25


class PanelOptions(BaseModel):
    cap_rate_percent: float = 8.0
    vacancy_percent: float = 5.0
    expense_percent: float = 35.0
    down_payment_percent: float = 20.0
    interest_rate_percent: float = 7.5
    loan_years: int = 30
    sale_comp_limit: int = 10
    purchase_price_override: Optional[float] = None

    @field_validator("sale_comp_limit", mode="before")
    @classmethod
    def clamp_sale_comp_limit(cls, value: Any) -> Any:
        if value is None:
            return 10
        try:
            return max(1, min(int(value), MAX_SALE_COMP_LIMIT))
        except (TypeError, ValueError):
            return value


class ValuationResult(BaseModel):
    method: Literal["comps-ppsf", "rent-cap", "insufficient"]
    estimated_value: Optional[float] = None
    avg_price_per_square_foot: Optional[float] = None
    comps_used: int = 0
    confidence: Literal["medium", "low", "none"] = "none"


class ArvResult(BaseModel):
    ok: bool
    reason: Optional[str] = None
    arv: Optional[float] = None
    avg_price_per_square_foot: Optional[float] = None
    comps_used: int = 0
    confidence: Literal["medium", "low", "none"] = "none"


class InvestmentAssumptions(BaseModel):
    purchase_price: Optional[float] = None
    monthly_rent: Optional[float] = None
    vacancy_percent: float
    expense_percent: float
    down_payment_percent: float
    interest_rate_percent: float
    loan_years: int


class GrossIncome(BaseModel):
    gross_annual: float
    vacancy_loss: float
    effective_gross: float
    operating_expenses: float


class InvestmentMetrics(BaseModel):
    grm: Optional[float] = None
    cap_rate: Optional[float] = None
    cash_on_cash: Optional[float] = None


class DebtSummary(BaseModel):
    loan_amount: float
    monthly_payment: float
    annual_debt_service: float
    cash_invested: float


class CashFlow(BaseModel):
    monthly: float
    annual: float


class InvestmentSummary(BaseModel):
    ok: bool
    reason: Optional[str] = None
    assumptions: InvestmentAssumptions
    gross_income: Optional[GrossIncome] = None
    noi: Optional[float] = None
    metrics: Optional[InvestmentMetrics] = None
    debt: Optional[DebtSummary] = None
    cash_flow: Optional[CashFlow] = None


class SaleCompsResult(BaseModel):
    tier: Literal["premium", "fallback", "none"] = "none"
    count: int = 0
    comps: List[Comparable] = Field(default_factory=list)


class RentalCompsResult(BaseModel):
    provider: str
    count: int = 0
    comps: List[Comparable] = Field(default_factory=list)
    rent_estimate: Optional[float] = None
    warning: Optional[str] = None


class PropertyPanel(BaseModel):
    inputs: Dict[str, Any]
    geocoding: Optional[GeocodeResult] = None
    demographics: Optional[Demographics] = None
    primary_provider_data: Optional[Dict[str, Any]] = None
    secondary_provider_data: Optional[Dict[str, Any]] = None
    sale_comps: Optional[SaleCompsResult] = None
    subject: Optional[SubjectProperty] = None
    arv: Optional[ArvResult] = None
    avm: Optional[ValuationResult] = None
    investment: Optional[InvestmentSummary] = None
    warnings: List[str] = Field(default_factory=list)
    generated_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


__all__ = [
    "PanelOptions",
    "ValuationResult",
    "ArvResult",
    "InvestmentAssumptions",
    "InvestmentSummary",
    "SaleCompsResult",
    "RentalCompsResult",
    "PropertyPanel",
]
