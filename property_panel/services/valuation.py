"""Deterministic valuation metrics: AVM, ARV and the investment summary.

All functions are pure. Missing inputs produce an "insufficient" result
rather than an exception so callers can tell "no data" from a computed zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..models.panel import (
    ArvResult,
    CashFlow,
    DebtSummary,
    GrossIncome,
    InvestmentAssumptions,
    InvestmentMetrics,
    InvestmentSummary,
    ValuationResult,
)
from ..models.property import Comparable
from ..utils.coerce import round2

MEDIUM_CONFIDENCE_MIN_COMPS = 5


@dataclass(frozen=True)
class FinancingTerms:
    vacancy_percent: float = 5.0
    expense_percent: float = 35.0
    down_payment_percent: float = 20.0
    interest_rate_percent: float = 7.5
    loan_years: int = 30


def _money(value: float) -> float:
    # half-units round up, matching Math.round
    return float(math.floor(value + 0.5))


def _positive(value: Optional[float]) -> bool:
    return value is not None and value > 0


def _comps_ppsf(comps: Sequence[Comparable], subject_sqft: Optional[float]) -> Optional[Tuple[float, int]]:
    """Mean price per square foot across usable comps, or None."""

    if not _positive(subject_sqft):
        return None
    usable: List[Comparable] = [comp for comp in comps if comp.is_priced()]
    if not usable:
        return None
    ratios = np.array([comp.price / comp.square_feet for comp in usable], dtype=float)
    return float(ratios.mean()), len(usable)


def _confidence(comps_used: int) -> str:
    return "medium" if comps_used >= MEDIUM_CONFIDENCE_MIN_COMPS else "low"


def estimate_avm(
    comps: Sequence[Comparable],
    subject_sqft: Optional[float],
    monthly_rent: Optional[float],
    cap_rate_percent: Optional[float],
) -> ValuationResult:
    """Comps price-per-square-foot when possible, otherwise rent capitalised at the cap rate."""

    ppsf = _comps_ppsf(comps, subject_sqft)
    if ppsf is not None:
        avg_ppsf, used = ppsf
        return ValuationResult(
            method="comps-ppsf",
            estimated_value=_money(avg_ppsf * subject_sqft),
            avg_price_per_square_foot=round2(avg_ppsf),
            comps_used=used,
            confidence=_confidence(used),
        )

    if _positive(monthly_rent) and _positive(cap_rate_percent):
        return ValuationResult(
            method="rent-cap",
            estimated_value=_money(monthly_rent * 12 / (cap_rate_percent / 100)),
            comps_used=0,
            confidence="low",
        )

    return ValuationResult(method="insufficient", estimated_value=None, comps_used=0, confidence="none")


def estimate_arv(comps: Sequence[Comparable], subject_sqft: Optional[float]) -> ArvResult:
    """After-repair value from sale comps only; there is no income fallback."""

    if not _positive(subject_sqft):
        return ArvResult(ok=False, reason="Subject square footage unavailable.")
    ppsf = _comps_ppsf(comps, subject_sqft)
    if ppsf is None:
        return ArvResult(ok=False, reason="No sale comps with price and square footage.")
    avg_ppsf, used = ppsf
    return ArvResult(
        ok=True,
        arv=_money(avg_ppsf * subject_sqft),
        avg_price_per_square_foot=round2(avg_ppsf),
        comps_used=used,
        confidence=_confidence(used),
    )


def monthly_debt_service(loan_amount: float, annual_rate_percent: float, years: int) -> float:
    """Standard amortising payment, straight-line at a zero rate, zero without a loan."""

    periods = int(years) * 12
    if loan_amount <= 0 or periods <= 0:
        return 0.0
    monthly_rate = annual_rate_percent / 100 / 12
    if monthly_rate <= 0:
        return loan_amount / periods
    return loan_amount * monthly_rate / (1 - (1 + monthly_rate) ** (-periods))


def investment_summary(
    purchase_price: Optional[float],
    monthly_rent: Optional[float],
    terms: Optional[FinancingTerms] = None,
) -> InvestmentSummary:
    terms = terms or FinancingTerms()
    assumptions = InvestmentAssumptions(
        purchase_price=purchase_price,
        monthly_rent=monthly_rent,
        vacancy_percent=terms.vacancy_percent,
        expense_percent=terms.expense_percent,
        down_payment_percent=terms.down_payment_percent,
        interest_rate_percent=terms.interest_rate_percent,
        loan_years=terms.loan_years,
    )
    missing = []
    if not _positive(purchase_price):
        missing.append("purchase price")
    if not _positive(monthly_rent):
        missing.append("rent estimate")
    if missing:
        return InvestmentSummary(ok=False, reason=f"Insufficient inputs: missing {' and '.join(missing)}.", assumptions=assumptions)

    gross_annual = monthly_rent * 12
    vacancy_loss = gross_annual * terms.vacancy_percent / 100
    effective_gross = gross_annual - vacancy_loss
    operating_expenses = effective_gross * terms.expense_percent / 100
    noi = effective_gross - operating_expenses

    cash_invested = purchase_price * terms.down_payment_percent / 100
    loan_amount = purchase_price - cash_invested
    payment = monthly_debt_service(loan_amount, terms.interest_rate_percent, terms.loan_years)
    annual_debt_service = payment * 12
    cash_flow_annual = noi - annual_debt_service

    cash_on_cash = None
    if cash_invested > 0:
        cash_on_cash = round2(cash_flow_annual / cash_invested * 100)

    return InvestmentSummary(
        ok=True,
        assumptions=assumptions,
        gross_income=GrossIncome(
            gross_annual=_money(gross_annual),
            vacancy_loss=_money(vacancy_loss),
            effective_gross=_money(effective_gross),
            operating_expenses=_money(operating_expenses),
        ),
        noi=_money(noi),
        metrics=InvestmentMetrics(
            grm=round2(purchase_price / gross_annual),
            cap_rate=round2(noi / purchase_price * 100),
            cash_on_cash=cash_on_cash,
        ),
        debt=DebtSummary(
            loan_amount=_money(loan_amount),
            monthly_payment=_money(payment),
            annual_debt_service=_money(annual_debt_service),
            cash_invested=_money(cash_invested),
        ),
        cash_flow=CashFlow(monthly=_money(cash_flow_annual / 12), annual=_money(cash_flow_annual)),
    )


__all__ = [
    "FinancingTerms",
    "estimate_avm",
    "estimate_arv",
    "monthly_debt_service",
    "investment_summary",
]
