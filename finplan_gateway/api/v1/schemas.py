"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from finplan_gateway.domain.models import (
    AnalyzerCategory,
    FinancialSnapshot,
    LoanInput,
    PayoffStrategy,
    PlannerSettings,
    RecommendationStatus,
    Scenario,
    Severity,
    StrategyRecommendation,
    TaxCategory,
)
from finplan_gateway.domain.scoring import get_confidence_level, get_priority
from finplan_gateway.infrastructure.clients.portfolio import loan_from_dict, snapshot_from_dict


# ---------------------------------------------------------------------------
# Snapshot entities
# ---------------------------------------------------------------------------


class LoanSchema(BaseModel):
    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    principal: float = Field(..., ge=0)
    annual_rate: float = Field(..., ge=0, description="Annual rate as a decimal fraction")
    min_repayment: float = Field(0.0, ge=0)
    repayment_frequency: str = "MONTHLY"
    category: str = "HOME"
    rate_type: str = "VARIABLE"
    fixed_expiry: Optional[date] = None
    interest_only: bool = False
    term_months_remaining: int = Field(360, ge=0)
    offset_balance: float = Field(0.0, ge=0)
    extra_repayment_cap: Optional[float] = Field(None, ge=0)
    property_id: Optional[str] = None

    def to_domain(self) -> LoanInput:
        return loan_from_dict(self.model_dump())


class PropertySchema(BaseModel):
    id: str
    name: Optional[str] = None
    current_value: float = Field(..., ge=0)
    property_type: str = "HOME"
    purchase_price: Optional[float] = None
    purchase_date: Optional[date] = None
    state: Optional[str] = None
    suburb: Optional[str] = None
    construction_cost: Optional[float] = None
    construction_date: Optional[date] = None


class AccountSchema(BaseModel):
    id: str
    name: Optional[str] = None
    balance: float
    account_type: str = "TRANSACTIONAL"
    linked_loan_id: Optional[str] = None


class IncomeSchema(BaseModel):
    id: str
    name: Optional[str] = None
    amount: float
    income_type: str = "SALARY"
    frequency: str = "MONTHLY"
    property_id: Optional[str] = None
    franking_percentage: Optional[float] = None
    payment_type: Optional[str] = None


class ExpenseSchema(BaseModel):
    id: str
    name: Optional[str] = None
    amount: float
    frequency: str = "MONTHLY"
    is_essential: bool = True
    is_tax_deductible: bool = False
    property_id: Optional[str] = None


class InvestmentSchema(BaseModel):
    id: str
    name: Optional[str] = None
    units: float
    average_price: float
    current_price: float
    asset_class: str = "stocks"
    ticker: Optional[str] = None
    sector: Optional[str] = None
    income_yield: float = 0.0
    franking_percentage: float = 0.0
    reinvest_income: bool = True
    is_liquid: bool = True
    purchase_date: Optional[date] = None


class PreferencesSchema(BaseModel):
    risk_appetite: Optional[str] = None
    retirement_age: Optional[int] = None
    time_horizon: Optional[str] = None
    debt_comfort: Optional[str] = None


class SnapshotSchema(BaseModel):
    """Financial snapshot supplied inline by the caller"""

    user_id: str = Field(..., min_length=1)
    as_of: Optional[date] = None
    current_age: Optional[int] = Field(None, ge=0, le=120)
    income_stability: Optional[float] = Field(None, ge=0, le=100)
    properties: List[PropertySchema] = []
    loans: List[LoanSchema] = []
    accounts: List[AccountSchema] = []
    incomes: List[IncomeSchema] = []
    expenses: List[ExpenseSchema] = []
    investments: List[InvestmentSchema] = []
    preferences: PreferencesSchema = PreferencesSchema()

    def to_domain(self) -> FinancialSnapshot:
        return snapshot_from_dict(self.model_dump())


# ---------------------------------------------------------------------------
# Debt plan
# ---------------------------------------------------------------------------


class PlannerSettingsSchema(BaseModel):
    """Planner settings; completeness is validated by the planner itself"""

    strategy: Optional[str] = None
    surplus_amount: Optional[float] = None
    surplus_frequency: Optional[str] = "MONTHLY"
    custom_order: Optional[List[str]] = None
    rollover_repayments: bool = True
    respect_fixed_caps: bool = True
    start_date: Optional[date] = None

    def to_domain(self) -> PlannerSettings:
        return PlannerSettings(
            strategy=self.strategy.upper() if self.strategy else None,
            surplus_amount=self.surplus_amount,
            surplus_frequency=self.surplus_frequency.upper() if self.surplus_frequency else None,
            custom_order=self.custom_order,
            rollover_repayments=self.rollover_repayments,
            respect_fixed_caps=self.respect_fixed_caps,
            start_date=self.start_date,
        )


class DebtPlanRequest(BaseModel):
    """Request body for POST /v1/debt-plan"""

    loans: List[LoanSchema] = []
    settings: Optional[PlannerSettingsSchema] = None


class LoanPayoffSchema(BaseModel):
    loan_id: str
    name: str
    original_principal: float
    periods_to_payoff: Optional[int]
    total_interest_paid: float
    baseline_interest_paid: float
    interest_saved: float
    periods_saved: int
    closing_balance: float
    payoff_date: Optional[date] = None


class SurplusAllocationSchema(BaseModel):
    period: int
    loan_id: str
    amount: float


class DebtPlanResponse(BaseModel):
    """Response for POST /v1/debt-plan"""

    strategy: PayoffStrategy
    loans: List[LoanPayoffSchema]
    allocations: List[SurplusAllocationSchema]
    total_interest_paid: float
    baseline_interest_paid: float
    interest_saved: float
    months_to_debt_free: Optional[int]
    horizon_reached: bool
    periods_simulated: int
    debt_free_date: Optional[date] = None


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------


class ForecastRequest(BaseModel):
    """Request body for POST /v1/forecast"""

    snapshot: SnapshotSchema
    scenario: str = "DEFAULT"
    years: int = 30
    custom_assumptions: Optional[Dict[str, float | int]] = None
    debt_plan: Optional[PlannerSettingsSchema] = None


class ForecastCompareRequest(BaseModel):
    """Request body for POST /v1/forecast/compare"""

    snapshot: SnapshotSchema
    years: int = 30
    custom_assumptions: Optional[Dict[str, float | int]] = None
    debt_plan: Optional[PlannerSettingsSchema] = None


class AssumptionsSchema(BaseModel):
    inflation_rate: float
    portfolio_return_rate: float
    property_growth_rate: float
    wage_growth_rate: float
    retirement_age: int
    cash_rate: float
    withdrawal_rate: float


class ProjectionSchema(BaseModel):
    year: int
    age: int
    net_worth: float
    cash_balance: float
    total_equity: float
    total_debt: float
    property_value: float
    investment_value: float
    income: float
    expenses: float


class ForecastSummarySchema(BaseModel):
    current_age: int
    retirement_age: int
    years_to_retirement: int
    net_worth_at_retirement: float
    investable_at_retirement: float
    projected_retirement_income: float
    pre_retirement_income: float
    replacement_ratio: float
    can_retire_comfortably: bool
    final_net_worth: float


class ForecastResponse(BaseModel):
    """Response for POST /v1/forecast"""

    scenario: Scenario
    years: int
    assumptions: AssumptionsSchema
    projections: List[ProjectionSchema]
    summary: ForecastSummarySchema


class ForecastCompareResponse(BaseModel):
    """Response for POST /v1/forecast/compare"""

    years: int
    scenarios: Dict[str, ForecastResponse]
    comparison: List[Dict[str, Any]]


# ---------------------------------------------------------------------------
# Strategy engine
# ---------------------------------------------------------------------------


class StrategyGenerateRequest(BaseModel):
    """Request body for POST /v1/strategies/generate"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    force_refresh: bool = False


class RecommendationSchema(BaseModel):
    id: str
    user_id: str
    category: AnalyzerCategory
    finding_type: str
    severity: Severity
    priority: str
    title: str
    summary: str
    detail: str
    sbs_score: float
    confidence: float
    confidence_level: str
    benefit: float
    impact: Dict[str, float]
    affected_entities: List[Dict[str, str]]
    action_steps: List[str]
    evidence: Dict[str, Any]
    status: RecommendationStatus
    created_at: datetime
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None
    user_notes: Optional[str] = None
    dismiss_reason: Optional[str] = None

    @classmethod
    def from_domain(cls, rec: StrategyRecommendation) -> "RecommendationSchema":
        finding = rec.finding
        return cls(
            id=rec.id,
            user_id=rec.user_id,
            category=finding.category,
            finding_type=finding.finding_type,
            severity=finding.severity,
            priority=get_priority(finding.score),
            title=finding.title,
            summary=finding.summary,
            detail=finding.detail,
            sbs_score=finding.score,
            confidence=finding.confidence,
            confidence_level=get_confidence_level(finding.confidence),
            benefit=finding.benefit,
            impact={
                "financial": finding.impact.financial,
                "risk": finding.impact.risk,
                "liquidity": finding.impact.liquidity,
                "tax": finding.impact.tax,
                "confidence": finding.impact.confidence,
            },
            affected_entities=[
                {"entity_type": e.entity_type, "entity_id": e.entity_id} for e in finding.affected_entities
            ],
            action_steps=finding.action_steps,
            evidence=finding.evidence,
            status=rec.status,
            created_at=rec.created_at,
            expires_at=rec.expires_at,
            accepted_at=rec.accepted_at,
            dismissed_at=rec.dismissed_at,
            user_notes=rec.user_notes,
            dismiss_reason=rec.dismiss_reason,
        )


class GenerationMetadata(BaseModel):
    analyzers_run: List[str]
    analyzers_failed: List[str]
    findings_before_dedup: int
    findings_after_dedup: int
    created: int
    skipped: int
    execution_time_ms: float
    data_quality_score: float
    limited_mode: bool
    missing_data: List[str]


class StrategyGenerateResponse(BaseModel):
    """Response for POST /v1/strategies/generate"""

    recommendations: List[RecommendationSchema]
    metadata: GenerationMetadata


class RecommendationUpdateRequest(BaseModel):
    """Request body for PATCH /v1/strategies/{id}"""

    user_id: str = Field(..., min_length=1)
    status: str = Field(..., description="ACCEPTED or DISMISSED")
    notes: Optional[str] = Field(None, max_length=2000)


class AlternativeSchema(BaseModel):
    profile: str
    title: str
    description: str
    financial_impact: float
    risk_level: str
    pros: List[str]
    cons: List[str]


class AlternativesResponse(BaseModel):
    recommendation_id: str
    alternatives: List[AlternativeSchema]


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------


class TaxabilityRequest(BaseModel):
    """Request body for POST /v1/tax/taxability"""

    income_type: str
    amount: float = Field(..., ge=0)
    franking_percentage: Optional[float] = Field(None, ge=0)
    payment_type: Optional[str] = None


class TaxabilityResponse(BaseModel):
    is_taxable: bool
    tax_category: TaxCategory
    category_label: str
    taxable_amount: float
    exempt_amount: float
    franking_credits: float
    grossed_up_amount: float
    explanation: str
    summary: str
    ato_references: List[str]


class PortfolioIntelligenceRequest(BaseModel):
    """Request body for POST /v1/portfolio/intelligence"""

    snapshot: SnapshotSchema
