"""Domain models - pure Python dataclasses representing financial entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List


class Frequency(str, Enum):
    WEEKLY = "WEEKLY"
    FORTNIGHTLY = "FORTNIGHTLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"


class LoanCategory(str, Enum):
    HOME = "HOME"
    INVESTMENT = "INVESTMENT"


class RateType(str, Enum):
    VARIABLE = "VARIABLE"
    FIXED = "FIXED"


class PayoffStrategy(str, Enum):
    AVALANCHE = "AVALANCHE"
    SNOWBALL = "SNOWBALL"
    CUSTOM = "CUSTOM"
    TAX_AWARE = "TAX_AWARE"


class Scenario(str, Enum):
    CONSERVATIVE = "CONSERVATIVE"
    DEFAULT = "DEFAULT"
    AGGRESSIVE = "AGGRESSIVE"


class AccountType(str, Enum):
    OFFSET = "OFFSET"
    SAVINGS = "SAVINGS"
    TRANSACTIONAL = "TRANSACTIONAL"
    CREDIT_CARD = "CREDIT_CARD"


class PropertyType(str, Enum):
    HOME = "HOME"
    INVESTMENT = "INVESTMENT"


class IncomeType(str, Enum):
    SALARY = "SALARY"
    RENT = "RENT"
    DIVIDEND = "DIVIDEND"
    INTEREST = "INTEREST"
    GIFT = "GIFT"
    INHERITANCE = "INHERITANCE"
    INSURANCE = "INSURANCE"
    GOVERNMENT = "GOVERNMENT"
    HOBBY = "HOBBY"
    OTHER = "OTHER"


class AnalyzerCategory(str, Enum):
    CASHFLOW = "CASHFLOW"
    DEBT = "DEBT"
    INVESTMENT = "INVESTMENT"
    PROPERTY = "PROPERTY"
    RISK = "RISK"
    LIQUIDITY = "LIQUIDITY"
    TAX = "TAX"
    TIME_HORIZON = "TIME_HORIZON"


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class RecommendationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DISMISSED = "DISMISSED"
    EXPIRED = "EXPIRED"


# ---------------------------------------------------------------------------
# Debt planner
# ---------------------------------------------------------------------------


@dataclass
class LoanInput:
    """Loan as seen by the planner and the analyzers"""

    id: str
    name: str
    principal: float
    annual_rate: float  # decimal fraction, 0.06 == 6%
    min_repayment: float
    repayment_frequency: Frequency = Frequency.MONTHLY
    category: LoanCategory = LoanCategory.HOME
    rate_type: RateType = RateType.VARIABLE
    fixed_expiry: date | None = None
    interest_only: bool = False
    term_months_remaining: int = 360
    offset_balance: float = 0.0
    extra_repayment_cap: float | None = None  # per monthly period
    property_id: str | None = None


@dataclass
class PlannerSettings:
    """Strategy and surplus configuration for a debt plan"""

    strategy: PayoffStrategy | None
    surplus_amount: float | None
    surplus_frequency: Frequency | None = Frequency.MONTHLY
    custom_order: List[str] | None = None
    rollover_repayments: bool = True
    respect_fixed_caps: bool = True
    start_date: date | None = None


@dataclass
class SurplusAllocation:
    """Surplus applied to one loan in one period"""

    period: int
    loan_id: str
    amount: float


@dataclass
class LoanPayoff:
    """Per-loan outcome of a debt plan"""

    loan_id: str
    name: str
    original_principal: float
    periods_to_payoff: int | None
    total_interest_paid: float
    baseline_interest_paid: float
    interest_saved: float
    periods_saved: int
    closing_balance: float
    payoff_date: date | None = None


@dataclass
class DebtPlanResult:
    """Output of the debt planner"""

    strategy: PayoffStrategy
    loans: List[LoanPayoff]
    allocations: List[SurplusAllocation]
    total_interest_paid: float
    baseline_interest_paid: float
    interest_saved: float
    months_to_debt_free: int | None
    horizon_reached: bool
    periods_simulated: int
    debt_free_date: date | None = None


# ---------------------------------------------------------------------------
# Financial snapshot
# ---------------------------------------------------------------------------


@dataclass
class Property:
    id: str
    name: str
    current_value: float
    property_type: PropertyType = PropertyType.HOME
    purchase_price: float | None = None
    purchase_date: date | None = None
    state: str | None = None
    suburb: str | None = None
    construction_cost: float | None = None
    construction_date: date | None = None


@dataclass
class Account:
    id: str
    name: str
    balance: float
    account_type: AccountType = AccountType.TRANSACTIONAL
    linked_loan_id: str | None = None


@dataclass
class Income:
    id: str
    name: str
    amount: float
    income_type: IncomeType = IncomeType.SALARY
    frequency: Frequency = Frequency.MONTHLY
    property_id: str | None = None
    franking_percentage: float | None = None
    payment_type: str | None = None


@dataclass
class Expense:
    id: str
    name: str
    amount: float
    frequency: Frequency = Frequency.MONTHLY
    is_essential: bool = True
    is_tax_deductible: bool = False
    property_id: str | None = None


@dataclass
class Investment:
    id: str
    name: str
    units: float
    average_price: float
    current_price: float
    asset_class: str = "stocks"  # stocks | bonds | cash | property | other
    ticker: str | None = None
    sector: str | None = None
    income_yield: float = 0.0
    franking_percentage: float = 0.0
    reinvest_income: bool = True
    is_liquid: bool = True
    purchase_date: date | None = None

    @property
    def value(self) -> float:
        return self.units * self.current_price

    @property
    def cost_base(self) -> float:
        return self.units * self.average_price

    @property
    def unrealised_gain(self) -> float:
        return self.value - self.cost_base


@dataclass
class UserPreferences:
    risk_appetite: str | None = None  # CONSERVATIVE | MODERATE | AGGRESSIVE
    retirement_age: int | None = None
    time_horizon: str | None = None
    debt_comfort: str | None = None


@dataclass
class FinancialSnapshot:
    """Read-only view of a user's financial entities"""

    user_id: str
    as_of: date
    current_age: int | None = None
    income_stability: float | None = None  # 0-100
    properties: List[Property] = field(default_factory=list)
    loans: List[LoanInput] = field(default_factory=list)
    accounts: List[Account] = field(default_factory=list)
    incomes: List[Income] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    investments: List[Investment] = field(default_factory=list)
    preferences: UserPreferences = field(default_factory=UserPreferences)


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ForecastAssumptions:
    """Annual rates driving a projection; immutable once resolved"""

    inflation_rate: float
    portfolio_return_rate: float
    property_growth_rate: float
    wage_growth_rate: float
    retirement_age: int = 65
    cash_rate: float = 0.02
    withdrawal_rate: float = 0.04


@dataclass
class ForecastProjection:
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


@dataclass
class ForecastSummary:
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


@dataclass
class ForecastResult:
    scenario: Scenario
    years: int
    assumptions: ForecastAssumptions
    projections: List[ForecastProjection]
    summary: ForecastSummary


# ---------------------------------------------------------------------------
# Strategy engine
# ---------------------------------------------------------------------------


@dataclass
class ImpactScore:
    """Impact dimensions on a 0-100 scale; components may be negative"""

    financial: float = 0.0
    risk: float = 0.0
    liquidity: float = 0.0
    tax: float = 0.0
    confidence: float = 0.0


@dataclass(frozen=True)
class EntityRef:
    entity_type: str  # LOAN | PROPERTY | INVESTMENT | ACCOUNT
    entity_id: str


@dataclass
class StrategyFinding:
    """Scored candidate recommendation produced by an analyzer"""

    finding_type: str
    category: AnalyzerCategory
    severity: Severity
    title: str
    summary: str
    detail: str
    impact: ImpactScore
    score: float
    confidence: float
    benefit: float
    affected_entities: List[EntityRef] = field(default_factory=list)
    action_steps: List[str] = field(default_factory=list)
    evidence: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StrategyRecommendation:
    """Persisted finding with lifecycle state"""

    id: str
    user_id: str
    dedup_key: str
    finding: StrategyFinding
    status: RecommendationStatus
    created_at: datetime
    expires_at: datetime
    rank: int = 0  # position within its generation batch
    accepted_at: datetime | None = None
    dismissed_at: datetime | None = None
    user_notes: str | None = None
    dismiss_reason: str | None = None


@dataclass
class Alternative:
    profile: str  # CONSERVATIVE | MODERATE | AGGRESSIVE
    title: str
    description: str
    financial_impact: float
    risk_level: str
    pros: List[str] = field(default_factory=list)
    cons: List[str] = field(default_factory=list)


@dataclass
class DataQualityReport:
    overall_score: float
    completeness: Dict[str, float]
    missing_critical: List[str]
    recommendations: List[str]
    limited_mode: bool


@dataclass
class StrategyGenerationResult:
    recommendations: List[StrategyRecommendation]
    analyzers_run: List[str]
    analyzers_failed: List[str]
    findings_before_dedup: int
    findings_after_dedup: int
    created: int
    skipped: int
    execution_time_ms: float
    data_quality: DataQualityReport
    created_ids: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Taxability
# ---------------------------------------------------------------------------


class TaxCategory(str, Enum):
    SALARY_WAGES = "SALARY_WAGES"
    RENTAL = "RENTAL"
    DIVIDENDS_FRANKED = "DIVIDENDS_FRANKED"
    DIVIDENDS_UNFRANKED = "DIVIDENDS_UNFRANKED"
    INTEREST = "INTEREST"
    GIFTS = "GIFTS"
    INHERITANCE = "INHERITANCE"
    INSURANCE_PAYOUT = "INSURANCE_PAYOUT"
    GOVERNMENT_TAXABLE = "GOVERNMENT_TAXABLE"
    GOVERNMENT_EXEMPT = "GOVERNMENT_EXEMPT"
    HOBBY_INCOME = "HOBBY_INCOME"
    OTHER_ASSESSABLE = "OTHER_ASSESSABLE"


@dataclass
class IncomeContext:
    income_type: IncomeType | str
    amount: float
    franking_percentage: float | None = None
    payment_type: str | None = None


@dataclass
class TaxabilityResult:
    is_taxable: bool
    tax_category: TaxCategory
    taxable_amount: float
    exempt_amount: float
    franking_credits: float
    grossed_up_amount: float
    explanation: str
    ato_references: List[str] = field(default_factory=list)
