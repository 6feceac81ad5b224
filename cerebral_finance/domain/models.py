"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Union


class InstrumentKind(str, Enum):
    CREDIT_CARD = "credit_card"
    LOAN = "loan"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Multipliers converting an amount at each frequency into a monthly figure
MONTHLY_MULTIPLIERS: Dict[Frequency, Decimal] = {
    Frequency.DAILY: Decimal("30"),
    Frequency.WEEKLY: Decimal("4.33"),
    Frequency.MONTHLY: Decimal("1"),
}
MONTHS_PER_YEAR = Decimal("12")


@dataclass
class Instrument:
    """Balance-bearing instrument: a credit card or a loan"""

    name: str
    balance: Decimal
    apr: Decimal  # percent, e.g. 18.99
    kind: InstrumentKind = InstrumentKind.CREDIT_CARD
    credit_limit: Optional[Decimal] = None  # cards only
    minimum_payment_percentage: Decimal = Decimal("0.02")
    fixed_payment: Optional[Decimal] = None  # contractual loan payment
    loan_type: Optional[str] = None

    @property
    def is_card(self) -> bool:
        return self.kind == InstrumentKind.CREDIT_CARD


@dataclass
class PaymentFigures:
    """Derived minimum-payment split for one balance"""

    minimum_payment: Decimal
    interest_portion: Decimal
    principal_portion: Decimal
    payoff_time_months: Optional[int]  # None: never amortizes


@dataclass(frozen=True)
class FiniteInterest:
    """Total interest paid when only the minimum is paid"""

    amount: Decimal


@dataclass(frozen=True)
class NeverAmortizes:
    """Payment never exceeds accruing interest; the balance cannot shrink"""

    def __str__(self) -> str:
        return "Infinity"


NEVER_AMORTIZES = NeverAmortizes()

InterestProjection = Union[FiniteInterest, NeverAmortizes]


@dataclass
class InstrumentSchedule:
    """Payment figures and interest projection for one instrument"""

    instrument: Instrument
    payment: PaymentFigures
    total_interest: InterestProjection

    @property
    def monthly_payment(self) -> Decimal:
        return self.payment.minimum_payment


@dataclass
class Holding:
    """Crypto asset position"""

    symbol: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal

    @property
    def total_value(self) -> Decimal:
        return self.quantity * self.current_price

    @property
    def total_cost(self) -> Decimal:
        return self.quantity * self.average_cost

    @property
    def gain_loss(self) -> Decimal:
        return self.total_value - self.total_cost

    @property
    def gain_loss_percentage(self) -> Decimal:
        if self.total_cost == 0:
            return Decimal("0")
        return self.gain_loss / self.total_cost * 100


@dataclass
class Expense:
    """Recurring expense at some frequency"""

    amount: Decimal
    frequency: Frequency = Frequency.MONTHLY
    category: str = "Other"
    name: Optional[str] = None

    @property
    def monthly_equivalent(self) -> Decimal:
        if self.frequency == Frequency.YEARLY:
            return self.amount / MONTHS_PER_YEAR
        return self.amount * MONTHLY_MULTIPLIERS[self.frequency]


@dataclass
class Goals:
    """User-stated financial goals and self-reported cash flow"""

    primary_goal: Optional[str] = None
    secondary_goals: List[str] = field(default_factory=list)
    target_savings_rate: Optional[Decimal] = None
    emergency_fund_target: Optional[Decimal] = None
    debt_payoff_timeframe: Optional[int] = None
    risk_tolerance: Optional[str] = None
    monthly_income: Optional[Decimal] = None
    monthly_expenses: Optional[Decimal] = None
    retirement_age: Optional[int] = None
    major_purchase_target: Optional[str] = None
    major_purchase_amount: Optional[Decimal] = None
    major_purchase_timeframe: Optional[int] = None
    notes: Optional[str] = None


@dataclass
class ProfileInputs:
    """Everything the profile aggregator needs, supplied by the caller"""

    instruments: List[Instrument] = field(default_factory=list)
    holdings: List[Holding] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    monthly_income: Optional[Decimal] = None
    monthly_expenses: Optional[Decimal] = None
    cash_assets: Decimal = Decimal("0")
    goals: Optional[Goals] = None


@dataclass
class HoldingSummary:
    symbol: str
    quantity: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal


@dataclass
class CryptoBreakdown:
    total_value: Decimal
    total_cost: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal
    assets: List[HoldingSummary]


@dataclass
class AssetProfile:
    total_value: Decimal
    cash: Decimal
    crypto: CryptoBreakdown
    description: str


@dataclass
class CreditCardBreakdown:
    total_balance: Decimal
    total_credit_limit: Decimal
    total_minimum_payment: Decimal
    total_interest_if_minimum: InterestProjection
    average_apr: Decimal
    utilization_rate: Optional[Decimal]  # None when no credit limit
    cards: List[InstrumentSchedule]


@dataclass
class LoanBreakdown:
    total_balance: Decimal
    total_minimum_payment: Decimal
    total_interest_if_minimum: InterestProjection
    loans: List[InstrumentSchedule]


@dataclass
class LiabilityProfile:
    total_debt: Decimal
    total_minimum_payment: Decimal
    total_interest_if_minimum: InterestProjection
    average_apr: Decimal
    credit_cards: CreditCardBreakdown
    other_debts: LoanBreakdown
    description: str


@dataclass
class CashFlowProfile:
    monthly_income: Optional[Decimal]
    monthly_expenses: Optional[Decimal]
    total_debt_service: Decimal
    net_cash_flow: Optional[Decimal]
    debt_service_ratio: Optional[Decimal]  # None when income unknown
    savings_rate: Optional[Decimal]  # None when income or expenses unknown
    expense_breakdown: Dict[str, Decimal]
    description: str


@dataclass
class GoalsProfile:
    primary: Optional[str]
    secondary: List[str]
    timeframes: Dict[str, int]
    emergency_fund_target: Optional[Decimal]
    description: str


@dataclass
class FinancialProfile:
    """Aggregate view recomputed on every request, never persisted"""

    summary: str
    net_worth: Decimal
    assets: AssetProfile
    liabilities: LiabilityProfile
    cash_flow: CashFlowProfile
    goals: GoalsProfile
    recommendations: List[str]
