"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional, Union

from cerebral_finance.domain.models import (
    Expense,
    FiniteInterest,
    Frequency,
    InterestProjection,
    Instrument,
    InstrumentKind,
    PaymentFigures,
)
from cerebral_finance.domain.ports import BALANCES_KEY, CUSTOM_ASSETS_KEY, EXPENSES_KEY, LOANS_KEY, StateStore

# Total interest is a number, or the literal "Infinity" when the balance never amortizes
InterestJSON = Union[float, Literal["Infinity"]]


def interest_to_json(projection: InterestProjection) -> InterestJSON:
    if isinstance(projection, FiniteInterest):
        return float(projection.amount)
    return "Infinity"


# --- Calculator -------------------------------------------------------------


class MinimumPaymentRequest(BaseModel):
    """Request body for POST /v1/calculations/minimum-payment"""

    balance: Decimal = Field(..., ge=0, description="Current balance in dollars")
    apr: Decimal = Field(..., ge=0, description="Annual percentage rate, e.g. 18.99")
    minimum_payment_percentage: Decimal = Field(Decimal("0.02"), ge=0, description="Fraction of balance")


class PaymentFiguresResponse(BaseModel):
    """Derived payment figures for one balance"""

    minimum_payment: float
    interest_portion: float
    principal_portion: float
    payoff_time_months: Optional[int] = None  # null: never amortizes
    total_interest_if_minimum_only: InterestJSON

    @classmethod
    def from_domain(cls, figures: PaymentFigures, total_interest: InterestProjection) -> "PaymentFiguresResponse":
        return cls(
            minimum_payment=float(figures.minimum_payment),
            interest_portion=float(figures.interest_portion),
            principal_portion=float(figures.principal_portion),
            payoff_time_months=figures.payoff_time_months,
            total_interest_if_minimum_only=interest_to_json(total_interest),
        )


# --- Credit cards -----------------------------------------------------------


class CreditCardCreate(BaseModel):
    """Request body for POST /v1/credit-cards"""

    name: str = Field(..., min_length=1)
    last_four_digits: str = Field(..., min_length=4, max_length=4)
    credit_limit: Decimal = Field(..., gt=0)
    current_balance: Decimal = Field(Decimal("0"), ge=0)
    apr: Decimal = Field(..., ge=0)
    minimum_payment_percentage: Decimal = Field(Decimal("0.02"), ge=0)
    annual_fee: Decimal = Field(Decimal("0"), ge=0)
    rewards_program: Optional[str] = None
    reward_type: str = "points"
    cashback_rate: Decimal = Field(Decimal("0"), ge=0)
    points_balance: Decimal = Field(Decimal("0"), ge=0)
    bank: Optional[str] = None


class CreditCardUpdate(BaseModel):
    """Request body for PUT /v1/credit-cards/{id}; omitted fields are unchanged"""

    name: Optional[str] = Field(None, min_length=1)
    last_four_digits: Optional[str] = Field(None, min_length=4, max_length=4)
    credit_limit: Optional[Decimal] = Field(None, gt=0)
    current_balance: Optional[Decimal] = Field(None, ge=0)
    apr: Optional[Decimal] = Field(None, ge=0)
    minimum_payment_percentage: Optional[Decimal] = Field(None, ge=0)
    annual_fee: Optional[Decimal] = Field(None, ge=0)
    rewards_program: Optional[str] = None
    reward_type: Optional[str] = None
    cashback_rate: Optional[Decimal] = Field(None, ge=0)
    points_balance: Optional[Decimal] = Field(None, ge=0)
    bank: Optional[str] = None


class CreditCardResponse(PaymentFiguresResponse):
    """Stored card plus derived payment figures"""

    id: str
    name: str
    last_four_digits: str
    bank: Optional[str] = None
    credit_limit: float
    current_balance: float
    apr: float
    minimum_payment_percentage: float
    annual_fee: float
    rewards_program: Optional[str] = None
    reward_type: str
    cashback_rate: float
    points_balance: float
    utilization: float
    available_credit: float
    created_at: str


# --- Debts ------------------------------------------------------------------


class DebtCreate(BaseModel):
    """Request body for POST /v1/debts"""

    name: str = Field(..., min_length=1)
    type: str = "loan"
    balance: Decimal = Field(..., ge=0)
    interest_rate: Decimal = Field(Decimal("0"), ge=0, description="APR percent")
    minimum_payment: Optional[Decimal] = Field(None, ge=0, description="Contractual monthly payment")


class DebtUpdate(BaseModel):
    """Request body for PUT /v1/debts/{id}"""

    name: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    balance: Optional[Decimal] = Field(None, ge=0)
    interest_rate: Optional[Decimal] = Field(None, ge=0)
    minimum_payment: Optional[Decimal] = Field(None, ge=0)


class DebtResponse(PaymentFiguresResponse):
    """Stored debt plus derived payment figures"""

    id: str
    name: str
    type: str
    balance: float
    interest_rate: float
    created_at: str


# --- Crypto -----------------------------------------------------------------


class CryptoAssetCreate(BaseModel):
    """Request body for POST /v1/crypto-assets"""

    symbol: str = Field(..., min_length=1)
    quantity: Decimal = Field(Decimal("0"), ge=0)
    average_cost: Decimal = Field(Decimal("0"), ge=0)
    current_price: Decimal = Field(Decimal("0"), ge=0)
    platform: Optional[str] = None
    wallet_address: Optional[str] = None


class CryptoAssetUpdate(BaseModel):
    """Request body for PUT /v1/crypto-assets/{id}"""

    symbol: Optional[str] = Field(None, min_length=1)
    quantity: Optional[Decimal] = Field(None, ge=0)
    average_cost: Optional[Decimal] = Field(None, ge=0)
    current_price: Optional[Decimal] = Field(None, ge=0)
    platform: Optional[str] = None
    wallet_address: Optional[str] = None


class CryptoAssetResponse(BaseModel):
    """Stored holding plus valuation"""

    id: str
    symbol: str
    quantity: float
    average_cost: float
    current_price: float
    platform: Optional[str] = None
    wallet_address: Optional[str] = None
    total_value: float
    total_cost: float
    gain_loss: float
    gain_loss_percentage: float
    created_at: str


# --- Goals ------------------------------------------------------------------


class GoalsCreate(BaseModel):
    """Request body for POST /v1/goals"""

    primary_goal: str = Field(..., min_length=1, description="e.g. emergency_fund, debt_payoff")
    secondary_goals: List[str] = Field(default_factory=list)
    target_savings_rate: Optional[Decimal] = Field(None, ge=0)
    emergency_fund_target: Optional[Decimal] = Field(None, ge=0)
    debt_payoff_timeframe: Optional[int] = Field(None, gt=0, description="Months")
    risk_tolerance: Optional[str] = None
    monthly_income: Optional[Decimal] = Field(None, ge=0)
    monthly_expenses: Optional[Decimal] = Field(None, ge=0)
    retirement_age: Optional[int] = Field(None, gt=0)
    major_purchase_target: Optional[str] = None
    major_purchase_amount: Optional[Decimal] = Field(None, ge=0)
    major_purchase_timeframe: Optional[int] = Field(None, gt=0, description="Months")
    notes: Optional[str] = None


class GoalsUpdate(BaseModel):
    """Request body for PUT /v1/goals/{id}"""

    primary_goal: Optional[str] = Field(None, min_length=1)
    secondary_goals: Optional[List[str]] = None
    target_savings_rate: Optional[Decimal] = Field(None, ge=0)
    emergency_fund_target: Optional[Decimal] = Field(None, ge=0)
    debt_payoff_timeframe: Optional[int] = Field(None, gt=0)
    risk_tolerance: Optional[str] = None
    monthly_income: Optional[Decimal] = Field(None, ge=0)
    monthly_expenses: Optional[Decimal] = Field(None, ge=0)
    retirement_age: Optional[int] = Field(None, gt=0)
    major_purchase_target: Optional[str] = None
    major_purchase_amount: Optional[Decimal] = Field(None, ge=0)
    major_purchase_timeframe: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None


class GoalsResponse(BaseModel):
    id: str
    primary_goal: str
    secondary_goals: List[str]
    target_savings_rate: Optional[float] = None
    emergency_fund_target: Optional[float] = None
    debt_payoff_timeframe: Optional[int] = None
    risk_tolerance: Optional[str] = None
    monthly_income: Optional[float] = None
    monthly_expenses: Optional[float] = None
    retirement_age: Optional[int] = None
    major_purchase_target: Optional[str] = None
    major_purchase_amount: Optional[float] = None
    major_purchase_timeframe: Optional[int] = None
    notes: Optional[str] = None
    created_at: str


class MessageResponse(BaseModel):
    message: str


# --- Client state -----------------------------------------------------------


class ClientStatePayload(BaseModel):
    """Request body for PUT /v1/client-state/{key}"""

    value: Any = None


class ClientStateResponse(BaseModel):
    key: str
    value: Any = None


class ClientLoan(BaseModel):
    """Loan tracked client-side; accepts the dashboard's camelCase field names"""

    model_config = ConfigDict(extra="ignore")

    name: str = "Loan"
    balance: Decimal = Field(Decimal("0"), ge=0, validation_alias=AliasChoices("balance", "current_balance", "currentBalance"))
    interest_rate: Decimal = Field(Decimal("0"), ge=0, validation_alias=AliasChoices("interest_rate", "interestRate"))
    monthly_payment: Optional[Decimal] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("monthly_payment", "monthlyPayment", "minimum_payment", "minimumPayment"),
    )
    type: Optional[str] = Field(None, validation_alias=AliasChoices("type", "loan_type", "loanType"))

    @property
    def is_credit_card(self) -> bool:
        return self.type == InstrumentKind.CREDIT_CARD.value

    def to_domain(self) -> Instrument:
        return Instrument(
            name=self.name,
            balance=self.balance,
            apr=self.interest_rate,
            kind=InstrumentKind.LOAN,
            fixed_payment=self.monthly_payment,
            loan_type=self.type or "loan",
        )


class ClientExpense(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    amount: Decimal = Field(Decimal("0"), ge=0)
    frequency: Frequency = Frequency.MONTHLY
    category: str = "Other"

    def to_domain(self) -> Expense:
        return Expense(amount=self.amount, frequency=self.frequency, category=self.category, name=self.name)


class ClientBalances(BaseModel):
    model_config = ConfigDict(extra="ignore")

    monthly_income: Optional[Decimal] = Field(None, ge=0, validation_alias=AliasChoices("monthly_income", "monthlyIncome"))
    monthly_expenses: Optional[Decimal] = Field(
        None, ge=0, validation_alias=AliasChoices("monthly_expenses", "monthlyExpenses")
    )


class CustomAssets(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bank: Decimal = Field(Decimal("0"), ge=0)


class ClientData(BaseModel):
    """Client-local data merged into the profile alongside stored records"""

    model_config = ConfigDict(extra="ignore")

    loans: List[ClientLoan] = Field(default_factory=list)
    expenses: List[ClientExpense] = Field(default_factory=list)
    balances: ClientBalances = Field(default_factory=ClientBalances)
    custom_assets: CustomAssets = Field(
        default_factory=CustomAssets, validation_alias=AliasChoices("custom_assets", "customAssets")
    )

    @classmethod
    def from_store(cls, store: StateStore) -> "ClientData":
        return cls.model_validate(
            {
                "loans": store.load(LOANS_KEY, []),
                "expenses": store.load(EXPENSES_KEY, []),
                "balances": store.load(BALANCES_KEY, {}),
                "custom_assets": store.load(CUSTOM_ASSETS_KEY, {}),
            }
        )


# --- Financial profile ------------------------------------------------------


class NarrativeRequest(BaseModel):
    """Request body for POST /v1/financial-profile/llm"""

    client_data: Optional[ClientData] = Field(None, validation_alias=AliasChoices("client_data", "clientData"))


class NarrativeResponse(BaseModel):
    profile: str
    generated_at: str
    disclaimer: str


class HoldingSchema(BaseModel):
    symbol: str
    quantity: float
    current_value: float
    gain_loss: float
    gain_loss_percentage: float


class CryptoBreakdownSchema(BaseModel):
    total_value: float
    total_cost: float
    gain_loss: float
    gain_loss_percentage: float
    assets: List[HoldingSchema]


class AssetsSchema(BaseModel):
    total_value: float
    cash: float
    crypto: CryptoBreakdownSchema
    description: str


class InstrumentSchema(BaseModel):
    name: str
    balance: float
    apr: float
    credit_limit: Optional[float] = None
    loan_type: Optional[str] = None
    minimum_payment: float
    payoff_time_months: Optional[int] = None
    total_interest_if_minimum_only: InterestJSON


class CreditCardBreakdownSchema(BaseModel):
    total_balance: float
    total_credit_limit: float
    total_minimum_payment: float
    total_interest_if_minimum: InterestJSON
    average_apr: float
    utilization_rate: Optional[float] = None
    cards: List[InstrumentSchema]


class LoanBreakdownSchema(BaseModel):
    total_balance: float
    total_minimum_payment: float
    total_interest_if_minimum: InterestJSON
    loans: List[InstrumentSchema]


class LiabilitiesSchema(BaseModel):
    total_debt: float
    total_minimum_payment: float
    total_interest_if_minimum: InterestJSON
    average_apr: float
    credit_cards: CreditCardBreakdownSchema
    other_debts: LoanBreakdownSchema
    description: str


class CashFlowSchema(BaseModel):
    monthly_income: Optional[float] = None
    monthly_expenses: Optional[float] = None
    total_debt_service: float
    net_cash_flow: Optional[float] = None
    debt_service_ratio: Optional[float] = None  # null: income unknown
    savings_rate: Optional[float] = None
    expense_breakdown: Dict[str, float]
    description: str


class GoalsProfileSchema(BaseModel):
    primary: Optional[str] = None
    secondary: List[str]
    timeframes: Dict[str, int]
    emergency_fund_target: Optional[float] = None
    description: str


class FinancialProfileResponse(BaseModel):
    """Response for GET /v1/financial-profile"""

    summary: str
    net_worth: float
    assets: AssetsSchema
    liabilities: LiabilitiesSchema
    cash_flow: CashFlowSchema
    goals: GoalsProfileSchema
    recommendations: List[str]
