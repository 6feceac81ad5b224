"""Financial profile aggregation - rollups, ratios and recommendation rules"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from cerebral_finance.domain.amortization import compute_payment_schedule
from cerebral_finance.domain.models import (
    NEVER_AMORTIZES,
    AssetProfile,
    CashFlowProfile,
    CreditCardBreakdown,
    CryptoBreakdown,
    Expense,
    FinancialProfile,
    FiniteInterest,
    Goals,
    GoalsProfile,
    Holding,
    HoldingSummary,
    Instrument,
    InstrumentSchedule,
    InterestProjection,
    LiabilityProfile,
    LoanBreakdown,
    NeverAmortizes,
    ProfileInputs,
)
from cerebral_finance.utils.formatting import format_currency, format_percent, humanize_key, pluralize

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Recommendation thresholds (percent unless noted)
HIGH_UTILIZATION = Decimal("30")
HIGH_AVERAGE_APR = Decimal("20")
HIGH_DEBT_SERVICE_RATIO = Decimal("36")
LOW_SAVINGS_RATE = Decimal("10")
STRONG_SAVINGS_RATE = Decimal("20")
CRYPTO_ALLOCATION_SHARE = Decimal("0.1")
CRYPTO_MIN_TOTAL_ASSETS = Decimal("10000")  # dollars
EMERGENCY_FUND_MONTHS = 3

EMERGENCY_FUND_GOAL = "emergency_fund"
TOP_HOLDINGS = 3


def combine_interest(projections: Iterable[InterestProjection]) -> InterestProjection:
    """Sum finite projections; any never-amortizing balance makes the total never amortize"""
    total = ZERO
    for projection in projections:
        if isinstance(projection, NeverAmortizes):
            return NEVER_AMORTIZES
        total += projection.amount
    return FiniteInterest(total)


def categorize_expenses(expenses: Iterable[Expense]) -> Dict[str, Decimal]:
    """Monthly-equivalent spend per category, in first-seen order"""
    by_category: Dict[str, Decimal] = {}
    for expense in expenses:
        category = expense.category or "Other"
        by_category[category] = by_category.get(category, ZERO) + expense.monthly_equivalent
    return by_category


def _percent_of(part: Decimal, whole: Decimal) -> Optional[Decimal]:
    """part / whole * 100, or None when whole is not positive"""
    if whole <= 0:
        return None
    return part / whole * HUNDRED


def _average(values: List[Decimal]) -> Decimal:
    return sum(values, ZERO) / len(values) if values else ZERO


def build_crypto_breakdown(holdings: List[Holding]) -> CryptoBreakdown:
    """
    Value, cost and gain/loss across holdings.

    The aggregate percentage is computed from aggregate cost, not by
    averaging per-asset percentages.
    """
    assets = [
        HoldingSummary(
            symbol=h.symbol,
            quantity=h.quantity,
            current_value=h.total_value,
            gain_loss=h.gain_loss,
            gain_loss_percentage=h.gain_loss_percentage,
        )
        for h in holdings
    ]
    total_value = sum((h.total_value for h in holdings), ZERO)
    total_cost = sum((h.total_cost for h in holdings), ZERO)
    gain_loss = total_value - total_cost

    return CryptoBreakdown(
        total_value=total_value,
        total_cost=total_cost,
        gain_loss=gain_loss,
        gain_loss_percentage=_percent_of(gain_loss, total_cost) or ZERO,
        assets=assets,
    )


def build_asset_profile(holdings: List[Holding], cash_assets: Decimal = ZERO) -> AssetProfile:
    crypto = build_crypto_breakdown(holdings)
    total_value = crypto.total_value + cash_assets

    sentences = [f"Total assets: {format_currency(total_value)}."]
    if cash_assets > 0:
        sentences.append(f"Cash/Bank: {format_currency(cash_assets)}.")

    if holdings:
        sentences.append(
            f"Crypto portfolio: {pluralize(len(holdings), 'asset')} worth {format_currency(crypto.total_value)} "
            f"({format_percent(crypto.gain_loss_percentage, signed=True)} overall)."
        )
        top = sorted(crypto.assets, key=lambda a: a.current_value, reverse=True)[:TOP_HOLDINGS]
        sentences.append(
            "Top holdings: " + ", ".join(f"{a.symbol} ({format_currency(a.current_value)})" for a in top) + "."
        )

    return AssetProfile(
        total_value=total_value,
        cash=cash_assets,
        crypto=crypto,
        description=" ".join(sentences),
    )


def build_credit_card_breakdown(cards: List[InstrumentSchedule]) -> CreditCardBreakdown:
    total_balance = sum((c.instrument.balance for c in cards), ZERO)
    total_limit = sum((c.instrument.credit_limit or ZERO for c in cards), ZERO)

    return CreditCardBreakdown(
        total_balance=total_balance,
        total_credit_limit=total_limit,
        total_minimum_payment=sum((c.monthly_payment for c in cards), ZERO),
        total_interest_if_minimum=combine_interest(c.total_interest for c in cards),
        average_apr=_average([c.instrument.apr for c in cards]),
        utilization_rate=_percent_of(total_balance, total_limit),
        cards=cards,
    )


def build_loan_breakdown(loans: List[InstrumentSchedule]) -> LoanBreakdown:
    return LoanBreakdown(
        total_balance=sum((loan.instrument.balance for loan in loans), ZERO),
        total_minimum_payment=sum((loan.monthly_payment for loan in loans), ZERO),
        total_interest_if_minimum=combine_interest(loan.total_interest for loan in loans),
        loans=loans,
    )


def _describe_interest(projection: InterestProjection) -> str:
    if isinstance(projection, NeverAmortizes):
        return "Paying only minimums never clears the balance (total interest: infinite)."
    return f"Total interest if paying minimums: {format_currency(projection.amount)}."


def build_liability_profile(instruments: List[Instrument]) -> LiabilityProfile:
    schedules = [compute_payment_schedule(i) for i in instruments]
    cards = build_credit_card_breakdown([s for s in schedules if s.instrument.is_card])
    other_debts = build_loan_breakdown([s for s in schedules if not s.instrument.is_card])

    total_debt = cards.total_balance + other_debts.total_balance
    total_interest = combine_interest([cards.total_interest_if_minimum, other_debts.total_interest_if_minimum])

    sentences = [f"Total debt: {format_currency(total_debt)}."]

    if cards.cards:
        utilization = (
            f"{format_percent(cards.utilization_rate)} utilization"
            if cards.utilization_rate is not None
            else "no credit limit on file"
        )
        sentences.append(
            f"Credit cards: {pluralize(len(cards.cards), 'card')} with "
            f"{format_currency(cards.total_balance)} balance ({utilization})."
        )
        sentences.append(f"Average APR: {format_percent(cards.average_apr)}.")
        sentences.append(f"Monthly minimums: {format_currency(cards.total_minimum_payment)}.")
        sentences.append(_describe_interest(cards.total_interest_if_minimum))

    if other_debts.loans:
        sentences.append(
            f"Other loans: {pluralize(len(other_debts.loans), 'loan')} totaling "
            f"{format_currency(other_debts.total_balance)} with "
            f"{format_currency(other_debts.total_minimum_payment)} monthly payments."
        )
        loan_types = list(dict.fromkeys(loan.instrument.loan_type or "loan" for loan in other_debts.loans))
        sentences.append(f"Loan types: {', '.join(loan_types)}.")
        if isinstance(other_debts.total_interest_if_minimum, NeverAmortizes):
            sentences.append("At least one loan payment does not cover its monthly interest.")

    return LiabilityProfile(
        total_debt=total_debt,
        total_minimum_payment=cards.total_minimum_payment + other_debts.total_minimum_payment,
        total_interest_if_minimum=total_interest,
        average_apr=_average([s.instrument.apr for s in schedules]),
        credit_cards=cards,
        other_debts=other_debts,
        description=" ".join(sentences),
    )


def _first_positive(*values: Optional[Decimal]) -> Optional[Decimal]:
    for value in values:
        if value is not None and value > 0:
            return value
    return None


def build_cash_flow_profile(liabilities: LiabilityProfile, inputs: ProfileInputs) -> CashFlowProfile:
    """
    Income, expenses and the two ratios.

    Income and expenses come from the inputs first, then the stated goals.
    Expenses fall back to the sum of itemized monthly equivalents.
    """
    goals = inputs.goals or Goals()
    expense_breakdown = categorize_expenses(inputs.expenses)
    itemized_total = sum(expense_breakdown.values(), ZERO)

    monthly_income = _first_positive(inputs.monthly_income, goals.monthly_income)
    monthly_expenses = _first_positive(inputs.monthly_expenses, goals.monthly_expenses, itemized_total)
    debt_service = liabilities.total_minimum_payment

    debt_service_ratio: Optional[Decimal] = None
    savings_rate: Optional[Decimal] = None
    net_cash_flow: Optional[Decimal] = None

    if monthly_income is not None:
        debt_service_ratio = _percent_of(debt_service, monthly_income)
        if monthly_expenses is not None:
            net_cash_flow = monthly_income - monthly_expenses - debt_service
            savings_rate = _percent_of(net_cash_flow, monthly_income)

    sentences: List[str] = []
    if monthly_income is not None:
        sentences.append(f"Monthly income: {format_currency(monthly_income)}.")
        sentences.append(
            f"Debt service ratio: {format_percent(debt_service_ratio)} "
            f"({format_currency(debt_service)} in debt payments)."
        )
        if monthly_expenses is not None:
            sentences.append(f"Monthly expenses: {format_currency(monthly_expenses)}.")
            sentences.append(
                f"Net cash flow: {format_currency(net_cash_flow)}/month "
                f"({format_percent(savings_rate)} savings rate)."
            )
    else:
        sentences.append(f"Total monthly debt payments: {format_currency(debt_service)}.")
        if monthly_expenses is not None:
            sentences.append(f"Monthly expenses: {format_currency(monthly_expenses)}.")
        sentences.append("Income information not provided.")

    return CashFlowProfile(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        total_debt_service=debt_service,
        net_cash_flow=net_cash_flow,
        debt_service_ratio=debt_service_ratio,
        savings_rate=savings_rate,
        expense_breakdown=expense_breakdown,
        description=" ".join(sentences),
    )


def build_goals_profile(goals: Optional[Goals]) -> GoalsProfile:
    if goals is None:
        return GoalsProfile(
            primary=None,
            secondary=[],
            timeframes={},
            emergency_fund_target=None,
            description="No financial goals currently set.",
        )

    timeframes: Dict[str, int] = {}
    sentences: List[str] = []

    if goals.primary_goal:
        sentences.append(f"Primary goal: {humanize_key(goals.primary_goal)}.")

        if goals.debt_payoff_timeframe:
            timeframes["debt_payoff"] = goals.debt_payoff_timeframe
            sentences.append(f"Target debt payoff: {pluralize(goals.debt_payoff_timeframe, 'month')}.")

        if goals.major_purchase_timeframe and goals.major_purchase_amount:
            timeframes["major_purchase"] = goals.major_purchase_timeframe
            purchase = (
                f"Major purchase: {format_currency(goals.major_purchase_amount)} "
                f"in {pluralize(goals.major_purchase_timeframe, 'month')}"
            )
            if goals.major_purchase_target:
                purchase += f" ({goals.major_purchase_target})"
            sentences.append(purchase + ".")

    if goals.emergency_fund_target:
        sentences.append(f"Emergency fund target: {format_currency(goals.emergency_fund_target)}.")
    if goals.risk_tolerance:
        sentences.append(f"Risk tolerance: {goals.risk_tolerance}.")
    if goals.target_savings_rate:
        sentences.append(f"Target savings rate: {format_percent(goals.target_savings_rate)}.")
    if goals.retirement_age:
        sentences.append(f"Target retirement age: {goals.retirement_age}.")
    if goals.secondary_goals:
        sentences.append(f"Secondary goals: {', '.join(humanize_key(g) for g in goals.secondary_goals)}.")
    if goals.notes:
        sentences.append(f"Additional notes: {goals.notes}.")

    return GoalsProfile(
        primary=goals.primary_goal,
        secondary=list(goals.secondary_goals),
        timeframes=timeframes,
        emergency_fund_target=goals.emergency_fund_target,
        description=" ".join(sentences) or "Goals information available but details not provided.",
    )


def generate_recommendations(
    assets: AssetProfile,
    liabilities: LiabilityProfile,
    cash_flow: CashFlowProfile,
    goals: GoalsProfile,
) -> List[str]:
    """
    Evaluate each rule independently, in fixed order.

    Thresholds:
    - utilization > 30%
    - average APR > 20%
    - debt service ratio > 36%
    - savings rate < 10% (low) or > 20% (strong)
    - crypto > 10% of assets when assets > $10,000
    - emergency fund of 3x monthly expenses unless it is already the primary goal
    """
    recommendations: List[str] = []

    utilization = liabilities.credit_cards.utilization_rate
    if utilization is not None and utilization > HIGH_UTILIZATION:
        recommendations.append(
            f"Credit utilization is high ({format_percent(utilization)}, above 30%). "
            "Focus on paying down credit card balances to improve your credit score."
        )

    if liabilities.average_apr > HIGH_AVERAGE_APR:
        recommendations.append(
            f"Average APR of {format_percent(liabilities.average_apr)} is high. "
            "Consider debt consolidation or a balance transfer to a lower-interest card."
        )

    ratio = cash_flow.debt_service_ratio
    if ratio is not None and ratio > HIGH_DEBT_SERVICE_RATIO:
        recommendations.append(
            f"Debt service ratio of {format_percent(ratio)} is above 36%. Prioritize aggressive debt payoff."
        )

    savings_rate = cash_flow.savings_rate
    if savings_rate is not None:
        if savings_rate < LOW_SAVINGS_RATE:
            recommendations.append(
                "Savings rate is below the recommended 10-15%. Look for ways to reduce expenses or increase income."
            )
        elif savings_rate > STRONG_SAVINGS_RATE:
            recommendations.append(
                "Excellent savings rate! Consider optimizing investment allocation for better returns."
            )

    if (
        assets.crypto.total_value > assets.total_value * CRYPTO_ALLOCATION_SHARE
        and assets.total_value > CRYPTO_MIN_TOTAL_ASSETS
    ):
        recommendations.append(
            "Crypto allocation may be high for a diversified portfolio. "
            "Consider rebalancing into traditional investments."
        )

    if goals.primary != EMERGENCY_FUND_GOAL and cash_flow.monthly_expenses:
        target = cash_flow.monthly_expenses * EMERGENCY_FUND_MONTHS
        recommendations.append(
            f"Build an emergency fund: aim for {format_currency(target)} "
            f"({EMERGENCY_FUND_MONTHS} months of expenses)."
        )

    return recommendations


def generate_summary(
    assets: AssetProfile,
    liabilities: LiabilityProfile,
    cash_flow: CashFlowProfile,
    goals: GoalsProfile,
) -> str:
    net_worth = assets.total_value - liabilities.total_debt
    sentences = [
        f"Net worth: {format_currency(net_worth)} "
        f"(Assets: {format_currency(assets.total_value)}, Debts: {format_currency(liabilities.total_debt)})."
    ]

    if cash_flow.monthly_income is not None:
        income = f"Monthly income: {format_currency(cash_flow.monthly_income)}"
        if cash_flow.monthly_expenses is not None:
            income += (
                f", expenses: {format_currency(cash_flow.monthly_expenses)}"
                f", net cash flow: {format_currency(cash_flow.net_cash_flow)}"
            )
        sentences.append(income + ".")

    if liabilities.total_debt > 0:
        service = f"Debt service: {format_currency(cash_flow.total_debt_service)}/month"
        if cash_flow.debt_service_ratio is not None:
            service += f" ({format_percent(cash_flow.debt_service_ratio)} of income)"
        sentences.append(service + ".")

    if goals.primary:
        sentences.append(f"Primary financial goal: {humanize_key(goals.primary)}.")

    return " ".join(sentences)


def build_financial_profile(inputs: ProfileInputs) -> FinancialProfile:
    """
    Main entry point: aggregate everything the caller supplied into a profile.

    Pure function of its inputs; nothing is fetched or stored here.
    """
    assets = build_asset_profile(inputs.holdings, inputs.cash_assets)
    liabilities = build_liability_profile(inputs.instruments)
    cash_flow = build_cash_flow_profile(liabilities, inputs)
    goals = build_goals_profile(inputs.goals)

    return FinancialProfile(
        summary=generate_summary(assets, liabilities, cash_flow, goals),
        net_worth=assets.total_value - liabilities.total_debt,
        assets=assets,
        liabilities=liabilities,
        cash_flow=cash_flow,
        goals=goals,
        recommendations=generate_recommendations(assets, liabilities, cash_flow, goals),
    )
