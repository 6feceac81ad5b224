"""Credit card amortization - minimum payment, payoff time and interest projections"""

import math
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from cerebral_finance.domain.exceptions import InvalidInputError
from cerebral_finance.domain.models import (
    NEVER_AMORTIZES,
    FiniteInterest,
    Instrument,
    InstrumentSchedule,
    InterestProjection,
    PaymentFigures,
)

Number = Union[Decimal, float, int, str]

ZERO = Decimal("0")
CENT = Decimal("0.01")

DEFAULT_MINIMUM_PERCENTAGE = Decimal("0.02")
INTEREST_PLUS_FLOOR = Decimal("10")  # minimum covers interest plus $10 of principal
ABSOLUTE_MINIMUM_PAYMENT = Decimal("15")

PAYOFF_FLOOR = Decimal("0.01")  # balance treated as paid off
MAX_SIMULATED_MONTHS = 500

# Inputs stay below the Numeric(14, 2) ceiling so every derived figure quantizes to cents
MAX_INPUT = Decimal("1e12")


def _validated(value: Number, name: str) -> Decimal:
    """Coerce to Decimal, rejecting negative, NaN, infinite and oversized values"""
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidInputError(f"{name} is not a number: {value!r}") from e

    if not number.is_finite():
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}")
    if number < 0:
        raise InvalidInputError(f"{name} must not be negative, got {value!r}")
    if number >= MAX_INPUT:
        raise InvalidInputError(f"{name} must be below {MAX_INPUT:,.0f}, got {value!r}")
    return number


def to_cents(amount: Decimal) -> Decimal:
    """Round half-up to whole cents"""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def monthly_rate(apr: Decimal) -> Decimal:
    """APR percent -> monthly periodic rate (18.99 -> 0.015825)"""
    return apr / 100 / 12


def amortizes(balance: Decimal, rate: Decimal, payment: Decimal) -> bool:
    """True when one payment exceeds the interest accruing on balance"""
    return payment > balance * rate


def payoff_months(balance: Decimal, rate: Decimal, payment: Decimal) -> Optional[int]:
    """
    Months to clear balance at a constant payment, rounded up.

    Closed form: n = -ln(1 - B*r/P) / ln(1 + r). At r == 0 this degenerates
    to B / P. Returns None when the payment never exceeds accruing interest.
    """
    if balance <= 0:
        return 0
    if not amortizes(balance, rate, payment):
        return None
    if rate == 0:
        return int((balance / payment).to_integral_value(rounding=ROUND_CEILING))

    ratio = float(balance * rate / payment)
    months = -math.log(1 - ratio) / math.log1p(float(rate))
    return math.ceil(months)


def compute_minimum_payment(
    balance: Number,
    apr: Number,
    minimum_percentage: Number = DEFAULT_MINIMUM_PERCENTAGE,
) -> PaymentFigures:
    """
    Calculate the minimum payment due on a revolving balance.

    Minimum payment is the largest of three floors:
    - issuer percentage of balance (default 2%)
    - monthly interest plus $10, so some principal is always repaid
    - flat $15

    Example:
        balance=1000, apr=18.99, pct=0.02
        interest = 15.825, pct floor = 20, interest floor = 25.825
        minimum = 25.83, principal = 10.00
    """
    balance = _validated(balance, "balance")
    apr = _validated(apr, "apr")
    minimum_percentage = _validated(minimum_percentage, "minimum_percentage")

    if balance <= 0:
        return PaymentFigures(
            minimum_payment=ZERO,
            interest_portion=ZERO,
            principal_portion=ZERO,
            payoff_time_months=0,
        )

    rate = monthly_rate(apr)
    monthly_interest = balance * rate
    percentage_minimum = balance * minimum_percentage

    minimum_payment = max(
        percentage_minimum,
        monthly_interest + INTEREST_PLUS_FLOOR,
        ABSOLUTE_MINIMUM_PAYMENT,
    )
    principal_portion = max(ZERO, minimum_payment - monthly_interest)

    payoff_time = payoff_months(balance, rate, minimum_payment) if principal_portion > 0 else None

    return PaymentFigures(
        minimum_payment=to_cents(minimum_payment),
        interest_portion=to_cents(monthly_interest),
        principal_portion=to_cents(principal_portion),
        payoff_time_months=payoff_time,
    )


def compute_fixed_payment(balance: Number, apr: Number, payment: Number) -> PaymentFigures:
    """Payment split for a loan with a contractual monthly payment"""
    balance = _validated(balance, "balance")
    apr = _validated(apr, "apr")
    payment = _validated(payment, "payment")

    if balance <= 0:
        return PaymentFigures(ZERO, ZERO, ZERO, 0)

    rate = monthly_rate(apr)
    monthly_interest = balance * rate
    principal_portion = max(ZERO, payment - monthly_interest)

    return PaymentFigures(
        minimum_payment=to_cents(payment),
        interest_portion=to_cents(monthly_interest),
        principal_portion=to_cents(principal_portion),
        payoff_time_months=payoff_months(balance, rate, payment),
    )


def compute_total_interest_if_minimum_only(
    balance: Number,
    apr: Number,
    minimum_payment: Number,
) -> InterestProjection:
    """
    Simulate month-by-month repayment at a constant payment and total the interest.

    Requirements:
    - NEVER_AMORTIZES as soon as a payment no longer covers accruing interest
    - Stop when the balance is within a cent of zero or after 500 months
    - Final partial month still accrues one month of interest on the remainder
    """
    balance = _validated(balance, "balance")
    apr = _validated(apr, "apr")
    payment = _validated(minimum_payment, "minimum_payment")

    if balance <= 0:
        return FiniteInterest(ZERO)

    rate = monthly_rate(apr)
    current_balance = balance
    total_interest = ZERO
    months = 0

    while current_balance > PAYOFF_FLOOR and months < MAX_SIMULATED_MONTHS:
        if not amortizes(current_balance, rate, payment):
            return NEVER_AMORTIZES

        interest = current_balance * rate
        total_interest += interest
        current_balance -= payment - interest
        months += 1

        if current_balance < payment:
            # Last sliver: remainder accrues one more month before it is cleared
            total_interest += max(current_balance, ZERO) * rate
            break

    return FiniteInterest(to_cents(total_interest))


def compute_payment_schedule(instrument: Instrument) -> InstrumentSchedule:
    """
    Payment figures and minimum-only interest projection for one card or loan.

    Loans with a contractual payment use it in place of the computed minimum.
    """
    if instrument.fixed_payment is not None:
        payment = compute_fixed_payment(instrument.balance, instrument.apr, instrument.fixed_payment)
    else:
        payment = compute_minimum_payment(
            instrument.balance,
            instrument.apr,
            instrument.minimum_payment_percentage,
        )

    total_interest = compute_total_interest_if_minimum_only(
        instrument.balance,
        instrument.apr,
        payment.minimum_payment,
    )

    return InstrumentSchedule(instrument=instrument, payment=payment, total_interest=total_interest)
