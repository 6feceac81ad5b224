"""POST /v1/calculations/minimum-payment - stateless amortization calculator"""

import logging
from fastapi import APIRouter, HTTPException

from cerebral_finance.api.v1.schemas import MinimumPaymentRequest, PaymentFiguresResponse
from cerebral_finance.domain.amortization import compute_minimum_payment, compute_total_interest_if_minimum_only
from cerebral_finance.domain.exceptions import InvalidInputError
from cerebral_finance.domain.models import NeverAmortizes
from cerebral_finance.infrastructure.observability.metrics import record_never_amortizes

router = APIRouter()


@router.post("/calculations/minimum-payment", response_model=PaymentFiguresResponse)
def calculate_minimum_payment(request_body: MinimumPaymentRequest):
    """
    Minimum payment, interest/principal split, payoff time and total interest
    for a single balance. Nothing is stored.
    """
    try:
        figures = compute_minimum_payment(
            request_body.balance,
            request_body.apr,
            request_body.minimum_payment_percentage,
        )
        total_interest = compute_total_interest_if_minimum_only(
            request_body.balance,
            request_body.apr,
            figures.minimum_payment,
        )
    except InvalidInputError as e:
        logging.warning(f"Invalid calculator input: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    if isinstance(total_interest, NeverAmortizes):
        record_never_amortizes("calculator")

    return PaymentFiguresResponse.from_domain(figures, total_interest)
