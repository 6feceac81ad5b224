"""/v1/credit-cards - credit card CRUD with derived payment figures"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cerebral_finance.api.dependencies import get_user_id, parse_record_id
from cerebral_finance.api.v1.schemas import (
    CreditCardCreate,
    CreditCardResponse,
    CreditCardUpdate,
    MessageResponse,
    PaymentFiguresResponse,
)
from cerebral_finance.domain.amortization import compute_payment_schedule
from cerebral_finance.domain.exceptions import RecordNotFoundError
from cerebral_finance.domain.models import InstrumentKind, NeverAmortizes
from cerebral_finance.infrastructure.database.models import CreditCard
from cerebral_finance.infrastructure.database.repositories import CreditCardRepository, card_to_instrument
from cerebral_finance.infrastructure.database.session import get_db
from cerebral_finance.infrastructure.observability.metrics import record_never_amortizes

router = APIRouter()


def _card_response(card: CreditCard) -> CreditCardResponse:
    """Stored card plus minimum payment, payoff time, utilization and available credit"""
    instrument = card_to_instrument(card)
    schedule = compute_payment_schedule(instrument)
    if isinstance(schedule.total_interest, NeverAmortizes):
        record_never_amortizes(InstrumentKind.CREDIT_CARD.value)

    limit = instrument.credit_limit
    utilization = instrument.balance / limit * 100 if limit else 0
    figures = PaymentFiguresResponse.from_domain(schedule.payment, schedule.total_interest)

    return CreditCardResponse(
        **figures.model_dump(),
        id=str(card.id),
        name=card.name,
        last_four_digits=card.last_four_digits,
        bank=card.bank,
        credit_limit=card.credit_limit,
        current_balance=card.current_balance,
        apr=card.apr,
        minimum_payment_percentage=card.minimum_payment_percentage,
        annual_fee=card.annual_fee,
        rewards_program=card.rewards_program,
        reward_type=card.reward_type,
        cashback_rate=card.cashback_rate,
        points_balance=card.points_balance,
        utilization=utilization,
        available_credit=limit - instrument.balance,
        created_at=card.created_at.isoformat(),
    )


@router.get("/credit-cards", response_model=List[CreditCardResponse])
def list_credit_cards(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    """Active cards, newest first"""
    return [_card_response(card) for card in CreditCardRepository(db, user_id).list_active()]


@router.post("/credit-cards", response_model=CreditCardResponse, status_code=201)
def create_credit_card(
    request_body: CreditCardCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    card = CreditCardRepository(db, user_id).create(request_body.model_dump())
    db.commit()
    return _card_response(card)


@router.put("/credit-cards/{record_id}", response_model=CreditCardResponse)
def update_credit_card(
    record_id: str,
    request_body: CreditCardUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    card_id = parse_record_id(record_id)
    try:
        card = CreditCardRepository(db, user_id).update(card_id, request_body.model_dump(exclude_unset=True, exclude_none=True))
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return _card_response(card)


@router.delete("/credit-cards/{record_id}", response_model=MessageResponse)
def delete_credit_card(record_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    """Soft delete: the card stops counting toward profiles"""
    card_id = parse_record_id(record_id)
    try:
        CreditCardRepository(db, user_id).deactivate(card_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return MessageResponse(message="Credit card deleted successfully")
