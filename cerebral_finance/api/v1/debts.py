"""/v1/debts - loans and other non-revolving debts"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cerebral_finance.api.dependencies import get_user_id, parse_record_id
from cerebral_finance.api.v1.schemas import DebtCreate, DebtResponse, DebtUpdate, MessageResponse, PaymentFiguresResponse
from cerebral_finance.domain.amortization import compute_payment_schedule
from cerebral_finance.domain.exceptions import RecordNotFoundError
from cerebral_finance.domain.models import InstrumentKind, NeverAmortizes
from cerebral_finance.infrastructure.database.models import Debt
from cerebral_finance.infrastructure.database.repositories import DebtRepository, debt_to_instrument
from cerebral_finance.infrastructure.database.session import get_db
from cerebral_finance.infrastructure.observability.metrics import record_never_amortizes

router = APIRouter()


def _debt_response(debt: Debt) -> DebtResponse:
    schedule = compute_payment_schedule(debt_to_instrument(debt))
    if isinstance(schedule.total_interest, NeverAmortizes):
        record_never_amortizes(InstrumentKind.LOAN.value)

    figures = PaymentFiguresResponse.from_domain(schedule.payment, schedule.total_interest)
    return DebtResponse(
        **figures.model_dump(),
        id=str(debt.id),
        name=debt.name,
        type=debt.type,
        balance=debt.balance,
        interest_rate=debt.interest_rate,
        created_at=debt.created_at.isoformat(),
    )


@router.get("/debts", response_model=List[DebtResponse])
def list_debts(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    return [_debt_response(debt) for debt in DebtRepository(db, user_id).list_all()]


@router.post("/debts", response_model=DebtResponse, status_code=201)
def create_debt(request_body: DebtCreate, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    """
    Record a loan. With no minimum_payment, the card-style minimum
    (max of 2%, interest + $10, $15) is used for projections.
    """
    debt = DebtRepository(db, user_id).create(request_body.model_dump())
    db.commit()
    return _debt_response(debt)


@router.put("/debts/{record_id}", response_model=DebtResponse)
def update_debt(
    record_id: str,
    request_body: DebtUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    debt_id = parse_record_id(record_id)
    # minimum_payment may be cleared back to the computed minimum; other fields may not be nulled
    fields = {
        name: value
        for name, value in request_body.model_dump(exclude_unset=True).items()
        if value is not None or name == "minimum_payment"
    }
    try:
        debt = DebtRepository(db, user_id).update(debt_id, fields)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return _debt_response(debt)


@router.delete("/debts/{record_id}", response_model=MessageResponse)
def delete_debt(record_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    debt_id = parse_record_id(record_id)
    try:
        DebtRepository(db, user_id).delete(debt_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return MessageResponse(message="Debt deleted successfully")
