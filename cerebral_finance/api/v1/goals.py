"""/v1/goals - user goals; the most recent set is the current one"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cerebral_finance.api.dependencies import get_user_id, parse_record_id
from cerebral_finance.api.v1.schemas import GoalsCreate, GoalsResponse, GoalsUpdate, MessageResponse
from cerebral_finance.domain.exceptions import RecordNotFoundError
from cerebral_finance.infrastructure.database.models import UserGoals
from cerebral_finance.infrastructure.database.repositories import GoalsRepository
from cerebral_finance.infrastructure.database.session import get_db

router = APIRouter()


def _goals_response(row: UserGoals) -> GoalsResponse:
    return GoalsResponse(
        id=str(row.id),
        primary_goal=row.primary_goal,
        secondary_goals=list(row.secondary_goals or []),
        target_savings_rate=row.target_savings_rate,
        emergency_fund_target=row.emergency_fund_target,
        debt_payoff_timeframe=row.debt_payoff_timeframe,
        risk_tolerance=row.risk_tolerance,
        monthly_income=row.monthly_income,
        monthly_expenses=row.monthly_expenses,
        retirement_age=row.retirement_age,
        major_purchase_target=row.major_purchase_target,
        major_purchase_amount=row.major_purchase_amount,
        major_purchase_timeframe=row.major_purchase_timeframe,
        notes=row.notes,
        created_at=row.created_at.isoformat(),
    )


@router.get("/goals", response_model=Optional[GoalsResponse])
def get_current_goals(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    """Most recent goals, or null when none have been set"""
    row = GoalsRepository(db, user_id).get_current()
    return _goals_response(row) if row else None


@router.post("/goals", response_model=GoalsResponse, status_code=201)
def create_goals(request_body: GoalsCreate, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    row = GoalsRepository(db, user_id).create(request_body.model_dump())
    db.commit()
    return _goals_response(row)


@router.put("/goals/{record_id}", response_model=GoalsResponse)
def update_goals(
    record_id: str,
    request_body: GoalsUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    goals_id = parse_record_id(record_id)
    fields = request_body.model_dump(exclude_unset=True)
    if fields.get("primary_goal", "") is None:
        raise HTTPException(status_code=422, detail="primary_goal cannot be cleared")
    try:
        row = GoalsRepository(db, user_id).update(goals_id, fields)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return _goals_response(row)


@router.delete("/goals/{record_id}", response_model=MessageResponse)
def delete_goals(record_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    goals_id = parse_record_id(record_id)
    try:
        GoalsRepository(db, user_id).delete(goals_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return MessageResponse(message="User goals deleted successfully")
