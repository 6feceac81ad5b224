"""/v1/financial-profile - aggregated profile as JSON, narrative text or download"""

import time
import logging
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from cerebral_finance.api.dependencies import get_request_id, get_state_store, get_user_id
from cerebral_finance.api.v1.schemas import (
    AssetsSchema,
    CashFlowSchema,
    ClientData,
    CreditCardBreakdownSchema,
    CryptoBreakdownSchema,
    FinancialProfileResponse,
    GoalsProfileSchema,
    HoldingSchema,
    InstrumentSchema,
    LiabilitiesSchema,
    LoanBreakdownSchema,
    NarrativeRequest,
    NarrativeResponse,
    interest_to_json,
)
from cerebral_finance.config import settings
from cerebral_finance.domain.exceptions import InvalidInputError
from cerebral_finance.domain.models import FinancialProfile, InstrumentSchedule, NeverAmortizes, ProfileInputs
from cerebral_finance.domain.narrative import render_narrative
from cerebral_finance.domain.ports import StateStore
from cerebral_finance.domain.profile import build_financial_profile
from cerebral_finance.infrastructure.database.repositories import (
    CreditCardRepository,
    CryptoAssetRepository,
    DebtRepository,
    GoalsRepository,
    asset_to_holding,
    card_to_instrument,
    debt_to_instrument,
    goals_to_domain,
)
from cerebral_finance.infrastructure.database.session import get_db
from cerebral_finance.infrastructure.observability.logging import log_never_amortizes, log_profile_generated
from cerebral_finance.infrastructure.observability.metrics import record_never_amortizes, record_profile

router = APIRouter()


def gather_profile_inputs(db: Session, user_id: str, client_data: ClientData) -> ProfileInputs:
    """
    Merge stored records with client-local data.

    Client loans typed credit_card are skipped; cards come from the
    credit_card table only.
    """
    cards = CreditCardRepository(db, user_id).list_active()
    debts = DebtRepository(db, user_id).list_all()
    assets = CryptoAssetRepository(db, user_id).list_active()
    goals_row = GoalsRepository(db, user_id).get_current()

    instruments = [card_to_instrument(card) for card in cards]
    instruments += [debt_to_instrument(debt) for debt in debts]
    instruments += [loan.to_domain() for loan in client_data.loans if not loan.is_credit_card]

    return ProfileInputs(
        instruments=instruments,
        holdings=[asset_to_holding(asset) for asset in assets],
        expenses=[expense.to_domain() for expense in client_data.expenses],
        monthly_income=client_data.balances.monthly_income,
        monthly_expenses=client_data.balances.monthly_expenses,
        cash_assets=client_data.custom_assets.bank,
        goals=goals_to_domain(goals_row) if goals_row else None,
    )


def _instrument_schema(schedule: InstrumentSchedule) -> InstrumentSchema:
    instrument = schedule.instrument
    return InstrumentSchema(
        name=instrument.name,
        balance=instrument.balance,
        apr=instrument.apr,
        credit_limit=instrument.credit_limit,
        loan_type=instrument.loan_type,
        minimum_payment=schedule.payment.minimum_payment,
        payoff_time_months=schedule.payment.payoff_time_months,
        total_interest_if_minimum_only=interest_to_json(schedule.total_interest),
    )


def profile_to_response(profile: FinancialProfile) -> FinancialProfileResponse:
    assets, liabilities, cash_flow, goals = profile.assets, profile.liabilities, profile.cash_flow, profile.goals
    cards, loans = liabilities.credit_cards, liabilities.other_debts

    return FinancialProfileResponse(
        summary=profile.summary,
        net_worth=profile.net_worth,
        assets=AssetsSchema(
            total_value=assets.total_value,
            cash=assets.cash,
            crypto=CryptoBreakdownSchema(
                total_value=assets.crypto.total_value,
                total_cost=assets.crypto.total_cost,
                gain_loss=assets.crypto.gain_loss,
                gain_loss_percentage=assets.crypto.gain_loss_percentage,
                assets=[
                    HoldingSchema(
                        symbol=h.symbol,
                        quantity=h.quantity,
                        current_value=h.current_value,
                        gain_loss=h.gain_loss,
                        gain_loss_percentage=h.gain_loss_percentage,
                    )
                    for h in assets.crypto.assets
                ],
            ),
            description=assets.description,
        ),
        liabilities=LiabilitiesSchema(
            total_debt=liabilities.total_debt,
            total_minimum_payment=liabilities.total_minimum_payment,
            total_interest_if_minimum=interest_to_json(liabilities.total_interest_if_minimum),
            average_apr=liabilities.average_apr,
            credit_cards=CreditCardBreakdownSchema(
                total_balance=cards.total_balance,
                total_credit_limit=cards.total_credit_limit,
                total_minimum_payment=cards.total_minimum_payment,
                total_interest_if_minimum=interest_to_json(cards.total_interest_if_minimum),
                average_apr=cards.average_apr,
                utilization_rate=cards.utilization_rate,
                cards=[_instrument_schema(s) for s in cards.cards],
            ),
            other_debts=LoanBreakdownSchema(
                total_balance=loans.total_balance,
                total_minimum_payment=loans.total_minimum_payment,
                total_interest_if_minimum=interest_to_json(loans.total_interest_if_minimum),
                loans=[_instrument_schema(s) for s in loans.loans],
            ),
            description=liabilities.description,
        ),
        cash_flow=CashFlowSchema(
            monthly_income=cash_flow.monthly_income,
            monthly_expenses=cash_flow.monthly_expenses,
            total_debt_service=cash_flow.total_debt_service,
            net_cash_flow=cash_flow.net_cash_flow,
            debt_service_ratio=cash_flow.debt_service_ratio,
            savings_rate=cash_flow.savings_rate,
            expense_breakdown={k: float(v) for k, v in cash_flow.expense_breakdown.items()},
            description=cash_flow.description,
        ),
        goals=GoalsProfileSchema(
            primary=goals.primary,
            secondary=goals.secondary,
            timeframes=goals.timeframes,
            emergency_fund_target=goals.emergency_fund_target,
            description=goals.description,
        ),
        recommendations=profile.recommendations,
    )


def _generate(
    request: Request,
    db: Session,
    user_id: str,
    client_data: Optional[ClientData],
    store: StateStore,
    output_format: str,
) -> FinancialProfile:
    """
    Build a profile and record metrics/logs around it.

    Flow:
    1. Use client data from the request body, else the stored client state
    2. Load stored cards, debts, holdings and goals
    3. Aggregate into a profile
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        if client_data is None:
            client_data = ClientData.from_store(store)

        inputs = gather_profile_inputs(db, user_id, client_data)
        profile = build_financial_profile(inputs)

    except ValidationError as e:
        logging.warning(f"Stored client state is invalid: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail="Stored client state is invalid")

    except InvalidInputError as e:
        logging.warning(f"Invalid financial data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    schedules: List[InstrumentSchedule] = profile.liabilities.credit_cards.cards + profile.liabilities.other_debts.loans
    for schedule in schedules:
        if isinstance(schedule.total_interest, NeverAmortizes):
            record_never_amortizes(schedule.instrument.kind.value)
            log_never_amortizes(request_id, user_id, schedule.instrument.name, schedule.instrument.kind.value)

    duration_ms = (time.time() - start_time) * 1000
    record_profile(output_format, len(profile.recommendations))
    log_profile_generated(request_id, user_id, output_format, len(profile.recommendations), duration_ms)

    return profile


@router.get("/financial-profile", response_model=FinancialProfileResponse)
def get_financial_profile(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
    store: StateStore = Depends(get_state_store),
):
    """Structured profile: summary, assets, liabilities, cash flow, goals, recommendations"""
    profile = _generate(request, db, user_id, None, store, "json")
    return profile_to_response(profile)


def _narrative_response(request: Request, narrative: str):
    """Plain text when the client asks for it, otherwise a JSON envelope"""
    if "text/plain" in request.headers.get("accept", ""):
        return PlainTextResponse(narrative)
    return NarrativeResponse(
        profile=narrative,
        generated_at=datetime.now(timezone.utc).isoformat(),
        disclaimer=settings.profile_disclaimer,
    )


@router.get("/financial-profile/llm", response_model=None)
def get_narrative_profile(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
    store: StateStore = Depends(get_state_store),
):
    """Six-section narrative built from stored records and stored client state"""
    profile = _generate(request, db, user_id, None, store, "narrative")
    return _narrative_response(request, render_narrative(profile))


@router.post("/financial-profile/llm", response_model=None)
def post_narrative_profile(
    request: Request,
    request_body: Optional[NarrativeRequest] = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
    store: StateStore = Depends(get_state_store),
):
    """Narrative with client-local data supplied in the body instead of the store"""
    client_data = request_body.client_data if request_body else None
    profile = _generate(request, db, user_id, client_data, store, "narrative")
    return _narrative_response(request, render_narrative(profile))


@router.get("/financial-profile/download", response_class=PlainTextResponse)
def download_financial_profile(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
    store: StateStore = Depends(get_state_store),
):
    """Narrative as a .txt attachment named with today's date"""
    profile = _generate(request, db, user_id, None, store, "download")
    filename = f"financial-profile-{datetime.now(timezone.utc).date().isoformat()}.txt"
    return PlainTextResponse(
        render_narrative(profile),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
