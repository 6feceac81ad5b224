"""/v1/crypto-assets - crypto holdings with gain/loss"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cerebral_finance.api.dependencies import get_user_id, parse_record_id
from cerebral_finance.api.v1.schemas import CryptoAssetCreate, CryptoAssetResponse, CryptoAssetUpdate, MessageResponse
from cerebral_finance.domain.exceptions import RecordNotFoundError
from cerebral_finance.infrastructure.database.models import CryptoAsset
from cerebral_finance.infrastructure.database.repositories import CryptoAssetRepository, asset_to_holding
from cerebral_finance.infrastructure.database.session import get_db

router = APIRouter()


def _asset_response(asset: CryptoAsset) -> CryptoAssetResponse:
    holding = asset_to_holding(asset)
    return CryptoAssetResponse(
        id=str(asset.id),
        symbol=asset.symbol,
        quantity=holding.quantity,
        average_cost=holding.average_cost,
        current_price=holding.current_price,
        platform=asset.platform,
        wallet_address=asset.wallet_address,
        total_value=holding.total_value,
        total_cost=holding.total_cost,
        gain_loss=holding.gain_loss,
        gain_loss_percentage=holding.gain_loss_percentage,
        created_at=asset.created_at.isoformat(),
    )


def _normalized(fields: dict) -> dict:
    """Tickers are stored upper-case"""
    if fields.get("symbol"):
        fields["symbol"] = fields["symbol"].strip().upper()
    return fields


@router.get("/crypto-assets", response_model=List[CryptoAssetResponse])
def list_crypto_assets(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    return [_asset_response(asset) for asset in CryptoAssetRepository(db, user_id).list_active()]


@router.post("/crypto-assets", response_model=CryptoAssetResponse, status_code=201)
def create_crypto_asset(
    request_body: CryptoAssetCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    asset = CryptoAssetRepository(db, user_id).create(_normalized(request_body.model_dump()))
    db.commit()
    return _asset_response(asset)


@router.put("/crypto-assets/{record_id}", response_model=CryptoAssetResponse)
def update_crypto_asset(
    record_id: str,
    request_body: CryptoAssetUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    asset_id = parse_record_id(record_id)
    fields = _normalized(request_body.model_dump(exclude_unset=True, exclude_none=True))
    try:
        asset = CryptoAssetRepository(db, user_id).update(asset_id, fields)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return _asset_response(asset)


@router.delete("/crypto-assets/{record_id}", response_model=MessageResponse)
def delete_crypto_asset(record_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    """Soft delete"""
    asset_id = parse_record_id(record_id)
    try:
        CryptoAssetRepository(db, user_id).deactivate(asset_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return MessageResponse(message="Crypto asset deleted successfully")
