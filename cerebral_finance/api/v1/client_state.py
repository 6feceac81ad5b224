"""/v1/client-state/{key} - server-side home for data the dashboard keeps locally"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cerebral_finance.api.dependencies import get_state_store
from cerebral_finance.api.v1.schemas import ClientStatePayload, ClientStateResponse
from cerebral_finance.domain.ports import CLIENT_STATE_KEYS, StateStore
from cerebral_finance.infrastructure.database.session import get_db

router = APIRouter()


def _check_key(key: str) -> str:
    if key not in CLIENT_STATE_KEYS:
        raise HTTPException(status_code=404, detail=f"Unknown state key: {key}")
    return key


@router.get("/client-state/{key}", response_model=ClientStateResponse)
def load_client_state(key: str, store: StateStore = Depends(get_state_store)):
    """Stored value, or null when nothing was saved under this key"""
    return ClientStateResponse(key=_check_key(key), value=store.load(key))


@router.put("/client-state/{key}", response_model=ClientStateResponse)
def save_client_state(
    key: str,
    request_body: ClientStatePayload,
    store: StateStore = Depends(get_state_store),
    db: Session = Depends(get_db),
):
    store.save(_check_key(key), request_body.value)
    db.commit()
    return ClientStateResponse(key=key, value=request_body.value)
