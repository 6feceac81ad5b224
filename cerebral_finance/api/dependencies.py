"""Dependency injection for FastAPI endpoints"""

import uuid
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from cerebral_finance.config import settings
from cerebral_finance.domain.ports import StateStore
from cerebral_finance.infrastructure.database.repositories import ClientStateRepository
from cerebral_finance.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Resolve the caller's identity; no real auth, so fall back to the demo user"""
    return x_user_id or settings.default_user_id


def get_state_store(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)) -> StateStore:
    """Provide the client-state store for this user"""
    return ClientStateRepository(db, user_id)


def parse_record_id(record_id: str) -> uuid.UUID:
    """Path IDs are UUIDs; anything else is a client error"""
    try:
        return uuid.UUID(record_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid ID format")
