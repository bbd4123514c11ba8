"""Journal preferences API."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlmodel import Session

from tradejournal.database import get_session
from tradejournal.schemas.preference import PreferenceRead, PreferenceUpdate
from tradejournal.services.preferences import get_preference

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


@router.get("", response_model=PreferenceRead)
def read_preferences(session: Session = Depends(get_session)):
    return get_preference(session)


@router.put("", response_model=PreferenceRead)
def update_preferences(data: PreferenceUpdate, session: Session = Depends(get_session)):
    """Only affects trades created afterwards; existing targets are never re-derived."""
    pref = get_preference(session)
    pref.target_position_size = data.target_position_size
    pref.updated_at = datetime.now(timezone.utc)
    session.add(pref)
    session.commit()
    session.refresh(pref)
    return pref
