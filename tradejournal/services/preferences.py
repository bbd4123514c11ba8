"""Journal preferences lookup."""

from sqlmodel import Session, select

from tradejournal.config import settings
from tradejournal.models.preference import Preference


def get_preference(session: Session) -> Preference:
    """Return the single preference row, creating it from settings on first use."""
    pref = session.exec(select(Preference).order_by(Preference.id)).first()
    if pref is None:
        pref = Preference(target_position_size=settings.default_target_position_size)
        session.add(pref)
        session.commit()
        session.refresh(pref)
    return pref
