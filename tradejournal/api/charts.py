"""Chart journal API: CRUD, filtering and sequential navigation."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from tradejournal.api.deps import get_ticker_rollup
from tradejournal.database import get_session
from tradejournal.models.chart import Chart
from tradejournal.models.ticker import Ticker
from tradejournal.schemas.chart import ChartCreate, ChartRead, ChartUpdate
from tradejournal.services.chart_measurements import derive_measurements
from tradejournal.services.ticker_rollup import TickerRollup
from tradejournal.utils.constants import CHART_TIMEFRAMES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/charts", tags=["charts"])


def _get_chart(session: Session, chart_id: int) -> Chart:
    chart = session.get(Chart, chart_id)
    if not chart:
        raise HTTPException(status_code=404, detail="Chart not found")
    return chart


@router.get("", response_model=list[ChartRead])
def list_charts(
    ticker_id: int | None = None,
    timeframe: str | None = None,
    tag: str | None = None,
    limit: int = 20,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    """Charts newest first, optionally narrowed by ticker, timeframe or tag."""
    if timeframe is not None and timeframe not in CHART_TIMEFRAMES:
        raise HTTPException(status_code=422, detail=f"Unknown timeframe: {timeframe}")

    stmt = select(Chart).order_by(Chart.timestamp.desc(), Chart.id.desc())  # type: ignore[attr-defined]
    if ticker_id is not None:
        stmt = stmt.where(Chart.ticker_id == ticker_id)
    if timeframe is not None:
        stmt = stmt.where(Chart.timeframe == timeframe)

    if tag is None:
        return session.exec(stmt.offset(offset).limit(limit)).all()

    # JSON containment is dialect-specific; tags are matched in Python
    wanted = tag.strip()
    charts = [c for c in session.exec(stmt).all() if wanted in (c.tags or [])]
    return charts[offset:offset + limit]


@router.post("", response_model=ChartRead, status_code=201)
async def create_chart(
    data: ChartCreate,
    session: Session = Depends(get_session),
    rollup: TickerRollup = Depends(get_ticker_rollup),
):
    if not session.get(Ticker, data.ticker_id):
        raise HTTPException(status_code=404, detail="Ticker not found")

    payload = data.model_dump(exclude={"measurements", "timestamp"})
    chart = Chart(
        **payload,
        measurements=derive_measurements(m.model_dump() for m in data.measurements),
    )
    if data.timestamp is not None:
        chart.timestamp = data.timestamp

    session.add(chart)
    session.commit()
    session.refresh(chart)
    logger.info(f"Chart {chart.id} created for ticker {chart.ticker_id} ({chart.timeframe})")

    await rollup.notify(chart.ticker_id)
    return chart


@router.get("/{chart_id}", response_model=ChartRead)
def get_chart(chart_id: int, session: Session = Depends(get_session)):
    return _get_chart(session, chart_id)


@router.get("/{chart_id}/next", response_model=ChartRead)
def next_chart(chart_id: int, session: Session = Depends(get_session)):
    """The chart logged after this one, wrapping around to the first."""
    _get_chart(session, chart_id)
    following = session.exec(
        select(Chart).where(Chart.id > chart_id).order_by(Chart.id).limit(1)  # type: ignore[operator]
    ).first()
    return following or session.exec(select(Chart).order_by(Chart.id).limit(1)).first()


@router.get("/{chart_id}/previous", response_model=ChartRead)
def previous_chart(chart_id: int, session: Session = Depends(get_session)):
    """The chart logged before this one, wrapping around to the last."""
    _get_chart(session, chart_id)
    preceding = session.exec(
        select(Chart).where(Chart.id < chart_id).order_by(Chart.id.desc()).limit(1)  # type: ignore[operator,attr-defined]
    ).first()
    return preceding or session.exec(
        select(Chart).order_by(Chart.id.desc()).limit(1)  # type: ignore[attr-defined]
    ).first()


@router.put("/{chart_id}", response_model=ChartRead)
async def update_chart(
    chart_id: int,
    data: ChartUpdate,
    session: Session = Depends(get_session),
    rollup: TickerRollup = Depends(get_ticker_rollup),
):
    chart = _get_chart(session, chart_id)

    update_data = data.model_dump(exclude_unset=True, exclude={"measurements"})
    if "ticker_id" in update_data:
        if update_data["ticker_id"] is None or not session.get(Ticker, update_data["ticker_id"]):
            raise HTTPException(status_code=404, detail="Ticker not found")
    for field in ("timestamp", "timeframe", "tags"):
        if field in update_data and update_data[field] is None:
            raise HTTPException(status_code=422, detail=f"{field} cannot be null")

    previous_ticker_id = chart.ticker_id
    for key, value in update_data.items():
        setattr(chart, key, value)
    if data.measurements is not None:
        chart.measurements = derive_measurements(m.model_dump() for m in data.measurements)
    chart.updated_at = datetime.now(timezone.utc)

    session.add(chart)
    session.commit()
    session.refresh(chart)

    await rollup.notify(chart.ticker_id)
    if previous_ticker_id != chart.ticker_id:
        await rollup.notify(previous_ticker_id)
    return chart


@router.delete("/{chart_id}", status_code=204)
async def delete_chart(
    chart_id: int,
    session: Session = Depends(get_session),
    rollup: TickerRollup = Depends(get_ticker_rollup),
):
    chart = _get_chart(session, chart_id)
    ticker_id = chart.ticker_id
    session.delete(chart)
    session.commit()
    await rollup.notify(ticker_id)
