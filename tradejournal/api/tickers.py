"""CRUD API for tickers, plus the trades and charts logged against them."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from tradejournal.database import get_session
from tradejournal.models.chart import Chart
from tradejournal.models.ticker import Ticker
from tradejournal.models.trade import Trade
from tradejournal.schemas.chart import ChartRead
from tradejournal.schemas.ticker import TickerCreate, TickerUpdate, TickerRead
from tradejournal.schemas.trade import TradeRead

router = APIRouter(prefix="/api/tickers", tags=["tickers"])


def _symbol_taken(session: Session, symbol: str, exclude_id: int | None = None) -> bool:
    stmt = select(Ticker).where(Ticker.symbol == symbol)
    if exclude_id is not None:
        stmt = stmt.where(Ticker.id != exclude_id)
    return session.exec(stmt).first() is not None


@router.get("", response_model=list[TickerRead])
def list_tickers(
    search: str | None = None,
    limit: int = 100,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    stmt = select(Ticker).order_by(Ticker.symbol)
    if search:
        stmt = stmt.where(Ticker.symbol.contains(search.strip().upper()))  # type: ignore[attr-defined]
    stmt = stmt.offset(offset).limit(limit)
    return session.exec(stmt).all()


@router.post("", response_model=TickerRead, status_code=201)
def create_ticker(data: TickerCreate, session: Session = Depends(get_session)):
    if _symbol_taken(session, data.symbol):
        raise HTTPException(status_code=409, detail=f"Ticker {data.symbol} already exists")
    ticker = Ticker(**data.model_dump())
    session.add(ticker)
    session.commit()
    session.refresh(ticker)
    return ticker


@router.get("/{ticker_id}", response_model=TickerRead)
def get_ticker(ticker_id: int, session: Session = Depends(get_session)):
    ticker = session.get(Ticker, ticker_id)
    if not ticker:
        raise HTTPException(status_code=404, detail="Ticker not found")
    return ticker


@router.put("/{ticker_id}", response_model=TickerRead)
def update_ticker(
    ticker_id: int,
    data: TickerUpdate,
    session: Session = Depends(get_session),
):
    ticker = session.get(Ticker, ticker_id)
    if not ticker:
        raise HTTPException(status_code=404, detail="Ticker not found")

    update_data = data.model_dump(exclude_unset=True)
    symbol = update_data.get("symbol")
    if symbol and _symbol_taken(session, symbol, exclude_id=ticker_id):
        raise HTTPException(status_code=409, detail=f"Ticker {symbol} already exists")

    for key, value in update_data.items():
        setattr(ticker, key, value)
    ticker.updated_at = datetime.now(timezone.utc)

    session.add(ticker)
    session.commit()
    session.refresh(ticker)
    return ticker


@router.delete("/{ticker_id}", status_code=204)
def delete_ticker(ticker_id: int, session: Session = Depends(get_session)):
    ticker = session.get(Ticker, ticker_id)
    if not ticker:
        raise HTTPException(status_code=404, detail="Ticker not found")

    has_trades = session.exec(select(Trade).where(Trade.ticker_id == ticker_id)).first()
    has_charts = session.exec(select(Chart).where(Chart.ticker_id == ticker_id)).first()
    if has_trades or has_charts:
        raise HTTPException(
            status_code=409,
            detail="Cannot delete ticker with journaled trades or charts. Delete them first.",
        )

    session.delete(ticker)
    session.commit()


@router.get("/{ticker_id}/trades", response_model=list[TradeRead])
def ticker_trades(ticker_id: int, session: Session = Depends(get_session)):
    """All trades for a ticker, newest entry first."""
    if not session.get(Ticker, ticker_id):
        raise HTTPException(status_code=404, detail="Ticker not found")
    stmt = (
        select(Trade)
        .where(Trade.ticker_id == ticker_id)
        .order_by(Trade.entry_date.desc())  # type: ignore[attr-defined]
    )
    return session.exec(stmt).all()


@router.get("/{ticker_id}/charts", response_model=list[ChartRead])
def ticker_charts(ticker_id: int, session: Session = Depends(get_session)):
    """All charts for a ticker, newest first."""
    if not session.get(Ticker, ticker_id):
        raise HTTPException(status_code=404, detail="Ticker not found")
    stmt = (
        select(Chart)
        .where(Chart.ticker_id == ticker_id)
        .order_by(Chart.timestamp.desc())  # type: ignore[attr-defined]
    )
    return session.exec(stmt).all()
