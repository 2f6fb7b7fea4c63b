from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from stockwatch.models.watched_stock import WatchedStock, utcnow
from stockwatch.utils.errors import NotFoundError
from stockwatch.utils.logger import logger


class WatchlistStore:
    """Upsert, list and delete of watchlist records."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def upsert(self, symbol: str, name: Optional[str], price: Optional[float],
               change: Optional[float]) -> WatchedStock:
        """Insert the symbol, or refresh name/price/change if it is already watched."""
        with self.session_factory() as session:
            stock = session.scalars(
                select(WatchedStock).where(WatchedStock.symbol == symbol)
            ).first()
            if stock is None:
                stock = WatchedStock(symbol=symbol, name=name, price=price, change=change)
                session.add(stock)
                action = "Created"
            else:
                stock.name = name
                stock.price = price
                stock.change = change
                # Bump even when the values are unchanged so re-saves reorder the list.
                stock.updated_at = utcnow()
                action = "Updated"
            session.commit()
            session.refresh(stock)

        logger.info(f"✅ {action} watchlist record for {symbol} (id={stock.id})")
        return stock

    def list_all(self) -> List[WatchedStock]:
        with self.session_factory() as session:
            stocks = session.scalars(
                select(WatchedStock).order_by(
                    WatchedStock.updated_at.desc(), WatchedStock.id.desc()
                )
            ).all()
        logger.debug(f"Loaded {len(stocks)} watchlist records")
        return list(stocks)

    def delete(self, stock_id: int) -> WatchedStock:
        with self.session_factory() as session:
            stock = session.get(WatchedStock, stock_id)
            if stock is None:
                logger.warning(f"❌ Stock with ID {stock_id} not found")
                raise NotFoundError(f"Stock with ID {stock_id} not found", {"id": stock_id})
            session.delete(stock)
            session.commit()

        logger.info(f"✅ Deleted watchlist record {stock_id} ({stock.symbol})")
        return stock
