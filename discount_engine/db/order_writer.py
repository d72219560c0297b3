"""Writes enriched orders to the orders table"""

from typing import Iterable, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from discount_engine.db.connection import create_db_engine
from discount_engine.db.models import Base, OrderRecord
from discount_engine.models.order import Order
from discount_engine.models.persist_result import PersistFailure, PersistResult
from discount_engine.utils.errors import DatabaseConnectionError, PersistError
from discount_engine.utils.event_sink import EventSink, LoggingEventSink
from discount_engine.utils.metrics import orders_persisted


class OrderWriter:
    """
    Persists orders one at a time so a failed insert never blocks the rest.

    Usage::

        with OrderWriter("sqlite:///data/orders.db") as writer:
            result = writer.persist(orders)
    """

    def __init__(
        self,
        database_url: str,
        create_tables: bool = True,
        echo: bool = False,
        event_sink: Optional[EventSink] = None,
    ):
        self.database_url = database_url
        self.create_tables = create_tables
        self.echo = echo
        self.event_sink = event_sink or LoggingEventSink()
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def connected(self) -> bool:
        return self.engine is not None

    def connect(self) -> None:
        """
        Open the engine and create the orders table if configured

        Raises:
            DatabaseConnectionError: If the database cannot be reached
        """
        if self.connected:
            return

        engine = create_db_engine(self.database_url, echo=self.echo)
        if self.create_tables:
            try:
                Base.metadata.create_all(engine)
            except SQLAlchemyError as e:
                engine.dispose()
                raise DatabaseConnectionError(f"Could not create orders table: {e}") from e

        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def close(self) -> None:
        """Dispose of the connection pool"""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self._session_factory = None

    def __enter__(self) -> "OrderWriter":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def persist(self, orders: Iterable[Order]) -> PersistResult:
        """
        Insert each order in its own transaction

        Args:
            orders: Enriched orders

        Returns:
            PersistResult with the success count and every failed order

        Raises:
            DatabaseConnectionError: If called before connect()
        """
        if not self.connected:
            raise DatabaseConnectionError("Order writer is not connected")

        result = PersistResult()
        for order in orders:
            try:
                self.insert_order(order)
            except PersistError as e:
                orders_persisted.labels(status='failure').inc()
                result.failures.append(PersistFailure(order=order, error=str(e)))
                self.event_sink.error(
                    f"Failed to insert order: {e}",
                    order_timestamp=order.timestamp,
                    product_name=order.product_name,
                )
                continue

            orders_persisted.labels(status='success').inc()
            result.success_count += 1

        self.event_sink.info(f"Successfully inserted {result.success_count} orders into the database.")
        return result

    def insert_order(self, order: Order) -> None:
        """
        Insert one order and commit

        Raises:
            PersistError: If the row cannot be built or the insert fails (rolled back)
        """
        session: Session = self._session_factory()
        try:
            session.add(OrderRecord.from_order(order))
            session.commit()
        except (SQLAlchemyError, ValueError, ArithmeticError) as e:
            session.rollback()
            raise PersistError(str(e)) from e
        finally:
            session.close()
