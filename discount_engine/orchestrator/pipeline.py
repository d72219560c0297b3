"""Discount pipeline - ingest, score, aggregate, persist"""

import time
import uuid
from typing import Any, Dict, List, Optional, Sequence

from discount_engine.constants import RunStatus
from discount_engine.db.order_writer import OrderWriter
from discount_engine.ingestion.csv_order_reader import CsvOrderReader
from discount_engine.models.order import Order
from discount_engine.models.persist_result import PersistResult
from discount_engine.rules.aggregator import get_order_with_discount
from discount_engine.rules.discount_rules import DISCOUNT_RULES, DiscountRule
from discount_engine.utils.config_loader import get_section, load_config
from discount_engine.utils.errors import DatabaseConnectionError, IngestionError, RuleEvaluationError
from discount_engine.utils.event_sink import EventSink, LoggingEventSink
from discount_engine.utils.metrics import (
    database_connection_failures,
    final_discount_percent,
    orders_loaded,
    orders_processed,
    pipeline_run_time,
)


class DiscountPipeline:
    """
    Single synchronous pass over a bounded list of orders.

    Failures while reading the source, scoring an order or writing to the
    database are reported to the event sink and never stop the run: a failed
    read continues with zero orders, an unreachable database skips the
    persist phase, a failed insert skips that order only.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        event_sink: Optional[EventSink] = None,
        reader: Optional[CsvOrderReader] = None,
        writer: Optional[OrderWriter] = None,
        rules: Sequence[DiscountRule] = DISCOUNT_RULES,
    ):
        self.run_id = str(uuid.uuid4())
        self.config = config if config is not None else load_config()
        self.rules = rules
        self.start_time = None
        self.error_count = 0

        ingestion_config = get_section(self.config, "ingestion")
        database_config = get_section(self.config, "database")
        logging_config = get_section(self.config, "logging")

        self.input_path = ingestion_config.get("input_path")
        self.event_sink = event_sink or LoggingEventSink(
            log_file=logging_config.get("log_file"),
            level=logging_config.get("level"),
        )
        self.reader = reader or CsvOrderReader(
            skip_malformed_rows=bool(ingestion_config.get("skip_malformed_rows", False)),
            event_sink=self.event_sink,
        )

        if writer is None and database_config.get("url"):
            writer = OrderWriter(
                database_url=database_config["url"],
                create_tables=bool(database_config.get("create_tables", True)),
                echo=bool(database_config.get("echo", False)),
                event_sink=self.event_sink,
            )
        self.writer = writer

    def run(self, source: Optional[str] = None) -> Dict[str, Any]:
        """
        Execute one pipeline run

        Args:
            source: CSV path; defaults to ingestion.input_path from config

        Returns:
            Summary dictionary with counts, status and the enriched orders
        """
        self.start_time = time.time()
        self.error_count = 0
        self.event_sink.info("Starting the rules engine", run_id=self.run_id)

        orders = self._load_orders(source or self.input_path)
        processed = self._process_orders(orders)
        persist_result = self._persist_orders(processed)

        duration = time.time() - self.start_time
        pipeline_run_time.observe(duration)

        status = RunStatus.COMPLETED if self.error_count == 0 else RunStatus.COMPLETED_WITH_ERRORS
        return {
            'run_id': self.run_id,
            'status': status.value,
            'orders_loaded': len(orders),
            'orders_processed': len(processed),
            'orders_persisted': persist_result.success_count,
            'persist_failures': persist_result.failure_count,
            'duration_seconds': duration,
            'orders': processed,
        }

    def _error(self, message: str, **context: Any) -> None:
        self.error_count += 1
        self.event_sink.error(message, **context)

    def _load_orders(self, source: Optional[str]) -> List[Order]:
        if not source:
            self._error("Error reading file: no input path configured")
            return []

        try:
            orders = self.reader.read_orders(source)
        except IngestionError as e:
            self._error(str(e), source=source)
            orders = []

        # Rows dropped in skip-and-report mode
        self.error_count += getattr(self.reader, "skipped_rows", 0)
        orders_loaded.inc(len(orders))
        self.event_sink.info(f"Read {len(orders)} orders from the CSV", source=source)
        return orders

    def _process_orders(self, orders: List[Order]) -> List[Order]:
        processed = []
        for order in orders:
            try:
                enriched = get_order_with_discount(order, self.rules)
            except RuleEvaluationError as e:
                self._error(str(e))
                continue
            final_discount_percent.observe(float(enriched.discount))
            processed.append(enriched)

        orders_processed.inc(len(processed))
        self.event_sink.info(f"Processed {len(processed)} orders")
        return processed

    def _persist_orders(self, orders: List[Order]) -> PersistResult:
        if self.writer is None:
            database_connection_failures.inc()
            self._error("Could not connect to the database: no database URL configured")
            return PersistResult()

        try:
            self.writer.connect()
        except DatabaseConnectionError as e:
            database_connection_failures.inc()
            self._error(f"Could not connect to the database: {e}")
            return PersistResult()

        self.event_sink.info("Connected to the database")
        try:
            result = self.writer.persist(orders)
        finally:
            self.writer.close()
            self.event_sink.info("Database connection closed")

        self.error_count += result.failure_count
        return result
