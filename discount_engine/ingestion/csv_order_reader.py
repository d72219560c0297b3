"""Order reader for comma-delimited transaction files"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, List, Optional, Sequence

import pandas as pd
from pydantic import ValidationError

from discount_engine.constants import ORDER_FIELDS
from discount_engine.models.order import Order, parse_iso_date
from discount_engine.utils.errors import IngestionError
from discount_engine.utils.event_sink import EventSink, LoggingEventSink
from discount_engine.utils.metrics import ingestion_failures

# Header occupies the first line of the file
FIRST_DATA_LINE = 2

# Stands in for a record pandas could not split into ORDER_FIELDS, so
# every data row keeps its place and its file line number
BAD_LINE_MARKER = "\x00bad-line"


def parse_order_row(row: Sequence[Any]) -> Order:
    """
    Build an Order from one CSV record

    Args:
        row: Seven raw field values in ORDER_FIELDS order

    Returns:
        Order with discount 0

    Raises:
        IngestionError: If the field count is wrong or a value cannot be parsed
    """
    if len(row) != len(ORDER_FIELDS):
        raise IngestionError(f"Expected {len(ORDER_FIELDS)} fields, got {len(row)}")

    if all(pd.isna(value) or not str(value).strip() for value in row):
        raise IngestionError("Blank record")

    values = dict(zip(ORDER_FIELDS, row))
    missing = [name for name, value in values.items() if pd.isna(value)]
    if missing:
        raise IngestionError(f"Missing fields: {missing}")

    try:
        quantity = int(values["quantity"].strip())
        unit_price = Decimal(values["unit_price"].strip())
        expiry_date = parse_iso_date(values["expiry_date"].strip())

        return Order(
            timestamp=values["timestamp"],
            product_name=values["product_name"],
            expiry_date=expiry_date,
            quantity=quantity,
            unit_price=unit_price,
            channel=values["channel"],
            payment_method=values["payment_method"],
        )
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        raise IngestionError(f"Invalid order: {problems}") from e
    except (ValueError, InvalidOperation) as e:
        raise IngestionError(f"Unparseable value: {e}") from e


class CsvOrderReader:
    """
    Reads orders from a CSV file with a header row and seven fields per record:
    timestamp, product_name, expiry_date, quantity, unit_price, channel, payment_method.

    By default the first malformed record aborts the whole read. With
    skip_malformed_rows, malformed records are reported to the event sink
    and left out.
    """

    def __init__(self, skip_malformed_rows: bool = False, event_sink: Optional[EventSink] = None):
        self.skip_malformed_rows = skip_malformed_rows
        self.event_sink = event_sink or LoggingEventSink()
        self.skipped_rows = 0
        self._bad_lines: List[str] = []

    def read_orders(self, file_path: str) -> List[Order]:
        """
        Read and parse all orders from file_path

        Args:
            file_path: Path to the CSV file

        Returns:
            Orders in file order, each with discount 0

        Raises:
            IngestionError: If the file cannot be read, or (fail-fast mode) a record is malformed
        """
        self.skipped_rows = 0
        self._bad_lines = []
        df = self._load_frame(Path(file_path))

        orders = []
        for offset, row in enumerate(df.itertuples(index=False, name=None)):
            line_number = offset + FIRST_DATA_LINE
            if row[0] == BAD_LINE_MARKER:
                # Hook calls and marker rows arrive in the same order
                self._report_skipped(f"line {line_number}: {self._bad_lines.pop(0)}")
                continue
            try:
                orders.append(parse_order_row(row))
            except IngestionError as e:
                if not self.skip_malformed_rows:
                    ingestion_failures.labels(reason='malformed_row').inc()
                    raise IngestionError(f"Malformed record on line {line_number} of {file_path}: {e}") from e
                self._report_skipped(f"line {line_number}: {e}")

        return orders

    def _load_frame(self, filepath: Path) -> pd.DataFrame:
        """Load the CSV as strings with the canonical column names"""
        if not filepath.is_file():
            ingestion_failures.labels(reason='unreadable').inc()
            raise IngestionError(f"Error reading file: {filepath} not found")

        # Blank lines stay in the frame so row offsets match file lines
        read_kwargs = {"dtype": str, "keep_default_na": False, "skip_blank_lines": False}
        if self.skip_malformed_rows:
            # Callable bad-line handlers need the python engine
            read_kwargs["engine"] = "python"
            read_kwargs["on_bad_lines"] = self._skip_bad_line

        try:
            df = pd.read_csv(filepath, **read_kwargs)
        except pd.errors.EmptyDataError:
            return pd.DataFrame(columns=ORDER_FIELDS)
        except (pd.errors.ParserError, OSError, UnicodeDecodeError) as e:
            ingestion_failures.labels(reason='unreadable').inc()
            raise IngestionError(f"Error reading file {filepath}: {e}") from e

        if len(df.columns) != len(ORDER_FIELDS):
            ingestion_failures.labels(reason='unreadable').inc()
            raise IngestionError(
                f"Error reading file {filepath}: header has {len(df.columns)} fields, "
                f"expected {len(ORDER_FIELDS)}"
            )

        df.columns = ORDER_FIELDS
        return df

    def _skip_bad_line(self, bad_line: List[str]) -> List[str]:
        """pandas on_bad_lines hook: keep the record's place with a marker row"""
        self._bad_lines.append(
            f"expected {len(ORDER_FIELDS)} fields, got {len(bad_line)}: {','.join(bad_line)}"
        )
        return [BAD_LINE_MARKER] + [""] * (len(ORDER_FIELDS) - 1)

    def _report_skipped(self, detail: str) -> None:
        self.skipped_rows += 1
        ingestion_failures.labels(reason='malformed_row').inc()
        self.event_sink.error(f"Skipping malformed record: {detail}")
