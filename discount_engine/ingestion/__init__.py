"""Order ingestion"""

from .csv_order_reader import CsvOrderReader, parse_order_row

__all__ = ["CsvOrderReader", "parse_order_row"]
