"""Tests for the discount pipeline"""

import pytest
from decimal import Decimal

from discount_engine.constants import EventLevel
from discount_engine.orchestrator.pipeline import DiscountPipeline
from discount_engine.rules.discount_rules import DISCOUNT_RULES, DiscountRule
from discount_engine.utils.event_sink import MemoryEventSink

HEADER = "timestamp,product_name,expiry_date,quantity,unit_price,channel,payment_method"
ROWS = [
    "2024-03-23T10:00:00,Cheese Wheel,2024-03-25,8,10.00,store,cash",
    "2023-01-27T21:19:13Z,Wine - Chablis 2008,2023-02-24,2,66.35,App,Visa",
]


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "orders.csv"
    path.write_text("\n".join([HEADER] + ROWS) + "\n")
    return str(path)


@pytest.fixture
def config(tmp_path, csv_path):
    return {
        'version': '1.0',
        'ingestion': {'input_path': csv_path, 'skip_malformed_rows': False},
        'database': {'url': f"sqlite:///{tmp_path / 'orders.db'}", 'create_tables': True},
        'logging': {'level': 'INFO', 'log_file': None},
    }


def test_pipeline_initialization(config):
    pipeline = DiscountPipeline(config=config, event_sink=MemoryEventSink())
    assert pipeline.run_id is not None
    assert pipeline.start_time is None
    assert pipeline.writer is not None
    assert pipeline.input_path == config['ingestion']['input_path']


def test_full_run(config):
    sink = MemoryEventSink()
    results = DiscountPipeline(config=config, event_sink=sink).run()

    assert results['status'] == 'completed'
    assert results['orders_loaded'] == 2
    assert results['orders_processed'] == 2
    assert results['orders_persisted'] == 2
    assert results['persist_failures'] == 0

    cheese = results['orders'][0]
    assert cheese.discount == Decimal(39)
    assert cheese.final_price == Decimal("48.80")

    assert sink.messages(EventLevel.INFO) == [
        "Starting the rules engine",
        "Read 2 orders from the CSV",
        "Processed 2 orders",
        "Connected to the database",
        "Successfully inserted 2 orders into the database.",
        "Database connection closed",
    ]
    assert sink.messages(EventLevel.ERROR) == []


def test_wine_order_through_app(config):
    results = DiscountPipeline(config=config, event_sink=MemoryEventSink()).run()
    wine = results['orders'][1]

    # expiry 28 days -> 2, wine 5, app (2 units) 5, visa 5
    assert wine.discount == Decimal(5)
    assert wine.original_price == Decimal("132.70")


def test_missing_source_continues_with_no_orders(config, tmp_path):
    sink = MemoryEventSink()
    results = DiscountPipeline(config=config, event_sink=sink).run(str(tmp_path / "missing.csv"))

    assert results['status'] == 'completed_with_errors'
    assert results['orders_loaded'] == 0
    assert results['orders_persisted'] == 0
    assert "Read 0 orders from the CSV" in sink.messages(EventLevel.INFO)
    assert "Successfully inserted 0 orders into the database." in sink.messages(EventLevel.INFO)
    assert len(sink.messages(EventLevel.ERROR)) == 1


def test_malformed_row_aborts_read_by_default(config, csv_path):
    with open(csv_path, "a") as f:
        f.write("2024-01-01T00:00:00,Milk,2024-01-09,lots,1.00,Store,Cash\n")

    sink = MemoryEventSink()
    results = DiscountPipeline(config=config, event_sink=sink).run()

    assert results['orders_loaded'] == 0
    assert any("line 4" in m for m in sink.messages(EventLevel.ERROR))


def test_malformed_row_skipped_when_configured(config, csv_path):
    with open(csv_path, "a") as f:
        f.write("2024-01-01T00:00:00,Milk,2024-01-09,lots,1.00,Store,Cash\n")
    config['ingestion']['skip_malformed_rows'] = True

    sink = MemoryEventSink()
    results = DiscountPipeline(config=config, event_sink=sink).run()

    assert results['status'] == 'completed_with_errors'
    assert results['orders_loaded'] == 2
    assert results['orders_persisted'] == 2
    assert any(m.startswith("Skipping malformed record") for m in sink.messages(EventLevel.ERROR))


def test_unreachable_database_skips_persist(config, tmp_path):
    config['database']['url'] = f"sqlite:///{tmp_path / 'missing_dir' / 'orders.db'}"

    sink = MemoryEventSink()
    results = DiscountPipeline(config=config, event_sink=sink).run()

    assert results['status'] == 'completed_with_errors'
    assert results['orders_processed'] == 2
    assert results['orders_persisted'] == 0
    assert len(results['orders']) == 2
    errors = sink.messages(EventLevel.ERROR)
    assert len(errors) == 1
    assert errors[0].startswith("Could not connect to the database")


def test_no_database_url(config):
    config['database'] = {}

    sink = MemoryEventSink()
    pipeline = DiscountPipeline(config=config, event_sink=sink)
    results = pipeline.run()

    assert pipeline.writer is None
    assert results['orders_processed'] == 2
    assert results['orders_persisted'] == 0
    assert "no database URL configured" in sink.messages(EventLevel.ERROR)[0]


def test_failing_rule_skips_only_that_order(config):
    def fussy(order):
        if "Wine" in order.product_name:
            raise ZeroDivisionError("bad rule")
        return Decimal(0)

    rules = tuple(DISCOUNT_RULES) + (DiscountRule("fussy", fussy),)
    sink = MemoryEventSink()
    results = DiscountPipeline(config=config, event_sink=sink, rules=rules).run()

    assert results['orders_loaded'] == 2
    assert results['orders_processed'] == 1
    assert results['orders'][0].product_name == "Cheese Wheel"
    assert results['status'] == 'completed_with_errors'
    assert any("fussy" in m for m in sink.messages(EventLevel.ERROR))


def test_rerun_counts_reset(config):
    pipeline = DiscountPipeline(config=config, event_sink=MemoryEventSink())
    first = pipeline.run()
    second = pipeline.run()

    assert first['status'] == second['status'] == 'completed'
    assert second['orders_persisted'] == 2
