"""Main entry point for the discount engine"""

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from discount_engine.models.order import Order
from discount_engine.orchestrator.pipeline import DiscountPipeline
from discount_engine.utils.config_loader import DEFAULT_CONFIG_PATH, get_section, load_config
from discount_engine.utils.errors import ConfigurationError
from discount_engine.utils.logging import get_logger

logger = get_logger(__name__)


def format_order_line(order: Order) -> str:
    """One console line per processed order"""
    return (
        f"Order timestamp: {order.timestamp}, Product: {order.product_name}, "
        f"Original Price: {order.original_price}, Discount: {order.discount}%, "
        f"Final Price: {order.final_price}"
    )


def print_report(results: Dict[str, Any]) -> None:
    """Print processed orders and the run summary"""
    for order in results['orders']:
        print(format_order_line(order))

    print("=" * 60)
    print("DISCOUNT RUN SUMMARY")
    print("=" * 60)
    print(f"Run ID: {results['run_id']}")
    print(f"Status: {results['status']}")
    print(f"Orders Loaded: {results['orders_loaded']}")
    print(f"Orders Processed: {results['orders_processed']}")
    print(f"Orders Persisted: {results['orders_persisted']}")
    print(f"Persist Failures: {results['persist_failures']}")
    print(f"Duration: {results['duration_seconds']:.2f}s")
    print("=" * 60)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply discount rules to orders and store the results")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to YAML configuration")
    parser.add_argument("--input", dest="input_path", help="CSV file of orders (overrides config)")
    parser.add_argument("--database-url", help="SQLAlchemy database URL (overrides config)")
    parser.add_argument(
        "--skip-malformed-rows",
        action="store_true",
        help="Skip and report malformed CSV rows instead of aborting the read",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    """Main entry point"""
    # Load environment variables before reading config
    load_dotenv(dotenv_path=Path.cwd() / '.env')

    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        raise

    for section in ('ingestion', 'database'):
        config[section] = get_section(config, section)

    if args.input_path:
        config['ingestion']['input_path'] = args.input_path
    if args.database_url:
        config['database']['url'] = args.database_url
    if args.skip_malformed_rows:
        config['ingestion']['skip_malformed_rows'] = True

    pipeline = DiscountPipeline(config=config)
    results = pipeline.run()
    print_report(results)
    return results


def cli() -> int:
    """Console script wrapper"""
    main()
    return 0


if __name__ == "__main__":
    main()
