#!/usr/bin/env python3
"""Simulate a collection day and export loans, receipts and closings.

Writes JSON files; ``--kafka`` also publishes the day's receipt and
route-closing events for downstream notification consumers.
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from microlending.config import EngineConfig
from microlending.exceptions import LendingError
from microlending.logging import setup_logging
from microlending.scenarios import CollectionDayScenario
from microlending.sinks import JsonFileSink, KafkaSink

logger = logging.getLogger("run_collection_day")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Simulate a micro-lending collection day")
    parser.add_argument(
        "--clients",
        type=int,
        default=50,
        help="Number of clients, one loan each (default: 50)",
    )
    parser.add_argument(
        "--collectors",
        type=int,
        default=3,
        help="Number of collectors (default: 3)",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Collection date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (default: SEED env var)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for JSON output (default: OUTPUT_DIR env var or ./output)",
    )
    parser.add_argument(
        "--kafka",
        action="store_true",
        help="Also publish receipt and closing events to Kafka",
    )
    parser.add_argument(
        "--schema-registry-url",
        default=None,
        help="Publish Avro payloads via this Schema Registry (default: SCHEMA_REGISTRY_URL env var, else JSON)",
    )
    parser.add_argument(
        "--log-format",
        choices=["standard", "json"],
        default="standard",
        help="Log output format",
    )
    args = parser.parse_args()

    try:
        config = EngineConfig.from_env()
    except LendingError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level, args.log_format)

    scenario = CollectionDayScenario(
        num_clients=args.clients,
        num_collectors=args.collectors,
        collection_date=args.date,
        seed=args.seed if args.seed is not None else config.seed,
        config=config,
    )
    scenario.generate()

    json_sink = JsonFileSink(args.output_dir or config.output.json_output_dir, pretty=config.output.pretty_json)
    try:
        scenario.export([json_sink])
        if args.kafka:
            kafka = KafkaSink(config.kafka, schema_registry_url=args.schema_registry_url)
            try:
                for event in scenario.events:
                    kafka.publish_event(event)
            finally:
                kafka.close()
    except LendingError as e:
        logger.error("Export failed: %s", e)
        return 1
    finally:
        json_sink.close()

    print(json.dumps(scenario.get_summary(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
