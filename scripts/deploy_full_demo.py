#!/usr/bin/env python3
"""Deploy the demo tokens and seed the TOKEN/USDT pools in memory.

Usage:
    # Default demo: SWX, GOX and EGC against USDT, 10 000 * 1000 tokens deep
    python scripts/deploy_full_demo.py

    # Custom parameters from a JSON file (any DemoConfig field)
    python scripts/deploy_full_demo.py --config demo.json --verbose
"""

import argparse
import json
import sys
from decimal import Decimal
from pathlib import Path

import structlog
from pydantic import ValidationError

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dex.deploy import DemoConfig, deploy_full_demo  # noqa: E402
from dex.errors import DexError  # noqa: E402
from dex.log import configure_logging  # noqa: E402

logger = structlog.get_logger()


def load_config(path: Path | None) -> DemoConfig:
    if path is None:
        return DemoConfig()
    with open(path) as f:
        return DemoConfig.model_validate(json.load(f))


def format_units(amount: int, decimals: int) -> str:
    """Whole-token rendering of a base-unit amount."""
    return f"{Decimal(amount).scaleb(-decimals).normalize():f}"


def main() -> int:
    """Main entry point for the demo deployment."""
    parser = argparse.ArgumentParser(
        description="Deploy demo tokens, a pool registry and a router, then seed deep pools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with DemoConfig fields (default: built-in demo)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (every pool event)",
    )
    args = parser.parse_args()

    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("config_load_failed", path=str(args.config), error=str(e))
        print(f"Error: cannot load config {args.config}: {e}")
        return 1

    try:
        deployment = deploy_full_demo(config)
    except DexError as e:
        logger.error("deployment_failed", error=type(e).__name__, code=e.code)
        print(f"Error: deployment failed: {e}")
        return 1

    quote = deployment.token(config.quote_symbol)
    print("=" * 60)
    print("DEX demo deployment")
    print("=" * 60)
    for symbol, ledger in deployment.tokens.items():
        print(f"{ledger.name} ({symbol}): {ledger.address}")
    print(f"Registry: {deployment.registry.address}")
    print(f"Router:   {deployment.router.address}")
    print()

    for symbol, seeded in deployment.pairs.items():
        token = deployment.token(symbol)
        print(f"Pair {symbol}/{config.quote_symbol}: {seeded.pool.address}")
        print(f"  {symbol}: {format_units(seeded.reserve_in, token.decimals)}")
        print(f"  {config.quote_symbol}: {format_units(seeded.reserve_out, quote.decimals)}")
        print(f"  shares: {seeded.shares}")

    print()
    print(f"Deployed {len(deployment.pairs)} pairs, {len(deployment.events)} events recorded")
    return 0


if __name__ == "__main__":
    sys.exit(main())
