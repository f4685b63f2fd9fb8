"""
Command line entry point

    python -m permit_swap --sell WETH --buy USDC --amount 0.1
"""

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from .config import ApprovalPolicy, get_config, setup_logging
from .errors import ConfigurationError, PermitSwapError
from .modules.swap import SwapPipeline

logger = logging.getLogger("permit_swap.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="permit_swap",
        description="Swap tokens through the 0x Permit2 flow",
    )
    parser.add_argument("--sell", default="WETH", help="Token to sell (symbol or address)")
    parser.add_argument("--buy", default="USDC", help="Token to buy (symbol or address)")
    parser.add_argument("--amount", type=_decimal, default=Decimal("0.1"), help="Amount to sell in token units")
    parser.add_argument("--affiliate-fee-bps", type=int, default=None, help="Affiliate fee in basis points")
    parser.add_argument(
        "--no-surplus",
        dest="surplus_collection",
        action="store_false",
        default=None,
        help="Disable trade surplus collection",
    )
    parser.add_argument(
        "--approval",
        choices=[policy.value for policy in ApprovalPolicy],
        default=None,
        help="Approval amount policy (default from APPROVAL_POLICY)",
    )
    parser.add_argument("--wrap", action="store_true", help="Wrap native asset if the wrapped balance is short")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = get_config()

    if args.log_level:
        cfg.logging.log_level = args.log_level
    setup_logging(cfg.logging)

    if args.approval:
        cfg.swap.approval_policy = args.approval

    try:
        cfg.validate()
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CONFIG

    try:
        with SwapPipeline.from_config(cfg) as pipeline:
            request = pipeline.build_request(
                args.sell,
                args.buy,
                args.amount,
                affiliate_fee_bps=args.affiliate_fee_bps,
                surplus_collection=args.surplus_collection,
            )
            outcome = pipeline.run(request, wrap=args.wrap)
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CONFIG
    except PermitSwapError as e:
        logger.error(f"Swap aborted: {e}")
        return EXIT_FAILED
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return EXIT_CONFIG

    logger.info(f"Submitted swap {outcome.tx_hash}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
