#!/usr/bin/env python3
"""Send a synthetic test alert through every configured channel.

Usage::

    # Default config (config/settings.yaml + ALERT_* env vars)
    python scripts/send_test_alert.py

    # Custom config file, console logs
    python scripts/send_test_alert.py --config config/settings.yaml --log-format console
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from src.alerts.service import AlertService
from src.core.config import load_settings
from src.core.logging import setup_logging

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(settings.logging, level=args.log_level, fmt=args.log_format)

    service = AlertService(settings.alerts)
    logger.info("alert_self_test_starting", channels=[ch.name for ch in service.channels])
    try:
        alert = await service.test_alerts()
    finally:
        await service.close()

    if alert is None or not alert.delivered_channels:
        return 1
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Verify alert channel wiring with a test alert.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Log renderer override",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
