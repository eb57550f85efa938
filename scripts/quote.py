#!/usr/bin/env python
"""
Quote an order from the command line and print the resolution trace.

Usage:
    python scripts/quote.py CLIENT_ID SERVICE QUANTITY [MANUAL_UNIT_PRICE]
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from shop_pricing.config.logging_config import configure_logging
from shop_pricing.config.settings import get_settings
from shop_pricing.engine import PricingEngine, PricingError


def main(argv: list[str]) -> int:
    if len(argv) not in (3, 4):
        print(__doc__)
        return 2

    settings = get_settings()
    configure_logging(settings.log_level)
    engine = PricingEngine(settings)

    client_id, service, quantity = argv[:3]
    manual = argv[3] if len(argv) == 4 else None

    result = engine.quote(client_id, service, quantity, manual)
    if isinstance(result, PricingError):
        print(f"❌ {result.kind.value}: {result.message}")
        return 1

    print(result.get_trace_text())
    print()
    for warning in result.warnings:
        print(f"⚠ {warning.kind.value}: {warning.message}")
    print(f"Unit price:  {result.unit_price}")
    if result.is_manual_override:
        print(f"Resolved:    {result.auto_unit_price}")
    print(f"Subtotal:    {result.subtotal}")
    print(f"IVA {result.tax_pct}%:  {result.tax_amount}")
    print(f"Total:       {result.total_amount}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
