#!/usr/bin/env python
"""
Audit the default price list - reports gaps and overlaps per service.

Usage:
    python scripts/audit_tiers.py
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from shop_pricing.config.settings import get_settings
from shop_pricing.data.catalog_loader import load_price_tiers
from shop_pricing.engine import ServiceType, audit_tiers


def main():
    settings = get_settings()

    print("=" * 60)
    print("DEFAULT PRICE LIST AUDIT")
    print("=" * 60)
    print(f"Source: {settings.default_prices}")
    print()

    tiers = load_price_tiers(settings.default_prices)
    failed = False

    for service in ServiceType:
        result = audit_tiers(tiers, service)
        status = "✅" if result.valid and not result.warnings else ("⚠" if result.valid else "❌")
        print(f"{status} {service.value}")
        for error in result.errors:
            print(f"  ERROR: {error}")
        for warning in result.warnings:
            print(f"  WARNING: {warning}")
        for note in result.notes:
            print(f"  NOTE: {note}")
        failed = failed or not result.valid

    print()
    if failed:
        print("❌ AUDIT FAILED")
        sys.exit(1)
    print("✅ AUDIT COMPLETE")


if __name__ == "__main__":
    main()
