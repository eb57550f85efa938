#!/usr/bin/env python
"""
Serve the pricing preview API.

Usage:
    python scripts/run_api.py [--port 8000] [--no-reload]
"""
import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Shop Pricing API (FastAPI)")
    parser.add_argument("--host", default=os.environ.get("SHOP_PRICING_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("SHOP_PRICING_PORT", "8000")))
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload on code changes")
    args = parser.parse_args()

    print(f"Starting Shop Pricing API on {args.host}:{args.port}...")
    try:
        uvicorn.run(
            "shop_pricing.api.main:app",
            host=args.host,
            port=args.port,
            reload=not args.no_reload,
        )
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
