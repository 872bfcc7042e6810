#!/usr/bin/env python3
"""
Daily Profit API Startup Script

Starts the FastAPI server behind the daily profit dashboard.
"""

import sys
from pathlib import Path

import uvicorn


def main():
    """Start the Daily Profit API server."""
    print("Starting Daily Profit API Server...")
    print("   Swagger UI:      http://localhost:8000/docs")
    print("   Provider check:  http://localhost:8000/health/providers")
    print("")

    env_file = Path(".env")
    if not env_file.exists():
        print("WARNING: No .env file found!")
        print("   Create a .env file with these variables:")
        print("   SHOPIFY_SHOP_DOMAIN=your-shop.myshopify.com")
        print("   SHOPIFY_ACCESS_TOKEN=shpat_...")
        print("   META_AD_ACCOUNT_ID=1234567890")
        print("   META_ACCESS_TOKEN=...")
        print("   TIKTOK_ADVERTISER_ID=1234567890")
        print("   TIKTOK_ACCESS_TOKEN=...")
        print("")

    try:
        uvicorn.run(
            "profitdash.main:app",
            host="0.0.0.0",
            port=8000,
            reload=True,
            reload_dirs=["profitdash"],
            log_level="info",
        )
    except KeyboardInterrupt:
        print("\nShutting down Daily Profit API server...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
