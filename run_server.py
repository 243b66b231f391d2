#!/usr/bin/env python3
"""Subscription cancellation backend.

Launch: python3 run_server.py
Serves POST /api/cancellation at http://0.0.0.0:8000 (or PORT env var)
"""

import logging

import uvicorn

from cancellation_flow.config import HOST, LOG_LEVEL, PORT, SUPABASE_URL


def main():
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("  Subscription Cancellation API")
    print("=" * 60)

    if not SUPABASE_URL:
        print("\n  WARNING: SUPABASE_URL not set. Set environment variables:")
        print("    SUPABASE_URL, SUPABASE_SERVICE_KEY")
        print("  Requests will fail with 500 until they are set.\n")

    url = f"http://{HOST}:{PORT}"
    print(f"\n  Endpoint: {url}/api/cancellation")
    print("  Press Ctrl+C to stop\n")

    from cancellation_flow.app import create_app
    app = create_app()
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL)


if __name__ == "__main__":
    main()
