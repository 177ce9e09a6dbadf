#!/usr/bin/env python3
"""
API server entrypoint - loads .env, validates configuration and serves the app with uvicorn.
"""

import argparse
import sys

# Load environment variables from .env file first
import dotenv
dotenv.load_dotenv()

import uvicorn

from keepsake.core.config import debug_enabled, validate_config


def main():
    parser = argparse.ArgumentParser(description="Run the keepsake API server")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    issues = validate_config()
    if issues:
        print("❌ Configuration issues:")
        for issue in issues:
            print(f"   - {issue}")
        return 1

    uvicorn.run(
        "keepsake.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if debug_enabled() else "info"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
