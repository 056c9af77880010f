"""
Run the Crypto Filters API with uvicorn.

Usage:
    python scripts/run_server.py [--storage-dir DIR] [--storage-key KEY] [--reload]

Filters are kept in memory unless a storage directory is given, either with
--storage-dir or through CRYPTO_FILTERS_STORAGE_DIR. The options are exported
as environment variables so the app (and reload workers) pick them up.
"""

import argparse
import os
import sys

try:
    import uvicorn
except ImportError:
    print("ERROR: uvicorn is not installed.")
    print("Install dependencies: pip install -e .")
    sys.exit(1)

from crypto_filters.config import StorageConfig


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Crypto Filters API server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
    )
    parser.add_argument(
        "--storage-dir",
        help="Persist filters as files under this directory (sets CRYPTO_FILTERS_STORAGE_DIR)",
    )
    parser.add_argument(
        "--storage-key",
        help="Key the filters are stored under (sets CRYPTO_FILTERS_STORAGE_KEY)",
    )
    return parser.parse_args(argv)


def export_storage_env(args: argparse.Namespace) -> StorageConfig:
    """Export storage options to the environment and return the resulting config."""
    if args.storage_dir:
        os.environ["CRYPTO_FILTERS_STORAGE_DIR"] = args.storage_dir
    if args.storage_key:
        os.environ["CRYPTO_FILTERS_STORAGE_KEY"] = args.storage_key
    return StorageConfig.from_env()


def main(argv=None):
    args = parse_args(argv)
    config = export_storage_env(args)

    backend = f"files under {config.storage_dir}" if config.storage_dir else "in memory"
    print(f"Crypto Filters API on http://{args.host}:{args.port} (docs at /docs)")
    print(f"   Filters: {backend}, key {config.filters_storage_key!r}")

    uvicorn.run(
        "crypto_filters.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
