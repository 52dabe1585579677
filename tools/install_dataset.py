#!/usr/bin/env python3
# ============================================================================
# CLI DATASET INSTALL TOOL
# ============================================================================
# STATUS: Tool - Install raster files into a local data store
# PURPOSE: Run the installation pipeline from the command line
# CREATED: 18 OCT 2026
# ============================================================================
"""
Install imagery or elevation files as a tiled dataset.

Usage:
    # On-demand install (coarse levels + RasterServer sidecar)
    python tools/install_dataset.py /imagery/*.tif --store /data/ww

    # Explicit name, full pyramid
    python tools/install_dataset.py /dem/n40w106.hgt --store /data/ww \\
        --name "Front Range" --full-pyramid

    # Mode switches from a YAML file
    python tools/install_dataset.py /imagery/a.tif --store /data/ww --config installer.yaml

    # Machine-readable report
    python tools/install_dataset.py /imagery/a.tif --store /data/ww --json

Exit codes:
    0  installed
    1  installation failed
    2  cancelled (Ctrl-C)

Environment:
    LOG_LEVEL, LOG_FORMAT=json, PRODUCER_ENABLE_FULL_PYRAMID,
    TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL, DATA_FILE_STORE_CONFIG
"""

import argparse
import json
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import Defaults, FileStoreConfig, InstallerConfig, get_defaults
from core.errors import InstallerError
from core.logging import configure_logging
from core.models import FileSet
from infrastructure.file_store import BasicFileStore
from services.installer import DataInstaller, InstallReport
from worker.cancellation import CancellationToken

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Install raster files as a tiled image layer or elevation model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /imagery/a.tif /imagery/b.tif --store /data/ww
  %(prog)s /dem/n40w106.hgt --store /data/ww --name "Front Range" --full-pyramid
        """,
    )
    parser.add_argument("files", nargs="+", help="Source raster files")
    parser.add_argument(
        "--store", "-s",
        help="Install directory (default: DATA_FILE_STORE_CONFIG / DATA_FILE_STORE_DIR)",
    )
    parser.add_argument("--name", "-n", help="Dataset name (default: derived from file names)")
    parser.add_argument("--scale", help="Scale appended to --name")
    parser.add_argument(
        "--full-pyramid",
        action="store_true",
        default=None,
        help="Build every level instead of installing for on-demand serving",
    )
    parser.add_argument(
        "--max-level",
        help="Levels to build in on-demand mode ('auto' or a count)",
    )
    parser.add_argument(
        "--config", "-c",
        help="YAML file with an `installer:` section (default: environment)",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", "INFO"))
    return parser


def build_config(args: argparse.Namespace) -> InstallerConfig:
    """Environment (or --config file) defaults overridden by command-line flags."""
    defaults = Defaults.from_yaml(args.config) if args.config else get_defaults()
    base = defaults.installer
    return InstallerConfig(
        enable_full_pyramid=base.enable_full_pyramid if args.full_pyramid is None else True,
        max_level=args.max_level if args.max_level is not None else base.max_level,
    )


def build_file_store(args: argparse.Namespace) -> Optional[BasicFileStore]:
    if args.store:
        return BasicFileStore(FileStoreConfig.for_directory(args.store))
    return BasicFileStore.from_env()


def print_report(report: InstallReport, as_json: bool) -> None:
    if as_json:
        print(json.dumps(report.to_dict(), indent=2, default=str))
        return

    print(f"Install {report.install_id}: {report.state.value}")
    print(f"  dataset:        {report.dataset_name}")
    print(f"  kind:           {report.pixel_kind.value if report.pixel_kind else None}")
    print(f"  location:       {report.install_location}")
    print(f"  config:         {report.config_path}")
    print(f"  raster server:  {report.raster_server_path}")
    print(f"  duration:       {report.duration_ms}ms")
    if report.error:
        print(f"  error:          {report.error}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    file_store = build_file_store(args)
    if file_store is None:
        print("ERROR: Pass --store or set DATA_FILE_STORE_DIR", file=sys.stderr)
        return EXIT_FAILED

    try:
        config = build_config(args)
    except OSError as e:
        print(f"ERROR: Cannot read config file: {e}", file=sys.stderr)
        return EXIT_FAILED

    file_set = FileSet.of(*args.files, name=args.name, scale=args.scale)
    installer = DataInstaller(config=config, file_store=file_store)
    token = CancellationToken()

    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(installer.install, file_set, token)
        try:
            report = future.result()
        except KeyboardInterrupt:
            print("Cancelling...", file=sys.stderr)
            token.cancel("Interrupted")
            try:
                report = future.result()
            except InstallerError as e:
                print(f"ERROR: {e}", file=sys.stderr)
                return EXIT_CANCELLED
        except InstallerError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return EXIT_FAILED

    print_report(report, args.json)
    if report.cancelled:
        return EXIT_CANCELLED
    return EXIT_OK if report.succeeded else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
