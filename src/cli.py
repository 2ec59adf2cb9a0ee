"""
Command-line trigger for bucket synchronization.

Maps lifecycle events onto the core entry points:

    bucket-sync deploy-complete   # empty buckets, then upload
    bucket-sync before-remove     # empty buckets
    bucket-sync sync              # manual sync with start/finish notifications
    bucket-sync empty             # same as before-remove

Targets come from --config (a JSON file with a list of
{"bucketName", "localDir"} objects) or from SYNC_TARGETS.
Region, profile and CA bundle flags override the environment.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Optional, Sequence

from dotenv import load_dotenv

from .config.settings import Settings
from .core.sync.errors import SyncError
from .core.sync.lifecycle import SyncLifecycle
from .core.sync.models import RunReport
from .core.sync.orchestrator import SyncOrchestrator
from .infrastructure.storage.client import StorageConfig, StorageError, create_storage_client

logger = logging.getLogger("bucket_sync")

COMMANDS = ("sync", "empty", "deploy-complete", "before-remove")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bucket-sync",
        description="Mirror local directories into object storage buckets",
    )
    parser.add_argument("command", choices=COMMANDS, help="Lifecycle event to run")
    parser.add_argument("--config", help="JSON file holding the list of sync targets")
    parser.add_argument("--region", help="AWS region (overrides AWS_REGION)")
    parser.add_argument("--profile", help="AWS credentials profile (overrides AWS_PROFILE)")
    parser.add_argument("--cafile", help="Custom CA certificate bundle for TLS")
    parser.add_argument("--endpoint-url", help="S3-compatible endpoint override")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a bucket to empty does not exist",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use in-memory storage instead of S3 (dry run)",
    )
    parser.add_argument("--log-level", help="Logging level (overrides LOG_LEVEL)")
    return parser


def load_targets(path: str) -> Any:
    """
    Read the raw target list from a JSON file.

    The file may hold the list itself or an object with a "syncS3" key.
    The value is returned unvalidated; the orchestrator decides whether
    it is usable.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict) and "syncS3" in data:
        return data["syncS3"]
    return data


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command-line flags applied on top."""
    overrides: dict[str, Any] = {}
    if args.region:
        overrides["aws_region"] = args.region
    if args.profile:
        overrides["aws_profile"] = args.profile
    if args.cafile:
        overrides["ca_bundle_path"] = args.cafile
    if args.endpoint_url:
        overrides["s3_endpoint_url"] = args.endpoint_url
    if args.strict:
        overrides["strict_empty"] = True
    if args.mock:
        overrides["storage_mock_mode"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.config:
        overrides["sync_targets"] = load_targets(args.config)

    return settings.model_copy(update=overrides)


def build_lifecycle(settings: Settings) -> SyncLifecycle:
    """Build the storage client and entry points for one invocation."""
    storage = create_storage_client(
        config=StorageConfig(
            region=settings.aws_region,
            profile=settings.aws_profile,
            ca_bundle_path=settings.ca_bundle_path,
            endpoint_url=settings.s3_endpoint_url,
        ),
        mock_mode=settings.storage_mock_mode,
    )
    orchestrator = SyncOrchestrator(storage, strict=settings.strict_empty)
    return SyncLifecycle(orchestrator, settings.sync_targets)


async def run_command(command: str, lifecycle: SyncLifecycle) -> RunReport:
    if command == "deploy-complete":
        return await lifecycle.on_deploy_complete()
    if command in ("before-remove", "empty"):
        return await lifecycle.on_before_remove()

    def announce_start() -> None:
        logger.info("Manual sync started")

    def announce_finish(report: RunReport) -> None:
        logger.info(
            "Manual sync finished: %d uploaded, %d deleted",
            report.uploaded_count,
            report.deleted_count,
        )

    return await lifecycle.sync_command(before=announce_start, after=announce_finish)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)

    try:
        settings = apply_overrides(Settings(), args)
    except (OSError, ValueError) as e:
        print(f"ERROR: cannot load configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level.upper(),
    )

    try:
        lifecycle = build_lifecycle(settings)
    except (StorageError, ImportError) as e:
        logger.error("Cannot create storage client: %s", e)
        return 1

    try:
        report = asyncio.run(run_command(args.command, lifecycle))
    except SyncError as e:
        logger.error("%s failed: %s", args.command, e)
        return 1

    logger.info(
        "%s complete (phase=%s, uploaded=%d, deleted=%d)",
        args.command,
        report.phase,
        report.uploaded_count,
        report.deleted_count,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
