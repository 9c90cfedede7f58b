"""
cli.py

Responsibility: CLI entrypoint for readme-sync.

High-level flow (single command `sync`):
1) Resolve flags / config file / environment -> `SyncRequest`
2) Run the sync against the Docker Hub client
3) Map the outcome to an exit status (0 ok, 1 sync failure, 2 usage error)

This module should orchestrate behavior but keep concerns isolated:
- Configuration: `config.py`
- Text rewriting: `rewrite.py`
- Registry API: `registry_client.py`
- Orchestration of one run: `syncer.py`
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from readme_sync import __version__
from readme_sync.config import build_request
from readme_sync.errors import SyncError
from readme_sync.registry_client import DOCKERHUB_API_BASE, DockerHubClient
from readme_sync.syncer import sync

log = logging.getLogger("readme_sync")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.environ.get("READMESYNC_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.handlers[:] = [handler]
    log.setLevel(level)
    log.propagate = False


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from e
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value!r}")
    return number


def sync_cmd(args: argparse.Namespace) -> int:
    overrides = {
        "username": args.username,
        "password": args.password,
        "repository": args.repository,
        "ref_name": args.ref_name,
        "readme": args.readme,
        "replace_pattern": args.replace_pattern,
        "replace_with": args.replace_with,
        "short_description": args.short_description,
    }
    config_path = args.config or os.environ.get("READMESYNC_CONFIG") or None

    try:
        request = build_request(overrides, config_path=config_path)
        client = DockerHubClient(args.api_base, timeout=args.timeout)
        result = sync(request, client, dry_run=bool(args.dry_run))
    except SyncError as e:
        log.error("%s", e)
        return 1

    if result.uploaded:
        log.info("Synced %s to %s", request.readme_path, result.repository)
    else:
        sys.stdout.write(result.content)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="readme-sync",
        description="readme-sync - push a readme to a container registry repository description",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("sync", help="Rewrite relative links in a readme and upload it as the repository description")
    s.add_argument("--config", default=None, help="YAML config file (or set env READMESYNC_CONFIG)")

    s.add_argument("--username", default=None, help="Registry username (or set INPUT_USERNAME / DOCKERHUB_USERNAME)")
    s.add_argument("--password", default=None, help="Registry password or token (or set INPUT_PASSWORD / DOCKERHUB_PASSWORD)")
    s.add_argument("--repository", default=None, help="Target repository owner/name (or set GITHUB_REPOSITORY)")
    s.add_argument("--ref-name", default=None, help="Ref name for ${ref_name} (or set GITHUB_REF_NAME; default: main)")

    s.add_argument("--readme", default=None, help="Path to the readme file (or set INPUT_README)")
    s.add_argument("--replace-pattern", default=None, help="Literal text to replace (or set INPUT_REPLACE_PATTERN)")
    s.add_argument(
        "--replace-with",
        default=None,
        help="Replacement template; may use ${repository} and ${ref_name} (or set INPUT_REPLACE_WITH)",
    )
    s.add_argument("--short-description", default=None, help="Also set the short description (max 100 chars)")

    s.add_argument("--api-base", default=DOCKERHUB_API_BASE, help=f"Registry API base URL (default: {DOCKERHUB_API_BASE})")
    s.add_argument("--timeout", type=_positive_float, default=30.0, help="HTTP timeout in seconds (default: 30)")
    s.add_argument("--dry-run", action="store_true", help="Print the rewritten readme instead of uploading it")
    s.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    s.set_defaults(func=sync_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(bool(args.verbose))
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
