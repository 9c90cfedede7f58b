"""
syncer.py

Responsibility: The readme sync itself.

Linear flow, no intermediate state:
1) Read the readme text
2) Interpolate the replacement template
3) Rewrite every literal occurrence of the search pattern
4) Authenticate and upload (skipped for dry runs)

Any failure raises a `SyncError` subclass and aborts the run; there is no
partial success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from readme_sync.config import SyncRequest
from readme_sync.errors import FileReadError
from readme_sync.registry_client import RegistryClient
from readme_sync.rewrite import count_occurrences, interpolate, rewrite

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    repository: str
    replacements: int
    uploaded: bool
    content: str


def read_readme(path: Path) -> str:
    if not path.is_file():
        raise FileReadError(f"Readme file does not exist: {path}")
    try:
        # Bytes are decoded as-is so line endings reach the registry unchanged.
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise FileReadError(f"Readme file is not valid UTF-8: {path}") from e
    except OSError as e:
        raise FileReadError(f"Cannot read readme file {path}: {e}") from e


def sync(request: SyncRequest, client: RegistryClient, *, dry_run: bool = False) -> SyncResult:
    content = read_readme(request.readme_path)
    replacement = interpolate(
        request.replacement_template,
        repository=request.repository,
        ref_name=request.ref_name,
    )

    replacements = count_occurrences(content, request.search_pattern)
    rewritten = rewrite(content, request.search_pattern, replacement)
    log.info(
        "Rewrote %d occurrence(s) of %r in %s",
        replacements,
        request.search_pattern,
        request.readme_path,
    )

    if dry_run:
        log.info("Dry run; not uploading to %s", request.repository)
        return SyncResult(request.repository, replacements, uploaded=False, content=rewritten)

    client.authenticate(request.username, request.password)
    client.update_description(
        request.repository,
        rewritten,
        short_description=request.short_description,
    )
    return SyncResult(request.repository, replacements, uploaded=True, content=rewritten)
