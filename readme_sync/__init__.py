"""
readme_sync package

This package implements readme-sync as a CLI-first utility.

Key responsibilities are split across modules:
- `config.py`: resolve flags, YAML config file and environment into a `SyncRequest`
- `rewrite.py`: literal link rewriting and `${repository}` / `${ref_name}` interpolation
- `registry_client.py`: isolated registry REST API interactions (login / description update)
- `syncer.py`: one sync run (read -> interpolate -> rewrite -> upload)
- `cli.py`: CLI entrypoint, logging setup and exit status
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
