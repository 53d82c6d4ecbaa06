"""server_prep - Preliminary hardening for fresh Ubuntu 24.04 servers."""

from __future__ import annotations

from .config import HardeningConfig
from .validators import parse_ssh_port, validate_ssh_port, validate_public_key
from .host_utils import run, set_dry_run, is_dry_run

__all__ = [
    "HardeningConfig",
    "parse_ssh_port",
    "validate_ssh_port",
    "validate_public_key",
    "run",
    "set_dry_run",
    "is_dry_run",
]
