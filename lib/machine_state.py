#!/usr/bin/env python3
"""Machine capabilities and persisted record of the hardening run."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Optional, Any

from lib.config import HardeningConfig, MACHINE_TYPES, SSH_PORT_MIN, SSH_PORT_MAX


STATE_DIR = "/opt/server_prep/state"
STATE_FILE = os.path.join(STATE_DIR, "setup.json")

_SETUP_STATE_REQUIRED_KEYS = ("ssh_port", "machine_type", "completed_at")


def is_container(machine_type: str) -> bool:
    """Check if running in any container type."""
    return machine_type in ("unprivileged", "oci")


def can_modify_kernel(machine_type: str) -> bool:
    """Check if kernel parameters can be modified."""
    return machine_type in ("vm", "privileged", "hardware")


def can_manage_firewall(machine_type: str) -> bool:
    """Check if firewall can be managed."""
    return machine_type in ("vm", "privileged", "hardware")


def save_setup_state(config: HardeningConfig, state_file: Optional[str] = None) -> None:
    """Record the chosen port and key type so the operator can recall them."""
    state_file = state_file or STATE_FILE
    os.makedirs(os.path.dirname(state_file), exist_ok=True)

    state: dict[str, Any] = config.to_dict()
    state["completed_at"] = datetime.now(timezone.utc).isoformat(timespec="seconds")

    with open(state_file, 'w') as f:
        json.dump(state, f, indent=2)
    os.chmod(state_file, 0o600)


def _validate_setup_state(state: Any) -> Optional[str]:
    """Validate setup state structure.

    Returns None if valid, or an error message string if invalid.
    """
    if not isinstance(state, dict):
        return f"Expected dict, got {type(state).__name__}"

    missing = [k for k in _SETUP_STATE_REQUIRED_KEYS if k not in state]
    if missing:
        return f"Missing required keys: {', '.join(missing)}"

    port = state["ssh_port"]
    if not isinstance(port, int) or not SSH_PORT_MIN <= port <= SSH_PORT_MAX:
        return f"Invalid ssh_port: {port!r}"

    if state["machine_type"] not in MACHINE_TYPES:
        return f"Unknown machine_type: {state['machine_type']!r}"

    return None


def load_setup_state(state_file: Optional[str] = None) -> Optional[dict[str, Any]]:
    """Load the record of the last hardening run."""
    state_file = state_file or STATE_FILE
    if not os.path.exists(state_file):
        return None

    try:
        with open(state_file, 'r') as f:
            state = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        print(f"Warning: Failed to load setup state: {e}")
        return None

    error = _validate_setup_state(state)
    if error:
        print(f"Warning: Invalid setup state ({error})")
        return None

    return state
