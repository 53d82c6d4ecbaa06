#!/usr/bin/env python3

"""Validation utilities for setup inputs."""

import re
import secrets
from typing import Optional

from lib.config import SSH_PORT_MIN, SSH_PORT_MAX


KEY_TYPE_PATTERN = r'^(ssh-ed25519|ssh-rsa|ssh-dss|ecdsa-sha2-nistp(256|384|521)|sk-ssh-ed25519@openssh\.com|sk-ecdsa-sha2-nistp256@openssh\.com)$'


def validate_ssh_port(port: int) -> bool:
    """Validate an SSH port number (unprivileged range only)."""
    return SSH_PORT_MIN <= port <= SSH_PORT_MAX


def parse_ssh_port(text: str) -> Optional[int]:
    """Parse a port typed by the user; None when not a valid SSH port."""
    text = text.strip()
    if not re.match(r'^[0-9]+$', text):
        return None
    port = int(text)
    if not validate_ssh_port(port):
        return None
    return port


def random_ssh_port() -> int:
    return SSH_PORT_MIN + secrets.randbelow(SSH_PORT_MAX - SSH_PORT_MIN + 1)


def validate_public_key(text: str) -> bool:
    """Validate pasted public key text: non-empty and on a single line."""
    key = text.strip()
    if not key:
        return False
    return '\n' not in key and '\r' not in key


def public_key_type(text: str) -> Optional[str]:
    parts = text.strip().split()
    if not parts:
        return None
    if re.match(KEY_TYPE_PATTERN, parts[0]):
        return parts[0]
    return None

