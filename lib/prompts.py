"""Interactive prompts for the setup run."""

from __future__ import annotations

from typing import Callable, Optional

from lib.config import SSH_PORT_MIN, SSH_PORT_MAX
from lib.validators import parse_ssh_port, random_ssh_port, validate_public_key, public_key_type


InputFunc = Callable[[str], str]


class SetupAborted(Exception):
    """Raised when the operator declines or a required input is missing."""


def confirm_setup(input_func: Optional[InputFunc] = None) -> bool:
    input_func = input_func or input
    answer = input_func("Proceed with setup? (y/n): ").strip()
    return answer in ("y", "Y")


def prompt_ssh_port(input_func: Optional[InputFunc] = None) -> int:
    """Ask for the SSH port until a valid one is given.

    An empty answer picks a random port in the allowed range.
    """
    input_func = input_func or input
    while True:
        answer = input_func(f"Enter SSH port ({SSH_PORT_MIN}-{SSH_PORT_MAX}, press Enter for random): ").strip()
        if not answer:
            port = random_ssh_port()
            print(f"No port provided. Generated random SSH port: {port}")
            return port

        port = parse_ssh_port(answer)
        if port is not None:
            return port

        print(f"Invalid port. Please enter a number between {SSH_PORT_MIN} and {SSH_PORT_MAX}.")


def prompt_public_key(input_func: Optional[InputFunc] = None) -> str:
    input_func = input_func or input
    key = input_func("Paste your Ed25519 public key: ").strip()
    if not key:
        raise SetupAborted("No public key provided")
    if not validate_public_key(key):
        raise SetupAborted("Public key must be a single line")

    if public_key_type(key) is None:
        print("  ⚠ Key type not recognised, installing it as given")
    elif public_key_type(key) != "ssh-ed25519":
        print(f"  ⚠ {public_key_type(key)} key provided, Ed25519 is recommended")
    return key
