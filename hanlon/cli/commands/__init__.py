"""
CLI Commands.

Organized by slice.
"""

from hanlon.cli.commands.boot import boot
from hanlon.cli.commands.policy import policy

__all__ = [
    "boot",
    "policy",
]
