"""
Boot Check-in.

A booting node reports its hardware identifiers (MAC addresses, usually)
and receives the script for its next boot action. Identifiers arrive in
mixed formats and are normalized (colons stripped, uppercased) before they
are used as the lookup key.

The node executes whatever comes back, so malformed input never raises to
the caller: it turns into a fallback script that makes the node reboot and
try again.
"""

import json
from collections.abc import Sequence
from typing import Any, Protocol

from hanlon.cli.client import APIClient
from hanlon.core.exceptions import BadRequestError
from hanlon.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

BOOT_PATH = "/boot"
HW_ID_SEPARATOR = "_"
REBOOT_DELAY_SECONDS = 30


class BootEngine(Protocol):
    """Engine collaborator that turns hardware ids into a boot script."""

    async def boot_checkin(self, hw_ids: Sequence[str]) -> str: ...


def normalize_hw_id(hw_id: str) -> str:
    """Canonical form of one identifier: 'aa:bb:cc' -> 'AABBCC'."""
    return hw_id.replace(":", "").upper()


def fallback_script(message: str) -> str:
    """Script that reports the error and reboots the node."""
    return (
        f"{message}\n"
        f"echo API Error, will reboot in {REBOOT_DELAY_SECONDS} seconds\n"
        f"sleep {REBOOT_DELAY_SECONDS}\n"
        "reboot\n"
    )


class BootCheckin:
    """
    Normalizes a check-in request and asks the engine for the boot script.

    Only available on the REST path; a local command invocation is refused.

    Usage:
        checkin = BootCheckin(engine)
        script = await checkin.checkin('{"hw_id": "aa:bb:cc:dd:ee:ff"}')
    """

    def __init__(self, engine: BootEngine) -> None:
        self.engine = engine

    async def checkin(self, raw_json: str, web_command: bool = True) -> str:
        """
        Resolve the hardware ids in raw_json and return the boot script.

        Args:
            raw_json: Request body, e.g. {"hw_id": "AA:BB_CC:DD"} or {"mac": [...]}
            web_command: False when invoked from the local command line

        Returns:
            The engine's boot script, or a fallback reboot script

        Raises:
            BadRequestError: When called outside the API
        """
        if not web_command:
            raise BadRequestError("Boot check-in is not supported outside the API")

        try:
            params = json.loads(raw_json)
        except (TypeError, ValueError) as e:
            log_with_source(logger, "boot", "warning", "Bad check-in JSON", error=str(e))
            return fallback_script(f"Bad JSON {e}")

        if not isinstance(params, dict):
            return fallback_script(f"Bad JSON: expected an object, got {type(params).__name__}")

        if params.get("mac") is not None:
            params["hw_id"] = params["mac"]
        raw_ids: Any = params.get("hw_id")

        if raw_ids is None or raw_ids == "":
            return fallback_script("Must Provide Hardware IDs [hw_id]")

        if isinstance(raw_ids, str):
            raw_ids = raw_ids.split(HW_ID_SEPARATOR)
        if not isinstance(raw_ids, (list, tuple)) or not all(isinstance(hw_id, str) for hw_id in raw_ids):
            return fallback_script("Hardware IDs [hw_id] must be a string or a list of strings")

        hw_ids = [normalize_hw_id(hw_id) for hw_id in raw_ids if hw_id]
        if not hw_ids:
            return fallback_script("Must Provide At Least One Hardware ID [hw_id]")

        log_with_source(logger, "boot", "info", "Boot called by node", hw_id=hw_ids)
        return await self.engine.boot_checkin(hw_ids)


class RestBootEngine:
    """BootEngine that forwards the check-in to the engine's /boot resource."""

    def __init__(self, client: APIClient) -> None:
        self.client = client

    async def boot_checkin(self, hw_ids: Sequence[str]) -> str:
        return await self.client.get_text(
            BOOT_PATH,
            params={"hw_id": HW_ID_SEPARATOR.join(hw_ids)},
        )
