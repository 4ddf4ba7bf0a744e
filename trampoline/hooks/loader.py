"""Parse hook batches from configuration data."""

from typing import Any

from ..errors import InvalidHook
from .dispatcher import Hook


def _decode_payload(value: Any, index: int) -> bytes:
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise InvalidHook(f"hook {index}: payload must be a hex string")
    text = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise InvalidHook(f"hook {index}: payload is not valid hex: {e}") from e


def load_hooks_from_config(hooks_data: list[dict[str, Any]]) -> tuple[Hook, ...]:
    """Parse a list of hook config dicts into Hook instances.

    Each dict should have:
        target: str (required)
        payload: hex str, optional 0x prefix (optional, default empty)
        resource_budget: int (optional, default 0; ``budget`` also accepted)

    A batch runs as one unit, so a bad entry fails the whole load rather
    than being skipped.
    """
    if not isinstance(hooks_data, list):
        raise InvalidHook("hook batch must be a list")

    hooks = []
    for index, entry in enumerate(hooks_data):
        if not isinstance(entry, dict):
            raise InvalidHook(f"hook {index}: expected a mapping, got {type(entry).__name__}")

        target = entry.get("target")
        if not target:
            raise InvalidHook(f"hook {index}: missing target")

        payload = _decode_payload(entry.get("payload"), index)
        budget = entry.get("resource_budget", entry.get("budget", 0))

        try:
            hooks.append(Hook(target=target, payload=payload, resource_budget=budget))
        except InvalidHook as e:
            raise InvalidHook(f"hook {index}: {e}") from e

    return tuple(hooks)
