"""Budgeted hook dispatch."""

from .dispatcher import DEFAULT_ADDRESS, HOOK_OVERHEAD, Hook, HookDispatcher
from .loader import load_hooks_from_config

__all__ = [
    "DEFAULT_ADDRESS",
    "HOOK_OVERHEAD",
    "Hook",
    "HookDispatcher",
    "load_hooks_from_config",
]
