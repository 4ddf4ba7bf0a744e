"""Trampoline - dispatch untrusted hooks under verified resource budgets."""

__version__ = "0.1.0"

from .environment import CallContext, CallEnvironment, CallOutcome, TargetRegistry
from .errors import InvalidHook, ResourceStarvation, TrampolineError, Unauthorized
from .hooks import Hook, HookDispatcher, load_hooks_from_config
from .metering import Meter, OutOfBudget

__all__ = [
    "CallContext",
    "CallEnvironment",
    "CallOutcome",
    "TargetRegistry",
    "InvalidHook",
    "ResourceStarvation",
    "TrampolineError",
    "Unauthorized",
    "Hook",
    "HookDispatcher",
    "load_hooks_from_config",
    "Meter",
    "OutOfBudget",
]
