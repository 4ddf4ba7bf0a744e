"""Execution environment for metered nested calls.

The environment resolves target identities to callables and runs each call
under a child meter carved out of the caller's meter. It never forwards more
than ``remaining - remaining // reserve_divisor`` of the caller's budget,
whatever the caller asks for.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .metering import RESERVE_DIVISOR, Meter

_log = logging.getLogger(__name__)

# Charged to the caller's meter for every nested call, before anything is forwarded.
CALL_OVERHEAD = 100

TargetFn = Callable[["CallContext", bytes], Any]


class UnknownTarget(LookupError):
    """Raised inside a call frame when no target is registered for an identity."""


@dataclass(frozen=True)
class CallContext:
    """What a running callable sees: who called it, its own identity, its meter."""

    sender: str
    address: str
    meter: Meter
    environment: "CallEnvironment"

    @classmethod
    def root(
        cls,
        sender: str,
        address: str,
        budget: int,
        environment: "CallEnvironment",
    ) -> "CallContext":
        """Build the top-level context for an externally triggered call."""
        return cls(sender=sender, address=address, meter=Meter(budget), environment=environment)

    def call(self, target: str, payload: bytes = b"", budget: int = 0) -> "CallOutcome":
        """Make a nested call from this frame, paid for by this frame's meter."""
        return self.environment.call(self.meter, self.address, target, payload, budget)


@dataclass(frozen=True)
class CallOutcome:
    """Result of one nested call."""

    target: str
    success: bool
    allotted: int
    used: int
    output: Any = None
    error: Optional[BaseException] = None


class TargetRegistry:
    """Map target identities to callables."""

    def __init__(self, targets: Optional[Dict[str, TargetFn]] = None):
        self._targets: Dict[str, TargetFn] = {}
        for identity, fn in (targets or {}).items():
            self.register(identity, fn)

    def register(self, identity: str, fn: Optional[TargetFn] = None):
        """Register ``fn`` under ``identity``.

        Works as a decorator when ``fn`` is omitted:

            @registry.register("counter.increment")
            def increment(ctx, payload):
                ...
        """
        if not isinstance(identity, str) or not identity:
            raise ValueError("target identity must be a non-empty string")

        def decorator(func: TargetFn) -> TargetFn:
            if not callable(func):
                raise TypeError(f"target {identity!r} must be callable")
            if identity in self._targets:
                raise ValueError(f"target already registered: {identity}")
            self._targets[identity] = func
            return func

        if fn is None:
            return decorator
        return decorator(fn)

    def has(self, identity: str) -> bool:
        return identity in self._targets

    def resolve(self, identity: str) -> Optional[TargetFn]:
        return self._targets.get(identity)

    @property
    def identities(self) -> list[str]:
        return list(self._targets.keys())

    def clear(self) -> None:
        """Remove every registration. Primarily for testing."""
        self._targets.clear()


class CallEnvironment:
    """Run targets as metered nested calls."""

    def __init__(
        self,
        targets: Optional[TargetRegistry] = None,
        reserve_divisor: int = RESERVE_DIVISOR,
        call_overhead: int = CALL_OVERHEAD,
    ):
        if reserve_divisor < 2:
            raise ValueError(f"reserve_divisor must be at least 2, got {reserve_divisor}")
        if call_overhead < 0:
            raise ValueError(f"call_overhead must be non-negative, got {call_overhead}")
        self.targets = targets if targets is not None else TargetRegistry()
        self.reserve_divisor = reserve_divisor
        self.call_overhead = call_overhead

    def call(
        self,
        caller_meter: Meter,
        sender: str,
        target: str,
        payload: bytes,
        budget: int,
    ) -> CallOutcome:
        """Invoke ``target`` with at most ``budget`` units taken from ``caller_meter``.

        The call overhead is the caller's own cost: if it cannot be paid the
        resulting ``OutOfBudget`` propagates to the caller. Anything the target
        raises, including ``SystemExit``, is caught and reported in the
        outcome; only ``KeyboardInterrupt`` gets through. Whatever the child
        meter used is charged back to the caller.
        """
        caller_meter.consume(self.call_overhead)

        allotted = min(budget, caller_meter.forwardable(self.reserve_divisor))
        child = Meter(allotted)
        ctx = CallContext(sender=sender, address=target, meter=child, environment=self)

        output = None
        error: Optional[BaseException] = None
        try:
            fn = self.targets.resolve(target)
            if fn is None:
                raise UnknownTarget(f"no target registered for {target!r}")
            output = fn(ctx, payload)
        except (Exception, SystemExit, GeneratorExit) as e:
            error = e
        finally:
            # child.used never exceeds allotted, which never exceeds what the caller holds
            caller_meter.consume(child.used)

        if error is not None:
            _log.debug("call to %s failed after %d/%d units: %s", target, child.used, allotted, error)

        return CallOutcome(
            target=target,
            success=error is None,
            allotted=allotted,
            used=child.used,
            output=output,
            error=error,
        )
