"""Stock call targets for dry runs.

Registered under ``builtin.*`` identities by ``register_builtin_targets``.
"""

from .environment import CallContext, TargetRegistry


class HookReverted(Exception):
    """Raised by a target that rejects its input."""


def noop(ctx: CallContext, payload: bytes) -> None:
    return None


def revert(ctx: CallContext, payload: bytes) -> None:
    reason = payload.decode("utf-8", errors="replace") or "reverted"
    raise HookReverted(reason)


def burn(ctx: CallContext, payload: bytes) -> None:
    """Consume one unit more than the frame holds, leaving it exhausted."""
    ctx.meter.consume(ctx.meter.remaining + 1)


def spend(ctx: CallContext, payload: bytes) -> int:
    """Consume the big-endian unsigned amount encoded in ``payload``."""
    units = int.from_bytes(payload, "big") if payload else 0
    ctx.meter.consume(units)
    return units


class Counter:
    """A shared counter whose ``increment`` can be registered as a target."""

    def __init__(self, cost: int = 0):
        self.value = 0
        self.cost = cost

    def increment(self, ctx: CallContext, payload: bytes) -> int:
        ctx.meter.consume(self.cost)
        self.value += 1
        return self.value


BUILTIN_TARGETS = {
    "builtin.noop": noop,
    "builtin.revert": revert,
    "builtin.burn": burn,
    "builtin.spend": spend,
}


def register_builtin_targets(registry: TargetRegistry) -> TargetRegistry:
    """Add the stock targets that are not already registered."""
    for identity, fn in BUILTIN_TARGETS.items():
        if not registry.has(identity):
            registry.register(identity, fn)
    return registry
