"""Budgeted hook dispatcher.

Runs an ordered batch of untrusted hooks on behalf of one authorized caller.
Each hook runs under its own resource ceiling with the dispatcher's identity
as sender, so it never holds the caller's privileges. A hook failing on its
own is ignored and the batch carries on.

After every hook the dispatcher checks that the hook could actually have
been given what it asked for. The environment keeps back 1/64 of the
dispatcher's remaining budget at each nested call, so if the requested
budget exceeds 63 times what is left afterwards, the hook ran starved. That
is fatal for the whole batch: a silently truncated budget is otherwise
indistinguishable from the hook failing on its own logic.

Near the threshold the dispatcher's own bookkeeping blurs the measurement,
so a marginally underfunded call can slip through. Exact boundaries are not
part of the contract.

The authorization check compares ``context.sender`` with the configured
caller. Hooks run in the same process and can reach the environment, so
nothing stops a hook from building its own root context that names the
caller. Treat the guard as a protocol between cooperating callers, not as
privilege isolation.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from ..environment import CallContext
from ..errors import InvalidHook, ResourceStarvation, Unauthorized
from ..metering import OutOfBudget

_log = logging.getLogger(__name__)

DEFAULT_ADDRESS = "trampoline"

# Fixed per-hook bookkeeping charged to the dispatcher's own meter.
HOOK_OVERHEAD = 50


@dataclass(frozen=True)
class Hook:
    """One unit of work in a batch: call ``target`` with ``payload``."""

    target: str
    payload: bytes = b""
    resource_budget: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.target, str) or not self.target:
            raise InvalidHook(f"hook target must be a non-empty string, got {self.target!r}")
        if isinstance(self.payload, (bytearray, memoryview)):
            object.__setattr__(self, "payload", bytes(self.payload))
        if not isinstance(self.payload, bytes):
            raise InvalidHook(f"hook payload must be bytes, got {type(self.payload).__name__}")
        budget = self.resource_budget
        if isinstance(budget, bool) or not isinstance(budget, int) or budget < 0:
            raise InvalidHook(f"resource_budget must be a non-negative int, got {budget!r}")


class HookDispatcher:
    """Execute hook batches for a single authorized caller."""

    def __init__(
        self,
        authorized_caller: str,
        *,
        address: str = DEFAULT_ADDRESS,
        hook_overhead: int = HOOK_OVERHEAD,
    ):
        if not isinstance(authorized_caller, str) or not authorized_caller:
            raise ValueError("authorized_caller must be a non-empty string")
        if hook_overhead < 0:
            raise ValueError(f"hook_overhead must be non-negative, got {hook_overhead}")
        self._authorized_caller = authorized_caller
        self._address = address
        self._hook_overhead = hook_overhead

    @property
    def authorized_caller(self) -> str:
        return self._authorized_caller

    @property
    def address(self) -> str:
        return self._address

    @property
    def hook_overhead(self) -> int:
        return self._hook_overhead

    def execute(self, hooks: Iterable[Hook], context: CallContext) -> None:
        """Run every hook in order.

        Args:
            hooks: The batch, in the order it must run.
            context: The frame the dispatcher was invoked in. ``sender`` is
                checked against the authorized caller, ``meter`` pays for
                everything and ``environment`` performs the nested calls.

        Raises:
            Unauthorized: ``context.sender`` is not the authorized caller.
                No hook has run.
            ResourceStarvation: A hook could not have received its full
                budget, or the dispatcher could not pay its own overhead
                to reach it. The dispatcher's meter is exhausted and no
                later hook runs.
            InvalidHook: The batch holds something that is not a ``Hook``.
        """
        self._authorize(context.sender)

        batch = tuple(hooks)
        for index, hook in enumerate(batch):
            if not isinstance(hook, Hook):
                raise InvalidHook(f"batch entry {index} is not a Hook: {hook!r}")

        meter = context.meter
        environment = context.environment
        forward_ratio = environment.reserve_divisor - 1

        for index, hook in enumerate(batch):
            try:
                meter.consume(self._hook_overhead)
                outcome = environment.call(
                    meter, self._address, hook.target, hook.payload, hook.resource_budget,
                )
            except OutOfBudget as e:
                # The dispatcher itself could not pay to reach this hook
                meter.exhaust()
                _log.error(
                    "hook %d (%s) starved: dispatcher could not pay its own overhead (%d remaining)",
                    index, hook.target, e.remaining,
                )
                raise ResourceStarvation(
                    index, hook.resource_budget, e.remaining, hook.target,
                ) from e

            remaining = meter.remaining
            if hook.resource_budget > forward_ratio * remaining:
                meter.exhaust()
                _log.error(
                    "hook %d (%s) starved: requested %d units, %d remaining after call",
                    index, hook.target, hook.resource_budget, remaining,
                )
                raise ResourceStarvation(index, hook.resource_budget, remaining, hook.target)

            _log.debug(
                "hook %d (%s) done: success=%s used=%d/%d",
                index, hook.target, outcome.success, outcome.used, outcome.allotted,
            )

    def _authorize(self, sender: str) -> None:
        if sender != self._authorized_caller:
            _log.warning("rejected hook batch from unauthorized sender %r", sender)
            raise Unauthorized(sender, self._authorized_caller)
