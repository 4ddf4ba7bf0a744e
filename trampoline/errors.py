"""Error taxonomy for the hook dispatcher.

Only two conditions ever escape ``execute``: the invoker was not the
authorized caller, or a hook was starved of the budget it was promised.
Everything a hook does wrong on its own stays inside the hook.
"""

from typing import Optional


class TrampolineError(Exception):
    """Base class for dispatcher failures."""


class Unauthorized(TrampolineError):
    """Raised when ``execute`` is invoked by anyone but the authorized caller."""

    def __init__(self, sender: str, authorized_caller: str):
        self.sender = sender
        self.authorized_caller = authorized_caller
        super().__init__(f"{sender!r} is not authorized to execute hooks")


class ResourceStarvation(TrampolineError):
    """Raised when a hook provably ran with less than its requested budget.

    Fatal for the whole ``execute`` call: the dispatcher's own meter is
    exhausted before this is raised.
    """

    def __init__(self, index: int, requested: int, remaining: int, target: Optional[str] = None):
        self.index = index
        self.requested = requested
        self.remaining = remaining
        self.target = target
        super().__init__(
            f"hook {index} ({target}) requested {requested} units but only "
            f"{remaining} remained after the call"
        )


class InvalidHook(TrampolineError, ValueError):
    """Raised when a hook descriptor or batch entry is malformed."""
