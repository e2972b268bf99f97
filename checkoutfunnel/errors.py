"""Failure taxonomy for one funnel iteration.

Every failure is fatal to the iteration it happens in. Steps raise these
internally; the step base class turns them into a failed ``StepResult`` and
the orchestrator aborts on it.
"""

from enum import Enum


class FunnelState(Enum):
    """Funnel stages, in the only order they are ever visited."""

    HOMEPAGE = "homepage"
    CATEGORY = "category"
    PRODUCT = "product"
    ADD_TO_CART = "add_to_cart"
    CART = "cart"
    CHECKOUT = "checkout"
    DONE = "done"


class FunnelFailure(Exception):
    """Base class for everything that aborts an iteration."""

    reason = "funnel failure"

    def __init__(self, message: str, state: FunnelState | None = None):
        super().__init__(message)
        self.message = message
        self.state = state

    def __str__(self) -> str:
        where = self.state.value if self.state else "?"
        return f"[{where}] {self.reason}: {self.message}"


class TransportFailure(FunnelFailure):
    """No response, or a response with a non-success status."""

    reason = "transport failure"

    def __init__(self, message: str, state: FunnelState | None = None, status: int | None = None):
        super().__init__(message, state)
        self.status = status


class DomainValidationFailure(FunnelFailure):
    """The server answered successfully but did not do the expected thing."""

    reason = "domain validation failure"


class NoCandidatesFound(FunnelFailure):
    """Extraction left nothing to navigate to."""

    reason = "no candidates found"


class EmptyCandidateSet(FunnelFailure):
    """RandomSelector was asked to pick from nothing."""

    reason = "empty candidate set"
