"""Checkout funnel load generator.

Usage::

    from checkoutfunnel import FunnelSettings, MetricsSink, ScenarioOrchestrator

    orchestrator = ScenarioOrchestrator.create(settings, transport, MetricsSink())
    result = orchestrator.run()
"""

from .config import FunnelSettings, Selectors
from .errors import (
    DomainValidationFailure,
    EmptyCandidateSet,
    FunnelFailure,
    FunnelState,
    NoCandidatesFound,
    TransportFailure,
)
from .inspector import CacheMetricSample, ResponseInspector
from .metrics import MetricObservation, MetricsSink
from .orchestrator import IterationResult, ScenarioOrchestrator
from .phases import Phase, RampSchedule, build_profile
from .presets import PRESETS, schedule_for
from .selector import RandomSelector
from .session import SessionContext
from .steps import (
    CartStep,
    CategoryStep,
    CheckoutStep,
    HomepageStep,
    NavigationStep,
    ProductStep,
    StepResult,
)
from .transport import LocustTransport, Response

__all__ = [
    "FunnelSettings",
    "Selectors",
    "FunnelFailure",
    "FunnelState",
    "TransportFailure",
    "DomainValidationFailure",
    "NoCandidatesFound",
    "EmptyCandidateSet",
    "CacheMetricSample",
    "ResponseInspector",
    "MetricObservation",
    "MetricsSink",
    "IterationResult",
    "ScenarioOrchestrator",
    "Phase",
    "RampSchedule",
    "build_profile",
    "PRESETS",
    "schedule_for",
    "RandomSelector",
    "SessionContext",
    "NavigationStep",
    "HomepageStep",
    "CategoryStep",
    "ProductStep",
    "CartStep",
    "CheckoutStep",
    "StepResult",
    "LocustTransport",
    "Response",
]
