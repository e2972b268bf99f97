"""Run one virtual-user iteration of the checkout funnel."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .checkout_data import make_faker
from .config import FunnelSettings
from .errors import FunnelFailure, FunnelState
from .extract import SoupExtractor
from .inspector import ResponseInspector
from .metrics import ERRORS, MetricsSink
from .selector import RandomSelector
from .session import SessionContext
from .steps import FUNNEL_STEPS, FunnelTools, NavigationStep, StepResult
from .transport import Transport

logger = logging.getLogger(__name__)


@dataclass
class IterationResult:
    completed: bool
    failure: FunnelFailure | None = None
    states: list[FunnelState] = field(default_factory=list)
    duration: float = 0.0

    @property
    def last_state(self) -> FunnelState | None:
        return self.states[-1] if self.states else None


class ScenarioOrchestrator:
    """Sequences the funnel steps for one virtual user.

    Each ``run()`` is one iteration with its own SessionContext. Think-time is
    slept between consecutive steps, never before the first or after the last.
    The first failing step aborts the iteration.
    """

    def __init__(
        self,
        tools: FunnelTools,
        steps: Sequence[type[NavigationStep]] = FUNNEL_STEPS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.tools = tools
        self.steps = [step(tools) for step in steps]
        self.sleep = sleep

    @classmethod
    def create(
        cls,
        settings: FunnelSettings,
        transport: Transport,
        metrics: MetricsSink,
        seed: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "ScenarioOrchestrator":
        tools = FunnelTools(
            settings=settings,
            transport=transport,
            extractor=SoupExtractor(),
            inspector=ResponseInspector.from_settings(settings),
            metrics=metrics,
            selector=RandomSelector(seed),
            fake=make_faker(seed),
        )
        return cls(tools, sleep=sleep)

    def new_context(self) -> SessionContext:
        settings = self.tools.settings
        context = SessionContext(base_url=settings.site_url, bypass_cache=settings.bypass_cache)
        if context.bypass_cache:
            context.seed_bypass_cookies(settings.bypass_cookies)
        return context

    def think(self) -> None:
        settings = self.tools.settings
        pause = self.tools.selector.pick_range(settings.think_time_min, settings.think_time_max)
        self.sleep(pause)

    @staticmethod
    def states_reached(step: NavigationStep, outcome: StepResult) -> tuple[FunnelState, ...]:
        """The step's states up to and including the one that failed, or all of them."""
        states = step.states
        if outcome.ok:
            return states
        if outcome.failure.state in states:
            return states[: states.index(outcome.failure.state) + 1]
        return states[:1]

    def run(self) -> IterationResult:
        started = time.perf_counter()
        context = self.new_context()
        result = IterationResult(completed=False)
        carried = None

        for index, step in enumerate(self.steps):
            if index:
                self.think()
            outcome = step.run(context, carried)
            result.states.extend(self.states_reached(step, outcome))
            if not outcome.ok:
                self.tools.metrics.record(ERRORS, 1)
                result.failure = outcome.failure
                result.duration = time.perf_counter() - started
                logger.warning(f"Funnel aborted: {outcome.failure}")
                return result
            carried = outcome.value

        self.tools.metrics.record(ERRORS, 0)
        result.completed = True
        result.states.append(FunnelState.DONE)
        result.duration = time.perf_counter() - started
        logger.debug(f"Funnel completed in {result.duration:.2f}s")
        return result
