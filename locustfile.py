"""
WooCommerce Checkout Funnel Load Test

Every virtual user walks the whole purchase funnel once per iteration:
- Load the homepage and pick a product category
- Load the category and pick a simple product
- Load the product and add it to the cart
- Load the cart
- Load the checkout and place an order with synthetic billing data

Besides Locust's request stats, every response is inspected for page-cache
hits and Object Cache Pro instrumentation, summarised when the test stops.

Usage:
    SITE_URL=https://shop.example.com locust -f locustfile.py
    BYPASS_CACHE=1 RAMP_PRESET=constant locust -f locustfile.py --headless
"""

import itertools
import logging
import time

from locust import HttpUser, LoadTestShape, constant, events, task

from checkoutfunnel import FunnelSettings, LocustTransport, MetricsSink, ScenarioOrchestrator
from checkoutfunnel.presets import schedule_for

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SETTINGS = FunnelSettings.from_env()
METRICS = MetricsSink()

_user_numbers = itertools.count()


class CheckoutFunnelUser(HttpUser):
    """
    Simulates one shopper buying a single product.

    Think time is slept inside the funnel, between steps; a new iteration
    starts right after the previous one ends.
    """

    wait_time = constant(0)
    host = SETTINGS.site_url

    def on_start(self):
        number = next(_user_numbers)
        seed = SETTINGS.seed + number if SETTINGS.seed is not None else None
        self.orchestrator = ScenarioOrchestrator.create(
            SETTINGS, LocustTransport(self.client), METRICS, seed=seed
        )
        logger.debug(f"User {number} started")

    @task
    def checkout_funnel(self):
        """One full funnel iteration, reported to Locust as a single FUNNEL entry."""
        started = time.perf_counter()
        result = self.orchestrator.run()
        self.environment.events.request.fire(
            request_type="FUNNEL",
            name="checkout funnel",
            response_time=(time.perf_counter() - started) * 1000,
            response_length=0,
            exception=result.failure,
            context={"states": [state.value for state in result.states]},
        )


if SETTINGS.ramp_preset:

    class FunnelRampShape(LoadTestShape):
        """Drives the user count from the RAMP_PRESET ramp profile."""

        schedule = schedule_for(
            SETTINGS.ramp_preset, ramp_down_s=SETTINGS.graceful_ramp_down, seed=SETTINGS.seed
        )

        def tick(self):
            return self.schedule.tick(self.get_run_time())


@events.init.add_listener
def on_locust_init(environment, **kwargs):
    """Give running iterations GRACEFUL_STOP seconds to finish when the test stops."""
    environment.stop_timeout = SETTINGS.graceful_stop


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    logger.info("=" * 60)
    logger.info("WooCommerce Checkout Funnel Load Test")
    logger.info("=" * 60)
    logger.info(f"Target: {SETTINGS.site_url}")
    logger.info(f"Cache bypass: {'on' if SETTINGS.bypass_cache else 'off'}")
    logger.info(f"Think time: {SETTINGS.think_time_min}-{SETTINGS.think_time_max}s")
    logger.info(f"Ramp preset: {SETTINGS.ramp_preset or '(command line)'}")
    logger.info("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    logger.info("=" * 60)
    logger.info("Load test complete")
    for name, stats in METRICS.summary().items():
        line = f"  {name:15s} count={stats['count']} avg={stats['avg']:.2f} p95={stats['p95']:.2f}"
        if "rate" in stats:
            line += f" rate={stats['rate']:.2%}"
        logger.info(line)
    logger.info("=" * 60)
    if SETTINGS.metrics_report:
        METRICS.write_report(SETTINGS.metrics_report)
