"""The five funnel steps a virtual user walks through, in order.

Each step issues its request(s), records cache metrics for every response it
gets back, validates the response and hands the data the next step needs to
the orchestrator. Nothing is retried: the first failed check ends the step.
"""

import logging
from dataclasses import dataclass
from typing import Any

from .checkout_data import build_checkout_fields
from .config import FunnelSettings
from .errors import (
    DomainValidationFailure,
    FunnelFailure,
    FunnelState,
    NoCandidatesFound,
    TransportFailure,
)
from .extract import ContentExtractor, FormSubmission, serialize_form
from .inspector import ResponseInspector
from .metrics import MetricsSink
from .selector import RandomSelector
from .session import SessionContext
from .transport import Response, Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    value: Any = None
    failure: FunnelFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def succeeded(cls, value=None) -> "StepResult":
        return cls(value=value)

    @classmethod
    def failed(cls, failure: FunnelFailure) -> "StepResult":
        return cls(failure=failure)


@dataclass
class FunnelTools:
    """Collaborators shared by the steps of one virtual user."""

    settings: FunnelSettings
    transport: Transport
    extractor: ContentExtractor
    inspector: ResponseInspector
    metrics: MetricsSink
    selector: RandomSelector
    fake: Any


class NavigationStep:
    name = "step"
    state = FunnelState.HOMEPAGE

    def __init__(self, tools: FunnelTools):
        self.tools = tools

    @property
    def states(self) -> tuple[FunnelState, ...]:
        """Funnel states this step walks through, in order."""
        return (self.state,)

    def run(self, context: SessionContext, carried: Any = None) -> StepResult:
        try:
            value = self.perform(context, carried)
        except FunnelFailure as failure:
            if failure.state is None:
                failure.state = self.state
            return StepResult.failed(failure)
        return StepResult.succeeded(value)

    def perform(self, context: SessionContext, carried: Any) -> Any:
        raise NotImplementedError

    def fetch(self, context, method, target, form_fields=None, state=None) -> Response:
        """Resolve ``target``, send the request and record the cache metrics of whatever comes back."""
        state = state or self.state
        try:
            url = context.resolve(target)
        except ValueError as e:
            raise TransportFailure(f"malformed URL {target!r}: {e}", state) from e
        try:
            response = self.tools.transport.request(
                method, url, context.cookies, form_fields=form_fields, name=self.name
            )
        except TransportFailure as failure:
            if failure.state is None:
                failure.state = state
            raise

        was_cached, sample = self.tools.inspector.inspect(response)
        self.tools.metrics.record_response(was_cached, sample)
        return response

    def parse(self, response: Response) -> Any:
        return self.tools.extractor.parse(response.body)

    def form(self, document, response: Response, form_selector: str, overrides, missing: str) -> FormSubmission:
        try:
            submission = serialize_form(
                self.tools.extractor,
                document,
                response.url,
                form_selector,
                overrides=overrides,
                submit_selector=self.tools.settings.selectors.submit_button,
            )
        except ValueError as e:
            raise DomainValidationFailure(f"{missing}: form action is malformed ({e})") from e
        if submission is None:
            raise DomainValidationFailure(missing)
        return submission

    def require_ok(self, response: Response, state=None) -> None:
        if not response.ok:
            raise TransportFailure(
                f"status code was {response.status}, not 2xx ({response.url})",
                state or self.state,
                status=response.status,
            )

    def require_marker(self, document, selector: str, message: str, state=None) -> None:
        if not self.tools.extractor.select(document, selector):
            raise DomainValidationFailure(message, state or self.state)

    def hrefs(self, document, selector: str) -> list[str]:
        extractor = self.tools.extractor
        links = []
        for element in extractor.select(document, selector):
            href = extractor.attribute(element, "href")
            if href:
                links.append(str(href))
        return links


class HomepageStep(NavigationStep):
    name = "Load homepage"
    state = FunnelState.HOMEPAGE

    def extract_categories(self, document) -> tuple[str, ...]:
        settings = self.tools.settings
        excluded = settings.exclude_category_regex
        # skip non-shop collections (WP swag lives under /decor/)
        return tuple(
            href
            for href in self.hrefs(document, settings.selectors.category_links)
            if not excluded.search(href)
        )

    def perform(self, context, carried):
        response = self.fetch(context, "GET", context.base_url)
        self.require_ok(response)

        categories = self.extract_categories(self.parse(response))
        if not categories:
            raise NoCandidatesFound("homepage lists no shoppable categories")
        logger.debug(f"Found {len(categories)} categories")
        return categories


class CategoryStep(NavigationStep):
    name = "Load category"
    state = FunnelState.CATEGORY

    def extract_products(self, document) -> tuple[str, ...]:
        # the selector already drops variable products: they need options picked
        return tuple(self.hrefs(document, self.tools.settings.selectors.product_links))

    def perform(self, context, categories):
        category = self.tools.selector.pick_one(categories)
        response = self.fetch(context, "GET", category)
        self.require_ok(response)

        products = self.extract_products(self.parse(response))
        if not products:
            raise NoCandidatesFound(f"no simple products in {category}")
        return products


class ProductStep(NavigationStep):
    """Open a product page and add the product to the cart."""

    name = "Load and add product to cart"
    state = FunnelState.PRODUCT
    states = (FunnelState.PRODUCT, FunnelState.ADD_TO_CART)

    def quantity_fields(self, document) -> dict[str, int]:
        extractor = self.tools.extractor
        fields = {}
        for element in extractor.select(document, self.tools.settings.selectors.quantity_inputs):
            name = extractor.attribute(element, "name")
            if name:
                fields[name] = 1
        return fields

    def perform(self, context, products):
        selectors = self.tools.settings.selectors
        product = self.tools.selector.pick_one(products)
        response = self.fetch(context, "GET", product)
        self.require_ok(response)

        document = self.parse(response)
        submission = self.form(
            document,
            response,
            selectors.cart_form,
            self.quantity_fields(document),
            f"no add-to-cart form on {product}",
        )

        added = FunnelState.ADD_TO_CART
        form_response = self.fetch(
            context, submission.method, submission.url, submission.fields, state=added
        )
        self.require_ok(form_response, state=added)
        self.require_marker(
            self.parse(form_response), selectors.item_added, "item was not added to cart", state=added
        )
        return product


class CartStep(NavigationStep):
    name = "Load cart"
    state = FunnelState.CART

    def perform(self, context, carried):
        response = self.fetch(context, "GET", self.tools.settings.cart_path)
        self.require_ok(response)
        self.require_marker(self.parse(response), self.tools.settings.selectors.cart_item, "cart was empty")
        return carried


class CheckoutStep(NavigationStep):
    name = "Place order"
    state = FunnelState.CHECKOUT

    def perform(self, context, carried):
        settings = self.tools.settings
        response = self.fetch(context, "GET", settings.checkout_path)
        self.require_ok(response)

        fields = build_checkout_fields(self.tools.fake, self.tools.selector, settings.billing_country)
        submission = self.form(
            self.parse(response),
            response,
            settings.selectors.checkout_form,
            fields,
            "checkout page has no checkout form",
        )

        # the order-placed marker decides, whatever the status code says
        form_response = self.fetch(context, submission.method, submission.url, submission.fields)
        self.require_marker(self.parse(form_response), settings.selectors.order_placed, "order was not placed")
        return form_response.url


FUNNEL_STEPS = (HomepageStep, CategoryStep, ProductStep, CartStep, CheckoutStep)
