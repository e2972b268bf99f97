import pytest

from checkoutfunnel.checkout_data import make_faker
from checkoutfunnel.config import FunnelSettings
from checkoutfunnel.extract import SoupExtractor
from checkoutfunnel.inspector import ResponseInspector
from checkoutfunnel.metrics import MetricsSink
from checkoutfunnel.orchestrator import ScenarioOrchestrator
from checkoutfunnel.selector import RandomSelector
from checkoutfunnel.steps import FunnelTools
from checkoutfunnel.transport import Response

SITE = "https://shop.test"

OCP_FOOTER = (
    "<!-- plugin=object-cache-pro client=phpredis metric#hits=1320 metric#misses=12 "
    "metric#hit-ratio=99.1 metric#store-reads=40 metric#store-writes=3 "
    "metric#ms-total=180.2 metric#ms-cache=4.51 metric#ms-cache-ratio=2.5 -->"
)


def page(content, footer=""):
    return f"<html><body>{content}{footer}</body></html>"


def homepage_html(hrefs):
    items = "".join(
        f'<li class="product-category product"><a href="{href}">{href}</a></li>' for href in hrefs
    )
    return page(f'<ul class="products">{items}</ul>', OCP_FOOTER)


def category_html(products):
    """products: list of (href, product_type)"""
    items = "".join(
        f'<li class="product type-product product-type-{kind}">'
        f'<a href="{href}" class="woocommerce-LoopProduct-link woocommerce-loop-product__link">x</a>'
        "</li>"
        for href, kind in products
    )
    return page(f'<ul class="products columns-4">{items}</ul>')


def product_html(action):
    return page(
        f'<form class="cart" action="{action}" method="post" enctype="multipart/form-data">'
        '<div class="quantity">'
        '<input type="number" class="input-text qty text" name="quantity" value="1" min="1">'
        "</div>"
        '<button type="submit" name="add-to-cart" value="42" class="single_add_to_cart_button">Add</button>'
        "</form>"
    )


def added_html(added=True):
    message = '<div class="woocommerce-message">"Beanie" has been added to your cart.</div>' if added else ""
    return page(message)


def cart_html(has_item=True):
    row = '<tr class="woocommerce-cart-form__cart-item cart_item"><td>Beanie</td></tr>' if has_item else ""
    return page(f'<form class="woocommerce-cart-form"><table>{row}</table></form>')


def checkout_html(action=f"{SITE}/checkout/"):
    return page(
        f'<form name="checkout" method="post" class="checkout woocommerce-checkout" action="{action}">'
        '<input type="text" name="billing_first_name" value="">'
        '<input type="text" name="billing_company" value="">'
        '<input type="radio" name="payment_method" value="cod" checked="checked">'
        '<input type="radio" name="payment_method" value="bacs">'
        '<input type="hidden" name="woocommerce-process-checkout-nonce" value="abc123">'
        '<textarea name="order_comments"></textarea>'
        '<button type="submit" name="woocommerce_checkout_place_order" value="Place order">Place order</button>'
        "</form>"
    )


def order_html(placed=True):
    notice = '<p class="woocommerce-thankyou-order-received">Thank you.</p>' if placed else ""
    return page(f'<div class="woocommerce-order">{notice}</div>')


class ScriptedTransport:
    """Transport double answering from a {(method, url): response} table.

    A route is (status, body[, headers]) or an exception instance to raise.
    """

    def __init__(self, routes):
        self.routes = dict(routes)
        self.calls = []

    def request(self, method, url, cookies, form_fields=None, name=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "cookies": cookies,
                "cookies_sent": {cookie.name: cookie.value for cookie in cookies},
                "fields": form_fields,
                "name": name,
            }
        )
        route = self.routes.get((method, url))
        if route is None:
            return Response(status=404, url=url, body=page("not found"))
        if isinstance(route, Exception):
            raise route
        status, body = route[:2]
        headers = route[2] if len(route) > 2 else {}
        return Response(status=status, url=url, body=body, headers=headers)

    def urls(self, method=None):
        return [c["url"] for c in self.calls if method is None or c["method"] == method]


def storefront_routes():
    """A storefront where every funnel step succeeds."""
    simple = f"{SITE}/product/beanie/"
    return {
        ("GET", SITE): (200, homepage_html(["/shop/a", "/shop/decor/b", "/shop/c"]), {"X-Cache": "MISS"}),
        ("GET", f"{SITE}/shop/a"): (200, category_html([(simple, "simple")])),
        ("GET", f"{SITE}/shop/c"): (200, category_html([(simple, "simple")])),
        ("GET", simple): (200, product_html(simple), {"X-Cache": "HIT"}),
        ("POST", simple): (200, added_html()),
        ("GET", f"{SITE}/cart"): (200, cart_html()),
        ("GET", f"{SITE}/checkout"): (200, checkout_html()),
        ("POST", f"{SITE}/checkout/"): (200, order_html()),
    }


@pytest.fixture
def settings():
    return FunnelSettings(site_url=SITE, think_time_min=1.0, think_time_max=2.0)


@pytest.fixture
def metrics():
    return MetricsSink()


@pytest.fixture
def storefront():
    return ScriptedTransport(storefront_routes())


@pytest.fixture
def make_tools(settings, metrics):
    def factory(transport, fake=None, seed=7, settings_override=None):
        active = settings_override or settings
        return FunnelTools(
            settings=active,
            transport=transport,
            extractor=SoupExtractor(),
            inspector=ResponseInspector.from_settings(active),
            metrics=metrics,
            selector=RandomSelector(seed),
            fake=fake if fake is not None else make_faker(seed),
        )

    return factory


@pytest.fixture
def make_orchestrator(make_tools):
    def factory(transport, pauses=None, **kwargs):
        sleep = pauses.append if pauses is not None else (lambda seconds: None)
        return ScenarioOrchestrator(make_tools(transport, **kwargs), sleep=sleep)

    return factory
