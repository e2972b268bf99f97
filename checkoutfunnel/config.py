"""Environment-driven settings for the checkout funnel.

Every value can be overridden through an environment variable so the same
load file runs unchanged against local, staging and production storefronts.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

DEFAULT_SITE_URL = "https://test.cachewerk.com"

# Cookies most WordPress page caches treat as "do not serve from cache"
DEFAULT_BYPASS_COOKIES = {
    "wordpress_no_cache": "1",
    "woocommerce_items_in_cart": "1",
}

DEFAULT_CACHE_STATUS_HEADERS = (
    "x-cache",
    "x-proxy-cache",
    "x-litespeed-cache",
    "cf-cache-status",
    "x-cache-status",
)


_FALSE_VALUES = ("0", "false", "no", "off")


def env_bool(name: str, default: bool = False) -> bool:
    """Any non-empty value turns the flag on except 0/false/no/off."""
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw not in _FALSE_VALUES


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def env_int_optional(name: str) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def env_csv(name: str, default_values: Iterable[str]) -> tuple[str, ...]:
    raw = os.environ.get(name, "")
    if not raw.strip():
        return tuple(default_values)
    values = [x.strip() for x in raw.split(",") if x.strip()]
    return tuple(values) or tuple(default_values)


def env_pairs(name: str, default_pairs: Mapping[str, str]) -> dict[str, str]:
    """Parse ``a=1,b=2`` into a dict; falls back to ``default_pairs`` when unset."""
    raw = os.environ.get(name, "")
    if not raw.strip():
        return dict(default_pairs)
    pairs = {}
    for item in raw.split(","):
        if not item.strip():
            continue
        if "=" not in item:
            raise ValueError(f"{name}: expected name=value, got {item.strip()!r}")
        key, value = item.split("=", 1)
        pairs[key.strip()] = value.strip()
    return pairs


@dataclass(frozen=True)
class Selectors:
    """CSS selectors and markers describing the storefront's markup."""

    category_links: str = "li.product-category > a"
    product_links: str = (
        ".products .product:not(.product-type-variable) .woocommerce-loop-product__link"
    )
    quantity_inputs: str = ".input-text.qty"
    cart_form: str = "form.cart"
    item_added: str = ".woocommerce-message"
    cart_item: str = ".woocommerce-cart-form .cart_item"
    checkout_form: str = 'form[name="checkout"]'
    order_placed: str = ".woocommerce-order-received, .woocommerce-thankyou-order-received"
    submit_button: str = '[type="submit"]'


@dataclass(frozen=True)
class FunnelSettings:
    site_url: str = DEFAULT_SITE_URL
    bypass_cache: bool = False
    bypass_cookies: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BYPASS_COOKIES))
    cache_status_headers: tuple[str, ...] = DEFAULT_CACHE_STATUS_HEADERS
    cache_hit_values: tuple[str, ...] = ("hit",)
    think_time_min: float = 3.0
    think_time_max: float = 8.0
    exclude_category_pattern: str = "/decor/"
    cart_path: str = "cart"
    checkout_path: str = "checkout"
    billing_country: str = "US"
    selectors: Selectors = field(default_factory=Selectors)
    ramp_preset: str = "ramping"
    graceful_stop: float = 10.0
    graceful_ramp_down: float = 10.0
    metrics_report: str | None = None
    seed: int | None = None

    def __post_init__(self):
        if self.think_time_min < 0 or self.think_time_min > self.think_time_max:
            raise ValueError(
                f"think time range [{self.think_time_min}, {self.think_time_max}] is invalid"
            )
        try:
            re.compile(self.exclude_category_pattern)
        except re.error as e:
            raise ValueError(f"bad category exclusion pattern: {e}") from e

    @property
    def exclude_category_regex(self) -> re.Pattern:
        return re.compile(self.exclude_category_pattern)

    @classmethod
    def from_env(cls) -> "FunnelSettings":
        return cls(
            site_url=os.getenv("SITE_URL", DEFAULT_SITE_URL).strip() or DEFAULT_SITE_URL,
            bypass_cache=env_bool("BYPASS_CACHE"),
            bypass_cookies=env_pairs("BYPASS_CACHE_COOKIES", DEFAULT_BYPASS_COOKIES),
            cache_status_headers=tuple(
                h.lower() for h in env_csv("CACHE_STATUS_HEADERS", DEFAULT_CACHE_STATUS_HEADERS)
            ),
            cache_hit_values=tuple(v.lower() for v in env_csv("CACHE_HIT_VALUES", ["hit"])),
            think_time_min=env_float("THINK_TIME_MIN", 3.0),
            think_time_max=env_float("THINK_TIME_MAX", 8.0),
            exclude_category_pattern=os.getenv("EXCLUDE_CATEGORY_PATTERN", "/decor/"),
            ramp_preset=os.getenv("RAMP_PRESET", "ramping").strip(),
            graceful_stop=env_float("GRACEFUL_STOP", 10.0),
            graceful_ramp_down=env_float("GRACEFUL_RAMP_DOWN", 10.0),
            metrics_report=os.getenv("METRICS_REPORT") or None,
            seed=env_int_optional("FUNNEL_SEED"),
        )
