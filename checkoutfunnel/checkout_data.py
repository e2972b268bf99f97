"""Synthetic billing data for the checkout form."""

from typing import Any

from faker import Faker

from .selector import RandomSelector

CheckoutFieldSet = dict[str, Any]

# billing_postcode is always drawn from this state's ranges, whatever
# billing_state says; WooCommerce only checks the US zip format.
POSTCODE_STATE = "DE"


def make_faker(seed: int | None = None) -> Faker:
    fake = Faker("en_US")
    if seed is not None:
        fake.seed_instance(seed)
    return fake


def build_checkout_fields(fake: Faker, selector: RandomSelector, country: str = "US") -> CheckoutFieldSet:
    """Fresh billing fields for one iteration.

    Company, second address line and order comment are each present about
    half the time; ``None`` means "leave the field empty", not an error.
    The email gets a numeric prefix so concurrent orders do not collide.
    """
    return {
        "billing_first_name": fake.first_name(),
        "billing_last_name": fake.last_name(),
        "billing_company": fake.company() if fake.pybool() else None,
        "billing_country": country,
        "billing_state": fake.state_abbr(),
        "billing_address_1": fake.street_address(),
        "billing_address_2": fake.secondary_address() if fake.pybool() else None,
        "billing_city": fake.city(),
        "billing_postcode": fake.zipcode_in_state(POSTCODE_STATE),
        "billing_phone": fake.phone_number(),
        "billing_email": f"{selector.pick_int(1, 100)}-{fake.safe_email()}",
        "order_comments": " ".join(fake.sentences()) if fake.pybool() else None,
    }
