"""Per-iteration session state."""

import logging
from dataclasses import dataclass, field
from typing import Mapping
from urllib.parse import urljoin, urlsplit

from requests.cookies import RequestsCookieJar

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """State owned by exactly one funnel iteration.

    Created at the start of an iteration and dropped at its end, so no cookie
    ever leaks from one iteration (or one virtual user) into another.
    """

    base_url: str
    bypass_cache: bool = False
    cookies: RequestsCookieJar = field(default_factory=RequestsCookieJar)

    @property
    def host(self) -> str:
        return urlsplit(self.base_url).hostname or ""

    def resolve(self, target: str) -> str:
        """Absolute URL for an extracted href or a site path like ``/cart``."""
        return urljoin(self.base_url.rstrip("/") + "/", target)

    def seed_bypass_cookies(self, markers: Mapping[str, str]) -> None:
        for name, value in markers.items():
            self.cookies.set(name, value, domain=self.host, path="/")
        logger.debug(f"Seeded {len(markers)} cache bypass cookies for {self.host}")
