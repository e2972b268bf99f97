"""HTTP transport seam between the funnel steps and Locust's HttpSession."""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from requests.cookies import RequestsCookieJar
from requests.exceptions import RequestException
from requests.structures import CaseInsensitiveDict

from .errors import TransportFailure

logger = logging.getLogger(__name__)


@dataclass
class Response:
    """The parts of an HTTP response the funnel looks at."""

    status: int
    url: str
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)

    def __post_init__(self):
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    def request(
        self,
        method: str,
        url: str,
        cookies: RequestsCookieJar,
        form_fields: Mapping[str, Any] | None = None,
        name: str | None = None,
    ) -> Response:
        ...


class LocustTransport:
    """Issues funnel requests through a virtual user's ``HttpSession``.

    The iteration's cookie jar is bound to the session before each request, so
    cookies set by the server (including across redirects) land in the jar that
    the current SessionContext owns and nowhere else.
    """

    def __init__(self, client):
        self.client = client

    def request(self, method, url, cookies, form_fields=None, name=None):
        self.client.cookies = cookies
        try:
            if method.upper() == "GET":
                response = self.client.request(method, url, params=form_fields, name=name)
            else:
                response = self.client.request(method, url, data=form_fields, name=name)
        except (RequestException, ValueError) as e:
            # HttpSession re-raises malformed-URL errors (javascript:, mailto:, bad hosts)
            raise TransportFailure(f"{method} {url} failed: {e}") from e

        # HttpSession reports connection errors as status 0 instead of raising
        if not response.status_code:
            error = getattr(response, "error", None) or "no response"
            raise TransportFailure(f"{method} {url} failed: {error}")

        logger.debug(f"{method} {url} -> {response.status_code}")
        return Response(
            status=response.status_code,
            url=response.url or url,
            body=response.text or "",
            headers=response.headers,
        )
