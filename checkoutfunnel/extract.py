"""Selector-based markup queries and browser-style form serialization."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup

_SKIPPED_INPUT_TYPES = {"submit", "button", "reset", "file", "image"}


class ContentExtractor(Protocol):
    def parse(self, markup: str) -> Any:
        ...

    def select(self, node: Any, selector: str) -> Sequence[Any]:
        ...

    def attribute(self, element: Any, name: str) -> str | None:
        ...

    def text(self, element: Any) -> str:
        ...


class SoupExtractor:
    """ContentExtractor backed by BeautifulSoup and soupsieve CSS selectors.

    ``node`` is a document from ``parse``, an element returned by an earlier
    ``select``, or a raw body, which is parsed on every call. Callers that
    query one response several times parse it once and reuse the document.
    """

    def parse(self, markup):
        return BeautifulSoup(markup, "html.parser")

    def select(self, node, selector):
        if isinstance(node, str):
            node = self.parse(node)
        return node.select(selector)

    def attribute(self, element, name):
        value = element.get(name)
        if isinstance(value, list):
            # bs4 splits multi-valued attributes such as class
            return " ".join(value)
        return value

    def text(self, element):
        return element.get_text()


@dataclass
class FormSubmission:
    method: str
    url: str
    fields: dict[str, Any] = field(default_factory=dict)


def _option_value(extractor: ContentExtractor, option) -> str:
    value = extractor.attribute(option, "value")
    return value if value is not None else extractor.text(option).strip()


def serialize_form(
    extractor: ContentExtractor,
    document: Any,
    page_url: str,
    form_selector: str,
    overrides: Mapping[str, Any] | None = None,
    submit_selector: str = '[type="submit"]',
) -> FormSubmission | None:
    """Build the submission a browser would send for the first matching form.

    Returns ``None`` when the page has no such form. Values in ``overrides``
    replace collected ones; a ``None`` override drops the field from the body
    the transport sends.
    """
    forms = extractor.select(document, form_selector)
    if not forms:
        return None
    form = forms[0]

    fields: dict[str, Any] = {}
    for element in extractor.select(form, "input[name]"):
        if extractor.attribute(element, "disabled") is not None:
            continue
        kind = (extractor.attribute(element, "type") or "text").lower()
        if kind in _SKIPPED_INPUT_TYPES:
            continue
        if kind in ("checkbox", "radio"):
            if extractor.attribute(element, "checked") is None:
                continue
            fields[extractor.attribute(element, "name")] = extractor.attribute(element, "value") or "on"
            continue
        fields[extractor.attribute(element, "name")] = extractor.attribute(element, "value") or ""

    for element in extractor.select(form, "textarea[name]"):
        if extractor.attribute(element, "disabled") is None:
            fields[extractor.attribute(element, "name")] = extractor.text(element)

    for element in extractor.select(form, "select[name]"):
        if extractor.attribute(element, "disabled") is not None:
            continue
        options = extractor.select(element, "option[selected]") or extractor.select(element, "option")
        if options:
            fields[extractor.attribute(element, "name")] = _option_value(extractor, options[0])

    for button in extractor.select(form, submit_selector):
        name = extractor.attribute(button, "name")
        if name:
            fields[name] = extractor.attribute(button, "value") or ""
            break

    if overrides:
        fields.update(overrides)

    method = (extractor.attribute(form, "method") or "GET").upper()
    action = extractor.attribute(form, "action") or ""
    return FormSubmission(method=method, url=urljoin(page_url, action), fields=fields)
