"""Endpoint descriptors.

An :class:`Endpoint` describes one REST operation as a value: method, path
segments, query and form parameters, optional body and a parser that turns
the raw response into the caller's result. Descriptors know nothing about
the network; either client can execute them.

Example:
    >>> job = Endpoint.get("job", "demo", "api", "json").with_query("depth", "1")
    >>> client.request(job)
"""

import json
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeAlias, TypeVar

import httpx
import pydantic

from .transport import RequestBody, Response, TransportRequest
from .url import BaseUrl

T = TypeVar("T")
U = TypeVar("U")

Parser: TypeAlias = Callable[[Response], T]
Pairs: TypeAlias = tuple[tuple[str, str], ...]


def parse_json(response: Response) -> Any:
    """Decode the body as an untyped JSON value."""
    return json.loads(response.body)


def parse_text(response: Response) -> str:
    return response.text


def parse_bytes(response: Response) -> bytes:
    return response.body


def parse_none(response: Response) -> None:  # noqa: ARG001
    return None


def parse_response(response: Response) -> Response:
    return response


def parse_model(model_type: type[T]) -> Parser[T]:
    """Build a parser validating the JSON body against a pydantic type.

    ``model_type`` may be a model class or any type pydantic understands,
    such as ``list[JobSummary]``.
    """
    adapter = pydantic.TypeAdapter(model_type)

    def parse(response: Response) -> T:
        return adapter.validate_json(response.body)

    return parse


def _pairs(items: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> Pairs:
    if isinstance(items, Mapping):
        items = items.items()
    return tuple((str(key), str(value)) for key, value in items)


@dataclass(frozen=True)
class Endpoint(Generic[T]):
    """An immutable description of one REST call.

    Attributes:
        method: HTTP method, upper case.
        segments: Path segments, each percent-encoded on its own.
        parser: Maps a 2xx response to the result.
        query: Ordered query parameters.
        form: Ordered form fields, sent url-encoded.
        body: Raw body, mutually exclusive with ``form``.
        headers: Extra headers for this call only.
        timeout: Overrides the client's timeout for this call.
    """

    method: str
    segments: tuple[str, ...]
    parser: Parser[T] = parse_json
    query: Pairs = ()
    form: Pairs = ()
    body: RequestBody | None = None
    headers: Pairs = ()
    timeout: float | None = None

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "segments", tuple(self.segments))
        if self.body is not None and self.form:
            msg = "An endpoint cannot carry both form fields and a raw body"
            raise ValueError(msg)

    @classmethod
    def get(cls, *segments: str, parser: Parser[Any] = parse_json) -> "Endpoint[Any]":
        return cls("GET", segments, parser)

    @classmethod
    def post(cls, *segments: str, parser: Parser[Any] = parse_none) -> "Endpoint[Any]":
        return cls("POST", segments, parser)

    def with_query(self, key: str, value: Any) -> "Endpoint[T]":
        """Return a copy with one more query parameter."""
        return replace(self, query=(*self.query, (key, str(value))))

    def with_tree(self, tree: str | None) -> "Endpoint[T]":
        """Add Jenkins' ``tree=`` filter when one is given."""
        if tree is None:
            return self
        return self.with_query("tree", tree)

    def with_form(
        self,
        fields: Mapping[str, Any] | Iterable[tuple[str, Any]],
    ) -> "Endpoint[T]":
        """Return a copy sending ``fields`` as a url-encoded form.

        Replaces any raw body.
        """
        return replace(self, form=(*self.form, *_pairs(fields)), body=None)

    def with_body(self, body: RequestBody) -> "Endpoint[T]":
        """Return a copy sending a raw body. Replaces any form fields."""
        return replace(self, body=body, form=())

    def with_xml(self, document: str | bytes) -> "Endpoint[T]":
        return self.with_body(RequestBody.xml(document))

    def with_header(self, name: str, value: str) -> "Endpoint[T]":
        return replace(self, headers=(*self.headers, (name, value)))

    def with_timeout(self, seconds: float) -> "Endpoint[T]":
        return replace(self, timeout=seconds)

    def parsed_with(self, parser: Parser[U]) -> "Endpoint[U]":
        """Return a copy whose result is produced by ``parser``."""
        return replace(self, parser=parser)  # type: ignore[return-value]

    def url(self, base_url: BaseUrl) -> str:
        """Absolute URL of this call, query string included."""
        url = base_url.join(self.segments)
        if self.query:
            url += "?" + str(httpx.QueryParams(list(self.query)))
        return url

    def prepare(
        self,
        base_url: BaseUrl,
        default_headers: Mapping[str, str] | None = None,
    ) -> TransportRequest:
        """Resolve the descriptor into a concrete request.

        Endpoint headers take precedence over ``default_headers``.
        """
        headers = httpx.Headers(default_headers or {})
        for name, value in self.headers:
            headers[name] = value
        return TransportRequest(
            method=self.method,
            url=self.url(base_url),
            headers=headers,
            form=self.form,
            body=self.body,
            timeout=self.timeout,
        )

    def parse(self, response: Response) -> T:
        return self.parser(response)
