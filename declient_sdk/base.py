"""Base class of every generated client.

Generated methods only call the primitives defined here: build a request,
attach content, invoke, read headers and read the body. Conversions to the
declared Python types go through pydantic.
"""

import enum
import io
import logging
import re
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_json, to_jsonable_python

from .client import HttpClient
from .exceptions import HeaderConversionError, ResponseDecodeError
from .messages import ServiceContent, ServiceRequest

_TOKEN = re.compile(r"\{([^{}]+)\}")

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
BINARY_CONTENT_TYPE = "application/octet-stream"


def format_value(value: Any) -> str:
    """Text form of a path, query or header value.

    Values go through pydantic's JSON mode, so an enum sends its value and a
    boolean sends ``true`` or ``false``. Containers and models are sent as
    JSON text; unknown objects fall back to ``str``.
    """
    if isinstance(value, str) and not isinstance(value, enum.Enum):
        return value
    plain = to_jsonable_python(value, fallback=str)
    if isinstance(plain, bool):
        return "true" if plain else "false"
    if plain is None:
        return ""
    if isinstance(plain, (str, int, float)):
        return str(plain)
    return to_json(plain).decode("utf-8")


def _query_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [format_value(item) for item in value]
    return format_value(value)


class DiscoveryAwareBase:
    """Binds a generated client to a logical service and its base route."""

    def __init__(
        self,
        client: HttpClient,
        service_name: str,
        base_route: str = "",
        logger: Optional[logging.Logger] = None,
    ):
        self.client = client
        self.service_name = service_name
        self.base_route = (base_route or "").strip("/")
        self.logger = logger or logging.getLogger(__name__)

    def create_request(
        self,
        method: str,
        path: str,
        variables: Mapping[str, Any],
        params: Mapping[str, Any],
    ) -> ServiceRequest:
        """Expand path placeholders, prefix the base route and collect the query.

        Placeholder values are percent-encoded as a single path segment.
        Query parameters whose value is ``None`` are left out.
        """

        def expand(match: "re.Match[str]") -> str:
            token = match.group(1)
            if token not in variables:
                return match.group(0)
            return quote(format_value(variables[token]), safe="")

        expanded = _TOKEN.sub(expand, path).strip("/")
        route = "/".join(part for part in (self.base_route, expanded) if part)
        query = {name: _query_value(value) for name, value in params.items() if value is not None}
        return ServiceRequest(
            method=method,
            service_name=self.service_name,
            path="/" + route,
            params=query,
        )

    format_value = staticmethod(format_value)

    def invoke(self, request: ServiceRequest) -> httpx.Response:
        self.logger.debug("Invoking %s %s on %s", request.method, request.path, self.service_name)
        return self.client.send(request)

    async def invoke_async(self, request: ServiceRequest) -> httpx.Response:
        self.logger.debug("Invoking %s %s on %s", request.method, request.path, self.service_name)
        return await self.client.send_async(request)

    @staticmethod
    def json_content(value: Any, content_type: Optional[str] = None) -> ServiceContent:
        """Serialize models, dataclasses and plain values to JSON."""
        return ServiceContent(
            body=to_json(value),
            headers={"Content-Type": content_type or JSON_CONTENT_TYPE},
        )

    @staticmethod
    def raw_content(value: Any, content_type: Optional[str] = None) -> ServiceContent:
        """Send text, bytes or the remaining bytes of a stream unchanged."""
        if isinstance(value, str):
            return ServiceContent(
                body=value.encode("utf-8"),
                headers={"Content-Type": content_type or TEXT_CONTENT_TYPE},
            )
        if isinstance(value, (bytes, bytearray)):
            body = bytes(value)
        elif value is None:
            body = b""
        else:
            body = value.read()
            if isinstance(body, str):
                body = body.encode("utf-8")
        return ServiceContent(body=body, headers={"Content-Type": content_type or BINARY_CONTENT_TYPE})

    @staticmethod
    def get_header_value(response: httpx.Response, name: str, target_type: Any = str) -> Any:
        """Read a response header converted to ``target_type``; ``None`` when absent."""
        raw = response.headers.get(name)
        if raw is None or target_type in (str, Any, object):
            return raw
        try:
            return TypeAdapter(target_type).validate_python(raw)
        except PydanticValidationError as exc:
            raise HeaderConversionError(name, repr(target_type), raw) from exc

    @staticmethod
    def read_json(response: httpx.Response, target_type: Any) -> Any:
        """Deserialize a JSON body into ``target_type``; an empty body reads as ``None``."""
        if not response.content:
            return None
        try:
            return TypeAdapter(target_type).validate_json(response.content)
        except PydanticValidationError as exc:
            raise ResponseDecodeError(
                f"Response body does not match {target_type!r}",
                validation_errors=exc.errors(include_url=False),
            ) from exc

    @staticmethod
    def read_raw(response: httpx.Response, kind: str) -> Any:
        """Read the body as ``text``, ``bytes`` or a binary ``stream``."""
        if kind == "text":
            return response.text
        if kind == "bytes":
            return response.content
        return io.BytesIO(response.content)


__all__ = [
    "BINARY_CONTENT_TYPE",
    "DiscoveryAwareBase",
    "JSON_CONTENT_TYPE",
    "TEXT_CONTENT_TYPE",
    "format_value",
]
