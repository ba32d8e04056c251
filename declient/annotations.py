"""
Declarative marks for HTTP service contracts.

A contract is an interface class (``typing.Protocol`` or ``abc.ABC``) whose
methods describe remote calls. Marks attach HTTP meaning to the contract,
its methods, their parameters and their return slot.

Example:
    ```python
    from typing import Annotated, Protocol

    from declient.annotations import Body, PathValue, ResponseHeader, faux_client, get, post
    from declient_sdk import Out


    @faux_client("users", route="api/v1")
    class IUserService(Protocol):
        @get("/users/{id}")
        def get_user(self, id: Annotated[str, PathValue()]) -> User: ...

        @post("/users")
        async def create(
            self,
            user: Annotated[User, Body()],
            etag: Annotated[Out[str], ResponseHeader("ETag")],
        ) -> Annotated[str, ResponseHeader("Location")]: ...
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Optional, TypeVar

from declient_sdk.messages import Out

CLIENT_ATTRIBUTE = "__declient_client__"
METHOD_ATTRIBUTE = "__declient_http__"

_T = TypeVar("_T")


class BodyFormat(str, Enum):
    """How a body is put on the wire."""

    AUTO = "auto"
    JSON = "json"
    RAW = "raw"


@dataclass(frozen=True)
class FauxClient:
    """Contract-level mark: logical service name and base route."""

    name: str
    route: str = ""


@dataclass(frozen=True)
class HttpMethod:
    """Method-level mark: HTTP verb and path template."""

    verb: str
    path: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "verb", self.verb.upper())


@dataclass(frozen=True)
class ParameterMark:
    """Base for role-defining parameter marks keyed by name."""

    key: Optional[str] = None

    kind: ClassVar[str] = "parameter"


@dataclass(frozen=True)
class PathValue(ParameterMark):
    """Bind the parameter into the ``{token}`` placeholder of the path."""

    kind: ClassVar[str] = "PathValue"


@dataclass(frozen=True)
class Query(ParameterMark):
    """Bind the parameter into the query string."""

    kind: ClassVar[str] = "Query"


@dataclass(frozen=True)
class RequestHeader(ParameterMark):
    """Send the parameter as a transport-level request header."""

    kind: ClassVar[str] = "RequestHeader"


@dataclass(frozen=True)
class ContentHeader(ParameterMark):
    """Send the parameter as a header of the request body."""

    kind: ClassVar[str] = "ContentHeader"


@dataclass(frozen=True)
class ResponseHeader(ParameterMark):
    """
    Read a response header.

    On a parameter, the parameter must be an ``Out[T]`` holder and receives
    the header value after the call. On the return slot, the header value
    becomes the return value.
    """

    kind: ClassVar[str] = "ResponseHeader"


@dataclass(frozen=True)
class Body:
    """The request payload, or on the return slot, the response payload."""

    format: BodyFormat = BodyFormat.AUTO
    content_type: Optional[str] = None

    kind: ClassVar[str] = "Body"


ROLE_MARKS = (PathValue, Query, RequestHeader, ContentHeader, ResponseHeader, Body)


def faux_client(name: str, route: str = "") -> Callable[[type], type]:
    """Mark a class as a service contract."""

    def decorator(cls: type) -> type:
        setattr(cls, CLIENT_ATTRIBUTE, FauxClient(name=name, route=route or ""))
        return cls

    return decorator


def http_method(verb: str, path: str = "") -> Callable[[_T], _T]:
    """Mark a contract method with its HTTP verb and path template."""

    def decorator(func: _T) -> _T:
        setattr(func, METHOD_ATTRIBUTE, HttpMethod(verb=verb, path=path))
        return func

    return decorator


def get(path: str = "") -> Callable[[_T], _T]:
    return http_method("GET", path)


def post(path: str = "") -> Callable[[_T], _T]:
    return http_method("POST", path)


def put(path: str = "") -> Callable[[_T], _T]:
    return http_method("PUT", path)


def patch(path: str = "") -> Callable[[_T], _T]:
    return http_method("PATCH", path)


def delete(path: str = "") -> Callable[[_T], _T]:
    return http_method("DELETE", path)


def head(path: str = "") -> Callable[[_T], _T]:
    return http_method("HEAD", path)


def options(path: str = "") -> Callable[[_T], _T]:
    return http_method("OPTIONS", path)


def client_mark_of(cls: Any) -> Optional[FauxClient]:
    """Contract mark declared directly on ``cls`` (marks are not inherited)."""
    return vars(cls).get(CLIENT_ATTRIBUTE) if isinstance(cls, type) else None


def method_mark_of(func: Any) -> Optional[HttpMethod]:
    return getattr(func, METHOD_ATTRIBUTE, None)


__all__ = [
    "Body",
    "BodyFormat",
    "ContentHeader",
    "FauxClient",
    "HttpMethod",
    "Out",
    "ParameterMark",
    "PathValue",
    "Query",
    "RequestHeader",
    "ResponseHeader",
    "ROLE_MARKS",
    "client_mark_of",
    "delete",
    "faux_client",
    "get",
    "head",
    "http_method",
    "method_mark_of",
    "options",
    "patch",
    "post",
    "put",
]
