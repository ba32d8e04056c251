"""Requests, payloads and output holders exchanged with generated clients."""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class Out(Generic[T]):
    """Holder for a value produced by a call, such as a response header.

    Example:
        >>> etag = Out[str]()
        >>> users.update("42", user, etag)
        >>> etag.value
        '"v7"'
    """

    __slots__ = ("value",)

    def __init__(self, value: Optional[T] = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Out({self.value!r})"


@dataclass
class ServiceContent:
    """Encoded request body and the headers that describe it."""

    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class ServiceRequest:
    """A request addressed to a logical service, not yet bound to a URL."""

    method: str
    service_name: str
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[ServiceContent] = None
