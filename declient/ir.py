"""
Intermediate representation for client generation.

Two layers live here:

1. Input metadata (``TypeRef``, ``ParameterSignature``, ``MethodSignature``,
   ``TypeDescriptor``): a plain description of a contract as extracted once
   from Python reflection. Nothing downstream touches ``inspect`` or
   ``typing`` again.
2. Classified descriptors (``ParameterDescriptor``, ``MethodDescriptor``,
   ``ContractDescriptor``) and the per-method ``RequestPlan``.

All types are frozen. A descriptor is created once per input type and never
mutated, so the pipeline from descriptor to plan to text is a pure
function of its input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set, Tuple, Union

from .annotations import BodyFormat, FauxClient, HttpMethod

BUILTINS = "builtins"


# =============================================================================
# Enumerations
# =============================================================================

class ParameterRole(str, Enum):
    """The single HTTP role of a parameter."""

    PATH_VARIABLE = "path-variable"
    QUERY_PARAMETER = "query-parameter"
    REQUEST_HEADER = "request-header"
    CONTENT_HEADER = "content-header"
    RESPONSE_HEADER = "response-header"
    BODY = "body"


class CompletionMode(str, Enum):
    SYNC = "sync"
    ASYNC = "async"


class ReturnRole(str, Enum):
    BODY = "body"
    RESPONSE_HEADER = "response-header"


class RawKind(str, Enum):
    """Payload shapes sent and read without JSON encoding."""

    TEXT = "text"
    BYTES = "bytes"
    STREAM = "stream"


# =============================================================================
# Input metadata
# =============================================================================

@dataclass(frozen=True)
class TypeRef:
    """
    Reference to a declared type.

    ``module``/``qualname`` locate the type, ``args`` carry type arguments in
    declaration order. ``awaitable`` is set when the type is (or derives
    from) an awaitable, and ``raw_kind`` when it is text, bytes or a binary
    stream. ``literal`` holds the source form of a non-type argument such as
    a ``Literal`` value.
    """

    module: str
    qualname: str
    args: Tuple["TypeRef", ...] = ()
    awaitable: bool = False
    raw_kind: Optional[RawKind] = None
    literal: Optional[str] = None

    @classmethod
    def none(cls) -> "TypeRef":
        return cls(BUILTINS, "None")

    @classmethod
    def builtin(cls, name: str) -> "TypeRef":
        raw_kind = {"str": RawKind.TEXT, "bytes": RawKind.BYTES, "bytearray": RawKind.BYTES}.get(name)
        return cls(BUILTINS, name, raw_kind=raw_kind)

    @classmethod
    def of_literal(cls, source: str) -> "TypeRef":
        return cls("", "", literal=source)

    @property
    def is_none(self) -> bool:
        return self.module == BUILTINS and self.qualname == "None"

    @property
    def full_name(self) -> str:
        if self.module == BUILTINS:
            return self.qualname
        return f"{self.module}.{self.qualname}"

    def render(self) -> str:
        """Python expression naming this type, with its module qualified."""
        if self.literal is not None:
            return self.literal
        base = self.full_name
        if self.args:
            return f"{base}[{', '.join(arg.render() for arg in self.args)}]"
        return base

    def modules(self) -> Set[str]:
        """Modules that must be imported for ``render()`` to evaluate."""
        found: Set[str] = set()
        if self.literal is None and self.module and self.module != BUILTINS:
            found.add(self.module)
        for arg in self.args:
            found |= arg.modules()
        return found

    def names(self) -> Set[str]:
        """Top-level names ``render()`` looks up when evaluated."""
        found: Set[str] = set()
        if self.literal is None and not self.is_none:
            root = self.qualname if self.module == BUILTINS else self.module
            found.add(root.split(".")[0])
        for arg in self.args:
            found |= arg.names()
        return found


@dataclass(frozen=True)
class ParameterSignature:
    name: str
    type: TypeRef
    marks: Tuple[object, ...] = ()
    default: Optional[str] = None
    keyword_only: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class MethodSignature:
    name: str
    return_type: TypeRef
    parameters: Tuple[ParameterSignature, ...] = ()
    http: Optional[HttpMethod] = None
    return_marks: Tuple[object, ...] = ()


@dataclass(frozen=True)
class TypeDescriptor:
    """Reflected description of a candidate contract type."""

    module: str
    qualname: str
    is_interface: bool
    is_public: bool
    generic_arity: int = 0
    client: Optional[FauxClient] = None
    methods: Tuple[MethodSignature, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.module}.{self.qualname}"


# =============================================================================
# Classified descriptors
# =============================================================================

@dataclass(frozen=True)
class ParameterDescriptor:
    """
    A parameter with exactly one role.

    ``key`` is the binding key: path token, query name or header name; the
    parameter name for the body. ``value_type`` is the type a response
    header converts to (the ``T`` of ``Out[T]``); for every other role it is
    the declared type.
    """

    name: str
    type: TypeRef
    role: ParameterRole
    key: str
    value_type: TypeRef
    body_format: Optional[BodyFormat] = None
    content_type: Optional[str] = None
    default: Optional[str] = None
    keyword_only: bool = False


@dataclass(frozen=True)
class MethodShape:
    completion: CompletionMode
    return_type: TypeRef
    is_void: bool


@dataclass(frozen=True)
class ReturnSlot:
    role: ReturnRole
    header: Optional[str] = None
    body_format: Optional[BodyFormat] = None
    content_type: Optional[str] = None


@dataclass(frozen=True)
class Classification:
    """Classifier output: tagged parameters, header mappings, body and return slot."""

    parameters: Tuple[ParameterDescriptor, ...]
    request_headers: Tuple[Tuple[str, str], ...]
    content_headers: Tuple[Tuple[str, str], ...]
    body: Optional[str]
    return_slot: ReturnSlot


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    verb: str
    path: str
    completion: CompletionMode
    return_type: TypeRef
    is_void: bool
    parameters: Tuple[ParameterDescriptor, ...] = ()
    request_headers: Tuple[Tuple[str, str], ...] = ()
    content_headers: Tuple[Tuple[str, str], ...] = ()
    body: Optional[str] = None
    return_slot: Optional[ReturnSlot] = None

    @property
    def is_async(self) -> bool:
        return self.completion is CompletionMode.ASYNC

    def parameter(self, name: str) -> ParameterDescriptor:
        for param in self.parameters:
            if param.name == name:
                return param
        raise KeyError(name)

    def with_role(self, role: ParameterRole) -> Tuple[ParameterDescriptor, ...]:
        return tuple(p for p in self.parameters if p.role is role)


@dataclass(frozen=True)
class ContractDescriptor:
    module: str
    qualname: str
    service_name: str
    base_route: str
    methods: Tuple[MethodDescriptor, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.module}.{self.qualname}"


# =============================================================================
# Request plan
# =============================================================================

@dataclass(frozen=True)
class BindPathVariables:
    bindings: Tuple[Tuple[str, str], ...]
    kind = "bind-path-variables"


@dataclass(frozen=True)
class BindQueryParameters:
    bindings: Tuple[Tuple[str, str], ...]
    kind = "bind-query-params"


@dataclass(frozen=True)
class ConstructRequest:
    verb: str
    path: str
    kind = "construct-request"


@dataclass(frozen=True)
class AttachRequestHeader:
    header: str
    parameter: str
    kind = "attach-request-header"


@dataclass(frozen=True)
class AttachBody:
    parameter: str
    format: BodyFormat
    content_type: Optional[str] = None
    kind = "attach-body"


@dataclass(frozen=True)
class AttachContentHeader:
    header: str
    parameter: str
    kind = "attach-content-header"


@dataclass(frozen=True)
class Invoke:
    mode: CompletionMode
    kind = "invoke"


@dataclass(frozen=True)
class ExtractResponseHeader:
    header: str
    parameter: str
    value_type: TypeRef
    kind = "extract-response-header"


@dataclass(frozen=True)
class MaterializeReturn:
    source: ReturnRole
    return_type: TypeRef
    header: Optional[str] = None
    body_format: Optional[BodyFormat] = None
    kind = "materialize-return"


PlanStep = Union[
    BindPathVariables,
    BindQueryParameters,
    ConstructRequest,
    AttachRequestHeader,
    AttachBody,
    AttachContentHeader,
    Invoke,
    ExtractResponseHeader,
    MaterializeReturn,
]


@dataclass(frozen=True)
class RequestPlan:
    method: str
    steps: Tuple[PlanStep, ...] = field(default_factory=tuple)

    def kinds(self) -> Tuple[str, ...]:
        return tuple(step.kind for step in self.steps)


__all__ = [
    "ParameterRole",
    "CompletionMode",
    "ReturnRole",
    "RawKind",
    "TypeRef",
    "ParameterSignature",
    "MethodSignature",
    "TypeDescriptor",
    "ParameterDescriptor",
    "MethodShape",
    "ReturnSlot",
    "Classification",
    "MethodDescriptor",
    "ContractDescriptor",
    "BindPathVariables",
    "BindQueryParameters",
    "ConstructRequest",
    "AttachRequestHeader",
    "AttachBody",
    "AttachContentHeader",
    "Invoke",
    "ExtractResponseHeader",
    "MaterializeReturn",
    "PlanStep",
    "RequestPlan",
]
