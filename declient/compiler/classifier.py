"""
Parameter and return-slot classification.

Every parameter receives exactly one ``ParameterRole`` from its marks; an
unmarked parameter is a query parameter named after itself. Header roles are
accumulated into ordered mappings keyed by header name.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from declient_sdk.messages import Out

from ..annotations import (
    Body,
    BodyFormat,
    ContentHeader,
    PathValue,
    Query,
    RequestHeader,
    ResponseHeader,
    ROLE_MARKS,
)
from ..errors import CompileError
from ..ir import (
    Classification,
    MethodShape,
    MethodSignature,
    ParameterDescriptor,
    ParameterRole,
    ParameterSignature,
    ReturnRole,
    ReturnSlot,
    TypeRef,
)

# Generated method bodies use locals with this prefix.
RESERVED_PREFIX = "_dc_"

_TOKEN = re.compile(r"\{([^{}]+)\}")

_ROLE_BY_MARK = {
    PathValue: ParameterRole.PATH_VARIABLE,
    Query: ParameterRole.QUERY_PARAMETER,
    RequestHeader: ParameterRole.REQUEST_HEADER,
    ContentHeader: ParameterRole.CONTENT_HEADER,
    ResponseHeader: ParameterRole.RESPONSE_HEADER,
    Body: ParameterRole.BODY,
}


def path_tokens(path: str) -> Tuple[str, ...]:
    """Placeholder tokens of a path template, in order of appearance."""
    return tuple(_TOKEN.findall(path))


def is_out_holder(type_ref: TypeRef) -> bool:
    return type_ref.module == Out.__module__ and type_ref.qualname == Out.__qualname__


def resolve_body_format(
    body_format: BodyFormat, type_ref: TypeRef, *, contract: str, member: str
) -> BodyFormat:
    """Resolve ``AUTO`` to ``RAW`` for text, bytes and streams, ``JSON`` otherwise."""
    if body_format is BodyFormat.AUTO:
        return BodyFormat.RAW if type_ref.raw_kind is not None else BodyFormat.JSON
    if body_format is BodyFormat.RAW and type_ref.raw_kind is None:
        raise CompileError(
            f"Raw body must be str, bytes or a binary stream, not {type_ref.render()}",
            contract=contract,
            member=member,
        )
    return body_format


def classify_parameters(
    method: MethodSignature, shape: MethodShape, *, contract: str
) -> Classification:
    """
    Assign a role to every parameter and to the return slot.

    Raises:
        CompileError: a parameter carries several roles, a second body is
            declared, a path token has no parameter (or the reverse), a
            header is bound twice, a response header is not an ``Out``
            holder, or the return slot is marked both ``Body`` and
            ``ResponseHeader``
    """
    member = method.name
    template_tokens = path_tokens(method.http.path if method.http else "")

    parameters: List[ParameterDescriptor] = []
    request_headers: Dict[str, Tuple[str, str]] = {}
    content_headers: Dict[str, Tuple[str, str]] = {}
    bound_tokens: Dict[str, str] = {}
    query_keys: Dict[str, str] = {}
    body: Optional[str] = None

    for param in method.parameters:
        if param.name.startswith(RESERVED_PREFIX):
            raise CompileError(
                f"Parameter name '{param.name}' uses the reserved prefix {RESERVED_PREFIX}",
                contract=contract,
                member=member,
            )
        descriptor = _classify_parameter(param, contract=contract, member=member)

        if descriptor.role is ParameterRole.PATH_VARIABLE:
            if descriptor.key not in template_tokens:
                raise CompileError(
                    f"Path variable '{descriptor.key}' does not appear in '{method.http.path}'",
                    contract=contract,
                    member=member,
                )
            _add_binding(bound_tokens, "Path variable", descriptor, contract=contract, member=member)
        elif descriptor.role is ParameterRole.QUERY_PARAMETER:
            _add_binding(query_keys, "Query parameter", descriptor, contract=contract, member=member)
        elif descriptor.role is ParameterRole.REQUEST_HEADER:
            _add_header(request_headers, descriptor, contract=contract, member=member)
        elif descriptor.role is ParameterRole.CONTENT_HEADER:
            _add_header(content_headers, descriptor, contract=contract, member=member)
        elif descriptor.role is ParameterRole.BODY:
            if body is not None:
                raise CompileError(
                    f"Only one body parameter is allowed, found '{body}' and '{descriptor.name}'",
                    contract=contract,
                    member=member,
                )
            body = descriptor.name

        parameters.append(descriptor)

    _check_shadowing(parameters, shape, contract=contract, member=member)

    unbound = [token for token in template_tokens if token not in bound_tokens]
    if unbound:
        raise CompileError(
            f"Path tokens without a PathValue parameter: {', '.join(unbound)}",
            contract=contract,
            member=member,
        )

    return Classification(
        parameters=tuple(parameters),
        request_headers=tuple(request_headers.values()),
        content_headers=tuple(content_headers.values()),
        body=body,
        return_slot=classify_return(method, shape, contract=contract),
    )


def classify_return(method: MethodSignature, shape: MethodShape, *, contract: str) -> ReturnSlot:
    """Body unless the return slot is marked ``ResponseHeader``; never both."""
    member = method.name
    body_marks = [mark for mark in method.return_marks if isinstance(mark, Body)]
    header_marks = [mark for mark in method.return_marks if isinstance(mark, ResponseHeader)]

    if body_marks and header_marks:
        raise CompileError(
            "Cannot have different types of response attributes.  You had [Body, ResponseHeader]",
            contract=contract,
            member=member,
        )
    if len(body_marks) > 1 or len(header_marks) > 1:
        raise CompileError(
            "The return slot can carry only one response attribute",
            contract=contract,
            member=member,
        )

    if header_marks:
        header = header_marks[0].key
        if not header:
            raise CompileError(
                "ResponseHeader on the return slot needs a header name",
                contract=contract,
                member=member,
            )
        return ReturnSlot(role=ReturnRole.RESPONSE_HEADER, header=header)

    mark = body_marks[0] if body_marks else Body()
    if shape.is_void:
        return ReturnSlot(role=ReturnRole.BODY, body_format=mark.format, content_type=mark.content_type)
    return ReturnSlot(
        role=ReturnRole.BODY,
        body_format=resolve_body_format(
            mark.format, shape.return_type, contract=contract, member=member
        ),
        content_type=mark.content_type,
    )


def _classify_parameter(
    param: ParameterSignature, *, contract: str, member: str
) -> ParameterDescriptor:
    role_marks = [mark for mark in param.marks if isinstance(mark, ROLE_MARKS)]
    if len(role_marks) > 1:
        kinds = ", ".join(mark.kind for mark in role_marks)
        raise CompileError(
            f"Parameter '{param.name}' has conflicting roles [{kinds}]",
            contract=contract,
            member=member,
        )
    mark = role_marks[0] if role_marks else Query()
    role = _ROLE_BY_MARK[type(mark)]

    if isinstance(mark, Body):
        return ParameterDescriptor(
            name=param.name,
            type=param.type,
            role=role,
            key=param.name,
            value_type=param.type,
            body_format=resolve_body_format(
                mark.format, param.type, contract=contract, member=member
            ),
            content_type=mark.content_type,
            default=param.default,
            keyword_only=param.keyword_only,
        )

    value_type = param.type
    if role is ParameterRole.RESPONSE_HEADER:
        if not is_out_holder(param.type):
            raise CompileError(
                f"Response header parameter '{param.name}' must be declared as Out[T]",
                contract=contract,
                member=member,
            )
        value_type = param.type.args[0] if param.type.args else TypeRef.builtin("str")

    return ParameterDescriptor(
        name=param.name,
        type=param.type,
        role=role,
        key=mark.key or param.name,
        value_type=value_type,
        default=param.default,
        keyword_only=param.keyword_only,
    )


def _add_binding(
    bindings: Dict[str, str],
    kind: str,
    descriptor: ParameterDescriptor,
    *,
    contract: str,
    member: str,
) -> None:
    if descriptor.key in bindings:
        raise CompileError(
            f"{kind} '{descriptor.key}' is bound by both '{bindings[descriptor.key]}' and '{descriptor.name}'",
            contract=contract,
            member=member,
        )
    bindings[descriptor.key] = descriptor.name


def _check_shadowing(
    parameters: List[ParameterDescriptor], shape: MethodShape, *, contract: str, member: str
) -> None:
    """Reject parameters named like a type the generated method body evaluates."""
    used = set() if shape.is_void else shape.return_type.names()
    for descriptor in parameters:
        if descriptor.role is ParameterRole.RESPONSE_HEADER:
            used |= descriptor.value_type.names()
    for descriptor in parameters:
        if descriptor.name in used:
            raise CompileError(
                f"Parameter '{descriptor.name}' shadows the name '{descriptor.name}' used by the generated client",
                contract=contract,
                member=member,
            )


def _add_header(
    headers: Dict[str, Tuple[str, str]],
    descriptor: ParameterDescriptor,
    *,
    contract: str,
    member: str,
) -> None:
    folded = descriptor.key.lower()
    if folded in headers:
        raise CompileError(
            f"Header '{descriptor.key}' is bound by both '{headers[folded][1]}' and '{descriptor.name}'",
            contract=contract,
            member=member,
        )
    headers[folded] = (descriptor.key, descriptor.name)


__all__ = [
    "RESERVED_PREFIX",
    "classify_parameters",
    "classify_return",
    "is_out_holder",
    "path_tokens",
    "resolve_body_format",
]
