"""Ordered request-construction plans."""

from __future__ import annotations

from typing import List

from ..ir import (
    AttachBody,
    AttachContentHeader,
    AttachRequestHeader,
    BindPathVariables,
    BindQueryParameters,
    ConstructRequest,
    ExtractResponseHeader,
    Invoke,
    MaterializeReturn,
    MethodDescriptor,
    ParameterRole,
    PlanStep,
    RequestPlan,
    ReturnRole,
)


def build_plan(method: MethodDescriptor) -> RequestPlan:
    """
    Build the request plan of a classified method.

    Steps, in order: bind path variables, bind query parameters, construct
    the request, attach request headers, attach the body followed by its
    content headers, invoke, extract response headers, materialize the
    return value. Binding steps are left out when nothing binds; content
    headers only apply with a body; void methods end at the response-header
    extraction. Ordering follows parameter declaration order and the header
    mappings, so the same descriptor always yields the same plan.
    """
    steps: List[PlanStep] = []

    path_variables = method.with_role(ParameterRole.PATH_VARIABLE)
    if path_variables:
        steps.append(BindPathVariables(tuple((p.key, p.name) for p in path_variables)))

    query_parameters = method.with_role(ParameterRole.QUERY_PARAMETER)
    if query_parameters:
        steps.append(BindQueryParameters(tuple((p.key, p.name) for p in query_parameters)))

    steps.append(ConstructRequest(verb=method.verb, path=method.path))

    for header, parameter in method.request_headers:
        steps.append(AttachRequestHeader(header=header, parameter=parameter))

    if method.body is not None:
        body = method.parameter(method.body)
        steps.append(
            AttachBody(parameter=body.name, format=body.body_format, content_type=body.content_type)
        )
        for header, parameter in method.content_headers:
            steps.append(AttachContentHeader(header=header, parameter=parameter))

    steps.append(Invoke(mode=method.completion))

    for param in method.with_role(ParameterRole.RESPONSE_HEADER):
        steps.append(
            ExtractResponseHeader(header=param.key, parameter=param.name, value_type=param.value_type)
        )

    if not method.is_void:
        slot = method.return_slot
        if slot.role is ReturnRole.RESPONSE_HEADER:
            steps.append(
                MaterializeReturn(
                    source=ReturnRole.RESPONSE_HEADER,
                    return_type=method.return_type,
                    header=slot.header,
                )
            )
        else:
            steps.append(
                MaterializeReturn(
                    source=ReturnRole.BODY,
                    return_type=method.return_type,
                    body_format=slot.body_format,
                )
            )

    return RequestPlan(method=method.name, steps=tuple(steps))


__all__ = ["build_plan"]
