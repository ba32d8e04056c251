"""
Interface-to-client translation engine.

Pipeline, one way only:

    TypeDescriptor -> validate_contract -> describe_method (analyze + classify)
        -> ContractDescriptor -> build_plan per method

Every function here is pure: no I/O, no caches, no shared state. Errors
propagate to the caller untouched.
"""

from __future__ import annotations

from typing import Tuple

from ..ir import ContractDescriptor, MethodDescriptor, MethodSignature, RequestPlan, TypeDescriptor
from .analyzer import analyze_method, analyze_return
from .classifier import classify_parameters, classify_return, path_tokens
from .plan import build_plan
from .validator import validate_contract


def describe_method(method: MethodSignature, *, contract: str) -> MethodDescriptor:
    """Analyze and classify one contract method."""
    shape = analyze_method(method, contract=contract)
    classification = classify_parameters(method, shape, contract=contract)
    return MethodDescriptor(
        name=method.name,
        verb=method.http.verb,
        path=method.http.path,
        completion=shape.completion,
        return_type=shape.return_type,
        is_void=shape.is_void,
        parameters=classification.parameters,
        request_headers=classification.request_headers,
        content_headers=classification.content_headers,
        body=classification.body,
        return_slot=classification.return_slot,
    )


def describe_contract(descriptor: TypeDescriptor) -> ContractDescriptor:
    """
    Validate a contract and describe all of its methods.

    Raises:
        ValidationError: the type is not an eligible contract
        CompileError: any method cannot be translated; nothing is returned
            for the other methods
    """
    validate_contract(descriptor)
    name = descriptor.full_name
    methods = tuple(describe_method(method, contract=name) for method in descriptor.methods)
    return ContractDescriptor(
        module=descriptor.module,
        qualname=descriptor.qualname,
        service_name=descriptor.client.name,
        base_route=descriptor.client.route,
        methods=methods,
    )


def plan_contract(contract: ContractDescriptor) -> Tuple[RequestPlan, ...]:
    return tuple(build_plan(method) for method in contract.methods)


__all__ = [
    "analyze_method",
    "analyze_return",
    "build_plan",
    "classify_parameters",
    "classify_return",
    "describe_contract",
    "describe_method",
    "path_tokens",
    "plan_contract",
    "validate_contract",
]
