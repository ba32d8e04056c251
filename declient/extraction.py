"""
Descriptor extraction.

Converts a Python contract class into a ``TypeDescriptor`` in a single pass.
This is the only module that reflects over classes, signatures and type
hints; the compiler works on the extracted descriptors alone.
"""

from __future__ import annotations

import abc
import collections.abc
import inspect
import io
import logging
import math
import types
import typing
from dataclasses import replace
from typing import Any, Dict, List, Tuple

from .annotations import client_mark_of, method_mark_of
from .errors import CompileError
from .ir import MethodSignature, ParameterSignature, RawKind, TypeDescriptor, TypeRef

logger = logging.getLogger(__name__)

# Bases contributed by the interface machinery itself, never by a contract.
_FRAMEWORK_MODULES = frozenset({"builtins", "typing", "typing_extensions", "abc", "collections.abc"})

_LITERAL_DEFAULTS = (type(None), bool, int, float, str, bytes)

_STREAM_TYPES = (typing.IO, typing.BinaryIO)


def is_interface(cls: type) -> bool:
    """Protocols and ABCs are interface-shaped."""
    return bool(getattr(cls, "_is_protocol", False)) or isinstance(cls, abc.ABCMeta)


def _private_segment(part: str) -> bool:
    return part.startswith("_") and not (part.startswith("__") and part.endswith("__"))


def is_public(cls: type) -> bool:
    """Module-level, not underscore-named, not inside a private module (``__main__`` counts as public)."""
    if cls.__name__.startswith("_") or "<locals>" in cls.__qualname__:
        return False
    return not any(_private_segment(part) for part in cls.__module__.split("."))


def extract_type(cls: type) -> TypeDescriptor:
    """
    Extract the reflected description of a candidate contract.

    Shape, visibility and arity are recorded as observed, never enforced:
    eligibility is the validator's decision. Methods are only read for types
    that would pass validation, so an ineligible contract always fails with
    a ValidationError rather than a method-level CompileError.

    Anything that is not a class is described as a non-interface so the
    validator can reject it.

    Raises:
        CompileError: a method signature cannot be described
    """
    if not isinstance(cls, type):
        return TypeDescriptor(
            module=getattr(cls, "__module__", None) or "",
            qualname=getattr(cls, "__qualname__", None) or type(cls).__qualname__,
            is_interface=False,
            is_public=False,
        )

    interface = is_interface(cls)
    public = is_public(cls)
    arity = len(getattr(cls, "__parameters__", ()) or ())
    client = client_mark_of(cls)
    methods: Tuple[MethodSignature, ...] = ()
    if interface and public and arity == 0 and client is not None:
        methods = tuple(
            _extract_method(cls, name, func) for name, func in _contract_functions(cls)
        )

    descriptor = TypeDescriptor(
        module=cls.__module__,
        qualname=cls.__qualname__,
        is_interface=interface,
        is_public=public,
        generic_arity=arity,
        client=client,
        methods=methods,
    )
    logger.debug("Extracted %s with %d methods", descriptor.full_name, len(methods))
    return descriptor


def _contract_functions(cls: type) -> List[Tuple[str, Any]]:
    """Public plain functions of the contract and its contract bases, base-first."""
    found: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass.__module__ in _FRAMEWORK_MODULES or not is_interface(klass):
            continue
        for name, member in vars(klass).items():
            if name.startswith("_") or not inspect.isfunction(member):
                continue
            found[name] = member
    return list(found.items())


def _extract_method(cls: type, name: str, func: Any) -> MethodSignature:
    where = f"{cls.__module__}.{cls.__qualname__}"
    try:
        hints = typing.get_type_hints(func, include_extras=True)
    except (NameError, TypeError) as exc:
        raise CompileError(
            f"Cannot resolve annotations of {name}: {exc}",
            contract=where,
            member=name,
        ) from exc

    signature = inspect.signature(func)
    parameters: List[ParameterSignature] = []
    for index, param in enumerate(signature.parameters.values()):
        if index == 0 and param.name in ("self", "cls"):
            continue
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise CompileError(
                f"Variadic parameter '{param.name}' cannot be bound to a request",
                contract=where,
                member=name,
            )
        base, marks = _split_annotated(hints.get(param.name, Any))
        parameters.append(
            ParameterSignature(
                name=param.name,
                type=type_ref(base, where=where, member=name),
                marks=marks,
                default=_default_source(param, where, name),
                keyword_only=param.kind is param.KEYWORD_ONLY,
            )
        )

    base, return_marks = _split_annotated(hints.get("return", None))
    return_type = type_ref(base, where=where, member=name)
    if inspect.iscoroutinefunction(func):
        return_type = TypeRef(
            "collections.abc", "Awaitable", args=(return_type,), awaitable=True
        )

    return MethodSignature(
        name=name,
        return_type=return_type,
        parameters=tuple(parameters),
        http=method_mark_of(func),
        return_marks=return_marks,
    )


def _split_annotated(hint: Any) -> Tuple[Any, Tuple[object, ...]]:
    if typing.get_origin(hint) is typing.Annotated:
        base, *metadata = typing.get_args(hint)
        return base, tuple(metadata)
    return hint, ()


def _default_source(param: inspect.Parameter, where: str, member: str) -> Any:
    if param.default is inspect.Parameter.empty:
        return None
    if not isinstance(param.default, _LITERAL_DEFAULTS):
        raise CompileError(
            f"Default of '{param.name}' must be a literal, got {type(param.default).__name__}",
            contract=where,
            member=member,
        )
    if isinstance(param.default, float) and not math.isfinite(param.default):
        raise CompileError(
            f"Default of '{param.name}' must be a finite number, got {param.default!r}",
            contract=where,
            member=member,
        )
    return repr(param.default)


def type_ref(tp: Any, *, where: str = "", member: str = "") -> TypeRef:
    """Describe a Python annotation as a ``TypeRef``."""
    if tp is None or tp is type(None):
        return TypeRef.none()
    if tp is Ellipsis:
        return TypeRef.of_literal("...")
    if tp is Any:
        return TypeRef("typing", "Any")
    if isinstance(tp, typing.TypeVar):
        raise CompileError(
            f"Type variable {tp!r} is not supported",
            contract=where,
            member=member,
        )

    origin = typing.get_origin(tp)
    if origin is typing.Annotated:
        return type_ref(typing.get_args(tp)[0], where=where, member=member)
    if origin is not None:
        args = typing.get_args(tp)
        if origin is typing.Literal:
            return TypeRef(
                "typing", "Literal", args=tuple(TypeRef.of_literal(repr(arg)) for arg in args)
            )
        if origin is typing.Union or origin is types.UnionType:
            base = TypeRef("typing", "Union")
        else:
            base = type_ref(origin, where=where, member=member)
        if any(isinstance(arg, list) for arg in args):
            raise CompileError(
                f"Unsupported annotation {tp!r}", contract=where, member=member
            )
        return replace(base, args=tuple(type_ref(arg, where=where, member=member) for arg in args))

    if tp in _STREAM_TYPES:
        return TypeRef("typing", tp.__qualname__, raw_kind=RawKind.STREAM)
    if isinstance(tp, type):
        if tp.__module__ == "builtins":
            return TypeRef.builtin(tp.__qualname__)
        raw_kind = RawKind.STREAM if issubclass(tp, io.IOBase) else None
        return TypeRef(
            tp.__module__,
            tp.__qualname__,
            awaitable=issubclass(tp, collections.abc.Awaitable),
            raw_kind=raw_kind,
        )

    raise CompileError(f"Unsupported annotation {tp!r}", contract=where, member=member)


__all__ = ["extract_type", "is_interface", "is_public", "type_ref"]
