"""Completion mode and return shape of contract methods."""

from __future__ import annotations

from ..errors import CompileError
from ..ir import CompletionMode, MethodShape, MethodSignature, TypeRef


def analyze_return(return_type: TypeRef) -> MethodShape:
    """
    Derive ``(completion mode, effective return shape, is-void)``.

    An awaitable return makes the method asynchronous; its last type
    argument is the effective shape (``Coroutine[Y, S, R]`` yields ``R``,
    ``Awaitable[T]`` yields ``T``). An awaitable without type arguments is
    void-asynchronous. Anything else is synchronous and returns the declared
    type, void when that type is ``None``.
    """
    if return_type.awaitable:
        inner = return_type.args[-1] if return_type.args else TypeRef.none()
        return MethodShape(
            completion=CompletionMode.ASYNC,
            return_type=inner,
            is_void=inner.is_none,
        )
    return MethodShape(
        completion=CompletionMode.SYNC,
        return_type=return_type,
        is_void=return_type.is_none,
    )


def analyze_method(method: MethodSignature, *, contract: str) -> MethodShape:
    """Shape of a contract method; every method must declare its HTTP verb."""
    if method.http is None:
        raise CompileError(
            f"Method {method.name} has no HTTP method",
            contract=contract,
            member=method.name,
            hint="Decorate it with @get, @post, @put, @patch, @delete or @http_method",
        )
    return analyze_return(method.return_type)


__all__ = ["analyze_method", "analyze_return"]
