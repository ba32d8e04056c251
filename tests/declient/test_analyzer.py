"""Tests for completion mode and return shape analysis."""

import pytest

from declient.annotations import HttpMethod
from declient.compiler import analyze_method, analyze_return
from declient.errors import CompileError
from declient.ir import CompletionMode, MethodSignature, TypeRef

USER = TypeRef("app.models", "User")


def awaitable(*args) -> TypeRef:
    return TypeRef("collections.abc", "Awaitable", args=args, awaitable=True)


class TestAnalyzeReturn:
    def test_sync_value(self):
        shape = analyze_return(USER)
        assert shape.completion is CompletionMode.SYNC
        assert shape.return_type == USER
        assert shape.is_void is False

    def test_sync_void(self):
        shape = analyze_return(TypeRef.none())
        assert shape.completion is CompletionMode.SYNC
        assert shape.is_void is True

    def test_async_with_inner_type(self):
        shape = analyze_return(awaitable(USER))
        assert shape.completion is CompletionMode.ASYNC
        assert shape.return_type == USER
        assert shape.is_void is False

    def test_async_without_inner_type_is_void(self):
        shape = analyze_return(awaitable())
        assert shape.completion is CompletionMode.ASYNC
        assert shape.is_void is True

    def test_async_of_none_is_void(self):
        assert analyze_return(awaitable(TypeRef.none())).is_void is True

    def test_coroutine_uses_last_argument(self):
        coroutine = TypeRef(
            "collections.abc",
            "Coroutine",
            args=(TypeRef("typing", "Any"), TypeRef("typing", "Any"), USER),
            awaitable=True,
        )
        assert analyze_return(coroutine).return_type == USER

    def test_derived_awaitable(self):
        task = TypeRef("asyncio", "Task", args=(USER,), awaitable=True)
        shape = analyze_return(task)
        assert shape.completion is CompletionMode.ASYNC
        assert shape.return_type == USER

    @pytest.mark.parametrize(
        "declared",
        [USER, TypeRef.none(), awaitable(), awaitable(USER)],
    )
    def test_idempotent(self, declared):
        assert analyze_return(declared) == analyze_return(declared)


class TestAnalyzeMethod:
    def test_requires_verb(self):
        method = MethodSignature(name="forgotten", return_type=USER)
        with pytest.raises(CompileError, match="Method forgotten has no HTTP method") as exc_info:
            analyze_method(method, contract="app.IService")
        assert exc_info.value.hint

    def test_depends_only_on_return_type(self):
        method = MethodSignature(name="get", return_type=awaitable(USER), http=HttpMethod("get", "/"))
        assert analyze_method(method, contract="app.IService") == analyze_return(awaitable(USER))
