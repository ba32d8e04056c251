"""Unified error model for declient."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorLocation:
    contract: Optional[str] = None
    member: Optional[str] = None

    def describe(self) -> str:
        if self.contract and self.member:
            return f"{self.contract}.{self.member}"
        if self.contract:
            return self.contract
        return "unknown location"


class DeclientError(Exception):
    """Base class for all compiler errors surfaced to users."""

    code: Optional[str] = None
    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        contract: Optional[str] = None,
        member: Optional[str] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.location = ErrorLocation(contract=contract, member=member)
        self.contract = contract
        self.member = member
        if code is not None:
            self.code = code
        if hint is not None:
            self.hint = hint

    def format(self) -> str:
        """Message, then location and code in parentheses, then the hint."""
        location = self.location.describe() if self.contract else None
        meta = [part for part in (location, self.code) if part]
        text = f"{self.message} ({'; '.join(meta)})" if meta else self.message
        if self.hint:
            text = f"{text} Hint: {self.hint}"
        return text


class ValidationError(DeclientError):
    """Raised when a type is not an eligible contract."""

    code = "DCL001"

    def __init__(
        self,
        message: str,
        *,
        constraint: str,
        contract: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message, contract=contract, hint=hint)
        self.constraint = constraint


class CompileError(DeclientError):
    """Raised when annotations conflict or are unsupported."""

    code = "DCL002"


WebServiceCompileError = CompileError


class EmissionWarning(UserWarning):
    """Generated source could not be persisted; the in-memory text is still returned."""


__all__ = [
    "DeclientError",
    "ValidationError",
    "CompileError",
    "WebServiceCompileError",
    "EmissionWarning",
    "ErrorLocation",
]
