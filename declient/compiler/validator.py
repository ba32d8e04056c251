"""Contract eligibility checks."""

from __future__ import annotations

from ..errors import ValidationError
from ..ir import TypeDescriptor


def validate_contract(descriptor: TypeDescriptor) -> None:
    """
    Confirm that a type is an eligible contract.

    A contract must be interface-shaped (a Protocol or ABC), publicly
    visible, non-generic, and carry a ``faux_client`` mark. Checks run in
    that order and the first violation wins.

    Raises:
        ValidationError: naming the contract and the violated constraint
    """
    name = descriptor.full_name
    if not descriptor.is_interface:
        raise ValidationError(
            f"{name} must be a public interface",
            constraint="interface",
            contract=name,
            hint="Derive the contract from typing.Protocol or abc.ABC",
        )
    if not descriptor.is_public:
        raise ValidationError(
            f"{name} must be a public interface",
            constraint="public",
            contract=name,
            hint="Define the contract at module level under a name without a leading underscore",
        )
    if descriptor.generic_arity:
        raise ValidationError(
            f"Generic interfaces are not supported: {name}",
            constraint="non-generic",
            contract=name,
        )
    if descriptor.client is None:
        raise ValidationError(
            f"{name} is missing its service declaration",
            constraint="client-annotation",
            contract=name,
            hint='Decorate the contract with @faux_client("service-name")',
        )


__all__ = ["validate_contract"]
