"""Tests for contract validation."""

from unittest.mock import patch

import pytest

from sample_contracts import (
    GenericService,
    IUserService,
    OrderService,
    PlainService,
    UnmarkedService,
    _HiddenService,
)

from declient.annotations import FauxClient
from declient.compiler import describe_contract, validate_contract
from declient.errors import ValidationError
from declient.extraction import extract_type
from declient.ir import TypeDescriptor


def descriptor(**overrides) -> TypeDescriptor:
    fields = dict(
        module="app.contracts",
        qualname="IService",
        is_interface=True,
        is_public=True,
        generic_arity=0,
        client=FauxClient("svc"),
    )
    fields.update(overrides)
    return TypeDescriptor(**fields)


class TestBoundaries:
    """Each condition is tested on its own."""

    def test_eligible(self):
        validate_contract(descriptor())

    @pytest.mark.parametrize(
        "overrides, constraint",
        [
            ({"is_interface": False}, "interface"),
            ({"is_public": False}, "public"),
            ({"generic_arity": 1}, "non-generic"),
            ({"generic_arity": 3}, "non-generic"),
            ({"client": None}, "client-annotation"),
        ],
    )
    def test_single_violation(self, overrides, constraint):
        with pytest.raises(ValidationError) as exc_info:
            validate_contract(descriptor(**overrides))
        assert exc_info.value.constraint == constraint
        assert exc_info.value.contract == "app.contracts.IService"

    def test_first_violation_wins(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_contract(descriptor(is_interface=False, is_public=False, generic_arity=2))
        assert exc_info.value.constraint == "interface"

    def test_message_names_contract(self):
        with pytest.raises(ValidationError, match="app.contracts.IService must be a public interface"):
            validate_contract(descriptor(is_public=False))

    def test_error_code(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_contract(descriptor(generic_arity=1))
        assert exc_info.value.code == "DCL001"
        assert "Generic interfaces are not supported" in exc_info.value.format()


class TestReflectedContracts:
    """Validation of real classes."""

    def test_protocol_and_abc_pass(self):
        validate_contract(extract_type(IUserService))
        validate_contract(extract_type(OrderService))

    @pytest.mark.parametrize(
        "contract, constraint",
        [
            (PlainService, "interface"),
            (_HiddenService, "public"),
            (GenericService, "non-generic"),
            (UnmarkedService, "client-annotation"),
        ],
    )
    def test_rejected(self, contract, constraint):
        with pytest.raises(ValidationError) as exc_info:
            validate_contract(extract_type(contract))
        assert exc_info.value.constraint == constraint

    def test_generic_contract_analyzes_no_methods(self):
        with patch("declient.compiler.describe_method") as describe_method:
            with pytest.raises(ValidationError):
                describe_contract(extract_type(GenericService))
        describe_method.assert_not_called()
