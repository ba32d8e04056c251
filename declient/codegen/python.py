"""
Python client emitter.

Renders a ``ContractDescriptor`` and its request plans into the source of a
concrete client class. Every request-building statement comes from a plan
step, in plan order, and calls into ``declient_sdk.DiscoveryAwareBase``.

Example:
    ```python
    emitter = PythonClientEmitter(root_namespace="myapp.clients", sealed=True)
    source = emitter.emit(contract, plans)
    ```

Output is deterministic: imports are sorted, methods keep declaration order
and nothing time- or environment-dependent is rendered.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence, Set

from ..annotations import BodyFormat
from ..errors import CompileError
from ..ir import (
    AttachBody,
    AttachContentHeader,
    AttachRequestHeader,
    BindPathVariables,
    BindQueryParameters,
    ConstructRequest,
    ContractDescriptor,
    ExtractResponseHeader,
    Invoke,
    MaterializeReturn,
    MethodDescriptor,
    ParameterDescriptor,
    ParameterRole,
    RawKind,
    RequestPlan,
    ReturnRole,
)

SDK_MODULE = "declient_sdk"
BASE_CLASS = f"{SDK_MODULE}.DiscoveryAwareBase"

VARIABLES = "_dc_variables"
PARAMS = "_dc_params"
REQUEST = "_dc_request"
CONTENT = "_dc_content"
RESPONSE = "_dc_response"


def client_class_name(contract: ContractDescriptor) -> str:
    """Contract's fully qualified name with the dots removed."""
    return contract.full_name.replace(".", "")


class PythonClientEmitter:
    """Generates the module source of one client class."""

    def __init__(
        self,
        indent: str = "    ",
        *,
        root_namespace: str = "declient.generated",
        sealed: bool = False,
    ):
        self.indent = indent
        self.root_namespace = root_namespace
        self.sealed = sealed

    def emit(self, contract: ContractDescriptor, plans: Sequence[RequestPlan]) -> str:
        plans_by_method = {plan.method: plan for plan in plans}
        missing = [m.name for m in contract.methods if m.name not in plans_by_method]
        if missing:
            raise CompileError(
                f"No request plan for {', '.join(missing)}",
                contract=contract.full_name,
            )

        lines: List[str] = []
        lines.append(f'"""Client for {contract.full_name}.')
        lines.append("")
        lines.append(f"Generated by declient into {self.root_namespace}. DO NOT EDIT.")
        lines.append('"""')
        lines.append("")
        for module in sorted(self._imports(contract)):
            lines.append(f"import {module}")
        lines.append("")
        lines.append("")
        lines.extend(self._class_lines(contract, plans_by_method))
        lines.append("")
        return "\n".join(lines)

    # ------------------------------------------------------------------ #
    # Class
    # ------------------------------------------------------------------ #

    def _imports(self, contract: ContractDescriptor) -> Set[str]:
        modules = {"logging", "typing", SDK_MODULE, contract.module}
        for method in contract.methods:
            modules |= method.return_type.modules()
            for param in method.parameters:
                modules |= param.type.modules()
                modules |= param.value_type.modules()
        return modules

    def _class_lines(
        self, contract: ContractDescriptor, plans: Dict[str, RequestPlan]
    ) -> List[str]:
        i = self.indent
        lines: List[str] = []
        if self.sealed:
            lines.append("@typing.final")
        lines.append(
            f"class {client_class_name(contract)}({BASE_CLASS}, {contract.full_name}):"
        )
        lines.append(f'{i}"""HTTP client for the {contract.service_name!r} service."""')
        lines.append("")
        lines.append(
            f"{i}def __init__(self, client: {SDK_MODULE}.HttpClient, "
            f"logger: typing.Optional[logging.Logger] = None) -> None:"
        )
        lines.append(
            f"{i}{i}super().__init__(client, {contract.service_name!r}, "
            f"{contract.base_route!r}, logger=logger)"
        )
        for method in contract.methods:
            lines.append("")
            lines.extend(f"{i}{line}" for line in self._method_lines(method, plans[method.name]))
        return lines

    # ------------------------------------------------------------------ #
    # Methods
    # ------------------------------------------------------------------ #

    def _method_lines(self, method: MethodDescriptor, plan: RequestPlan) -> List[str]:
        i = self.indent
        lines = [self._signature(method)]
        lines.append(f'{i}"""{method.verb} {method.path}"""')

        handlers: Dict[type, Callable[[object, MethodDescriptor], List[str]]] = {
            BindPathVariables: self._bind_path_variables,
            BindQueryParameters: self._bind_query_parameters,
            ConstructRequest: self._construct_request,
            AttachRequestHeader: self._attach_request_header,
            AttachBody: self._attach_body,
            AttachContentHeader: self._attach_content_header,
            Invoke: self._invoke,
            ExtractResponseHeader: self._extract_response_header,
            MaterializeReturn: self._materialize_return,
        }
        body: List[str] = []
        for step in plan.steps:
            body.extend(handlers[type(step)](step, method))
        lines.extend(f"{i}{line}" for line in body)
        return lines

    def _signature(self, method: MethodDescriptor) -> str:
        parts = ["self"]
        keyword_only_started = False
        for param in method.parameters:
            if param.keyword_only and not keyword_only_started:
                parts.append("*")
                keyword_only_started = True
            parts.append(self._parameter(param))
        returns = "None" if method.is_void else method.return_type.render()
        prefix = "async def" if method.is_async else "def"
        return f"{prefix} {method.name}({', '.join(parts)}) -> {returns}:"

    @staticmethod
    def _parameter(param: ParameterDescriptor) -> str:
        text = f"{param.name}: {param.type.render()}"
        if param.default is not None:
            text += f" = {param.default}"
        return text

    # ------------------------------------------------------------------ #
    # Plan steps
    # ------------------------------------------------------------------ #

    @staticmethod
    def _mapping(bindings) -> str:
        return "{" + ", ".join(f"{key!r}: {name}" for key, name in bindings) + "}"

    def _bind_path_variables(self, step: BindPathVariables, method: MethodDescriptor) -> List[str]:
        return [f"{VARIABLES} = {self._mapping(step.bindings)}"]

    def _bind_query_parameters(self, step: BindQueryParameters, method: MethodDescriptor) -> List[str]:
        return [f"{PARAMS} = {self._mapping(step.bindings)}"]

    def _construct_request(self, step: ConstructRequest, method: MethodDescriptor) -> List[str]:
        variables = VARIABLES if method.with_role(ParameterRole.PATH_VARIABLE) else "{}"
        params = PARAMS if method.with_role(ParameterRole.QUERY_PARAMETER) else "{}"
        return [
            f"{REQUEST} = self.create_request({step.verb!r}, {step.path!r}, {variables}, {params})"
        ]

    def _attach_request_header(self, step: AttachRequestHeader, method: MethodDescriptor) -> List[str]:
        return [
            f"if {step.parameter} is not None:",
            f"{self.indent}{REQUEST}.headers[{step.header!r}] = self.format_value({step.parameter})",
        ]

    def _attach_body(self, step: AttachBody, method: MethodDescriptor) -> List[str]:
        factory = "raw_content" if step.format is BodyFormat.RAW else "json_content"
        args = step.parameter
        if step.content_type:
            args += f", {step.content_type!r}"
        return [
            f"{CONTENT} = self.{factory}({args})",
            f"{REQUEST}.content = {CONTENT}",
        ]

    def _attach_content_header(self, step: AttachContentHeader, method: MethodDescriptor) -> List[str]:
        return [
            f"if {step.parameter} is not None:",
            f"{self.indent}{CONTENT}.headers[{step.header!r}] = self.format_value({step.parameter})",
        ]

    def _invoke(self, step: Invoke, method: MethodDescriptor) -> List[str]:
        call = f"self.invoke_async({REQUEST})" if method.is_async else f"self.invoke({REQUEST})"
        if method.is_async:
            call = f"await {call}"
        return [f"{RESPONSE} = {call}"]

    def _extract_response_header(self, step: ExtractResponseHeader, method: MethodDescriptor) -> List[str]:
        return [
            f"if {step.parameter} is not None:",
            f"{self.indent}{step.parameter}.value = self.get_header_value("
            f"{RESPONSE}, {step.header!r}, {step.value_type.render()})",
        ]

    def _materialize_return(self, step: MaterializeReturn, method: MethodDescriptor) -> List[str]:
        target = step.return_type.render()
        if step.source is ReturnRole.RESPONSE_HEADER:
            return [f"return self.get_header_value({RESPONSE}, {step.header!r}, {target})"]
        if step.body_format is BodyFormat.RAW:
            kind = step.return_type.raw_kind or RawKind.BYTES
            return [f"return self.read_raw({RESPONSE}, {kind.value!r})"]
        return [f"return self.read_json({RESPONSE}, {target})"]


__all__ = ["PythonClientEmitter", "client_class_name"]
