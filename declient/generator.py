"""
Client source generation for annotated contracts.

``WebServiceClassGenerator`` runs the whole pipeline for one contract:
extraction, validation, per-method analysis and classification, plan
building and emission. Any ``ValidationError`` or ``CompileError`` aborts
the contract before anything is emitted or written.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .codegen import PythonClientEmitter, client_class_name
from .compiler import describe_contract, plan_contract
from .config import CompilerConfig
from .errors import EmissionWarning
from .extraction import extract_type


@dataclass(frozen=True)
class GeneratedSource:
    """Emitted client source and the names it is reachable under."""

    source: str
    full_class_name: str
    module_name: str
    class_name: str
    path: Optional[Path] = None


class _ContractLogger(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        return f"[{self.extra['contract']}] {msg}", kwargs


class WebServiceClassGenerator:
    """
    Generate client classes for contracts.

    Example:
        ```python
        generator = WebServiceClassGenerator(CompilerConfig(generate_sealed_classes=True))
        generated = generator.generate_source(IUserService)
        print(generated.full_class_name)
        ```

    The generator holds only its immutable configuration; concurrent calls
    for different contracts are independent.
    """

    def __init__(self, config: Optional[CompilerConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or CompilerConfig()
        self.logger = logger or logging.getLogger(__name__)

    def generate_source(self, contract: type) -> GeneratedSource:
        """
        Generate the client source for ``contract``.

        Raises:
            ValidationError: the type is not an eligible contract
            CompileError: a method cannot be translated
        """
        log = _ContractLogger(self.logger, {"contract": getattr(contract, "__qualname__", repr(contract))})
        log.debug("Beginning to generate source")

        descriptor = describe_contract(extract_type(contract))
        plans = plan_contract(descriptor)
        emitter = PythonClientEmitter(
            root_namespace=self.config.root_namespace,
            sealed=self.config.generate_sealed_classes,
        )
        source = emitter.emit(descriptor, plans)

        class_name = client_class_name(descriptor)
        module_name = self.config.root_namespace
        log.debug("Source generated")

        path = None
        if self.config.output_source_files:
            path = self._write(source, class_name, log)

        return GeneratedSource(
            source=source,
            full_class_name=f"{module_name}.{class_name}",
            module_name=module_name,
            class_name=class_name,
            path=path,
        )

    def _write(self, source: str, class_name: str, log: logging.LoggerAdapter) -> Optional[Path]:
        directory = Path(self.config.source_file_path)
        target = directory / f"{class_name}.py"
        log.debug("Writing source file: %s", target)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            target.write_text(source, encoding="utf-8")
        except OSError as exc:
            log.warning("Error writing source file %s: %s", target, exc)
            warnings.warn(
                f"Could not write generated source to {target}: {exc}",
                EmissionWarning,
                stacklevel=3,
            )
            return None
        return target


__all__ = ["GeneratedSource", "WebServiceClassGenerator"]
