"""
In-process loading of generated clients.

Example:
    ```python
    factory = ClientFactory(client=HttpClient(HttpClientConfig(services={"users": url})))
    users = factory.create(IUserService)
    users.get_user(42)
    ```
"""

from __future__ import annotations

import logging
import threading
import types
from typing import Dict, Optional, Type, TypeVar

from declient_sdk import HttpClient

from .generator import GeneratedSource, WebServiceClassGenerator

logger = logging.getLogger(__name__)

C = TypeVar("C")


def load_client_class(generated: GeneratedSource) -> type:
    """Execute generated source in a fresh module and return its client class.

    The module is not registered in ``sys.modules``; every call yields a new
    class object.
    """
    module = types.ModuleType(generated.module_name)
    filename = str(generated.path) if generated.path else f"<declient:{generated.full_class_name}>"
    code = compile(generated.source, filename, "exec")
    exec(code, module.__dict__)
    return getattr(module, generated.class_name)


class ClientFactory:
    """Generates, loads and instantiates clients, caching classes per factory."""

    def __init__(
        self,
        generator: Optional[WebServiceClassGenerator] = None,
        client: Optional[HttpClient] = None,
    ):
        self.generator = generator or WebServiceClassGenerator()
        self._owns_client = client is None
        self.client = client or HttpClient()
        self._classes: Dict[type, type] = {}
        self._lock = threading.Lock()

    def client_class(self, contract: type) -> type:
        with self._lock:
            cls = self._classes.get(contract)
            if cls is None:
                generated = self.generator.generate_source(contract)
                cls = load_client_class(generated)
                self._classes[contract] = cls
                logger.debug("Loaded %s for %s", generated.full_class_name, contract.__qualname__)
            return cls

    def create(self, contract: Type[C], logger: Optional[logging.Logger] = None) -> C:
        """Instantiate the client of ``contract`` bound to this factory's ``HttpClient``."""
        return self.client_class(contract)(self.client, logger=logger)

    def close(self):
        """Close the ``HttpClient`` this factory created; a passed-in one is left open."""
        if self._owns_client:
            self.client.close()

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


__all__ = ["ClientFactory", "load_client_class"]
