"""
declient: HTTP clients from annotated interfaces.

Declare a contract with the marks in ``declient.annotations``, then generate
and load its client:

    >>> from declient import ClientFactory
    >>> users = ClientFactory().create(IUserService)

``declient.compiler`` holds the pure validation, classification and
planning engine; ``declient.codegen`` renders plans to Python source.
"""

from .annotations import (
    Body,
    BodyFormat,
    ContentHeader,
    FauxClient,
    HttpMethod,
    PathValue,
    Query,
    RequestHeader,
    ResponseHeader,
    delete,
    faux_client,
    get,
    head,
    http_method,
    options,
    patch,
    post,
    put,
)
from .config import CompilerConfig, load_compiler_config
from .errors import (
    CompileError,
    DeclientError,
    EmissionWarning,
    ValidationError,
    WebServiceCompileError,
)
from .generator import GeneratedSource, WebServiceClassGenerator
from .loader import ClientFactory, load_client_class

__version__ = "0.1.0"

__all__ = [
    "Body",
    "BodyFormat",
    "ClientFactory",
    "CompileError",
    "CompilerConfig",
    "ContentHeader",
    "DeclientError",
    "EmissionWarning",
    "FauxClient",
    "GeneratedSource",
    "HttpMethod",
    "PathValue",
    "Query",
    "RequestHeader",
    "ResponseHeader",
    "ValidationError",
    "WebServiceClassGenerator",
    "WebServiceCompileError",
    "delete",
    "faux_client",
    "get",
    "head",
    "http_method",
    "load_client_class",
    "load_compiler_config",
    "options",
    "patch",
    "post",
    "put",
]
