"""Source emitters for generated clients."""

from .python import PythonClientEmitter, client_class_name

__all__ = ["PythonClientEmitter", "client_class_name"]
