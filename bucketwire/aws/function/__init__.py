from .config import FunctionConfig, FunctionConfigDict
from .function import Function, FunctionResources

__all__ = [
    "Function",
    "FunctionConfig",
    "FunctionConfigDict",
    "FunctionResources",
]
