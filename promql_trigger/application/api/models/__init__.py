from .registration import (
    ConvertRequest,
    ConvertResponse,
    ErrorResponse,
    FunctionDeclaration,
    HTTPEvent,
    HTTPFunction,
)

__all__ = [
    "ConvertRequest",
    "ConvertResponse",
    "ErrorResponse",
    "FunctionDeclaration",
    "HTTPEvent",
    "HTTPFunction",
]
