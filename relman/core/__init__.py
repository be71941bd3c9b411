"""Release state and target resolution: targets, configs, status ledger."""

from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    "ErrorCode",
    "Err",
    "Ok",
    "Result",
]
