# eversol/core/errors.py
from typing import Literal

# Tags carried by failed OperationResult descriptors
ErrorKind = Literal[
    "Validation",
    "NotFound",
    "CapacityExceeded",
    "StorageUnavailable",
]

# Tags carried by PincodeServiceError
PincodeErrorKind = Literal[
    "Validation",
    "ApiService",
    "NotServiceable",
    "GeolocationPermission",
    "GeolocationError",
]


class PincodeServiceError(Exception):
    """
    Failure raised by the async pincode/location lookups.

    Callers branch on `kind`; `message` is meant for the shopper.
    """

    def __init__(self, kind: PincodeErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"PincodeServiceError(kind={self.kind!r}, message={self.message!r})"
