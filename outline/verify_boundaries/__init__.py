from .verifier import BoundaryVerifier, ResultCallback
from .schemas import (
    VerifyRequest,
    BatchVerifyResult,
    BatchVerification,
    StartVerification,
    SingleVerification,
)

__all__ = [
    "BoundaryVerifier",
    "ResultCallback",
    "VerifyRequest",
    "BatchVerifyResult",
    "BatchVerification",
    "StartVerification",
    "SingleVerification",
]
