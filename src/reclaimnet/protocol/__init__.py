from .enums import CommitmentStatus, ErrorCode
from .errors import ReclaimError
from .models import (
    ClaimData,
    ClaimInfo,
    Proof,
    ProofCommitment,
    SignedClaim,
    WitnessEpoch,
)

__all__ = [
    "CommitmentStatus",
    "ErrorCode",
    "ReclaimError",
    "ClaimData",
    "ClaimInfo",
    "Proof",
    "ProofCommitment",
    "SignedClaim",
    "WitnessEpoch",
]
