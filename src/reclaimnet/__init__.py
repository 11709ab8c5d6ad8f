from .core.admin import AdminCapability, AdminGate
from .core.engine import AttestationEngine, verify_quorum
from .core.ledger import CommitmentLedger
from .core.settings import EngineSettings, ReclaimSettings, get_settings
from .core.store import InMemoryStore, RecordStore
from .crypto.signing import WitnessSigner, recover
from .protocol import (
    ClaimData,
    ClaimInfo,
    CommitmentStatus,
    ErrorCode,
    Proof,
    ProofCommitment,
    ReclaimError,
    SignedClaim,
    WitnessEpoch,
)
from .witness import WitnessEpochRegistry, select

__all__ = [
    "AdminCapability",
    "AdminGate",
    "AttestationEngine",
    "verify_quorum",
    "CommitmentLedger",
    "EngineSettings",
    "ReclaimSettings",
    "get_settings",
    "InMemoryStore",
    "RecordStore",
    "WitnessSigner",
    "recover",
    "ClaimData",
    "ClaimInfo",
    "CommitmentStatus",
    "ErrorCode",
    "Proof",
    "ProofCommitment",
    "ReclaimError",
    "SignedClaim",
    "WitnessEpoch",
    "WitnessEpochRegistry",
    "select",
]

__version__ = "1.0.0"
