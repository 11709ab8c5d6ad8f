from enum import Enum


class ErrorCode(str, Enum):
    DUPLICATE_COMMITMENT = "duplicate_commitment"
    COMMITMENT_NOT_FOUND = "commitment_not_found"
    UNAUTHORIZED_REVEALER = "unauthorized_revealer"
    REVEAL_TOO_EARLY = "reveal_too_early"
    REVEAL_TOO_LATE = "reveal_too_late"
    INVALID_NONCE = "invalid_nonce"
    INVALID_COMMITMENT = "invalid_commitment"
    INVALID_SIGNATURE = "invalid_signature"
    DUPLICATE_SIGNER = "duplicate_signer"
    WITNESS_COUNT_MISMATCH = "witness_count_mismatch"
    WITNESS_SET_MISMATCH = "witness_set_mismatch"
    INSUFFICIENT_WITNESS_POOL = "insufficient_witness_pool"
    NOT_EXPIRED = "not_expired"
    NO_ACTIVE_EPOCH = "no_active_epoch"
    ADMIN_UNAUTHORIZED = "admin_unauthorized"
    INTERNAL_ERROR = "internal_error"


class CommitmentStatus(str, Enum):
    NO_COMMITMENT = "no_commitment"
    COMMITTED = "committed"
    REVEALED = "revealed"
    EXPIRED = "expired"
