from typing import Dict, Optional, Type

from .enums import ErrorCode


class ReclaimError(Exception):
    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class DuplicateCommitment(ReclaimError):
    """Raised when an identifier hash already has a live commitment."""

    code = ErrorCode.DUPLICATE_COMMITMENT


class CommitmentNotFound(ReclaimError):
    """Raised when a commitment id is unknown or already consumed."""

    code = ErrorCode.COMMITMENT_NOT_FOUND


class UnauthorizedRevealer(ReclaimError):
    """Raised when someone other than the committer attempts a reveal."""

    code = ErrorCode.UNAUTHORIZED_REVEALER


class RevealTooEarly(ReclaimError):
    code = ErrorCode.REVEAL_TOO_EARLY


class RevealTooLate(ReclaimError):
    code = ErrorCode.REVEAL_TOO_LATE


class InvalidNonce(ReclaimError):
    """Raised when the revealed data does not hash to the stored commitment."""

    code = ErrorCode.INVALID_NONCE


class InvalidCommitment(ReclaimError):
    """Raised when the claim identifier does not match the committed identifier hash."""

    code = ErrorCode.INVALID_COMMITMENT


class InvalidSignature(ReclaimError):
    """Raised when a signature is malformed or cannot be recovered."""

    code = ErrorCode.INVALID_SIGNATURE


class DuplicateSigner(ReclaimError):
    code = ErrorCode.DUPLICATE_SIGNER


class WitnessCountMismatch(ReclaimError):
    code = ErrorCode.WITNESS_COUNT_MISMATCH


class WitnessSetMismatch(ReclaimError):
    code = ErrorCode.WITNESS_SET_MISMATCH


class InsufficientWitnessPool(ReclaimError):
    code = ErrorCode.INSUFFICIENT_WITNESS_POOL


class NotExpired(ReclaimError):
    """Raised when cleanup targets a commitment still inside its age limit."""

    code = ErrorCode.NOT_EXPIRED


class NoActiveEpoch(ReclaimError):
    """Raised when a reveal arrives before any witness epoch was configured."""

    code = ErrorCode.NO_ACTIVE_EPOCH


class AdminAuthorizationError(ReclaimError):
    code = ErrorCode.ADMIN_UNAUTHORIZED


ERRORS_BY_CODE: Dict[ErrorCode, Type[ReclaimError]] = {
    cls.code: cls
    for cls in (
        DuplicateCommitment,
        CommitmentNotFound,
        UnauthorizedRevealer,
        RevealTooEarly,
        RevealTooLate,
        InvalidNonce,
        InvalidCommitment,
        InvalidSignature,
        DuplicateSigner,
        WitnessCountMismatch,
        WitnessSetMismatch,
        InsufficientWitnessPool,
        NotExpired,
        NoActiveEpoch,
        AdminAuthorizationError,
    )
}


def error_from_code(code: str, message: str) -> ReclaimError:
    """Rebuild the matching ReclaimError subclass from a wire error code."""
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return ReclaimError(message)
    cls = ERRORS_BY_CODE.get(error_code, ReclaimError)
    return cls(message)
