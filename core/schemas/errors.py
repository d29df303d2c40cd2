"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for airdrop tree construction, persistence
and claim preparation. Defines both Pydantic models for structured error
communication and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the airdrop core."""

    # Schema & Validation Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    INVALID_ADDRESS = "INVALID_ADDRESS"

    # Build-time Errors (fatal to distribution creation)
    EMPTY_DISTRIBUTION = "EMPTY_DISTRIBUTION"
    AMOUNT_OVERFLOW = "AMOUNT_OVERFLOW"
    BUILD_CANCELLED = "BUILD_CANCELLED"
    ZERO_ROOT = "ZERO_ROOT"

    # Claim-time Errors (recoverable, user-facing)
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    PROOF_UNAVAILABLE = "PROOF_UNAVAILABLE"

    # Merkle & Commitment Errors (defects)
    VERIFICATION_MISMATCH = "VERIFICATION_MISMATCH"
    PROOF_ENCODING_ERROR = "PROOF_ENCODING_ERROR"
    ROOT_MISMATCH = "ROOT_MISMATCH"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class AirdropError(BaseModel):
    """
    Base error model for structured error communication.

    Used where errors cross a serialization boundary (API responses,
    CLI JSON output) instead of being raised.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.NOT_ELIGIBLE],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "AirdropException":
        """Convert this error model to a raised exception."""
        return AirdropException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class AirdropException(Exception):
    """
    Base exception for all airdrop core errors.

    Carries structured error information and can be converted to/from
    AirdropError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "AIRDROP_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> AirdropError:
        """Convert this exception to an AirdropError model."""
        return AirdropError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(AirdropException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class InvalidAddressException(AirdropException):
    """Exception raised when an address is not a canonical 32-byte value."""

    def __init__(
        self,
        message: str,
        address: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if address is not None:
            full_details["address"] = address
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_ADDRESS,
            details=full_details,
            retryable=False,
        )


class EmptyDistributionException(AirdropException):
    """Exception raised when a tree is requested for zero recipients."""

    def __init__(
        self,
        message: str = "Recipients list cannot be empty",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_DISTRIBUTION,
            details=details,
            retryable=False,
        )


class AmountOverflowException(AirdropException):
    """Exception raised when an amount does not fit the 32-byte slot."""

    def __init__(
        self,
        message: str,
        amount: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if amount is not None:
            full_details["amount"] = str(amount)
        super().__init__(
            message=message,
            code=ErrorCodes.AMOUNT_OVERFLOW,
            details=full_details,
            retryable=False,
        )


class BuildCancelledException(AirdropException):
    """Exception raised when a background tree build is cancelled."""

    def __init__(
        self,
        message: str = "Tree build cancelled",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.BUILD_CANCELLED,
            details=details,
            retryable=False,
        )


class NotEligibleException(AirdropException):
    """Exception raised when a claimer is absent from the recipient list."""

    def __init__(
        self,
        message: str,
        distribution_id: str | None = None,
        address: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if distribution_id is not None:
            full_details["distribution_id"] = distribution_id
        if address is not None:
            full_details["address"] = address
        super().__init__(
            message=message,
            code=ErrorCodes.NOT_ELIGIBLE,
            details=full_details,
            retryable=False,
        )


class ProofUnavailableException(AirdropException):
    """
    Exception raised when a persisted distribution record is missing or corrupt.

    Recoverable: on-chain state is unaffected, only the local proof data is
    gone. Callers should prompt for the distribution data to be reloaded.
    """

    def __init__(
        self,
        message: str,
        distribution_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if distribution_id is not None:
            full_details["distribution_id"] = distribution_id
        super().__init__(
            message=message,
            code=ErrorCodes.PROOF_UNAVAILABLE,
            details=full_details,
            retryable=False,
        )


class VerificationMismatchException(AirdropException):
    """Exception raised when a locally generated proof fails local verification."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.VERIFICATION_MISMATCH,
            details=full_details,
            retryable=False,
        )


class ProofEncodingException(AirdropException):
    """Exception raised when a packed proof buffer is malformed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PROOF_ENCODING_ERROR,
            details=details,
            retryable=False,
        )


class ZeroRootException(AirdropException):
    """Exception raised when a zero root would be published."""

    def __init__(
        self,
        message: str = "Merkle root cannot be zero",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.ZERO_ROOT,
            details=details,
            retryable=False,
        )
