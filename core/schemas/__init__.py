"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.

Distribution models live in core.schemas.distribution and are not re-exported
here: they depend on core.crypto, which itself imports the error taxonomy.
"""

# Error models and exceptions
from .errors import (
    AirdropError,
    AirdropException,
    AmountOverflowException,
    BuildCancelledException,
    CanonicalizationException,
    EmptyDistributionException,
    ErrorCodes,
    InvalidAddressException,
    NotEligibleException,
    ProofEncodingException,
    ProofUnavailableException,
    VerificationMismatchException,
    ZeroRootException,
)

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

__all__ = [
    # Errors
    "AirdropError",
    "AirdropException",
    "AmountOverflowException",
    "BuildCancelledException",
    "CanonicalizationException",
    "EmptyDistributionException",
    "ErrorCodes",
    "InvalidAddressException",
    "NotEligibleException",
    "ProofEncodingException",
    "ProofUnavailableException",
    "VerificationMismatchException",
    "ZeroRootException",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
]
