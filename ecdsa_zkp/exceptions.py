"""
오류 분류 (ErrorKind)
=====================

모든 단계는 아래 예외 중 하나를 던진다. 파이프라인이 이를
``ProofResult`` 로 바꾼 뒤에야 호출 경계를 넘는다.
"""

import enum


class ErrorKind(enum.Enum):
    UNAVAILABLE = "Unavailable"
    CORRUPT = "Corrupt"
    INVALID_ENCODING = "InvalidEncoding"
    INVALID_SIGNATURE_COMPONENT = "InvalidSignatureComponent"
    INVALID_PUBLIC_KEY = "InvalidPublicKey"
    WITNESS_UNSATISFIABLE = "WitnessUnsatisfiable"
    KEY_WITNESS_MISMATCH = "KeyWitnessMismatch"
    MALFORMED_PROOF = "MalformedProof"
    INTERNAL = "Internal"


class EcdsaZkpError(Exception):
    """Base exception for the proof verifier."""

    kind = ErrorKind.INTERNAL


class ArtifactUnavailableError(EcdsaZkpError):
    """An artifact file is missing or unreadable."""

    kind = ErrorKind.UNAVAILABLE


class CorruptArtifactError(EcdsaZkpError):
    """An artifact is present but fails format validation."""

    kind = ErrorKind.CORRUPT


class InvalidEncodingError(EcdsaZkpError):
    """Malformed hex input."""

    kind = ErrorKind.INVALID_ENCODING


class InvalidSignatureComponentError(EcdsaZkpError):
    """r or s is zero or not below the group order."""

    kind = ErrorKind.INVALID_SIGNATURE_COMPONENT


class InvalidPublicKeyError(EcdsaZkpError):
    """The public key is not a finite point on the curve."""

    kind = ErrorKind.INVALID_PUBLIC_KEY


class WitnessUnsatisfiableError(EcdsaZkpError):
    """The input is well formed but does not encode a valid signature."""

    kind = ErrorKind.WITNESS_UNSATISFIABLE


class KeyWitnessMismatchError(EcdsaZkpError):
    """Key material and witness (or public inputs) disagree in shape."""

    kind = ErrorKind.KEY_WITNESS_MISMATCH


class MalformedProofError(EcdsaZkpError):
    """A serialized proof has the wrong size or invalid points."""

    kind = ErrorKind.MALFORMED_PROOF


class CircuitError(EcdsaZkpError):
    """Misuse of the constraint system builder."""


class DivisionByZero(EcdsaZkpError, ZeroDivisionError):
    """Inverse of the additive identity."""


class ResultReleasedError(EcdsaZkpError):
    """A ProofResult was released (or its message taken) more than once."""
