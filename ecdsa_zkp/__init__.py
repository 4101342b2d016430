import logging

from ecdsa_zkp.exceptions import EcdsaZkpError, ErrorKind
from ecdsa_zkp.pipeline import (
    free_proof_result,
    run_proof_verification,
    run_proof_verification_with_inputs,
)
from ecdsa_zkp.result import ProofResult
from ecdsa_zkp.witness import ProveInput

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "EcdsaZkpError",
    "ErrorKind",
    "ProofResult",
    "ProveInput",
    "free_proof_result",
    "run_proof_verification",
    "run_proof_verification_with_inputs",
]
