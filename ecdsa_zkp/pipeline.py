"""
검증 파이프라인 진입점
======================

디코딩 → witness → 증명 → 검증.

요청 상태: Received → Decoded → WitnessBuilt → Proved → Verified
가장 먼저 실패한 단계에서 Failure(kind)로 끝나고, 끝까지 가면 Success.
이 모듈 밖으로는 예외가 아니라 항상 ProofResult가 나간다.

로그 레벨:
  - 유효하지 않은 서명   INFO
  - 호출자 잘못           WARNING
  - 내부 오류             ERROR
"""

import logging
import os

from ecdsa_zkp.config import WITNESS_INPUT_FILE, default_artifact_dir
from ecdsa_zkp.exceptions import EcdsaZkpError, ErrorKind
from ecdsa_zkp.groth16.proving import prove
from ecdsa_zkp.groth16.verifying import verify
from ecdsa_zkp.loader import default_store, load_witness_input
from ecdsa_zkp.result import ProofResult, free_proof_result
from ecdsa_zkp.serialization import decode_proof, encode_proof
from ecdsa_zkp.witness import build_witness, decode_input, statement


logger = logging.getLogger(__name__)


PROOF_REJECTED = "proof rejected by verifier"

_CALLER_FAULTS = {
    ErrorKind.UNAVAILABLE,
    ErrorKind.INVALID_ENCODING,
    ErrorKind.INVALID_SIGNATURE_COMPONENT,
    ErrorKind.INVALID_PUBLIC_KEY,
    ErrorKind.MALFORMED_PROOF,
}


def _log_failure(kind, message):
    if kind is ErrorKind.WITNESS_UNSATISFIABLE:
        logger.info("verification failed: %s", message)
    elif kind in _CALLER_FAULTS:
        logger.warning("request rejected (%s): %s", kind.value, message)
    else:
        logger.error("verification error (%s): %s", kind.value, message)


def _verify_input(prove_input, directory, store):
    decoded = decode_input(prove_input)
    bundle = store.get(directory)

    witness = build_witness(bundle.constraint_system, decoded)
    proof = prove(bundle.proving_key, bundle.constraint_system, witness.assignment)

    proof_bytes = encode_proof(proof)
    ok = verify(bundle.verifying_key, decode_proof(proof_bytes), statement(decoded))
    if not ok:
        return ProofResult.failure(ErrorKind.WITNESS_UNSATISFIABLE, PROOF_REJECTED)
    return ProofResult.ok(proof_data=proof_bytes.hex())


def _run(load_input, directory, store):
    directory = directory or default_artifact_dir()
    store = store or default_store
    try:
        result = _verify_input(load_input(directory), directory, store)
    except EcdsaZkpError as e:
        result = ProofResult.failure(e.kind, str(e))
    except Exception as e:
        logger.exception("unexpected error during proof verification")
        result = ProofResult.failure(ErrorKind.INTERNAL, f"internal error: {e}")

    if result.success:
        logger.info("proof verified")
    else:
        _log_failure(result.error_kind, result.error_message)
    return result


def run_proof_verification(artifact_dir=None, store=None):
    """File-driven flow: witness_input.json plus the binary artifacts."""
    return _run(
        lambda directory: load_witness_input(os.path.join(directory, WITNESS_INPUT_FILE)),
        artifact_dir,
        store,
    )


def run_proof_verification_with_inputs(prove_input, artifact_dir=None, store=None):
    """Input-driven flow: a ProveInput plus the binary artifacts."""
    return _run(lambda directory: prove_input, artifact_dir, store)


__all__ = [
    "run_proof_verification",
    "run_proof_verification_with_inputs",
    "free_proof_result",
]
