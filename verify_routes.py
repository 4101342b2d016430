"""
ECDSA 증명 검증 Flask Blueprint
================================

POST /api/verify        JSON {msgHash, r, s, pubX, pubY} → 입력 기반 흐름
POST /api/verify/files  ARTIFACT_DIR 의 witness_input.json → 파일 기반 흐름
GET  /api/circuit       로드된 회로의 제약/변수 개수

응답: {"success", "errorKind", "errorMessage", "proofData"}
"""

from flask import Blueprint, current_app, jsonify, request

from ecdsa_zkp.exceptions import EcdsaZkpError, ErrorKind
from ecdsa_zkp.loader import prove_input_from_mapping
from ecdsa_zkp.pipeline import (
    free_proof_result,
    run_proof_verification,
    run_proof_verification_with_inputs,
)
from ecdsa_zkp.result import ProofResult

api_bp = Blueprint("api", __name__, url_prefix="/api")


STATUS_BY_KIND = {
    ErrorKind.UNAVAILABLE: 503,
    ErrorKind.CORRUPT: 500,
    ErrorKind.KEY_WITNESS_MISMATCH: 500,
    ErrorKind.INTERNAL: 500,
}


def result_to_json(result):
    """ProofResult → 응답 dict. 직렬화 후 result 를 해제한다."""
    body = {
        "success": result.success,
        "errorKind": result.error_kind.value if result.error_kind else None,
        "errorMessage": result.error_message,
        "proofData": result.proof_data,
    }
    free_proof_result(result)
    return body


def _artifact_dir():
    return current_app.config.get("ARTIFACT_DIR")


def _store():
    return current_app.config.get("KEY_STORE")


@api_bp.route("/verify", methods=["POST"])
def verify_inputs():
    """입력 기반 검증."""
    document = request.get_json(silent=True)
    if not isinstance(document, dict):
        failure = ProofResult.failure(ErrorKind.INVALID_ENCODING, "request body must be a JSON object")
        return jsonify(result_to_json(failure)), 400
    try:
        prove_input = prove_input_from_mapping(document)
    except EcdsaZkpError as e:
        return jsonify(result_to_json(ProofResult.failure(e.kind, str(e)))), 400

    result = run_proof_verification_with_inputs(prove_input, _artifact_dir(), _store())
    status = STATUS_BY_KIND.get(result.error_kind, 200)
    return jsonify(result_to_json(result)), status


@api_bp.route("/verify/files", methods=["POST"])
def verify_files():
    """파일 기반 검증 (ARTIFACT_DIR/witness_input.json)."""
    result = run_proof_verification(_artifact_dir(), _store())
    status = STATUS_BY_KIND.get(result.error_kind, 200)
    return jsonify(result_to_json(result)), status


@api_bp.route("/circuit")
def circuit_info():
    """로드된 회로의 크기."""
    store = current_app.config["KEY_STORE"]
    try:
        bundle = store.get(_artifact_dir())
    except EcdsaZkpError as e:
        failure = ProofResult.failure(e.kind, str(e))
        status = STATUS_BY_KIND.get(e.kind, 400)
        return jsonify(result_to_json(failure)), status

    cs = bundle.constraint_system
    return jsonify({
        "constraints": cs.num_constraints,
        "variables": cs.num_variables,
        "publicInputs": cs.num_public,
        "domainSize": bundle.proving_key.domain_size,
        "digest": cs.digest.hex(),
    })
