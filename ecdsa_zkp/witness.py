"""
Witness 생성기
==============

hex 입력 → ECDSA 회로의 전체 R1CS 할당.

  1. decode_input: hex 디코딩, r/s 범위 검사, 공개키 곡선 검사
  2. 네이티브 ECDSA 사전 검사: R = u1·G + u2·Q 를 복원하고 R.x == r 확인
  3. compute_assignment: 회로 합성과 동시에 할당 계산
  4. 제약 검사: 하나라도 깨지면 WitnessUnsatisfiable

constraint system 의 digest 가 내장 ECDSA 회로와 다르면 KeyWitnessMismatch.
"""

import logging
from collections import namedtuple
from dataclasses import dataclass

from ecdsa_zkp.circuit import (
    EcdsaAssignment,
    compute_assignment,
    ecdsa_constraint_system,
    public_inputs,
)
from ecdsa_zkp.config import GROUP_ORDER
from ecdsa_zkp.curve import CurvePoint, generator, scalar_mul
from ecdsa_zkp.exceptions import (
    DivisionByZero,
    InvalidEncodingError,
    InvalidPublicKeyError,
    InvalidSignatureComponentError,
    KeyWitnessMismatchError,
    WitnessUnsatisfiableError,
)
from ecdsa_zkp.field import FN


logger = logging.getLogger(__name__)


SIGNATURE_DOES_NOT_VERIFY = "signature does not verify"


@dataclass(frozen=True)
class ProveInput:
    """The five hex fields of one verification request."""

    msg_hash: str
    r: str
    s: str
    pub_x: str
    pub_y: str


DecodedInput = namedtuple("DecodedInput", ["z", "r", "s", "public_key"])


@dataclass(frozen=True)
class Witness:
    assignment: list
    public_inputs: list


def decode_hex(value, name):
    """Big-endian hex → int. An optional 0x prefix is accepted."""
    if not isinstance(value, str):
        raise InvalidEncodingError(f"{name}: expected a hex string")
    text = value[2:] if value[:2] in ("0x", "0X") else value
    if not text:
        raise InvalidEncodingError(f"{name}: empty hex string")
    if len(text) % 2:
        raise InvalidEncodingError(f"{name}: odd-length hex string")
    try:
        raw = bytes.fromhex(text)
    except ValueError:
        raise InvalidEncodingError(f"{name}: invalid hex digits")
    # bytes.fromhex skips whitespace between byte pairs
    if len(raw) * 2 != len(text):
        raise InvalidEncodingError(f"{name}: invalid hex digits")
    return int.from_bytes(raw, "big")


def decode_input(prove_input):
    """Decode and range-check a ProveInput.

    Raises:
        InvalidEncodingError, InvalidSignatureComponentError, InvalidPublicKeyError
    """
    z = decode_hex(prove_input.msg_hash, "msgHash") % GROUP_ORDER
    r = decode_hex(prove_input.r, "r")
    s = decode_hex(prove_input.s, "s")
    pub_x = decode_hex(prove_input.pub_x, "pubX")
    pub_y = decode_hex(prove_input.pub_y, "pubY")

    if not 1 <= r < GROUP_ORDER:
        raise InvalidSignatureComponentError("r must be in [1, n)")
    if not 1 <= s < GROUP_ORDER:
        raise InvalidSignatureComponentError("s must be in [1, n)")

    public_key = CurvePoint.from_coordinates(pub_x, pub_y)
    if public_key.is_infinity:
        raise InvalidPublicKeyError("public key is the point at infinity")
    return DecodedInput(z, r, s, public_key)


def recover_nonce_point(decoded):
    """R = s⁻¹·z·G + s⁻¹·r·Q"""
    w = FN(decoded.s).inverse()
    u1 = int(FN(decoded.z) * w)
    u2 = int(FN(decoded.r) * w)
    return scalar_mul(generator(), u1) + scalar_mul(decoded.public_key, u2)


def statement(decoded):
    """Public inputs the verifier recomputes, without s."""
    pub_x, pub_y = decoded.public_key.coordinates()
    return public_inputs(decoded.z, decoded.r, pub_x, pub_y)


def build_witness(cs, decoded):
    """Synthesize the full assignment and check it against cs.

    Raises:
        KeyWitnessMismatchError: cs is not the built-in ECDSA circuit
        WitnessUnsatisfiableError: the signature does not verify
    """
    circuit = ecdsa_constraint_system()
    if cs.digest != circuit.digest:
        raise KeyWitnessMismatchError("constraint system does not match the ECDSA circuit")

    big_r = recover_nonce_point(decoded)
    if big_r.is_infinity or int(big_r.x) != decoded.r:
        raise WitnessUnsatisfiableError(SIGNATURE_DOES_NOT_VERIFY)

    pub_x, pub_y = decoded.public_key.coordinates()
    values = EcdsaAssignment(
        z=decoded.z,
        r=decoded.r,
        s=decoded.s,
        pub_x=pub_x,
        pub_y=pub_y,
        r_y=int(big_r.y),
    )
    try:
        assignment = compute_assignment(values)
    except DivisionByZero as e:
        logger.info("witness synthesis hit an exceptional case: %s", e)
        raise WitnessUnsatisfiableError(SIGNATURE_DOES_NOT_VERIFY)

    cs.check_assignment(assignment)
    failed = cs.first_unsatisfied(assignment)
    if failed is not None:
        logger.info("constraint %d (%s) not satisfied", failed, circuit.label(failed))
        raise WitnessUnsatisfiableError(SIGNATURE_DOES_NOT_VERIFY)

    return Witness(assignment=assignment, public_inputs=statement(decoded))
