"""
개발 도구
=========

네이티브 Grumpkin ECDSA, 테스트 벡터, 아티팩트 생성.

    python -m ecdsa_zkp.tools <artifact-dir> [--seed SEED] [--message TEXT]

r1cs.bin, proving_key.bin, verifying_key.bin, witness_input.json 을 쓴다.
검증 경로에서는 이 모듈을 import 하지 않는다.
"""

import argparse
import hashlib
import json
import logging
import os
import secrets

from ecdsa_zkp.circuit import ecdsa_constraint_system
from ecdsa_zkp.config import (
    GROUP_ORDER,
    PROVING_KEY_FILE,
    R1CS_FILE,
    VERIFYING_KEY_FILE,
    WITNESS_INPUT_FILE,
)
from ecdsa_zkp.curve import CurvePoint, generator, scalar_mul
from ecdsa_zkp.field import FN
from ecdsa_zkp.groth16.setup import generate_keypair as groth16_setup
from ecdsa_zkp.serialization import (
    dump_constraint_system,
    dump_proving_key,
    dump_verifying_key,
)
from ecdsa_zkp.witness import ProveInput


logger = logging.getLogger(__name__)


DEFAULT_MESSAGE = b"testing ECDSA with Groth16"


def _random_scalar():
    return secrets.randbelow(GROUP_ORDER - 1) + 1


def generate_keypair():
    """(d, Q = d·G)"""
    d = _random_scalar()
    return d, scalar_mul(generator(), d)


def hash_message(message):
    return hashlib.sha256(message).digest()


def sign(private_key, msg_hash):
    """ECDSA signature (r, s) of the big-endian hash bytes."""
    z = int.from_bytes(msg_hash, "big") % GROUP_ORDER
    while True:
        k = _random_scalar()
        point = scalar_mul(generator(), k)
        r = int(point.x) % GROUP_ORDER
        if r == 0:
            continue
        s = int(FN(k).inverse() * (z + r * private_key))
        if s != 0:
            return r, s


def verify_signature(public_key, msg_hash, r, s):
    """Plain ECDSA verification, used to cross-check test vectors."""
    if not (1 <= r < GROUP_ORDER and 1 <= s < GROUP_ORDER):
        return False
    if not isinstance(public_key, CurvePoint):
        public_key = CurvePoint.from_coordinates(*public_key)
    if public_key.is_infinity or not public_key.is_on_curve():
        return False
    z = int.from_bytes(msg_hash, "big") % GROUP_ORDER
    w = FN(s).inverse()
    point = scalar_mul(generator(), int(FN(z) * w)) + scalar_mul(public_key, int(FN(r) * w))
    if point.is_infinity:
        return False
    return int(point.x) % GROUP_ORDER == r


def _hex32(value):
    return format(value, "064x")


def generate_valid_input(message=DEFAULT_MESSAGE, private_key=None):
    """A ProveInput holding a fresh, valid signature over sha256(message)."""
    if private_key is None:
        private_key, public_key = generate_keypair()
    else:
        public_key = scalar_mul(generator(), private_key)
    msg_hash = hash_message(message)
    r, s = sign(private_key, msg_hash)
    pub_x, pub_y = public_key.coordinates()
    return ProveInput(
        msg_hash=msg_hash.hex(),
        r=_hex32(r),
        s=_hex32(s),
        pub_x=_hex32(pub_x),
        pub_y=_hex32(pub_y),
    )


def prove_input_to_json(prove_input):
    return {
        "msgHash": prove_input.msg_hash,
        "r": prove_input.r,
        "s": prove_input.s,
        "pubX": prove_input.pub_x,
        "pubY": prove_input.pub_y,
    }


def _write(path, data):
    with open(path, "wb") as f:
        f.write(data)


def generate_artifacts(directory, seed=None, prove_input=None):
    """Build the circuit, run the setup and write all four artifacts.

    Returns:
        (ConstraintSystem, ProvingKey, VerifyingKey, ProveInput)
    """
    os.makedirs(directory, exist_ok=True)
    cs = ecdsa_constraint_system()
    logger.info(
        "circuit: %d constraints, %d variables, %d public inputs",
        cs.num_constraints, cs.num_variables, cs.num_public,
    )
    pk, vk = groth16_setup(cs, seed=seed)
    if prove_input is None:
        prove_input = generate_valid_input()

    _write(os.path.join(directory, R1CS_FILE), dump_constraint_system(cs))
    _write(os.path.join(directory, PROVING_KEY_FILE), dump_proving_key(pk))
    _write(os.path.join(directory, VERIFYING_KEY_FILE), dump_verifying_key(vk))
    with open(os.path.join(directory, WITNESS_INPUT_FILE), "w") as f:
        json.dump(prove_input_to_json(prove_input), f, indent=2)
    logger.info("artifacts written to %s", directory)
    return cs, pk, vk, prove_input


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="python -m ecdsa_zkp.tools",
        description="Generate the circuit, Groth16 keys and a valid witness input.",
    )
    parser.add_argument("directory", help="output directory for the artifacts")
    parser.add_argument("--seed", help="deterministic setup seed (testing only)")
    parser.add_argument("--message", default=DEFAULT_MESSAGE.decode(),
                        help="message to sign for witness_input.json")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    prove_input = generate_valid_input(args.message.encode())
    generate_artifacts(args.directory, seed=args.seed, prove_input=prove_input)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
