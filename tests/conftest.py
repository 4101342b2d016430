import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from ecdsa_zkp.config import PROVING_KEY_FILE, R1CS_FILE, VERIFYING_KEY_FILE
from ecdsa_zkp.field import FR
from ecdsa_zkp.groth16.setup import generate_keypair
from ecdsa_zkp.loader import KeyStore
from ecdsa_zkp.r1cs import ConstraintSystemBuilder
from ecdsa_zkp.serialization import (
    dump_constraint_system,
    dump_proving_key,
    dump_verifying_key,
)
from ecdsa_zkp.tools import generate_artifacts, generate_valid_input


# ── 테스트 상수 ──
CUBIC_X = 3
CUBIC_OUT = 35
CUBIC_SEED = "cubic-test-setup"
ECDSA_SEED = "ecdsa-test-setup"


def build_cubic(x=None):
    """x³ + x + 5 = out 회로. x가 주어지면 할당도 계산한다.

    Returns:
        (ConstraintSystem, assignment 또는 None)
    """
    cs = ConstraintSystemBuilder(compute_witness=x is not None)
    out = cs.alloc_public(lambda: x ** 3 + x + 5)
    xv = cs.alloc(lambda: x)
    x2 = cs.alloc(lambda: x * x)
    cs.enforce(xv, xv, x2, "x^2")
    x3 = cs.alloc(lambda: x ** 3)
    cs.enforce(x2, xv, x3, "x^3")
    cs.enforce(x3 + xv + 5, cs.one, out, "out")
    system = cs.finalize()
    return system, (cs.assignment() if x is not None else None)


@pytest.fixture(scope="session")
def cubic_builder():
    return build_cubic


@pytest.fixture(scope="session")
def cubic_seed():
    return CUBIC_SEED


@pytest.fixture(scope="session")
def cubic_system():
    system, _ = build_cubic()
    return system


@pytest.fixture(scope="session")
def cubic_assignment():
    _, assignment = build_cubic(CUBIC_X)
    return assignment


@pytest.fixture(scope="session")
def cubic_keys(cubic_system):
    """(ProvingKey, VerifyingKey), 결정론적 toxic waste."""
    return generate_keypair(cubic_system, seed=CUBIC_SEED)


@pytest.fixture(scope="session")
def cubic_public_inputs():
    return [FR(CUBIC_OUT)]


@pytest.fixture
def cubic_dir(tmp_path, cubic_system, cubic_keys):
    """cubic 회로의 r1cs / proving key / verifying key 가 담긴 디렉터리."""
    pk, vk = cubic_keys
    for name, data in (
        (R1CS_FILE, dump_constraint_system(cubic_system)),
        (PROVING_KEY_FILE, dump_proving_key(pk)),
        (VERIFYING_KEY_FILE, dump_verifying_key(vk)),
    ):
        (tmp_path / name).write_bytes(data)
    return str(tmp_path)


@pytest.fixture(scope="session")
def valid_input():
    """유효한 Grumpkin ECDSA 서명이 담긴 ProveInput."""
    return generate_valid_input(b"fixture message")


@pytest.fixture(scope="session")
def artifact_dir(tmp_path_factory):
    """내장 ECDSA 회로의 네 가지 아티팩트가 담긴 디렉터리 (setup 약 1분)."""
    directory = tmp_path_factory.mktemp("artifacts")
    generate_artifacts(str(directory), seed=ECDSA_SEED)
    return str(directory)


@pytest.fixture(scope="session")
def key_store():
    store = KeyStore()
    yield store
    store.clear()
