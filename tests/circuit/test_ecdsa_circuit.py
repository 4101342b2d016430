"""
ECDSA 검증 회로 테스트
======================

  - 회로 형태: 공개 입력 5개, 제약 수가 도메인 8192 안에 들어가는지
  - 유효한 서명의 할당이 모든 제약을 만족하는지
  - 공개 입력이나 서명을 바꾸면 제약이 깨지는지
"""

import pytest

from ecdsa_zkp.circuit import (
    NUM_PUBLIC_INPUTS,
    EcdsaAssignment,
    compute_assignment,
    ecdsa_constraint_system,
    public_inputs,
)
from ecdsa_zkp.circuit.ecdsa import synthesize
from ecdsa_zkp.config import GROUP_ORDER, LIMB_BITS
from ecdsa_zkp.curve import generator, scalar_mul
from ecdsa_zkp.field import FN, FR, domain_size_for
from ecdsa_zkp.r1cs import ConstraintSystemBuilder
from ecdsa_zkp.witness import DecodedInput, decode_input, recover_nonce_point


def _values(decoded, **overrides):
    big_r = recover_nonce_point(decoded)
    pub_x, pub_y = decoded.public_key.coordinates()
    values = EcdsaAssignment(
        z=decoded.z, r=decoded.r, s=decoded.s,
        pub_x=pub_x, pub_y=pub_y, r_y=int(big_r.y),
    )
    return values._replace(**overrides)


@pytest.fixture(scope="module")
def circuit():
    return ecdsa_constraint_system()


@pytest.fixture(scope="module")
def decoded(valid_input):
    return decode_input(valid_input)


@pytest.fixture(scope="module")
def assignment(decoded):
    return compute_assignment(_values(decoded))


class TestShape:
    def test_public_inputs(self, circuit):
        assert circuit.num_public == NUM_PUBLIC_INPUTS

    def test_fits_domain(self, circuit):
        assert 4096 < circuit.num_constraints < 8192
        assert domain_size_for(circuit.num_constraints) == 8192

    def test_cached(self, circuit):
        assert ecdsa_constraint_system() is circuit

    def test_digest_is_stable(self, circuit):
        cs = ConstraintSystemBuilder()
        synthesize(cs)
        assert cs.finalize().digest == circuit.digest


class TestPublicInputs:
    def test_split(self):
        z = (5 << LIMB_BITS) | 7
        assert public_inputs(z, 11, 13, 17) == [FR(7), FR(5), FR(11), FR(13), FR(17)]

    def test_matches_assignment(self, decoded, assignment):
        pub_x, pub_y = decoded.public_key.coordinates()
        expected = public_inputs(decoded.z, decoded.r, pub_x, pub_y)
        assert assignment[1:1 + NUM_PUBLIC_INPUTS] == expected


class TestSatisfaction:
    def test_valid_signature(self, circuit, assignment):
        assert len(assignment) == circuit.num_variables
        assert circuit.is_satisfied(assignment)

    @pytest.mark.parametrize("index", [1, 2, 3, 4, 5])
    def test_tampered_public_input(self, circuit, assignment, index):
        changed = list(assignment)
        changed[index] = changed[index] + 1
        assert not circuit.is_satisfied(changed)

    def test_tampered_private_variable(self, circuit, assignment):
        changed = list(assignment)
        changed[-1] = changed[-1] + 1
        assert not circuit.is_satisfied(changed)

    def test_wrong_message(self, circuit, decoded):
        """다른 z로 계산한 할당은 최종 비교에서만 실패한다"""
        other = compute_assignment(_values(decoded, z=(decoded.z + 1) % GROUP_ORDER))
        failed = circuit.first_unsatisfied(other)
        assert failed is not None
        assert circuit.label(failed) == "result x"

    def test_wrong_s(self, circuit, decoded):
        other = compute_assignment(_values(decoded, s=decoded.s % (GROUP_ORDER - 1) + 1))
        assert not circuit.is_satisfied(other)

    def test_s_out_of_range(self, circuit):
        """s = 1 인 서명을 만들고 s + n 을 넣으면 곱셈 체인은 통과하지만 범위 검사에 걸린다"""
        z, k = 0x1234, 12345
        nonce = scalar_mul(generator(), k)
        r = int(nonce.x)
        d = int((FN(k) - FN(z)) / FN(r))
        signed = DecodedInput(z, r, 1, scalar_mul(generator(), d))
        assert circuit.is_satisfied(compute_assignment(_values(signed)))

        other = compute_assignment(_values(signed, s=1 + GROUP_ORDER))
        failed = circuit.first_unsatisfied(other)
        assert failed is not None
        assert circuit.label(failed).startswith("s < n")
