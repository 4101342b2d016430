"""
Groth16 키와 증명 자료구조
==========================

ProvingKey (setup의 σ1/σ2를 역할별로 묶음):
    alpha_g1, beta_g1, beta_g2, delta_g1, delta_g2
    a_query[j]    = u_j(τ)·G1                       모든 변수
    b_g1_query[j] = v_j(τ)·G1                       모든 변수
    b_g2_query[j] = v_j(τ)·G2                       모든 변수
    h_query[i]    = τ^i·Z(τ)/δ·G1                   i < N - 1
    l_query[j]    = (β·u_j + α·v_j + w_j)(τ)/δ·G1   비공개 변수

VerifyingKey:
    alpha_g1, beta_g2, gamma_g2, delta_g2
    ic[j]         = (β·u_j + α·v_j + w_j)(τ)/γ·G1   ONE과 공개 입력
"""

from dataclasses import dataclass

from py_ecc.optimized_bn128 import pairing

from ecdsa_zkp.exceptions import KeyWitnessMismatchError
from ecdsa_zkp.groth16.bn254 import neg, points_equal


@dataclass(frozen=True)
class ProvingKey:
    num_variables: int
    num_public: int
    domain_size: int
    digest: bytes
    alpha_g1: tuple
    beta_g1: tuple
    beta_g2: tuple
    delta_g1: tuple
    delta_g2: tuple
    a_query: tuple
    b_g1_query: tuple
    b_g2_query: tuple
    h_query: tuple
    l_query: tuple

    @property
    def num_private(self):
        return self.num_variables - self.num_public - 1

    def check_shape(self):
        expected = {
            "a_query": self.num_variables,
            "b_g1_query": self.num_variables,
            "b_g2_query": self.num_variables,
            "h_query": self.domain_size - 1,
            "l_query": self.num_private,
        }
        for name, length in expected.items():
            actual = len(getattr(self, name))
            if actual != length:
                raise KeyWitnessMismatchError(
                    f"proving key {name} has {actual} entries, expected {length}"
                )

    def __repr__(self):
        return (
            f"ProvingKey(variables={self.num_variables}, public={self.num_public}, "
            f"domain={self.domain_size}, digest={self.digest.hex()[:16]})"
        )


@dataclass(frozen=True)
class VerifyingKey:
    num_public: int
    digest: bytes
    alpha_g1: tuple
    beta_g2: tuple
    gamma_g2: tuple
    delta_g2: tuple
    ic: tuple

    def __repr__(self):
        return (
            f"VerifyingKey(public={self.num_public}, ic={len(self.ic)}, "
            f"digest={self.digest.hex()[:16]})"
        )


class PreparedVerifyingKey:
    """VerifyingKey plus the cached e(alpha, beta) and negated G2 elements."""

    def __init__(self, vk):
        self.vk = vk
        self.alpha_beta = pairing(vk.beta_g2, vk.alpha_g1)
        self.neg_gamma_g2 = neg(vk.gamma_g2)
        self.neg_delta_g2 = neg(vk.delta_g2)

    @property
    def num_public(self):
        return self.vk.num_public

    @property
    def digest(self):
        return self.vk.digest


@dataclass(frozen=True, eq=False)
class Proof:
    a: tuple
    b: tuple
    c: tuple

    def __eq__(self, other):
        if not isinstance(other, Proof):
            return NotImplemented
        return (
            points_equal(self.a, other.a)
            and points_equal(self.b, other.b)
            and points_equal(self.c, other.c)
        )

    __hash__ = None
