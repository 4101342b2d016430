"""
Groth16 Trusted Setup
=====================

개발 도구 전용. 검증 경로는 이 모듈을 호출하지 않고,
generate_keypair 가 만든 직렬화된 키만 읽는다.

toxic waste (τ, α, β, γ, δ) 는 secrets 로 뽑거나, 테스트에서는 seed 로
결정론적으로 만든다.
"""

import hashlib
import logging
import secrets
import time

from ecdsa_zkp.config import FIELD_MODULUS
from ecdsa_zkp.field import FR, batch_inverse
from ecdsa_zkp.groth16.bn254 import G1, G2, FixedBaseTable
from ecdsa_zkp.groth16.keys import ProvingKey, VerifyingKey
from ecdsa_zkp.groth16.qap import column_evaluations, domain_size, vanishing_at


logger = logging.getLogger(__name__)


class ToxicWaste:
    """tau, alpha, beta, gamma, delta. Must be discarded after setup."""

    NAMES = ("tau", "alpha", "beta", "gamma", "delta")

    def __init__(self, tau, alpha, beta, gamma, delta):
        self.tau = tau
        self.alpha = alpha
        self.beta = beta
        self.gamma = gamma
        self.delta = delta

    @classmethod
    def generate(cls, seed=None):
        if seed is None:
            values = [FR(secrets.randbelow(FIELD_MODULUS - 1) + 1) for _ in cls.NAMES]
        else:
            values = []
            for name in cls.NAMES:
                h = hashlib.sha256(f"{seed}/{name}".encode()).digest()
                values.append(FR(int.from_bytes(h, "big") % (FIELD_MODULUS - 1) + 1))
        return cls(*values)


def generate_keypair(cs, seed=None, toxic=None):
    """Run the circuit-specific setup for cs.

    Returns:
        (ProvingKey, VerifyingKey)
    """
    started = time.perf_counter()
    if toxic is None:
        toxic = ToxicWaste.generate(seed)
    tau, alpha, beta, gamma, delta = (
        toxic.tau, toxic.alpha, toxic.beta, toxic.gamma, toxic.delta
    )

    n = domain_size(cs)
    if vanishing_at(tau, n) == 0:
        raise ValueError("tau lies in the evaluation domain")

    u, v, w = column_evaluations(cs, tau, n)
    gamma_inv, delta_inv = batch_inverse([gamma, delta])
    z_tau = vanishing_at(tau, n)

    num_public = cs.num_public
    ic_scalars = []
    l_scalars = []
    for j in range(cs.num_variables):
        combined = beta * u[j] + alpha * v[j] + w[j]
        if j <= num_public:
            ic_scalars.append(combined * gamma_inv)
        else:
            l_scalars.append(combined * delta_inv)

    h_scalars = []
    power = z_tau * delta_inv
    for _ in range(n - 1):
        h_scalars.append(power)
        power = power * tau

    logger.debug("setup: building fixed-base tables")
    g1_table = FixedBaseTable(G1)
    g2_table = FixedBaseTable(G2)

    pk = ProvingKey(
        num_variables=cs.num_variables,
        num_public=num_public,
        domain_size=n,
        digest=cs.digest,
        alpha_g1=g1_table.multiply(alpha),
        beta_g1=g1_table.multiply(beta),
        beta_g2=g2_table.multiply(beta),
        delta_g1=g1_table.multiply(delta),
        delta_g2=g2_table.multiply(delta),
        a_query=tuple(g1_table.batch_multiply(u)),
        b_g1_query=tuple(g1_table.batch_multiply(v)),
        b_g2_query=tuple(g2_table.batch_multiply(v)),
        h_query=tuple(g1_table.batch_multiply(h_scalars)),
        l_query=tuple(g1_table.batch_multiply(l_scalars)),
    )
    vk = VerifyingKey(
        num_public=num_public,
        digest=cs.digest,
        alpha_g1=pk.alpha_g1,
        beta_g2=pk.beta_g2,
        gamma_g2=g2_table.multiply(gamma),
        delta_g2=pk.delta_g2,
        ic=tuple(g1_table.batch_multiply(ic_scalars)),
    )
    logger.info(
        "setup complete: %d constraints, %d variables, domain %d (%.1fs)",
        cs.num_constraints, cs.num_variables, n, time.perf_counter() - started,
    )
    return pk, vk
