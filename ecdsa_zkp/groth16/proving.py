"""
Groth16 Proving
===============

    A = alpha + Σ z_j·u_j(τ) + r·delta                    (G1)
    B = beta  + Σ z_j·v_j(τ) + s·delta                    (G2, C 계산용 G1)
    C = Σ_{비공개} z_j·l_j + Σ h_i·h_query_i + s·A + r·B1 - r·s·delta

r, s 는 호출할 때마다 새로 뽑는다.
"""

import logging
import secrets
import time

from ecdsa_zkp.config import FIELD_MODULUS
from ecdsa_zkp.exceptions import KeyWitnessMismatchError
from ecdsa_zkp.groth16.bn254 import Z1, Z2, add, multiexp, neg, scalar_mul
from ecdsa_zkp.groth16.keys import Proof
from ecdsa_zkp.groth16.qap import quotient


logger = logging.getLogger(__name__)


def _random_scalar():
    return secrets.randbelow(FIELD_MODULUS - 1) + 1


def check_compatible(pk, cs, assignment):
    if pk.digest != cs.digest:
        raise KeyWitnessMismatchError("proving key was generated for a different circuit")
    if pk.num_variables != cs.num_variables or pk.num_public != cs.num_public:
        raise KeyWitnessMismatchError(
            f"proving key shape ({pk.num_variables} variables, {pk.num_public} public) "
            f"does not match the constraint system ({cs.num_variables}, {cs.num_public})"
        )
    if pk.domain_size < cs.num_constraints:
        raise KeyWitnessMismatchError("proving key domain is smaller than the circuit")
    if len(assignment) != pk.num_variables:
        raise KeyWitnessMismatchError(
            f"witness has {len(assignment)} variables, proving key expects {pk.num_variables}"
        )
    pk.check_shape()


def prove(pk, cs, assignment):
    """Create a Groth16 proof for the full assignment z.

    Raises:
        KeyWitnessMismatchError: key, constraint system and witness disagree in shape
    """
    check_compatible(pk, cs, assignment)
    started = time.perf_counter()

    h = quotient(cs, assignment, pk.domain_size)
    private = assignment[pk.num_public + 1:]

    r = _random_scalar()
    s = _random_scalar()

    a = add(pk.alpha_g1, multiexp(pk.a_query, assignment, Z1))
    a = add(a, scalar_mul(pk.delta_g1, r))

    b_g2 = add(pk.beta_g2, multiexp(pk.b_g2_query, assignment, Z2))
    b_g2 = add(b_g2, scalar_mul(pk.delta_g2, s))

    b_g1 = add(pk.beta_g1, multiexp(pk.b_g1_query, assignment, Z1))
    b_g1 = add(b_g1, scalar_mul(pk.delta_g1, s))

    c = add(multiexp(pk.l_query, private, Z1), multiexp(pk.h_query, h, Z1))
    c = add(c, scalar_mul(a, s))
    c = add(c, scalar_mul(b_g1, r))
    c = add(c, neg(scalar_mul(pk.delta_g1, r * s % FIELD_MODULUS)))

    logger.debug("proof generated in %.1fs", time.perf_counter() - started)
    return Proof(a=a, b=b_g2, c=c)
