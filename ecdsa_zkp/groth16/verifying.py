"""
Groth16 Verifying
=================

    e(A, B) == e(alpha, beta) · e(IC(x), gamma) · e(C, delta)
    IC(x) = ic[0] + Σ x_i · ic[i]

Miller loop 세 개를 곱한 뒤 최종 거듭제곱은 한 번만:

    FE(ML(B, A) · ML(-gamma, IC) · ML(-delta, C)) == e(alpha, beta)
"""

import logging
import time

from py_ecc.optimized_bn128 import final_exponentiate, pairing

from ecdsa_zkp.exceptions import KeyWitnessMismatchError
from ecdsa_zkp.groth16.bn254 import Z1, add, multiexp
from ecdsa_zkp.groth16.keys import PreparedVerifyingKey


logger = logging.getLogger(__name__)


def prepare_verifying_key(vk):
    return PreparedVerifyingKey(vk)


def public_input_commitment(vk, public_inputs):
    if len(public_inputs) + 1 != len(vk.ic):
        raise KeyWitnessMismatchError(
            f"{len(public_inputs)} public inputs given, verifying key expects {len(vk.ic) - 1}"
        )
    return add(vk.ic[0], multiexp(list(vk.ic[1:]), list(public_inputs), Z1))


def verify(pvk, proof, public_inputs):
    """True iff the proof is valid for the public inputs.

    pvk may be a VerifyingKey or a PreparedVerifyingKey.
    """
    if not isinstance(pvk, PreparedVerifyingKey):
        pvk = prepare_verifying_key(pvk)
    started = time.perf_counter()

    ic = public_input_commitment(pvk.vk, public_inputs)
    product = (
        pairing(proof.b, proof.a, final_exponentiate=False)
        * pairing(pvk.neg_gamma_g2, ic, final_exponentiate=False)
        * pairing(pvk.neg_delta_g2, proof.c, final_exponentiate=False)
    )
    ok = final_exponentiate(product) == pvk.alpha_beta

    logger.debug("verification %s in %.1fs", "passed" if ok else "failed",
                 time.perf_counter() - started)
    return ok
