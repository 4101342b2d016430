"""
ECDSA 검증 회로 (Grumpkin)
==========================

공개 입력 (ONE 다음 순서대로):
    z_lo, z_hi   메시지 해시 z = H(m) mod n 의 하위/상위 127비트
    r            서명 r (R.x)
    pub_x, pub_y 공개키 Q

비공개 변수:
    R.y, z/r/s 의 254비트 분해, 범위 검사 비트, double-and-add 중간값

제약:
  1. Q 는 곡선 위의 점
  2. R = (r, R.y) 는 곡선 위의 점
  3. r ≠ 0, bits(r) ≤ p - 1, pack(bits(r)) = r
  4. bits(s) ≤ n - 1, s ≠ 0
  5. acc = H 에서 시작하여 비트 i = 253..0 마다
         acc = 2·acc
         acc += G    if z_i
         acc += Q    if r_i
         acc += -R   if s_i
     마지막에 acc = 2^254·H
     ⇔ z·G + r·Q - s·R = 0 ⇔ R = s⁻¹(z·G + r·Q)

  R.x = r < p < n 이므로 R.x mod n = r 와 같다 (ECDSA 수락 조건).

비트마다 22개 제약 (두 배 4 + 조건부 덧셈 6 × 3), 전체 약 6,900개.
"""

import functools
from collections import namedtuple

from ecdsa_zkp.circuit.gadgets import (
    AllocatedPoint,
    alloc_bits,
    assert_le_constant,
    assert_nonzero,
    assert_on_curve,
    conditional_add,
    constant_point,
    enforce_packing,
    negate_point,
    pack,
    point_double,
)
from ecdsa_zkp.config import FIELD_MODULUS, GROUP_ORDER, LIMB_BITS, SCALAR_BITS
from ecdsa_zkp.curve import generator, offset_point, offset_target
from ecdsa_zkp.field import FR
from ecdsa_zkp.r1cs import ConstraintSystemBuilder, LinearCombination


NUM_PUBLIC_INPUTS = 5

LIMB_MASK = (1 << LIMB_BITS) - 1


EcdsaAssignment = namedtuple(
    "EcdsaAssignment", ["z", "r", "s", "pub_x", "pub_y", "r_y"]
)
EcdsaAssignment.__doc__ = """회로 입력 정수값. z는 mod n 으로 축소된 해시, r_y 는 R.y."""


def public_inputs(z, r, pub_x, pub_y):
    """공개 입력 벡터 (ONE 제외). 검증자는 s 없이 이것만 계산한다."""
    z = int(z)
    return [
        FR(z & LIMB_MASK),
        FR(z >> LIMB_BITS),
        FR(int(r)),
        FR(int(pub_x)),
        FR(int(pub_y)),
    ]


def synthesize(cs, values=None):
    """ECDSA 검증 관계를 cs 에 기록한다.

    values 가 None 이면 형태만 만든다 (클로저가 호출되지 않는다).
    """
    v = values

    z_lo = cs.alloc_public(lambda: v.z & LIMB_MASK)
    z_hi = cs.alloc_public(lambda: v.z >> LIMB_BITS)
    r = cs.alloc_public(lambda: v.r)
    pub_x = cs.alloc_public(lambda: v.pub_x)
    pub_y = cs.alloc_public(lambda: v.pub_y)

    q = AllocatedPoint(pub_x, pub_y)
    assert_on_curve(cs, q, "Q on curve")

    r_y = cs.alloc(lambda: v.r_y)
    big_r = AllocatedPoint(r, r_y)
    assert_on_curve(cs, big_r, "R on curve")
    assert_nonzero(cs, r, "r nonzero")

    z_bits = alloc_bits(cs, lambda: v.z, SCALAR_BITS, "z")
    enforce_packing(cs, z_bits[:LIMB_BITS], z_lo, "z_lo packing")
    enforce_packing(cs, z_bits[LIMB_BITS:], z_hi, "z_hi packing")

    r_bits = alloc_bits(cs, lambda: v.r, SCALAR_BITS, "r")
    enforce_packing(cs, r_bits, r, "r packing")
    assert_le_constant(cs, r_bits, FIELD_MODULUS - 1, "r < p")

    s_bits = alloc_bits(cs, lambda: v.s, SCALAR_BITS, "s")
    assert_le_constant(cs, s_bits, GROUP_ORDER - 1, "s < n")
    assert_nonzero(cs, pack(s_bits[:LIMB_BITS]) + pack(s_bits[LIMB_BITS:]), "s nonzero")

    g = constant_point(generator())
    neg_r = negate_point(big_r)

    acc = constant_point(offset_point())
    for i in reversed(range(SCALAR_BITS)):
        acc = point_double(cs, acc, f"step {i}: double")
        acc = conditional_add(cs, acc, g, z_bits[i], f"step {i}: +G")
        acc = conditional_add(cs, acc, q, r_bits[i], f"step {i}: +Q")
        acc = conditional_add(cs, acc, neg_r, s_bits[i], f"step {i}: -R")

    target = offset_target()
    cs.enforce(acc.x, cs.one, LinearCombination.constant(target.x), "result x")
    cs.enforce(acc.y, cs.one, LinearCombination.constant(target.y), "result y")


@functools.lru_cache(maxsize=1)
def ecdsa_constraint_system():
    """내장 회로의 ConstraintSystem (한 번만 만든다)."""
    cs = ConstraintSystemBuilder()
    synthesize(cs)
    return cs.finalize()


def compute_assignment(values):
    """전체 할당 z = [1, 공개 입력..., 비공개 변수...].

    Raises:
        DivisionByZero: 불완전 덧셈의 예외 경우 등 할당이 존재하지 않을 때
    """
    cs = ConstraintSystemBuilder(compute_witness=True)
    synthesize(cs, values)
    cs.finalize()
    return cs.assignment()
