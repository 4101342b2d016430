"""
회로 가젯 (Gadgets)
===================

ConstraintSystemBuilder 위에서 동작하는 재사용 가능한 제약 묶음.

  가젯                   제약 수
  ─────────────────────  ─────────────
  enforce_boolean        1
  alloc_bits(k)          k
  assert_nonzero         1
  assert_le_constant     257 (254비트 입력 기준)
  assert_on_curve        3
  point_double           4
  point_add (불완전)     4
  select_point           2
  conditional_add        6

점 좌표는 LinearCombination 이므로 상수 점(G, H)도 같은 가젯에 넣을 수 있다.

불완전 덧셈(incomplete addition):
  P + Q 는 P.x ≠ Q.x 일 때만 정의된다. (Q.x - P.x) · inv = 1 제약이
  P.x = Q.x 인 할당을 만족 불가능하게 만든다.
"""

from collections import namedtuple

from ecdsa_zkp.config import CURVE_B, LIMB_BITS
from ecdsa_zkp.r1cs import LinearCombination


AllocatedPoint = namedtuple("AllocatedPoint", ["x", "y"])


def constant_point(point):
    """CurvePoint → 상수 AllocatedPoint."""
    return AllocatedPoint(
        LinearCombination.constant(point.x),
        LinearCombination.constant(point.y),
    )


# ─────────────────────────────────────────────────────────────────────
# 비트
# ─────────────────────────────────────────────────────────────────────

def enforce_boolean(cs, bit, label=None):
    """bit · (1 - bit) = 0"""
    cs.enforce(bit, cs.one - bit, LinearCombination.zero(), label)


def alloc_bits(cs, value_fn, count, label="bit"):
    """정수 value_fn()의 하위 count 비트를 할당한다 (LSB 먼저).

    value_fn은 witness 모드에서 한 번만 호출된다.
    """
    cache = []

    def value():
        if not cache:
            cache.append(int(value_fn()))
        return cache[0]

    bits = []
    for i in range(count):
        bit = cs.alloc(lambda i=i: (value() >> i) & 1)
        enforce_boolean(cs, bit, f"{label}[{i}] boolean")
        bits.append(bit)
    return bits


def pack(bits):
    """Σ bits[i] · 2^i"""
    terms = {}
    for i, bit in enumerate(bits):
        for index, coeff in bit.terms.items():
            terms[index] = terms.get(index, 0) + int(coeff) * (1 << i)
    return LinearCombination(terms)


def enforce_packing(cs, bits, target, label=None):
    """pack(bits) = target"""
    cs.enforce(pack(bits), cs.one, target, label)


# ─────────────────────────────────────────────────────────────────────
# 범위 검사
# ─────────────────────────────────────────────────────────────────────

def assert_nonzero(cs, lc, label=None):
    """lc · inv = 1 (inv가 존재하면 lc ≠ 0)."""
    inv = cs.alloc(lambda: cs.value(lc).inverse())
    cs.enforce(lc, inv, cs.one, label)
    return inv


def assert_le_constant(cs, bits, constant, label="range"):
    """pack(bits) ≤ constant 를 127비트 limb 두 개의 빌림 뺄셈으로 강제한다.

    v = v_hi · 2^127 + v_lo,  c = c_hi · 2^127 + c_lo
      t    = [v_lo > c_lo]                  (빌림 비트)
      d_lo = c_lo - v_lo + t · 2^127        ∈ [0, 2^127)
      d_hi = c_hi - v_hi - t                ∈ [0, 2^127)
    d_lo, d_hi 를 127비트로 분해할 수 있으면 c - v = d_hi · 2^127 + d_lo ≥ 0.
    모든 값이 2^128 미만이라 필드 랩어라운드가 없다.
    """
    if len(bits) > 2 * LIMB_BITS:
        raise ValueError("at most two limbs are supported")
    mask = (1 << LIMB_BITS) - 1
    c_lo, c_hi = constant & mask, constant >> LIMB_BITS
    if c_hi >> LIMB_BITS:
        raise ValueError("constant does not fit in two limbs")

    v_lo = pack(bits[:LIMB_BITS])
    v_hi = pack(bits[LIMB_BITS:])

    borrow = cs.alloc(lambda: 1 if int(cs.value(v_lo)) > c_lo else 0)
    enforce_boolean(cs, borrow, f"{label} borrow boolean")

    d_lo = LinearCombination.constant(c_lo) - v_lo + borrow * (1 << LIMB_BITS)
    d_hi = LinearCombination.constant(c_hi) - v_hi - borrow

    lo_bits = alloc_bits(cs, lambda: int(cs.value(d_lo)), LIMB_BITS, f"{label} d_lo")
    enforce_packing(cs, lo_bits, d_lo, f"{label} d_lo packing")
    hi_bits = alloc_bits(cs, lambda: int(cs.value(d_hi)), LIMB_BITS, f"{label} d_hi")
    enforce_packing(cs, hi_bits, d_hi, f"{label} d_hi packing")


# ─────────────────────────────────────────────────────────────────────
# Grumpkin 점 연산
# ─────────────────────────────────────────────────────────────────────

def assert_on_curve(cs, point, label="on curve"):
    """y² = x³ - 17"""
    x, y = point
    xx = cs.alloc(lambda: cs.value(x) * cs.value(x))
    cs.enforce(x, x, xx, f"{label}: x^2")
    yy = cs.alloc(lambda: cs.value(y) * cs.value(y))
    cs.enforce(y, y, yy, f"{label}: y^2")
    cs.enforce(xx, x, yy - CURVE_B, f"{label}: x^3 + b = y^2")


def point_double(cs, point, label="double"):
    """2P. λ = 3x² / 2y"""
    x, y = point
    xx = cs.alloc(lambda: cs.value(x) * cs.value(x))
    cs.enforce(x, x, xx, f"{label}: x^2")

    lam = cs.alloc(lambda: cs.value(xx) * 3 / (cs.value(y) * 2))
    cs.enforce(lam, y * 2, xx * 3, f"{label}: slope")

    x3 = cs.alloc(lambda: cs.value(lam) * cs.value(lam) - cs.value(x) * 2)
    cs.enforce(lam, lam, x3 + x * 2, f"{label}: x3")

    y3 = cs.alloc(lambda: cs.value(lam) * (cs.value(x) - cs.value(x3)) - cs.value(y))
    cs.enforce(lam, x - x3, y3 + y, f"{label}: y3")
    return AllocatedPoint(x3, y3)


def point_add(cs, p, q, label="add"):
    """P + Q (P.x ≠ Q.x). λ = (y2 - y1) / (x2 - x1)"""
    dx = q.x - p.x
    dy = q.y - p.y

    inv = cs.alloc(lambda: cs.value(dx).inverse())
    cs.enforce(dx, inv, cs.one, f"{label}: distinct x")

    lam = cs.alloc(lambda: cs.value(dy) * cs.value(inv))
    cs.enforce(dx, lam, dy, f"{label}: slope")

    x3 = cs.alloc(
        lambda: cs.value(lam) * cs.value(lam) - cs.value(p.x) - cs.value(q.x)
    )
    cs.enforce(lam, lam, x3 + p.x + q.x, f"{label}: x3")

    y3 = cs.alloc(
        lambda: cs.value(lam) * (cs.value(p.x) - cs.value(x3)) - cs.value(p.y)
    )
    cs.enforce(lam, p.x - x3, y3 + p.y, f"{label}: y3")
    return AllocatedPoint(x3, y3)


def select_point(cs, bit, if_true, if_false, label="select"):
    """bit ? if_true : if_false.  out = f + bit · (t - f)"""
    coords = []
    for name, t, f in (("x", if_true.x, if_false.x), ("y", if_true.y, if_false.y)):
        out = cs.alloc(
            lambda t=t, f=f: cs.value(t) if cs.value(bit) == 1 else cs.value(f)
        )
        cs.enforce(bit, t - f, out - f, f"{label}: {name}")
        coords.append(out)
    return AllocatedPoint(*coords)


def conditional_add(cs, acc, addend, bit, label="cond add"):
    """bit ? acc + addend : acc. 덧셈은 bit와 무관하게 항상 제약된다."""
    total = point_add(cs, acc, addend, label)
    return select_point(cs, bit, total, acc, label)


def negate_point(point):
    return AllocatedPoint(point.x, -point.y)
