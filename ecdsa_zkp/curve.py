"""
Grumpkin 타원곡선 연산
======================

ECDSA 서명 곡선: y² = x³ - 17 over FR (BN254 스칼라 필드).

  - 그룹 위수 n = bn128.field_modulus (소수, cofactor 1)
  - 생성자 G = (1, √-16), 두 제곱근 중 작은 쪽
  - 오프셋 점 H = hash_to_scalar(OFFSET_SEED) · G

**오프셋 점**:
  회로 안의 double-and-add는 항등원(무한원점)을 표현할 수 없다.
  누산기를 H에서 시작하면 254번 두 배 후 2^254·H가 더해지므로
  최종 비교 대상은 K = 2^254·H 가 된다 (offset_target).

**스칼라 곱**:
  Montgomery ladder. 비트 값과 무관하게 비트마다 덧셈 1번 + 두 배 1번을
  수행한다. 순수 Python에서는 연산 시간이 피연산자에 따라 달라지므로
  상수 시간을 보장하지는 않는다.

사용 예시:
    >>> G = generator()
    >>> scalar_mul(G, 2) == G.double()  # True
    >>> scalar_mul(G, GROUP_ORDER).is_infinity  # True
"""

import functools
import hashlib

from ecdsa_zkp.config import (
    CURVE_B,
    FIELD_MODULUS,
    GENERATOR_X,
    GROUP_ORDER,
    OFFSET_SEED,
    SCALAR_BITS,
)
from ecdsa_zkp.exceptions import InvalidPublicKeyError
from ecdsa_zkp.field import FR


B = FR(CURVE_B)


# ─────────────────────────────────────────────────────────────────────
# CurvePoint
# ─────────────────────────────────────────────────────────────────────

class CurvePoint:
    """Grumpkin 위의 아핀 점 또는 무한원점 (INFINITY).

    좌표는 FR 원소이며, 무한원점은 x = y = None 으로 표현한다.
    생성 후에는 변경하지 않는다.
    """

    __slots__ = ("x", "y")

    def __init__(self, x, y):
        self.x = x
        self.y = y

    @classmethod
    def from_coordinates(cls, x, y):
        """정수 좌표에서 점을 만든다.

        Raises:
            InvalidPublicKeyError: 좌표가 [0, p) 밖이거나 곡선 위에 없을 때
        """
        x, y = int(x), int(y)
        if not (0 <= x < FIELD_MODULUS and 0 <= y < FIELD_MODULUS):
            raise InvalidPublicKeyError("point coordinate out of field range")
        point = cls(FR(x), FR(y))
        if not point.is_on_curve():
            raise InvalidPublicKeyError("point is not on the curve")
        return point

    @property
    def is_infinity(self):
        return self.x is None

    def is_on_curve(self):
        if self.is_infinity:
            return True
        return self.y * self.y == self.x * self.x * self.x + B

    def coordinates(self):
        """(x, y) 정수 튜플."""
        if self.is_infinity:
            raise ValueError("point at infinity has no affine coordinates")
        return int(self.x), int(self.y)

    def __neg__(self):
        if self.is_infinity:
            return self
        return CurvePoint(self.x, -self.y)

    def __add__(self, other):
        if self.is_infinity:
            return other
        if other.is_infinity:
            return self
        if self.x == other.x:
            if self.y == other.y:
                return self.double()
            return INFINITY
        lam = (other.y - self.y) / (other.x - self.x)
        x3 = lam * lam - self.x - other.x
        y3 = lam * (self.x - x3) - self.y
        return CurvePoint(x3, y3)

    def __sub__(self, other):
        return self + (-other)

    def double(self):
        # 위수가 홀수이므로 y = 0 인 유한점은 없다
        if self.is_infinity or self.y == 0:
            return INFINITY
        lam = (self.x * self.x * 3) / (self.y * 2)
        x3 = lam * lam - self.x * 2
        y3 = lam * (self.x - x3) - self.y
        return CurvePoint(x3, y3)

    def __mul__(self, scalar):
        return scalar_mul(self, scalar)

    __rmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, CurvePoint):
            return NotImplemented
        if self.is_infinity or other.is_infinity:
            return self.is_infinity and other.is_infinity
        return self.x == other.x and self.y == other.y

    def __hash__(self):
        if self.is_infinity:
            return hash(None)
        return hash((int(self.x), int(self.y)))

    def __repr__(self):
        if self.is_infinity:
            return "CurvePoint(INFINITY)"
        return f"CurvePoint({int(self.x):#x}, {int(self.y):#x})"


INFINITY = CurvePoint(None, None)


# ─────────────────────────────────────────────────────────────────────
# 스칼라 곱 (Montgomery ladder)
# ─────────────────────────────────────────────────────────────────────

def _cswap(a, b, bit):
    return (b, a) if bit else (a, b)


def scalar_mul(point, scalar):
    """k · P. k는 mod n 으로 축소한 뒤 254비트 전부를 처리한다.

    불변식: 각 단계 후 R1 - R0 = P
    """
    k = int(scalar) % GROUP_ORDER
    r0, r1 = INFINITY, point
    for i in reversed(range(SCALAR_BITS)):
        bit = (k >> i) & 1
        r0, r1 = _cswap(r0, r1, bit)
        r1 = r0 + r1
        r0 = r0.double()
        r0, r1 = _cswap(r0, r1, bit)
    return r0


# ─────────────────────────────────────────────────────────────────────
# 고정 점
# ─────────────────────────────────────────────────────────────────────

@functools.lru_cache(maxsize=None)
def generator():
    """G = (1, √(1 - 17)), 작은 쪽 제곱근."""
    x = FR(GENERATOR_X)
    y = (x * x * x + B).sqrt()
    if y is None:
        raise ValueError("generator x has no point on the curve")
    y = FR(min(int(y), FIELD_MODULUS - int(y)))
    return CurvePoint(x, y)


def hash_to_scalar(data):
    """sha256(data) mod n. 0이면 1로 대체한다."""
    k = int.from_bytes(hashlib.sha256(data).digest(), "big") % GROUP_ORDER
    return k or 1


@functools.lru_cache(maxsize=None)
def offset_point():
    """회로 double-and-add 누산기의 시작점 H."""
    return scalar_mul(generator(), hash_to_scalar(OFFSET_SEED))


@functools.lru_cache(maxsize=None)
def offset_target():
    """K = 2^254 · H (254번 두 배한 뒤의 오프셋 기여분)."""
    return scalar_mul(offset_point(), pow(2, SCALAR_BITS, GROUP_ORDER))
