"""
유한체(Finite Field) FR / FN
============================

**FR**: BN254 스칼라 필드 = Grumpkin 기저 필드 = R1CS 제약 필드.
  - 위수 p = bn128.curve_order
  - p - 1 = 2^28 × m (m은 홀수) → 최대 2^28차 단위근을 지원

**FN**: Grumpkin 스칼라 필드 (ECDSA의 s⁻¹, u1, u2 계산용).
  - 위수 n = bn128.field_modulus

py_ecc의 FQ는 0의 역원을 0으로 돌려준다 (prime_field_inv). 여기서는
0으로 나누면 DivisionByZero를 던지도록 나눗셈을 덮어쓴다.

주의:
  FQ.__init__은 다른 필드의 FQ 객체를 받으면 .n을 축소 없이 그대로 복사한다.
  FR ↔ FN 변환은 항상 int()를 거친다.

사용 예시:
    >>> a = FR(3)
    >>> a / FR(3) == FR(1)   # True
    >>> FR(0).inverse()      # DivisionByZero
"""

from py_ecc.fields import bn128_FQ as FQ

from ecdsa_zkp.config import (
    FIELD_MODULUS,
    GROUP_ORDER,
    MULTIPLICATIVE_GENERATOR,
    TWO_ADICITY,
)
from ecdsa_zkp.exceptions import DivisionByZero


# ─────────────────────────────────────────────────────────────────────
# 소수체 공통 동작
# ─────────────────────────────────────────────────────────────────────

class PrimeField(FQ):
    """0으로 나누기를 거부하는 py_ecc FQ."""

    def inverse(self):
        """곱셈 역원. 0이면 DivisionByZero."""
        if self.n == 0:
            raise DivisionByZero(f"{type(self).__name__}: inverse of zero")
        return type(self)(pow(self.n, -1, self.field_modulus))

    def __truediv__(self, other):
        if not isinstance(other, FQ):
            other = type(self)(other)
        return self * other.inverse()

    def __rtruediv__(self, other):
        return type(self)(other) * self.inverse()

    __div__ = __truediv__
    __rdiv__ = __rtruediv__

    def __pow__(self, exponent):
        return type(self)(pow(self.n, exponent, self.field_modulus))

    def __bool__(self):
        return self.n != 0

    def is_zero(self):
        return self.n == 0

    def sqrt(self):
        """Tonelli-Shanks 제곱근. 이차 비잉여이면 None.

        두 근 중 어느 쪽이 나오는지는 정해지지 않는다.
        """
        p = self.field_modulus
        a = self.n
        if a == 0:
            return type(self)(0)
        if pow(a, (p - 1) // 2, p) != 1:
            return None

        # p - 1 = q · 2^s
        q, s = p - 1, 0
        while q % 2 == 0:
            q //= 2
            s += 1

        z = 2
        while pow(z, (p - 1) // 2, p) != p - 1:
            z += 1

        m = s
        c = pow(z, q, p)
        t = pow(a, q, p)
        r = pow(a, (q + 1) // 2, p)
        while t != 1:
            i, t2 = 0, t
            while t2 != 1:
                t2 = t2 * t2 % p
                i += 1
            b = pow(c, 1 << (m - i - 1), p)
            m = i
            c = b * b % p
            t = t * c % p
            r = r * b % p
        return type(self)(r)


class FR(PrimeField):
    """BN254 스칼라 필드 원소 (R1CS 제약 필드, Grumpkin 좌표)."""
    field_modulus = FIELD_MODULUS


class FN(PrimeField):
    """Grumpkin 그룹 위수 n 위의 원소 (ECDSA 스칼라)."""
    field_modulus = GROUP_ORDER


def batch_inverse(values):
    """Montgomery 트릭: n개의 역원을 역원 1번 + 곱셈 3n번으로 계산한다.

    하나라도 0이면 DivisionByZero.
    """
    if not values:
        return []
    prefix = []
    acc = type(values[0])(1)
    for v in values:
        prefix.append(acc)
        acc = acc * v
    inv = acc.inverse()
    result = [None] * len(values)
    for i in reversed(range(len(values))):
        result[i] = inv * prefix[i]
        inv = inv * values[i]
    return result


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근 ω (n은 2의 거듭제곱, n ≤ 2^28).

    생성자 g = FR(5)에서 ω = g^((p-1)/n).

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << TWO_ADICITY):
        raise ValueError(f"n은 2^{TWO_ADICITY} 이하여야 합니다: {n}")
    return FR(MULTIPLICATIVE_GENERATOR) ** ((FIELD_MODULUS - 1) // n)


def get_roots_of_unity(n):
    """[1, ω, ω², ..., ω^(n-1)]"""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots


def domain_size_for(count):
    """count 이상인 가장 작은 2의 거듭제곱."""
    size = 1
    while size < count:
        size <<= 1
    return size
