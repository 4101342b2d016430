"""
BN254 그룹 연산 (py_ecc.optimized_bn128)
========================================

Groth16의 G1, G2 점은 py_ecc optimized_bn128 의 사영 좌표 튜플 (x, y, z)이다.
무한원점은 Z1, Z2.

**다중 스칼라 곱 (MSM)**:
  Pippenger 버킷 방법. 스칼라를 c비트 윈도우로 나누고, 윈도우마다
  같은 자릿값의 점을 버킷에 모은 뒤 누적합으로 Σ d · B_d 를 계산한다.
  0 스칼라는 건너뛴다 (witness 의 비트 변수 대부분이 작다).

**고정 기저 곱셈 (FixedBaseTable)**:
  setup 에서 G1, G2 생성자에 수천 개의 스칼라를 곱한다.
  T[w][d] = d · 2^(c·w) · P 를 미리 계산하면 곱셈 한 번이 덧셈 ⌈254/c⌉ 번이다.
"""

from py_ecc.optimized_bn128 import (
    G1,
    G2,
    Z1,
    Z2,
    add,
    curve_order,
    double,
    is_inf,
    multiply,
    neg,
    normalize,
)

from ecdsa_zkp.config import FIXED_BASE_WINDOW, MSM_MAX_WINDOW


SCALAR_BITS = curve_order.bit_length()


def identity_like(point):
    """point 와 같은 그룹의 항등원 (Z1 또는 Z2)."""
    one, zero = point[0].one(), point[0].zero()
    return (one, one, zero)


def to_affine(point):
    """(x, y) 또는 무한원점이면 None."""
    if is_inf(point):
        return None
    return normalize(point)


def points_equal(p1, p2):
    if is_inf(p1) or is_inf(p2):
        return is_inf(p1) and is_inf(p2)
    x1, y1, z1 = p1
    x2, y2, z2 = p2
    return x1 * z2 == x2 * z1 and y1 * z2 == y2 * z1


def scalar_mul(point, scalar):
    return multiply(point, int(scalar) % curve_order)


# ─────────────────────────────────────────────────────────────────────
# Pippenger MSM
# ─────────────────────────────────────────────────────────────────────

def _window_size(count):
    if count < 32:
        return 3
    return max(2, min(MSM_MAX_WINDOW, count.bit_length() - 3))


def multiexp(points, scalars, zero):
    """Σ scalars[i] · points[i].

    Args:
        points: 같은 그룹의 점 리스트
        scalars: int 또는 FR 리스트 (points 와 길이가 같아야 한다)
        zero: 그룹 항등원 (Z1 / Z2), 결과가 비었을 때 반환
    """
    if len(points) != len(scalars):
        raise ValueError(
            f"multiexp length mismatch: {len(points)} points, {len(scalars)} scalars"
        )
    pairs = []
    for point, scalar in zip(points, scalars):
        k = int(scalar) % curve_order
        if k and not is_inf(point):
            pairs.append((point, k))
    if not pairs:
        return zero

    c = _window_size(len(pairs))
    mask = (1 << c) - 1
    max_bits = max(k for _, k in pairs).bit_length()
    num_windows = (max_bits + c - 1) // c

    result = zero
    for w in reversed(range(num_windows)):
        if not is_inf(result):
            for _ in range(c):
                result = double(result)

        shift = w * c
        buckets = [None] * mask
        for point, k in pairs:
            digit = (k >> shift) & mask
            if digit:
                bucket = buckets[digit - 1]
                buckets[digit - 1] = point if bucket is None else add(bucket, point)

        # Σ d · B_d = Σ_{j} (B_j + B_{j+1} + ... )
        running = zero
        window_sum = zero
        for bucket in reversed(buckets):
            if bucket is not None:
                running = add(running, bucket)
            window_sum = add(window_sum, running)
        result = add(result, window_sum)
    return result


# ─────────────────────────────────────────────────────────────────────
# 고정 기저 곱셈
# ─────────────────────────────────────────────────────────────────────

class FixedBaseTable:
    """P 한 점에 대한 윈도우 테이블. multiply(k) = k · P."""

    def __init__(self, base, window=FIXED_BASE_WINDOW):
        self.window = window
        self.zero = identity_like(base)
        self.num_windows = (SCALAR_BITS + window - 1) // window
        self.table = []
        window_base = base
        for _ in range(self.num_windows):
            row = [self.zero]
            acc = self.zero
            for _ in range((1 << window) - 1):
                acc = add(acc, window_base)
                row.append(acc)
            self.table.append(row)
            # 다음 윈도우의 기저 = 2^c · 현재 기저
            for _ in range(window):
                window_base = double(window_base)

    def multiply(self, scalar):
        k = int(scalar) % curve_order
        mask = (1 << self.window) - 1
        result = self.zero
        w = 0
        while k:
            digit = k & mask
            if digit:
                result = add(result, self.table[w][digit])
            k >>= self.window
            w += 1
        return result

    def batch_multiply(self, scalars):
        return [self.multiply(k) for k in scalars]


__all__ = [
    "G1",
    "G2",
    "Z1",
    "Z2",
    "add",
    "neg",
    "FixedBaseTable",
    "identity_like",
    "multiexp",
    "points_equal",
    "scalar_mul",
    "to_affine",
]
