"""
FFT / IFFT 와 코셋(coset) 변환
==============================

Groth16 증명자는 몫 다항식 h(x) = (a(x)·b(x) - c(x)) / Z(x) 를 계산해야 한다.
도메인 H = {1, ω, ..., ω^(N-1)} 위에서는 Z(x) = x^N - 1 이 0이므로,
H 와 겹치지 않는 코셋 kH 에서 평가하여 나눈다.

  k = 2N차 원시 단위근 → k^N = -1 → Z(k·ωⁱ) = k^N - 1 = -2 (상수)

**FFT**: 재귀적 Cooley-Tukey radix-2. 내부 연산은 int mod p 로 수행하고
입출력은 FR 리스트이다.
"""

from ecdsa_zkp.config import FIELD_MODULUS
from ecdsa_zkp.field import FR, get_root_of_unity


P = FIELD_MODULUS


def _fft_int(values, omega):
    n = len(values)
    if n == 1:
        return list(values)

    omega_sq = omega * omega % P
    even_vals = _fft_int(values[0::2], omega_sq)
    odd_vals = _fft_int(values[1::2], omega_sq)

    half = n // 2
    result = [0] * n
    omega_k = 1
    for k in range(half):
        t = omega_k * odd_vals[k] % P
        result[k] = (even_vals[k] + t) % P
        result[k + half] = (even_vals[k] - t) % P
        omega_k = omega_k * omega % P
    return result


def _check_size(n):
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"FFT 크기는 2의 거듭제곱이어야 합니다: {n}")


def fft(coeffs, omega):
    """계수 → [p(1), p(ω), ..., p(ω^(n-1))]"""
    _check_size(len(coeffs))
    return [FR(v) for v in _fft_int([int(c) for c in coeffs], int(omega))]


def ifft(evals, omega):
    """평가값 → 계수. ω⁻¹ 로 FFT 후 n 으로 나눈다."""
    n = len(evals)
    _check_size(n)
    omega_inv = pow(int(omega), -1, P)
    n_inv = pow(n, -1, P)
    return [FR(v * n_inv) for v in _fft_int([int(e) for e in evals], omega_inv)]


def coset_fft(coeffs, omega, shift):
    """[p(k), p(kω), ..., p(kω^(n-1))]"""
    k = int(shift)
    scaled = []
    power = 1
    for c in coeffs:
        scaled.append(int(c) * power % P)
        power = power * k % P
    return fft(scaled, omega)


def coset_ifft(evals, omega, shift):
    """coset_fft 의 역변환."""
    coeffs = ifft(evals, omega)
    k_inv = pow(int(shift), -1, P)
    result = []
    power = 1
    for c in coeffs:
        result.append(c * power)
        power = power * k_inv % P
    return result


def coset_shift(n):
    """크기 n 도메인의 코셋 생성자 k (2n차 원시 단위근)."""
    return get_root_of_unity(2 * n)


def evaluate(coeffs, point):
    """Horner's method."""
    x = int(point)
    result = 0
    for c in reversed(coeffs):
        result = (result * x + int(c)) % P
    return FR(result)
