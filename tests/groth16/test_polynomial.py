import pytest

from ecdsa_zkp.field import FR, get_root_of_unity, get_roots_of_unity
from ecdsa_zkp.groth16.polynomial import (
    coset_fft,
    coset_ifft,
    coset_shift,
    evaluate,
    fft,
    ifft,
)
from ecdsa_zkp.groth16.qap import (
    column_evaluations,
    domain_size,
    lagrange_at,
    quotient,
    vanishing_at,
)
from ecdsa_zkp.exceptions import KeyWitnessMismatchError


COEFFS = [FR(c) for c in (3, 1, 4, 1, 5, 9, 2, 6)]


# ── fft / ifft ──
class TestFFT:
    def test_matches_evaluation(self):
        omega = get_root_of_unity(8)
        evals = fft(COEFFS, omega)
        for point, value in zip(get_roots_of_unity(8), evals):
            assert evaluate(COEFFS, point) == value

    def test_roundtrip(self):
        omega = get_root_of_unity(8)
        assert ifft(fft(COEFFS, omega), omega) == COEFFS

    def test_size_one(self):
        assert fft([FR(7)], FR(1)) == [FR(7)]

    def test_rejects_non_power_of_two(self):
        with pytest.raises(ValueError):
            fft([FR(1)] * 6, get_root_of_unity(8))


# ── coset ──
class TestCoset:
    def test_coset_evaluation(self):
        omega = get_root_of_unity(8)
        k = coset_shift(8)
        evals = coset_fft(COEFFS, omega, k)
        for point, value in zip(get_roots_of_unity(8), evals):
            assert evaluate(COEFFS, k * point) == value

    def test_coset_roundtrip(self):
        omega = get_root_of_unity(8)
        k = coset_shift(8)
        assert coset_ifft(coset_fft(COEFFS, omega, k), omega, k) == COEFFS

    def test_vanishing_is_constant_on_coset(self):
        """k^N = -1 → Z(k·ωⁱ) = -2"""
        k = coset_shift(8)
        for point in get_roots_of_unity(8):
            assert vanishing_at(k * point, 8) == FR(-2)


# ── QAP ──
class TestQAP:
    def test_domain_size(self, cubic_system):
        assert cubic_system.num_constraints == 5
        assert domain_size(cubic_system) == 8

    def test_lagrange_partition_of_unity(self):
        tau = FR(123456789)
        assert sum(lagrange_at(tau, 8), FR(0)) == FR(1)

    def test_lagrange_on_domain(self):
        """L_i(ω^j) = [i == j]"""
        omega = get_root_of_unity(8)
        basis = lagrange_at(omega ** 3, 8)
        assert basis == [FR(1) if i == 3 else FR(0) for i in range(8)]

    def test_column_evaluations_at_domain_point(self, cubic_system):
        """τ = ωⁱ 에서 u_j(τ) 는 A[i][j] 와 같다"""
        omega = get_root_of_unity(8)
        u, v, w = column_evaluations(cubic_system, omega, 8)
        for j in range(cubic_system.num_variables):
            assert u[j] == cubic_system.a[1].get(j, FR(0))
            assert v[j] == cubic_system.b[1].get(j, FR(0))
            assert w[j] == cubic_system.c[1].get(j, FR(0))

    def test_quotient_identity(self, cubic_system, cubic_assignment):
        """a(x)·b(x) - c(x) = h(x)·Z(x)"""
        n = 8
        omega = get_root_of_unity(n)
        padding = [FR(0)] * (n - cubic_system.num_constraints)
        a, b, c = (
            ifft(cubic_system.evaluate(m, cubic_assignment) + padding, omega)
            for m in (cubic_system.a, cubic_system.b, cubic_system.c)
        )
        h = quotient(cubic_system, cubic_assignment, n)
        assert len(h) == n - 1

        x = FR(987654321)
        lhs = evaluate(a, x) * evaluate(b, x) - evaluate(c, x)
        assert lhs == evaluate(h, x) * vanishing_at(x, n)

    def test_quotient_domain_too_small(self, cubic_system, cubic_assignment):
        with pytest.raises(KeyWitnessMismatchError):
            quotient(cubic_system, cubic_assignment, 4)
