"""
QAP (Quadratic Arithmetic Program) 변환
=======================================

R1CS 의 제약 i 를 도메인 점 ωⁱ 에 대응시킨다. 변수 j 마다

    u_j(x) = Σ_i A[i][j] · L_i(x)
    v_j(x) = Σ_i B[i][j] · L_i(x)
    w_j(x) = Σ_i C[i][j] · L_i(x)

이고, 할당 z 가 R1CS 를 만족하면

    (Σ z_j u_j(x)) · (Σ z_j v_j(x)) - Σ z_j w_j(x) = h(x) · Z(x)

setup 은 다항식 전체가 아니라 비밀 점 τ 에서의 값 u_j(τ), v_j(τ), w_j(τ)만
필요하다. L_i(τ) = (1/N) Σ_k τ^k ω^(-ik) 이므로 τ 거듭제곱의 IFFT 한 번이면 된다.
"""

from ecdsa_zkp.config import FIELD_MODULUS
from ecdsa_zkp.exceptions import KeyWitnessMismatchError
from ecdsa_zkp.field import FR, domain_size_for, get_root_of_unity
from ecdsa_zkp.groth16.polynomial import coset_fft, coset_ifft, coset_shift, ifft


P = FIELD_MODULUS


def domain_size(cs):
    """제약 수 이상의 가장 작은 2의 거듭제곱 N."""
    return domain_size_for(max(cs.num_constraints, 2))


def lagrange_at(tau, n):
    """[L_0(τ), ..., L_{n-1}(τ)]"""
    powers = []
    power = FR(1)
    for _ in range(n):
        powers.append(power)
        power = power * tau
    return ifft(powers, get_root_of_unity(n))


def column_evaluations(cs, tau, n):
    """(u(τ), v(τ), w(τ)) 각각 변수 수 길이의 FR 리스트."""
    lagrange = [int(x) for x in lagrange_at(tau, n)]
    columns = []
    for matrix in (cs.a, cs.b, cs.c):
        acc = [0] * cs.num_variables
        for i, row in enumerate(matrix):
            li = lagrange[i]
            for j, coeff in row.items():
                acc[j] = (acc[j] + coeff.n * li) % P
        columns.append([FR(x) for x in acc])
    return tuple(columns)


def vanishing_at(tau, n):
    """Z(τ) = τ^N - 1"""
    return tau ** n - 1


def quotient(cs, assignment, n):
    """h(x) 의 계수 N - 1 개.

    A·z, B·z, C·z 를 보간한 뒤 코셋 kH 에서
        h(kωⁱ) = (a·b - c)(kωⁱ) / Z(kωⁱ),  Z(kωⁱ) = -2
    를 계산하고 코셋 IFFT 로 되돌린다.
    """
    if cs.num_constraints > n:
        raise KeyWitnessMismatchError(
            f"{cs.num_constraints} constraints do not fit a domain of size {n}"
        )
    omega = get_root_of_unity(n)
    shift = coset_shift(n)
    padding = [FR(0)] * (n - cs.num_constraints)

    cosets = []
    for matrix in (cs.a, cs.b, cs.c):
        evals = cs.evaluate(matrix, assignment) + padding
        cosets.append(coset_fft(ifft(evals, omega), omega, shift))

    z_inv = pow(P - 2, -1, P)
    h_coset = [
        FR((a.n * b.n - c.n) * z_inv)
        for a, b, c in zip(*cosets)
    ]
    h = coset_ifft(h_coset, omega, shift)
    return h[: n - 1]
