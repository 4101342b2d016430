"""
회로 가젯 테스트
================

가젯마다 작은 회로를 만들어
  - 올바른 할당이 모든 제약을 만족하는지
  - 할당 값 하나를 조작하면 제약이 깨지는지
  - 회로 안의 점 연산이 네이티브 Grumpkin 연산과 같은지
를 확인한다.
"""

import pytest

from ecdsa_zkp.circuit.gadgets import (
    AllocatedPoint,
    alloc_bits,
    assert_le_constant,
    assert_nonzero,
    assert_on_curve,
    conditional_add,
    constant_point,
    enforce_boolean,
    pack,
    point_add,
    point_double,
)
from ecdsa_zkp.config import FIELD_MODULUS
from ecdsa_zkp.curve import generator, scalar_mul
from ecdsa_zkp.exceptions import CircuitError, DivisionByZero
from ecdsa_zkp.field import FR
from ecdsa_zkp.r1cs import ConstraintSystemBuilder, LinearCombination


def _alloc_point(cs, point):
    x = cs.alloc(lambda: point.x)
    y = cs.alloc(lambda: point.y)
    return AllocatedPoint(x, y)


def _tampered(assignment, index, delta=1):
    changed = list(assignment)
    changed[index] = changed[index] + delta
    return changed


class TestLinearCombination:
    def test_arithmetic(self):
        x = LinearCombination.variable(1)
        y = LinearCombination.variable(2)
        lc = x * 3 + y - x + 5
        z = [FR(1), FR(10), FR(100)]
        assert lc.evaluate(z) == FR(2 * 10 + 100 + 5)

    def test_cancellation_drops_terms(self):
        x = LinearCombination.variable(1)
        assert (x - x).terms == {}

    def test_negation(self):
        x = LinearCombination.variable(1)
        z = [FR(1), FR(4)]
        assert (-x).evaluate(z) == FR(-4)
        assert (7 - x).evaluate(z) == FR(3)

    def test_product_of_lcs_rejected(self):
        x = LinearCombination.variable(1)
        with pytest.raises(CircuitError):
            x * x


class TestBuilder:
    def test_public_after_private_rejected(self):
        cs = ConstraintSystemBuilder()
        cs.alloc()
        with pytest.raises(CircuitError):
            cs.alloc_public()

    def test_shape_mode_does_not_call_closures(self):
        cs = ConstraintSystemBuilder()

        def boom():
            raise AssertionError("closure called in shape mode")

        cs.alloc_public(boom)
        cs.alloc(boom)
        system = cs.finalize()
        assert system.num_variables == 3
        assert system.num_public == 1

    def test_finalize_adds_independence_constraints(self):
        cs = ConstraintSystemBuilder()
        cs.alloc_public()
        cs.alloc_public()
        cs.alloc()
        system = cs.finalize()
        # ONE + 공개 입력 2개
        assert system.num_constraints == 3
        assert system.a[0] == {0: FR(1)}
        assert system.b[0] == {}

    def test_value_needs_witness_mode(self):
        cs = ConstraintSystemBuilder()
        with pytest.raises(CircuitError):
            cs.value(cs.one)


class TestBits:
    def test_alloc_bits_and_pack(self):
        cs = ConstraintSystemBuilder(compute_witness=True)
        target = cs.alloc_public(lambda: 0b1011)
        bits = alloc_bits(cs, lambda: 0b1011, 4)
        cs.enforce(pack(bits), cs.one, target)
        system = cs.finalize()
        z = cs.assignment()
        assert [int(cs.value(b)) for b in bits] == [1, 1, 0, 1]
        assert system.is_satisfied(z)

    def test_non_boolean_rejected(self):
        cs = ConstraintSystemBuilder(compute_witness=True)
        bit = cs.alloc(lambda: 2)
        enforce_boolean(cs, bit)
        system = cs.finalize()
        assert not system.is_satisfied(cs.assignment())


class TestRangeCheck:
    @pytest.mark.parametrize("value, bound, ok", [
        (5, 5, True),
        (4, 5, True),
        (6, 5, False),
        ((1 << 127) - 1, 1 << 127, True),
        (1 << 127, (1 << 127) - 1, False),
        (FIELD_MODULUS - 1, FIELD_MODULUS - 1, True),
        (FIELD_MODULUS, FIELD_MODULUS - 1, False),
    ])
    def test_assert_le_constant(self, value, bound, ok):
        cs = ConstraintSystemBuilder(compute_witness=True)
        bits = alloc_bits(cs, lambda: value, 254)
        assert_le_constant(cs, bits, bound)
        system = cs.finalize()
        assert system.is_satisfied(cs.assignment()) == ok

    def test_assert_nonzero(self):
        cs = ConstraintSystemBuilder(compute_witness=True)
        x = cs.alloc(lambda: 7)
        assert_nonzero(cs, x)
        system = cs.finalize()
        assert system.is_satisfied(cs.assignment())

    def test_assert_nonzero_on_zero(self):
        cs = ConstraintSystemBuilder(compute_witness=True)
        x = cs.alloc(lambda: 0)
        with pytest.raises(DivisionByZero):
            assert_nonzero(cs, x)


class TestPointGadgets:
    def test_on_curve(self):
        P = scalar_mul(generator(), 9)
        cs = ConstraintSystemBuilder(compute_witness=True)
        assert_on_curve(cs, _alloc_point(cs, P))
        system = cs.finalize()
        z = cs.assignment()
        assert system.is_satisfied(z)
        # y 조작 → 곡선 밖
        assert not system.is_satisfied(_tampered(z, 2))

    def test_double_matches_native(self):
        P = scalar_mul(generator(), 5)
        cs = ConstraintSystemBuilder(compute_witness=True)
        out = point_double(cs, _alloc_point(cs, P))
        system = cs.finalize()
        assert system.is_satisfied(cs.assignment())
        assert cs.value(out.x) == P.double().x
        assert cs.value(out.y) == P.double().y

    def test_add_matches_native(self):
        P = scalar_mul(generator(), 5)
        Q = scalar_mul(generator(), 12)
        cs = ConstraintSystemBuilder(compute_witness=True)
        out = point_add(cs, _alloc_point(cs, P), _alloc_point(cs, Q))
        system = cs.finalize()
        z = cs.assignment()
        assert system.is_satisfied(z)
        assert cs.value(out.x) == (P + Q).x
        assert cs.value(out.y) == (P + Q).y
        assert system.num_constraints == 4 + 1

    def test_add_with_constant_point(self):
        P = scalar_mul(generator(), 5)
        cs = ConstraintSystemBuilder(compute_witness=True)
        out = point_add(cs, _alloc_point(cs, P), constant_point(generator()))
        cs.finalize()
        assert cs.value(out.x) == (P + generator()).x

    def test_add_equal_x_has_no_witness(self):
        """불완전 덧셈: P + (-P) 는 할당이 존재하지 않는다"""
        P = scalar_mul(generator(), 5)
        cs = ConstraintSystemBuilder(compute_witness=True)
        with pytest.raises(DivisionByZero):
            point_add(cs, _alloc_point(cs, P), _alloc_point(cs, -P))

    @pytest.mark.parametrize("bit", [0, 1])
    def test_conditional_add(self, bit):
        P = scalar_mul(generator(), 5)
        Q = scalar_mul(generator(), 7)
        cs = ConstraintSystemBuilder(compute_witness=True)
        b = cs.alloc(lambda: bit)
        enforce_boolean(cs, b)
        out = conditional_add(cs, _alloc_point(cs, P), _alloc_point(cs, Q), b)
        system = cs.finalize()
        assert system.is_satisfied(cs.assignment())
        expected = P + Q if bit else P
        assert cs.value(out.x) == expected.x
        assert cs.value(out.y) == expected.y
