import pytest

from ecdsa_zkp.config import FIELD_MODULUS, GROUP_ORDER, SCALAR_BITS
from ecdsa_zkp.curve import (
    INFINITY,
    CurvePoint,
    generator,
    hash_to_scalar,
    offset_point,
    offset_target,
    scalar_mul,
)
from ecdsa_zkp.exceptions import InvalidPublicKeyError
from ecdsa_zkp.field import FR


class TestGenerator:
    def test_on_curve(self):
        G = generator()
        assert G.is_on_curve()
        assert int(G.x) == 1

    def test_smaller_root(self):
        y = int(generator().y)
        assert y <= FIELD_MODULUS - y

    def test_group_order(self):
        """n·G = O, cofactor 1"""
        G = generator()
        almost = scalar_mul(G, GROUP_ORDER - 1)
        assert almost == -G
        assert (almost + G).is_infinity
        assert scalar_mul(G, GROUP_ORDER).is_infinity


class TestGroupLaw:
    def test_identity(self):
        G = generator()
        assert G + INFINITY == G
        assert INFINITY + G == G
        assert G - G == INFINITY

    def test_double_matches_add(self):
        G = generator()
        assert G + G == G.double()

    def test_associativity(self):
        G = generator()
        P = scalar_mul(G, 5)
        Q = scalar_mul(G, 11)
        assert (P + Q) + G == P + (Q + G)
        assert (P + Q).is_on_curve()

    def test_ladder_matches_repeated_addition(self):
        G = generator()
        acc = INFINITY
        for k in range(1, 9):
            acc = acc + G
            assert scalar_mul(G, k) == acc

    def test_scalar_distributes(self):
        G = generator()
        a, b = 123456789, 987654321
        assert scalar_mul(G, a) + scalar_mul(G, b) == scalar_mul(G, a + b)
        assert scalar_mul(scalar_mul(G, a), b) == scalar_mul(G, a * b)

    def test_mul_operator(self):
        G = generator()
        assert G * 3 == 3 * G == G + G + G

    def test_zero_scalar(self):
        assert scalar_mul(generator(), 0).is_infinity
        assert scalar_mul(INFINITY, 7).is_infinity

    def test_hashable(self):
        G = generator()
        assert len({G, G + INFINITY, G.double()}) == 2


class TestFromCoordinates:
    def test_valid(self):
        x, y = scalar_mul(generator(), 42).coordinates()
        P = CurvePoint.from_coordinates(x, y)
        assert P == scalar_mul(generator(), 42)

    def test_off_curve(self):
        with pytest.raises(InvalidPublicKeyError):
            CurvePoint.from_coordinates(1, 2)

    def test_out_of_range(self):
        x, y = generator().coordinates()
        with pytest.raises(InvalidPublicKeyError):
            CurvePoint.from_coordinates(x + FIELD_MODULUS, y)

    def test_infinity_has_no_coordinates(self):
        with pytest.raises(ValueError):
            INFINITY.coordinates()


class TestOffsetPoint:
    def test_deterministic(self):
        assert hash_to_scalar(b"seed") == hash_to_scalar(b"seed")
        assert hash_to_scalar(b"seed") != hash_to_scalar(b"other")

    def test_target_is_shifted_offset(self):
        H = offset_point()
        acc = H
        for _ in range(SCALAR_BITS):
            acc = acc.double()
        assert acc == offset_target()

    def test_offset_is_finite(self):
        assert not offset_point().is_infinity
        assert not offset_target().is_infinity
        assert offset_point().x != FR(1)
