"""
R1CS (Rank-1 Constraint System)
===============================

제약 하나는 (A_i · z) × (B_i · z) = (C_i · z) 의 형태이다.
z = [1, 공개 입력..., 비공개 변수...] 는 전체 할당(assignment)이다.

**LinearCombination**:
  변수 인덱스 → FR 계수의 희소 사전. 상수는 변수 0 (ONE)의 계수로 표현한다.

**ConstraintSystemBuilder**:
  변수를 할당하고 제약을 기록한다. compute_witness=True 이면 alloc에 넘긴
  클로저를 호출하여 할당 값까지 계산한다 (bellman 스타일). 형태(shape)만
  필요할 때는 클로저를 호출하지 않는다.

  공개 입력은 모든 비공개 변수보다 먼저 할당해야 한다.
  finalize()는 공개 입력(과 ONE)마다 x_i · 0 = 0 제약을 추가하여
  공개 입력 다항식 u_i(x)가 서로 선형 독립이 되도록 한다.

**ConstraintSystem**:
  불변 희소 행렬 A, B, C 와 차원 정보, SHA-256 digest.

사용 예시 (x³ + x + 5 = 35):
    >>> cs = ConstraintSystemBuilder(compute_witness=True)
    >>> out = cs.alloc_public(lambda: 35)
    >>> x = cs.alloc(lambda: 3)
    >>> sym1 = cs.alloc(lambda: 9)
    >>> cs.enforce(x, x, sym1)
    >>> ...
    >>> system = cs.finalize()
    >>> system.is_satisfied(cs.assignment())  # True
"""

import hashlib
import struct

from ecdsa_zkp.config import FIELD_MODULUS
from ecdsa_zkp.exceptions import CircuitError, KeyWitnessMismatchError
from ecdsa_zkp.field import FR


ONE_INDEX = 0


# ─────────────────────────────────────────────────────────────────────
# LinearCombination
# ─────────────────────────────────────────────────────────────────────

def _as_fr(value):
    if isinstance(value, FR):
        return value
    return FR(int(value))


class LinearCombination:
    """Σ coeff_i · z[i]. 계수 0인 항은 보관하지 않는다."""

    __slots__ = ("terms",)

    def __init__(self, terms=None):
        self.terms = {}
        if terms:
            for index, coeff in terms.items():
                coeff = _as_fr(coeff)
                if coeff != 0:
                    self.terms[index] = coeff

    @classmethod
    def variable(cls, index, coeff=1):
        return cls({index: coeff})

    @classmethod
    def constant(cls, value):
        return cls({ONE_INDEX: value})

    @classmethod
    def zero(cls):
        return cls()

    @classmethod
    def coerce(cls, value):
        if isinstance(value, LinearCombination):
            return value
        return cls.constant(value)

    def _combine(self, other, sign):
        other = LinearCombination.coerce(other)
        terms = dict(self.terms)
        for index, coeff in other.terms.items():
            if sign < 0:
                coeff = -coeff
            if index in terms:
                total = terms[index] + coeff
                if total == 0:
                    del terms[index]
                else:
                    terms[index] = total
            else:
                terms[index] = coeff
        result = LinearCombination()
        result.terms = terms
        return result

    def __add__(self, other):
        return self._combine(other, 1)

    __radd__ = __add__

    def __sub__(self, other):
        return self._combine(other, -1)

    def __rsub__(self, other):
        return LinearCombination.coerce(other)._combine(self, -1)

    def __neg__(self):
        result = LinearCombination()
        result.terms = {index: -coeff for index, coeff in self.terms.items()}
        return result

    def __mul__(self, scalar):
        if isinstance(scalar, LinearCombination):
            raise CircuitError("product of two linear combinations needs a constraint")
        scalar = _as_fr(scalar)
        if scalar == 0:
            return LinearCombination()
        result = LinearCombination()
        result.terms = {index: coeff * scalar for index, coeff in self.terms.items()}
        return result

    __rmul__ = __mul__

    def evaluate(self, assignment):
        total = 0
        for index, coeff in self.terms.items():
            total += coeff.n * assignment[index].n
        return FR(total)

    def __repr__(self):
        parts = [f"{int(c)}·z{i}" for i, c in sorted(self.terms.items())]
        return "LC(" + " + ".join(parts) + ")" if parts else "LC(0)"


# ─────────────────────────────────────────────────────────────────────
# ConstraintSystem
# ─────────────────────────────────────────────────────────────────────

def _rows_bytes(rows):
    out = []
    for row in rows:
        out.append(struct.pack(">I", len(row)))
        for index in sorted(row):
            out.append(struct.pack(">I", index))
            out.append(int(row[index]).to_bytes(32, "big"))
    return b"".join(out)


class ConstraintSystem:
    """불변 R1CS.

    Attributes:
        a, b, c: 제약마다 {변수 인덱스: FR 계수} 사전의 리스트
        num_variables: ONE을 포함한 전체 변수 수
        num_public: 공개 입력 수 (인덱스 1..num_public)
        labels: 제약 이름 (디버깅용, 직렬화/digest에 포함되지 않음)
    """

    def __init__(self, a, b, c, num_variables, num_public, labels=None):
        if not (len(a) == len(b) == len(c)):
            raise CircuitError("A, B, C must have the same number of rows")
        if num_public + 1 > num_variables:
            raise CircuitError("more public inputs than variables")
        for matrix in (a, b, c):
            for row in matrix:
                for index in row:
                    if not 0 <= index < num_variables:
                        raise CircuitError(f"variable index {index} out of range")
        self.a = a
        self.b = b
        self.c = c
        self.num_variables = num_variables
        self.num_public = num_public
        self.labels = labels
        self._digest = None

    @property
    def num_constraints(self):
        return len(self.a)

    @property
    def num_private(self):
        return self.num_variables - self.num_public - 1

    def canonical_bytes(self):
        """digest와 r1cs.bin 페이로드가 공유하는 정규 인코딩."""
        header = struct.pack(
            ">III", self.num_variables, self.num_public, self.num_constraints
        )
        return header + _rows_bytes(self.a) + _rows_bytes(self.b) + _rows_bytes(self.c)

    @property
    def digest(self):
        if self._digest is None:
            self._digest = hashlib.sha256(self.canonical_bytes()).digest()
        return self._digest

    def evaluate(self, matrix, assignment):
        """matrix · z (제약마다 FR 하나)."""
        values = []
        for row in matrix:
            total = 0
            for index, coeff in row.items():
                total += coeff.n * assignment[index].n
            values.append(FR(total % FIELD_MODULUS))
        return values

    def check_assignment(self, assignment):
        if len(assignment) != self.num_variables:
            raise KeyWitnessMismatchError(
                f"assignment has {len(assignment)} variables, "
                f"constraint system expects {self.num_variables}"
            )
        if assignment[ONE_INDEX] != 1:
            raise KeyWitnessMismatchError("assignment[0] must be the constant one")

    def first_unsatisfied(self, assignment):
        """만족되지 않는 첫 제약의 인덱스, 모두 만족하면 None."""
        self.check_assignment(assignment)
        a_vals = self.evaluate(self.a, assignment)
        b_vals = self.evaluate(self.b, assignment)
        c_vals = self.evaluate(self.c, assignment)
        for i, (a, b, c) in enumerate(zip(a_vals, b_vals, c_vals)):
            if a * b != c:
                return i
        return None

    def is_satisfied(self, assignment):
        return self.first_unsatisfied(assignment) is None

    def label(self, index):
        if self.labels is None or index >= len(self.labels):
            return None
        return self.labels[index]

    def __eq__(self, other):
        if not isinstance(other, ConstraintSystem):
            return NotImplemented
        return self.digest == other.digest

    def __hash__(self):
        return hash(self.digest)

    def __repr__(self):
        return (
            f"ConstraintSystem(constraints={self.num_constraints}, "
            f"variables={self.num_variables}, public={self.num_public})"
        )


# ─────────────────────────────────────────────────────────────────────
# ConstraintSystemBuilder
# ─────────────────────────────────────────────────────────────────────

class ConstraintSystemBuilder:
    """변수 할당과 제약 기록. finalize()로 ConstraintSystem을 만든다."""

    def __init__(self, compute_witness=False):
        self.compute_witness = compute_witness
        self.num_variables = 1
        self.num_public = 0
        self._private_started = False
        self._values = [FR(1)] if compute_witness else None
        self._a = []
        self._b = []
        self._c = []
        self._labels = []
        self._finalized = False

    @property
    def one(self):
        return LinearCombination.variable(ONE_INDEX)

    def alloc_public(self, value_fn=None):
        if self._private_started:
            raise CircuitError("public inputs must be allocated before private variables")
        self.num_public += 1
        return self._alloc(value_fn)

    def alloc(self, value_fn=None):
        self._private_started = True
        return self._alloc(value_fn)

    def _alloc(self, value_fn):
        if self._finalized:
            raise CircuitError("builder already finalized")
        index = self.num_variables
        self.num_variables += 1
        if self.compute_witness:
            if value_fn is None:
                raise CircuitError(f"variable {index} has no value")
            self._values.append(_as_fr(value_fn()))
        return LinearCombination.variable(index)

    def value(self, lc):
        """현재 할당에서 lc의 값 (witness 모드 전용)."""
        if not self.compute_witness:
            raise CircuitError("values are only available when computing a witness")
        return LinearCombination.coerce(lc).evaluate(self._values)

    def enforce(self, a, b, c, label=None):
        """a · b = c"""
        if self._finalized:
            raise CircuitError("builder already finalized")
        self._a.append(dict(LinearCombination.coerce(a).terms))
        self._b.append(dict(LinearCombination.coerce(b).terms))
        self._c.append(dict(LinearCombination.coerce(c).terms))
        self._labels.append(label)

    def finalize(self):
        if not self._finalized:
            for index in range(self.num_public + 1):
                self._a.append({index: FR(1)})
                self._b.append({})
                self._c.append({})
                self._labels.append(f"public input {index} independence")
            self._finalized = True
        return ConstraintSystem(
            self._a, self._b, self._c,
            self.num_variables, self.num_public, self._labels,
        )

    def assignment(self):
        if not self.compute_witness:
            raise CircuitError("builder was not computing a witness")
        return list(self._values)
