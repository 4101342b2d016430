"""
바이너리 직렬화
===============

constraint system, Groth16 키, 증명의 바이너리 인코딩.

아티팩트 파일 공통 헤더:

    magic     4 bytes   b"ZR1C" / b"ZPKY" / b"ZVKY"
    version   u16
    curve id  u16
    digest    32 bytes  constraint system 정규 인코딩의 sha256
    length    u64       payload 길이
    payload

필드 원소는 32바이트 big-endian 정수.
  - G1 점: (x, y), 64 bytes
  - G2 점: (x.c0, x.c1, y.c0, y.c1), 128 bytes
  - 무한원점: 전부 0
증명은 A || B || C 256 bytes, 헤더 없음.

아티팩트 결함은 Corrupt, 증명 결함은 MalformedProof.
"""

import struct

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    b,
    b2,
    curve_order,
    field_modulus,
    is_inf,
    is_on_curve,
    multiply,
    normalize,
)

from ecdsa_zkp.config import (
    CURVE_ID,
    FIELD_MODULUS,
    FORMAT_VERSION,
    MAGIC_PROVING_KEY,
    MAGIC_R1CS,
    MAGIC_VERIFYING_KEY,
)
from ecdsa_zkp.exceptions import CorruptArtifactError, MalformedProofError
from ecdsa_zkp.field import FR
from ecdsa_zkp.groth16.bn254 import Z1, Z2
from ecdsa_zkp.groth16.keys import Proof, ProvingKey, VerifyingKey
from ecdsa_zkp.r1cs import ConstraintSystem


HEADER = struct.Struct(">4sHH32sQ")

G1_SIZE = 64
G2_SIZE = 128
PROOF_SIZE = 2 * G1_SIZE + G2_SIZE


# ─────────────────────────────────────────────────────────────────────
# Header
# ─────────────────────────────────────────────────────────────────────

def pack_artifact(magic, digest, payload):
    return HEADER.pack(magic, FORMAT_VERSION, CURVE_ID, digest, len(payload)) + payload


def unpack_artifact(data, magic, what):
    """Returns (digest, payload) or raises CorruptArtifactError."""
    if len(data) < HEADER.size:
        raise CorruptArtifactError(f"{what}: truncated header ({len(data)} bytes)")
    found_magic, version, curve_id, digest, length = HEADER.unpack_from(data)
    if found_magic != magic:
        raise CorruptArtifactError(f"{what}: bad magic {found_magic!r}")
    if version != FORMAT_VERSION:
        raise CorruptArtifactError(f"{what}: unsupported format version {version}")
    if curve_id != CURVE_ID:
        raise CorruptArtifactError(f"{what}: unsupported curve id {curve_id}")
    payload = data[HEADER.size:]
    if len(payload) != length:
        raise CorruptArtifactError(
            f"{what}: payload is {len(payload)} bytes, header says {length}"
        )
    return digest, payload


class Reader:
    """Sequential reader over a payload; every short read is a format error."""

    def __init__(self, data, what, error=CorruptArtifactError):
        self.data = data
        self.offset = 0
        self.what = what
        self.error = error

    def take(self, size):
        end = self.offset + size
        if end > len(self.data):
            raise self.error(f"{self.what}: unexpected end of data")
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u32(self):
        return struct.unpack(">I", self.take(4))[0]

    def scalar(self):
        value = int.from_bytes(self.take(32), "big")
        if value >= FIELD_MODULUS:
            raise self.error(f"{self.what}: field element out of range")
        return FR(value)

    def g1(self):
        return decode_g1(self.take(G1_SIZE), self.what, self.error)

    def g2(self, subgroup_check=False):
        return decode_g2(self.take(G2_SIZE), self.what, self.error, subgroup_check)

    def finish(self):
        if self.offset != len(self.data):
            raise self.error(f"{self.what}: {len(self.data) - self.offset} trailing bytes")


# ─────────────────────────────────────────────────────────────────────
# Points
# ─────────────────────────────────────────────────────────────────────

def _int32(value):
    return (int(value) % field_modulus).to_bytes(32, "big")


def encode_g1(point):
    if is_inf(point):
        return bytes(G1_SIZE)
    x, y = normalize(point)
    return _int32(x.n) + _int32(y.n)


def encode_g2(point):
    if is_inf(point):
        return bytes(G2_SIZE)
    x, y = normalize(point)
    return b"".join(_int32(c) for c in (*x.coeffs, *y.coeffs))


def _coordinates(data, count, what, error):
    values = [int.from_bytes(data[i * 32:(i + 1) * 32], "big") for i in range(count)]
    if any(v >= field_modulus for v in values):
        raise error(f"{what}: coordinate out of range")
    return values


def decode_g1(data, what="G1 point", error=CorruptArtifactError):
    if len(data) != G1_SIZE:
        raise error(f"{what}: G1 point must be {G1_SIZE} bytes")
    x, y = _coordinates(data, 2, what, error)
    if x == 0 and y == 0:
        return Z1
    point = (FQ(x), FQ(y), FQ.one())
    if not is_on_curve(point, b):
        raise error(f"{what}: G1 point is not on the curve")
    return point


def decode_g2(data, what="G2 point", error=CorruptArtifactError, subgroup_check=False):
    if len(data) != G2_SIZE:
        raise error(f"{what}: G2 point must be {G2_SIZE} bytes")
    x0, x1, y0, y1 = _coordinates(data, 4, what, error)
    if x0 == x1 == y0 == y1 == 0:
        return Z2
    point = (FQ2([x0, x1]), FQ2([y0, y1]), FQ2.one())
    if not is_on_curve(point, b2):
        raise error(f"{what}: G2 point is not on the twisted curve")
    if subgroup_check and not is_inf(multiply(point, curve_order)):
        raise error(f"{what}: G2 point is not in the prime-order subgroup")
    return point


# ─────────────────────────────────────────────────────────────────────
# Constraint system
# ─────────────────────────────────────────────────────────────────────

def dump_constraint_system(cs):
    return pack_artifact(MAGIC_R1CS, cs.digest, cs.canonical_bytes())


def _read_rows(reader, count, num_variables):
    rows = []
    for _ in range(count):
        terms = reader.u32()
        if terms > num_variables:
            raise CorruptArtifactError(f"{reader.what}: row has {terms} terms")
        row = {}
        previous = -1
        for _ in range(terms):
            index = reader.u32()
            if index <= previous or index >= num_variables:
                raise CorruptArtifactError(f"{reader.what}: bad variable index {index}")
            coeff = reader.scalar()
            if coeff == 0:
                raise CorruptArtifactError(f"{reader.what}: zero coefficient stored")
            row[index] = coeff
            previous = index
        rows.append(row)
    return rows


def load_constraint_system(data):
    digest, payload = unpack_artifact(data, MAGIC_R1CS, "r1cs")
    reader = Reader(payload, "r1cs")
    num_variables = reader.u32()
    num_public = reader.u32()
    num_constraints = reader.u32()
    if num_variables < 1 or num_public + 1 > num_variables:
        raise CorruptArtifactError("r1cs: inconsistent variable counts")
    a = _read_rows(reader, num_constraints, num_variables)
    b_rows = _read_rows(reader, num_constraints, num_variables)
    c = _read_rows(reader, num_constraints, num_variables)
    reader.finish()
    cs = ConstraintSystem(a, b_rows, c, num_variables, num_public)
    if cs.digest != digest:
        raise CorruptArtifactError("r1cs: digest does not match contents")
    return cs


# ─────────────────────────────────────────────────────────────────────
# Keys
# ─────────────────────────────────────────────────────────────────────

def _g1_list(points):
    return struct.pack(">I", len(points)) + b"".join(encode_g1(p) for p in points)


def _g2_list(points):
    return struct.pack(">I", len(points)) + b"".join(encode_g2(p) for p in points)


def dump_proving_key(pk):
    payload = b"".join([
        struct.pack(">III", pk.num_variables, pk.num_public, pk.domain_size),
        encode_g1(pk.alpha_g1),
        encode_g1(pk.beta_g1),
        encode_g2(pk.beta_g2),
        encode_g1(pk.delta_g1),
        encode_g2(pk.delta_g2),
        _g1_list(pk.a_query),
        _g1_list(pk.b_g1_query),
        _g2_list(pk.b_g2_query),
        _g1_list(pk.h_query),
        _g1_list(pk.l_query),
    ])
    return pack_artifact(MAGIC_PROVING_KEY, pk.digest, payload)


def _read_list(reader, read_point, expected, name):
    count = reader.u32()
    if count != expected:
        raise CorruptArtifactError(f"{reader.what}: {name} has {count} entries, expected {expected}")
    return tuple(read_point() for _ in range(count))


def load_proving_key(data):
    digest, payload = unpack_artifact(data, MAGIC_PROVING_KEY, "proving key")
    reader = Reader(payload, "proving key")
    num_variables, num_public, domain_size = (reader.u32(), reader.u32(), reader.u32())
    if num_public + 1 > num_variables:
        raise CorruptArtifactError("proving key: inconsistent variable counts")
    if domain_size < 2 or domain_size & (domain_size - 1):
        raise CorruptArtifactError(f"proving key: bad domain size {domain_size}")
    num_private = num_variables - num_public - 1
    alpha_g1 = reader.g1()
    beta_g1 = reader.g1()
    beta_g2 = reader.g2()
    delta_g1 = reader.g1()
    delta_g2 = reader.g2()
    a_query = _read_list(reader, reader.g1, num_variables, "a_query")
    b_g1_query = _read_list(reader, reader.g1, num_variables, "b_g1_query")
    b_g2_query = _read_list(reader, reader.g2, num_variables, "b_g2_query")
    h_query = _read_list(reader, reader.g1, domain_size - 1, "h_query")
    l_query = _read_list(reader, reader.g1, num_private, "l_query")
    reader.finish()
    return ProvingKey(
        num_variables=num_variables,
        num_public=num_public,
        domain_size=domain_size,
        digest=digest,
        alpha_g1=alpha_g1,
        beta_g1=beta_g1,
        beta_g2=beta_g2,
        delta_g1=delta_g1,
        delta_g2=delta_g2,
        a_query=a_query,
        b_g1_query=b_g1_query,
        b_g2_query=b_g2_query,
        h_query=h_query,
        l_query=l_query,
    )


def dump_verifying_key(vk):
    payload = b"".join([
        struct.pack(">I", vk.num_public),
        encode_g1(vk.alpha_g1),
        encode_g2(vk.beta_g2),
        encode_g2(vk.gamma_g2),
        encode_g2(vk.delta_g2),
        _g1_list(vk.ic),
    ])
    return pack_artifact(MAGIC_VERIFYING_KEY, vk.digest, payload)


def load_verifying_key(data):
    digest, payload = unpack_artifact(data, MAGIC_VERIFYING_KEY, "verifying key")
    reader = Reader(payload, "verifying key")
    num_public = reader.u32()
    alpha_g1 = reader.g1()
    beta_g2 = reader.g2(subgroup_check=True)
    gamma_g2 = reader.g2(subgroup_check=True)
    delta_g2 = reader.g2(subgroup_check=True)
    ic = _read_list(reader, reader.g1, num_public + 1, "ic")
    reader.finish()
    return VerifyingKey(
        num_public=num_public,
        digest=digest,
        alpha_g1=alpha_g1,
        beta_g2=beta_g2,
        gamma_g2=gamma_g2,
        delta_g2=delta_g2,
        ic=ic,
    )


# ─────────────────────────────────────────────────────────────────────
# Proof
# ─────────────────────────────────────────────────────────────────────

def encode_proof(proof):
    return encode_g1(proof.a) + encode_g2(proof.b) + encode_g1(proof.c)


def decode_proof(data):
    """256 bytes → Proof.

    Raises:
        MalformedProofError: wrong size, coordinates out of range, points off
            the curve, or B outside the prime-order subgroup
    """
    if not isinstance(data, (bytes, bytearray)) or len(data) != PROOF_SIZE:
        size = len(data) if isinstance(data, (bytes, bytearray)) else type(data).__name__
        raise MalformedProofError(f"proof must be {PROOF_SIZE} bytes, got {size}")
    reader = Reader(bytes(data), "proof", MalformedProofError)
    a = reader.g1()
    b_point = reader.g2(subgroup_check=True)
    c = reader.g1()
    reader.finish()
    return Proof(a=a, b=b_point, c=c)
