"""
ECDSA-in-Groth16 설정 상수
==========================

곡선 선택, 비트 폭, 아티팩트 파일 이름, 바이너리 포맷 식별자를 한 곳에 모은다.

**곡선 선택**:
  - 증명 시스템: Groth16 over BN254 (py_ecc.optimized_bn128)
  - 서명 곡선: Grumpkin, y² = x³ - 17 over BN254 스칼라 필드
    Grumpkin의 기저 필드가 곧 R1CS 제약 필드이므로 좌표 연산이 회로 안에서
    native 필드 연산이 된다. 위수 n은 BN254의 기저 필드 소수(field_modulus)이다.

  p (Grumpkin 기저 필드) = bn128.curve_order   ≈ 2^253.6
  n (Grumpkin 위수)       = bn128.field_modulus ≈ 2^253.6,  p < n
"""

import os

from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# 곡선 파라미터
# ─────────────────────────────────────────────────────────────────────

# R1CS 제약 필드 = Grumpkin 기저 필드
FIELD_MODULUS = bn128.curve_order

# Grumpkin 그룹 위수 (소수, cofactor 1)
GROUP_ORDER = bn128.field_modulus

# y² = x³ + CURVE_B
CURVE_B = -17

# Grumpkin 생성자의 x좌표 (y = sqrt(-16)의 작은 쪽 근)
GENERATOR_X = 1

# FR* 의 곱셈 생성자 (단위근 도출용)
MULTIPLICATIVE_GENERATOR = 5

# p - 1 = 2^28 · m
TWO_ADICITY = 28

# 스칼라 비트 수와 limb 분할
SCALAR_BITS = 254
LIMB_BITS = 127

# 회로 내 double-and-add의 시작 오프셋 점 H를 위한 시드
OFFSET_SEED = b"ecdsa-zkp/grumpkin/offset-point/v1"


# ─────────────────────────────────────────────────────────────────────
# 아티팩트
# ─────────────────────────────────────────────────────────────────────

R1CS_FILE = "r1cs.bin"
PROVING_KEY_FILE = "proving_key.bin"
VERIFYING_KEY_FILE = "verifying_key.bin"
WITNESS_INPUT_FILE = "witness_input.json"

WITNESS_INPUT_FIELDS = ("msgHash", "r", "s", "pubX", "pubY")

ARTIFACT_DIR_ENV = "ECDSA_ZKP_ARTIFACT_DIR"


def default_artifact_dir():
    """ECDSA_ZKP_ARTIFACT_DIR 환경변수 또는 현재 작업 디렉터리."""
    return os.environ.get(ARTIFACT_DIR_ENV) or os.getcwd()


# ─────────────────────────────────────────────────────────────────────
# 바이너리 포맷
# ─────────────────────────────────────────────────────────────────────

FORMAT_VERSION = 1

# 1 = BN254 pairing curve + Grumpkin embedded curve
CURVE_ID = 1

MAGIC_R1CS = b"ZR1C"
MAGIC_PROVING_KEY = b"ZPKY"
MAGIC_VERIFYING_KEY = b"ZVKY"


# ─────────────────────────────────────────────────────────────────────
# 성능 파라미터
# ─────────────────────────────────────────────────────────────────────

# setup의 fixed-base 곱셈 윈도우 폭 (비트)
FIXED_BASE_WINDOW = 8

# Pippenger MSM 윈도우 폭 상한
MSM_MAX_WINDOW = 16
