"""
C 호환 호출 경계
================

내보내는 C 인터페이스와 같은 모양:

    typedef struct { char* error_msg; int success; } ProofResult;
    typedef struct { char* msgHash; char* r; char* s; char* pubX; char* pubY; } ProveInput;

    ProofResult RunProofVerification();
    ProofResult RunProofVerificationWithInputs(ProveInput input);
    void FreeProofResult(ProofResult result);

ProofResultC.error_msg 로 넘긴 문자열은 FreeProofResult 가 호출될 때까지
이 모듈이 소유한다. 이미 해제된 문자열을 다시 해제하면 경고 로그만 남긴다.
"""

import ctypes
import logging
import threading

from ecdsa_zkp.exceptions import InvalidEncodingError
from ecdsa_zkp.pipeline import run_proof_verification, run_proof_verification_with_inputs
from ecdsa_zkp.result import ProofResult
from ecdsa_zkp.witness import ProveInput


logger = logging.getLogger(__name__)


class ProofResultC(ctypes.Structure):
    _fields_ = [
        ("error_msg", ctypes.c_void_p),
        ("success", ctypes.c_int),
    ]


class ProveInputC(ctypes.Structure):
    _fields_ = [
        ("msgHash", ctypes.c_char_p),
        ("r", ctypes.c_char_p),
        ("s", ctypes.c_char_p),
        ("pubX", ctypes.c_char_p),
        ("pubY", ctypes.c_char_p),
    ]


class _StringRegistry:
    """C strings handed across the boundary, keyed by address."""

    def __init__(self):
        self._buffers = {}
        self._lock = threading.Lock()

    def allocate(self, text):
        buffer = ctypes.create_string_buffer(text.encode("utf-8"))
        address = ctypes.addressof(buffer)
        with self._lock:
            self._buffers[address] = buffer
        return address

    def free(self, address):
        with self._lock:
            return self._buffers.pop(address, None) is not None

    def __len__(self):
        with self._lock:
            return len(self._buffers)


_strings = _StringRegistry()


def outstanding_strings():
    """Number of error strings not yet freed."""
    return len(_strings)


def error_message(result_c):
    """Read error_msg of a ProofResultC as str (None on success)."""
    if not result_c.error_msg:
        return None
    return ctypes.string_at(result_c.error_msg).decode("utf-8")


def _to_c(result):
    message = result.take_message()
    result_c = ProofResultC()
    result_c.success = 1 if result.success else 0
    result_c.error_msg = _strings.allocate(message) if message is not None else None
    return result_c


def _field(value, name):
    if value is None:
        raise InvalidEncodingError(f"{name}: null pointer")
    try:
        return value.decode("ascii")
    except UnicodeDecodeError:
        raise InvalidEncodingError(f"{name}: invalid hex digits")


def RunProofVerification(artifact_dir=None):
    return _to_c(run_proof_verification(artifact_dir))


def RunProofVerificationWithInputs(input_c, artifact_dir=None):
    try:
        prove_input = ProveInput(
            msg_hash=_field(input_c.msgHash, "msgHash"),
            r=_field(input_c.r, "r"),
            s=_field(input_c.s, "s"),
            pub_x=_field(input_c.pubX, "pubX"),
            pub_y=_field(input_c.pubY, "pubY"),
        )
    except InvalidEncodingError as e:
        logger.warning("request rejected (%s): %s", e.kind.value, e)
        return _to_c(ProofResult.failure(e.kind, str(e)))
    return _to_c(run_proof_verification_with_inputs(prove_input, artifact_dir))


def FreeProofResult(result_c):
    address = result_c.error_msg
    if not address:
        return
    if not _strings.free(address):
        logger.warning("FreeProofResult: unknown or already freed message at %#x", address)
    result_c.error_msg = None
