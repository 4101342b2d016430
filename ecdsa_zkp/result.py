"""
ProofResult: 호출 경계를 넘는 결과 핸들
========================================

결과는 해제될 때까지 오류 메시지를 소유한다. 해제는 정확히 한 번:
release(), take_message(), free_proof_result(), 또는 ``with`` 블록 종료.
두 번째 해제는 ResultReleasedError.

복사와 pickle은 허용하지 않는다.
"""

import threading

from ecdsa_zkp.exceptions import ErrorKind, ResultReleasedError


class ProofResult:

    __slots__ = ("_success", "_message", "_kind", "_proof_data", "_released", "_lock")

    def __init__(self, success, error_message=None, error_kind=None, proof_data=None):
        if success and (error_message is not None or error_kind is not None):
            raise ValueError("a successful result carries no error")
        if not success and error_kind is None:
            error_kind = ErrorKind.INTERNAL
        self._success = bool(success)
        self._message = error_message
        self._kind = error_kind
        self._proof_data = proof_data
        self._released = False
        self._lock = threading.Lock()

    @classmethod
    def ok(cls, proof_data=None):
        return cls(True, proof_data=proof_data)

    @classmethod
    def failure(cls, kind, message):
        return cls(False, error_message=message, error_kind=kind)

    @property
    def success(self):
        return self._success

    @property
    def error_kind(self):
        return self._kind

    @property
    def proof_data(self):
        """Hex of the 256-byte proof, when one was produced."""
        return self._proof_data

    @property
    def released(self):
        return self._released

    @property
    def error_message(self):
        with self._lock:
            if self._released:
                raise ResultReleasedError("result already released")
            return self._message

    def _take(self):
        with self._lock:
            if self._released:
                raise ResultReleasedError("result already released")
            message, self._message = self._message, None
            self._released = True
            return message

    def release(self):
        self._take()

    def take_message(self):
        """Move the message out; the result is released afterwards."""
        return self._take()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        with self._lock:
            if self._released:
                return False
            self._message = None
            self._released = True
        return False

    def __copy__(self):
        raise TypeError("ProofResult cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("ProofResult cannot be copied")

    def __reduce_ex__(self, protocol):
        raise TypeError("ProofResult cannot be pickled")

    def __bool__(self):
        return self._success

    def __repr__(self):
        if self._success:
            return "ProofResult(success=True)"
        state = "released" if self._released else repr(self._message)
        kind = self._kind.value if self._kind else None
        return f"ProofResult(success=False, kind={kind}, message={state})"


def free_proof_result(result):
    result.release()
