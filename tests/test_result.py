import copy
import pickle
import threading

import pytest

from ecdsa_zkp.exceptions import ErrorKind, ResultReleasedError
from ecdsa_zkp.result import ProofResult, free_proof_result


# ── 생성 ──
class TestConstruction:
    def test_ok(self):
        result = ProofResult.ok(proof_data="ab" * 256)
        assert result.success
        assert bool(result)
        assert result.error_kind is None
        assert result.error_message is None
        assert result.proof_data == "ab" * 256

    def test_failure(self):
        result = ProofResult.failure(ErrorKind.CORRUPT, "bad magic")
        assert not result.success
        assert not bool(result)
        assert result.error_kind is ErrorKind.CORRUPT
        assert result.error_message == "bad magic"
        assert result.proof_data is None

    def test_failure_without_kind_is_internal(self):
        assert ProofResult(False, "boom").error_kind is ErrorKind.INTERNAL

    def test_success_with_error_rejected(self):
        with pytest.raises(ValueError):
            ProofResult(True, error_message="nope")

    def test_repr(self):
        result = ProofResult.failure(ErrorKind.INVALID_ENCODING, "r: odd-length hex string")
        assert "InvalidEncoding" in repr(result)
        result.release()
        assert "released" in repr(result)
        assert repr(ProofResult.ok()) == "ProofResult(success=True)"


# ── 해제 ──
class TestRelease:
    def test_release_once(self):
        result = ProofResult.failure(ErrorKind.INTERNAL, "x")
        assert not result.released
        result.release()
        assert result.released

    def test_double_release_raises(self):
        result = ProofResult.failure(ErrorKind.INTERNAL, "x")
        free_proof_result(result)
        with pytest.raises(ResultReleasedError):
            free_proof_result(result)

    def test_message_after_release_raises(self):
        result = ProofResult.failure(ErrorKind.INTERNAL, "x")
        result.release()
        with pytest.raises(ResultReleasedError):
            result.error_message

    def test_take_message(self):
        result = ProofResult.failure(ErrorKind.CORRUPT, "bad")
        assert result.take_message() == "bad"
        assert result.released
        with pytest.raises(ResultReleasedError):
            result.take_message()

    def test_success_releases_too(self):
        result = ProofResult.ok()
        result.release()
        with pytest.raises(ResultReleasedError):
            result.release()
        # 해제 후에도 success/kind 는 읽을 수 있다
        assert result.success

    def test_context_manager(self):
        with ProofResult.failure(ErrorKind.CORRUPT, "bad") as result:
            assert result.error_message == "bad"
        assert result.released

    def test_context_manager_after_explicit_release(self):
        with ProofResult.failure(ErrorKind.CORRUPT, "bad") as result:
            result.release()
        assert result.released

    def test_concurrent_release_happens_once(self):
        result = ProofResult.failure(ErrorKind.INTERNAL, "x")
        outcomes = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                result.release()
                outcomes.append("released")
            except ResultReleasedError:
                outcomes.append("refused")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert outcomes.count("released") == 1
        assert outcomes.count("refused") == 7


# ── 복제 금지 ──
class TestNotDuplicable:
    def test_copy(self):
        result = ProofResult.failure(ErrorKind.INTERNAL, "x")
        with pytest.raises(TypeError):
            copy.copy(result)
        with pytest.raises(TypeError):
            copy.deepcopy(result)

    def test_pickle(self):
        with pytest.raises(TypeError):
            pickle.dumps(ProofResult.ok())
