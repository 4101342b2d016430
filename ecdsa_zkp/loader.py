"""
아티팩트 로더와 키 캐시
======================

artifact 디렉터리에서 r1cs.bin / proving_key.bin / verifying_key.bin 을 읽고
서로의 digest 와 차원을 교차 검사한다.

**KeyStore**:
  프로세스 전역 캐시. 디렉터리(realpath)마다 한 번만 로드한다.
  동시에 여러 요청이 와도 디렉터리별 잠금으로 로드는 한 번뿐이며,
  실패한 로드는 캐시하지 않는다.
"""

import json
import logging
import os
import threading
from collections import namedtuple

from ecdsa_zkp.config import (
    PROVING_KEY_FILE,
    R1CS_FILE,
    VERIFYING_KEY_FILE,
    WITNESS_INPUT_FIELDS,
    default_artifact_dir,
)
from ecdsa_zkp.exceptions import (
    ArtifactUnavailableError,
    CorruptArtifactError,
    InvalidEncodingError,
)
from ecdsa_zkp.groth16.verifying import prepare_verifying_key
from ecdsa_zkp.serialization import (
    load_constraint_system,
    load_proving_key,
    load_verifying_key,
)
from ecdsa_zkp.witness import ProveInput


logger = logging.getLogger(__name__)


ArtifactBundle = namedtuple(
    "ArtifactBundle", ["directory", "constraint_system", "proving_key", "verifying_key"]
)


def read_artifact(path):
    """Read a whole artifact file.

    Raises:
        ArtifactUnavailableError: the file is missing or cannot be read
    """
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        raise ArtifactUnavailableError(f"artifact not found: {path}")
    except (PermissionError, IsADirectoryError) as e:
        raise ArtifactUnavailableError(f"artifact not readable: {path} ({e.strerror})")
    except OSError as e:
        raise ArtifactUnavailableError(f"failed to read {path}: {e}")


def load_witness_input(path):
    """Parse witness_input.json into a ProveInput.

    Raises:
        ArtifactUnavailableError: the file is missing
        CorruptArtifactError: the file is not a JSON object
        InvalidEncodingError: a field is missing or not a string
    """
    raw = read_artifact(path)
    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptArtifactError(f"{os.path.basename(path)}: invalid JSON ({e})")
    if not isinstance(document, dict):
        raise CorruptArtifactError(f"{os.path.basename(path)}: expected a JSON object")
    return prove_input_from_mapping(document)


def prove_input_from_mapping(document):
    fields = {}
    for name in WITNESS_INPUT_FIELDS:
        if name not in document:
            raise InvalidEncodingError(f"missing field {name!r}")
        value = document[name]
        if not isinstance(value, str):
            raise InvalidEncodingError(f"field {name!r} must be a hex string")
        fields[name] = value
    return ProveInput(
        msg_hash=fields["msgHash"],
        r=fields["r"],
        s=fields["s"],
        pub_x=fields["pubX"],
        pub_y=fields["pubY"],
    )


def load_artifacts(directory):
    """Read, parse and cross-check the three binary artifacts in directory."""
    cs = load_constraint_system(read_artifact(os.path.join(directory, R1CS_FILE)))
    pk = load_proving_key(read_artifact(os.path.join(directory, PROVING_KEY_FILE)))
    vk = load_verifying_key(read_artifact(os.path.join(directory, VERIFYING_KEY_FILE)))

    if pk.digest != cs.digest:
        raise CorruptArtifactError("proving key was generated for a different r1cs")
    if vk.digest != cs.digest:
        raise CorruptArtifactError("verifying key was generated for a different r1cs")
    if pk.num_variables != cs.num_variables or pk.num_public != cs.num_public:
        raise CorruptArtifactError("proving key dimensions do not match the r1cs")
    if pk.domain_size < cs.num_constraints:
        raise CorruptArtifactError("proving key domain is smaller than the r1cs")
    if len(vk.ic) != cs.num_public + 1:
        raise CorruptArtifactError(
            f"verifying key has {len(vk.ic)} ic entries, r1cs has {cs.num_public} public inputs"
        )
    logger.info(
        "loaded artifacts from %s: %d constraints, %d variables",
        directory, cs.num_constraints, cs.num_variables,
    )
    return ArtifactBundle(directory, cs, pk, prepare_verifying_key(vk))


class KeyStore:
    """Caches one ArtifactBundle per directory.

    The first load of a directory runs under that directory's lock, so
    concurrent callers read the files once. Failed loads are not cached.
    """

    def __init__(self, loader=load_artifacts):
        self._loader = loader
        self._bundles = {}
        self._locks = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key):
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def get(self, directory=None):
        key = os.path.realpath(directory or default_artifact_dir())
        bundle = self._bundles.get(key)
        if bundle is not None:
            return bundle
        with self._lock_for(key):
            bundle = self._bundles.get(key)
            if bundle is None:
                bundle = self._loader(key)
                self._bundles[key] = bundle
            return bundle

    def __contains__(self, directory):
        return os.path.realpath(directory) in self._bundles

    def clear(self):
        with self._locks_guard:
            self._bundles.clear()
            self._locks.clear()


default_store = KeyStore()
