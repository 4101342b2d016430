from ecdsa_zkp.groth16.keys import PreparedVerifyingKey, Proof, ProvingKey, VerifyingKey
from ecdsa_zkp.groth16.proving import prove
from ecdsa_zkp.groth16.setup import generate_keypair
from ecdsa_zkp.groth16.verifying import prepare_verifying_key, verify

__all__ = [
    "PreparedVerifyingKey",
    "Proof",
    "ProvingKey",
    "VerifyingKey",
    "generate_keypair",
    "prepare_verifying_key",
    "prove",
    "verify",
]
