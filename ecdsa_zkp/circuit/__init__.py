from ecdsa_zkp.circuit.ecdsa import (
    NUM_PUBLIC_INPUTS,
    EcdsaAssignment,
    compute_assignment,
    ecdsa_constraint_system,
    public_inputs,
    synthesize,
)

__all__ = [
    "NUM_PUBLIC_INPUTS",
    "EcdsaAssignment",
    "compute_assignment",
    "ecdsa_constraint_system",
    "public_inputs",
    "synthesize",
]
