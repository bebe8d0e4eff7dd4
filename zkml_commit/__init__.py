"""
Hiding Multilinear Polynomial Commitments
=========================================

A zero-knowledge polynomial commitment scheme for multilinear polynomials: a
plain multilinear commitment is combined with a commitment to a random sparse
mask polynomial, so commitments and openings reveal nothing beyond the opened
value. A verifier wrapper integrates the same masking into a sumcheck protocol.

Built on charm-crypto Type-3 pairing groups.

Modules:
--------
- groups: Pairing backend and curve initialization
- config: Environment-driven defaults
- polynomial: Multilinear and mask polynomials, mask generation
- multilinear_pc: Base (non-hiding) multilinear commitment
- mask_pc: Commitment to single-variable-term mask polynomials
- zkml: Hiding commitment (setup, trim, commit, open, check)
- sumcheck: Zero-knowledge sumcheck prover and verifier wrapper
- transcript: Fiat-Shamir transcript
- encoding: Canonical byte encodings
- utils: MSM, pairing products, small helpers

Usage:
------
    import random
    from zkml_commit import setup, zkml
    from zkml_commit.polynomial import DenseMultilinearExtension

    backend = setup('BN254')
    rng = random.Random(0)
    params = zkml.setup(backend, num_vars=4, hiding_bound=2, rng=rng)
    ck, vk = zkml.trim(params, 4, 2)

    f = DenseMultilinearExtension(4, range(1, 17), backend.order)
    commitment, mask = zkml.commit(ck, f, 2, rng=rng)
    proof, value = zkml.open(ck, f, mask, [1, 1, 1, 1])
    assert zkml.check(vk, commitment, [1, 1, 1, 1], value, proof)
"""

__version__ = "0.1.0"

from .groups import PairingBackend, setup
from .polynomial import DenseMultilinearExtension, MaskPolynomial, generate_mask_polynomial
from .sumcheck import RejectReason, SumcheckVerdict, zk_sumcheck_verifier_wrapper
from .transcript import Transcript

__all__ = [
    'PairingBackend', 'setup',
    'DenseMultilinearExtension', 'MaskPolynomial', 'generate_mask_polynomial',
    'RejectReason', 'SumcheckVerdict', 'zk_sumcheck_verifier_wrapper',
    'Transcript',
]
