"""
Zero-Knowledge Sumcheck
=======================

Sumcheck over a list of products of multilinear polynomials,

    f(X) = Σ_k c_k · ∏_j f_{k,j}(X),

made zero-knowledge by masking with a random polynomial g that sums to zero on
the hypercube. After the prover binds ``g_commit`` into the transcript, the
verifier draws r1 and the rounds run on h = f + r1·g. Because Σ g = 0 the
starting claim is still Σ f. At the end, the opening of ``g_commit`` at the
challenge point supplies g_value, and the claim about f alone is
h(point) - r1·g_value.

Transcript sequence (prover and verifier):
------------------------------------------
1. append_serializable(b"g_commit", g_commit)
2. r1 = get_scalar_challenge(b"r1")
3. per round: append_scalars(b"prover_msg", evals); r_i = get_scalar_challenge(b"round_challenge")

Round messages are the evaluations of the round polynomial at 0, 1, ..., d,
where d = poly_info['max_multiplicands'].

Proof layout (dict):
--------------------
- 'g_commit':       G1 commitment to the mask (mask commitment scheme)
- 'sumcheck_proof': list of round messages, each a list of d+1 ZR
- 'poly_info':      {'max_multiplicands': d, 'num_variables': n}
- 'g_proof':        mask opening proof at the challenge point
- 'g_value':        mask evaluation at the challenge point
"""

import logging
from enum import Enum
from typing import List, Sequence, Tuple

from . import mask_pc
from .errors import DimensionMismatch, SumcheckError
from .groups import PairingBackend
from .polynomial import DenseMultilinearExtension, MaskPolynomial, generate_mask_polynomial
from .transcript import Transcript

logger = logging.getLogger(__name__)

Products = Sequence[Tuple[object, Sequence[DenseMultilinearExtension]]]


class RejectReason(Enum):
    ROUND_MISMATCH = 'round_mismatch'
    MASK_OPENING_FAILED = 'mask_opening_failed'


class SumcheckVerdict:
    """
    Outcome of verifying a ZK sumcheck proof.

    Either accepted with a subclaim ``{'point', 'expected_evaluation'}`` about
    the unmasked polynomial, or rejected with a ``RejectReason``.
    """

    def __init__(self, subclaim: dict = None, reason: RejectReason = None, detail: str = ""):
        self.subclaim = subclaim
        self.reason = reason
        self.detail = detail

    @classmethod
    def accept(cls, subclaim: dict) -> 'SumcheckVerdict':
        return cls(subclaim=subclaim)

    @classmethod
    def reject(cls, reason: RejectReason, detail: str = "") -> 'SumcheckVerdict':
        return cls(reason=reason, detail=detail)

    @property
    def accepted(self) -> bool:
        return self.reason is None

    def __bool__(self):
        return self.accepted

    def __repr__(self):
        if self.accepted:
            return "SumcheckVerdict(accepted)"
        return f"SumcheckVerdict(rejected: {self.reason.value}, {self.detail!r})"


def interpolate_uni_poly(evals: Sequence[int], x: int, modulus: int) -> int:
    """
    Evaluate at ``x`` the polynomial of degree < len(evals) taking value
    ``evals[i]`` at ``i``.
    """
    p = modulus
    n = len(evals)
    x %= p
    if x < n:
        return evals[x] % p
    total = 0
    for i in range(n):
        num, den = 1, 1
        for j in range(n):
            if j == i:
                continue
            num = num * (x - j) % p
            den = den * (i - j) % p
        total += evals[i] * num * pow(den, -1, p)
    return total % p


def _eval_univariate(coeffs: Sequence[int], x: int, modulus: int) -> int:
    acc = 0
    for c in reversed(coeffs):
        acc = (acc * x + c) % modulus
    return acc


def _poly_degree(products: Products) -> int:
    return max(len(mles) for _, mles in products)


def _num_variables(products: Products) -> int:
    if not products:
        raise DimensionMismatch("sumcheck needs at least one product")
    sizes = {mle.num_vars for _, mles in products for mle in mles}
    if any(len(mles) == 0 for _, mles in products):
        raise DimensionMismatch("empty product in sumcheck polynomial")
    if len(sizes) != 1:
        raise DimensionMismatch(f"products mix polynomials with {sorted(sizes)} variables")
    return sizes.pop()


def evaluate_products(products: Products, point: Sequence, modulus: int) -> int:
    total = 0
    for coeff, mles in products:
        term = int(coeff)
        for mle in mles:
            term = term * mle.evaluate(point) % modulus
        total += term
    return total % modulus


def sum_over_hypercube(products: Products, modulus: int) -> int:
    total = 0
    for coeff, mles in products:
        prod = mles[0].evaluations
        for mle in mles[1:]:
            prod = (prod * mle.evaluations) % modulus
        total += int(coeff) * int(sum(prod))
    return total % modulus


def _prove_rounds(backend: PairingBackend, transcript: Transcript, products: Products,
                  degree: int, mask: MaskPolynomial = None, rho: int = 0) -> Tuple[list, list]:
    """
    Run the prover side of every round on f + rho·mask.

    Returns the round messages (lists of ZR) and the challenge point (ints).
    """
    p = backend.order
    n = _num_variables(products)
    tables = [(int(c) % p, [mle.evaluations for mle in mles]) for c, mles in products]

    if mask is not None:
        u = [mask.univariate(j) for j in range(n)]
        ones = [sum(coeffs) % p for coeffs in u]
        # suffix[i] = Σ_{j >= i} u_j(1)
        suffix = [0] * (n + 1)
        for j in reversed(range(n)):
            suffix[j] = (suffix[j + 1] + ones[j]) % p
        fixed = mask.constant

    messages, point = [], []
    for i in range(n):
        m = n - i - 1
        evals = []
        for t in range(degree + 1):
            s = 0
            for coeff, tabs in tables:
                prod = None
                for table in tabs:
                    at_t = (table[0::2] * (1 - t) + table[1::2] * t) % p
                    prod = at_t if prod is None else (prod * at_t) % p
                s += coeff * int(sum(prod))
            if mask is not None:
                # Σ_b g(r_0..r_{i-1}, t, b) over b ∈ {0,1}^m
                g_sum = pow(2, m, p) * (fixed + _eval_univariate(u[i], t, p))
                if m >= 1:
                    g_sum += pow(2, m - 1, p) * suffix[i + 1]
                s += rho * g_sum
            evals.append(s % p)

        transcript.append_scalars(b"prover_msg", evals)
        r = backend.to_int(transcript.get_scalar_challenge(b"round_challenge"))
        point.append(r)
        messages.append([backend.scalar(e) for e in evals])

        tables = [(coeff, [(table[0::2] * (1 - r) + table[1::2] * r) % p for table in tabs])
                  for coeff, tabs in tables]
        if mask is not None:
            fixed = (fixed + _eval_univariate(u[i], r, p)) % p
    return messages, point


def prove(backend: PairingBackend, transcript: Transcript, products: Products) -> tuple:
    """
    Plain (non-ZK) sumcheck prover.

    Returns
    -------
    (proof, poly_info) : tuple
    """
    degree = _poly_degree(products)
    messages, _ = _prove_rounds(backend, transcript, products, degree)
    poly_info = {'max_multiplicands': degree, 'num_variables': _num_variables(products)}
    return messages, poly_info


def _verify_rounds(backend: PairingBackend, transcript: Transcript, poly_info: dict,
                   claimed_sum, proof: List[list]) -> Tuple[list, int]:
    p = backend.order
    n = poly_info['num_variables']
    degree = poly_info['max_multiplicands']
    if degree < 1:
        raise SumcheckError(f"degree bound must be at least 1, got {degree}")
    if len(proof) != n:
        raise SumcheckError(f"proof has {len(proof)} rounds, expected {n}")

    expected = backend.to_int(claimed_sum)
    point = []
    for i, message in enumerate(proof):
        if len(message) != degree + 1:
            raise SumcheckError(
                f"round {i} message has {len(message)} evaluations, degree bound allows {degree + 1}")
        evals = [backend.to_int(e) for e in message]
        if (evals[0] + evals[1]) % p != expected:
            raise SumcheckError(f"round {i}: prover message is not consistent with the claim")
        transcript.append_scalars(b"prover_msg", evals)
        r = transcript.get_scalar_challenge(b"round_challenge")
        point.append(r)
        expected = interpolate_uni_poly(evals, backend.to_int(r), p)
    return point, expected


def verify(backend: PairingBackend, transcript: Transcript, poly_info: dict,
           claimed_sum, proof: List[list]) -> dict:
    """
    Plain sumcheck verifier.

    Returns the subclaim ``{'point', 'expected_evaluation'}``; raises
    ``SumcheckError`` on an inconsistent round.
    """
    point, expected = _verify_rounds(backend, transcript, poly_info, claimed_sum, proof)
    return {'point': point, 'expected_evaluation': backend.scalar(expected)}


def verify_as_subprotocol_zk(backend: PairingBackend, transcript: Transcript, poly_info: dict,
                             claimed_sum, proof: List[list], challenge, g_value) -> dict:
    """
    Round checks for the masked polynomial f + challenge·g.

    The returned subclaim's ``expected_evaluation`` is the claim about f:
    the final round value minus ``challenge · g_value``.
    """
    point, expected = _verify_rounds(backend, transcript, poly_info, claimed_sum, proof)
    unmasked = (expected - backend.to_int(challenge) * backend.to_int(g_value)) % backend.order
    return {'point': point, 'expected_evaluation': backend.scalar(unmasked)}


def prepare_mask(mask_ck: dict, num_variables: int, degree: int, rng=None) -> tuple:
    """
    Fresh sum-to-zero mask and its commitment, ``(mask, g_commit)``.
    """
    backend = mask_ck['backend']
    mask = generate_mask_polynomial(num_variables, degree, True, backend.order, rng)
    return mask, mask_pc.commit(mask_ck, mask)


def zk_sumcheck_prove(mask_ck: dict, products: Products, transcript: Transcript,
                      mask: MaskPolynomial, g_commit) -> dict:
    """
    Prove Σ_x f(x) for ``products`` with mask ``mask`` bound as ``g_commit``.

    ``mask`` must sum to zero on the hypercube (see ``prepare_mask``) and have
    the same number of variables as the polynomials.
    """
    backend = mask_ck['backend']
    n = _num_variables(products)
    if mask.num_vars != n:
        raise DimensionMismatch(f"mask has {mask.num_vars} variables, polynomial has {n}")

    transcript.append_serializable(b"g_commit", g_commit)
    r1 = backend.to_int(transcript.get_scalar_challenge(b"r1"))

    degree = max(_poly_degree(products), mask.degree(), 1)
    messages, point = _prove_rounds(backend, transcript, products, degree, mask, r1)
    g_proof, g_value = mask_pc.open(mask_ck, mask, point)
    logger.debug("zk sumcheck proof: %d rounds, degree %d", n, degree)

    return {
        'g_commit': g_commit,
        'sumcheck_proof': messages,
        'poly_info': {'max_multiplicands': degree, 'num_variables': n},
        'g_proof': g_proof,
        'g_value': g_value,
    }


def zk_sumcheck_verifier_wrapper(mask_vk: dict, proof: dict, transcript: Transcript,
                                 claimed_sum) -> SumcheckVerdict:
    """
    Verify a ZK sumcheck proof.

    Parameters
    ----------
    mask_vk : dict
        Verifier key of the mask commitment scheme the mask was committed with
    proof : dict
        The proof (see module docstring)
    transcript : Transcript
        Fresh transcript in the same state the prover started from
    claimed_sum : int or ZR
        Claimed Σ_x f(x)

    Returns
    -------
    SumcheckVerdict
        Accepted with the subclaim about f, or rejected with
        ``ROUND_MISMATCH`` (round checks failed) or ``MASK_OPENING_FAILED``
        (``g_commit`` does not open to ``g_value`` at the subclaim point).
    """
    backend = mask_vk['backend']
    # Bind the mask before any challenge exists
    transcript.append_serializable(b"g_commit", proof['g_commit'])
    challenge = transcript.get_scalar_challenge(b"r1")

    num_vars = mask_vk['num_vars']
    if proof['poly_info']['num_variables'] != num_vars:
        detail = (f"proof has {proof['poly_info']['num_variables']} variables, "
                  f"mask key has {num_vars}")
        logger.info("zk sumcheck rejected: %s", detail)
        return SumcheckVerdict.reject(RejectReason.ROUND_MISMATCH, detail)

    try:
        subclaim = verify_as_subprotocol_zk(
            backend, transcript, proof['poly_info'], claimed_sum,
            proof['sumcheck_proof'], challenge, proof['g_value'])
    except SumcheckError as e:
        logger.info("zk sumcheck rejected: %s", e)
        return SumcheckVerdict.reject(RejectReason.ROUND_MISMATCH, str(e))

    if len(proof['g_proof']['w']) != num_vars:
        logger.info("zk sumcheck rejected: mask proof has wrong length")
        return SumcheckVerdict.reject(
            RejectReason.MASK_OPENING_FAILED,
            f"mask proof has {len(proof['g_proof']['w'])} elements, expected {num_vars}")

    if not mask_pc.check(mask_vk, proof['g_commit'], subclaim['point'],
                         proof['g_value'], proof['g_proof']):
        logger.info("zk sumcheck rejected: mask opening failed")
        return SumcheckVerdict.reject(RejectReason.MASK_OPENING_FAILED, "PCS opening failed")

    return SumcheckVerdict.accept(subclaim)
