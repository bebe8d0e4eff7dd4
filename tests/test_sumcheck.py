"""
Tests for the Zero-Knowledge Sumcheck
=====================================

The verifier wrapper must accept honest proofs with a subclaim about the
unmasked polynomial, and reject with a distinguishable reason when a round
message is inconsistent or the mask commitment does not open to the claimed
mask value.
"""

import random

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from zkml_commit.groups import setup
from zkml_commit import encoding, mask_pc, sumcheck
from zkml_commit.errors import DimensionMismatch, SumcheckError
from zkml_commit.polynomial import DenseMultilinearExtension
from zkml_commit.sumcheck import (
    RejectReason, SumcheckVerdict, evaluate_products, interpolate_uni_poly, prepare_mask,
    sum_over_hypercube, zk_sumcheck_prove, zk_sumcheck_verifier_wrapper,
)
from zkml_commit.transcript import Transcript


NUM_VARS = 3
MASK_DEGREE = 2


@pytest.fixture(scope="module")
def backend():
    return setup('BN254')


@pytest.fixture(scope="module")
def mask_keys(backend):
    srs = mask_pc.special_setup(backend, 3, NUM_VARS, random.Random(50))
    return mask_pc.trim(srs, 3)


@pytest.fixture(scope="module")
def products(backend):
    """f = 1·(a·b) + 3·c over 3 variables."""
    rng = random.Random(51)
    a, b, c = (DenseMultilinearExtension.rand(NUM_VARS, backend.order, rng) for _ in range(3))
    return [(1, [a, b]), (3, [c])]


@pytest.fixture
def honest_proof(backend, mask_keys, products):
    ck, _ = mask_keys
    mask, g_commit = prepare_mask(ck, NUM_VARS, MASK_DEGREE, random.Random(52))
    return zk_sumcheck_prove(ck, products, Transcript(backend), mask, g_commit)


# ============================================================================
# Helpers
# ============================================================================

def test_interpolate_uni_poly(backend):
    p = backend.order
    # p(x) = 3x^2 + 2x + 1
    evals = [1, 6, 17]
    assert interpolate_uni_poly(evals, 5, p) == 86
    assert interpolate_uni_poly(evals, 2, p) == 17
    assert interpolate_uni_poly(evals, p - 1, p) == 2


def test_sum_over_hypercube(backend, products):
    p = backend.order
    points = [[(x >> i) & 1 for i in range(NUM_VARS)] for x in range(1 << NUM_VARS)]
    brute = sum(evaluate_products(products, point, p) for point in points) % p
    assert sum_over_hypercube(products, p) == brute


def test_verdict_truthiness():
    assert SumcheckVerdict.accept({'point': [], 'expected_evaluation': 0})
    rejected = SumcheckVerdict.reject(RejectReason.ROUND_MISMATCH, "bad round")
    assert not rejected
    assert rejected.reason is RejectReason.ROUND_MISMATCH
    assert rejected.subclaim is None


# ============================================================================
# Plain sumcheck
# ============================================================================

def test_plain_sumcheck_round_trip(backend, products):
    p = backend.order
    claimed = sum_over_hypercube(products, p)
    messages, poly_info = sumcheck.prove(backend, Transcript(backend), products)
    assert poly_info == {'max_multiplicands': 2, 'num_variables': NUM_VARS}

    subclaim = sumcheck.verify(backend, Transcript(backend), poly_info, claimed, messages)
    expected = evaluate_products(products, subclaim['point'], p)
    assert backend.to_int(subclaim['expected_evaluation']) == expected


def test_plain_sumcheck_wrong_sum(backend, products):
    claimed = sum_over_hypercube(products, backend.order) + 1
    messages, poly_info = sumcheck.prove(backend, Transcript(backend), products)
    with pytest.raises(SumcheckError):
        sumcheck.verify(backend, Transcript(backend), poly_info, claimed, messages)


# ============================================================================
# ZK sumcheck: accept
# ============================================================================

def test_zk_sumcheck_accepts(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert verdict.accepted
    assert verdict.reason is None


def test_zk_subclaim_is_about_unmasked_polynomial(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)

    subclaim = verdict.subclaim
    assert len(subclaim['point']) == NUM_VARS
    expected = evaluate_products(products, subclaim['point'], backend.order)
    assert backend.to_int(subclaim['expected_evaluation']) == expected


def test_zk_round_messages_have_degree_bound(honest_proof):
    degree = honest_proof['poly_info']['max_multiplicands']
    assert degree == max(2, MASK_DEGREE)
    assert all(len(m) == degree + 1 for m in honest_proof['sumcheck_proof'])


def test_zk_single_variable(backend):
    rng = random.Random(53)
    srs = mask_pc.special_setup(backend, 2, 1, rng)
    ck, vk = mask_pc.trim(srs, 2)
    f = DenseMultilinearExtension(1, [4, 9], backend.order)
    mask, g_commit = prepare_mask(ck, 1, 2, rng)

    proof = zk_sumcheck_prove(ck, [(1, [f])], Transcript(backend), mask, g_commit)
    verdict = zk_sumcheck_verifier_wrapper(vk, proof, Transcript(backend), 13)
    assert verdict.accepted
    assert backend.to_int(verdict.subclaim['expected_evaluation']) == \
        f.evaluate(verdict.subclaim['point'])


# ============================================================================
# ZK sumcheck: reject
# ============================================================================

def test_zk_wrong_claimed_sum(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    claimed = sum_over_hypercube(products, backend.order) + 1
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert not verdict
    assert verdict.reason is RejectReason.ROUND_MISMATCH


def test_zk_tampered_round_message(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    messages = honest_proof['sumcheck_proof']
    messages[1][0] = backend.scalar(backend.to_int(messages[1][0]) + 1)
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert verdict.reason is RejectReason.ROUND_MISMATCH


def test_zk_truncated_round_message(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    honest_proof['sumcheck_proof'][0] = honest_proof['sumcheck_proof'][0][:-1]
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert verdict.reason is RejectReason.ROUND_MISMATCH


def test_zk_unrelated_mask_commitment(backend, mask_keys, products):
    """Rounds masked with one polynomial while a different one is committed."""
    ck, vk = mask_keys
    rng = random.Random(54)
    mask_a, _ = prepare_mask(ck, NUM_VARS, MASK_DEGREE, rng)
    _, commit_b = prepare_mask(ck, NUM_VARS, MASK_DEGREE, rng)

    proof = zk_sumcheck_prove(ck, products, Transcript(backend), mask_a, commit_b)
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, proof, Transcript(backend), claimed)
    assert not verdict.accepted
    assert verdict.reason is RejectReason.MASK_OPENING_FAILED


def test_zk_tampered_mask_value(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    honest_proof['g_value'] = backend.scalar(backend.to_int(honest_proof['g_value']) + 1)
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert verdict.reason is RejectReason.MASK_OPENING_FAILED


def test_zk_swapped_commitment_after_proving(backend, mask_keys, products, honest_proof):
    ck, vk = mask_keys
    _, commit_b = prepare_mask(ck, NUM_VARS, MASK_DEGREE, random.Random(55))
    honest_proof['g_commit'] = commit_b
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert not verdict.accepted


def test_zk_transcript_label_mismatch(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(
        vk, honest_proof, Transcript(backend, b"other-protocol"), claimed)
    assert not verdict.accepted


def test_zk_prove_mask_dimension_mismatch(backend, mask_keys, products):
    ck, _ = mask_keys
    mask, g_commit = prepare_mask(ck, NUM_VARS - 1, MASK_DEGREE, random.Random(56))
    with pytest.raises(DimensionMismatch):
        zk_sumcheck_prove(ck, products, Transcript(backend), mask, g_commit)


def test_products_must_share_num_vars(backend, mask_keys):
    ck, _ = mask_keys
    a = DenseMultilinearExtension(2, [1, 2, 3, 4], backend.order)
    b = DenseMultilinearExtension(3, range(8), backend.order)
    mask, g_commit = prepare_mask(ck, NUM_VARS, MASK_DEGREE, random.Random(57))
    with pytest.raises(DimensionMismatch):
        zk_sumcheck_prove(ck, [(1, [a]), (1, [b])], Transcript(backend), mask, g_commit)


# ============================================================================
# ZK sumcheck: malformed proof shapes are rejected, not raised
# ============================================================================

def test_zk_zero_degree_bound(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    honest_proof['poly_info'] = {'max_multiplicands': 0, 'num_variables': NUM_VARS}
    honest_proof['sumcheck_proof'] = [message[:1] for message in honest_proof['sumcheck_proof']]
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert verdict.reason is RejectReason.ROUND_MISMATCH


def test_zk_zero_degree_bound_from_bytes(backend, mask_keys, products, honest_proof):
    _, vk = mask_keys
    honest_proof['poly_info'] = {'max_multiplicands': 0, 'num_variables': NUM_VARS}
    honest_proof['sumcheck_proof'] = [message[:1] for message in honest_proof['sumcheck_proof']]
    decoded = encoding.decode_zk_sumcheck_proof(
        backend, encoding.encode_zk_sumcheck_proof(backend, honest_proof))
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, decoded, Transcript(backend), claimed)
    assert verdict.reason is RejectReason.ROUND_MISMATCH


@pytest.mark.parametrize("num_variables", [0, NUM_VARS - 1, NUM_VARS + 1])
def test_zk_num_variables_disagrees_with_key(backend, mask_keys, products, honest_proof,
                                              num_variables):
    _, vk = mask_keys
    honest_proof['poly_info'] = {'max_multiplicands': honest_proof['poly_info']['max_multiplicands'],
                                 'num_variables': num_variables}
    honest_proof['sumcheck_proof'] = (honest_proof['sumcheck_proof'] * 2)[:num_variables]
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert not verdict.accepted
    assert verdict.reason is RejectReason.ROUND_MISMATCH


@pytest.mark.parametrize("w_length", [0, NUM_VARS - 1, NUM_VARS + 1])
def test_zk_mask_proof_length_disagrees_with_key(backend, mask_keys, products, honest_proof,
                                                  w_length):
    _, vk = mask_keys
    w = honest_proof['g_proof']['w']
    honest_proof['g_proof'] = {'w': (w * 2)[:w_length], 'random_v': None}
    claimed = sum_over_hypercube(products, backend.order)
    verdict = zk_sumcheck_verifier_wrapper(vk, honest_proof, Transcript(backend), claimed)
    assert verdict.reason is RejectReason.MASK_OPENING_FAILED
