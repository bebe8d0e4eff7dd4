"""
Tests for the Base Multilinear Commitment
=========================================

Positive and negative cases for setup, trim, commit, open and check.
"""

import random

import numpy as np
import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from zkml_commit.groups import setup
from zkml_commit import multilinear_pc
from zkml_commit.errors import DimensionMismatch, InvalidNumberOfVariables
from zkml_commit.polynomial import DenseMultilinearExtension


@pytest.fixture(scope="module")
def backend():
    return setup('BN254')


@pytest.fixture(scope="module")
def params(backend):
    return multilinear_pc.setup(backend, 4, random.Random(10))


@pytest.fixture(scope="module")
def keys(params):
    return multilinear_pc.trim(params, 4)


# ============================================================================
# Tables
# ============================================================================

def test_eq_extension_sums_to_one(backend):
    p = backend.order
    t = [5, 7, 11]
    eq = multilinear_pc.eq_extension(t, p)
    product = eq[0] * eq[1] % p * eq[2] % p
    assert int(sum(product)) % p == 1


def test_remove_dummy_variable(backend):
    table = np.array(list(range(8)), dtype=object)
    assert list(multilinear_pc.remove_dummy_variable(table, 1)) == [0, 2, 4, 6]
    assert list(multilinear_pc.remove_dummy_variable(table, 0)) == list(range(8))


def test_commitment_is_evaluation_at_trapdoor(backend):
    """With a known trapdoor, C == g^{f(t)}."""
    rng = random.Random(11)
    p = backend.order
    t = [rng.randrange(p) for _ in range(3)]
    g, h = backend.random_g1(rng), backend.random_g2(rng)
    params = multilinear_pc.setup_with_trapdoor(backend, t, g, h)
    ck, _ = multilinear_pc.trim(params, 3)

    f = DenseMultilinearExtension.rand(3, p, rng)
    commitment = multilinear_pc.commit(ck, f)
    assert commitment['g_product'] == g ** backend.scalar(f.evaluate(t))


def test_setup_rejects_zero_variables(backend):
    with pytest.raises(InvalidNumberOfVariables):
        multilinear_pc.setup(backend, 0)


def test_trim_rejects_too_many_variables(params):
    with pytest.raises(InvalidNumberOfVariables):
        multilinear_pc.trim(params, 5)


# ============================================================================
# Open / check
# ============================================================================

def test_open_check_positive(backend, keys):
    ck, vk = keys
    rng = random.Random(12)
    f = DenseMultilinearExtension.rand(4, backend.order, rng)
    point = [rng.randrange(backend.order) for _ in range(4)]

    commitment = multilinear_pc.commit(ck, f)
    proof = multilinear_pc.open(ck, f, point)
    value = f.evaluate(point)
    assert len(proof['proofs']) == 4
    assert multilinear_pc.check(vk, commitment, point, value, proof)


def test_open_check_wrong_value(backend, keys):
    ck, vk = keys
    rng = random.Random(13)
    f = DenseMultilinearExtension.rand(4, backend.order, rng)
    point = [rng.randrange(backend.order) for _ in range(4)]

    commitment = multilinear_pc.commit(ck, f)
    proof = multilinear_pc.open(ck, f, point)
    assert not multilinear_pc.check(vk, commitment, point, f.evaluate(point) + 1, proof)


def test_open_check_tampered_proof(backend, keys):
    ck, vk = keys
    rng = random.Random(14)
    f = DenseMultilinearExtension.rand(4, backend.order, rng)
    point = [rng.randrange(backend.order) for _ in range(4)]

    commitment = multilinear_pc.commit(ck, f)
    proof = multilinear_pc.open(ck, f, point)
    proof['proofs'][2] = proof['proofs'][2] * ck['g']
    assert not multilinear_pc.check(vk, commitment, point, f.evaluate(point), proof)


def test_trimmed_key_opens_smaller_polynomial(backend, params):
    ck, vk = multilinear_pc.trim(params, 2)
    f = DenseMultilinearExtension(2, [3, 1, 4, 1], backend.order)
    point = [9, 26]

    commitment = multilinear_pc.commit(ck, f)
    proof = multilinear_pc.open(ck, f, point)
    assert multilinear_pc.check(vk, commitment, point, f.evaluate(point), proof)


def test_commit_dimension_mismatch(backend, keys):
    ck, _ = keys
    f = DenseMultilinearExtension(3, range(8), backend.order)
    with pytest.raises(DimensionMismatch):
        multilinear_pc.commit(ck, f)


def test_check_dimension_mismatch(backend, keys):
    ck, vk = keys
    f = DenseMultilinearExtension(4, range(16), backend.order)
    commitment = multilinear_pc.commit(ck, f)
    proof = multilinear_pc.open(ck, f, [1, 2, 3, 4])
    with pytest.raises(DimensionMismatch):
        multilinear_pc.check(vk, commitment, [1, 2, 3], 0, proof)
