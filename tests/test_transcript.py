"""
Tests for the Fiat-Shamir Transcript
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from zkml_commit.groups import setup
from zkml_commit.transcript import Transcript


@pytest.fixture(scope="module")
def backend():
    return setup('BN254')


def test_same_sequence_same_challenges(backend):
    t1, t2 = Transcript(backend), Transcript(backend)
    for t in (t1, t2):
        t.append_message(b"msg", b"hello")
        t.append_scalars(b"evals", [1, 2, 3])
    assert t1.get_scalar_challenge(b"c") == t2.get_scalar_challenge(b"c")


def test_different_messages_diverge(backend):
    t1, t2 = Transcript(backend), Transcript(backend)
    t1.append_scalar(b"x", 1)
    t2.append_scalar(b"x", 2)
    assert t1.get_scalar_challenge(b"c") != t2.get_scalar_challenge(b"c")


def test_labels_are_domain_separated(backend):
    t1, t2 = Transcript(backend), Transcript(backend)
    t1.append_message(b"ab", b"c")
    t2.append_message(b"a", b"bc")
    assert t1.get_scalar_challenge(b"c") != t2.get_scalar_challenge(b"c")


def test_protocol_label(backend):
    c1 = Transcript(backend, b"protocol-a").get_scalar_challenge(b"c")
    c2 = Transcript(backend, b"protocol-b").get_scalar_challenge(b"c")
    assert c1 != c2


def test_consecutive_challenges_differ(backend):
    t = Transcript(backend)
    challenges = t.get_scalar_challenges(b"c", 3)
    assert len(set(backend.to_int(c) for c in challenges)) == 3


def test_append_serializable_group_element(backend):
    g = backend.random_g1()
    t1, t2 = Transcript(backend), Transcript(backend)
    t1.append_serializable(b"g_commit", g)
    t2.append_serializable(b"g_commit", g)
    assert t1.get_scalar_challenge(b"r1") == t2.get_scalar_challenge(b"r1")

    t3 = Transcript(backend)
    t3.append_serializable(b"g_commit", g * g)
    assert t3.get_scalar_challenge(b"r1") != Transcript(backend).get_scalar_challenge(b"r1")
