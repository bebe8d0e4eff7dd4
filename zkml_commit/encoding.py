"""
Canonical Encoding
==================

Byte encodings for everything that crosses a serialization boundary:
commitments, opening proofs, evaluations and ZK sumcheck proofs.

Format:
-------
- Scalar:        fixed width ``ceil(log2(order) / 8)`` bytes, big-endian;
                 values >= order are rejected on decode.
- Group element: 2-byte big-endian length followed by charm's compressed
                 serialization. Length 0 encodes the identity, which charm
                 cannot serialize.
- Counts:        2-byte big-endian.

Composite objects are plain concatenations in field order; decoders reject
truncated input and trailing bytes with ``SerializationError``.
"""

import struct
from typing import List, Sequence

from charm.toolbox.pairinggroup import G1

from .errors import SerializationError
from .groups import PairingBackend

_U16 = struct.Struct('>H')


def scalar_width(backend: PairingBackend) -> int:
    return (backend.order.bit_length() + 7) // 8


def encode_scalar(backend: PairingBackend, value) -> bytes:
    return backend.to_int(value).to_bytes(scalar_width(backend), 'big')


def encode_scalars(backend: PairingBackend, values: Sequence) -> bytes:
    return b"".join(encode_scalar(backend, v) for v in values)


def encode_element(backend: PairingBackend, elem, group_type=G1) -> bytes:
    if elem == backend.group.init(group_type, 1):
        return _U16.pack(0)
    raw = backend.group.serialize(elem)
    if len(raw) > 0xFFFF:
        raise SerializationError(f"serialized element too long ({len(raw)} bytes)")
    return _U16.pack(len(raw)) + raw


def _encode_u16(n: int) -> bytes:
    if not 0 <= n <= 0xFFFF:
        raise SerializationError(f"count {n} does not fit in 16 bits")
    return _U16.pack(n)


class _Reader:
    """Cursor over an encoded buffer."""

    def __init__(self, backend: PairingBackend, data: bytes):
        if not isinstance(data, (bytes, bytearray)):
            raise SerializationError(f"expected bytes, got {type(data).__name__}")
        self.backend = backend
        self.data = bytes(data)
        self.pos = 0

    def read(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise SerializationError(
                f"truncated input: need {n} bytes at offset {self.pos}, have {len(self.data) - self.pos}")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def u16(self) -> int:
        return _U16.unpack(self.read(2))[0]

    def flag(self) -> bool:
        b = self.read(1)[0]
        if b not in (0, 1):
            raise SerializationError(f"invalid flag byte {b}")
        return b == 1

    def scalar(self):
        value = int.from_bytes(self.read(scalar_width(self.backend)), 'big')
        if value >= self.backend.order:
            raise SerializationError("scalar encoding out of range")
        return self.backend.scalar(value)

    def element(self, group_type=G1):
        length = self.u16()
        if length == 0:
            return self.backend.group.init(group_type, 1)
        raw = self.read(length)
        # charm prefixes the serialization with the group type
        if not raw.startswith(b"%d:" % group_type):
            raise SerializationError(f"group element of wrong type at offset {self.pos - length}")
        try:
            elem = self.backend.group.deserialize(raw)
            canonical = elem is not None and self.backend.group.serialize(elem) == raw
        except Exception as exc:
            raise SerializationError(f"malformed group element at offset {self.pos - length}") from exc
        if not canonical:
            raise SerializationError("non-canonical group element encoding")
        if not self.backend.ismember(elem):
            raise SerializationError("decoded element is not a group member")
        return elem

    def finish(self):
        if self.pos != len(self.data):
            raise SerializationError(f"{len(self.data) - self.pos} trailing bytes")


def decode_scalar(backend: PairingBackend, data: bytes):
    reader = _Reader(backend, data)
    value = reader.scalar()
    reader.finish()
    return value


def decode_element(backend: PairingBackend, data: bytes, group_type=G1):
    reader = _Reader(backend, data)
    elem = reader.element(group_type)
    reader.finish()
    return elem


# Commitments and proofs

def encode_commitment(backend: PairingBackend, commitment: dict) -> bytes:
    return _encode_u16(commitment['nv']) + encode_element(backend, commitment['g_product'])


def _read_commitment(reader: _Reader) -> dict:
    nv = reader.u16()
    return {'nv': nv, 'g_product': reader.element()}


def _encode_elements_with_offset(backend, elements: List, random_v) -> bytes:
    out = _encode_u16(len(elements))
    out += b"".join(encode_element(backend, e) for e in elements)
    if random_v is None:
        out += b"\x00"
    else:
        out += b"\x01" + encode_scalar(backend, random_v)
    return out


def _read_elements_with_offset(reader: _Reader) -> tuple:
    count = reader.u16()
    elements = [reader.element() for _ in range(count)]
    random_v = reader.scalar() if reader.flag() else None
    return elements, random_v


def encode_proof(backend: PairingBackend, proof: dict) -> bytes:
    """Hiding (or plain multilinear) opening proof ``{'proofs', 'random_v'}``."""
    return _encode_elements_with_offset(backend, proof['proofs'], proof.get('random_v'))


def _read_proof(reader: _Reader) -> dict:
    proofs, random_v = _read_elements_with_offset(reader)
    return {'proofs': proofs, 'random_v': random_v}


def encode_mask_proof(backend: PairingBackend, proof: dict) -> bytes:
    """Mask opening proof ``{'w', 'random_v'}``."""
    return _encode_elements_with_offset(backend, proof['w'], proof.get('random_v'))


def _read_mask_proof(reader: _Reader) -> dict:
    w, random_v = _read_elements_with_offset(reader)
    return {'w': w, 'random_v': random_v}


def encode_opening(backend: PairingBackend, commitment: dict, proof: dict, evaluation) -> bytes:
    """commitment || proof || evaluation"""
    return (encode_commitment(backend, commitment)
            + encode_proof(backend, proof)
            + encode_scalar(backend, evaluation))


def decode_commitment(backend: PairingBackend, data: bytes) -> dict:
    reader = _Reader(backend, data)
    commitment = _read_commitment(reader)
    reader.finish()
    return commitment


def decode_proof(backend: PairingBackend, data: bytes) -> dict:
    reader = _Reader(backend, data)
    proof = _read_proof(reader)
    reader.finish()
    return proof


def decode_mask_proof(backend: PairingBackend, data: bytes) -> dict:
    reader = _Reader(backend, data)
    proof = _read_mask_proof(reader)
    reader.finish()
    return proof


def decode_opening(backend: PairingBackend, data: bytes) -> tuple:
    """Inverse of ``encode_opening``: ``(commitment, proof, evaluation)``."""
    reader = _Reader(backend, data)
    commitment = _read_commitment(reader)
    proof = _read_proof(reader)
    evaluation = reader.scalar()
    reader.finish()
    return commitment, proof, evaluation


# ZK sumcheck proofs

def encode_zk_sumcheck_proof(backend: PairingBackend, proof: dict) -> bytes:
    """
    g_commit || max_multiplicands || num_variables || round messages ||
    g_proof || g_value
    """
    info = proof['poly_info']
    out = encode_element(backend, proof['g_commit'])
    out += _encode_u16(info['max_multiplicands']) + _encode_u16(info['num_variables'])
    for message in proof['sumcheck_proof']:
        if len(message) != info['max_multiplicands'] + 1:
            raise SerializationError(
                f"round message has {len(message)} evaluations, expected {info['max_multiplicands'] + 1}")
        out += encode_scalars(backend, message)
    out += encode_mask_proof(backend, proof['g_proof'])
    out += encode_scalar(backend, proof['g_value'])
    return out


def decode_zk_sumcheck_proof(backend: PairingBackend, data: bytes) -> dict:
    reader = _Reader(backend, data)
    g_commit = reader.element()
    max_multiplicands = reader.u16()
    num_variables = reader.u16()
    messages = [[reader.scalar() for _ in range(max_multiplicands + 1)]
                for _ in range(num_variables)]
    g_proof = _read_mask_proof(reader)
    g_value = reader.scalar()
    reader.finish()
    return {
        'g_commit': g_commit,
        'sumcheck_proof': messages,
        'poly_info': {'max_multiplicands': max_multiplicands, 'num_variables': num_variables},
        'g_proof': g_proof,
        'g_value': g_value,
    }


def serialize_for_transcript(backend: PairingBackend, value) -> bytes:
    """
    Deterministic bytes for absorbing ``value`` into a transcript.

    Accepts bytes, ints, commitments, opening proofs, lists/tuples of these, and
    bare G1 elements.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, int):
        return encode_scalar(backend, value)
    if isinstance(value, dict):
        if 'g_product' in value:
            return encode_commitment(backend, value)
        if 'proofs' in value:
            return encode_proof(backend, value)
        if 'w' in value:
            return encode_mask_proof(backend, value)
        raise SerializationError(f"cannot serialize dict with keys {sorted(value)}")
    if isinstance(value, (list, tuple)):
        return _encode_u16(len(value)) + b"".join(serialize_for_transcript(backend, v) for v in value)
    return encode_element(backend, value)
