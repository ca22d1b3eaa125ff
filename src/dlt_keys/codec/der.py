"""
ASN.1 DER codec.

Decodes a DER byte string into a tree of DerNode values and encodes such a
tree back into bytes. Only the universal types needed to read PKCS#8
structures are supported: INTEGER, BIT STRING, OCTET STRING, NULL,
OBJECT IDENTIFIER and SEQUENCE. The decoder checks structure only; callers
interpret the meaning of OIDs and fields.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple, Union

from ..runtime.errors import DerDecodeError
from .reader import DerReader
from .writer import DerWriter

# PKCS#8 structures nest six levels deep at most
MAX_NESTING_DEPTH = 32


class DerTag(IntEnum):
    """Universal DER tags understood by the codec."""

    INTEGER = 0x02
    BIT_STRING = 0x03
    OCTET_STRING = 0x04
    NULL = 0x05
    OBJECT_IDENTIFIER = 0x06
    SEQUENCE = 0x30


DerValue = Union[int, bytes, str, None, Tuple["DerNode", ...]]


@dataclass(frozen=True)
class DerNode:
    """
    One decoded DER element.

    ``value`` depends on ``tag``: ``int`` for INTEGER, ``bytes`` for OCTET
    STRING and BIT STRING, ``None`` for NULL, a dotted ``str`` for OBJECT
    IDENTIFIER and a tuple of child nodes for SEQUENCE. ``unused_bits`` is
    only meaningful for BIT STRING.
    """

    tag: DerTag
    value: DerValue
    unused_bits: int = 0

    @classmethod
    def integer(cls, value: int) -> DerNode:
        return cls(DerTag.INTEGER, value)

    @classmethod
    def octet_string(cls, value: bytes) -> DerNode:
        return cls(DerTag.OCTET_STRING, bytes(value))

    @classmethod
    def bit_string(cls, value: bytes, unused_bits: int = 0) -> DerNode:
        return cls(DerTag.BIT_STRING, bytes(value), unused_bits)

    @classmethod
    def null(cls) -> DerNode:
        return cls(DerTag.NULL, None)

    @classmethod
    def oid(cls, dotted: str) -> DerNode:
        return cls(DerTag.OBJECT_IDENTIFIER, dotted)

    @classmethod
    def sequence(cls, *children: DerNode) -> DerNode:
        return cls(DerTag.SEQUENCE, tuple(children))

    def expect(self, tag: DerTag) -> DerNode:
        """Return self if it carries ``tag``, else raise DerDecodeError."""
        if self.tag != tag:
            raise DerDecodeError(f"expected {tag.name}, got {self.tag.name}")
        return self

    def as_int(self) -> int:
        return self.expect(DerTag.INTEGER).value

    def as_bytes(self) -> bytes:
        return self.expect(DerTag.OCTET_STRING).value

    def as_oid(self) -> str:
        return self.expect(DerTag.OBJECT_IDENTIFIER).value

    def as_sequence(self, min_len: int = 0) -> Tuple[DerNode, ...]:
        """Return the children of a SEQUENCE, requiring at least ``min_len`` of them."""
        children = self.expect(DerTag.SEQUENCE).value
        if len(children) < min_len:
            raise DerDecodeError(f"expected at least {min_len} elements in SEQUENCE, got {len(children)}")
        return children


def decode_der(data: bytes) -> DerNode:
    """
    Decode exactly one DER element.

    Args:
        data: DER-encoded bytes

    Returns:
        The decoded element tree

    Raises:
        DerDecodeError: If the input is truncated, has trailing bytes, uses an
            unsupported tag or violates the encoding rules of a primitive type
    """
    reader = DerReader(data)
    node = _read_node(reader)
    if not reader.eof:
        raise DerDecodeError("trailing bytes after DER element", details={"offset": reader.offset})
    return node


def _read_node(reader: DerReader, depth: int = 0) -> DerNode:
    offset = reader.offset
    if depth > MAX_NESTING_DEPTH:
        raise DerDecodeError(f"SEQUENCE nesting deeper than {MAX_NESTING_DEPTH}", details={"offset": offset})
    tag_byte = reader.u8()
    try:
        tag = DerTag(tag_byte)
    except ValueError as e:
        raise DerDecodeError(f"unsupported DER tag 0x{tag_byte:02x}", details={"offset": offset}, cause=e) from e

    content = reader.bytes(reader.length())

    if tag == DerTag.SEQUENCE:
        inner = DerReader(content)
        children = []
        while not inner.eof:
            children.append(_read_node(inner, depth + 1))
        return DerNode(tag, tuple(children))

    if tag == DerTag.INTEGER:
        if not content:
            raise DerDecodeError("empty INTEGER", details={"offset": offset})
        return DerNode(tag, int.from_bytes(content, "big", signed=True))

    if tag == DerTag.OCTET_STRING:
        return DerNode(tag, content)

    if tag == DerTag.BIT_STRING:
        if not content:
            raise DerDecodeError("empty BIT STRING", details={"offset": offset})
        unused = content[0]
        if unused > 7 or (unused and len(content) == 1):
            raise DerDecodeError(f"invalid unused bit count {unused}", details={"offset": offset})
        return DerNode(tag, content[1:], unused)

    if tag == DerTag.NULL:
        if content:
            raise DerDecodeError("NULL with non-empty content", details={"offset": offset})
        return DerNode(tag, None)

    return DerNode(tag, _decode_oid(content, offset))


def _decode_oid(content: bytes, offset: int) -> str:
    if not content:
        raise DerDecodeError("empty OBJECT IDENTIFIER", details={"offset": offset})

    arcs = []
    value = 0
    for i, octet in enumerate(content):
        if octet == 0x80 and (i == 0 or not content[i - 1] & 0x80):
            raise DerDecodeError("non-minimal OBJECT IDENTIFIER arc", details={"offset": offset})
        value = (value << 7) | (octet & 0x7F)
        if not octet & 0x80:
            arcs.append(value)
            value = 0
    if content[-1] & 0x80:
        raise DerDecodeError("truncated OBJECT IDENTIFIER", details={"offset": offset})

    first = arcs[0]
    if first < 40:
        head = [0, first]
    elif first < 80:
        head = [1, first - 40]
    else:
        head = [2, first - 80]
    return ".".join(str(arc) for arc in head + arcs[1:])


def encode_der(node: DerNode) -> bytes:
    """
    Encode an element tree as DER.

    Args:
        node: Root element

    Returns:
        DER bytes
    """
    writer = DerWriter()
    _write_node(writer, node)
    return writer.to_bytes()


def _write_node(writer: DerWriter, node: DerNode) -> None:
    tag = node.tag
    if tag == DerTag.SEQUENCE:
        inner = DerWriter()
        for child in node.value:
            _write_node(inner, child)
        content = inner.to_bytes()
    elif tag == DerTag.INTEGER:
        n = node.value
        size = ((n if n >= 0 else ~n).bit_length() + 8) // 8
        content = n.to_bytes(size, "big", signed=True)
    elif tag == DerTag.OCTET_STRING:
        content = node.value
    elif tag == DerTag.BIT_STRING:
        content = bytes([node.unused_bits]) + node.value
    elif tag == DerTag.NULL:
        content = b""
    else:
        content = _encode_oid(node.value)
    writer.tlv(tag, content)


def _encode_oid(dotted: str) -> bytes:
    arcs = [int(part) for part in dotted.split(".")]
    if len(arcs) < 2:
        raise ValueError(f"OBJECT IDENTIFIER needs at least two arcs: {dotted!r}")

    out = bytearray()
    for arc in [arcs[0] * 40 + arcs[1]] + arcs[2:]:
        chunk = [arc & 0x7F]
        arc >>= 7
        while arc:
            chunk.append(0x80 | (arc & 0x7F))
            arc >>= 7
        out.extend(reversed(chunk))
    return bytes(out)


__all__ = [
    "DerTag",
    "DerNode",
    "decode_der",
    "encode_der",
]
