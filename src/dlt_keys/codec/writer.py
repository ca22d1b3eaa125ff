"""
DER Writer

Accumulates tag/length/value triples for the ASN.1 DER encoder.
"""

from typing import List


class DerWriter:
    """Append-only DER output buffer."""

    def __init__(self):
        """Initialize writer with empty byte buffer."""
        self._bb: List[int] = []

    def u8(self, v: int) -> None:
        """
        Write a single byte.

        Args:
            v: Integer value to write (0-255)
        """
        self._bb.append(v & 0xFF)

    def length(self, n: int) -> None:
        """
        Write a DER length using the shortest form.

        Args:
            n: Content length
        """
        if n < 0x80:
            self.u8(n)
            return

        octets = n.to_bytes((n.bit_length() + 7) // 8, "big")
        self.u8(0x80 | len(octets))
        self.bytes(octets)

    def bytes(self, v: bytes) -> None:
        """
        Write raw bytes without length prefix.

        Args:
            v: Bytes to write directly
        """
        self._bb.extend(v)

    def tlv(self, tag: int, content: bytes) -> None:
        """Write a complete tag-length-value element."""
        self.u8(tag)
        self.length(len(content))
        self.bytes(content)

    def to_bytes(self) -> bytes:
        """Return the encoded buffer."""
        return bytes(self._bb)
