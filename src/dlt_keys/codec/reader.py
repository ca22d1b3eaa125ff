"""
DER Reader

Bounds-checked byte cursor used by the ASN.1 DER decoder. Every read that
would run past the end of the buffer raises DerDecodeError instead of
returning a short slice.
"""

import builtins

from ..runtime.errors import DerDecodeError


class DerReader:
    """
    Sequential reader over a DER byte buffer.

    Reads tags, lengths and payloads; never reads outside the buffer.
    """

    def __init__(self, buf: builtins.bytes):
        """
        Initialize reader with byte buffer.

        Args:
            buf: Byte buffer to read from
        """
        self._buf = builtins.bytes(buf)
        self._off = 0

    @property
    def eof(self) -> bool:
        """True if every byte has been consumed."""
        return self._off >= len(self._buf)

    @property
    def offset(self) -> int:
        return self._off

    def u8(self) -> int:
        """
        Read a single byte.

        Returns:
            Unsigned 8-bit integer value
        """
        if self._off >= len(self._buf):
            raise DerDecodeError("unexpected end of input", details={"offset": self._off})
        val = self._buf[self._off]
        self._off += 1
        return val

    def length(self) -> int:
        """
        Read a DER length in short or long form.

        Long form supports up to four length octets. The indefinite form
        (0x80) and non-minimal long forms are not valid DER and are rejected.

        Returns:
            Decoded content length
        """
        first = self.u8()
        if first < 0x80:
            return first

        count = first & 0x7F
        if count == 0:
            raise DerDecodeError("indefinite length is not allowed in DER", details={"offset": self._off - 1})
        if count > 4:
            raise DerDecodeError(f"length field of {count} octets is too large", details={"offset": self._off - 1})

        start = self._off
        octets = self.bytes(count)
        if octets[0] == 0 or (count == 1 and octets[0] < 0x80):
            raise DerDecodeError("length is not minimally encoded", details={"offset": start - 1})

        value = 0
        for octet in octets:
            value = (value << 8) | octet
        return value

    def bytes(self, n: int) -> builtins.bytes:
        """
        Read n bytes from buffer.

        Args:
            n: Number of bytes to read

        Returns:
            Bytes of specified length
        """
        if n < 0 or self._off + n > len(self._buf):
            raise DerDecodeError(
                f"length {n} exceeds remaining input",
                details={"offset": self._off, "remaining": len(self._buf) - self._off}
            )
        out = self._buf[self._off : self._off + n]
        self._off += n
        return out
