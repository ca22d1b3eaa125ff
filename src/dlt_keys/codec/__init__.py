"""
ASN.1 DER codec module.

Key components:
- reader.py: bounds-checked DER reader (tags, lengths, payloads)
- writer.py: DER writer
- der.py: element tree decoding and encoding
"""

from .der import DerNode, DerTag, decode_der, encode_der
from .reader import DerReader
from .writer import DerWriter

__all__ = [
    "DerNode",
    "DerTag",
    "DerReader",
    "DerWriter",
    "decode_der",
    "encode_der",
]
