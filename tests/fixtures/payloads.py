"""File payloads libmagic recognizes, plus a deliberately spoofed one"""

import struct
import zlib


def _png_chunk(kind: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(kind + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)


PDF_BYTES = b"%PDF-1.7\n" + b"0" * (10 * 1024 - 9)

# 1x1 RGB image
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n"
    + _png_chunk(b"IHDR", struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0))
    + _png_chunk(b"IDAT", zlib.compress(b"\x00\xff\x00\x00"))
    + _png_chunk(b"IEND", b"")
)

# JFIF APP0 segment, padding, end-of-image marker
JPEG_BYTES = (
    b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    + b"\x00" * 256
    + b"\xff\xd9"
)

# Windows PE header
EXE_BYTES = b"MZ\x90\x00\x03\x00\x00\x00" + b"\x00" * 256
