"""Two-channel float textures and their DDS / KTX containers."""

from __future__ import annotations

import logging
import os
import struct
import tempfile
from enum import Enum
from pathlib import Path
from typing import Tuple, Union

import numpy as np

from . import _validate

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class TextureFormatError(ValueError):
    """Raised when a texture file is malformed or uses an unsupported format."""


class TextureWriteError(RuntimeError):
    """Raised when a texture cannot be persisted."""


class TextureFormat(Enum):
    """Supported two-channel float texel formats."""
    RG16_SFLOAT = "rg16f"
    RG32_SFLOAT = "rg32f"

    @classmethod
    def from_bits(cls, bits: int) -> "TextureFormat":
        bits = _validate.bits_per_channel(bits)
        return cls.RG16_SFLOAT if bits == 16 else cls.RG32_SFLOAT

    @property
    def bits(self) -> int:
        return 16 if self is TextureFormat.RG16_SFLOAT else 32

    @property
    def bytes_per_texel(self) -> int:
        return 2 * self.bits // 8


# DDS constants
_DDS_MAGIC = b"DDS "
_DDSD_CAPS = 0x1
_DDSD_HEIGHT = 0x2
_DDSD_WIDTH = 0x4
_DDSD_PITCH = 0x8
_DDSD_PIXELFORMAT = 0x1000
_DDSD_MIPMAPCOUNT = 0x20000
_DDPF_FOURCC = 0x4
_DDSCAPS_TEXTURE = 0x1000
_D3DFMT = {TextureFormat.RG16_SFLOAT: 112, TextureFormat.RG32_SFLOAT: 115}
_DXGI = {TextureFormat.RG16_SFLOAT: 34, TextureFormat.RG32_SFLOAT: 16}
_DX10_FOURCC = struct.unpack("<I", b"DX10")[0]

# KTX 1.1 constants
_KTX_IDENTIFIER = bytes([0xAB, 0x4B, 0x54, 0x58, 0x20, 0x31, 0x31, 0xBB, 0x0D, 0x0A, 0x1A, 0x0A])
_KTX_ENDIANNESS = 0x04030201
_GL_HALF_FLOAT = 0x140B
_GL_FLOAT = 0x1406
_GL_RG = 0x8227
_GL_RG16F = 0x822F
_GL_RG32F = 0x8230
_GL_INTERNAL = {TextureFormat.RG16_SFLOAT: _GL_RG16F, TextureFormat.RG32_SFLOAT: _GL_RG32F}


def pack_half2x16(value) -> np.ndarray:
    """Pack float pairs into ``uint32`` words of two IEEE half floats.

    The first component lands in the low 16 bits. Conversion from float32
    rounds to nearest even.

    Parameters
    ----------
    value : array_like
        Array of shape ``(..., 2)``.

    Returns
    -------
    np.ndarray
        ``uint32`` array of shape ``(...)``.
    """
    arr = np.asarray(value, dtype=np.float32)
    if arr.shape[-1:] != (2,):
        raise ValueError(f"value must have a trailing dimension of 2, got {arr.shape}")
    halves = arr.astype(np.float16).view(np.uint16).astype(np.uint32)
    return halves[..., 0] | (halves[..., 1] << np.uint32(16))


def unpack_half2x16(packed) -> np.ndarray:
    """Inverse of :func:`pack_half2x16`, returning float32 ``(..., 2)``."""
    words = np.asarray(packed, dtype=np.uint32)
    lo = (words & np.uint32(0xFFFF)).astype(np.uint16)
    hi = (words >> np.uint32(16)).astype(np.uint16)
    halves = np.stack([lo, hi], axis=-1)
    return halves.view(np.float16).astype(np.float32)


class Texture2D:
    """Square, single-level, two-channel float texture.

    Texels are addressed as ``(column, row)`` with row 0 first in memory.
    16-bit textures hold one packed ``uint32`` per texel, 32-bit textures
    hold two float32 values.
    """

    def __init__(self, size: int, fmt: TextureFormat, data: np.ndarray = None):
        self.size = _validate.lut_size(size)
        self.format = TextureFormat(fmt)
        if data is None:
            data = np.zeros(self._shape(), dtype=self._dtype())
        else:
            data = np.ascontiguousarray(data, dtype=self._dtype())
            if data.shape != self._shape():
                raise ValueError(f"data shape {data.shape} does not match expected {self._shape()}")
        self._data = data

    @classmethod
    def create(cls, size: int, bits: int) -> "Texture2D":
        """Create an empty texture of ``size`` x ``size`` with ``bits`` per channel."""
        return cls(size, TextureFormat.from_bits(bits))

    def _shape(self) -> Tuple[int, ...]:
        if self.format is TextureFormat.RG16_SFLOAT:
            return (self.size, self.size)
        return (self.size, self.size, 2)

    def _dtype(self):
        return np.dtype("<u4") if self.format is TextureFormat.RG16_SFLOAT else np.dtype("<f4")

    @property
    def bits(self) -> int:
        return self.format.bits

    @property
    def data(self) -> np.ndarray:
        return self._data

    def _check_coord(self, column: int, row: int) -> None:
        if not (0 <= column < self.size and 0 <= row < self.size):
            raise IndexError(f"texel ({column}, {row}) outside {self.size}x{self.size} texture")

    def store(self, column: int, row: int, value) -> None:
        """Write one texel. 16-bit textures expect a value from :func:`pack_half2x16`."""
        self._check_coord(column, row)
        if self.format is TextureFormat.RG16_SFLOAT:
            self._data[row, column] = np.uint32(value)
        else:
            pair = np.asarray(value, dtype=np.float32)
            if pair.shape != (2,):
                raise ValueError(f"value must be a pair of floats, got shape {pair.shape}")
            self._data[row, column] = pair

    def fetch(self, column: int, row: int) -> Tuple[float, float]:
        self._check_coord(column, row)
        if self.format is TextureFormat.RG16_SFLOAT:
            r, g = unpack_half2x16(self._data[row, column])
        else:
            r, g = self._data[row, column]
        return float(r), float(g)

    def to_array(self) -> np.ndarray:
        """Return texel values as float32 ``(rows, columns, 2)``."""
        if self.format is TextureFormat.RG16_SFLOAT:
            return unpack_half2x16(self._data)
        return self._data.astype(np.float32, copy=True)

    def tobytes(self) -> bytes:
        return self._data.tobytes()

    @property
    def row_pitch(self) -> int:
        return self.size * self.format.bytes_per_texel

    def save(self, path: PathLike) -> Path:
        return save_texture(self, path)

    def __repr__(self) -> str:
        return f"Texture2D(size={self.size}, format={self.format.name})"


def _dds_bytes(texture: Texture2D) -> bytes:
    flags = (_DDSD_CAPS | _DDSD_HEIGHT | _DDSD_WIDTH | _DDSD_PIXELFORMAT
             | _DDSD_PITCH | _DDSD_MIPMAPCOUNT)
    header = struct.pack(
        "<7I", 124, flags, texture.size, texture.size, texture.row_pitch, 0, 1
    )
    header += b"\x00" * (11 * 4)
    header += struct.pack("<8I", 32, _DDPF_FOURCC, _D3DFMT[texture.format], 0, 0, 0, 0, 0)
    header += struct.pack("<5I", _DDSCAPS_TEXTURE, 0, 0, 0, 0)
    return _DDS_MAGIC + header + texture.tobytes()


def _ktx_bytes(texture: Texture2D) -> bytes:
    if texture.format is TextureFormat.RG16_SFLOAT:
        gl_type, type_size = _GL_HALF_FLOAT, 2
    else:
        gl_type, type_size = _GL_FLOAT, 4
    header = struct.pack(
        "<13I",
        _KTX_ENDIANNESS,
        gl_type,
        type_size,
        _GL_RG,
        _GL_INTERNAL[texture.format],
        _GL_RG,
        texture.size,
        texture.size,
        0,  # depth
        0,  # array elements
        1,  # faces
        1,  # mip levels
        0,  # key/value bytes
    )
    payload = texture.tobytes()
    # Rows of 4- or 8-byte texels never need KTX row padding.
    return _KTX_IDENTIFIER + header + struct.pack("<I", len(payload)) + payload


_WRITERS = {".dds": _dds_bytes, ".ktx": _ktx_bytes}


def save_texture(texture: Texture2D, path: PathLike) -> Path:
    """
    Serialize ``texture`` to ``path``; the container follows the extension.

    The file is written to a temporary sibling first and renamed into place,
    so a failed write never leaves a partial file under ``path``.

    Args:
        texture: Populated texture
        path: Output path ending in ``.dds`` or ``.ktx``

    Returns:
        The written path

    Raises:
        ValueError: Unsupported extension
        TextureWriteError: The file could not be written
    """
    path = _validate.texture_path(path)
    blob = _WRITERS[path.suffix.lower()](texture)

    tmp_name = None
    try:
        parent = path.parent if str(path.parent) else Path(".")
        with tempfile.NamedTemporaryFile("wb", dir=parent, prefix=f".{path.name}.",
                                         suffix=".tmp", delete=False) as fh:
            tmp_name = fh.name
            fh.write(blob)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise TextureWriteError(f"failed to write texture {path}: {exc}") from exc

    logger.info(f"Saved {texture.bits}-bit {texture.size}x{texture.size} texture: {path}")
    return path


def _format_from_dds(fourcc: int, blob: bytes, offset: int) -> Tuple[TextureFormat, int]:
    for fmt, code in _D3DFMT.items():
        if fourcc == code:
            return fmt, offset
    if fourcc == _DX10_FOURCC:
        if len(blob) < offset + 20:
            raise TextureFormatError("truncated DX10 header")
        dxgi_format, _dim, _misc, array_size, _misc2 = struct.unpack_from("<5I", blob, offset)
        if array_size not in (0, 1):
            raise TextureFormatError(f"texture arrays are not supported (array size {array_size})")
        for fmt, code in _DXGI.items():
            if dxgi_format == code:
                return fmt, offset + 20
        raise TextureFormatError(f"unsupported DXGI format {dxgi_format}")
    raise TextureFormatError(f"unsupported DDS pixel format (fourCC {fourcc})")


def _parse_dds(blob: bytes) -> Texture2D:
    if len(blob) < 128 or blob[:4] != _DDS_MAGIC:
        raise TextureFormatError("not a DDS file")
    size_field, _flags, height, width = struct.unpack_from("<4I", blob, 4)
    if size_field != 124:
        raise TextureFormatError(f"bad DDS header size {size_field}")
    pf_flags, fourcc = struct.unpack_from("<2I", blob, 4 + 72 + 4)
    if not pf_flags & _DDPF_FOURCC:
        raise TextureFormatError("DDS file does not use a FourCC pixel format")
    fmt, offset = _format_from_dds(fourcc, blob, 128)
    return _texture_from_payload(fmt, width, height, blob, offset)


def _parse_ktx(blob: bytes) -> Texture2D:
    if len(blob) < 64 or blob[:12] != _KTX_IDENTIFIER:
        raise TextureFormatError("not a KTX 1.1 file")
    fields = struct.unpack_from("<13I", blob, 12)
    if fields[0] != _KTX_ENDIANNESS:
        raise TextureFormatError("big-endian KTX files are not supported")
    internal = fields[4]
    width, height, depth = fields[6], fields[7], fields[8]
    faces, kv_bytes = fields[10], fields[12]
    if depth not in (0, 1) or faces != 1:
        raise TextureFormatError("only single-face 2D KTX textures are supported")
    for fmt, code in _GL_INTERNAL.items():
        if internal == code:
            break
    else:
        raise TextureFormatError(f"unsupported GL internal format 0x{internal:04X}")
    offset = 64 + kv_bytes
    if len(blob) < offset + 4:
        raise TextureFormatError("truncated KTX file")
    (image_size,) = struct.unpack_from("<I", blob, offset)
    if image_size < width * height * fmt.bytes_per_texel:
        raise TextureFormatError(f"KTX image size {image_size} too small for {width}x{height}")
    return _texture_from_payload(fmt, width, height, blob, offset + 4)


def _texture_from_payload(fmt: TextureFormat, width: int, height: int,
                          blob: bytes, offset: int) -> Texture2D:
    if width != height:
        raise TextureFormatError(f"only square textures are supported, got {width}x{height}")
    if width == 0:
        raise TextureFormatError("texture has zero size")
    nbytes = width * height * fmt.bytes_per_texel
    if len(blob) < offset + nbytes:
        raise TextureFormatError("texture payload is truncated")
    texel_dtype = "<u4" if fmt is TextureFormat.RG16_SFLOAT else "<f4"
    data = np.frombuffer(blob, dtype=texel_dtype, count=nbytes // 4, offset=offset)
    shape = (height, width) if fmt is TextureFormat.RG16_SFLOAT else (height, width, 2)
    return Texture2D(width, fmt, data.reshape(shape).copy())


_READERS = {".dds": _parse_dds, ".ktx": _parse_ktx}


def load_texture(path: PathLike) -> Texture2D:
    """Read a DDS or KTX file written in one of the supported RG float formats."""
    path = _validate.texture_path(path)
    blob = path.read_bytes()
    texture = _READERS[path.suffix.lower()](blob)
    logger.debug(f"Loaded {texture!r} from {path}")
    return texture


__all__ = [
    "TextureFormat",
    "TextureFormatError",
    "TextureWriteError",
    "Texture2D",
    "pack_half2x16",
    "unpack_half2x16",
    "save_texture",
    "load_texture",
]
