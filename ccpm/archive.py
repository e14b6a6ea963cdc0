"""
Artifact encoding.

An artifact is the package serialized as canonical JSON (sorted keys, no insignificant whitespace), compressed with
raw DEFLATE (no zlib or gzip header) and finally base64 encoded, so the whole artifact is plain ASCII text.
"""
import base64
import binascii
import json
import zlib

from pydantic import ValidationError

from ccpm.errors import PackageDecodingError, PackageEncodingError
from ccpm.models.package import Package

DEFAULT_COMPRESSION_LEVEL = 6

# Negative window bits select a raw DEFLATE stream
_RAW_DEFLATE_WBITS = -zlib.MAX_WBITS


def serialize_package(package: Package) -> bytes:
    try:
        text = json.dumps(
            package.model_dump(mode="json"),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return text.encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise PackageEncodingError(f"unable to serialize package: {exc}") from exc


def encode_package(package: Package, compression_level: int = DEFAULT_COMPRESSION_LEVEL) -> str:
    """
    Encodes a package into artifact text.

    :raises PackageEncodingError: If the package cannot be serialized or compressed.
    """
    raw = serialize_package(package)
    try:
        compressor = zlib.compressobj(compression_level, zlib.DEFLATED, _RAW_DEFLATE_WBITS)
        compressed = compressor.compress(raw) + compressor.flush()
    except (zlib.error, ValueError) as exc:
        raise PackageEncodingError(f"unable to compress package: {exc}") from exc
    return base64.b64encode(compressed).decode("ascii")


def decode_package(data: str) -> Package:
    """
    Decodes artifact text back into the package it was encoded from.

    :raises PackageDecodingError: If the text is not valid base64, the stream is not valid raw DEFLATE, or the content
    is not a package.
    """
    try:
        compressed = base64.b64decode(data.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PackageDecodingError(f"malformed artifact encoding: {exc}") from exc

    try:
        decompressor = zlib.decompressobj(_RAW_DEFLATE_WBITS)
        raw = decompressor.decompress(compressed) + decompressor.flush()
    except zlib.error as exc:
        raise PackageDecodingError(f"corrupt artifact stream: {exc}") from exc
    if not decompressor.eof or decompressor.unused_data:
        raise PackageDecodingError("corrupt artifact stream: truncated or trailing data")

    try:
        return Package.model_validate_json(raw)
    except ValidationError as exc:
        raise PackageDecodingError(f"malformed package: {exc}") from exc
