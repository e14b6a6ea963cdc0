import hashlib

_CHUNK_SIZE = 64 * 1024


def digest_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def digest_text(text: str) -> str:
    """
    Returns the lowercase hex SHA-256 of the UTF-8 encoding of the given text.
    """
    return digest_bytes(text.encode("utf-8"))


def digest_file(path: str) -> str:
    hash = hashlib.sha256()
    with open(path, "rb") as fp:
        for chunk in iter(lambda: fp.read(_CHUNK_SIZE), b""):
            hash.update(chunk)
    return hash.hexdigest()
