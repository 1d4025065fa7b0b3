"""Magic-byte signatures of model-weight file formats.

Files are recognised by their leading bytes only, independent of the
file name or extension. The set of known signatures is closed: adding
a format means adding a SignatureKind member and its bytes below.
"""

from collections.abc import Iterable
from enum import Enum


class SignatureKind(str, Enum):
    """Known model-weight container formats.

    Attributes:
        GGUF: Current llama.cpp / ggml unified format.
        GGML: Legacy unversioned ggml format (stored as "lmgg").
        GGJT: Legacy mmap-able ggml format (stored as "tjgg").
        GGLA: Legacy ggml LoRA adapter format (stored as "algg").
    """

    GGUF = "GGUF"
    GGML = "GGML"
    GGJT = "GGJT"
    GGLA = "GGLA"

    @property
    def label(self) -> str:
        """Human-readable label for display."""
        return _LABELS[self]


# Legacy ggml magics are little-endian uint32 values, hence the reversed text.
SIGNATURES: dict[bytes, SignatureKind] = {
    b"GGUF": SignatureKind.GGUF,
    b"lmgg": SignatureKind.GGML,
    b"tjgg": SignatureKind.GGJT,
    b"algg": SignatureKind.GGLA,
}

_LABELS: dict[SignatureKind, str] = {
    SignatureKind.GGUF: "GGUF model",
    SignatureKind.GGML: "GGML model (legacy)",
    SignatureKind.GGJT: "GGJT model (legacy)",
    SignatureKind.GGLA: "GGML LoRA adapter (legacy)",
}

SIGNATURE_LENGTH: int = max(len(magic) for magic in SIGNATURES)

DEFAULT_KINDS: frozenset[SignatureKind] = frozenset({SignatureKind.GGUF})


def detect(header: bytes, kinds: Iterable[SignatureKind] | None = None) -> SignatureKind | None:
    """Identify the signature at the start of a header buffer.

    Matching is exact and byte-for-byte. A buffer shorter than a
    signature simply does not match it.

    Args:
        header: Leading bytes of a file.
        kinds: Restrict detection to these kinds. All known kinds if None.

    Returns:
        The matching SignatureKind, or None if no signature matches.
    """
    allowed = set(kinds) if kinds is not None else None
    for magic, kind in SIGNATURES.items():
        if allowed is not None and kind not in allowed:
            continue
        if header[: len(magic)] == magic:
            return kind
    return None


def matches(header: bytes) -> bool:
    """Check whether a header starts with any known signature."""
    return detect(header) is not None


class SignatureDetector:
    """Signature detector restricted to a set of enabled kinds.

    Args:
        kinds: Kinds to recognise. Defaults to GGUF only.
    """

    def __init__(self, kinds: Iterable[SignatureKind] | None = None) -> None:
        self._kinds = frozenset(kinds) if kinds is not None else DEFAULT_KINDS
        if not self._kinds:
            msg = "At least one signature kind must be enabled"
            raise ValueError(msg)

    @property
    def kinds(self) -> frozenset[SignatureKind]:
        """Enabled signature kinds."""
        return self._kinds

    @property
    def header_length(self) -> int:
        """Number of leading bytes needed to classify a file."""
        return max(len(magic) for magic, kind in SIGNATURES.items() if kind in self._kinds)

    def detect(self, header: bytes) -> SignatureKind | None:
        """Identify the enabled signature at the start of ``header``."""
        return detect(header, self._kinds)

    def matches(self, header: bytes) -> bool:
        """Check whether ``header`` starts with an enabled signature."""
        return self.detect(header) is not None
