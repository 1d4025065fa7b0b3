"""Unit tests for magic-byte signature detection."""

import pytest
from ggufclean.core.signatures import (
    DEFAULT_KINDS,
    SIGNATURE_LENGTH,
    SIGNATURES,
    SignatureDetector,
    SignatureKind,
    detect,
    matches,
)


class TestDetect:
    """Tests for the detect and matches functions."""

    def test_gguf_header_matches(self) -> None:
        """A buffer starting with GGUF is detected."""
        assert detect(b"GGUF\x03\x00\x00\x00") == SignatureKind.GGUF
        assert matches(b"GGUF") is True

    def test_exact_length_buffer_matches(self) -> None:
        """A buffer that is exactly the signature matches."""
        assert detect(b"GGUF") == SignatureKind.GGUF

    def test_short_buffer_does_not_match(self) -> None:
        """A buffer shorter than the signature never matches."""
        assert detect(b"GGU") is None
        assert matches(b"") is False

    def test_matching_is_case_sensitive(self) -> None:
        """No case folding is applied."""
        assert detect(b"gguf") is None
        assert detect(b"Gguf") is None

    def test_signature_must_be_at_start(self) -> None:
        """The signature is only recognised at offset zero."""
        assert detect(b"\x00GGUF") is None

    @pytest.mark.parametrize(
        ("header", "kind"),
        [
            (b"lmgg\x00\x00", SignatureKind.GGML),
            (b"tjgg\x01\x00", SignatureKind.GGJT),
            (b"algg\x01\x00", SignatureKind.GGLA),
        ],
    )
    def test_legacy_kinds_detected(self, header: bytes, kind: SignatureKind) -> None:
        """Legacy ggml magics are recognised when no restriction is given."""
        assert detect(header) == kind

    def test_restricted_kinds(self) -> None:
        """Kinds outside the allowed set are not reported."""
        assert detect(b"tjgg", kinds=[SignatureKind.GGUF]) is None
        assert detect(b"GGUF", kinds=[SignatureKind.GGUF]) == SignatureKind.GGUF


class TestSignatureTable:
    """Tests for the module-level signature constants."""

    def test_signature_length_is_longest_magic(self) -> None:
        """SIGNATURE_LENGTH covers every known signature."""
        assert SIGNATURE_LENGTH == 4
        assert all(len(magic) <= SIGNATURE_LENGTH for magic in SIGNATURES)

    def test_every_kind_has_a_signature(self) -> None:
        """Each SignatureKind is reachable from the table."""
        assert set(SIGNATURES.values()) == set(SignatureKind)

    def test_default_is_gguf_only(self) -> None:
        """Only GGUF is enabled by default."""
        assert DEFAULT_KINDS == frozenset({SignatureKind.GGUF})

    def test_labels(self) -> None:
        """Every kind has a display label."""
        assert SignatureKind.GGUF.label == "GGUF model"
        assert "legacy" in SignatureKind.GGJT.label


class TestSignatureDetector:
    """Tests for SignatureDetector."""

    def test_defaults_to_gguf(self) -> None:
        """A detector without arguments only recognises GGUF."""
        detector = SignatureDetector()
        assert detector.kinds == DEFAULT_KINDS
        assert detector.matches(b"GGUF....") is True
        assert detector.matches(b"tjgg....") is False

    def test_all_kinds(self) -> None:
        """A detector for every kind recognises legacy files too."""
        detector = SignatureDetector(list(SignatureKind))
        assert detector.detect(b"algg") == SignatureKind.GGLA

    def test_header_length(self) -> None:
        """The detector asks for exactly as many bytes as its signatures need."""
        assert SignatureDetector().header_length == 4

    def test_empty_kinds_rejected(self) -> None:
        """At least one kind must be enabled."""
        with pytest.raises(ValueError, match="At least one"):
            SignatureDetector([])
