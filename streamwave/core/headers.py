"""Known header signatures for the legacy audio containers."""

import logging
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..constants import MP3_EXTENSION, WAV_EXTENSION
from .models import AudioFormat, HeadersConfig

logger = logging.getLogger("Streamwave.Headers")

SFX_HEADER_SIZE = 58
VO_HEADER_SIZE = 470

# streamsounds: an MPEG frame stub followed by zero padding, then a plain RIFF/WAVE file
SFX_HEADER = bytes.fromhex("fff360c4") + bytes(SFX_HEADER_SIZE - 4)

# streamwaves/streammusic: a RIFF/WAVE shell declaring MPEG Layer 3, then raw MP3 frames
_VO_PREAMBLE = (
    b"RIFF" + (VO_HEADER_SIZE - 8).to_bytes(4, "little") + b"WAVE"
    + b"fmt " + (30).to_bytes(4, "little")
    + bytes.fromhex(
        "5500"          # MPEG Layer 3
        "0100"          # mono
        "22560000"      # 22050 Hz
        "401f0000"      # 8000 bytes/s
        "0100"          # block align
        "0000"          # bits per sample
        "0c00"          # extra size
        "0100"          # MPEGLAYER3_ID_MPEG
        "02000000"      # padding flags
        "a000"          # block size
        "0100"          # frames per block
        "7105"          # codec delay
    )
)
VO_HEADER = (
    _VO_PREAMBLE
    + bytes(VO_HEADER_SIZE - len(_VO_PREAMBLE) - 8)
    + b"data" + (0).to_bytes(4, "little")
)

# Detection order
_PRIORITY = (AudioFormat.SFX, AudioFormat.VO)


class HeaderRegistry:
    """Immutable table of header signatures keyed by format."""

    def __init__(self, signatures: Optional[Mapping[AudioFormat, bytes]] = None):
        if signatures is None:
            signatures = {AudioFormat.SFX: SFX_HEADER, AudioFormat.VO: VO_HEADER}

        table = {}
        for fmt, data in signatures.items():
            fmt = AudioFormat(fmt)
            if fmt == AudioFormat.NONE:
                raise ValueError("AudioFormat.NONE cannot have a signature")
            if not data:
                raise ValueError(f"Signature for {fmt.value} must not be empty")
            table[fmt] = bytes(data)

        self._signatures = MappingProxyType(table)
        self._max_length = max((len(s) for s in table.values()), default=0)

    @property
    def formats(self) -> Tuple[AudioFormat, ...]:
        """Registered formats in detection order."""
        ordered = [f for f in _PRIORITY if f in self._signatures]
        ordered.extend(f for f in self._signatures if f not in ordered)
        return tuple(ordered)

    def signature_for(self, fmt: AudioFormat) -> Tuple[bytes, int]:
        """Return (bytes, length) for a format; NONE and unknown formats are (b"", 0)."""
        data = self._signatures.get(AudioFormat(fmt), b"")
        return data, len(data)

    def max_signature_length(self) -> int:
        return self._max_length

    def with_overrides(self, headers: HeadersConfig) -> "HeaderRegistry":
        """Return a registry with hex-string overrides from configuration applied."""
        table = dict(self._signatures)
        for fmt, value in ((AudioFormat.SFX, headers.sfx), (AudioFormat.VO, headers.vo)):
            if value is None:
                continue
            try:
                table[fmt] = bytes.fromhex("".join(value.split()))
            except ValueError as e:
                raise ValueError(f"Invalid hex for {fmt.value} header: {e}") from e
            logger.debug(f"Overriding {fmt.value} header ({len(table[fmt])} bytes)")
        return HeaderRegistry(table)


DEFAULT_REGISTRY = HeaderRegistry()


# Extension policy is fixed per format, not per input
ENCODE_EXTENSIONS = MappingProxyType({
    AudioFormat.SFX: WAV_EXTENSION,
    AudioFormat.VO: WAV_EXTENSION,
})

DECODE_EXTENSIONS = MappingProxyType({
    AudioFormat.SFX: WAV_EXTENSION,
    AudioFormat.VO: MP3_EXTENSION,
})


def encode_extension(fmt: AudioFormat) -> str:
    return ENCODE_EXTENSIONS.get(AudioFormat(fmt), WAV_EXTENSION)


def decode_extension(fmt: AudioFormat) -> str:
    return DECODE_EXTENSIONS.get(AudioFormat(fmt), WAV_EXTENSION)
