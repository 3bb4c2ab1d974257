from pathlib import Path

from streamwave.core.codec import Codec
from streamwave.core.headers import HeaderRegistry
from streamwave.core.models import AudioFormat
from streamwave.file_manager import FileManager, TempPathFactory

SMALL_SFX = bytes([0x52, 0x49, 0x46, 0x46])
SMALL_VO = bytes([0xFF, 0xFB])


def small_registry() -> HeaderRegistry:
    return HeaderRegistry({AudioFormat.SFX: SMALL_SFX, AudioFormat.VO: SMALL_VO})


def make_codec(temp_dir: Path, registry: HeaderRegistry = None) -> Codec:
    temp_dir.mkdir(parents=True, exist_ok=True)
    return Codec(registry=registry, file_manager=FileManager(TempPathFactory(directory=temp_dir)))


def write_bytes(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path
