from .models import AudioFormat, CodecError, ErrorKind, FileOperation, TransformResult
from .headers import HeaderRegistry, DEFAULT_REGISTRY
from .codec import Codec, detect, encode, decode
from .batch import resolve_operations, run_batch, encode_all, decode_all

__all__ = [
    "AudioFormat",
    "CodecError",
    "ErrorKind",
    "FileOperation",
    "TransformResult",
    "HeaderRegistry",
    "DEFAULT_REGISTRY",
    "Codec",
    "detect",
    "encode",
    "decode",
    "resolve_operations",
    "run_batch",
    "encode_all",
    "decode_all",
]
