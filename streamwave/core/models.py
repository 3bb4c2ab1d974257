from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AudioFormat(str, Enum):
    NONE = "None"
    SFX = "SFX"
    VO = "VO"


class ErrorKind(str, Enum):
    OPEN = "open"
    WRITE = "write"
    DELETE = "delete"
    EOF = "eof"
    FORMAT = "format"


class OperationStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CodecError(Exception):
    """Raised by the single-file boundary when a transform fails."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


def open_error_msg(path: Path) -> str:
    return f'Failed to open "{path}".'


def eof_error_msg(path: Path) -> str:
    return f'Reached end of "{path}" before data could be read.'


def write_error_msg(path: Path) -> str:
    return f'Failed to write "{path}".'


def delete_error_msg(path: Path) -> str:
    return f'Failed to delete "{path}".'


class TransformResult(BaseModel):
    """Outcome of a single encode or decode."""
    source: Path
    output: Optional[Path] = None
    format: AudioFormat = AudioFormat.NONE
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def failure(cls, source: Path, kind: ErrorKind, message: str,
                format: AudioFormat = AudioFormat.NONE) -> "TransformResult":
        return cls(source=source, format=format, error_kind=kind, error=message)

    def raise_for_error(self) -> "TransformResult":
        if not self.ok:
            raise CodecError(self.error_kind, self.error)
        return self


class FileOperation(BaseModel):
    """One unit of batch work and its outcome record."""
    path: Path
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    output: Optional[Path] = None
    status: OperationStatus = OperationStatus.PENDING

    @property
    def succeeded(self) -> bool:
        return self.status == OperationStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status == OperationStatus.FAILED

    def _check_pending(self) -> None:
        if self.status != OperationStatus.PENDING:
            raise RuntimeError(f"Operation for {self.path} already {self.status.value}")

    def mark_succeeded(self, output: Optional[Path] = None) -> None:
        self._check_pending()
        self.output = output
        self.status = OperationStatus.SUCCEEDED

    def mark_failed(self, message: str, kind: Optional[ErrorKind] = None) -> None:
        self._check_pending()
        self.error = message
        self.error_kind = kind
        self.status = OperationStatus.FAILED

    def apply(self, result: TransformResult) -> None:
        """Record a transform result on this operation."""
        if result.ok:
            self.mark_succeeded(result.output)
        else:
            self.mark_failed(result.error, result.error_kind)


class BatchSummary(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0

    @classmethod
    def from_operations(cls, operations) -> "BatchSummary":
        summary = cls()
        for op in operations:
            summary.total += 1
            if op.failed:
                summary.failed += 1
            elif op.succeeded:
                summary.succeeded += 1
        return summary


# Configuration

class LoggingConfig(BaseModel):
    debug: bool = False
    output_mode: str = "standard"
    log_dir: Optional[str] = None


class CodecConfig(BaseModel):
    temp_dir: Optional[str] = None


class HeadersConfig(BaseModel):
    # Hex strings; whitespace is ignored
    sfx: Optional[str] = None
    vo: Optional[str] = None

    @field_validator("sfx", "vo")
    @classmethod
    def _check_hex(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = "".join(value.split())
        if not value:
            raise ValueError("header override must not be empty")
        bytes.fromhex(value)
        return value


class ConfigContext(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    headers: HeadersConfig = Field(default_factory=HeadersConfig)
