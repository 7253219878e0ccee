"""Error definitions for dllist."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_CONFIG = "E_CONFIG"
E_QUERY = "E_QUERY"
E_METADATA = "E_METADATA"
E_COMPRESS = "E_COMPRESS"
E_WRITE_IO = "E_WRITE_IO"
E_ENCODE_RANGE = "E_ENCODE_RANGE"
E_ENCODE_LENGTH = "E_ENCODE_LENGTH"
E_TABLE_ORDER = "E_TABLE_ORDER"
E_SIZE_MISMATCH = "E_SIZE_MISMATCH"
E_CRC_MISMATCH = "E_CRC_MISMATCH"
E_BUILD_FAILED = "E_BUILD_FAILED"
E_INTERNAL = "E_INTERNAL"


@dataclass
class DlListError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class ConfigurationError(DlListError):
    pass


class CollaboratorError(DlListError):
    pass


class EncodingError(DlListError):
    pass


class ProtocolError(DlListError):
    pass


class BuildFailedError(DlListError):
    pass


def config_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> ConfigurationError:
    return ConfigurationError(code=E_CONFIG, message=message, context=context)


def internal_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> DlListError:
    return DlListError(code=E_INTERNAL, message=message, context=context)


__all__ = [
    "DlListError",
    "ConfigurationError",
    "CollaboratorError",
    "EncodingError",
    "ProtocolError",
    "BuildFailedError",
    "config_error",
    "internal_error",
    "E_CONFIG",
    "E_QUERY",
    "E_METADATA",
    "E_COMPRESS",
    "E_WRITE_IO",
    "E_ENCODE_RANGE",
    "E_ENCODE_LENGTH",
    "E_TABLE_ORDER",
    "E_SIZE_MISMATCH",
    "E_CRC_MISMATCH",
    "E_BUILD_FAILED",
    "E_INTERNAL",
]
