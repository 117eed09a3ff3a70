# structmatch/errors.py
"""
Error types for the structmatch adapters and configuration.

The matcher engine itself never raises: a missing struct, an unsatisfied
matcher or a recursive lookup into a non-struct field are all plain
``False``.  The classes below cover the boundary only, where a type model
is loaded or a configuration is read.

Error Hierarchy:
────────────────
    StructMatchError (base)
    ├── ModelError            - malformed type-model documents
    │   ├── TypeRefSyntaxError - unparsable type reference text
    │   └── UnknownTypeError   - reference to an undeclared type
    ├── ConfigError           - invalid configuration values
    └── UnknownRoleError      - catalog lookup miss (also a KeyError)

Error Codes:
────────────
Each error carries a code of the form MODEL-XXXX, CONFIG-XXXX or
CATALOG-XXXX.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Any, Dict, Optional


@unique
class ErrorCode(Enum):
    """Structured error codes; the value is the printable code."""

    # Type-model documents
    MODEL_NOT_FOUND = "MODEL-0001"
    MODEL_INVALID_JSON = "MODEL-0002"
    MODEL_BAD_LAYOUT = "MODEL-0003"
    MODEL_BAD_KIND = "MODEL-0004"
    MODEL_BAD_FIELD = "MODEL-0005"
    MODEL_TYPEREF_SYNTAX = "MODEL-0100"
    MODEL_UNKNOWN_TYPE = "MODEL-0200"

    # Configuration
    CONFIG_BAD_VALUE = "CONFIG-0001"

    # Catalog
    CATALOG_UNKNOWN_ROLE = "CATALOG-0001"

    @property
    def category(self) -> str:
        return self.value.split("-", 1)[0]


class StructMatchError(Exception):
    """Base class for every structmatch error."""

    default_code: ErrorCode = ErrorCode.MODEL_BAD_LAYOUT

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        hint: Optional[str] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        text = f"[{self.code.value}] {self.message}"
        if self.hint:
            text += f" (hint: {self.hint})"
        return text

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "code": self.code.value,
            "kind": type(self).__name__,
            "message": self.message,
        }
        if self.hint:
            d["hint"] = self.hint
        return d


class ModelError(StructMatchError):
    """A type-model document could not be understood."""

    default_code = ErrorCode.MODEL_BAD_LAYOUT

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        hint: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message, code, hint)


class TypeRefSyntaxError(ModelError):
    """A type reference does not follow the type-reference notation."""

    default_code = ErrorCode.MODEL_TYPEREF_SYNTAX

    def __init__(self, text: str, position: int = 0, **kwargs: Any) -> None:
        self.text = text
        self.position = position
        super().__init__(
            f"invalid type reference {text!r} at offset {position}", **kwargs
        )


class UnknownTypeError(ModelError):
    """A type reference names a type the model does not declare."""

    default_code = ErrorCode.MODEL_UNKNOWN_TYPE

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.name = name
        super().__init__(f"undeclared type {name!r}", **kwargs)


class ConfigError(StructMatchError):
    """A configuration value is invalid."""

    default_code = ErrorCode.CONFIG_BAD_VALUE


class UnknownRoleError(StructMatchError, KeyError):
    """A catalog role name is not registered."""

    default_code = ErrorCode.CATALOG_UNKNOWN_ROLE

    def __init__(self, role: str, known: Optional[list] = None) -> None:
        self.role = role
        hint = f"known roles: {', '.join(known)}" if known else None
        super().__init__(f"unknown field role {role!r}", hint=hint)

    def __str__(self) -> str:
        return StructMatchError.__str__(self)
