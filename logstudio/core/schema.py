"""
Log Schema Module - Describes how a log line is split into fields

Handles:
- Regular expression and capture-group mapping for timestamp/level/namespace/message
- Validation at construction time (pattern compiles, enough capture groups)
- The default pipe-delimited schema
"""
import re
from typing import Pattern

from pydantic import BaseModel, ConfigDict, PositiveInt, field_validator, model_validator


class SchemaFields(BaseModel):
    """1-based capture group indices for each extracted field"""
    model_config = ConfigDict(frozen=True)

    timestamp: PositiveInt = 1
    level: PositiveInt = 2
    namespace: PositiveInt = 3
    message: PositiveInt = 4

    def max_index(self) -> int:
        return max(self.timestamp, self.level, self.namespace, self.message)


class LogSchema(BaseModel):
    """
    Immutable parsing schema

    A schema that fails to compile, or that references a capture group the
    pattern does not define, is rejected when it is built (pydantic raises
    ValidationError, which is a ValueError).
    """
    model_config = ConfigDict(frozen=True)

    pattern: str
    timestamp_format: str = "YYYY-MM-DD HH:mm:ss.SSS"
    separator: str = " | "
    fields: SchemaFields = SchemaFields()

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid log pattern: {e}") from e
        return value

    @model_validator(mode="after")
    def _enough_groups(self) -> "LogSchema":
        groups = re.compile(self.pattern).groups
        if groups < self.fields.max_index():
            raise ValueError(
                f"pattern defines {groups} capture groups but fields "
                f"reference group {self.fields.max_index()}"
            )
        return self

    @property
    def regex(self) -> Pattern[str]:
        """Compiled pattern (re keeps its own compile cache)"""
        return re.compile(self.pattern)


# Timestamp | Level | Namespace | Message, whitespace allowed around the pipes
DEFAULT_SCHEMA = LogSchema(
    pattern=(
        r'^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d+)'
        r'\s*\|\s*([A-Z]+)'
        r'\s*\|\s*([^|]+)'
        r'\s*\|\s*(.+)$'
    ),
)
