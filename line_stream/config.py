"""Options accepted by LineStream."""

import codecs
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from .exceptions import ConfigurationError

# camelCase spellings accepted for compatibility with byline option objects
_OPTION_ALIASES = {
    "keepEmptyLines": "keep_empty_lines",
}


def validate_encoding(encoding: str) -> str:
    """Return the canonical codec name for `encoding`.

    Raises:
        ConfigurationError: If the codec is unknown
    """
    if not isinstance(encoding, str) or not encoding:
        raise ConfigurationError(f"Encoding must be a non-empty string, got {encoding!r}")
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        raise ConfigurationError(f"Unknown encoding: {encoding}")


@dataclass(frozen=True)
class LineStreamConfig:
    keep_empty_lines: bool = False
    encoding: Optional[str] = None
    errors: str = "strict"

    def __post_init__(self) -> None:
        if not isinstance(self.keep_empty_lines, bool):
            raise ConfigurationError(
                f"keep_empty_lines must be a bool, got {type(self.keep_empty_lines).__name__}"
            )
        if self.encoding is not None:
            object.__setattr__(self, "encoding", validate_encoding(self.encoding))
        try:
            codecs.lookup_error(self.errors)
        except (LookupError, TypeError):
            raise ConfigurationError(f"Unknown decoding error handler: {self.errors!r}")

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "LineStreamConfig":
        """Build a config from an options mapping and/or keyword overrides.

        Args:
            options: Mapping such as ``{"keepEmptyLines": True}``
            **kwargs: Same keys as keywords; these win over `options`

        Raises:
            ConfigurationError: For unknown keys or invalid values
        """
        if options is not None and not isinstance(options, Mapping):
            raise ConfigurationError(f"Options must be a mapping, got {type(options).__name__}")

        known = {f.name for f in fields(cls)}
        merged = {}
        for key, value in list((options or {}).items()) + list(kwargs.items()):
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown option: {key}")
            merged[name] = value
        return cls(**merged)
