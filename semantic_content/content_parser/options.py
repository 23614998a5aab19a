"""Parsing options."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ParseOptions:
    """Options accepted by :func:`structure` and :func:`parse_content`.

    ``parse_code_as_json`` turns on best-effort decoding of code blocks.
    ``max_depth`` caps list/blockquote nesting; deeper content is dropped.
    """

    parse_code_as_json: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def validate(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_env(
        cls,
        *,
        parse_code_as_json: bool | None = None,
        max_depth: int | None = None,
    ) -> ParseOptions:
        """Build options, filling unset values from ``CONTENT_PARSER_*`` variables."""
        if parse_code_as_json is None:
            env_value = os.environ.get("CONTENT_PARSER_PARSE_CODE_AS_JSON", "")
            parse_code_as_json = env_value.strip().lower() in _TRUE_VALUES
        if max_depth is None:
            max_depth = resolve_max_depth(os.environ.get("CONTENT_PARSER_MAX_DEPTH"))
        return cls(parse_code_as_json=parse_code_as_json, max_depth=max_depth)


def resolve_max_depth(value: str | None) -> int:
    if value:
        try:
            return max(int(value), 1)
        except ValueError:
            logger.debug("Invalid CONTENT_PARSER_MAX_DEPTH value: %s", value)
    return DEFAULT_MAX_DEPTH
