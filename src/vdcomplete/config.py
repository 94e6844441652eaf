"""Configuration for the completion pipeline."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

DEFAULT_SUPPRESSED_TOKEN_TYPES = frozenset({"string", "comment"})


@dataclass
class CompletionConfig:
    """Configuration for completion brokering."""

    # Lexical categories in which completion is never requested
    suppressed_token_types: frozenset[str] = field(default=DEFAULT_SUPPRESSED_TOKEN_TYPES)

    # Backend timeouts (seconds)
    analysis_timeout: float = 5.0
    runtime_timeout: float = 5.0

    # Type reported by runtimes for candidates they cannot classify
    unknown_type: str = "<unknown>"

    # Logging
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.suppressed_token_types = frozenset(self.suppressed_token_types)
        if self.analysis_timeout <= 0 or self.runtime_timeout <= 0:
            raise ValueError("Backend timeouts must be positive")


def _parse_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_completion_config() -> CompletionConfig:
    """Load completion configuration from environment variables (and ``.env``)."""
    load_dotenv()

    suppress_str = os.getenv("VDCOMPLETE_SUPPRESS_IN")
    if suppress_str is None:
        suppressed = DEFAULT_SUPPRESSED_TOKEN_TYPES
    else:
        # An empty value disables suppression entirely
        suppressed = frozenset(t.strip() for t in suppress_str.split(",") if t.strip())

    return CompletionConfig(
        suppressed_token_types=suppressed,
        analysis_timeout=_parse_float("VDCOMPLETE_ANALYSIS_TIMEOUT", 5.0),
        runtime_timeout=_parse_float("VDCOMPLETE_RUNTIME_TIMEOUT", 5.0),
        log_level=os.getenv("VDCOMPLETE_LOG_LEVEL", "INFO").upper(),
    )
