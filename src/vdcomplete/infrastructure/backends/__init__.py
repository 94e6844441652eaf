"""
Backend adapters used by the completion fetcher.

- ``LanguageServerBackend``: analysis backend over a language server connection
- ``RuntimeCompleter``: runtime backend over an execution runtime session
- ``ContextBackend``: completes words already present in the editor text
- ``RuntimeAndContextBackend``: runtime completions topped up with context ones
"""

from .analysis import LanguageServerBackend
from .combined import RuntimeAndContextBackend
from .context import ContextBackend, tokenize
from .runtime import RuntimeCompleter

__all__ = [
    "LanguageServerBackend",
    "RuntimeAndContextBackend",
    "ContextBackend",
    "tokenize",
    "RuntimeCompleter",
]
