"""
Presentation-side driver of the completion pipeline.

``CompletionController`` reacts to editor changes and explicit invocations;
``CompletionContainer`` wires the pipeline for one editor.
"""

from .container import CompletionContainer
from .controller import CompletionController

__all__ = ["CompletionContainer", "CompletionController"]
