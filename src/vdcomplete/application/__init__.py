"""
Completion pipeline: request building, trigger gating, fetching and merging.
"""

from .fetcher import CompletionFetcher, build_analysis_reply
from .merger import merge_replies
from .request_builder import RequestBuilder
from .trigger_policy import TriggerPolicy

__all__ = [
    "CompletionFetcher",
    "build_analysis_reply",
    "merge_replies",
    "RequestBuilder",
    "TriggerPolicy",
]
