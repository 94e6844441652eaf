"""
Merging of runtime and analysis replies into one reply.
"""

from __future__ import annotations

from vdcomplete.domain.completion import CompletionReply
from vdcomplete.logger import get_logger

logger = get_logger("completion.merger")

UNKNOWN_TYPE = "<unknown>"


def _prefix_stripper(prefix: str):
    def strip(value: str) -> str:
        if prefix and value.startswith(prefix):
            return value[len(prefix):]
        return value

    return strip


def merge_replies(
    runtime: CompletionReply,
    analysis: CompletionReply,
    line_text: str,
    unknown_type: str = UNKNOWN_TYPE,
) -> CompletionReply:
    """
    Merge a runtime reply into an analysis reply.

    The merged reply always uses the analysis range. Runtime candidates with a
    known type that the analysis backend did not propose are surfaced first,
    then the analysis matches, then the remaining runtime candidates.

    Args:
        runtime: Reply of the execution runtime
        analysis: Reply of the language analysis backend
        line_text: Text of the line holding the cursor
        unknown_type: Type the runtime reports for unclassified candidates

    Returns:
        The merged reply; the non-empty reply unchanged if the other one is empty
    """
    # If one is empty, return the other.
    if runtime.is_empty():
        return analysis
    if analysis.is_empty():
        return runtime

    logger.debug(
        f"Merging {len(analysis.matches)} analysis and {len(runtime.matches)} runtime matches"
    )

    analysis_matches = list(dict.fromkeys(analysis.matches))
    memo = set(analysis_matches)
    memo_types = analysis.type_tags

    prefix = ""
    # the runtime used a wider token; strip the extra characters so both
    # candidate sets are relative to the analysis range
    if analysis.range_start > runtime.range_start:
        prefix = line_text[analysis.range_start:analysis.range_end]
        logger.debug(f"Removing prefix {prefix!r} from runtime matches")
    strip = _prefix_stripper(prefix)

    priority: dict[str, None] = {}
    for tag in runtime.metadata.item_types:
        text = strip(tag.text)
        if text in memo_types:
            continue
        memo_types[text] = tag.type
        if tag.type != unknown_type and text not in memo:
            priority[text] = None

    trailing: dict[str, None] = {}
    for match in runtime.matches:
        text = strip(match)
        if text not in memo and text not in priority:
            trailing[text] = None

    matches = list(priority)
    matches.extend(m for m in analysis_matches if m not in priority)
    matches.extend(trailing)

    return CompletionReply.build(
        range_start=analysis.range_start,
        range_end=analysis.range_end,
        matches=matches,
        type_tags=memo_types,
    )
