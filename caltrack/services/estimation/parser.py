"""
Parsing of free-form estimator replies.
"""
import re

from caltrack.core.exceptions import EstimationParseFailure

_INTEGER_RE = re.compile(r"\+?[0-9]+")


def parse_calories(text: str | None) -> int:
    """
    Parse an estimator reply as a single non-negative base-10 integer.

    Surrounding whitespace is ignored. Empty, multi-line, decimal,
    negative or otherwise non-numeric replies raise EstimationParseFailure.
    """
    if text is None:
        raise EstimationParseFailure("Estimator returned no text")

    cleaned = text.strip()
    if not cleaned:
        raise EstimationParseFailure("Estimator returned an empty response")
    if not _INTEGER_RE.fullmatch(cleaned):
        raise EstimationParseFailure(
            "Estimator response is not an integer",
            details=cleaned[:100],
        )
    return int(cleaned)
