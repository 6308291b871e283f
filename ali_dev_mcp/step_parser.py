"""
Test step extraction from the Azure DevOps ``Microsoft.VSTS.TCM.Steps`` field

The field stores a small XML document in which every step holds two
``<parameterizedString>`` elements: the action followed by the expected
result. Their text is itself escaped HTML, so after parsing the document we
strip the inner markup with a blunt regex pass and split numbered expected
results into separate entries.
"""
import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .errors import ParseError
from .models import TestCaseResult, TestStep

logger = logging.getLogger(__name__)

NONE_SENTINEL = "none"
FRAGMENT_TAG = "parameterizedstring"

_TAG_PATTERN = re.compile(r"<.*?>")
_ENTITY_PATTERN = re.compile(r"&[a-zA-Z0-9#]+;")
_NUMBERED_SEGMENT_PATTERN = re.compile(r"\d+\.\s*[^\d]+?(?=\d+\.|\Z)")
_NUMBER_MARKER_PATTERN = re.compile(r"^\d+\.\s*")


def normalize(raw: str) -> str:
    """Strip all tags from ``raw``; returns ``"none"`` when nothing is left."""
    clean = _TAG_PATTERN.sub("", raw).strip()
    return clean or NONE_SENTINEL


def split_expected(raw: str) -> List[str]:
    """
    Split an expected result into its numbered entries.

    ``"1. First step2. Second step"`` -> ``["First step", "Second step"]``.
    Text without numbering comes back as a single entry.
    """
    text = _ENTITY_PATTERN.sub("", raw).strip()
    fallback = [text] if text else [NONE_SENTINEL]

    segments = [match.group(0) for match in _NUMBERED_SEGMENT_PATTERN.finditer(text)]
    if not segments:
        return fallback

    entries = [_NUMBER_MARKER_PATTERN.sub("", segment).strip() for segment in segments]
    entries = [entry for entry in entries if entry]
    return entries or fallback


def collect_fragments(markup: str) -> List[str]:
    """Text of every ``parameterizedString`` element, in document order"""
    if not isinstance(markup, str):
        raise ParseError(f"Steps markup must be text, got {type(markup).__name__}")

    try:
        # html.parser lowercases tag names, which makes the match case-insensitive
        soup = BeautifulSoup(markup, "html.parser")
    except ParserRejectedMarkup as e:
        raise ParseError(f"Could not parse steps markup: {e}") from e

    return [element.get_text().strip() for element in soup.find_all(FRAGMENT_TAG)]


def extract_steps(markup: Optional[str]) -> TestCaseResult:
    """Convert a steps document into sequentially numbered ``TestStep`` records"""
    result = TestCaseResult()
    if not markup:
        return result

    fragments = [normalize(fragment) for fragment in collect_fragments(markup)]

    for step_number, index in enumerate(range(0, len(fragments), 2), start=1):
        action = fragments[index]
        expected_raw = fragments[index + 1] if index + 1 < len(fragments) else NONE_SENTINEL
        result.steps.append(
            TestStep(
                step=step_number,
                action=action,
                expected_result=split_expected(expected_raw),
            )
        )

    logger.debug(f"Extracted {len(result.steps)} steps from {len(fragments)} fragments")
    return result
