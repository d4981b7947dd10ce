"""
Helpers for turning free-form recipe instructions into numbered steps.

Some recipes come back from the provider with their instructions as a single
HTML blob (``<ol><li>...</li></ol>``, ``<p>`` paragraphs, ``<br>`` line breaks)
instead of an analyzed step list. These helpers split such text into
individual steps and number them from 1.
"""

import html
import re
from typing import List

# Tags that start a new line of text
_LINE_BREAK_TAGS = re.compile(r"<\s*(br|li|p)\b[^>]*>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")
# Leading "1." / "2)" enumerations already present in the text
_LEADING_NUMBER = re.compile(r"^\d+[.)]\s*")

# Lines this short are leftovers of markup, not real steps
MIN_STEP_LENGTH = 4


def split_instruction_text(text: str) -> List[str]:
    """
    Split HTML or plain-text instructions into step strings.

    Args:
        text: Instruction text, possibly containing HTML markup

    Returns:
        List of step texts in reading order, with markup, entities and
        leading enumerations removed

    Examples:
        >>> split_instruction_text("<ol><li>Boil water.</li><li>Add pasta.</li></ol>")
        ['Boil water.', 'Add pasta.']
        >>> split_instruction_text("1. Preheat the oven\\n2) Bake 20 minutes")
        ['Preheat the oven', 'Bake 20 minutes']
    """
    if not text:
        return []

    clean = _LINE_BREAK_TAGS.sub("\n", text)
    clean = _ANY_TAG.sub("", clean)
    clean = html.unescape(clean).replace("\xa0", " ")

    steps: List[str] = []
    for line in clean.splitlines():
        line = line.strip()
        if len(line) < MIN_STEP_LENGTH:
            continue
        line = _LEADING_NUMBER.sub("", line).strip()
        if line:
            steps.append(line)
    return steps


def number_steps(steps: List[str]) -> List[dict]:
    """Number step texts from 1 as ``{"number": n, "step": text}`` dicts, skipping blanks."""
    numbered: List[dict] = []
    for text in steps:
        text = (text or "").strip()
        if not text:
            continue
        numbered.append({"number": len(numbered) + 1, "step": text})
    return numbered
