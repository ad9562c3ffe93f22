"""
Response Parser for Multilingual Tutor
Pulls the headline translation out of a free-form LLM reply
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

NOT_FOUND = "Translation not found"

_PRIMARY_RE = re.compile(r"PRIMARY TRANSLATION[^:]*:\s*\n([^\n]+)")
_GENERIC_RE = re.compile(r"TRANSLATION:\s*\n([^\n]+)")
_LABELED_LINE_RE = re.compile(r"^[^:]+:\s*(.+)$")
_LABEL_PREFIX_RE = re.compile(r"^[^:]+:\s*")


def _labeled_section(reply: str) -> Optional[str]:
    """Stripped capture of the first labelled section that matches, else None"""
    for pattern in (_PRIMARY_RE, _GENERIC_RE):
        match = pattern.search(reply)
        if match:
            return match.group(1).strip()
    return None


def _from_plain_lines(reply: str) -> str:
    # May pick a stray heading when the model ignores the requested layout
    for line in reply.split("\n"):
        if not line.strip():
            continue
        if ":" not in line or _LABELED_LINE_RE.match(line):
            candidate = _LABEL_PREFIX_RE.sub("", line, count=1).strip()
            if candidate:
                return candidate
    return ""


def extract_primary_translation(reply: str) -> str:
    """
    Extract the primary translation line from a translate-mode reply.

    Tries the ``PRIMARY TRANSLATION`` section, then a generic
    ``TRANSLATION:`` section, then the first usable plain line. The line
    scan only runs when neither section is present; a section that is
    present but empty goes straight to the first line of the reply.
    Never raises.
    """
    extracted = _labeled_section(reply)
    if extracted is None:
        extracted = _from_plain_lines(reply)
    if extracted:
        return extracted

    first_line = reply.split("\n", 1)[0]
    if not first_line:
        logger.debug("No translation found in reply")
        return NOT_FOUND
    return first_line
