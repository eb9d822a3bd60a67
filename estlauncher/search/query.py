"""
Query Parser - Split raw launcher text into mention and content.

Grammar:
  @mention[.sub]*  content   → mention "mention.sub", content "content"
  @mention                    → mention only, empty content
  anything else               → no mention, whole text is content

A lone "@" after the mention ("@foo @") is treated as empty content so the
user can start typing a second mention without triggering a search.
"""

import re
from dataclasses import dataclass, field

MENTION_PATTERN = re.compile(r"@([A-Za-z0-9_.]+)(?:\s+(.*))?")


@dataclass(frozen=True)
class ParsedQuery:
    """Structured form of the text typed into the search entry."""
    mention_segments: list[str] = field(default_factory=lambda: [""])
    mention_string: str = ""
    content: str = ""

    @property
    def has_mention(self) -> bool:
        return bool(self.mention_string)

    @property
    def mention_prefix(self) -> str:
        """The mention as typed ("@a.b"), or "" without a mention."""
        return f"@{self.mention_string}" if self.mention_string else ""


def parse_query(text: str) -> ParsedQuery:
    """
    Parse raw input into a ParsedQuery.

    Never raises: text without a leading mention degrades to plain content.

    Args:
        text: The raw search entry text

    Returns:
        ParsedQuery with mention segments, mention string and trimmed content
    """
    text = text or ""

    match = MENTION_PATTERN.fullmatch(text)
    if match:
        mention = match.group(1)
        content = match.group(2) or ""
    else:
        mention = ""
        content = text

    if content == "@":
        content = ""

    return ParsedQuery(
        mention_segments=mention.split("."),
        mention_string=mention,
        content=content.strip(),
    )
