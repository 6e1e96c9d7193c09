"""Parsing of the matching rule specification.

A rule specification is a list of ``idp_attr:user_attr[:hash]`` entries
separated by commas or newlines. Rule order matters: the first rule drives the
directory lookup, the rest only narrow its result.
"""

import re
from dataclasses import dataclass

from config import get_logger
from errors import RuleParseError

logger = get_logger(service="rules")

_ENTRY_SEPARATOR = re.compile(r"[,\n]")
_FIELD_SEPARATOR = ":"


@dataclass(frozen=True)
class MatchRule:
    """Single matching rule (e.g., citizen_id:cid:true)."""

    idp_attribute: str
    user_attribute: str
    hash_before_compare: bool = False

    def __str__(self) -> str:  # noqa: ANN101
        return f"{self.idp_attribute}:{self.user_attribute}:{str(self.hash_before_compare).lower()}"


def parse_rule(entry: str) -> MatchRule:
    """Parse one trimmed, non-empty rule entry.

    Raises:
        RuleParseError: If the entry has fewer than two fields or an empty key.
    """
    parts = entry.split(_FIELD_SEPARATOR)
    if len(parts) < 2:
        logger.error(f"Invalid rule format at '{entry}'. Expected 'idp:user:hash'")
        raise RuleParseError(entry, "malformed rule entry")

    idp_attribute = parts[0].strip()
    user_attribute = parts[1].strip()
    if not idp_attribute or not user_attribute:
        logger.error(f"Keys cannot be empty in rule '{entry}'")
        raise RuleParseError(entry, "empty attribute key")

    hash_before_compare = len(parts) >= 3 and parts[2].strip().lower() == "true"
    return MatchRule(
        idp_attribute=idp_attribute,
        user_attribute=user_attribute,
        hash_before_compare=hash_before_compare,
    )


def parse_rules(raw: str) -> tuple[MatchRule, ...]:
    """Parse a whole rule specification, failing on the first bad entry."""
    rules = []
    for entry in _ENTRY_SEPARATOR.split(raw):
        trimmed = entry.strip()
        if not trimmed:
            continue
        rules.append(parse_rule(trimmed))
    return tuple(rules)
