"""Rule evaluation engine for linking a federated identity to a local user.

Rules are evaluated in order. The first rule searches the directory, every
later rule filters the users found so far in memory. Evaluation stops at the
first rule that leaves no candidates.
"""

from typing import Mapping, Optional, Sequence

from config import get_logger
from directory import UserDirectory
from entities import DirectoryUser, Outcome
from entities.identity import EMAIL, USERNAME
from entities.outcome import ERROR_DATA_MISMATCH, ERROR_NO_USER_FOUND
from hashing import hash_value
from rules import MatchRule

logger = get_logger(service="engine")


_MASK_PREFIX_LEN = 3
_MASK_SUFFIX_LEN = 3
_MIN_LENGTH_FOR_MASKING = _MASK_PREFIX_LEN + _MASK_SUFFIX_LEN


def mask_value(value: str) -> str:
    """Mask a raw IdP value for debug logging.

    Args:
        value: The value to mask.

    Returns:
        Masked value like "jan*****com", or all stars if too short.
    """
    if len(value) <= _MIN_LENGTH_FOR_MASKING:
        return "*" * len(value)
    return f"{value[:_MASK_PREFIX_LEN]}*****{value[-_MASK_SUFFIX_LEN:]}"


def first_attribute_value(attributes: Mapping[str, Sequence[str]], key: str) -> Optional[str]:
    """Return the first value of an IdP attribute; later values are ignored."""
    values = attributes.get(key)
    if not values:
        return None
    return str(values[0])


def _initial_candidates(directory: UserDirectory, rule: MatchRule, match_value: str) -> list[DirectoryUser]:
    # Key names are matched case-insensitively against the indexed fields.
    user_key = rule.user_attribute.lower()
    found = None
    if user_key == EMAIL:
        found = directory.lookup_user_by_email(match_value)
    elif user_key == USERNAME:
        found = directory.lookup_user_by_username(match_value)
    if found is not None:
        return [found]
    return list(directory.search_users_by_attribute(rule.user_attribute, match_value))


def _narrow_candidates(
    directory: UserDirectory, candidates: list[DirectoryUser], rule: MatchRule, match_value: str
) -> list[DirectoryUser]:
    # Values are compared case-sensitively.
    return [user for user in candidates if directory.get_first_attribute(user, rule.user_attribute) == match_value]


def resolve_decision(candidates: Optional[list[DirectoryUser]], debug: bool = False) -> Outcome:
    """Turn the final candidate set into an outcome.

    None means no rule was evaluated and is never a successful link.
    """
    if not candidates:
        if debug:
            logger.info("No user matched all criteria")
        return Outcome.not_found(ERROR_NO_USER_FOUND)
    if len(candidates) == 1:
        user = candidates[0]
        if debug:
            logger.info(f"Exactly one user matched: {user.username}")
        return Outcome.linked(user)
    logger.error(
        f"Multiple users ({len(candidates)}) matched the criteria. Possible data inconsistency",
        extra={"user_ids": [u.id for u in candidates]},
    )
    return Outcome.ambiguous(len(candidates))


def evaluate_rules(
    rules: Sequence[MatchRule],
    attributes: Mapping[str, Sequence[str]],
    directory: UserDirectory,
    salt: str,
    debug: bool = False,
) -> Outcome:
    """Evaluate matching rules against the directory.

    Args:
        rules: Parsed rules, in evaluation order.
        attributes: Attributes of the federated identity.
        directory: User directory to search.
        salt: Salt used for rules that hash before comparing.
        debug: Whether to trace every comparison.

    Returns:
        The terminal outcome of this evaluation.

    Raises:
        HashComputationError: If a value could not be hashed.
    """
    candidates: Optional[list[DirectoryUser]] = None

    for position, rule in enumerate(rules, start=1):
        value_from_idp = first_attribute_value(attributes, rule.idp_attribute)
        if not value_from_idp:
            if debug:
                logger.info(f"Attribute [{rule.idp_attribute}] not found in IdP response. Skipping")
            return Outcome.attribute_missing()

        match_value = hash_value(value_from_idp, salt) if rule.hash_before_compare else value_from_idp
        if debug:
            logger.info(
                f"{'Search' if candidates is None else 'And search'} user with {rule.user_attribute} = "
                f"{match_value if rule.hash_before_compare else mask_value(match_value)}",
                extra={"rule": str(rule), "position": position},
            )

        if candidates is None:
            found = _initial_candidates(directory, rule, match_value)
            if not found:
                if debug:
                    logger.info(f"No user found with {rule.user_attribute}. Stopping")
                return Outcome.not_found(ERROR_NO_USER_FOUND)
        else:
            found = _narrow_candidates(directory, candidates, rule, match_value)
            if not found:
                if debug:
                    logger.info(f"Rule {position} failed on {rule.user_attribute}. No users left. Stopping")
                return Outcome.not_found(ERROR_DATA_MISMATCH)

        candidates = found
        logger.debug("Candidates after rule", extra={"position": position, "candidates": len(candidates)})

    return resolve_decision(candidates, debug=debug)
