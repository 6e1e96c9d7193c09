import functools
from typing import Callable

import config
import entities

logger = config.get_logger(service="errors")


class LinkerError(Exception):
    ...


class ConfigurationError(LinkerError):
    ...


class RuleParseError(ConfigurationError):
    def __init__(self, entry: str, reason: str) -> None:
        super().__init__(f"{reason} in rule '{entry}'")
        self.entry = entry
        self.reason = reason


class HashComputationError(LinkerError):
    ...


def error_to_outcome(e: Exception) -> entities.Outcome:
    if isinstance(e, ConfigurationError):
        logger.error("Attribute matching is misconfigured", extra={"error": str(e)})
        return entities.Outcome.configuration_error()
    if isinstance(e, HashComputationError):
        logger.exception("Could not hash IdP attribute value", exc_info=e)
        return entities.Outcome.internal_error()
    logger.exception("Unexpected error during attribute matching", exc_info=e)
    return entities.Outcome.internal_error()


def handle_errors(fn: Callable[..., entities.Outcome]) -> Callable[..., entities.Outcome]:
    # Nothing raised inside an evaluation may reach the host login flow.
    @functools.wraps(fn)
    def wrapper(*args, **kwargs) -> entities.Outcome:  # noqa: ANN002, ANN003
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            return error_to_outcome(e)

    return wrapper
