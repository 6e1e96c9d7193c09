"""Authenticator that links a brokered identity to an existing local user."""

from typing import Callable, Optional

from config import (
    CONF_DEBUG_LOG,
    CONF_HASH_SALT,
    CONF_MATCHING_RULES,
    DEFAULT_MATCHING_RULES,
    AuthenticatorConfig,
    get_logger,
)
from directory import UserDirectory
from engine import evaluate_rules
from entities import FederatedIdentity, Outcome, OutcomeKind
from errors import handle_errors
from provider import ConfigProperty, PropertyType
from rules import MatchRule, parse_rules
from salt import resolve_salt

logger = get_logger(service="authenticator")

PROVIDER_ID = "idp-attribute-match-authenticator"
DISPLAY_TYPE = "IdP Attribute Match Authenticator (Multi-Field)"
REFERENCE_CATEGORY = "idp-link"
HELP_TEXT = "Automatically links an IdP user to local user using multiple attributes. Logic: AND (All fields must match)."

CONFIG_PROPERTIES = (
    ConfigProperty(
        name=CONF_MATCHING_RULES,
        label="Matching Rules (CSV or Newline)",
        help_text=(
            "Format: 'idp_attr:user_attr:hash'. Example: 'citizen_id:cid:true, email:email'. "
            "Default hash is false if not specified."
        ),
        type=PropertyType.String,
        default_value=DEFAULT_MATCHING_RULES,
    ),
    ConfigProperty(
        name=CONF_HASH_SALT,
        label="Hash Salt",
        help_text="Secret salt for hashing. If empty, system environment IDP_LINKER_HASH_SALT will be used.",
        type=PropertyType.Password,
    ),
    ConfigProperty(
        name=CONF_DEBUG_LOG,
        label="Enable Debug Logging",
        help_text="Print debug information to the server log.",
        type=PropertyType.Boolean,
        default_value="false",
    ),
)

OutcomeListener = Callable[[Outcome, tuple[MatchRule, ...], Optional[str]], None]


class AttributeMatchAuthenticator:
    """Evaluates the configured matching rules for one login attempt.

    Holds no per-request state; one instance can serve concurrent requests.
    """

    def __init__(self, on_outcome: Optional[OutcomeListener] = None) -> None:  # noqa: ANN101
        self._on_outcome = on_outcome

    def evaluate(self, cfg: AuthenticatorConfig, identity: FederatedIdentity, directory: UserDirectory) -> Outcome:  # noqa: ANN101
        if cfg.matching_rules is None:
            logger.warning("No matching rules configured. Skipping authenticator")
            return Outcome.configuration_error()
        return self._evaluate(cfg, identity, directory)

    @handle_errors
    def _evaluate(self, cfg: AuthenticatorConfig, identity: FederatedIdentity, directory: UserDirectory) -> Outcome:  # noqa: ANN101
        salt = resolve_salt(cfg.hash_salt)
        rules = parse_rules(cfg.matching_rules or "")
        outcome = evaluate_rules(
            rules,
            identity.attributes,
            directory,
            salt,
            debug=cfg.debug_logging_enabled,
        )
        logger.info(
            "Attribute matching finished",
            extra={"outcome": outcome.kind, "rules": len(rules), "identity_provider": identity.identity_provider},
        )
        if outcome.kind == OutcomeKind.Ambiguous:
            self._report(outcome, rules, identity.identity_provider)
        return outcome

    def _report(self, outcome: Outcome, rules: tuple[MatchRule, ...], identity_provider: Optional[str]) -> None:  # noqa: ANN101
        # A failing listener must not change the outcome of the login attempt.
        if self._on_outcome is None:
            return
        try:
            self._on_outcome(outcome, rules, identity_provider)
        except Exception as e:
            logger.exception("Outcome listener failed", exc_info=e)
