"""Identity preprocessor that hashes the IdP subject before it is stored.

Runs before the authenticator. Unlike the rule engine it never aborts: a
value that cannot be hashed is kept as it is.
"""

from config import CONF_DEBUG_LOG, CONF_HASH_SALT, MapperConfig, get_logger
from entities import FederatedIdentity
from errors import HashComputationError
from engine import mask_value
from hashing import hash_value
from provider import ConfigProperty, PropertyType
from salt import resolve_salt

logger = get_logger(service="mapper")

PROVIDER_ID = "idp-id-privacy-hash-mapper"
DISPLAY_TYPE = "IdP ID Privacy Hasher"
DISPLAY_CATEGORY = "Preprocessor"
HELP_TEXT = "Hashes the IdP Subject (sub) to protect PII in the federated identity table for PDPA compliance."
COMPATIBLE_PROVIDERS = ("*",)

CONFIG_PROPERTIES = (
    ConfigProperty(
        name=CONF_HASH_SALT,
        label="Hash Salt",
        help_text=(
            "Secret salt for hashing. Must match the salt in Authenticator. "
            "If empty, IDP_LINKER_HASH_SALT env will be used."
        ),
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


def _hash_or_keep(value: str, salt: str) -> str:
    try:
        return hash_value(value, salt)
    except HashComputationError as e:
        logger.exception("Error hashing IdP subject", exc_info=e)
        return value


def hash_identity(identity: FederatedIdentity, salt: str, debug: bool = False) -> FederatedIdentity:
    """Return a copy of the identity with subject and username hashed."""
    if identity.id is None:
        return identity

    if debug:
        logger.info(f"Processing original IdP subject: {mask_value(identity.id)}")
    hashed_id = _hash_or_keep(identity.id, salt)
    if debug:
        logger.info(f"Hashed subject: {hashed_id}")

    update = {"id": hashed_id}
    if identity.username is not None:
        update["username"] = _hash_or_keep(identity.username, salt)
    return identity.model_copy(update=update)


class IdpIdHashMapper:
    def preprocess_identity(self, cfg: MapperConfig, identity: FederatedIdentity) -> FederatedIdentity:  # noqa: ANN101
        if identity.id is None:
            return identity
        salt = resolve_salt(cfg.hash_salt)
        return hash_identity(identity, salt, debug=cfg.debug_logging_enabled)
