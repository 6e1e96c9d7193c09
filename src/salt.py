from typing import Optional

from pydantic import SecretStr

from config import get_logger, get_salt_settings

logger = get_logger(service="salt")

SALT_ENV_VAR = "IDP_LINKER_HASH_SALT"
FALLBACK_SALT = "DEFAULT_UNSAFE_SALT_CHANGE_ME"


def resolve_salt(configured_salt: Optional[SecretStr | str] = None) -> str:
    """Resolve the salt for one evaluation.

    Precedence: configured salt, then the IDP_LINKER_HASH_SALT environment
    variable, then a publicly known fallback. The environment is read on every
    call.
    """
    if isinstance(configured_salt, SecretStr):
        configured_salt = configured_salt.get_secret_value()
    if configured_salt:
        return configured_salt

    env_salt = get_salt_settings().idp_linker_hash_salt.get_secret_value()
    if env_salt:
        return env_salt

    logger.error(f"CRITICAL: hash salt is not configured, set {SALT_ENV_VAR}. Using insecure fallback salt")
    return FALLBACK_SALT
