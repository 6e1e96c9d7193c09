import os
from typing import Optional

from aws_lambda_powertools import Logger
from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

import entities

CONF_MATCHING_RULES = "matching.rules"
CONF_HASH_SALT = "idp.hash.salt"
CONF_DEBUG_LOG = "debug.logging.enabled"

DEFAULT_MATCHING_RULES = "identification_no:identification_no:true"


def get_logger(service: Optional[str] = None, level: Optional[str] = None) -> Logger:
    kwargs = {
        "json_default": entities.json_default,
        "level": level or os.environ.get("LOG_LEVEL", "INFO"),
    }
    if service:
        kwargs["service"] = service
    return Logger(**kwargs)


def parse_host_bool(value: object) -> bool:
    # The host stores booleans as strings; only "true" (any case) is true.
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() == "true"


class MapperConfig(entities.BaseModel):
    """Configuration of the subject-hashing mapper, as stored by the host."""

    hash_salt: SecretStr = Field(default=SecretStr(""), validation_alias=AliasChoices(CONF_HASH_SALT, "hash_salt"))
    debug_logging_enabled: bool = Field(default=False, validation_alias=AliasChoices(CONF_DEBUG_LOG, "debug_logging_enabled"))

    @field_validator("hash_salt", mode="before")
    @classmethod
    def none_salt_is_empty(cls, v: object) -> object:  # noqa: ANN101
        return "" if v is None else v

    @field_validator("debug_logging_enabled", mode="before")
    @classmethod
    def parse_debug_flag(cls, v: object) -> bool:  # noqa: ANN101
        return parse_host_bool(v)

    @classmethod
    def from_host_config(cls, raw: Optional[dict]) -> "MapperConfig":  # noqa: ANN101
        return cls.model_validate(raw or {})


class AuthenticatorConfig(MapperConfig):
    """Configuration of the attribute-match authenticator.

    `matching_rules` stays None when the host has no value for it, which is
    different from an empty string: the first is a configuration error, the
    second is a rule specification with no rules.
    """

    matching_rules: Optional[str] = Field(default=None, validation_alias=AliasChoices(CONF_MATCHING_RULES, "matching_rules"))


class SaltSettings(BaseSettings):
    model_config = SettingsConfigDict(frozen=True)

    idp_linker_hash_salt: SecretStr = SecretStr("")


class LinkerSettings(BaseSettings):
    model_config = SettingsConfigDict(frozen=True)

    log_level: str = "INFO"

    identity_store_id: str = ""

    notify_on_ambiguous_match: bool = False
    slack_bot_token: str = ""
    slack_channel_id: str = ""


def get_settings() -> LinkerSettings:
    # Not cached: env changes apply to the next request.
    return LinkerSettings()


def get_salt_settings() -> SaltSettings:
    # Holds only the salt, so unrelated settings cannot break hashing.
    return SaltSettings()
