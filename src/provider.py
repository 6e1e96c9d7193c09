from enum import Enum
from typing import Optional

from entities import BaseModel


class PropertyType(str, Enum):
    String = "String"
    Password = "Password"
    Boolean = "boolean"


class ConfigProperty(BaseModel):
    """Describes one configurable property so the host can render a form."""

    name: str
    label: str
    help_text: str
    type: PropertyType
    default_value: Optional[str] = None

    @property
    def is_secret(self) -> bool:  # noqa: ANN101
        return self.type == PropertyType.Password


def defaults_for(properties: tuple[ConfigProperty, ...]) -> dict[str, str]:
    return {p.name: p.default_value for p in properties if p.default_value is not None}
