from typing import Mapping, Optional

from pydantic import Field

from .model import BaseModel

EMAIL = "email"
USERNAME = "username"


class FederatedIdentity(BaseModel):
    """Identity asserted by the external IdP for one login attempt."""

    id: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    identity_provider: Optional[str] = None
    attributes: dict[str, list[str]] = Field(default_factory=dict)

    def get_first_attribute(self, key: str) -> Optional[str]:
        values = self.attributes.get(key)
        if not values:
            return None
        return values[0]


class DirectoryUser(BaseModel):
    """Local account as returned by a user directory."""

    id: str
    username: str
    email: Optional[str] = None
    attributes: dict[str, list[str]] = Field(default_factory=dict)

    def get_first_attribute(self, key: str) -> Optional[str]:
        # username and email are first-class fields but also readable as attributes
        if key == USERNAME:
            return self.username
        if key == EMAIL:
            return self.email
        values = self.attributes.get(key)
        if not values:
            return None
        return values[0]

    def has_attribute_value(self, key: str, value: str) -> bool:
        if key == USERNAME:
            return self.username == value
        if key == EMAIL:
            return self.email == value
        return value in self.attributes.get(key, [])


def attributes_from_mapping(raw: Mapping[str, object]) -> dict[str, list[str]]:
    """Normalise an attribute bag where values may be scalars or lists."""
    attributes: dict[str, list[str]] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            attributes[key] = [str(v) for v in value if v is not None]
        else:
            attributes[key] = [str(value)]
    return attributes
