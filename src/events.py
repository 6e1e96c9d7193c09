from typing import Literal, Optional, Union

from pydantic import Field, RootModel, field_validator

from entities import FederatedIdentity
from entities.identity import attributes_from_mapping
from entities.model import BaseModel


class IdentityPayload(BaseModel):
    id: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    identity_provider: Optional[str] = None
    attributes: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("attributes", mode="before")
    @classmethod
    def normalize_attributes(cls, v: object) -> object:  # noqa: ANN101
        if isinstance(v, dict):
            return attributes_from_mapping(v)
        return v

    def to_identity(self) -> FederatedIdentity:  # noqa: ANN101
        return FederatedIdentity(**self.model_dump())


class LinkIdentityEvent(BaseModel):
    action: Literal["link_identity"]
    config: Optional[dict[str, Optional[str]]] = None
    identity: IdentityPayload


class PreprocessIdentityEvent(BaseModel):
    action: Literal["preprocess_identity"]
    config: Optional[dict[str, Optional[str]]] = None
    identity: IdentityPayload


Event = RootModel[
    Union[
        LinkIdentityEvent,
        PreprocessIdentityEvent,
    ]
]
