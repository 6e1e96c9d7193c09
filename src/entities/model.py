import dataclasses
import enum

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, SecretStr


class BaseModel(PydanticBaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


def json_default(o: object) -> str | dict | list:
    """Serializer for log records; secrets never leave in plain form."""
    if isinstance(o, SecretStr):
        return str(o)
    if isinstance(o, PydanticBaseModel):
        return o.model_dump(mode="json")
    elif dataclasses.is_dataclass(o) and not isinstance(o, type):
        return dataclasses.asdict(o)
    elif isinstance(o, enum.Enum):
        return o.value
    elif isinstance(o, (set, frozenset, tuple)):
        return list(o)
    return str(o)
