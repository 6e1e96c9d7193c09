from enum import Enum
from typing import Optional

from pydantic import Field

from .identity import DirectoryUser
from .model import BaseModel

POST_BROKER_LOGIN_AUTHENTICATED = "POST_BROKER_LOGIN_AUTHENTICATED"

ERROR_NO_USER_FOUND = "idp-linker-no-user-found"
ERROR_DATA_MISMATCH = "idp-linker-data-mismatch"
ERROR_MULTIPLE_USERS_FOUND = "idp-linker-multiple-users-found"


class OutcomeKind(str, Enum):
    Linked = "linked"
    Ambiguous = "ambiguous"
    NotFound = "not_found"
    ConfigurationError = "configuration_error"
    AttributeMissing = "attribute_missing"
    InternalError = "internal_error"


class Outcome(BaseModel):
    kind: OutcomeKind
    user: Optional[DirectoryUser] = None
    error_code: Optional[str] = None
    status: Optional[int] = None
    candidates: int = 0
    session_notes: dict[str, str] = Field(default_factory=dict)

    @property
    def is_success(self) -> bool:  # noqa: ANN101
        return self.kind == OutcomeKind.Linked

    @property
    def is_attempted(self) -> bool:  # noqa: ANN101
        """True when the host should fall through to alternative login steps."""
        return self.kind == OutcomeKind.AttributeMissing

    @classmethod
    def linked(cls, user: DirectoryUser) -> "Outcome":  # noqa: ANN101
        return cls(
            kind=OutcomeKind.Linked,
            user=user,
            status=200,
            candidates=1,
            session_notes={POST_BROKER_LOGIN_AUTHENTICATED: "true"},
        )

    @classmethod
    def not_found(cls, error_code: str = ERROR_NO_USER_FOUND) -> "Outcome":  # noqa: ANN101
        return cls(kind=OutcomeKind.NotFound, error_code=error_code, status=403)

    @classmethod
    def ambiguous(cls, candidates: int) -> "Outcome":  # noqa: ANN101
        return cls(kind=OutcomeKind.Ambiguous, error_code=ERROR_MULTIPLE_USERS_FOUND, status=500, candidates=candidates)

    @classmethod
    def attribute_missing(cls) -> "Outcome":  # noqa: ANN101
        return cls(kind=OutcomeKind.AttributeMissing)

    @classmethod
    def configuration_error(cls) -> "Outcome":  # noqa: ANN101
        return cls(kind=OutcomeKind.ConfigurationError, status=500)

    @classmethod
    def internal_error(cls) -> "Outcome":  # noqa: ANN101
        return cls(kind=OutcomeKind.InternalError, status=500)
