from . import identity, outcome
from .identity import DirectoryUser, FederatedIdentity
from .model import BaseModel, json_default
from .outcome import Outcome, OutcomeKind

__all__ = [
    "identity",
    "outcome",
    "BaseModel",
    "json_default",
    "DirectoryUser",
    "FederatedIdentity",
    "Outcome",
    "OutcomeKind",
]
