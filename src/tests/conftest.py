import os

import boto3
import pytest

from directory import InMemoryDirectory
from entities import DirectoryUser


def pytest_sessionstart(session):  # noqa: ANN201, ARG001, ANN001
    mock_env = {
        "LOG_LEVEL": "DEBUG",
        "AWS_DEFAULT_REGION": "us-east-1",
        "IDENTITY_STORE_ID": "d-1234567890",
        "NOTIFY_ON_AMBIGUOUS_MATCH": "false",
    }
    os.environ |= mock_env
    os.environ.pop("IDP_LINKER_HASH_SALT", None)

    boto3.setup_default_session(region_name="us-east-1")


@pytest.fixture
def alice() -> DirectoryUser:
    return DirectoryUser(
        id="u-alice",
        username="alice",
        email="alice@example.com",
        attributes={"cid": ["tPkRUzkdfBxNI-Bha-pvQk5H12XVrFdtpZe0hlUntmU"], "department": ["Engineering"]},
    )


@pytest.fixture
def bob() -> DirectoryUser:
    return DirectoryUser(
        id="u-bob",
        username="bob",
        email="bob@example.com",
        attributes={"department": ["Engineering"], "employee_no": ["E-002"]},
    )


@pytest.fixture
def carol() -> DirectoryUser:
    return DirectoryUser(
        id="u-carol",
        username="carol",
        email="carol@example.com",
        attributes={"department": ["Engineering"], "employee_no": ["E-003"]},
    )


@pytest.fixture
def directory(alice, bob, carol) -> InMemoryDirectory:
    return InMemoryDirectory([alice, bob, carol])
