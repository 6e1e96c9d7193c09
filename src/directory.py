"""User directory adapters consumed by the rule engine.

The engine only needs four read-only capabilities: exact lookups by email and
by username, a generic attribute search and reading the first value of a
user attribute.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional, Protocol

from botocore.exceptions import ClientError

from config import get_logger
from entities import DirectoryUser

if TYPE_CHECKING:
    from mypy_boto3_identitystore import IdentityStoreClient
    from mypy_boto3_identitystore import type_defs as idc_type_defs

logger = get_logger(service="directory")


class UserDirectory(Protocol):
    def lookup_user_by_email(self, email: str) -> Optional[DirectoryUser]:
        ...

    def lookup_user_by_username(self, username: str) -> Optional[DirectoryUser]:
        ...

    def search_users_by_attribute(self, key: str, value: str) -> list[DirectoryUser]:
        ...

    def get_first_attribute(self, user: DirectoryUser, key: str) -> Optional[str]:
        ...


class InMemoryDirectory:
    """Directory over a fixed list of users.

    All comparisons are exact by default, so hashed values stay case-significant.
    With ignore_case=True, email and username lookups fold case like a
    directory that stores them normalised. Attribute search is always exact.
    """

    def __init__(self, users: Iterable[DirectoryUser], ignore_case: bool = False) -> None:  # noqa: ANN101
        self._users = list(users)
        self._ignore_case = ignore_case

    def _normalize(self, value: str) -> str:  # noqa: ANN101
        return value.lower() if self._ignore_case else value

    @property
    def users(self) -> list[DirectoryUser]:  # noqa: ANN101
        return self._users

    def lookup_user_by_email(self, email: str) -> Optional[DirectoryUser]:  # noqa: ANN101
        wanted = self._normalize(email)
        return next((u for u in self._users if u.email and self._normalize(u.email) == wanted), None)

    def lookup_user_by_username(self, username: str) -> Optional[DirectoryUser]:  # noqa: ANN101
        wanted = self._normalize(username)
        return next((u for u in self._users if self._normalize(u.username) == wanted), None)

    def search_users_by_attribute(self, key: str, value: str) -> list[DirectoryUser]:  # noqa: ANN101
        return [u for u in self._users if u.has_attribute_value(key, value)]

    def get_first_attribute(self, user: DirectoryUser, key: str) -> Optional[str]:  # noqa: ANN101
        return user.get_first_attribute(key)


# -----------------Identity Store-----------------#


def _is_not_found(e: ClientError) -> bool:
    return e.response.get("Error", {}).get("Code") == "ResourceNotFoundException"


def _extract_user_email(user: dict) -> Optional[str]:
    """Extract primary email from user's Emails list."""
    emails = user.get("Emails", [])
    for email_entry in emails:
        if email_entry.get("Primary", False):
            return email_entry.get("Value")
    return emails[0].get("Value") if emails else None


def _extract_user_attributes(user: dict) -> dict[str, list[str]]:
    """Extract multi-valued attributes from a describe_user/list_users record.

    Custom attributes live in Extensions and external ids become
    ``externalId_<issuer>``.
    """
    attributes: dict[str, list[str]] = {}

    for field, attr_key in (("DisplayName", "displayName"), ("NickName", "nickName"), ("Title", "title"), ("UserType", "userType")):
        value = user.get(field)
        if value:
            attributes[attr_key] = [value]

    name = user.get("Name", {})
    for field, attr_key in (("GivenName", "givenName"), ("FamilyName", "familyName")):
        value = name.get(field)
        if value:
            attributes[attr_key] = [value]

    emails = [e["Value"] for e in user.get("Emails", []) if e.get("Value")]
    if emails:
        attributes["emails"] = emails

    for ext_key, ext_value in user.get("Extensions", {}).items():
        if isinstance(ext_value, dict):
            for attr_name, attr_value in ext_value.items():
                if isinstance(attr_value, str):
                    attributes[attr_name] = [attr_value]
                elif isinstance(attr_value, list):
                    attributes[attr_name] = [str(v) for v in attr_value]
        elif isinstance(ext_value, str):
            attr_name = ext_key.split(":")[-1] if ":" in ext_key else ext_key
            attributes[attr_name] = [ext_value]

    for ext_id in user.get("ExternalIds", []):
        issuer = ext_id.get("Issuer", "")
        ext_id_value = ext_id.get("Id", "")
        if issuer and ext_id_value:
            attributes[f"externalId_{issuer}"] = [ext_id_value]

    return attributes


def to_directory_user(user: dict | idc_type_defs.DescribeUserResponseTypeDef) -> DirectoryUser:
    return DirectoryUser(
        id=user["UserId"],  # type: ignore # noqa: PGH003
        username=user.get("UserName", ""),
        email=_extract_user_email(user),  # type: ignore # noqa: PGH003
        attributes=_extract_user_attributes(user),  # type: ignore # noqa: PGH003
    )


class IdentityStoreDirectory:
    """Directory backed by an AWS IAM Identity Center identity store."""

    extensions = ["aws:identitystore:enterprise"]

    def __init__(self, client: IdentityStoreClient, identity_store_id: str) -> None:  # noqa: ANN101
        self._client = client
        self._identity_store_id = identity_store_id

    def _describe_user(self, user_id: str) -> DirectoryUser:  # noqa: ANN101
        user = self._client.describe_user(
            IdentityStoreId=self._identity_store_id,
            UserId=user_id,
            Extensions=self.extensions,
        )
        return to_directory_user(user)

    def _lookup_by_unique_attribute(self, attribute_path: str, value: str) -> Optional[DirectoryUser]:  # noqa: ANN101
        try:
            response = self._client.get_user_id(
                IdentityStoreId=self._identity_store_id,
                AlternateIdentifier={"UniqueAttribute": {"AttributePath": attribute_path, "AttributeValue": value}},
            )
        except ClientError as e:
            if _is_not_found(e):
                logger.debug("No user found by unique attribute", extra={"attribute_path": attribute_path})
                return None
            raise
        return self._describe_user(response["UserId"])

    def lookup_user_by_email(self, email: str) -> Optional[DirectoryUser]:  # noqa: ANN101
        return self._lookup_by_unique_attribute("emails.value", email)

    def lookup_user_by_username(self, username: str) -> Optional[DirectoryUser]:  # noqa: ANN101
        return self._lookup_by_unique_attribute("userName", username)

    def list_users(self) -> list[DirectoryUser]:  # noqa: ANN101
        users = []
        paginator = self._client.get_paginator("list_users")
        for page in paginator.paginate(IdentityStoreId=self._identity_store_id):
            for user in page.get("Users", []):
                user_id = user.get("UserId")
                if not user_id:
                    continue
                # list_users does not return enterprise extension attributes
                users.append(self._describe_user(user_id))
        logger.debug(f"Fetched {len(users)} users from Identity Store")
        return users

    def search_users_by_attribute(self, key: str, value: str) -> list[DirectoryUser]:  # noqa: ANN101
        # Identity Store cannot filter on arbitrary attributes, so this scans.
        return [u for u in self.list_users() if u.has_attribute_value(key, value)]

    def get_first_attribute(self, user: DirectoryUser, key: str) -> Optional[str]:  # noqa: ANN101
        return user.get_first_attribute(key)
