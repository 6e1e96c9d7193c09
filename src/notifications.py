"""Slack alerts for outcomes that need operator attention."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from config import get_logger

if TYPE_CHECKING:
    from slack_sdk import WebClient

    from entities import Outcome
    from rules import MatchRule

logger = get_logger(service="notifications")


@dataclass
class NotificationResult:
    """Result of a notification attempt."""

    success: bool
    message: str
    error: str | None = None


def format_rules(rules: Sequence[MatchRule]) -> str:
    if not rules:
        return "N/A"
    return ", ".join(f"`{rule}`" for rule in rules)


def notify_ambiguous_match(
    slack_client: WebClient,
    channel_id: str,
    outcome: Outcome,
    rules: Sequence[MatchRule],
    identity_provider: str | None = None,
) -> NotificationResult:
    """Tell operators that several local users matched one federated identity.

    Attribute values are never included, only the rules and the candidate count.
    """
    text = (
        f":warning: *IdP Linker: Multiple Users Matched*\n"
        f"• Identity provider: {identity_provider or 'unknown'}\n"
        f"• Candidates: {outcome.candidates}\n"
        f"• Rules: {format_rules(rules)}\n"
        f"_Login was refused. Check the local accounts for duplicated attribute values._"
    )

    try:
        slack_client.chat_postMessage(channel=channel_id, text=text)
        logger.info("Sent ambiguous match notification", extra={"candidates": outcome.candidates})
        return NotificationResult(success=True, message="Notification sent successfully")
    except Exception as e:
        logger.exception(f"Failed to send ambiguous match notification: {e}")
        return NotificationResult(success=False, message="Failed to send notification", error=str(e))
