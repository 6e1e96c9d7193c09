import boto3
from pydantic import ValidationError
from slack_sdk import WebClient

import config
import notifications
from authenticator import AttributeMatchAuthenticator
from directory import IdentityStoreDirectory
from events import Event, LinkIdentityEvent, PreprocessIdentityEvent
from mapper import IdpIdHashMapper

logger = config.get_logger(service="main")

session = boto3.Session()
identity_store_client = session.client("identitystore")


def _alert_operators(outcome, rules, identity_provider) -> None:  # noqa: ANN001
    settings = config.get_settings()
    if not (settings.notify_on_ambiguous_match and settings.slack_bot_token and settings.slack_channel_id):
        return
    notifications.notify_ambiguous_match(
        slack_client=WebClient(token=settings.slack_bot_token),
        channel_id=settings.slack_channel_id,
        outcome=outcome,
        rules=rules,
        identity_provider=identity_provider,
    )


authenticator = AttributeMatchAuthenticator(on_outcome=_alert_operators)
mapper = IdpIdHashMapper()


def handle_link_identity(event: LinkIdentityEvent) -> dict:
    settings = config.get_settings()
    directory = IdentityStoreDirectory(identity_store_client, settings.identity_store_id)
    cfg = config.AuthenticatorConfig.from_host_config(event.config)
    outcome = authenticator.evaluate(cfg, event.identity.to_identity(), directory)
    return outcome.model_dump(mode="json")


def handle_preprocess_identity(event: PreprocessIdentityEvent) -> dict:
    cfg = config.MapperConfig.from_host_config(event.config)
    identity = mapper.preprocess_identity(cfg, event.identity.to_identity())
    return identity.model_dump(mode="json")


def lambda_handler(event: dict, __) -> dict:  # noqa: ANN001
    try:
        parsed_event = Event.model_validate(event).root
    except ValidationError as e:
        logger.warning("Got unexpected event:", extra={"action": event.get("action"), "exception": e})
        raise e

    match parsed_event:
        case LinkIdentityEvent():
            logger.info("Handling LinkIdentityEvent", extra={"identity_provider": parsed_event.identity.identity_provider})
            return handle_link_identity(parsed_event)

        case PreprocessIdentityEvent():
            logger.info("Handling PreprocessIdentityEvent", extra={"identity_provider": parsed_event.identity.identity_provider})
            return handle_preprocess_identity(parsed_event)
