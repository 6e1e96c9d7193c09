from unittest.mock import MagicMock, patch

import pytest

import authenticator as authenticator_module
from authenticator import CONFIG_PROPERTIES, AttributeMatchAuthenticator
from config import AuthenticatorConfig
from entities import FederatedIdentity, OutcomeKind
from provider import defaults_for


@pytest.fixture
def identity() -> FederatedIdentity:
    return FederatedIdentity(
        id="alice-sub",
        username="alice",
        identity_provider="thaid",
        attributes={"citizen_id": ["123456789012"], "email": ["alice@example.com"], "department": ["Engineering"]},
    )


def make_config(**host_config: str | None) -> AuthenticatorConfig:
    return AuthenticatorConfig.from_host_config(host_config)


def test_missing_rules_is_configuration_error_before_any_lookup(identity):
    directory = MagicMock()
    with patch("authenticator.resolve_salt") as mock_resolve_salt:
        outcome = AttributeMatchAuthenticator().evaluate(make_config(), identity, directory)

    assert outcome.kind == OutcomeKind.ConfigurationError
    assert outcome.status == 500
    mock_resolve_salt.assert_not_called()
    assert directory.method_calls == []


def test_hashed_and_plain_rules_link_user(identity, directory, alice):
    cfg = make_config(**{"matching.rules": "citizen_id:cid:true, email:email", "idp.hash.salt": "PEPPER"})

    outcome = AttributeMatchAuthenticator().evaluate(cfg, identity, directory)

    assert outcome.kind == OutcomeKind.Linked
    assert outcome.user == alice


def test_environment_salt_is_used_when_none_configured(identity, directory, alice, monkeypatch):
    monkeypatch.setenv("IDP_LINKER_HASH_SALT", "PEPPER")
    cfg = make_config(**{"matching.rules": "citizen_id:cid:true"})

    outcome = AttributeMatchAuthenticator().evaluate(cfg, identity, directory)

    assert outcome.user == alice


def test_malformed_rule_aborts_with_configuration_error(identity, directory):
    spy = MagicMock(wraps=directory)
    cfg = make_config(**{"matching.rules": "email:email, onlyonefield", "idp.hash.salt": "PEPPER"})

    outcome = AttributeMatchAuthenticator().evaluate(cfg, identity, spy)

    assert outcome.kind == OutcomeKind.ConfigurationError
    assert spy.method_calls == []


def test_empty_rules_never_link(identity, directory):
    spy = MagicMock(wraps=directory)
    cfg = make_config(**{"matching.rules": "", "idp.hash.salt": "PEPPER"})

    outcome = AttributeMatchAuthenticator().evaluate(cfg, identity, spy)

    assert outcome.kind == OutcomeKind.NotFound
    assert spy.method_calls == []


def test_hash_failure_is_internal_error(identity, directory):
    cfg = make_config(**{"matching.rules": "citizen_id:cid:true", "idp.hash.salt": "PEPPER"})

    with patch("hashing.hashlib.new", side_effect=ValueError("unsupported hash type")):
        outcome = AttributeMatchAuthenticator().evaluate(cfg, identity, directory)

    assert outcome.kind == OutcomeKind.InternalError
    assert outcome.status == 500


def test_directory_failure_is_internal_error(identity):
    directory = MagicMock()
    directory.search_users_by_attribute.side_effect = RuntimeError("directory unavailable")
    cfg = make_config(**{"matching.rules": "department:department", "idp.hash.salt": "PEPPER"})

    outcome = AttributeMatchAuthenticator().evaluate(cfg, identity, directory)

    assert outcome.kind == OutcomeKind.InternalError


def test_ambiguous_outcome_is_reported_to_listener(identity, directory):
    listener = MagicMock()
    cfg = make_config(**{"matching.rules": "department:department", "idp.hash.salt": "PEPPER"})

    outcome = AttributeMatchAuthenticator(on_outcome=listener).evaluate(cfg, identity, directory)

    assert outcome.kind == OutcomeKind.Ambiguous
    listener.assert_called_once()
    reported_outcome, reported_rules, identity_provider = listener.call_args.args
    assert reported_outcome == outcome
    assert [str(r) for r in reported_rules] == ["department:department:false"]
    assert identity_provider == "thaid"


def test_failing_listener_does_not_change_outcome(identity, directory):
    listener = MagicMock(side_effect=RuntimeError("slack down"))
    cfg = make_config(**{"matching.rules": "department:department", "idp.hash.salt": "PEPPER"})

    with patch.object(authenticator_module.logger, "exception") as mock_exception:
        outcome = AttributeMatchAuthenticator(on_outcome=listener).evaluate(cfg, identity, directory)

    assert outcome.kind == OutcomeKind.Ambiguous
    assert outcome.candidates == 3
    listener.assert_called_once()
    mock_exception.assert_called_once()


def test_invalid_unrelated_setting_does_not_break_evaluation(identity, directory, alice, monkeypatch):
    monkeypatch.setenv("NOTIFY_ON_AMBIGUOUS_MATCH", "maybe")
    monkeypatch.setenv("IDP_LINKER_HASH_SALT", "PEPPER")
    cfg = make_config(**{"matching.rules": "citizen_id:cid:true"})

    outcome = AttributeMatchAuthenticator().evaluate(cfg, identity, directory)

    assert outcome.kind == OutcomeKind.Linked
    assert outcome.user == alice


def test_listener_not_called_for_other_outcomes(identity, directory):
    listener = MagicMock()
    cfg = make_config(**{"matching.rules": "email:email", "idp.hash.salt": "PEPPER"})

    AttributeMatchAuthenticator(on_outcome=listener).evaluate(cfg, identity, directory)

    listener.assert_not_called()


def test_debug_logging_never_logs_raw_value(identity, directory):
    cfg = make_config(**{"matching.rules": "email:email", "idp.hash.salt": "PEPPER", "debug.logging.enabled": "true"})

    with patch("engine.logger") as mock_logger:
        AttributeMatchAuthenticator().evaluate(cfg, identity, directory)

    messages = " ".join(str(c.args[0]) for c in mock_logger.info.call_args_list)
    assert "alice@example.com" not in messages
    assert "ali*****com" in messages


def test_config_properties_defaults():
    assert defaults_for(CONFIG_PROPERTIES) == {
        "matching.rules": "identification_no:identification_no:true",
        "debug.logging.enabled": "false",
    }
    assert [p.name for p in CONFIG_PROPERTIES if p.is_secret] == ["idp.hash.salt"]
    assert authenticator_module.PROVIDER_ID == "idp-attribute-match-authenticator"
