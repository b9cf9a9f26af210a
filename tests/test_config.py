from __future__ import annotations

import pytest

from shopdetect.config import DEFAULT_USER_AGENT, DetectorConfig, RedirectPolicy, config_from_env


def test_defaults() -> None:
    cfg = DetectorConfig()
    assert cfg.max_workers == 10
    assert cfg.queue_capacity == 200
    assert cfg.block_when_full is True
    assert cfg.request_timeout_seconds == 12.0
    assert cfg.connect_timeout_seconds == 8.0
    assert cfg.redirect_policy is RedirectPolicy.NORMAL
    assert cfg.user_agent == DEFAULT_USER_AGENT
    assert cfg.timeout == (8.0, 12.0)


def test_config_from_env_overrides_and_blank_values() -> None:
    env = {
        "SHOPDETECT_MAX_WORKERS": "4",
        "SHOPDETECT_QUEUE_CAPACITY": " 50 ",
        "SHOPDETECT_BLOCK_WHEN_FULL": "no",
        "SHOPDETECT_REQUEST_TIMEOUT_SECONDS": "3.5",
        "SHOPDETECT_CONNECT_TIMEOUT_SECONDS": "",
        "SHOPDETECT_REDIRECT_POLICY": "NEVER",
        "SHOPDETECT_USER_AGENT": "   ",
    }
    cfg = config_from_env(env)
    assert cfg.max_workers == 4
    assert cfg.queue_capacity == 50
    assert cfg.block_when_full is False
    assert cfg.request_timeout_seconds == 3.5
    assert cfg.connect_timeout_seconds == 8.0
    assert cfg.redirect_policy is RedirectPolicy.NEVER
    assert cfg.user_agent == DEFAULT_USER_AGENT


def test_config_from_env_uses_given_default() -> None:
    base = DetectorConfig(max_workers=2, user_agent="TestBot/1.0")
    cfg = config_from_env({}, default=base)
    assert cfg == base


@pytest.mark.parametrize(
    "env",
    [
        {"SHOPDETECT_MAX_WORKERS": "0"},
        {"SHOPDETECT_MAX_WORKERS": "many"},
        {"SHOPDETECT_QUEUE_CAPACITY": "-1"},
        {"SHOPDETECT_REQUEST_TIMEOUT_SECONDS": "0"},
        {"SHOPDETECT_BLOCK_WHEN_FULL": "maybe"},
        {"SHOPDETECT_REDIRECT_POLICY": "sometimes"},
    ],
)
def test_config_from_env_rejects_bad_values(env) -> None:
    with pytest.raises(ValueError):
        config_from_env(env)


def test_redirect_policy_accepts_strings() -> None:
    assert DetectorConfig(redirect_policy="always").redirect_policy is RedirectPolicy.ALWAYS  # type: ignore[arg-type]
