from __future__ import annotations

import pytest

from src.adapters.aws import AwsRuntimeConfig
from src.adapters.config import AppConfig


def test_app_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ETA_REFRESH_INTERVAL_S",
        "ROUTE_PATH_CACHE_TTL_S",
        "ARRIVAL_RADIUS_M",
        "DRIVER_ARRIVAL_RADIUS_M",
        "START_RADIUS_M",
        "LIVETRACK_REVEAL_ERRORS",
    ):
        monkeypatch.delenv(name, raising=False)

    assert AppConfig.from_env() == AppConfig()


def test_app_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ETA_REFRESH_INTERVAL_S", "15")
    monkeypatch.setenv("ARRIVAL_RADIUS_M", " 50 ")
    monkeypatch.setenv("DRIVER_ARRIVAL_RADIUS_M", "250")
    monkeypatch.setenv("LIVETRACK_REVEAL_ERRORS", "yes")

    cfg = AppConfig.from_env()

    assert cfg.eta_refresh_interval_s == 15.0
    assert cfg.arrival_radius_m == 50.0
    assert cfg.driver_arrival_radius_m == 250.0
    assert cfg.reveal_errors is True


def test_aws_endpoint_resolution(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ENDPOINT_URL", raising=False)
    monkeypatch.setenv("USE_LOCALSTACK", "true")
    monkeypatch.setenv("LOCALSTACK_ENDPOINT_URL", "http://localstack:4566")

    assert AwsRuntimeConfig.from_env().resolved_endpoint_url() == (
        "http://localstack:4566"
    )

    monkeypatch.setenv("ENDPOINT_URL", "http://override:4566")
    assert AwsRuntimeConfig.from_env().resolved_endpoint_url() == (
        "http://override:4566"
    )

    monkeypatch.delenv("ENDPOINT_URL")
    monkeypatch.setenv("USE_LOCALSTACK", "false")
    assert AwsRuntimeConfig.from_env().resolved_endpoint_url() is None
