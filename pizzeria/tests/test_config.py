from __future__ import annotations

from pizzeria.config import DEFAULT_LOCAL_ENDPOINT, RuntimeConfig, Service


def test_defaults_serve_everything():
    config = RuntimeConfig.from_env({})
    assert all(config.serves(s) for s in Service)
    assert config.internal_token == "1"
    assert config.retention.max_rows == 500
    assert config.retention.fixed_rows == 100


def test_split_deployment():
    config = RuntimeConfig.from_env({
        "PIZZERIA_ALL_SERVICES": "false",
        "PIZZERIA_RECOMMENDATIONS": "true",
        "PIZZERIA_CATALOG_ENDPOINT": "http://catalog:3333/",
    })
    assert config.serves(Service.RECOMMENDATIONS)
    assert not config.serves(Service.CATALOG)
    assert not config.serves(Service.COPY)
    assert config.endpoint(Service.CATALOG) == "http://catalog:3333"
    assert config.endpoint(Service.COPY) == DEFAULT_LOCAL_ENDPOINT


def test_unparseable_all_services_flag_is_false():
    config = RuntimeConfig.from_env({"PIZZERIA_ALL_SERVICES": "maybe", "PIZZERIA_COPY": "t"})
    assert not config.serve_all
    assert config.services == frozenset({Service.COPY})


def test_numeric_settings():
    config = RuntimeConfig.from_env({
        "PIZZERIA_DB_MAX_PIZZAS": "50",
        "PIZZERIA_DB_FIXED_PIZZAS": "not-a-number",
        "PIZZERIA_HTTP_TIMEOUT": "2.5",
        "PIZZERIA_DELAY_COPY": "100",
        "PIZZERIA_FAIL_RATE_RECOMMENDATIONS": "12.5",
    })
    assert config.max_pizzas == 50
    assert config.fixed_pizzas == 100
    assert config.http_timeout == 2.5
    assert config.copy_delay_ms == 100
    assert config.recommendations_fail_percentage == 12.5


def test_logging_settings_normalized():
    config = RuntimeConfig.from_env({"LOG_LEVEL": "debug", "LOG_FORMAT": "JSON"})
    assert config.log_level == "DEBUG"
    assert config.log_format == "json"
