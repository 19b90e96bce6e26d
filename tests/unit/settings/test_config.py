import pytest

import config


@pytest.mark.unit
def test_env_helpers_fall_back_on_bad_values(monkeypatch):
    monkeypatch.setenv("RUIDO_TEST_INT", "12")
    monkeypatch.setenv("RUIDO_TEST_BAD_INT", "twelve")
    monkeypatch.setenv("RUIDO_TEST_FLOAT", "0.35")
    monkeypatch.setenv("RUIDO_TEST_BAD_FLOAT", "high")

    assert config._get_int("RUIDO_TEST_INT", 1) == 12
    assert config._get_int("RUIDO_TEST_BAD_INT", 1) == 1
    assert config._get_int("RUIDO_TEST_UNSET", 7) == 7
    assert config._get_float("RUIDO_TEST_FLOAT", 0.2) == 0.35
    assert config._get_float("RUIDO_TEST_BAD_FLOAT", 0.2) == 0.2


@pytest.mark.unit
@pytest.mark.parametrize("raw, expected", [("1", True), ("Yes", True), ("on", True), ("0", False), ("nope", False)])
def test_get_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("RUIDO_TEST_BOOL", raw)
    assert config._get_bool("RUIDO_TEST_BOOL") is expected


@pytest.mark.unit
def test_csv_list_drops_blanks(monkeypatch):
    monkeypatch.setenv("RUIDO_TEST_ORIGINS", "https://a.test, ,https://b.test,")
    assert config._get_csv_list("RUIDO_TEST_ORIGINS", "") == ["https://a.test", "https://b.test"]
    monkeypatch.delenv("RUIDO_TEST_ORIGINS")
    assert config._get_csv_list("RUIDO_TEST_ORIGINS", "http://localhost:3000") == ["http://localhost:3000"]


@pytest.mark.unit
def test_search_defaults():
    assert config.Config.PROFILE_HEADER == "X-Profile-Id"
    assert config.Config.SEARCH_MAX_QUERY_LENGTH > 0
