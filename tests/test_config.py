"""Tests for _config module."""

import pytest

from momolog._config import DEFAULT_SERVER_URL, MomologConfig


def test_config_defaults() -> None:
    cfg = MomologConfig()
    assert cfg.server_url == "http://localhost:9090/debug"
    assert cfg.timeout == 1.0
    assert cfg.enabled is None
    assert cfg.async_mode is True
    assert cfg.verify_tls is True


def test_config_custom_values() -> None:
    cfg = MomologConfig(
        server_url="http://viewer:8080/debug",
        timeout=0.25,
        enabled=False,
        async_mode=False,
    )
    assert cfg.server_url == "http://viewer:8080/debug"
    assert cfg.timeout == 0.25
    assert cfg.enabled is False
    assert cfg.async_mode is False


def test_config_is_frozen() -> None:
    cfg = MomologConfig()
    try:
        cfg.server_url = "changed"  # type: ignore[misc]
        assert False, "Should have raised"
    except AttributeError:
        pass


class TestMerged:
    def test_overrides_only_given_keys(self) -> None:
        cfg = MomologConfig().merged({"timeout": 3})
        assert cfg.timeout == 3
        assert cfg.server_url == DEFAULT_SERVER_URL
        assert cfg.async_mode is True

    def test_second_merge_wins_for_overlapping_keys(self) -> None:
        first = MomologConfig().merged({"server_url": "http://a/debug", "timeout": 2})
        second = first.merged({"server_url": "http://b/debug", "enabled": True})
        assert second.server_url == "http://b/debug"
        assert second.timeout == 2
        assert second.enabled is True

    def test_async_alias(self) -> None:
        cfg = MomologConfig().merged({"async": False})
        assert cfg.async_mode is False

    def test_async_mode_key(self) -> None:
        cfg = MomologConfig().merged({"async_mode": False})
        assert cfg.async_mode is False

    def test_unknown_key_raises(self) -> None:
        with pytest.raises(TypeError, match="servr_url"):
            MomologConfig().merged({"servr_url": "http://x"})

    def test_original_untouched(self) -> None:
        cfg = MomologConfig()
        cfg.merged({"enabled": True})
        assert cfg.enabled is None

    def test_as_options_round_trips(self) -> None:
        cfg = MomologConfig(server_url="http://x/debug", enabled=True, async_mode=False)
        assert MomologConfig().merged(cfg.as_options()) == cfg


class TestFromEnv:
    def test_empty_environment_gives_defaults(self) -> None:
        assert MomologConfig.from_env({}) == MomologConfig()

    def test_reads_all_variables(self) -> None:
        cfg = MomologConfig.from_env({
            "MOMOLOG_SERVER_URL": "http://viewer:9999/debug",
            "MOMOLOG_TIMEOUT": "2.5",
            "MOMOLOG_ENABLED": "true",
            "MOMOLOG_ASYNC": "false",
        })
        assert cfg.server_url == "http://viewer:9999/debug"
        assert cfg.timeout == 2.5
        assert cfg.enabled is True
        assert cfg.async_mode is False

    @pytest.mark.parametrize("raw", ["", "auto", "null", "AUTO"])
    def test_enabled_auto_values(self, raw: str) -> None:
        assert MomologConfig.from_env({"MOMOLOG_ENABLED": raw}).enabled is None

    @pytest.mark.parametrize("raw", ["0", "false", "no", "Off"])
    def test_enabled_false_values(self, raw: str) -> None:
        assert MomologConfig.from_env({"MOMOLOG_ENABLED": raw}).enabled is False

    def test_unrecognized_enabled_falls_back_to_auto(self) -> None:
        assert MomologConfig.from_env({"MOMOLOG_ENABLED": "maybe"}).enabled is None

    @pytest.mark.parametrize("raw", ["abc", "-1", "0", "  "])
    def test_bad_timeout_falls_back_to_default(self, raw: str) -> None:
        assert MomologConfig.from_env({"MOMOLOG_TIMEOUT": raw}).timeout == 1.0

    def test_unrecognized_async_keeps_default(self) -> None:
        assert MomologConfig.from_env({"MOMOLOG_ASYNC": "sometimes"}).async_mode is True

    def test_reads_os_environ_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOMOLOG_SERVER_URL", "http://from-env/debug")
        assert MomologConfig.from_env().server_url == "http://from-env/debug"


class TestMergedCoercion:
    @pytest.mark.parametrize("raw", ["false", "0", "no", "OFF"])
    def test_string_false_disables(self, raw: str) -> None:
        cfg = MomologConfig(enabled=True).merged({"enabled": raw})
        assert cfg.enabled is False

    @pytest.mark.parametrize("raw", ["true", "1", "yes"])
    def test_string_true_enables(self, raw: str) -> None:
        assert MomologConfig(enabled=False).merged({"enabled": raw}).enabled is True

    @pytest.mark.parametrize("raw", ["auto", "", "null"])
    def test_string_auto_resets_detection(self, raw: str) -> None:
        assert MomologConfig(enabled=True).merged({"enabled": raw}).enabled is None

    def test_none_resets_detection(self) -> None:
        assert MomologConfig(enabled=True).merged({"enabled": None}).enabled is None

    def test_string_async(self) -> None:
        cfg = MomologConfig().merged({"async": "false", "verify_tls": "no"})
        assert cfg.async_mode is False
        assert cfg.verify_tls is False

    def test_unrecognized_bool_keeps_current(self) -> None:
        cfg = MomologConfig(async_mode=False).merged({"async": "sometimes"})
        assert cfg.async_mode is False

    def test_truthy_non_string_is_bool(self) -> None:
        cfg = MomologConfig().merged({"enabled": 1, "async_mode": 0})
        assert cfg.enabled is True
        assert cfg.async_mode is False

    def test_string_timeout(self) -> None:
        assert MomologConfig().merged({"timeout": "2.5"}).timeout == 2.5

    @pytest.mark.parametrize("raw", ["abc", -1, 0, "0"])
    def test_bad_timeout_falls_back_to_default(self, raw: object) -> None:
        assert MomologConfig(timeout=3.0).merged({"timeout": raw}).timeout == 1.0

    def test_empty_server_url_uses_default(self) -> None:
        assert MomologConfig(server_url="http://x/debug").merged(
            {"server_url": ""}
        ).server_url == DEFAULT_SERVER_URL
