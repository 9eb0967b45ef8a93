import pytest

from annotrack.app import flags


def test_flags_off_by_default():
    assert not flags.is_enabled(flags.EXPORT_CACHED_BOUNDS)
    assert flags.is_enabled("anything", default=True)


def test_tokens_enable_and_disable(monkeypatch):
    monkeypatch.setenv(flags.FEATURES_ENV, "export-cached-bounds, !beta, gamma=off, delta=yes")
    flags.reload()
    assert flags.is_enabled(flags.EXPORT_CACHED_BOUNDS)
    assert flags.all_enabled() == {
        "export_cached_bounds": True,
        "beta": False,
        "gamma": False,
        "delta": True,
    }


def test_unknown_switch_value_is_ignored(monkeypatch):
    monkeypatch.setenv(flags.FEATURES_ENV, "beta=maybe")
    flags.reload()
    assert flags.all_enabled() == {}


def test_empty_flag_name():
    with pytest.raises(ValueError):
        flags.is_enabled("")
