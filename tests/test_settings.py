import pytest

from lineuprx.config import EngineSettings


_ENV_VARS = (
    "LINEUPRX_SCORING_FORMAT",
    "LINEUPRX_WAIVER_THRESHOLD",
    "LINEUPRX_WAIVER_CANDIDATES",
    "LINEUPRX_WAIVER_LIMIT",
    "LINEUPRX_PROJECTIONS_URL",
    "LINEUPRX_HTTP_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    settings = EngineSettings.from_env()
    assert settings == EngineSettings()
    assert settings.waiver_threshold == pytest.approx(3.0)
    assert settings.projections_url == "https://api.sleeper.app/v1"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("LINEUPRX_SCORING_FORMAT", "HALF_PPR")
    monkeypatch.setenv("LINEUPRX_WAIVER_THRESHOLD", "2.5")
    monkeypatch.setenv("LINEUPRX_WAIVER_LIMIT", "0")
    monkeypatch.setenv("LINEUPRX_PROJECTIONS_URL", "http://localhost:9000/v1/")

    settings = EngineSettings.from_env()
    assert settings.scoring_format == "half_ppr"
    assert settings.waiver_threshold == pytest.approx(2.5)
    assert settings.waiver_limit == 1
    assert settings.projections_url == "http://localhost:9000/v1"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch, caplog):
    monkeypatch.setenv("LINEUPRX_WAIVER_CANDIDATES", "lots")
    monkeypatch.setenv("LINEUPRX_HTTP_TIMEOUT", "soon")

    with caplog.at_level("WARNING"):
        settings = EngineSettings.from_env()

    assert settings.waiver_candidates == 10
    assert settings.http_timeout == pytest.approx(15.0)
    assert "LINEUPRX_WAIVER_CANDIDATES" in caplog.text
