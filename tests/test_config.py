from easyapplyagent.config import AppSettings, FilterConfig, load_settings, settings_from_dict
from easyapplyagent.core.auth import Credentials


def test_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("LINKEDIN_EMAIL", raising=False)
    monkeypatch.delenv("LINKEDIN_PASSWORD", raising=False)

    settings = load_settings(tmp_path / "missing.yaml")

    assert settings == AppSettings()
    assert Credentials.from_settings(settings.linkedin).complete is False
    assert settings.filters.is_empty


def test_yaml_sections_are_loaded(tmp_path, monkeypatch):
    monkeypatch.delenv("LINKEDIN_EMAIL", raising=False)
    monkeypatch.delenv("LINKEDIN_PASSWORD", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "\n".join(
            [
                "search:",
                "  role: Data Engineer",
                "  location: Berlin",
                "filters:",
                "  easy_apply: 'true'",
                "  remote: remote",
                "auth:",
                "  verification_wait_seconds: '90'",
                "  unknown_key: 1",
                "browser:",
                "  headless: true",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.search.role == "Data Engineer"
    assert settings.search.location == "Berlin"
    assert settings.filters == FilterConfig(easy_apply=True, remote="remote")
    assert settings.auth.verification_wait_seconds == 90
    assert settings.auth.poll_interval_seconds == 5
    assert settings.browser.headless is True


def test_credentials_come_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("LINKEDIN_EMAIL", "  ada@example.com ")
    monkeypatch.setenv("LINKEDIN_PASSWORD", "s3cret!")

    settings = load_settings(tmp_path / "missing.yaml")

    assert settings.linkedin.email == "ada@example.com"
    assert settings.linkedin.password == "s3cret!"
    assert Credentials.from_settings(settings.linkedin).complete


def test_invalid_values_fall_back_to_defaults():
    settings = settings_from_dict(
        {"auth": {"poll_interval_seconds": "often"}, "linkedin": "not a mapping"}
    )
    assert settings.auth.poll_interval_seconds == 5
    assert settings.linkedin.wait_manual_login is True


def test_bundled_config_matches_defaults(monkeypatch):
    monkeypatch.delenv("LINKEDIN_EMAIL", raising=False)
    monkeypatch.delenv("LINKEDIN_PASSWORD", raising=False)

    settings = load_settings(force_reload=True)

    assert settings.search.role == "Software Engineer"
    assert settings.auth == AppSettings().auth
    assert settings.filters.is_empty
