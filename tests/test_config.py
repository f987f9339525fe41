import pytest

from pftodo.core.config import Settings, load_settings


def test_defaults():
    s = load_settings(environ={})
    assert s.session_ttl_seconds == 604800
    assert s.kdf_iterations == 120000
    assert s.cookie_name == "sid"
    assert s.cookie_secure is False
    assert s.cors_origins == ("http://localhost:5173",)
    assert len(s.secret_key) == 64


def test_random_secret_differs_per_settings_instance():
    assert Settings().secret_key != Settings().secret_key


def test_env_overrides():
    s = load_settings(
        environ={
            "PF_SESSION_TTL": "60",
            "PF_KDF_ITERATIONS": "5000",
            "PF_COOKIE_SECURE": "yes",
            "PF_CORS_ORIGINS": "http://a.test, http://b.test",
            "PF_DATABASE_URL": "sqlite://",
        }
    )
    assert s.session_ttl_seconds == 60
    assert s.kdf_iterations == 5000
    assert s.cookie_secure is True
    assert s.cors_origins == ("http://a.test", "http://b.test")
    assert s.database_url == "sqlite://"


def test_yaml_file_then_env(tmp_path):
    cfg = tmp_path / "pftodo.yml"
    cfg.write_text("session_ttl_seconds: 120\ncookie_name: todo_sid\ncors_origins: [http://x.test]\n", encoding="utf-8")

    s = load_settings(environ={"PF_CONFIG": str(cfg), "PF_SESSION_TTL": "30"})
    assert s.cookie_name == "todo_sid"
    assert s.session_ttl_seconds == 30
    assert s.cors_origins == ("http://x.test",)


def test_yaml_unknown_key_rejected(tmp_path):
    cfg = tmp_path / "bad.yml"
    cfg.write_text("session_ttl: 1\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path=cfg, environ={})


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(path=tmp_path / "missing.yml", environ={})


@pytest.mark.parametrize("env", [{"PF_SESSION_TTL": "soon"}, {"PF_SESSION_TTL": "0"}, {"PF_KDF_ITERATIONS": "-1"}])
def test_invalid_numbers(env):
    with pytest.raises(ValueError):
        load_settings(environ=env)
