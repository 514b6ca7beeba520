from warden.settings import Settings


def test_defaults_load_without_env(monkeypatch):
    monkeypatch.delenv("WARDEN_CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.delenv("WARDEN_MOUNT_POINT", raising=False)
    s = Settings(_env_file=None)
    assert s.CORS_ALLOW_ORIGINS == []
    assert s.MOUNT_POINT == "/api/warden"


def test_cors_origins_parsed_from_json_env(monkeypatch):
    monkeypatch.setenv("WARDEN_CORS_ALLOW_ORIGINS", '["http://localhost:3000", "https://app.example.com"]')
    s = Settings(_env_file=None)
    assert s.CORS_ALLOW_ORIGINS == ["http://localhost:3000", "https://app.example.com"]
