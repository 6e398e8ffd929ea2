from sharemedia.utils.config import Settings


def _settings(tmp_path, **overrides):
    values = dict(
        _env_file=None,
        extension_identifier="com.example.app.ShareExtension",
        host_identifier=None,
        app_group_id=None,
        shared_root=tmp_path / "shared",
        preferences_dir=tmp_path / "prefs",
    )
    values.update(overrides)
    return Settings(**values)


def test_host_identifier_is_derived_from_extension(tmp_path):
    assert _settings(tmp_path).resolve_host_identifier() == "com.example.app"


def test_extension_identifier_without_dot(tmp_path):
    settings = _settings(tmp_path, extension_identifier="standalone")

    assert settings.resolve_host_identifier() == "standalone"


def test_app_group_defaults_to_group_prefix(tmp_path):
    assert _settings(tmp_path).resolve_app_group_id() == "group.com.example.app"


def test_app_group_override(tmp_path):
    settings = _settings(tmp_path, app_group_id="group.custom.shared")

    assert settings.resolve_app_group_id() == "group.custom.shared"
    assert settings.preferences_file() == tmp_path / "prefs" / "group.custom.shared.json"


def test_shared_container_is_created(tmp_path):
    container = _settings(tmp_path).shared_container()

    assert container.is_dir()
    assert container == (tmp_path / "shared" / "group.com.example.app").resolve()


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("HOST_IDENTIFIER", "org.sample.host")
    monkeypatch.setenv("COMPLETION_POLICY", "all")

    settings = Settings(_env_file=None)

    assert settings.resolve_host_identifier() == "org.sample.host"
    assert settings.completion_policy == "all"
