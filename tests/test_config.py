from pathlib import Path

import pytest

from resumelog.config import ConfigurationError, DataKind, ReadMode, build_settings, load_settings


def test_derived_paths(tmp_path: Path):
    settings = build_settings(log_dir=tmp_path, prefix="demo")
    assert settings.success_log == tmp_path / "demo_success.log"
    assert settings.failure_log == tmp_path / "demo_failure.log"
    assert settings.exit_log == tmp_path / "demo_exit.log"
    assert settings.resolved_stdout_file == tmp_path / "demo_std.log"
    assert settings.data_kind is DataKind.INTEGER
    assert settings.read_mode is ReadMode.BY_LINE
    assert (settings.max_read, settings.read_length) == (1000, 2048)


def test_custom_stdout_file(tmp_path: Path):
    settings = build_settings(log_dir=tmp_path, prefix="demo", stdout_file=tmp_path / "out.log")
    assert settings.resolved_stdout_file == tmp_path / "out.log"


def test_log_dir_must_exist(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="does not exist"):
        build_settings(log_dir=tmp_path / "missing", prefix="demo")


@pytest.mark.parametrize("prefix", ["", "/"])
def test_prefix_rejected(tmp_path: Path, prefix):
    with pytest.raises(ConfigurationError, match="prefix"):
        build_settings(log_dir=tmp_path, prefix=prefix)


def test_unsupported_kind_rejected_without_files(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="data_kind"):
        build_settings(log_dir=tmp_path, prefix="demo", data_kind="xml")
    assert list(tmp_path.iterdir()) == []


def test_kind_and_mode_aliases(tmp_path: Path):
    assert build_settings(log_dir=tmp_path, prefix="a", data_kind="json").data_kind is DataKind.STRUCTURED
    assert build_settings(log_dir=tmp_path, prefix="a", data_kind="csv").data_kind is DataKind.FLAT
    assert build_settings(log_dir=tmp_path, prefix="a", data_kind="int").data_kind is DataKind.INTEGER
    assert build_settings(log_dir=tmp_path, prefix="a", read_mode=2).read_mode is ReadMode.BY_LENGTH


def test_tunables_must_be_positive(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="max_read"):
        build_settings(log_dir=tmp_path, prefix="a", max_read=0)


def test_load_settings_from_environment(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("RESUMELOG_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("RESUMELOG_PREFIX", "nightly")
    monkeypatch.setenv("RESUMELOG_MAX_READ", "50")

    settings = load_settings(env_file=None)
    assert settings.prefix == "nightly"
    assert settings.max_read == 50

    settings = load_settings(env_file=None, prefix="manual", read_length=None)
    assert settings.prefix == "manual"
    assert settings.read_length == 2048


def test_load_settings_from_env_file(tmp_path: Path, monkeypatch):
    # load_dotenv writes to os.environ; register the names so they are removed afterwards.
    for name in ("RESUMELOG_LOG_DIR", "RESUMELOG_PREFIX", "RESUMELOG_DATA_KIND"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)

    env_file = tmp_path / ".env"
    env_file.write_text(
        f"RESUMELOG_LOG_DIR={tmp_path}\nRESUMELOG_PREFIX=fromfile\nRESUMELOG_DATA_KIND=flat\n"
    )
    settings = load_settings(env_file=str(env_file))
    assert settings.prefix == "fromfile"
    assert settings.data_kind is DataKind.FLAT


def test_missing_required_settings(monkeypatch):
    monkeypatch.delenv("RESUMELOG_LOG_DIR", raising=False)
    monkeypatch.delenv("RESUMELOG_PREFIX", raising=False)
    with pytest.raises(ConfigurationError, match="log_dir"):
        load_settings(env_file=None)
