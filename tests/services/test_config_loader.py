import pytest

from vectorpackager.errors import PackagerError
from vectorpackager.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".vectorpackager.yml"
    config_file.write_text(
        "tag: 0.2.0\npg: '14'\npg_min: '2'\nextra_packages:\n  - libicu-dev\n",
        encoding="utf-8",
    )

    loaded = ConfigLoader().load(str(config_file))

    assert loaded["tag"] == "0.2.0"
    assert loaded["pg"] == "14"
    assert loaded["extra_packages"] == ["libicu-dev"]


def test_config_loader_returns_empty_for_no_path():
    assert ConfigLoader().load(None) == {}


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".vectorpackager.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    with pytest.raises(PackagerError, match="Unknown configuration keys"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_non_mapping_root(tmp_path):
    config_file = tmp_path / ".vectorpackager.yml"
    config_file.write_text("- tag\n- pg\n", encoding="utf-8")

    with pytest.raises(PackagerError, match="YAML mapping"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_scalar_extra_packages(tmp_path):
    config_file = tmp_path / ".vectorpackager.yml"
    config_file.write_text("extra_packages: libicu-dev\n", encoding="utf-8")

    with pytest.raises(PackagerError, match="extra_packages"):
        ConfigLoader().load(str(config_file))


def test_config_loader_reports_missing_file(tmp_path):
    with pytest.raises(PackagerError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yml"))


def test_config_loader_rejects_unquoted_numeric_tag(tmp_path):
    config_file = tmp_path / ".vectorpackager.yml"
    config_file.write_text("tag: 1.10\n", encoding="utf-8")

    with pytest.raises(PackagerError, match="`tag` must be a quoted string"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_fractional_pg_version(tmp_path):
    config_file = tmp_path / ".vectorpackager.yml"
    config_file.write_text("tag: '1.10'\npg: 15.4\n", encoding="utf-8")

    with pytest.raises(PackagerError, match="`pg` must be a whole number"):
        ConfigLoader().load(str(config_file))


def test_config_loader_accepts_integer_pg_versions(tmp_path):
    config_file = tmp_path / ".vectorpackager.yml"
    config_file.write_text("tag: '1.10'\npg: 16\npg_min: 1\n", encoding="utf-8")

    loaded = ConfigLoader().load(str(config_file))

    assert loaded["tag"] == "1.10"
    assert loaded["pg"] == 16
