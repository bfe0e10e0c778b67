import pytest
import yaml

from src.headercheck import config


@pytest.fixture
def properties(tmp_path, monkeypatch):
    def _use(text: str):
        path = tmp_path / "properties.yml"
        path.write_text(text, encoding="utf-8")
        monkeypatch.setenv("HEADERCHECK_PROPERTIES", str(path))
        config.reset_config()
        return path
    yield _use
    config.reset_config()


def test_nested_yaml_lookup(properties):
    properties("upload:\n  temp_prefix: scan-\n  copy_chunk_bytes: 4096\n")
    assert config.get("upload.temp_prefix") == "scan-"
    assert config.get("upload.copy_chunk_bytes") == 4096
    assert config.get("upload.missing", "fallback") == "fallback"


def test_non_mapping_document_gives_defaults(properties):
    properties("- just\n- a list\n")
    assert config.get("upload.temp_prefix", "upload-") == "upload-"


def test_malformed_yaml_is_reported(properties):
    properties("upload: [unclosed\n")
    with pytest.raises(yaml.YAMLError):
        config.get("upload.temp_prefix")


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("HEADERCHECK_PROPERTIES", str(tmp_path / "absent.yml"))
    config.reset_config()
    try:
        assert config.get("logging.level", "INFO") == "INFO"
    finally:
        config.reset_config()
