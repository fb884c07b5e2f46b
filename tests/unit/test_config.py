"""Unit tests for configuration models and loading."""

import pytest

from blockclip.config import load_config
from blockclip.models.config import ClipboardConfig, Config, PlacementConfig, SymbolConfig


class TestConfigModels:
    """Test configuration models."""

    def test_defaults(self):
        """Test the default configuration."""
        config = Config()

        assert config.placement.mode == "relative"
        assert config.symbols.markers == ["VAR", "VARIABLE", "SYMBOL"]
        assert config.symbols.copy_suffix == "_Copy"
        assert config.clipboard.backend == "system"
        assert config.clipboard.indent is None

    def test_config_immutable(self):
        """Test that config is frozen (immutable)."""
        config = PlacementConfig()

        with pytest.raises(Exception):  # Pydantic ValidationError
            config.mode = "absolute"

    def test_invalid_placement_mode(self):
        """Test unknown placement modes are rejected."""
        with pytest.raises(ValueError):
            PlacementConfig(mode="sideways")

    def test_markers_normalized(self):
        """Test markers are upper-cased and blanks dropped."""
        config = SymbolConfig(markers=[" var ", "", "ref"])
        assert config.markers == ["VAR", "REF"]

    def test_markers_required(self):
        """Test that an empty marker list is rejected."""
        with pytest.raises(ValueError, match="At least one symbol marker"):
            SymbolConfig(markers=["  "])

    def test_empty_copy_suffix_rejected(self):
        """Test that renames need a non-empty suffix."""
        with pytest.raises(ValueError):
            SymbolConfig(copy_suffix="")

    def test_invalid_backend(self):
        """Test unknown clipboard backends are rejected."""
        with pytest.raises(ValueError):
            ClipboardConfig(backend="fax")


class TestLoadConfig:
    """Test load_config() with YAML and environment overrides."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for var in (
            "BLOCKCLIP_PLACEMENT_MODE",
            "BLOCKCLIP_SYMBOLS_MARKERS",
            "BLOCKCLIP_SYMBOLS_COPY_SUFFIX",
            "BLOCKCLIP_CLIPBOARD_BACKEND",
        ):
            monkeypatch.delenv(var, raising=False)

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test that no config file is not an error."""
        config = load_config(tmp_path / "missing.yaml")
        assert config == Config()

    def test_load_from_yaml(self, tmp_path):
        """Test loading values from a YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "placement:\n"
            "  mode: absolute\n"
            "symbols:\n"
            "  markers: [VAR, REF]\n"
            "  copy_suffix: _dup\n"
            "clipboard:\n"
            "  backend: memory\n"
            "  indent: 2\n"
        )

        config = load_config(config_file)

        assert config.placement.mode == "absolute"
        assert config.symbols.markers == ["VAR", "REF"]
        assert config.symbols.copy_suffix == "_dup"
        assert config.clipboard.backend == "memory"
        assert config.clipboard.indent == 2

    def test_empty_yaml_gives_defaults(self, tmp_path):
        """Test an empty file is treated as no settings."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert load_config(config_file) == Config()

    def test_env_overrides(self, tmp_path, monkeypatch):
        """Test BLOCKCLIP_* variables override the file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("placement:\n  mode: relative\n")
        monkeypatch.setenv("BLOCKCLIP_PLACEMENT_MODE", "absolute")
        monkeypatch.setenv("BLOCKCLIP_SYMBOLS_MARKERS", "VAR, REF")
        monkeypatch.setenv("BLOCKCLIP_CLIPBOARD_BACKEND", "memory")

        config = load_config(config_file)

        assert config.placement.mode == "absolute"
        assert config.symbols.markers == ["VAR", "REF"]
        assert config.clipboard.backend == "memory"

    def test_invalid_yaml(self, tmp_path):
        """Test broken YAML raises ValueError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("placement: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(config_file)

    def test_invalid_values(self, tmp_path):
        """Test validation errors are reported as ValueError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("placement:\n  mode: sideways\n")

        with pytest.raises(ValueError, match="Configuration validation failed"):
            load_config(config_file)

    def test_non_mapping_yaml(self, tmp_path):
        """Test a YAML list at top level is rejected."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config(config_file)
