"""
Tests for configuration loading — devsetup.yml parsing, validation and
component selection.
"""

import textwrap
from pathlib import Path

import pytest

from devsetup.core.config.loader import ConfigError, find_config_file, load_config
from devsetup.core.config.selection import catalog_order, select_components
from devsetup.core.models.config import SetupConfig
from devsetup.core.services.install.data.profiles import PROFILES
from devsetup.core.services.install.data.recipes import COMPONENT_RECIPES


@pytest.fixture
def valid_config_yml(tmp_path: Path) -> Path:
    """Create a valid devsetup.yml in a temp directory."""
    content = textwrap.dedent("""\
        profile: developer

        components:
          steam: true
          dotnet: false

        versions:
          go: "1.22.5"

        checksums:
          go: "sha256:ABCDEF"

        paths:
          state_dir: ~/devsetup-state
          cache_dir: /tmp/devsetup-cache
    """)
    path = tmp_path / "devsetup.yml"
    path.write_text(content)
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_valid(self, valid_config_yml: Path):
        config = load_config(valid_config_yml)
        assert config.profile == "developer"
        assert config.components == {"steam": True, "dotnet": False}
        assert config.versions["go"] == "1.22.5"
        assert config.checksums["go"] == "sha256:ABCDEF"

    def test_paths_expand_user(self, valid_config_yml: Path):
        config = load_config(valid_config_yml)
        assert config.paths.state_dir == Path("~/devsetup-state").expanduser()
        assert config.paths.cache_dir == Path("/tmp/devsetup-cache")
        assert config.paths.backup_dir is None

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("")
        config = load_config(path)
        assert config == SetupConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("profile: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_wrong_types(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("components: [docker]\n")
        with pytest.raises(ConfigError, match="Invalid setup configuration"):
            load_config(path)

    def test_unknown_profile(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("profile: wizard\n")
        with pytest.raises(ConfigError, match="Unknown profile 'wizard'"):
            load_config(path)

    def test_unknown_component(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("components:\n  emacs: true\n")
        with pytest.raises(ConfigError, match="emacs"):
            load_config(path)


class TestFindConfigFile:
    def test_in_start_dir(self, valid_config_yml: Path):
        assert find_config_file(valid_config_yml.parent) == valid_config_yml.resolve()

    def test_walks_up(self, valid_config_yml: Path):
        nested = valid_config_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == valid_config_yml.resolve()

    def test_not_found(self, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert find_config_file(empty) is None


class TestSelection:
    def test_catalog_order_dedupes(self):
        assert catalog_order(["helm", "java", "helm", "kubectl"]) == ["java", "kubectl", "helm"]

    def test_nothing_selected_is_interactive(self):
        assert select_components(None, None, ()) is None
        assert select_components(SetupConfig(), None, ()) is None

    def test_explicit_wins(self):
        config = SetupConfig(profile="gamer")
        assert select_components(config, "minimal", ["go", "java"]) == ["java", "go"]

    def test_explicit_unknown(self):
        with pytest.raises(ConfigError, match="Unknown components: emacs"):
            select_components(None, None, ["emacs", "go"])

    def test_cli_profile_over_config_profile(self):
        config = SetupConfig(profile="gamer")
        assert select_components(config, "minimal", ()) == catalog_order(PROFILES["minimal"])

    def test_config_profile_with_toggles(self):
        config = SetupConfig(profile="developer", components={"steam": True, "dotnet": False})
        selected = select_components(config)
        assert "steam" in selected
        assert "dotnet" not in selected
        assert "docker" in selected

    def test_gamer_profile_tunes_after_steam(self):
        selected = select_components(SetupConfig(profile="gamer"))
        assert selected.index("gaming_optimization") > selected.index("steam")

    def test_toggles_without_profile(self):
        config = SetupConfig(components={"docker": True, "go": True, "java": False})
        assert select_components(config) == ["go", "docker"]

    def test_unknown_profile(self):
        with pytest.raises(ConfigError, match="Unknown profile"):
            select_components(None, "wizard")


class TestProfiles:
    def test_members_are_catalog_components(self):
        for name, members in PROFILES.items():
            assert set(members) <= set(COMPONENT_RECIPES), name

    def test_full_is_whole_catalog(self):
        assert PROFILES["full"] == list(COMPONENT_RECIPES)
