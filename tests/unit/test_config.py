"""
Unit tests for configuration models, YAML loading and environment overrides.
"""

import pytest
from pydantic import ValidationError

from readquarry.config import (
    Config,
    ExtractionConfig,
    LocatorConfig,
    MonitoringConfig,
    ScoringConfig,
    SelectorConfig,
    find_config_file,
    load_config,
)


class TestDefaults:
    def test_default_thresholds(self):
        config = ExtractionConfig()
        assert config.locator.early_exit_score == 100.0
        assert config.locator.min_score == 0.0
        assert config.locator.candidate_tags == ["div", "article", "main", "section"]
        assert config.thresholds.substantial_content_length == 500
        assert config.scoring.tag_multipliers == {"article": 2.0, "main": 1.5}

    def test_default_instances_are_independent(self):
        first, second = ExtractionConfig(), ExtractionConfig()
        first.patterns.excluded_classes.append("custom")
        assert "custom" not in second.patterns.excluded_classes

    def test_root_config(self):
        config = Config()
        assert config.project_name == "ReadQuarry"
        assert config.monitoring.log_level == "INFO"
        assert config.monitoring.log_file is None


class TestValidators:
    def test_min_score_below_early_exit(self):
        with pytest.raises(ValidationError):
            LocatorConfig(min_score=150.0)

    def test_candidate_cap_positive(self):
        with pytest.raises(ValidationError):
            LocatorConfig(max_candidates=0)

    def test_threshold_tables_sorted(self):
        scoring = ScoringConfig(
            link_density_penalties=[(0.5, 0.9), (1.0, 0.5)],
            comma_bonuses=[(5, 1.1), (10, 1.2)],
            short_text_penalties=[(200, 0.8), (100, 0.5)],
        )
        assert scoring.link_density_penalties == [(1.0, 0.5), (0.5, 0.9)]
        assert scoring.comma_bonuses == [(10, 1.2), (5, 1.1)]
        assert scoring.short_text_penalties == [(100, 0.5), (200, 0.8)]

    def test_empty_content_selectors(self):
        with pytest.raises(ValidationError):
            SelectorConfig(content=[])

    def test_log_level(self):
        assert MonitoringConfig(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            MonitoringConfig(log_level="loud")

    def test_log_file_directory_created(self, tmp_path):
        log_file = tmp_path / "logs" / "readquarry.log"
        config = MonitoringConfig(log_file=log_file)
        assert config.log_file == str(log_file)
        assert log_file.parent.is_dir()


class TestYamlLoading:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "readquarry.yaml"
        path.write_text(
            "extraction:\n"
            "  locator:\n"
            "    early_exit_score: 150\n"
            "  patterns:\n"
            "    invalid_titles: [home]\n"
            "monitoring:\n"
            "  log_level: warning\n",
            encoding="utf-8",
        )
        config = Config.from_yaml(path)
        assert config.extraction.locator.early_exit_score == 150
        assert config.extraction.patterns.invalid_titles == ["home"]
        assert config.extraction.scoring.paragraph_weight == 10.0
        assert config.monitoring.log_level == "WARNING"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "absent.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "readquarry.yaml"
        path.write_text("", encoding="utf-8")
        assert Config.from_yaml(path).extraction == ExtractionConfig()


class TestEnvironment:
    def test_nested_override(self, monkeypatch):
        monkeypatch.setenv("READQUARRY_MONITORING__LOG_LEVEL", "error")
        assert Config().monitoring.log_level == "ERROR"

    def test_project_name_override(self, monkeypatch):
        monkeypatch.setenv("READQUARRY_PROJECT_NAME", "Archive Reader")
        assert Config().project_name == "Archive Reader"


class TestDiscovery:
    def test_no_config_file(self, tmp_path):
        assert find_config_file(tmp_path) is None

    def test_preferred_name(self, tmp_path):
        (tmp_path / "config.yaml").write_text("{}", encoding="utf-8")
        (tmp_path / "readquarry.yml").write_text("{}", encoding="utf-8")
        assert find_config_file(tmp_path) == tmp_path / "readquarry.yml"

    def test_load_discovered_file(self, tmp_path, monkeypatch):
        (tmp_path / "readquarry.yaml").write_text("project_name: Discovered\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert load_config().project_name == "Discovered"

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config().project_name == "ReadQuarry"

    @pytest.mark.parametrize(
        "contents",
        [
            "extraction: [unclosed\n",
            "extraction:\n  locator:\n    min_score: 500\n",
        ],
    )
    def test_invalid_file_falls_back_to_defaults(self, tmp_path, contents):
        path = tmp_path / "readquarry.yaml"
        path.write_text(contents, encoding="utf-8")
        config = load_config(path)
        assert config.extraction.locator.min_score == 0.0
