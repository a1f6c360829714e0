"""Unit tests for loading the compliance configuration."""

import pytest
from pydantic import ValidationError

from label_compliance.config import CONFIG_ENV_VAR, ComplianceConfig, get_config, load_config
from label_compliance.exceptions import ConfigurationError
from label_compliance.models.schemas import BeverageType, FieldName


def _write(tmp_path, text: str):
    path = tmp_path / "compliance.yaml"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def clear_config_cache():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


class TestDefaults:
    def test_thresholds(self):
        config = load_config()
        assert config.min_similarity == 0.6
        assert config.high_confidence == 0.75
        assert config.landmark_min_body_phrases == 4

    def test_deadline_windows(self):
        config = ComplianceConfig()
        assert config.conditional_deadline_days == 7
        assert config.correction_deadline_days == 30

    def test_field_sets(self):
        config = ComplianceConfig()
        assert config.rejection_fields == frozenset({FieldName.HEALTH_WARNING})
        assert FieldName.GRAPE_VARIETAL in config.minor_discrepancy_fields

    def test_all_categories_present(self):
        assert set(ComplianceConfig().categories) == set(BeverageType)

    def test_frozen(self):
        config = ComplianceConfig()
        with pytest.raises(ValidationError):
            config.min_similarity = 0.1


class TestLoadConfig:
    def test_overrides(self, tmp_path):
        path = _write(tmp_path, "correction_deadline_days: 14\nmin_similarity: 0.5\n")
        config = load_config(path)
        assert config.correction_deadline_days == 14
        assert config.min_similarity == 0.5
        assert config.conditional_deadline_days == 7

    def test_field_sets_from_lists(self, tmp_path):
        path = _write(tmp_path, "rejection_fields: [health_warning, alcohol_content]\n")
        config = load_config(path)
        assert config.rejection_fields == frozenset({FieldName.HEALTH_WARNING, FieldName.ALCOHOL_CONTENT})

    def test_partial_category_override(self, tmp_path):
        path = _write(tmp_path, (
            "categories:\n"
            "  wine:\n"
            "    label: Wine\n"
            "    mandatory_fields: [brand_name, health_warning]\n"
            "    valid_sizes_ml: [750]\n"
        ))
        config = load_config(path)
        wine = config.categories[BeverageType.WINE]
        assert wine.mandatory_fields == frozenset({FieldName.BRAND_NAME, FieldName.HEALTH_WARNING})
        assert wine.valid_sizes_ml == frozenset({750})
        assert 1750 in config.categories[BeverageType.DISTILLED_SPIRITS].valid_sizes_ml

    def test_empty_file(self, tmp_path):
        assert load_config(_write(tmp_path, "")) == ComplianceConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Could not parse"):
            load_config(_write(tmp_path, "min_similarity: [0.5\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(_write(tmp_path, "- 1\n- 2\n"))

    def test_invalid_value(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Invalid compliance config"):
            load_config(_write(tmp_path, "correction_deadline_days: 0\n"))

    def test_unknown_field_name(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, "rejection_fields: [bottle_color]\n"))


class TestGetConfig:
    def test_defaults_without_env(self, monkeypatch, clear_config_cache):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert get_config() == ComplianceConfig()

    def test_reads_env_file(self, tmp_path, monkeypatch, clear_config_cache):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(_write(tmp_path, "max_images: 4\n")))
        assert get_config().max_images == 4

    def test_cached(self, monkeypatch, clear_config_cache):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert get_config() is get_config()
