"""Tests for model options, validation and environment loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from bayes_engine.config import ENV_PREFIX, GaussianScheme, ModelConfig
from bayes_engine.errors import ConfigurationError

ENV_NAMES = [
    "PSEUDO_COUNT",
    "PRIOR_FACTOR",
    "SIGMA_FACTOR",
    "DEFAULT_M2",
    "GAUSSIAN_SCHEME",
    "SOFT_GAUSSIAN",
    "MAX_WORKERS",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Unset every engine variable and remove anything set during the test."""
    for name in ENV_NAMES:
        monkeypatch.setenv(ENV_PREFIX + name, "")
        monkeypatch.delenv(ENV_PREFIX + name)
    return monkeypatch


class TestDefaults:
    def test_values(self) -> None:
        config = ModelConfig()
        assert config.pseudo_count == 1.0
        assert config.prior_factor == 1.0
        assert config.default_gaussian_sigma_factor == pytest.approx(1 / 6)
        assert config.default_gaussian_m2 == 0.0
        assert config.stop_words is None
        assert config.gaussian_scheme is GaussianScheme.WELFORD
        assert config.soft_gaussian is False
        assert config.max_workers is None

    def test_is_immutable(self) -> None:
        with pytest.raises(AttributeError):
            ModelConfig().pseudo_count = 2.0  # type: ignore[misc]

    def test_to_dict_reports_stop_word_count(self) -> None:
        data = ModelConfig(stop_words={"a", "the"}).to_dict()
        assert data["stop_words"] == 2
        assert data["gaussian_scheme"] == "welford"


class TestValidation:
    @pytest.mark.parametrize("options", [
        {"pseudo_count": 0.0},
        {"pseudo_count": -1.0},
        {"pseudo_count": float("nan")},
        {"prior_factor": -0.5},
        {"prior_factor": float("inf")},
        {"default_gaussian_sigma_factor": 0.0},
        {"default_gaussian_m2": -1.0},
        {"max_workers": 0},
        {"alphabet_pattern": "[unclosed"},
    ])
    def test_rejects_out_of_range(self, options: dict) -> None:
        with pytest.raises(ConfigurationError):
            ModelConfig(**options)

    def test_zero_prior_factor_allowed(self) -> None:
        assert ModelConfig(prior_factor=0.0).prior_factor == 0.0

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            ModelConfig(pseudo_count=0.0)


class TestCoercion:
    def test_stop_words_become_lowercase_frozenset(self) -> None:
        config = ModelConfig(stop_words=["The", "a", "AN"])
        assert config.stop_words == frozenset({"the", "a", "an"})

    def test_stop_words_string_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            ModelConfig(stop_words="the a an")  # type: ignore[arg-type]

    def test_scheme_from_string(self) -> None:
        assert ModelConfig(gaussian_scheme="Shared_Sigma").gaussian_scheme is (  # type: ignore[arg-type]
            GaussianScheme.SHARED_SIGMA
        )

    def test_unknown_scheme(self) -> None:
        with pytest.raises(ConfigurationError, match="gaussian_scheme"):
            ModelConfig(gaussian_scheme="bimodal")  # type: ignore[arg-type]


class TestReplace:
    def test_changes_only_given_options(self) -> None:
        config = ModelConfig(pseudo_count=0.5)
        updated = config.replace(prior_factor=2.0)
        assert updated.pseudo_count == 0.5
        assert updated.prior_factor == 2.0
        assert config.prior_factor == 1.0

    def test_unknown_option(self) -> None:
        with pytest.raises(TypeError, match="pseudo_cnt"):
            ModelConfig().replace(pseudo_cnt=0.5)

    def test_validates(self) -> None:
        with pytest.raises(ConfigurationError):
            ModelConfig().replace(pseudo_count=-2.0)


class TestFromEnv:
    def test_defaults_when_unset(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        assert ModelConfig.from_env(str(tmp_path / "missing.env")) == ModelConfig()

    def test_reads_variables(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        clean_env.setenv("BAYES_ENGINE_PSEUDO_COUNT", "0.1")
        clean_env.setenv("BAYES_ENGINE_PRIOR_FACTOR", "2")
        clean_env.setenv("BAYES_ENGINE_SIGMA_FACTOR", "0.05")
        clean_env.setenv("BAYES_ENGINE_GAUSSIAN_SCHEME", "shared_sigma")
        clean_env.setenv("BAYES_ENGINE_SOFT_GAUSSIAN", "yes")
        clean_env.setenv("BAYES_ENGINE_MAX_WORKERS", "4")

        config = ModelConfig.from_env(str(tmp_path / "missing.env"))

        assert config.pseudo_count == pytest.approx(0.1)
        assert config.prior_factor == 2.0
        assert config.default_gaussian_sigma_factor == pytest.approx(0.05)
        assert config.gaussian_scheme is GaussianScheme.SHARED_SIGMA
        assert config.soft_gaussian is True
        assert config.max_workers == 4

    def test_reads_dotenv_file(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(
            "BAYES_ENGINE_PSEUDO_COUNT=0.25\nBAYES_ENGINE_DEFAULT_M2=3\n", encoding="utf-8"
        )
        config = ModelConfig.from_env(str(env_file))
        assert config.pseudo_count == pytest.approx(0.25)
        assert config.default_gaussian_m2 == 3.0

    def test_environment_wins_over_dotenv(
        self, clean_env: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("BAYES_ENGINE_PSEUDO_COUNT=0.25\n", encoding="utf-8")
        clean_env.setenv("BAYES_ENGINE_PSEUDO_COUNT", "0.75")
        assert ModelConfig.from_env(str(env_file)).pseudo_count == pytest.approx(0.75)

    @pytest.mark.parametrize("raw,expected", [
        ("1", True), ("ON", True), ("true", True), ("0", False), ("no", False), ("False", False),
    ])
    def test_soft_gaussian_values(
        self, clean_env: pytest.MonkeyPatch, tmp_path: Path, raw: str, expected: bool
    ) -> None:
        clean_env.setenv("BAYES_ENGINE_SOFT_GAUSSIAN", raw)
        assert ModelConfig.from_env(str(tmp_path / "missing.env")).soft_gaussian is expected

    def test_blank_variable_ignored(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        clean_env.setenv("BAYES_ENGINE_MAX_WORKERS", "  ")
        assert ModelConfig.from_env(str(tmp_path / "missing.env")).max_workers is None

    @pytest.mark.parametrize("name,value", [
        ("PSEUDO_COUNT", "lots"),
        ("MAX_WORKERS", "2.5"),
        ("PSEUDO_COUNT", "0"),
        ("GAUSSIAN_SCHEME", "uniform"),
        ("SOFT_GAUSSIAN", "ture"),
    ])
    def test_invalid_value(
        self, clean_env: pytest.MonkeyPatch, tmp_path: Path, name: str, value: str
    ) -> None:
        clean_env.setenv(ENV_PREFIX + name, value)
        with pytest.raises(ConfigurationError):
            ModelConfig.from_env(str(tmp_path / "missing.env"))
