"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from planar_homography.config import EstimatorConfig, load_config


def test_load_config_reads_all_sections(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    yaml.safe_dump(
        {
            "method": "LEAST_SQUARES",
            "logging": {"level": "debug", "output": str(tmp_path / "logs" / "estimator.log")},
            "dlt": {"rank_tolerance": 1e-9, "max_condition": 1e10},
            "least_squares": {"max_condition": 1e11},
            "refinement": {"enabled": True, "tolerance": 1e-10, "max_evaluations": 500},
        },
        config_path.open("w", encoding="utf-8"),
    )

    cfg = load_config(config_path)

    assert cfg.method == "least_squares"
    assert cfg.logging.level == "DEBUG"
    assert cfg.dlt.rank_tolerance == pytest.approx(1e-9)
    assert cfg.least_squares.max_condition == pytest.approx(1e11)
    assert cfg.refinement.enabled
    assert cfg.refinement.max_evaluations == 500


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg == EstimatorConfig()
    assert cfg.method == "dlt"
    assert not cfg.refinement.enabled


def test_repository_config_loads() -> None:
    path = Path(__file__).resolve().parents[1] / "configs" / "estimator.yaml"

    cfg = load_config(path)

    assert cfg.method == "dlt"


@pytest.mark.parametrize(
    "raw",
    [
        {"method": "ransac"},
        {"logging": {"level": "verbose"}},
        {"refinement": {"tolerance": 0.0}},
        {"dlt": {"rank_tolerance": 2.0}},
        {"refinement": {"max_evaluations": 0}},
    ],
)
def test_invalid_values_are_rejected(raw) -> None:
    with pytest.raises(ValidationError):
        EstimatorConfig.model_validate(raw)
