import json

import pytest

from wigsignal.config import AnalysisConfig
from wigsignal.smoothing import SmoothingMethod


def test_defaults():
    cfg = AnalysisConfig()
    assert cfg.telomere_length == 100_000
    assert cfg.centromere_window == 50_000
    assert cfg.only_complete is False
    assert cfg.smoothing_method is SmoothingMethod.WINDOW_MEAN
    assert cfg.smoothing_kwargs() == {}


def test_from_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"smoothing_method": "kernel", "bandwidth": "500", "kernel_step": 100}))
    cfg = AnalysisConfig.from_json(path)
    assert cfg.smoothing_method is SmoothingMethod.KERNEL
    assert cfg.bandwidth == 500
    assert cfg.smoothing_kwargs() == {"step": 100}
    assert cfg.to_dict()["smoothing_method"] == "kernel"


def test_unknown_keys_rejected():
    with pytest.raises(ValueError, match="Unknown config keys: windw"):
        AnalysisConfig.from_dict({"windw": 10})


@pytest.mark.parametrize(
    "kwargs",
    [
        {"bandwidth": 0},
        {"telomere_length": -5},
        {"smoothing_method": "loess"},
        {"kernel_step": 10},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        AnalysisConfig(**kwargs)


def test_overrides_skip_none():
    cfg = AnalysisConfig(bandwidth=300).with_overrides(bandwidth=None, telomere_length=20_000)
    assert cfg.bandwidth == 300
    assert cfg.telomere_length == 20_000
