import pytest

from core.config import DetectionOptions
from models.signal import Signal, DEFAULT_WEIGHTS
from rules.rules_loader import load_detection_options, options_from_mapping


def test_bundled_rules_match_defaults():
    options = load_detection_options()

    assert options.threshold_true == 7
    assert options.threshold_borderline == 4
    assert options.max_body_bytes == 256 * 1024
    assert dict(options.weights) == DEFAULT_WEIGHTS


def test_overrides_from_yaml(tmp_path):
    rules = tmp_path / "custom.yaml"
    rules.write_text(
        "threshold_true: 9\n"
        "threshold_borderline: 5\n"
        "weights:\n"
        "  header_iis_server: 0\n"
        "  html_viewstate: 6\n"
        "  made_up_signal: 3\n"
        "  cookie_aspnet: lots\n"
    )

    options = load_detection_options(str(rules))

    assert options.threshold_true == 9
    assert options.threshold_borderline == 5
    assert options.weight_for(Signal.HEADER_IIS_SERVER) == 0
    assert options.weight_for(Signal.HTML_VIEWSTATE) == 6
    assert options.weight_for(Signal.COOKIE_ASPNET) == 3


def test_missing_file_falls_back_to_bundled(tmp_path):
    options = load_detection_options(str(tmp_path / "missing.yaml"))

    assert options.threshold_true == 7


def test_non_mapping_file_is_rejected(tmp_path):
    rules = tmp_path / "list.yaml"
    rules.write_text("- header_iis_server\n")

    with pytest.raises(ValueError):
        load_detection_options(str(rules))


def test_inverted_thresholds_are_rejected():
    with pytest.raises(ValueError):
        options_from_mapping({"threshold_true": 3, "threshold_borderline": 5})


def test_weights_are_read_only():
    options = DetectionOptions()

    with pytest.raises(TypeError):
        options.weights[Signal.HTML_VIEWSTATE] = 100
