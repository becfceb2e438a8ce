import os
import logging
import yaml
from typing import Any, Dict, Optional
from core.config import DetectionOptions, DEFAULT_THRESHOLD_TRUE, DEFAULT_THRESHOLD_BORDERLINE, DEFAULT_MAX_BODY_BYTES
from models.signal import Signal, DEFAULT_WEIGHTS

logger = logging.getLogger(__name__)

DEFAULT_RULES_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "aspnet.yaml")


def load_detection_options(path: Optional[str] = None) -> DetectionOptions:
    """
    Loads scoring thresholds and signal weights from a YAML file.

    Missing keys keep their defaults. Unknown signal names and non-integer
    weights are logged and skipped.

    Args:
        path: YAML file to read (default: the bundled rules/aspnet.yaml)

    Returns:
        DetectionOptions built from the file
    """
    filepath = path or DEFAULT_RULES_FILE
    if path and not os.path.exists(path):
        logger.warning(f"Rules file not found: {path}, using bundled defaults")
        filepath = DEFAULT_RULES_FILE

    with open(filepath, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Rules file {filepath} must contain a mapping, got {type(data).__name__}")

    return options_from_mapping(data, source=filepath)


def options_from_mapping(data: Dict[str, Any], source: str = "<mapping>") -> DetectionOptions:
    weights = dict(DEFAULT_WEIGHTS)

    for name, value in (data.get("weights") or {}).items():
        try:
            signal = Signal(str(name).lower())
        except ValueError:
            logger.warning(f"Skipping unknown signal '{name}' in {source}")
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            logger.warning(f"Skipping non-integer weight for '{name}' in {source}: {value!r}")
            continue
        weights[signal] = value

    options = DetectionOptions(
        threshold_true=int(data.get("threshold_true", DEFAULT_THRESHOLD_TRUE)),
        threshold_borderline=int(data.get("threshold_borderline", DEFAULT_THRESHOLD_BORDERLINE)),
        max_body_bytes=int(data.get("max_body_bytes", DEFAULT_MAX_BODY_BYTES)),
        weights=weights,
    )
    logger.debug(
        f"Loaded detection options from {source}: true>={options.threshold_true}, "
        f"borderline>={options.threshold_borderline}, {len(weights)} weights"
    )
    return options
