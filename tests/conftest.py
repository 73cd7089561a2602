"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from colormigrate.config_runtime import DEFAULTS
from colormigrate.mapping import load_mapping_from_yaml
from colormigrate.profile import RewriteProfile

from dart_samples import BADGE_DART, MAPPING_YAML, SETTINGS_DART, UNMAPPED_DART


@pytest.fixture
def profile():
    """Default Flutter profile with the Material colorScheme slots."""
    return RewriteProfile.from_config(DEFAULTS)


@pytest.fixture
def mapping():
    return load_mapping_from_yaml(MAPPING_YAML)


@pytest.fixture
def cfg():
    """Built-in defaults, without reading any config file or environment."""
    import copy

    return copy.deepcopy(DEFAULTS)


@pytest.fixture
def dart_project(tmp_path: Path) -> Path:
    """Small Flutter-shaped project with mapped, preserved and unmapped references."""
    lib = tmp_path / "lib"
    (lib / "widgets").mkdir(parents=True)
    (lib / "widgets" / "badge.dart").write_text(BADGE_DART, encoding="utf-8")
    (lib / "settings.dart").write_text(SETTINGS_DART, encoding="utf-8")
    (lib / "dividers.dart").write_text(UNMAPPED_DART, encoding="utf-8")
    (tmp_path / "color_mapping.yaml").write_text(MAPPING_YAML, encoding="utf-8")
    return tmp_path


@pytest.fixture
def caplog_loguru():
    """Messages logged through loguru while the test runs."""
    from colormigrate.utils.logging import logger

    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
