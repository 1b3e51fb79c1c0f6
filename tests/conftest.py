"""Shared fixtures: isolate tests from the user's config file."""

import pytest
from pathlib import Path
from unittest.mock import patch

from cmdgen import config_file


@pytest.fixture(autouse=True)
def isolated_config():
    config_file.reset()
    with patch.object(config_file, "CONFIG_PATH", Path("/nonexistent/cmdgen/config.toml")):
        yield
    config_file.reset()
