from __future__ import annotations

import importlib

import pytest


@pytest.mark.parametrize(
    "name",
    [
        "tdameritrade",
        "tdameritrade.api",
        "tdameritrade.apps",
        "tdameritrade.chains",
        "tdameritrade.cli",
        "tdameritrade.utils",
    ],
)
def test_subpackages_are_regular_packages(name: str) -> None:
    mod = importlib.import_module(name)
    assert mod.__file__ is not None
    assert mod.__file__.endswith("__init__.py")
