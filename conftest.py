"""Conftest.py (root-level).

We keep this in root pytest fixtures in pytest's doctest plugin to be available, as well
as avoiding conftest.py from being included in the wheel.
"""

from __future__ import annotations

import typing as t

import pytest
from _pytest.doctest import DoctestItem

from optscope.constants import OptionScope, ScopeKind
from optscope.editor import Buffer, Editor, Window

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def add_doctest_fixtures(
    request: pytest.FixtureRequest,
    doctest_namespace: dict[str, t.Any],
) -> None:
    """Configure doctest fixtures for pytest-doctest."""
    if isinstance(request._pyfuncitem, DoctestItem):
        doctest_namespace["Editor"] = Editor
        doctest_namespace["Window"] = Window
        doctest_namespace["Buffer"] = Buffer
        doctest_namespace["OptionScope"] = OptionScope
        doctest_namespace["ScopeKind"] = ScopeKind
        doctest_namespace["editor"] = request.getfixturevalue("editor")
        doctest_namespace["request"] = request
