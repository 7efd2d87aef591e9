"""optscope pytest plugin."""

from __future__ import annotations

import logging
import typing as t

import pytest

from optscope.editor import Editor

if t.TYPE_CHECKING:
    from optscope.registry import Registry

logger = logging.getLogger(__name__)


@pytest.fixture
def editor() -> Editor:
    """Return a fresh :class:`~optscope.editor.Editor` with default options.

    >>> from optscope.editor import Editor

    >>> def test_editor(editor: Editor) -> None:
    ...     assert editor.curwin.handle == 1000
    """
    return Editor()


@pytest.fixture
def registry(editor: Editor) -> Registry:
    """Return the option registry of :func:`editor`."""
    return editor.options


@pytest.fixture
def TestEditor() -> type[Editor]:
    """Return the :class:`~optscope.editor.Editor` class, for extra instances.

    >>> def test_two_editors(TestEditor) -> None:
    ...     first, second = TestEditor(), TestEditor()
    ...     first.set_option("columns", 120)
    ...     assert second.show_option("columns") == 80
    """
    return Editor
