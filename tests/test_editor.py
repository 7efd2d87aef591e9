"""Tests for optscope.editor."""

from __future__ import annotations

import pytest

from optscope import exc
from optscope.editor import FIRST_WINDOW_HANDLE, Editor


def test_initial_state(editor: Editor) -> None:
    assert editor.curwin.handle == FIRST_WINDOW_HANDLE
    assert editor.curbuf.handle == 1
    assert editor.curwin.buffer is editor.curbuf
    assert editor.windows == [editor.curwin]
    assert editor.buffers == [editor.curbuf]


def test_resolve_handles(editor: Editor) -> None:
    window = editor.new_window()
    buffer = editor.new_buffer()

    assert editor.resolve_window(0) is editor.curwin
    assert editor.resolve_window(window.handle) is window
    assert editor.resolve_buffer(0) is editor.curbuf
    assert editor.resolve_buffer(buffer.handle) is buffer

    with pytest.raises(exc.WindowNotFound):
        editor.resolve_window(buffer.handle)
    with pytest.raises(exc.BufferNotFound):
        editor.resolve_buffer(window.handle)


def test_unlisted_buffers(editor: Editor) -> None:
    listed = editor.new_buffer("listed.txt")
    unlisted = editor.new_buffer("unlisted.txt", listed=False)

    assert listed in editor.buffers
    assert unlisted not in editor.buffers
    assert unlisted in editor.list_buffers(all_=True)


def test_scratch_buffers_stay_out_of_directory(editor: Editor) -> None:
    scratch = editor.allocate_scratch_buffer()
    assert scratch is not None

    assert scratch.scratch
    assert not scratch.listed
    assert scratch not in editor.list_buffers(all_=True)
    assert editor.is_valid_buffer(scratch)
    with pytest.raises(exc.BufferNotFound):
        editor.resolve_buffer(scratch.handle)

    editor.wipe_buffer(scratch)
    assert not editor.is_valid_buffer(scratch)


def test_buffer_limit() -> None:
    editor = Editor(max_buffers=2)
    editor.new_buffer()

    assert editor.allocate_scratch_buffer() is None
    with pytest.raises(exc.OptScopeException, match="Could not create buffer"):
        editor.new_buffer()


def test_wipe_shown_buffer(editor: Editor) -> None:
    first = editor.curbuf
    doomed = editor.new_buffer("doomed.txt")
    window = editor.new_window(doomed)
    editor.set_current_window(window)

    editor.wipe_buffer(doomed)

    assert not doomed.valid
    assert window.buffer is first
    assert editor.curbuf is first
    with pytest.raises(exc.BufferNotFound):
        editor.resolve_buffer(doomed.handle)


def test_wipe_last_buffer_creates_empty_one(editor: Editor) -> None:
    only = editor.curbuf

    editor.wipe_buffer(only)

    assert editor.curbuf is not only
    assert editor.buffers == [editor.curbuf]


def test_close_window(editor: Editor) -> None:
    first = editor.curwin
    second = editor.new_window()
    editor.set_current_window(second)

    editor.close_window(second)

    assert second.closed
    assert editor.curwin is first
    assert editor.windows == [first]
    # closing twice is a no-op
    editor.close_window(second)


def test_close_last_window(editor: Editor) -> None:
    with pytest.raises(exc.LastWindow):
        editor.close_window(editor.curwin)


def test_new_window_keeps_focus(editor: Editor) -> None:
    first = editor.curwin

    window = editor.new_window(editor.new_buffer())

    assert editor.curwin is first
    assert window.handle == FIRST_WINDOW_HANDLE + 1


def test_set_current_buffer(editor: Editor) -> None:
    buffer = editor.new_buffer("b.txt")

    editor.set_current_buffer(buffer)

    assert editor.curbuf is buffer
    assert editor.curwin.buffer is buffer

    scratch = editor.allocate_scratch_buffer()
    assert scratch is not None
    with pytest.raises(exc.BufferNotFound):
        editor.set_current_buffer(scratch)


def test_set_current_window_rejects_closed(editor: Editor) -> None:
    window = editor.new_window()
    editor.close_window(window)

    with pytest.raises(exc.WindowNotFound):
        editor.set_current_window(window)


def test_fallback_window(editor: Editor) -> None:
    first = editor.curwin
    second = editor.new_window()
    third = editor.new_window()
    editor.set_current_window(third)
    editor.set_current_window(second)

    assert editor.fallback_window() is second

    editor.close_window(second)
    assert editor.curwin is third
    assert editor.fallback_window() is third

    editor.close_window(third)
    assert editor.fallback_window() is first


def test_return_non_autocmd_window(editor: Editor) -> None:
    with pytest.raises(exc.EditorStateError, match="not an autocmd window"):
        editor._return_autocmd_window(editor.curwin)

    assert editor.curwin in editor.windows
    assert not editor.curwin.closed
