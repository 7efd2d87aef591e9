"""Temporary switching of the ambient window and buffer.

optscope.context
~~~~~~~~~~~~~~~~

The registry reads and writes local values of ``editor.curwin`` and
``editor.curbuf`` only. To reach another window or buffer,
:func:`switch_option_context` makes it current for the duration of a ``with``
block and restores the previous state on every exit path, exceptions included.

Switches are silent: no ``WinEnter`` / ``BufEnter`` hooks run and focus history
is untouched, so from the user's point of view focus never moved.
"""

from __future__ import annotations

import contextlib
import logging
import typing as t

from optscope._internal import trace
from optscope._internal.frozen_dataclass import frozen_dataclass
from optscope.constants import ScopeKind

from . import exc

if t.TYPE_CHECKING:
    from collections.abc import Iterator

    from optscope.editor import Buffer, Editor, Window


logger = logging.getLogger(__name__)


@frozen_dataclass
class ContextSwitchToken:
    """State saved by a switch, needed to undo it."""

    kind: ScopeKind
    switched: bool = False
    saved_window: Window | None = None
    saved_buffer: Buffer | None = None
    #: Borrowed when no window shows the target buffer.
    autocmd_window: Window | None = None


def _switch_to_window(editor: Editor, window: Window) -> ContextSwitchToken:
    if window.closing or not editor.is_valid_window(window):
        raise exc.SwitchFailure(f"window {window.handle} is closed")
    if window is editor.curwin:
        return ContextSwitchToken(kind=ScopeKind.Window)

    token = ContextSwitchToken(
        kind=ScopeKind.Window,
        switched=True,
        saved_window=editor.curwin,
        saved_buffer=editor.curbuf,
    )
    editor._enter_window_noblock(window)
    logger.debug("switched to window %d", window.handle)
    return token


def _switch_to_buffer(editor: Editor, buffer: Buffer) -> ContextSwitchToken:
    if not buffer.valid or not editor.is_valid_buffer(buffer):
        raise exc.SwitchFailure(f"buffer {buffer.handle} was wiped")
    if buffer is editor.curbuf:
        return ContextSwitchToken(kind=ScopeKind.Buffer)

    saved_window, saved_buffer = editor.curwin, editor.curbuf
    visible = next(
        (
            window
            for window in editor.windows
            if window.buffer is buffer and not window.closing
        ),
        None,
    )
    if visible is not None:
        editor._enter_window_noblock(visible)
        logger.debug(
            "switched to window %d showing buffer %d",
            visible.handle,
            buffer.handle,
        )
        return ContextSwitchToken(
            kind=ScopeKind.Buffer,
            switched=True,
            saved_window=saved_window,
            saved_buffer=saved_buffer,
        )

    autocmd_window = editor._borrow_autocmd_window(buffer)
    editor._enter_window_noblock(autocmd_window)
    logger.debug("switched to buffer %d in an autocmd window", buffer.handle)
    return ContextSwitchToken(
        kind=ScopeKind.Buffer,
        switched=True,
        saved_window=saved_window,
        saved_buffer=saved_buffer,
        autocmd_window=autocmd_window,
    )


def acquire_option_context(
    editor: Editor,
    kind: ScopeKind,
    target: Window | Buffer | None = None,
) -> ContextSwitchToken:
    """Make *target* current. Pair every call with :func:`release_option_context`.

    Raises
    ------
    :exc:`exc.SwitchFailure`
        *target* is closing, closed or wiped. Nothing was switched.
    """
    if kind is ScopeKind.Global or target is None:
        return ContextSwitchToken(kind=kind)
    if kind is ScopeKind.Window:
        return _switch_to_window(editor, t.cast("Window", target))
    return _switch_to_buffer(editor, t.cast("Buffer", target))


def release_option_context(editor: Editor, token: ContextSwitchToken) -> None:
    """Undo the switch recorded in *token*.

    If the saved window was closed in the meantime, land in
    :meth:`~optscope.editor.Editor.fallback_window` instead.
    """
    if not token.switched:
        return
    if token.autocmd_window is not None:
        editor._return_autocmd_window(token.autocmd_window)

    saved = t.cast("Window", token.saved_window)
    if editor.is_valid_window(saved) and not saved.closing:
        editor._enter_window_noblock(saved)
        logger.debug("restored window %d", saved.handle)
        return

    fallback = editor.fallback_window()
    trace.point("context.fallback", saved=saved.handle, restored=fallback.handle)
    logger.warning(
        "window %d went away during option access, restoring to window %d",
        saved.handle,
        fallback.handle,
    )
    editor._enter_window_noblock(fallback)


@contextlib.contextmanager
def switch_option_context(
    editor: Editor,
    kind: ScopeKind,
    target: Window | Buffer | None = None,
) -> Iterator[ContextSwitchToken]:
    """Run the block with *target* as the current window or buffer.

    Examples
    --------
    >>> win = editor.new_window()
    >>> with switch_option_context(editor, ScopeKind.Window, win) as token:
    ...     editor.curwin is win, token.switched
    (True, True)
    >>> editor.curwin is win
    False

    Buffers without a window are reached through an internal window:

    >>> buf = editor.new_buffer("hidden.txt")
    >>> with switch_option_context(editor, ScopeKind.Buffer, buf) as token:
    ...     editor.curbuf is buf, token.autocmd_window is not None
    (True, True)
    >>> editor.curbuf is buf
    False
    """
    with trace.span(
        "context.switch",
        kind=kind.name,
        target=getattr(target, "handle", None),
    ):
        token = acquire_option_context(editor, kind, target)
        try:
            yield token
        finally:
            release_option_context(editor, token)
