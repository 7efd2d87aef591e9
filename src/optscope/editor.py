"""Pythonization of the editor's windows and buffers.

optscope.editor
~~~~~~~~~~~~~~~

:class:`Editor` is the explicit context value that every request is given. It
holds the *ambient* current window and buffer (``curwin`` / ``curbuf``), the
handle directory for windows and buffers, the option :class:`Registry` and the
event hooks.

Only two paths change ``curwin`` / ``curbuf``:

- User-facing focus changes, :meth:`Editor.set_current_window` and
  :meth:`Editor.set_current_buffer`, fire ``WinEnter`` / ``BufEnter`` hooks and
  record focus history.
- The ``_enter_window_noblock`` family, reserved for
  :mod:`optscope.context`, switches silently and is always paired with a
  restore.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging
import typing as t

from optscope.constants import CURRENT_HANDLE
from optscope.hooks import HooksMixin
from optscope.options import OptionsMixin
from optscope.registry import DEFAULT_OPTIONS, Registry

from . import exc

if t.TYPE_CHECKING:
    from collections.abc import Iterable

    from optscope.registry import LastSet, OptionDef
    from optscope.value import OptionValue


logger = logging.getLogger(__name__)

#: Window handles start here, buffer handles at 1.
FIRST_WINDOW_HANDLE = 1000


@dataclasses.dataclass(eq=False)
class Buffer(OptionsMixin):
    """A text buffer.

    Examples
    --------
    >>> buf = editor.new_buffer("notes.txt")
    >>> buf
    Buffer(handle=2, name='notes.txt', listed=True)
    >>> buf in editor.buffers
    True
    >>> buf.set_option("shiftwidth", 2).show_option("shiftwidth")
    2
    """

    editor: Editor = dataclasses.field(repr=False)
    handle: int
    name: str = ""
    listed: bool = True
    scratch: bool = dataclasses.field(default=False, repr=False)
    options: dict[str, OptionValue] = dataclasses.field(
        default_factory=dict, repr=False
    )
    last_set: dict[str, LastSet] = dataclasses.field(default_factory=dict, repr=False)
    wiped: bool = dataclasses.field(default=False, repr=False)

    def _option_target(self) -> dict[str, int]:
        return {"buf": self.handle}

    @property
    def valid(self) -> bool:
        return not self.wiped


@dataclasses.dataclass(eq=False)
class Window(OptionsMixin):
    """A window showing a buffer.

    Examples
    --------
    >>> win = editor.new_window()
    >>> win.buffer is editor.curbuf
    True
    >>> win.set_option("number", True).show_option("number")
    True
    >>> editor.curwin.show_option("number")
    False
    """

    editor: Editor = dataclasses.field(repr=False)
    handle: int
    buffer: Buffer | None
    options: dict[str, OptionValue] = dataclasses.field(
        default_factory=dict, repr=False
    )
    last_set: dict[str, LastSet] = dataclasses.field(default_factory=dict, repr=False)
    #: Set while the window is being torn down.
    closing: bool = dataclasses.field(default=False, repr=False)
    closed: bool = dataclasses.field(default=False, repr=False)
    #: Internal window used to reach buffers no window shows.
    autocmd: bool = dataclasses.field(default=False, repr=False)

    def _option_target(self) -> dict[str, int]:
        return {"win": self.handle}

    @property
    def valid(self) -> bool:
        return not self.closed


class Editor(OptionsMixin, HooksMixin):
    """An editor instance: windows, buffers, options and hooks.

    Parameters
    ----------
    definitions : iterable of :class:`~optscope.registry.OptionDef`, optional
        Option table, defaults to :data:`~optscope.registry.DEFAULT_OPTIONS`.
    max_buffers : int, optional
        Upper bound of buffers alive at once, scratch buffers included.

    Examples
    --------
    >>> editor = Editor()
    >>> editor.curwin
    Window(handle=1000, buffer=Buffer(handle=1, name='', listed=True))
    >>> editor.curbuf is editor.curwin.buffer
    True
    >>> editor.set_option("columns", 100).show_option("columns")
    100
    """

    curwin: Window
    curbuf: Buffer

    def __init__(
        self,
        definitions: Iterable[OptionDef] | None = None,
        max_buffers: int | None = None,
    ) -> None:
        HooksMixin.__init__(self)
        self.max_buffers = max_buffers
        self.options = Registry(
            self, DEFAULT_OPTIONS if definitions is None else definitions
        )
        self._buffer_handles = itertools.count(1)
        self._window_handles = itertools.count(FIRST_WINDOW_HANDLE)
        self._buffers: dict[int, Buffer] = {}
        self._scratch: dict[int, Buffer] = {}
        self._windows: dict[int, Window] = {}
        self._autocmd_pool: list[Window] = []
        self._focus_history: list[int] = []

        first_buffer = self.new_buffer()
        first_window = self._create_window(first_buffer, source=None)
        self.curwin = first_window
        self.curbuf = first_buffer
        self._record_focus(first_window)

    def _option_target(self) -> dict[str, int]:
        return {}

    """
    Handle directory
    """

    @property
    def windows(self) -> list[Window]:
        """Open windows, in handle order."""
        return [self._windows[handle] for handle in sorted(self._windows)]

    @property
    def buffers(self) -> list[Buffer]:
        """Listed buffers, in handle order."""
        return [buf for buf in self.list_buffers() if buf.listed]

    def list_buffers(self, all_: bool = False) -> list[Buffer]:
        """Return buffers in handle order, unlisted ones too when *all_* is set.

        Scratch buffers are never included.
        """
        return [
            self._buffers[handle]
            for handle in sorted(self._buffers)
            if all_ or self._buffers[handle].listed
        ]

    def resolve_window(self, handle: int) -> Window:
        """Return the window for *handle*, ``0`` meaning the current window.

        >>> editor.resolve_window(0) is editor.curwin
        True
        >>> editor.resolve_window(99)
        Traceback (most recent call last):
            ...
        optscope.exc.WindowNotFound: Invalid window id: 99
        """
        if handle == CURRENT_HANDLE:
            return self.curwin
        window = self._windows.get(handle)
        if window is None:
            raise exc.WindowNotFound(handle)
        return window

    def resolve_buffer(self, handle: int) -> Buffer:
        """Return the buffer for *handle*, ``0`` meaning the current buffer."""
        if handle == CURRENT_HANDLE:
            return self.curbuf
        buffer = self._buffers.get(handle)
        if buffer is None:
            raise exc.BufferNotFound(handle)
        return buffer

    def is_valid_window(self, window: Window) -> bool:
        if window.autocmd:
            return window.valid
        return self._windows.get(window.handle) is window

    def is_valid_buffer(self, buffer: Buffer) -> bool:
        if buffer.scratch:
            return self._scratch.get(buffer.handle) is buffer
        return self._buffers.get(buffer.handle) is buffer

    """
    Buffers
    """

    def _allocate_buffer(
        self,
        name: str = "",
        listed: bool = True,
        scratch: bool = False,
    ) -> Buffer | None:
        if (
            self.max_buffers is not None
            and len(self._buffers) + len(self._scratch) >= self.max_buffers
        ):
            logger.debug("buffer limit %d reached", self.max_buffers)
            return None
        buffer = Buffer(
            editor=self,
            handle=next(self._buffer_handles),
            name=name,
            listed=listed and not scratch,
            scratch=scratch,
        )
        self.options.init_buffer(buffer)
        if scratch:
            self._scratch[buffer.handle] = buffer
        else:
            self._buffers[buffer.handle] = buffer
        return buffer

    def new_buffer(self, name: str = "", listed: bool = True) -> Buffer:
        """Create a buffer without showing it.

        Raises
        ------
        :exc:`exc.OptScopeException`
            The buffer limit is reached.
        """
        buffer = self._allocate_buffer(name=name, listed=listed)
        if buffer is None:
            raise exc.OptScopeException("Could not create buffer")
        return buffer

    def allocate_scratch_buffer(self) -> Buffer | None:
        """Allocate an unlisted buffer outside the handle directory.

        Returns ``None`` if the buffer limit is reached.
        """
        return self._allocate_buffer(listed=False, scratch=True)

    def wipe_buffer(self, buffer: Buffer) -> None:
        """Remove *buffer* for good.

        Windows showing it switch to another listed buffer, or to a new empty
        buffer when there is none.
        """
        if buffer.wiped:
            return
        if buffer.scratch:
            self._scratch.pop(buffer.handle, None)
        else:
            self._buffers.pop(buffer.handle, None)
        for window in self.windows:
            if window.buffer is buffer:
                window.buffer = self._alternate_buffer()
        if self.curbuf is buffer:
            self.curbuf = t.cast("Buffer", self.curwin.buffer)
        buffer.wiped = True
        buffer.options.clear()
        logger.debug("wiped buffer %d", buffer.handle)

    def _alternate_buffer(self) -> Buffer:
        listed = self.buffers
        if listed:
            return listed[0]
        return self.new_buffer()

    """
    Windows
    """

    def _create_window(self, buffer: Buffer, source: Window | None) -> Window:
        window = Window(editor=self, handle=next(self._window_handles), buffer=buffer)
        self.options.init_window(window, source=source)
        self._windows[window.handle] = window
        return window

    def new_window(self, buffer: Buffer | None = None) -> Window:
        """Split the current window, showing *buffer* (default: the current one).

        Focus does not move. Window-local values are copied from the current
        window.
        """
        return self._create_window(buffer or self.curbuf, source=self.curwin)

    def close_window(self, window: Window) -> None:
        """Close *window*, running ``WinClosed`` hooks while it is torn down.

        Raises
        ------
        :exc:`exc.LastWindow`
            *window* is the only window left.
        """
        if window.autocmd or not self.is_valid_window(window) or window.closing:
            return
        if len(self._windows) == 1:
            raise exc.LastWindow()
        window.closing = True
        try:
            self.run_hook("WinClosed", str(window.handle), buffer=window.buffer)
        finally:
            window.closing = False
            window.closed = True
            self._windows.pop(window.handle, None)
            if self.curwin is window:
                self._enter_window_noblock(self.fallback_window())
        logger.debug("closed window %d", window.handle)

    def fallback_window(self) -> Window:
        """Return the window to land in when the expected one is gone.

        The most recently focused window that is still open wins. When none of
        the focus history survives, the open window with the lowest handle.
        """
        for handle in reversed(self._focus_history):
            window = self._windows.get(handle)
            if window is not None and not window.closing:
                return window
        return self.windows[0]

    """
    Focus
    """

    def _record_focus(self, window: Window) -> None:
        if window.handle in self._focus_history:
            self._focus_history.remove(window.handle)
        self._focus_history.append(window.handle)

    def set_current_window(self, window: Window) -> None:
        """Focus *window*, running ``WinLeave``, ``WinEnter`` and ``BufEnter`` hooks."""
        if not self.is_valid_window(window) or window.autocmd:
            raise exc.WindowNotFound(window.handle)
        if window is self.curwin:
            return
        previous_buffer = self.curbuf
        self.run_hook("WinLeave", str(self.curwin.handle), window=self.curwin)
        self._enter_window_noblock(window)
        self._record_focus(window)
        self.run_hook("WinEnter", str(window.handle), window=window)
        if self.curbuf is not previous_buffer:
            self.run_hook("BufEnter", self.curbuf.name, buffer=self.curbuf)

    def set_current_buffer(self, buffer: Buffer) -> None:
        """Show *buffer* in the current window and run ``BufEnter`` hooks."""
        if not self.is_valid_buffer(buffer) or buffer.scratch:
            raise exc.BufferNotFound(buffer.handle)
        if buffer is self.curbuf:
            return
        self.curwin.buffer = buffer
        self.curbuf = buffer
        self.run_hook("BufEnter", buffer.name, buffer=buffer)

    """
    Silent context changes, for optscope.context only
    """

    def _enter_window_noblock(self, window: Window) -> None:
        self.curwin = window
        self.curbuf = t.cast("Buffer", window.buffer)

    def _borrow_autocmd_window(self, buffer: Buffer) -> Window:
        if self._autocmd_pool:
            window = self._autocmd_pool.pop()
            window.options.clear()
            window.last_set.clear()
            window.closed = False
        else:
            window = Window(
                editor=self,
                handle=next(self._window_handles),
                buffer=None,
                autocmd=True,
            )
        window.buffer = buffer
        window.options.update(self.curwin.options)
        logger.debug(
            "borrowed autocmd window %d for buffer %d", window.handle, buffer.handle
        )
        return window

    def _return_autocmd_window(self, window: Window) -> None:
        if not window.autocmd:
            msg = f"window {window.handle} is not an autocmd window"
            raise exc.EditorStateError(msg)
        window.buffer = None
        window.closed = True
        self._autocmd_pool.append(window)
