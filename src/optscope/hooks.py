"""Helpers for editor event hooks.

Hooks are callbacks registered for an event name (``FileType``, ``WinEnter``,
``BufEnter``, ``WinClosed``, ...) together with a pattern matched against the
event's match string (the filetype for ``FileType``, the window handle for
``WinClosed``).

Each event holds its callbacks in sparse indexed
slots (``FileType[0]``, ``FileType[5]``), so removing one hook never renumbers
the others. Hooks run in index order.

Patterns are :mod:`fnmatch` patterns; a comma separates alternatives, so
``"python,lua"`` matches both filetypes.
"""

from __future__ import annotations

import dataclasses
import fnmatch
import logging
import typing as t

from optscope._internal.sparse_array import SparseArray
from optscope.constants import OptionScope, ScopeKind
from optscope.context import switch_option_context

from . import exc

if t.TYPE_CHECKING:
    from collections.abc import Callable

    from typing_extensions import Self

    from optscope.editor import Buffer, Editor, Window

    HookCallback = Callable[["HookEvent"], object]


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class HookEvent:
    """Arguments passed to a hook callback."""

    editor: Editor
    event: str
    match: str
    buffer: Buffer | None = None
    window: Window | None = None


@dataclasses.dataclass(frozen=True)
class Hook:
    """A registered callback and the pattern it runs for."""

    callback: HookCallback
    pattern: str = "*"

    def matches(self, match: str) -> bool:
        """Return whether *match* fits any comma-separated alternative.

        >>> Hook(print, "python,lua").matches("lua")
        True
        >>> Hook(print, "py*").matches("rust")
        False
        """
        return any(
            fnmatch.fnmatchcase(match, pattern.strip())
            for pattern in self.pattern.split(",")
        )


class HooksMixin:
    """Mixin for managing event hooks on an :class:`~optscope.editor.Editor`."""

    hooks: dict[str, SparseArray[Hook]]

    def __init__(self) -> None:
        self.hooks = {}

    def set_hook(
        self,
        event: str,
        callback: HookCallback,
        pattern: str = "*",
        index: int | None = None,
    ) -> Self:
        """Register *callback* for *event*, at *index* or after the last hook.

        Examples
        --------
        >>> calls = []
        >>> editor.set_hook("FileType", lambda ev: calls.append(ev.match), "python")
        <optscope.editor.Editor object at ...>
        >>> editor.run_hook("FileType", "python")
        <optscope.editor.Editor object at ...>
        >>> calls
        ['python']
        """
        slots = self.hooks.setdefault(event, SparseArray())
        hook = Hook(callback=callback, pattern=pattern)
        if index is None:
            slots.append(hook)
        else:
            slots.add(index, hook)
        return self

    def unset_hook(self, event: str, index: int | None = None) -> Self:
        """Remove the hook at *index*, or every hook for *event*."""
        if index is None:
            self.hooks.pop(event, None)
        elif event in self.hooks:
            self.hooks[event].pop(index, None)
        return self

    def show_hooks(self, event: str) -> SparseArray[Hook]:
        """Return a copy of the hooks registered for *event*."""
        return SparseArray(self.hooks.get(event, {}))

    def run_hook(
        self,
        event: str,
        match: str = "",
        buffer: Buffer | None = None,
        window: Window | None = None,
    ) -> Self:
        """Run every hook for *event* whose pattern matches *match*.

        Raises
        ------
        :exc:`exc.HookError`
            A callback raised. Hooks after it do not run.
        """
        hooks = self.hooks.get(event)
        if not hooks:
            return self
        editor = t.cast("Editor", self)
        payload = HookEvent(
            editor=editor, event=event, match=match, buffer=buffer, window=window
        )
        for hook in hooks.as_list():
            if not hook.matches(match):
                continue
            try:
                hook.callback(payload)
            except Exception as e:
                logger.debug("%s hook for %r failed", event, match, exc_info=True)
                raise exc.HookError(event, match) from e
        return self

    def attach_filetype(self, buffer: Buffer, filetype: str) -> None:
        """Run the ``FileType`` hooks for *filetype* in *buffer*.

        *buffer* must be the current buffer, so hooks that set local options
        without naming a buffer apply to it. Tagging the buffer with its
        ``filetype`` is up to the caller, see :meth:`set_filetype`.

        Raises
        ------
        :exc:`exc.EditorStateError`
            *buffer* is not the current buffer.
        :exc:`exc.HookError`
        """
        editor = t.cast("Editor", self)
        if editor.curbuf is not buffer:
            msg = f"buffer {buffer.handle} is not the current buffer"
            raise exc.EditorStateError(msg)
        self.run_hook("FileType", filetype, buffer=buffer, window=editor.curwin)

    def set_filetype(self, buffer: Buffer, filetype: str) -> Self:
        """Tag *buffer* with *filetype* and attach it, like ``:setfiletype``.

        >>> editor.set_filetype(editor.curbuf, "lua").curbuf.show_option("filetype")
        'lua'
        """
        editor = t.cast("Editor", self)
        with switch_option_context(editor, ScopeKind.Buffer, buffer):
            editor.options.set("filetype", filetype, OptionScope.Local)
            self.attach_filetype(buffer, filetype)
        return self
