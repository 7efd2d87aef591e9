"""Reading and writing options in a chosen scope.

optscope.options
~~~~~~~~~~~~~~~~

Public entry points:

- :func:`get_option_value` / :func:`set_option_value`, the scoped accessors.
- :func:`get_option_info` / :func:`get_all_options_info`, option metadata.
- :class:`OptionsMixin`, the same operations as methods of
  :class:`~optscope.editor.Editor` (global scope),
  :class:`~optscope.editor.Window` and :class:`~optscope.editor.Buffer`.

Every request goes through the same steps: validate
(:mod:`optscope.validate`), optionally probe a filetype
(:mod:`optscope.probe`), switch the ambient context
(:mod:`optscope.context`), access the registry, restore the context.

Scope semantics
---------------

``scope=None``
    Like ``:set``: reads the effective value, writes global and local values.
``scope="global"``
    Like ``:setglobal``.
``scope="local"``
    Like ``:setlocal``. Reading a global-local option that has no local value
    returns ``None``.
``win=<handle>``
    Target a window. Writing a global-local option with no ``scope`` changes
    the window's local value only, never the global one.
``buf=<handle>``
    Target a buffer. Always local.
``filetype=<name>`` (reads only)
    The value a new buffer of that filetype would get.
"""

from __future__ import annotations

import logging
import typing as t

from optscope._internal import trace
from optscope.constants import OptionScope, ScopeKind
from optscope.context import switch_option_context
from optscope.probe import filetype_probe_buffer
from optscope.validate import ScopeRequest, validate_option_request
from optscope.value import NIL, from_option_value, to_option_value

from . import exc

if t.TYPE_CHECKING:
    from typing_extensions import Self

    from optscope.editor import Buffer, Editor, Window
    from optscope.registry import OptionInfo
    from optscope.validate import ResolvedScope
    from optscope.value import MaybeOptionValue, OptionValue


logger = logging.getLogger(__name__)


def get_option_value_for(editor: Editor, resolved: ResolvedScope) -> MaybeOptionValue:
    """Read the option described by *resolved*.

    Returns :data:`~optscope.value.NIL` when the option has no value in the
    requested scope.

    Raises
    ------
    :exc:`exc.ResolvedScopeConsumed`, :exc:`exc.SwitchFailure`
    """
    resolved.claim()
    with switch_option_context(
        editor, resolved.required_scope_kind, resolved.context_handle
    ):
        return editor.options.read(resolved.option_index, resolved.scope)


def set_option_value_for(
    editor: Editor,
    resolved: ResolvedScope,
    value: MaybeOptionValue,
    channel_id: int = 0,
) -> None:
    """Write *value* to the option described by *resolved*.

    Presentation options are written through
    :meth:`~optscope.registry.Registry.write_presentation`, all others through
    :meth:`~optscope.registry.Registry.write`.

    Raises
    ------
    :exc:`exc.OptionSetError`
        The registry rejected the value.
    :exc:`exc.ResolvedScopeConsumed`, :exc:`exc.SwitchFailure`
    """
    resolved.claim()
    registry = editor.options
    index = resolved.option_index
    scope = resolved.effective_write_scope
    with (
        switch_option_context(
            editor, resolved.required_scope_kind, resolved.context_handle
        ),
        registry.script_context(channel_id),
    ):
        if registry.is_presentation(index):
            error = registry.write_presentation(resolved.name, index, value, scope)
        else:
            error = registry.write(resolved.name, index, value, scope)
    if error is not None:
        raise exc.OptionSetError(error)
    logger.debug(
        "set %s=%r (%s, scope=%s)",
        resolved.name,
        value,
        resolved.required_scope_kind.name,
        scope.value if scope is not None else None,
    )


def get_option_value_strict(
    editor: Editor,
    name: str,
    kind: ScopeKind,
    target: Window | Buffer | None = None,
) -> MaybeOptionValue:
    """Read *name* only if it has a value of its own in *kind* storage.

    Global-local options have no separate value in window or buffer storage
    unless set locally; options of another locality have none at all. In both
    cases :data:`~optscope.value.NIL` is returned.

    >>> get_option_value_strict(editor, "columns", ScopeKind.Buffer)
    NIL
    >>> get_option_value_strict(editor, "shiftwidth", ScopeKind.Buffer)
    8
    >>> get_option_value_strict(editor, "tags", ScopeKind.Buffer)
    NIL
    """
    registry = editor.options
    index = registry.find(name)
    if index is None or registry.is_hidden(index):
        raise exc.UnknownOption(name)

    if not registry.has_scope(index, kind):
        return NIL
    scope = OptionScope.Global if kind is ScopeKind.Global else OptionScope.Local
    with switch_option_context(editor, kind, target):
        return registry.read(index, scope)


def get_requested_option(editor: Editor, request: ScopeRequest) -> OptionValue | None:
    """Validate *request* and read its value, ``None`` standing for no value."""
    with trace.span("options.get", option=request.name):
        resolved = validate_option_request(editor, request, allow_filetype=True)
        if resolved.filetype is not None:
            with filetype_probe_buffer(editor, resolved.filetype):
                value = get_option_value_for(editor, resolved)
        else:
            value = get_option_value_for(editor, resolved)
    return from_option_value(value)


def set_requested_option(
    editor: Editor,
    request: ScopeRequest,
    value: object,
    channel_id: int = 0,
) -> None:
    """Validate *request* and *value*, then write the value."""
    with trace.span("options.set", option=request.name):
        resolved = validate_option_request(editor, request)
        set_option_value_for(editor, resolved, to_option_value(value), channel_id)


def requested_option_info(editor: Editor, request: ScopeRequest) -> OptionInfo:
    """Validate *request* and describe its option.

    Last-set information is read from the request's window or buffer, the
    current ones by default.
    """
    resolved = validate_option_request(editor, request)
    target = resolved.context_handle
    buffer = editor.curbuf
    window = editor.curwin
    if resolved.required_scope_kind is ScopeKind.Buffer:
        buffer = t.cast("Buffer", target)
    elif resolved.required_scope_kind is ScopeKind.Window:
        window = t.cast("Window", target)
    return editor.options.info(
        resolved.option_index, resolved.scope, buffer=buffer, window=window
    )


def get_option_value(
    editor: Editor,
    name: str,
    *,
    scope: str | OptionScope | None = None,
    win: int | None = None,
    buf: int | None = None,
    filetype: str | None = None,
) -> OptionValue | None:
    """Return the value of option *name*.

    Parameters
    ----------
    editor : :class:`~optscope.editor.Editor`
    name : str
        Full or short option name.
    scope : str, optional
        ``"local"`` or ``"global"``.
    win : int, optional
        Window handle, ``0`` for the current window.
    buf : int, optional
        Buffer handle, ``0`` for the current buffer.
    filetype : str, optional
        Read the value a new buffer of this filetype would get. Cannot be
        combined with the other parameters.

    Returns
    -------
    bool, int, str or None
        ``None`` if the option has no value in *scope*.

    Examples
    --------
    >>> get_option_value(editor, "tabstop")
    8
    >>> get_option_value(editor, "tags", scope="local") is None
    True

    >>> get_option_value(editor, "sw", buf=0, win=0)
    Traceback (most recent call last):
        ...
    optscope.exc.ConflictingParameters: cannot use both 'buf' and 'win'
    """
    request = ScopeRequest(name, scope=scope, win=win, buf=buf, filetype=filetype)
    return get_requested_option(editor, request)


def set_option_value(
    editor: Editor,
    name: str,
    value: object,
    *,
    scope: str | OptionScope | None = None,
    win: int | None = None,
    buf: int | None = None,
    channel_id: int = 0,
) -> None:
    """Set option *name* to *value*.

    ``value=None`` removes the local value of a global-local option so the
    global one applies again.

    Raises
    ------
    :exc:`exc.ValueTypeMismatch`
        *value* is not a bool, int, str or None.
    :exc:`exc.OptionSetError`
        The option rejected the value.

    Examples
    --------
    >>> set_option_value(editor, "scrolloff", 5, win=0)
    >>> get_option_value(editor, "scrolloff", win=0)
    5
    >>> get_option_value(editor, "scrolloff", scope="global")
    0

    >>> set_option_value(editor, "tabstop", 0)
    Traceback (most recent call last):
        ...
    optscope.exc.OptionSetError: Argument must be at least 1: tabstop=0
    """
    request = ScopeRequest(name, scope=scope, win=win, buf=buf)
    set_requested_option(editor, request, value, channel_id)


def get_option_info(
    editor: Editor,
    name: str,
    *,
    scope: str | OptionScope | None = None,
    win: int | None = None,
    buf: int | None = None,
) -> OptionInfo:
    """Return metadata of option *name*.

    >>> info = get_option_info(editor, "ts")
    >>> info["name"], info["type"], info["scope"]
    ('tabstop', 'number', 'buf')
    """
    return requested_option_info(
        editor, ScopeRequest(name, scope=scope, win=win, buf=buf)
    )


def get_all_options_info(editor: Editor) -> dict[str, OptionInfo]:
    """Return metadata of every option, keyed by full name."""
    return editor.options.all_info()


class OptionsMixin:
    """Option access for an :class:`~optscope.editor.Editor`, a window or a buffer.

    Subclasses name their own target through ``_option_target()``: no handle for
    the editor, ``win`` for a window, ``buf`` for a buffer.
    """

    def _option_target(self) -> dict[str, int]:
        raise NotImplementedError

    @property
    def _option_editor(self) -> Editor:
        return t.cast("Editor", getattr(self, "editor", self))

    def set_option(
        self,
        option: str,
        value: OptionValue,
        scope: OptionScope | None = None,
    ) -> Self:
        """Set *option* on this object.

        Buffers take no *scope*: buffer values are always local.

        Examples
        --------
        >>> win = editor.curwin
        >>> win.set_option("wrap", False)
        Window(handle=1000, ...)
        >>> win.show_option("wrap")
        False
        """
        set_option_value(
            self._option_editor, option, value, scope=scope, **self._option_target()
        )
        return self

    def unset_option(self, option: str, scope: OptionScope | None = None) -> Self:
        """Remove the local value of a global-local *option*.

        >>> buf = editor.curbuf
        >>> buf.set_option("tags", "local.tags").show_option("tags")
        'local.tags'
        >>> buf.unset_option("tags").show_option("tags") is None
        True
        >>> editor.show_option("tags")
        './tags;,tags'
        """
        set_option_value(
            self._option_editor, option, None, scope=scope, **self._option_target()
        )
        return self

    def show_option(
        self,
        option: str,
        scope: OptionScope | None = None,
    ) -> OptionValue | None:
        """Return the value of *option* for this object."""
        return get_option_value(
            self._option_editor, option, scope=scope, **self._option_target()
        )

    def show_option_info(
        self,
        option: str,
        scope: OptionScope | None = None,
    ) -> OptionInfo:
        """Return metadata of *option*, with last-set data for this object."""
        return get_option_info(
            self._option_editor, option, scope=scope, **self._option_target()
        )
