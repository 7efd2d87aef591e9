"""In-memory option registry.

optscope.registry
~~~~~~~~~~~~~~~~~

The registry owns option definitions, global values, and the bookkeeping of
where each value was last set. Local values live on the
:class:`~optscope.editor.Window` and :class:`~optscope.editor.Buffer` objects.

Reads and writes are *scope-unaware* about which window or buffer they touch:
window-local values always come from ``editor.curwin`` and buffer-local values
from ``editor.curbuf``. Targeting another window or buffer is the job of
:mod:`optscope.context`.

Global-local options
--------------------

Options such as ``tags`` or ``scrolloff`` have a global value plus an optional
local override. Without a local value the global one applies:

- ``read(scope=None)`` returns the local value when set, else the global one.
- ``read(scope=OptionScope.Local)`` returns :data:`~optscope.value.NIL` when
  there is no local value.
- ``write(scope=None)`` sets the global value and drops the local override,
  like ``:set``.
"""

from __future__ import annotations

import contextlib
import logging
import typing as t

from optscope._internal.frozen_dataclass import frozen_dataclass
from optscope.constants import (
    SCOPE_KIND_LOCALITY_MAP,
    SID_API_CLIENT,
    ListKind,
    OptionLocality,
    OptionScope,
    OptionType,
    ScopeKind,
)
from optscope.value import (
    NIL,
    MaybeOptionValue,
    OptionValue,
    is_nil,
    value_typename,
)

from . import exc

if t.TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from optscope.editor import Buffer, Editor, Window

    PresentationObserver = Callable[[str, MaybeOptionValue], None]


logger = logging.getLogger(__name__)


class OptionInfo(t.TypedDict):
    """Option metadata, as returned by :meth:`Registry.info`."""

    name: str
    shortname: str
    type: str
    default: OptionValue
    was_set: bool
    last_set_sid: int
    last_set_linenr: int
    last_set_chan: int
    scope: str
    global_local: bool
    commalist: bool
    flaglist: bool
    allows_duplicates: bool


@frozen_dataclass
class OptionDef:
    """Definition of one option."""

    name: str
    type: OptionType
    default: OptionValue
    locality: OptionLocality = OptionLocality.Global
    shortname: str = ""
    global_local: bool = False
    hidden: bool = False
    #: Changing the value must notify the rendering surface.
    presentation: bool = False
    list_kind: ListKind = ListKind.Single
    allows_duplicates: bool = True
    #: Allowed values (items for comma lists, characters for flag lists).
    values: tuple[str, ...] | None = None
    minimum: int | None = None


@frozen_dataclass
class OptionAttributes:
    """Which scopes an option can be addressed in.

    >>> OptionAttributes(True, False, True).supported_scopes
    ('global', 'buffer-local')
    """

    supports_global: bool
    supports_window: bool
    supports_buffer: bool

    @property
    def supported_scopes(self) -> tuple[str, ...]:
        scopes: list[str] = []
        if self.supports_global:
            scopes.append("global")
        if self.supports_buffer:
            scopes.append("buffer-local")
        elif self.supports_window:
            scopes.append("window-local")
        return tuple(scopes)


@frozen_dataclass
class LastSet:
    """Where a value was last set: script id, line and channel."""

    script_id: int = 0
    line: int = 0
    channel: int = 0


_G = OptionLocality.Global
_W = OptionLocality.Window
_B = OptionLocality.Buffer
_BOOL = OptionType.Boolean
_NUM = OptionType.Number
_STR = OptionType.String

DEFAULT_OPTIONS: tuple[OptionDef, ...] = (
    # global
    OptionDef("background", _STR, "dark", shortname="bg", presentation=True,
              values=("light", "dark")),
    OptionDef("columns", _NUM, 80, shortname="co", presentation=True, minimum=12),
    OptionDef("edcompatible", _BOOL, False, shortname="ed", hidden=True),
    OptionDef("hidden", _BOOL, True, shortname="hid"),
    OptionDef("lines", _NUM, 24, presentation=True, minimum=2),
    OptionDef("shell", _STR, "sh", shortname="sh"),
    OptionDef("shortmess", _STR, "filnxtToOCF", shortname="shm",
              list_kind=ListKind.Flags, allows_duplicates=False,
              values=tuple("filmnrwxaoOstTWAIcCqFS")),
    OptionDef("termguicolors", _BOOL, False, shortname="tgc", presentation=True),
    OptionDef("updatetime", _NUM, 4000, shortname="ut", minimum=0),
    OptionDef("whichwrap", _STR, "b,s", shortname="ww", list_kind=ListKind.Comma,
              allows_duplicates=False,
              values=("b", "s", "h", "l", "<", ">", "~", "[", "]")),
    # global-local, buffer
    OptionDef("makeprg", _STR, "make", locality=_B, shortname="mp", global_local=True),
    OptionDef("path", _STR, ".,,", locality=_B, shortname="pa", global_local=True,
              list_kind=ListKind.Comma),
    OptionDef("tags", _STR, "./tags;,tags", locality=_B, shortname="tag",
              global_local=True, list_kind=ListKind.Comma),
    OptionDef("undolevels", _NUM, 1000, locality=_B, shortname="ul", global_local=True),
    # global-local, window
    OptionDef("scrolloff", _NUM, 0, locality=_W, shortname="so", global_local=True,
              minimum=0),
    OptionDef("sidescrolloff", _NUM, 0, locality=_W, shortname="siso",
              global_local=True, minimum=0),
    OptionDef("statusline", _STR, "", locality=_W, shortname="stl", global_local=True,
              presentation=True),
    # buffer-local
    OptionDef("bufhidden", _STR, "", locality=_B, shortname="bh",
              values=("", "hide", "unload", "delete", "wipe")),
    OptionDef("buftype", _STR, "", locality=_B, shortname="bt",
              values=("", "acwrite", "help", "nofile", "nowrite", "quickfix",
                      "terminal", "prompt")),
    OptionDef("expandtab", _BOOL, False, locality=_B, shortname="et"),
    OptionDef("fileformat", _STR, "unix", locality=_B, shortname="ff",
              values=("unix", "dos", "mac")),
    OptionDef("filetype", _STR, "", locality=_B, shortname="ft"),
    OptionDef("modeline", _BOOL, True, locality=_B, shortname="ml"),
    OptionDef("shiftwidth", _NUM, 8, locality=_B, shortname="sw", minimum=0),
    OptionDef("swapfile", _BOOL, True, locality=_B, shortname="swf"),
    OptionDef("tabstop", _NUM, 8, locality=_B, shortname="ts", minimum=1),
    OptionDef("textwidth", _NUM, 0, locality=_B, shortname="tw", minimum=0),
    OptionDef("undofile", _BOOL, False, locality=_B, shortname="udf"),
    # window-local
    OptionDef("cursorline", _BOOL, False, locality=_W, shortname="cul"),
    OptionDef("foldmethod", _STR, "manual", locality=_W, shortname="fdm",
              values=("manual", "indent", "expr", "marker", "syntax", "diff")),
    OptionDef("list", _BOOL, False, locality=_W),
    OptionDef("number", _BOOL, False, locality=_W, shortname="nu"),
    OptionDef("relativenumber", _BOOL, False, locality=_W, shortname="rnu"),
    OptionDef("signcolumn", _STR, "auto", locality=_W, shortname="scl",
              values=("auto", "no", "yes", "number")),
    OptionDef("wrap", _BOOL, True, locality=_W),
)


class Registry:
    """Option definitions and global storage for one :class:`~optscope.editor.Editor`.

    Examples
    --------
    >>> registry = editor.options
    >>> index = registry.find("sw")
    >>> registry.definition(index).name
    'shiftwidth'

    >>> registry.attributes(registry.find("columns"))
    OptionAttributes(supports_global=True, supports_window=False, supports_buffer=False)

    >>> registry.find("nosuchoption") is None
    True
    """

    def __init__(
        self,
        editor: Editor,
        definitions: Iterable[OptionDef] = DEFAULT_OPTIONS,
    ) -> None:
        self._editor = editor
        self._definitions: list[OptionDef] = list(definitions)
        self._names: dict[str, int] = {}
        for index, opt in enumerate(self._definitions):
            self._names[opt.name] = index
            if opt.shortname:
                self._names[opt.shortname] = index
        self._global: dict[int, OptionValue] = {
            index: opt.default for index, opt in enumerate(self._definitions)
        }
        self._global_last_set: dict[int, LastSet] = {}
        self._was_set: set[int] = set()
        self._script_ctx = LastSet()
        self._observers: list[PresentationObserver] = []

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[OptionDef]:
        return iter(self._definitions)

    def find(self, name: str) -> int | None:
        """Return the index of option *name* (full or short name), if any."""
        return self._names.get(name)

    def definition(self, index: int) -> OptionDef:
        return self._definitions[index]

    def is_hidden(self, index: int) -> bool:
        return self._definitions[index].hidden

    def is_presentation(self, index: int) -> bool:
        return self._definitions[index].presentation

    def attributes(self, index: int) -> OptionAttributes:
        opt = self._definitions[index]
        return OptionAttributes(
            supports_global=opt.locality is OptionLocality.Global or opt.global_local,
            supports_window=opt.locality is OptionLocality.Window,
            supports_buffer=opt.locality is OptionLocality.Buffer,
        )

    def has_scope(self, index: int, kind: ScopeKind) -> bool:
        """Return whether the option has a value of its own in *kind* storage.

        Window- and buffer-local options keep a global value too (the one new
        windows and buffers start from), so only hidden options lack it.
        """
        opt = self._definitions[index]
        if opt.hidden:
            return False
        if kind is ScopeKind.Global:
            return True
        return opt.locality is SCOPE_KIND_LOCALITY_MAP[kind]

    def _holder(self, opt: OptionDef) -> Window | Buffer:
        if opt.locality is OptionLocality.Window:
            return self._editor.curwin
        return self._editor.curbuf

    def read(self, index: int, scope: OptionScope | None = None) -> MaybeOptionValue:
        """Return the option value in *scope* for the current window/buffer.

        >>> registry = editor.options
        >>> registry.read(registry.find("tags"), OptionScope.Local)
        NIL
        >>> registry.read(registry.find("tags"))
        './tags;,tags'
        """
        opt = self._definitions[index]
        if opt.hidden:
            return NIL
        if opt.locality is OptionLocality.Global or scope is OptionScope.Global:
            return self._global[index]

        holder = self._holder(opt)
        local = holder.options.get(opt.name, NIL)
        if opt.global_local and scope is None and is_nil(local):
            return self._global[index]
        return local

    def _check_value(self, opt: OptionDef, value: MaybeOptionValue) -> str | None:
        got = value_typename(value)
        if got != opt.type.value:
            if not is_nil(value):
                got = f"{got} {value!r}"
            return (
                f"Invalid value for option '{opt.name}': "
                f"expected {opt.type.value}, got {got}"
            )
        value = t.cast("OptionValue", value)
        if opt.minimum is not None and t.cast("int", value) < opt.minimum:
            return f"Argument must be at least {opt.minimum}: {opt.name}={value}"
        if opt.values is not None:
            if not isinstance(value, str):
                return f"Invalid argument: {opt.name}={value}"
            if opt.list_kind is ListKind.Comma:
                items: list[str] = [item for item in value.split(",") if item]
            elif opt.list_kind is ListKind.Flags:
                items = list(value)
            else:
                items = [value]
            if any(item not in opt.values for item in items):
                return f"Invalid argument: {opt.name}={value}"
        return None

    def write(
        self,
        name: str,
        index: int,
        value: MaybeOptionValue,
        scope: OptionScope | None = None,
    ) -> str | None:
        """Write *value* into *scope* for the current window/buffer.

        Returns an error message instead of raising, ``None`` on success.

        >>> registry = editor.options
        >>> registry.write("shiftwidth", registry.find("shiftwidth"), "four")
        "Invalid value for option 'shiftwidth': expected number, got string 'four'"
        >>> registry.write("shiftwidth", registry.find("shiftwidth"), 4) is None
        True
        """
        opt = self._definitions[index]
        if opt.hidden:
            return f"Unknown option '{name}'"

        if is_nil(value):
            if not opt.global_local or scope is OptionScope.Global:
                return self._check_value(opt, value)
            holder = self._holder(opt)
            holder.options.pop(opt.name, None)
            holder.last_set.pop(opt.name, None)
            logger.debug("unset local value of %s", opt.name)
            return None

        error = self._check_value(opt, value)
        if error is not None:
            return error
        value = t.cast("OptionValue", value)

        write_global = opt.locality is OptionLocality.Global or scope is not OptionScope.Local
        write_local = opt.locality is not OptionLocality.Global and (
            scope is OptionScope.Local or (scope is None and not opt.global_local)
        )

        if write_global:
            self._global[index] = value
            self._global_last_set[index] = self._script_ctx
        if write_local:
            holder = self._holder(opt)
            holder.options[opt.name] = value
            holder.last_set[opt.name] = self._script_ctx
        elif opt.global_local and scope is None:
            holder = self._holder(opt)
            holder.options.pop(opt.name, None)
            holder.last_set.pop(opt.name, None)

        self._was_set.add(index)
        logger.debug(
            "set %s=%r (global=%s, local=%s)", opt.name, value, write_global, write_local
        )
        return None

    def write_presentation(
        self,
        name: str,
        index: int,
        value: MaybeOptionValue,
        scope: OptionScope | None = None,
    ) -> str | None:
        """Write like :meth:`write`, then notify presentation observers.

        Raises
        ------
        :exc:`exc.PresentationObserverError`
            An observer raised. The value is written all the same.
        """
        error = self.write(name, index, value, scope)
        if error is not None:
            return error
        new_value = self.read(index, scope)
        opt_name = self._definitions[index].name
        for observer in list(self._observers):
            try:
                observer(opt_name, new_value)
            except Exception as e:
                logger.debug("observer for %r failed", opt_name, exc_info=True)
                raise exc.PresentationObserverError(opt_name) from e
        return None

    def add_presentation_observer(self, observer: PresentationObserver) -> None:
        """Call *observer* with ``(name, value)`` after a presentation option changes."""
        self._observers.append(observer)

    def remove_presentation_observer(self, observer: PresentationObserver) -> None:
        self._observers.remove(observer)

    def get(self, name: str, scope: OptionScope | None = None) -> MaybeOptionValue:
        """Read option *name* from the current window/buffer.

        Raises
        ------
        :exc:`exc.UnknownOption`
        """
        index = self.find(name)
        if index is None or self.is_hidden(index):
            raise exc.UnknownOption(name)
        return self.read(index, scope)

    def set(
        self,
        name: str,
        value: MaybeOptionValue,
        scope: OptionScope | None = None,
    ) -> None:
        """Set option *name* on the current window/buffer.

        This is the scope-unaware accessor hooks and editor code use.

        Raises
        ------
        :exc:`exc.UnknownOption`, :exc:`exc.OptionSetError`

        Examples
        --------
        >>> editor.options.set("expandtab", True, OptionScope.Local)
        >>> editor.options.get("et")
        True
        """
        index = self.find(name)
        if index is None or self.is_hidden(index):
            raise exc.UnknownOption(name)
        if self.is_presentation(index):
            error = self.write_presentation(name, index, value, scope)
        else:
            error = self.write(name, index, value, scope)
        if error is not None:
            raise exc.OptionSetError(error)

    @contextlib.contextmanager
    def script_context(
        self,
        channel_id: int,
        script_id: int = SID_API_CLIENT,
        line: int = 0,
    ) -> Iterator[LastSet]:
        """Attribute writes inside the block to *channel_id*."""
        saved = self._script_ctx
        self._script_ctx = LastSet(script_id=script_id, line=line, channel=channel_id)
        try:
            yield self._script_ctx
        finally:
            self._script_ctx = saved

    def init_buffer(self, buffer: Buffer) -> None:
        """Give a new buffer its buffer-local values, copied from the global ones."""
        for index, opt in enumerate(self._definitions):
            if opt.locality is OptionLocality.Buffer and not opt.global_local:
                buffer.options[opt.name] = self._global[index]

    def init_window(self, window: Window, source: Window | None = None) -> None:
        """Give a new window its window-local values.

        Values come from *source* (the window being split) when given, else from
        the global values.
        """
        for index, opt in enumerate(self._definitions):
            if opt.locality is not OptionLocality.Window:
                continue
            if source is not None and opt.name in source.options:
                window.options[opt.name] = source.options[opt.name]
            elif not opt.global_local:
                window.options[opt.name] = self._global[index]

    def info(
        self,
        index: int,
        scope: OptionScope | None = None,
        buffer: Buffer | None = None,
        window: Window | None = None,
    ) -> OptionInfo:
        """Return metadata for the option at *index*.

        Without *scope*, last-set information describes the local value of
        *buffer*/*window* when there is one, else the global value.

        >>> info = editor.options.info(editor.options.find("tags"))
        >>> info["scope"], info["global_local"], info["commalist"]
        ('buf', True, True)
        """
        opt = self._definitions[index]
        last_set: LastSet | None = None
        if scope is not OptionScope.Global and opt.locality is not OptionLocality.Global:
            holder = window if opt.locality is OptionLocality.Window else buffer
            if holder is not None:
                last_set = holder.last_set.get(opt.name)
        if last_set is None and scope is not OptionScope.Local:
            last_set = self._global_last_set.get(index)
        if last_set is None:
            last_set = LastSet()

        return OptionInfo(
            name=opt.name,
            shortname=opt.shortname,
            type=opt.type.value,
            default=opt.default,
            was_set=index in self._was_set,
            last_set_sid=last_set.script_id,
            last_set_linenr=last_set.line,
            last_set_chan=last_set.channel,
            scope=opt.locality.value,
            global_local=opt.global_local,
            commalist=opt.list_kind is ListKind.Comma,
            flaglist=opt.list_kind is ListKind.Flags,
            allows_duplicates=opt.allows_duplicates,
        )

    def all_info(self) -> dict[str, OptionInfo]:
        """Return :meth:`info` for every visible option, keyed by full name."""
        editor = self._editor
        return {
            opt.name: self.info(index, buffer=editor.curbuf, window=editor.curwin)
            for index, opt in enumerate(self._definitions)
            if not opt.hidden
        }
