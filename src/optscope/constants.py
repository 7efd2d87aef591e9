"""Constant variables for optscope."""

from __future__ import annotations

import enum


class OptionScope(enum.Enum):
    """Scope passed as ``scope`` in option requests.

    Analogous to ``:setlocal`` and ``:setglobal``. ``None`` in place of a scope
    means both, like ``:set``.

    >>> OptionScope("local")
    <OptionScope.Local: 'local'>
    """

    Local = "local"
    Global = "global"


class ScopeKind(enum.Enum):
    """Kind of storage a request targets, decided by ``win`` / ``buf``."""

    Global = "GLOBAL"
    Window = "WINDOW"
    Buffer = "BUFFER"


class OptionLocality(enum.Enum):
    """Where an option keeps its value, as reported by option info ``scope``."""

    Global = "global"
    Window = "win"
    Buffer = "buf"


class OptionType(enum.Enum):
    """Declared value type of an option."""

    Boolean = "boolean"
    Number = "number"
    String = "string"


class ListKind(enum.Enum):
    """Shape of string options that hold several values."""

    Single = ""
    Comma = "comma"
    Flags = "flags"


SCOPE_KIND_LOCALITY_MAP: dict[ScopeKind, OptionLocality] = {
    ScopeKind.Global: OptionLocality.Global,
    ScopeKind.Window: OptionLocality.Window,
    ScopeKind.Buffer: OptionLocality.Buffer,
}

SCOPE_KIND_REQUEST_KEY_MAP: dict[ScopeKind, str] = {
    ScopeKind.Window: "win",
    ScopeKind.Buffer: "buf",
}

#: Script id recorded in ``last_set_sid`` for values set through the API.
SID_API_CLIENT = -9

#: Handle value meaning "the current window/buffer".
CURRENT_HANDLE = 0

#: Local settings forced onto a filetype probe buffer before hooks run.
PROBE_BUFFER_OPTIONS: dict[str, bool | str] = {
    "bufhidden": "hide",
    "buftype": "nofile",
    "swapfile": False,
    "undofile": False,
    "modeline": False,
}

#: Keys recognized in a request's option mapping.
REQUEST_KEYS: frozenset[str] = frozenset({"scope", "win", "buf", "filetype"})
