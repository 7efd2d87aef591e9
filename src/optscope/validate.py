"""Validation of option requests.

optscope.validate
~~~~~~~~~~~~~~~~~

:func:`validate_option_request` turns a :class:`ScopeRequest` into a
:class:`ResolvedScope`. Every check runs before any context switch: a rejected
request leaves no trace in the editor.

Checks, in order:

1. ``scope`` is ``'local'`` or ``'global'``.
2. ``filetype`` is used alone, and only for reads.
3. ``scope`` and ``buf`` are not both given.
4. ``win`` and ``buf`` are not both given; handles resolve.
5. the option exists and is not hidden.
6. ``win`` / ``buf`` is only given for options that have that locality.
7. the scope kind follows from ``win`` / ``buf``; ``buf`` implies local scope.
"""

from __future__ import annotations

import dataclasses
import logging
import typing as t

from optscope._internal.frozen_dataclass import frozen_dataclass
from optscope.constants import (
    REQUEST_KEYS,
    SCOPE_KIND_REQUEST_KEY_MAP,
    OptionScope,
    ScopeKind,
)

from . import exc

if t.TYPE_CHECKING:
    from collections.abc import Mapping

    from optscope.editor import Buffer, Editor, Window
    from optscope.registry import OptionAttributes


logger = logging.getLogger(__name__)


@dataclasses.dataclass()
class ScopeRequest:
    """Option name plus the optional parameters of a get/set/info request.

    Examples
    --------
    >>> ScopeRequest.from_dict("shiftwidth", {"buf": 1})
    ScopeRequest(name='shiftwidth', scope=None, win=None, buf=1, filetype=None)

    >>> ScopeRequest.from_dict("shiftwidth", {"buffer": 1})
    Traceback (most recent call last):
        ...
    optscope.exc.InvalidParameterCombination: Invalid key: 'buffer'
    """

    name: str
    scope: str | OptionScope | None = None
    win: int | None = None
    buf: int | None = None
    filetype: str | None = None

    @classmethod
    def from_dict(cls, name: str, opts: Mapping[str, t.Any] | None = None) -> ScopeRequest:
        """Build a request from protocol-level options.

        Keys mapped to ``None`` count as absent.
        """
        opts = opts or {}
        for key in opts:
            if key not in REQUEST_KEYS:
                raise exc.InvalidParameterCombination(f"Invalid key: '{key}'")
        return cls(
            name=name,
            scope=opts.get("scope"),
            win=opts.get("win"),
            buf=opts.get("buf"),
            filetype=opts.get("filetype"),
        )


@frozen_dataclass
class ResolvedScope:
    """Where one request reads or writes, decided by :func:`validate_option_request`.

    ``scope`` is the scope used for reads. ``effective_write_scope`` is the one
    used for writes; it differs from ``scope`` only through the global-local
    rule for window targets.
    """

    name: str
    option_index: int
    required_scope_kind: ScopeKind
    scope: OptionScope | None
    effective_write_scope: OptionScope | None
    context_handle: Window | Buffer | None
    attributes: OptionAttributes
    filetype: str | None = None

    _consumed = False

    def claim(self) -> ResolvedScope:
        """Mark this scope as used, exactly once.

        Raises
        ------
        :exc:`exc.ResolvedScopeConsumed`
        """
        if self._consumed:
            raise exc.ResolvedScopeConsumed(self.name)
        self._consumed = True
        return self


def parse_scope(scope: str | OptionScope | None) -> OptionScope | None:
    """Return the :class:`OptionScope` named by *scope*.

    >>> parse_scope("global")
    <OptionScope.Global: 'global'>
    >>> parse_scope(None) is None
    True
    >>> parse_scope("tab")
    Traceback (most recent call last):
        ...
    optscope.exc.InvalidScope: Invalid 'scope': expected 'local' or 'global', got 'tab'
    """
    if scope is None or isinstance(scope, OptionScope):
        return scope
    try:
        return OptionScope(scope)
    except ValueError as e:
        raise exc.InvalidScope(scope) from e


def validate_option_request(
    editor: Editor,
    request: ScopeRequest,
    *,
    allow_filetype: bool = False,
) -> ResolvedScope:
    """Validate *request* against *editor* and resolve its target.

    Parameters
    ----------
    editor : :class:`~optscope.editor.Editor`
    request : :class:`ScopeRequest`
    allow_filetype : bool
        Whether ``filetype`` may be used, true for reads only.

    Raises
    ------
    :exc:`exc.InvalidScope`, :exc:`exc.ConflictingParameters`,
    :exc:`exc.WindowNotFound`, :exc:`exc.BufferNotFound`,
    :exc:`exc.UnknownOption`, :exc:`exc.UnsupportedScope`

    Examples
    --------
    >>> resolved = validate_option_request(editor, ScopeRequest("sw", buf=0))
    >>> resolved.name, resolved.required_scope_kind, resolved.scope
    ('shiftwidth', <ScopeKind.Buffer: 'BUFFER'>, <OptionScope.Local: 'local'>)

    >>> validate_option_request(editor, ScopeRequest("columns", buf=0))
    Traceback (most recent call last):
        ...
    optscope.exc.UnsupportedScope: 'buf' cannot be passed for global option 'columns'
    """
    scope = parse_scope(request.scope)

    if request.filetype is not None:
        if request.buf is not None or scope is not None or request.win is not None:
            raise exc.ConflictingParameters(
                "cannot use 'filetype' with 'scope', 'buf' or 'win'"
            )
        if not allow_filetype:
            raise exc.ConflictingParameters("'filetype' can only be used to get an option")

    if scope is not None and request.buf is not None:
        raise exc.ConflictingParameters("cannot use both 'scope' and 'buf'")

    if request.win is not None and request.buf is not None:
        raise exc.ConflictingParameters("cannot use both 'buf' and 'win'")

    kind = ScopeKind.Global
    target: Window | Buffer | None = None
    if request.win is not None:
        kind = ScopeKind.Window
        target = editor.resolve_window(request.win)
    elif request.buf is not None:
        kind = ScopeKind.Buffer
        target = editor.resolve_buffer(request.buf)

    registry = editor.options
    index = registry.find(request.name)
    if index is None or registry.is_hidden(index):
        raise exc.UnknownOption(request.name)
    opt = registry.definition(index)
    attributes = registry.attributes(index)

    if kind is not ScopeKind.Global:
        supported = (
            attributes.supports_buffer
            if kind is ScopeKind.Buffer
            else attributes.supports_window
        )
        if not supported:
            raise exc.UnsupportedScope(
                SCOPE_KIND_REQUEST_KEY_MAP[kind],
                opt.name,
                attributes.supported_scopes,
            )

    if kind is ScopeKind.Buffer:
        scope = OptionScope.Local

    write_scope = scope
    if kind is ScopeKind.Window and scope is None and attributes.supports_global:
        # window-targeted writes must leave the shared global value alone
        write_scope = OptionScope.Local

    resolved = ResolvedScope(
        name=opt.name,
        option_index=index,
        required_scope_kind=kind,
        scope=scope,
        effective_write_scope=write_scope,
        context_handle=target,
        attributes=attributes,
        filetype=request.filetype,
    )
    logger.debug("resolved %r to %s", request, resolved.required_scope_kind.name)
    return resolved
