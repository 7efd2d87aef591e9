"""Request/response surface for clients.

optscope.api
~~~~~~~~~~~~

:func:`handle_request` dispatches a method name and its positional parameters,
mirroring the ``nvim_*_option_*`` calls:

=========================  ======================================
Method                     Parameters
=========================  ======================================
``get_option_value``       ``[name, opts]``
``set_option_value``       ``[name, value, opts]``
``get_option_info``        ``[name, opts]``
``get_all_options_info``   ``[]``
=========================  ======================================

``opts`` is a mapping with the keys ``scope``, ``win``, ``buf`` and
``filetype``. Failures never raise: they come back as
``{"error": {"kind": ..., "message": ...}}``.
"""

from __future__ import annotations

import logging
import typing as t

from optscope._internal import trace
from optscope.options import (
    get_all_options_info,
    get_requested_option,
    requested_option_info,
    set_requested_option,
)
from optscope.validate import ScopeRequest

from . import exc

if t.TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from optscope.editor import Editor

    MethodHandler = Callable[["Editor", "Sequence[t.Any]", int], t.Any]


logger = logging.getLogger(__name__)


class ErrorDetail(t.TypedDict):
    kind: str
    message: str


class Response(t.TypedDict, total=False):
    """Either ``result`` or ``error`` is present."""

    result: t.Any
    error: ErrorDetail


def _opts(params: Sequence[t.Any], position: int) -> Mapping[str, t.Any]:
    if len(params) <= position:
        return {}
    opts = params[position]
    if opts is None:
        return {}
    if not isinstance(opts, dict):
        raise exc.InvalidParameterCombination(
            f"Invalid 'opts': expected Dict, got {type(opts).__name__}"
        )
    return opts


def _name(params: Sequence[t.Any]) -> str:
    if not params or not isinstance(params[0], str):
        raise exc.InvalidParameterCombination("Invalid 'name': expected String")
    return params[0]


def _get_option_value(editor: Editor, params: Sequence[t.Any], channel_id: int) -> t.Any:
    request = ScopeRequest.from_dict(_name(params), _opts(params, 1))
    return get_requested_option(editor, request)


def _set_option_value(editor: Editor, params: Sequence[t.Any], channel_id: int) -> None:
    if len(params) < 2:
        raise exc.InvalidParameterCombination("Missing 'value'")
    request = ScopeRequest.from_dict(_name(params), _opts(params, 2))
    set_requested_option(editor, request, params[1], channel_id=channel_id)


def _get_option_info(editor: Editor, params: Sequence[t.Any], channel_id: int) -> t.Any:
    request = ScopeRequest.from_dict(_name(params), _opts(params, 1))
    return dict(requested_option_info(editor, request))


def _get_all_options_info(
    editor: Editor, params: Sequence[t.Any], channel_id: int
) -> t.Any:
    return {name: dict(info) for name, info in get_all_options_info(editor).items()}


METHODS: dict[str, MethodHandler] = {
    "get_option_value": _get_option_value,
    "set_option_value": _set_option_value,
    "get_option_info": _get_option_info,
    "get_all_options_info": _get_all_options_info,
}


def handle_request(
    editor: Editor,
    method: str,
    params: Sequence[t.Any] = (),
    channel_id: int = 0,
) -> Response:
    """Run *method* with *params* and wrap the outcome.

    Parameters
    ----------
    editor : :class:`~optscope.editor.Editor`
    method : str
    params : sequence
    channel_id : int
        Recorded as ``last_set_chan`` for values this request sets.

    Examples
    --------
    >>> handle_request(editor, "set_option_value", ["shiftwidth", 4, {"buf": 0}])
    {'result': None}
    >>> handle_request(editor, "get_option_value", ["sw", {"buf": 0}])
    {'result': 4}

    >>> handle_request(editor, "get_option_value", ["nosuch", {}])
    {'error': {'kind': 'UnknownOption', 'message': "Unknown option 'nosuch'"}}
    """
    handler = METHODS.get(method)
    try:
        if handler is None:
            raise exc.UnknownMethod(method)
        with trace.span("api.request", method=method):
            result = handler(editor, params, channel_id)
    except exc.OptScopeException as e:
        logger.debug("%s failed: %s", method, e)
        return Response(error=ErrorDetail(kind=e.kind, message=str(e)))
    return Response(result=result)
