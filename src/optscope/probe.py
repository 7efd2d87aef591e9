"""Probe buffers for reading filetype defaults.

optscope.probe
~~~~~~~~~~~~~~

``get_option_value(editor, "shiftwidth", filetype="python")`` answers "what
would ``shiftwidth`` be in a new python buffer?" without touching any real
buffer: a scratch buffer is allocated, ``FileType`` hooks run in it, the value
is read, and the buffer is wiped again.

Probe buffers live in the editor's scratch arena. They are never listed and no
handle resolves to them.
"""

from __future__ import annotations

import contextlib
import logging
import typing as t

from optscope._internal import trace
from optscope.constants import PROBE_BUFFER_OPTIONS, OptionScope, ScopeKind
from optscope.context import switch_option_context

from . import exc

if t.TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from optscope.editor import Buffer, Editor

    AttachFiletype = Callable[[Buffer, str], None]


logger = logging.getLogger(__name__)


@contextlib.contextmanager
def filetype_probe_buffer(
    editor: Editor,
    filetype: str,
    attach: AttachFiletype | None = None,
) -> Iterator[Buffer]:
    """Yield a scratch buffer with *filetype* attached, current for the block.

    Parameters
    ----------
    editor : :class:`~optscope.editor.Editor`
    filetype : str
    attach : callable, optional
        Called as ``attach(buffer, filetype)`` while the buffer is current and
        already tagged with *filetype*.
        Defaults to :meth:`~optscope.hooks.HooksMixin.attach_filetype`.

    Raises
    ------
    :exc:`exc.EphemeralBufferAllocationFailure`
    :exc:`exc.HookError`
        A ``FileType`` hook failed. The buffer is wiped all the same.

    Examples
    --------
    >>> with filetype_probe_buffer(editor, "python") as buf:
    ...     editor.curbuf is buf, editor.options.get("buftype")
    (True, 'nofile')
    >>> buf.valid
    False
    """
    buffer = editor.allocate_scratch_buffer()
    if buffer is None:
        raise exc.EphemeralBufferAllocationFailure()
    logger.debug("allocated probe buffer %d for filetype %r", buffer.handle, filetype)

    if attach is None:
        attach = editor.attach_filetype

    try:
        with (
            trace.span("probe.filetype", filetype=filetype),
            switch_option_context(editor, ScopeKind.Buffer, buffer),
        ):
            for name, value in PROBE_BUFFER_OPTIONS.items():
                editor.options.set(name, value, OptionScope.Local)
            editor.options.set("filetype", filetype, OptionScope.Local)
            attach(buffer, filetype)
            yield buffer
    finally:
        editor.wipe_buffer(buffer)
        logger.debug("wiped probe buffer %d", buffer.handle)
