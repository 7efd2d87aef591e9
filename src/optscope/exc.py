"""Provide exceptions used by optscope.

optscope.exc
~~~~~~~~~~~~

Every failure of a get/set/info request is one of the classes below. Each
class carries a ``kind`` that the protocol layer (:mod:`optscope.api`) reports
back to clients as part of a structured error.

Notes
-----
Exceptions in this module inherit from :exc:`OptScopeException`. To catch any
request failure use ``except exc.OptScopeException``.
"""

from __future__ import annotations

import typing as t


class OptScopeException(Exception):
    """Base exception for all optscope errors."""

    kind: t.ClassVar[str] = "Exception"


class InvalidParameterCombination(OptScopeException):
    """Raised if the request's parameters cannot be used as given."""

    kind = "InvalidParameterCombination"


class ConflictingParameters(InvalidParameterCombination):
    """Raised if two mutually exclusive request parameters were both given."""


class InvalidScope(InvalidParameterCombination):
    """Raised if ``scope`` is neither ``'local'`` nor ``'global'``."""

    kind = "InvalidScope"

    def __init__(self, scope: object = None, *args: object) -> None:
        msg = "Invalid 'scope': expected 'local' or 'global'"
        if scope is not None:
            msg += f", got {scope!r}"
        super().__init__(msg)


class UnknownOption(OptScopeException):
    """Raised if an option name is unknown or refers to a hidden option."""

    kind = "UnknownOption"

    def __init__(self, name: str, *args: object) -> None:
        self.name = name
        super().__init__(f"Unknown option '{name}'")


class UnsupportedScope(OptScopeException):
    """Raised if ``win`` or ``buf`` is passed for an option without that locality.

    >>> err = UnsupportedScope("buf", "columns", ("global",))
    >>> str(err)
    "'buf' cannot be passed for global option 'columns'"
    >>> err.supported_scopes
    ('global',)
    """

    kind = "UnsupportedScope"

    def __init__(
        self,
        target: str,
        name: str,
        supported_scopes: tuple[str, ...],
        *args: object,
    ) -> None:
        self.target = target
        self.name = name
        self.supported_scopes = supported_scopes
        described = "".join(f"{scope} " for scope in supported_scopes)
        super().__init__(f"'{target}' cannot be passed for {described}option '{name}'")


class HandleNotFound(OptScopeException):
    """Base exception for handles missing from the editor's handle directory."""

    kind = "HandleNotFound"


class WindowNotFound(HandleNotFound):
    """Raised if a window handle does not resolve to a window."""

    def __init__(self, handle: int | None = None, *args: object) -> None:
        if handle is not None:
            super().__init__(f"Invalid window id: {handle}")
        else:
            super().__init__("Invalid window id")


class BufferNotFound(HandleNotFound):
    """Raised if a buffer handle does not resolve to a buffer."""

    def __init__(self, handle: int | None = None, *args: object) -> None:
        if handle is not None:
            super().__init__(f"Invalid buffer id: {handle}")
        else:
            super().__init__("Invalid buffer id")


class SwitchFailure(OptScopeException):
    """Raised if the ambient context could not be switched to the target."""

    kind = "SwitchFailure"

    def __init__(self, reason: str | None = None, *args: object) -> None:
        msg = "Problem while switching windows"
        if reason is not None:
            msg += f": {reason}"
        super().__init__(msg)


class ValueTypeMismatch(OptScopeException):
    """Raised if a wire value cannot be represented as an option value."""

    kind = "ValueTypeMismatch"

    def __init__(self, typename: str, *args: object) -> None:
        self.typename = typename
        super().__init__(f"Invalid 'value': expected valid option type, got {typename}")


class EphemeralBufferAllocationFailure(OptScopeException):
    """Raised if the filetype probe buffer cannot be allocated.

    Fatal to the request only.
    """

    kind = "EphemeralBufferAllocationFailure"

    def __init__(self, *args: object) -> None:
        super().__init__("Could not create internal buffer")


class OptionSetError(OptScopeException):
    """Raised if the registry rejects a value, message as given by the registry."""

    kind = "OptionSetError"


class HookError(OptScopeException):
    """Raised if a hook callback fails while hooks run for an event."""

    kind = "HookError"

    def __init__(self, event: str, match: str, *args: object) -> None:
        self.event = event
        self.match = match
        super().__init__(f"Error running {event} hooks for '{match}'")


class PresentationObserverError(OptScopeException):
    """Raised if a presentation observer fails after an option was written.

    The new value stays written.
    """

    kind = "PresentationObserverError"

    def __init__(self, name: str, *args: object) -> None:
        self.name = name
        super().__init__(f"Error notifying observers of option '{name}'")


class ResolvedScopeConsumed(OptScopeException):
    """Raised if a resolved scope is handed to the accessor a second time."""

    kind = "ResolvedScopeConsumed"

    def __init__(self, name: str, *args: object) -> None:
        super().__init__(f"Resolved scope for option '{name}' was already used")


class LastWindow(OptScopeException):
    """Raised if closing a window would leave the editor without windows."""

    def __init__(self, *args: object) -> None:
        super().__init__("Cannot close last window")


class EditorStateError(OptScopeException):
    """Raised if an editor operation is called in a state it does not allow."""

    kind = "EditorStateError"


class UnknownMethod(OptScopeException):
    """Raised if a protocol request names a method that does not exist."""

    kind = "UnknownMethod"

    def __init__(self, method: str, *args: object) -> None:
        super().__init__(f"Invalid method: {method}")
