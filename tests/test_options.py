"""Tests for scoped option access."""

from __future__ import annotations

import typing as t

import pytest

from optscope import exc
from optscope.constants import (
    SID_API_CLIENT,
    ListKind,
    OptionLocality,
    OptionScope,
    OptionType,
    ScopeKind,
)
from optscope.options import (
    get_all_options_info,
    get_option_info,
    get_option_value,
    get_option_value_for,
    get_option_value_strict,
    set_option_value,
    set_option_value_for,
)
from optscope.registry import DEFAULT_OPTIONS, OptionDef
from optscope.validate import ScopeRequest, validate_option_request
from optscope.value import NIL

if t.TYPE_CHECKING:
    from optscope.editor import Buffer, Editor, Window
    from optscope.value import MaybeOptionValue, OptionValue


def buffer_with_handle(editor: Editor, handle: int) -> Buffer:
    buffer = editor.new_buffer()
    while buffer.handle < handle:
        buffer = editor.new_buffer()
    assert buffer.handle == handle
    return buffer


def valid_local_value(opt: OptionDef) -> OptionValue:
    """Return a value *opt* accepts that differs from its default where possible."""
    if opt.type is OptionType.Boolean:
        return not opt.default
    if opt.type is OptionType.Number:
        return (opt.minimum or 0) + 3
    if opt.values is None:
        return f"local-{opt.name}"
    if opt.list_kind is ListKind.Flags:
        return opt.values[0]
    return opt.values[-1]


LOCAL_OPTIONS = [
    opt
    for opt in DEFAULT_OPTIONS
    if opt.locality is not OptionLocality.Global and not opt.hidden
]


@pytest.mark.parametrize(
    "opt",
    [pytest.param(opt, id=opt.name) for opt in LOCAL_OPTIONS],
)
def test_local_round_trip(editor: Editor, opt: OptionDef) -> None:
    """A local write is read back unchanged from local scope."""
    value = valid_local_value(opt)

    set_option_value(editor, opt.name, value, scope="local")

    assert get_option_value(editor, opt.name, scope="local") == value
    assert type(get_option_value(editor, opt.name, scope="local")) is type(value)


@pytest.mark.parametrize(
    "opt",
    [pytest.param(opt, id=opt.name) for opt in DEFAULT_OPTIONS if not opt.hidden],
)
def test_repeated_reads_are_identical(editor: Editor, opt: OptionDef) -> None:
    for scope in (None, "local", "global"):
        first = get_option_value(editor, opt.name, scope=scope)
        assert get_option_value(editor, opt.name, scope=scope) == first
        assert get_option_value(editor, opt.name, scope=scope) == first


class GlobalLocalWindowCase(t.NamedTuple):
    """Global-local option written through a window target."""

    test_id: str
    name: str
    value: OptionValue


GLOBAL_LOCAL_WINDOW_CASES: list[GlobalLocalWindowCase] = [
    GlobalLocalWindowCase("scrolloff", "scrolloff", 7),
    GlobalLocalWindowCase("sidescrolloff", "siso", 3),
    GlobalLocalWindowCase("statusline", "statusline", "%f %m"),
]


@pytest.mark.parametrize(
    "test_case",
    [pytest.param(tc, id=tc.test_id) for tc in GLOBAL_LOCAL_WINDOW_CASES],
)
def test_window_write_of_global_local_is_local_only(
    editor: Editor,
    test_case: GlobalLocalWindowCase,
) -> None:
    other = editor.new_window()
    global_before = get_option_value(editor, test_case.name, scope="global")

    set_option_value(editor, test_case.name, test_case.value, win=other.handle)

    assert get_option_value(editor, test_case.name, scope="global") == global_before
    assert get_option_value(editor, test_case.name, win=other.handle) == test_case.value
    assert (
        get_option_value(editor, test_case.name, win=editor.curwin.handle)
        == global_before
    )


def test_window_write_of_global_local_with_scope(editor: Editor) -> None:
    """An explicit scope overrides the local-only rule."""
    set_option_value(editor, "scrolloff", 4, win=0, scope="global")

    assert get_option_value(editor, "scrolloff", scope="global") == 4
    assert get_option_value(editor, "scrolloff", win=0, scope="local") is None


def test_window_write_of_window_local_sets_both(editor: Editor) -> None:
    """Plain window-local options keep ``:set`` behaviour for window targets."""
    other = editor.new_window()

    set_option_value(editor, "cursorline", True, win=other.handle)

    assert get_option_value(editor, "cursorline", win=other.handle) is True
    assert get_option_value(editor, "cursorline", scope="global") is True
    assert get_option_value(editor, "cursorline", win=0) is False


def test_buffer_target(editor: Editor) -> None:
    """Reading a buffer by handle switches into it and back."""
    buf5 = buffer_with_handle(editor, 5)
    curwin, curbuf = editor.curwin, editor.curbuf
    set_option_value(editor, "shiftwidth", 3, buf=5)

    assert get_option_value(editor, "shiftwidth", buf=5) == 3
    assert buf5.options["shiftwidth"] == 3
    assert get_option_value(editor, "shiftwidth") == 8
    assert editor.curwin is curwin
    assert editor.curbuf is curbuf


def test_buffer_target_global_only_option(
    editor: Editor,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    buffer_with_handle(editor, 5)
    entered: list[int] = []
    enter = editor._enter_window_noblock

    def record_enter(window: Window) -> None:
        entered.append(window.handle)
        enter(window)

    monkeypatch.setattr(editor, "_enter_window_noblock", record_enter)

    with pytest.raises(exc.UnsupportedScope) as excinfo:
        get_option_value(editor, "columns", buf=5)

    assert excinfo.value.supported_scopes == ("global",)
    assert entered == []

    # the recorder does see real switches
    get_option_value(editor, "tags", buf=5)
    assert entered != []


@pytest.mark.parametrize("operation", ["get", "set"])
def test_unknown_option(editor: Editor, operation: str) -> None:
    curwin, curbuf = editor.curwin, editor.curbuf

    with pytest.raises(exc.UnknownOption):
        if operation == "get":
            get_option_value(editor, "nosuchoption")
        else:
            set_option_value(editor, "nosuchoption", 1)

    assert editor.curwin is curwin
    assert editor.curbuf is curbuf


def test_context_restored_after_failures(editor: Editor) -> None:
    """Ambient state is unchanged after successes and failures alike."""
    other = editor.new_window(editor.new_buffer("other.txt"))
    hidden = editor.new_buffer("hidden.txt")
    curwin, curbuf = editor.curwin, editor.curbuf

    set_option_value(editor, "number", True, win=other.handle)
    with pytest.raises(exc.WindowNotFound):
        get_option_value(editor, "number", win=9999)
    assert (editor.curwin, editor.curbuf) == (curwin, curbuf)

    set_option_value(editor, "shiftwidth", 2, buf=hidden.handle)
    with pytest.raises(exc.OptionSetError):
        set_option_value(editor, "shiftwidth", -1, buf=hidden.handle)
    assert (editor.curwin, editor.curbuf) == (curwin, curbuf)

    with pytest.raises(exc.OptionSetError):
        set_option_value(editor, "foldmethod", "nonsense", win=other.handle)
    with pytest.raises(exc.BufferNotFound):
        set_option_value(editor, "shiftwidth", 2, buf=9999)
    assert (editor.curwin, editor.curbuf) == (curwin, curbuf)

    assert get_option_value(editor, "shiftwidth", buf=hidden.handle) == 2
    assert get_option_value(editor, "number", win=other.handle) is True


@pytest.mark.parametrize(
    "opts",
    [
        pytest.param({"scope": "local", "buf": 0}, id="scope_buf"),
        pytest.param({"filetype": "python", "buf": 0}, id="filetype_buf"),
        pytest.param({"filetype": "python", "win": 0}, id="filetype_win"),
        pytest.param({"filetype": "python", "scope": "global"}, id="filetype_scope"),
    ],
)
def test_conflicting_parameters(editor: Editor, opts: dict[str, t.Any]) -> None:
    curwin, curbuf = editor.curwin, editor.curbuf

    with pytest.raises(exc.InvalidParameterCombination):
        get_option_value(editor, "shiftwidth", **opts)

    assert editor.curwin is curwin
    assert editor.curbuf is curbuf


def test_global_local_local_read_is_none(editor: Editor) -> None:
    assert get_option_value(editor, "tags", scope="local") is None
    assert get_option_value(editor, "tags", buf=0) is None
    assert get_option_value(editor, "tags") == "./tags;,tags"


def test_unset_global_local(editor: Editor) -> None:
    set_option_value(editor, "makeprg", "ninja", buf=0)
    assert get_option_value(editor, "makeprg") == "ninja"

    set_option_value(editor, "makeprg", None, buf=0)

    assert get_option_value(editor, "makeprg", buf=0) is None
    assert get_option_value(editor, "makeprg") == "make"


def test_unset_requires_global_local(editor: Editor) -> None:
    with pytest.raises(exc.OptionSetError, match="got nil"):
        set_option_value(editor, "shiftwidth", None, buf=0)


def test_set_without_scope_drops_local_override(editor: Editor) -> None:
    set_option_value(editor, "undolevels", 50, scope="local")
    set_option_value(editor, "undolevels", 200)

    assert get_option_value(editor, "undolevels", scope="local") is None
    assert get_option_value(editor, "undolevels") == 200


@pytest.mark.parametrize(
    ("value", "typename"),
    [(1.5, "Float"), ([1], "Array"), ({"a": 1}, "Dict")],
)
def test_set_rejects_wire_types(editor: Editor, value: object, typename: str) -> None:
    with pytest.raises(exc.ValueTypeMismatch, match=typename):
        set_option_value(editor, "shiftwidth", value)


class RejectedValueCase(t.NamedTuple):
    """Value the option itself refuses."""

    test_id: str
    name: str
    value: OptionValue
    expected_message: str


REJECTED_VALUE_CASES: list[RejectedValueCase] = [
    RejectedValueCase(
        "string_for_number",
        "shiftwidth",
        "four",
        "Invalid value for option 'shiftwidth': expected number, got string 'four'",
    ),
    RejectedValueCase(
        "number_for_boolean",
        "expandtab",
        1,
        "Invalid value for option 'expandtab': expected boolean, got number 1",
    ),
    RejectedValueCase(
        "below_minimum",
        "columns",
        5,
        "Argument must be at least 12: columns=5",
    ),
    RejectedValueCase(
        "not_in_values",
        "background",
        "blue",
        "Invalid argument: background=blue",
    ),
    RejectedValueCase(
        "bad_comma_item",
        "whichwrap",
        "b,q",
        "Invalid argument: whichwrap=b,q",
    ),
    RejectedValueCase(
        "bad_flag",
        "shortmess",
        "fZ",
        "Invalid argument: shortmess=fZ",
    ),
]


@pytest.mark.parametrize(
    "test_case",
    [pytest.param(tc, id=tc.test_id) for tc in REJECTED_VALUE_CASES],
)
def test_rejected_values(editor: Editor, test_case: RejectedValueCase) -> None:
    before = get_option_value(editor, test_case.name)

    with pytest.raises(exc.OptionSetError) as excinfo:
        set_option_value(editor, test_case.name, test_case.value)

    assert str(excinfo.value) == test_case.expected_message
    assert get_option_value(editor, test_case.name) == before


def test_presentation_options_notify_observers(editor: Editor) -> None:
    changes: list[tuple[str, MaybeOptionValue]] = []
    editor.options.add_presentation_observer(
        lambda name, value: changes.append((name, value))
    )

    set_option_value(editor, "co", 132)
    set_option_value(editor, "statusline", "%f", win=0)
    set_option_value(editor, "shiftwidth", 2)

    assert changes == [("columns", 132), ("statusline", "%f")]


def test_presentation_observer_not_called_on_error(editor: Editor) -> None:
    changes: list[str] = []

    def observer(name: str, value: MaybeOptionValue) -> None:
        changes.append(name)

    editor.options.add_presentation_observer(observer)
    with pytest.raises(exc.OptionSetError):
        set_option_value(editor, "background", "blue")
    editor.options.remove_presentation_observer(observer)
    set_option_value(editor, "background", "light")

    assert changes == []


def test_last_set_records_channel(editor: Editor) -> None:
    set_option_value(editor, "shiftwidth", 2, buf=0, channel_id=7)

    info = get_option_info(editor, "shiftwidth", buf=0)

    assert info["was_set"] is True
    assert info["last_set_sid"] == SID_API_CLIENT
    assert info["last_set_chan"] == 7
    assert info["last_set_linenr"] == 0


def test_info_prefers_local_last_set(editor: Editor) -> None:
    other = editor.new_window()
    set_option_value(editor, "scrolloff", 2, scope="global", channel_id=1)
    set_option_value(editor, "scrolloff", 9, win=other.handle, channel_id=2)

    assert get_option_info(editor, "scrolloff", win=other.handle)["last_set_chan"] == 2
    assert get_option_info(editor, "scrolloff")["last_set_chan"] == 1
    assert (
        get_option_info(editor, "scrolloff", win=other.handle, scope="global")[
            "last_set_chan"
        ]
        == 1
    )
    assert get_option_info(editor, "scrolloff", scope="local")["last_set_sid"] == 0


def test_info_fields(editor: Editor) -> None:
    info = get_option_info(editor, "whichwrap")

    assert info == {
        "name": "whichwrap",
        "shortname": "ww",
        "type": "string",
        "default": "b,s",
        "was_set": False,
        "last_set_sid": 0,
        "last_set_linenr": 0,
        "last_set_chan": 0,
        "scope": "global",
        "global_local": False,
        "commalist": True,
        "flaglist": False,
        "allows_duplicates": False,
    }


def test_info_validates_request(editor: Editor) -> None:
    with pytest.raises(exc.UnsupportedScope):
        get_option_info(editor, "columns", win=0)
    with pytest.raises(exc.UnknownOption):
        get_option_info(editor, "edcompatible")


def test_all_options_info(editor: Editor) -> None:
    infos = get_all_options_info(editor)

    assert "edcompatible" not in infos
    assert set(infos) == {opt.name for opt in DEFAULT_OPTIONS if not opt.hidden}
    assert infos["number"]["scope"] == "win"
    assert infos["tags"]["global_local"] is True


def test_accessor_consumes_resolved_scope(editor: Editor) -> None:
    resolved = validate_option_request(editor, ScopeRequest("columns"))
    assert get_option_value_for(editor, resolved) == 80

    with pytest.raises(exc.ResolvedScopeConsumed):
        get_option_value_for(editor, resolved)
    with pytest.raises(exc.ResolvedScopeConsumed):
        set_option_value_for(editor, resolved, 100)

    assert get_option_value(editor, "columns") == 80


def test_accessor_reports_nil(editor: Editor) -> None:
    resolved = validate_option_request(editor, ScopeRequest("path", buf=0))

    assert get_option_value_for(editor, resolved) is NIL


class StrictReadCase(t.NamedTuple):
    """Strict read of one option in one kind of storage."""

    test_id: str
    name: str
    kind: ScopeKind
    expected: MaybeOptionValue


STRICT_READ_CASES: list[StrictReadCase] = [
    StrictReadCase("global_option_global", "columns", ScopeKind.Global, 80),
    StrictReadCase("global_option_window", "columns", ScopeKind.Window, NIL),
    StrictReadCase("buffer_option_buffer", "tabstop", ScopeKind.Buffer, 8),
    StrictReadCase("buffer_option_window", "tabstop", ScopeKind.Window, NIL),
    StrictReadCase("window_option_window", "wrap", ScopeKind.Window, True),
    StrictReadCase("global_local_unset", "scrolloff", ScopeKind.Window, NIL),
    StrictReadCase("global_local_global", "scrolloff", ScopeKind.Global, 0),
]


@pytest.mark.parametrize(
    "test_case",
    [pytest.param(tc, id=tc.test_id) for tc in STRICT_READ_CASES],
)
def test_strict_read(editor: Editor, test_case: StrictReadCase) -> None:
    assert (
        get_option_value_strict(editor, test_case.name, test_case.kind)
        == test_case.expected
    )


def test_strict_read_target(editor: Editor) -> None:
    other = editor.new_window()
    set_option_value(editor, "scrolloff", 3, win=other.handle)

    assert get_option_value_strict(editor, "scrolloff", ScopeKind.Window, other) == 3
    assert get_option_value_strict(editor, "scrolloff", ScopeKind.Window) is NIL
    with pytest.raises(exc.UnknownOption):
        get_option_value_strict(editor, "nosuch", ScopeKind.Global)


def test_options_mixin(editor: Editor) -> None:
    window = editor.new_window()
    buffer = editor.new_buffer()

    assert editor.set_option("hidden", False) is editor
    assert window.set_option("list", True) is window
    assert buffer.set_option("fileformat", "dos") is buffer

    assert editor.show_option("hidden") is False
    assert window.show_option("list") is True
    assert editor.curwin.show_option("list") is False
    assert buffer.show_option("fileformat") == "dos"
    assert editor.curbuf.show_option("fileformat") == "unix"

    buffer.set_option("tags", "buffer.tags")
    assert buffer.unset_option("tags").show_option("tags") is None
    assert buffer.show_option_info("fileformat")["was_set"] is True

    with pytest.raises(exc.ConflictingParameters):
        buffer.set_option("tabstop", 4, scope=OptionScope.Global)
