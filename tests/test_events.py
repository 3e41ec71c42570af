import string

import pytest

from fuzzterm.tui.events import (
    Event,
    EventType,
    MouseEvent,
    alt_key,
    ctrl_alt_key,
    key,
)


def test_control_letters_match_control_bytes():
    for offset, letter in enumerate(string.ascii_uppercase):
        expected = EventType.CTRL_A + offset
        if letter == "I":
            assert EventType(expected) is EventType.TAB
        else:
            assert EventType(expected).name == f"CTRL_{letter}"


def test_esc_matches_escape_byte():
    event = EventType.ESC.as_event()
    assert event.type == 0x1B
    assert event.key_name() == "esc"


def test_as_event():
    event = EventType.UP.as_event()
    assert event == Event(EventType.UP)
    assert event.char == ""
    assert event.mouse_event is None


def test_constructors():
    assert key("a") == Event(EventType.RUNE, "a")
    assert alt_key("x") == Event(EventType.ALT, "x")
    assert ctrl_alt_key("h") == Event(EventType.CTRL_ALT, "h")


def test_comparable_drops_mouse_event():
    mouse = MouseEvent(1, 2, 0, True, True, False, False)
    event = Event(EventType.MOUSE, "", mouse)
    assert event.comparable() == Event(EventType.MOUSE)
    assert event.comparable() != event


def test_key_name_of_characters():
    assert key("q").key_name() == "q"
    assert alt_key("q").key_name() == "alt-q"
    assert ctrl_alt_key("q").key_name() == "ctrl-alt-q"


@pytest.mark.parametrize(
    "event_type, name",
    [
        (EventType.CTRL_BACK_SLASH, "ctrl-\\"),
        (EventType.CTRL_RIGHT_BRACKET, "ctrl-]"),
        (EventType.CTRL_CARET, "ctrl-^"),
        (EventType.CTRL_SLASH, "ctrl-/"),
    ],
)
def test_key_name_of_punctuation_controls(event_type, name):
    assert event_type.as_event().key_name() == name


def test_key_name_is_kebab_case():
    assert EventType.CTRL_A.as_event().key_name() == "ctrl-a"
    assert EventType.ALT_SHIFT_UP.as_event().key_name() == "alt-shift-up"
    assert EventType.TAB.as_event().key_name() == "tab"


@pytest.mark.parametrize(
    "event_type", [EventType.INVALID, EventType.FATAL, EventType.MOUSE, EventType.RESIZE]
)
def test_key_name_empty_for_non_keys(event_type):
    assert event_type.as_event().key_name() == ""


def test_key_names_are_unique_for_keys():
    skipped = (EventType.RUNE, EventType.ALT, EventType.CTRL_ALT)
    key_types = [
        event_type
        for event_type in EventType
        if event_type < EventType.INVALID and event_type not in skipped
    ]
    names = [Event(event_type).key_name() for event_type in key_types]
    assert len(names) == len(set(names))
    assert "" not in names
    assert Event(EventType.CTRL_A).key_name() in names