"""Default keymap: evdev keycodes → control bindings.

Keycodes are hard-coded (same values as ``evdev.ecodes``) so the keymap
can be imported without evdev.  Modifier slots:

    slot 0 — Shift (held) / CapsLock (toggle): shifted characters
    slot 1 — Ctrl (held): jumps and clear
    slot 2 — Alt (held) / NumLock (one-time): keypad navigation
"""

from __future__ import annotations

from dataentry.core.actions import (
    Backspace,
    ClearEntry,
    ControlBinding,
    CursorEnd,
    CursorHome,
    DeleteForward,
    Enter,
    ModifierAction,
    ModifierMode,
    MoveCursor,
    TypeText,
)

SHIFT_SLOT = 0
CTRL_SLOT = 1
ALT_SLOT = 2

KEY_ESC = 1
KEY_BACKSPACE = 14
KEY_ENTER = 28
KEY_LEFTCTRL = 29
KEY_LEFTSHIFT = 42
KEY_RIGHTSHIFT = 54
KEY_KPASTERISK = 55
KEY_LEFTALT = 56
KEY_SPACE = 57
KEY_CAPSLOCK = 58
KEY_NUMLOCK = 69
KEY_KP7, KEY_KP8, KEY_KP9, KEY_KPMINUS = 71, 72, 73, 74
KEY_KP4, KEY_KP5, KEY_KP6, KEY_KPPLUS = 75, 76, 77, 78
KEY_KP1, KEY_KP2, KEY_KP3, KEY_KP0, KEY_KPDOT = 79, 80, 81, 82, 83
KEY_KPENTER = 96
KEY_RIGHTCTRL = 97
KEY_KPSLASH = 98
KEY_RIGHTALT = 100
KEY_HOME = 102
KEY_LEFT = 105
KEY_RIGHT = 106
KEY_END = 107
KEY_DELETE = 111

# Basic QWERTY keycode → char map (evdev keycodes)
KEYCODE_TO_CHAR_EN: dict[int, str] = {
    2: "1", 3: "2", 4: "3", 5: "4", 6: "5", 7: "6", 8: "7", 9: "8", 10: "9", 11: "0",
    12: "-", 13: "=",
    16: "q", 17: "w", 18: "e", 19: "r", 20: "t", 21: "y", 22: "u", 23: "i", 24: "o",
    25: "p", 26: "[", 27: "]",
    30: "a", 31: "s", 32: "d", 33: "f", 34: "g", 35: "h", 36: "j", 37: "k", 38: "l",
    39: ";", 40: "'", 41: "`", 43: "\\",
    44: "z", 45: "x", 46: "c", 47: "v", 48: "b", 49: "n", 50: "m", 51: ",", 52: ".", 53: "/",
    57: " ",
}

SHIFTED_SYMBOLS: dict[str, str] = {
    "1": "!", "2": "@", "3": "#", "4": "$", "5": "%", "6": "^", "7": "&", "8": "*",
    "9": "(", "0": ")", "-": "_", "=": "+", "[": "{", "]": "}", ";": ":", "'": '"',
    "`": "~", "\\": "|", ",": "<", ".": ">", "/": "?",
}

KEYPAD_TO_CHAR: dict[int, str] = {
    KEY_KP0: "0", KEY_KP1: "1", KEY_KP2: "2", KEY_KP3: "3", KEY_KP4: "4",
    KEY_KP5: "5", KEY_KP6: "6", KEY_KP7: "7", KEY_KP8: "8", KEY_KP9: "9",
    KEY_KPDOT: ".", KEY_KPPLUS: "+", KEY_KPMINUS: "-", KEY_KPASTERISK: "*", KEY_KPSLASH: "/",
}

# Keypad keys double as navigation while slot 2 is effective (like NumLock off)
KEYPAD_NAVIGATION = {
    KEY_KP4: MoveCursor(-1),
    KEY_KP6: MoveCursor(1),
    KEY_KP7: CursorHome(),
    KEY_KP1: CursorEnd(),
    KEY_KPDOT: DeleteForward(),
}


def keycode_to_char(keycode: int, shift: bool = False) -> str:
    """Return the character typed by *keycode*.  Empty string if unknown."""
    if keycode in KEYPAD_TO_CHAR:
        return KEYPAD_TO_CHAR[keycode]
    ch = KEYCODE_TO_CHAR_EN.get(keycode, "")
    if ch and shift:
        ch = SHIFTED_SYMBOLS.get(ch, ch.upper())
    return ch


def default_bindings() -> dict[int, ControlBinding]:
    """Keymap for a keyboard with numeric keypad."""
    bindings: dict[int, ControlBinding] = {}

    for code, ch in KEYCODE_TO_CHAR_EN.items():
        shifted = keycode_to_char(code, shift=True)
        alternates = {SHIFT_SLOT: TypeText(shifted)} if shifted != ch else {}
        bindings[code] = ControlBinding(TypeText(ch), alternates)

    for code, ch in KEYPAD_TO_CHAR.items():
        alternates = {}
        if code in KEYPAD_NAVIGATION:
            alternates[ALT_SLOT] = KEYPAD_NAVIGATION[code]
        bindings[code] = ControlBinding(TypeText(ch), alternates)

    bindings.update({
        KEY_BACKSPACE: ControlBinding(Backspace(), {CTRL_SLOT: ClearEntry()}),
        KEY_DELETE: ControlBinding(DeleteForward(), {CTRL_SLOT: ClearEntry()}),
        KEY_LEFT: ControlBinding(MoveCursor(-1), {CTRL_SLOT: CursorHome()}),
        KEY_RIGHT: ControlBinding(MoveCursor(1), {CTRL_SLOT: CursorEnd()}),
        KEY_HOME: ControlBinding(CursorHome()),
        KEY_END: ControlBinding(CursorEnd()),
        KEY_ESC: ControlBinding(ClearEntry()),
        KEY_ENTER: ControlBinding(Enter(), {SHIFT_SLOT: Enter("formatted")}),
        KEY_KPENTER: ControlBinding(Enter(), {SHIFT_SLOT: Enter("formatted")}),
        KEY_LEFTSHIFT: ControlBinding(ModifierAction(SHIFT_SLOT, ModifierMode.HOLD)),
        KEY_RIGHTSHIFT: ControlBinding(ModifierAction(SHIFT_SLOT, ModifierMode.HOLD)),
        KEY_CAPSLOCK: ControlBinding(ModifierAction(SHIFT_SLOT, ModifierMode.TOGGLE)),
        KEY_LEFTCTRL: ControlBinding(ModifierAction(CTRL_SLOT, ModifierMode.HOLD)),
        KEY_RIGHTCTRL: ControlBinding(ModifierAction(CTRL_SLOT, ModifierMode.HOLD)),
        KEY_LEFTALT: ControlBinding(ModifierAction(ALT_SLOT, ModifierMode.HOLD)),
        KEY_RIGHTALT: ControlBinding(ModifierAction(ALT_SLOT, ModifierMode.HOLD)),
        KEY_NUMLOCK: ControlBinding(ModifierAction(ALT_SLOT, ModifierMode.ONETIME)),
    })
    return bindings
