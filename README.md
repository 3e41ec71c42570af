# fuzzterm

Building blocks for interactive terminal programs such as fuzzy finders.

## What is in it

`fuzzterm.util`

- `helpers` — grapheme iteration (`graphemes`), display widths where CR and
  LF count one column each (`string_width`, `runes_width`), `truncate`,
  `repeat_to_fill`, `to_kebab_case`, dotted version comparison
  (`compare_versions`), clamping (`constrain`, `as_uint16`, `dur_within`),
  `once` and `run_once`, `is_tty`, and the `Slab` scratch arrays
  (`make_slab`).
- `chars` — `Chars`, item text kept as bytes while it is pure ASCII, with
  whitespace trimming, line counting and line wrapping (`Chars.lines`);
  build one with `to_chars` or `runes_to_chars`.
- `eventbox` — `EventBox`, a thread-safe set of pending events that threads
  can wait on (`wait`, `set`, `peek`, `watch`, `unwatch`, `wait_for`).
- `atomicbool` — `AtomicBool`, a lock-guarded boolean.
- `exithooks` — `at_exit` and `run_at_exit_funcs`: functions run once each,
  newest first.
- `executor` — `Executor`, which runs commands through `$SHELL` (or a shell
  given as a string) and quotes arguments for it, including fish, `cmd` and
  PowerShell quoting; plus `escape_arg`, `kill_command`, `set_nonblock`,
  `read`, `set_stdin` and `is_windows`.

`fuzzterm.tui`

- `events` — `EventType`, `Event`, `MouseEvent`, and `key`, `alt_key`,
  `ctrl_alt_key`; `Event.key_name()` gives names like `ctrl-a` or `alt-x`.
- `attrs` — `Attr`, display attributes as an `IntFlag`.
- `colors` — colour values (`hex_to_color`, `is_24`, `color_components`),
  `ColorAttr`, `ColorPair`, `ColorTheme`, the built-in themes
  (`default16`, `dark256`, `light256`, `empty_theme`, `no_color_theme`),
  and `init_theme` / `init_palette`, which fill a theme from a base theme
  and derive the `Palette` of drawing colours.
- `borders` — `BorderShape`, `BorderStyle` (`make_border_style`,
  `make_transparent_border`), `TermSize`, `FillReturn`, `rune_width`.
- `terminal` — opening the terminal device (`open_tty_in`, `open_tty_out`,
  `ttyname`) and `TtyReader`, which reads raw bytes with an escape delay,
  switches raw mode on and off, asks the terminal for the cursor position
  and reports its size.
- `keyparser` — `KeyReader`, which decodes terminal input bytes into key
  and (with `mouse=True`) SGR mouse events.
- `light` — `LightRenderer` and `LightWindow`, which draw inline below the
  cursor (or on the alternate screen) with plain ANSI escape sequences, and
  the helpers `wrap_line`, `attr_codes`, `color_codes` and `cleanse`.

## Installation

```
pip install fuzzterm
```

Python 3.10 or later is required. Raw terminal mode and the renderer need
a POSIX terminal.

## Examples

Measuring and trimming text:

```python
from fuzzterm.util.helpers import string_width, truncate, compare_versions

string_width("가나다")              # 6
truncate("가나다라마", 7)            # ("가나다", 6)
compare_versions("1.2.3", "1.2.4")  # -1
```

Wrapping an item for display:

```python
from fuzzterm.util.chars import to_chars

chars = to_chars("abcdef\n가나다\n\tdef".encode())
lines, overflow = chars.lines(True, 100, 3, 1, 1)
```

Decoding keystrokes from raw terminal bytes:

```python
from fuzzterm.tui.keyparser import KeyReader
from fuzzterm.tui.events import EventType

reader = KeyReader()
reader.feed(b"\x1b[A")
event = reader.get_char()
assert event.type == EventType.UP
```

Colours and themes:

```python
from fuzzterm.tui.colors import hex_to_color, color_components, dark256, empty_theme, init_theme

color_components(hex_to_color("#102030"))   # (16, 32, 48)
theme = empty_theme()
palette = init_theme(theme, dark256(), False)
palette.prompt                               # ColorPair for the prompt
```

Quoting for a POSIX shell:

```python
from fuzzterm.util.executor import Executor

Executor("bash -c").quote_entry("it's")   # "'it'\\''s'"
```

## What it does not do

fuzzterm has no command-line program and no fuzzy matching or ranking of
items; it supplies the terminal, text and event pieces such a program is
built from. The only renderer is `LightRenderer`; there is no
curses-style full-screen renderer.

## Running the tests

```
pip install -e .[test]
pytest
```