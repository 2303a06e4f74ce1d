#!/usr/bin/env python3
"""
Terminal Seven-Segment Clock
Draws the local time as HH:MM in colored seven-segment blocks with a
blinking colon, redrawn at a fixed frame rate.

Usage: python terminal_clock.py [--fps N] [--color NAME] [--off-style dim|hidden]

Controls:
- q: Quit
"""

import argparse
import curses
import logging
import sys
import time
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import colorama
from colorama import Back, Style
from rich.console import Console
from rich.markup import escape

from seven_segment import (
    ACCENT,
    OFF,
    ON,
    ColonBlinker,
    OffStyle,
    compose,
    encode,
    layout_size,
    rasterize,
    time_digits,
)

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

DEFAULT_FPS = 30
MAX_FPS = 60
DEFAULT_COLOR = 'green'
COLON_INTERVAL = 1.0
QUIT_KEYS = (ord('q'), ord('Q'))

CURSES_COLORS = {
    'black': curses.COLOR_BLACK,
    'red': curses.COLOR_RED,
    'green': curses.COLOR_GREEN,
    'yellow': curses.COLOR_YELLOW,
    'blue': curses.COLOR_BLUE,
    'magenta': curses.COLOR_MAGENTA,
    'cyan': curses.COLOR_CYAN,
    'white': curses.COLOR_WHITE,
}

ANSI_BACKGROUNDS = {
    'black': Back.BLACK,
    'red': Back.RED,
    'green': Back.GREEN,
    'yellow': Back.YELLOW,
    'blue': Back.BLUE,
    'magenta': Back.MAGENTA,
    'cyan': Back.CYAN,
    'white': Back.WHITE,
}

# Color pair numbers per block role
ROLE_PAIRS = {ON: 1, OFF: 2, ACCENT: 3}

# Bright black, used for unlit segments on 16+ color terminals
DIM_GRAY = 8


class ClockState:
    """Digits, segment masks and colon state for the current frame."""

    def __init__(self, blinker: Optional[ColonBlinker] = None):
        self.blinker = blinker or ColonBlinker(COLON_INTERVAL)
        self.digits: List[int] = []
        self.masks: List[int] = []

    @property
    def colon_visible(self) -> bool:
        return self.blinker.visible

    def update(self, now: Optional[datetime] = None):
        """Re-read the wall clock and advance the colon timer."""
        self.digits = time_digits(now)
        self.masks = [encode(digit) for digit in self.digits]
        if self.blinker.tick():
            log.debug("Colon %s", "shown" if self.colon_visible else "hidden")

    def glyphs(self, origin: Tuple[int, int], off_style: str = OffStyle.DIM):
        return compose(self.masks, self.colon_visible, origin, off_style)


class ClockApp:
    """Curses front end: owns the screen, the clock state and the frame loop."""

    def __init__(self, fps: int = DEFAULT_FPS, color: str = DEFAULT_COLOR,
                 accent: Optional[str] = None, off_style: str = OffStyle.DIM,
                 state: Optional[ClockState] = None):
        self.fps = fps
        self.color = color
        self.accent = accent or color
        self.off_style = off_style
        self.state = state or ClockState()
        self.attrs: Dict[str, int] = {}

    def setup_colors(self):
        """Create one color pair per block role."""
        if not curses.has_colors():
            log.info("Terminal has no color support, using reverse video")
            self.attrs = {ON: curses.A_REVERSE, ACCENT: curses.A_REVERSE, OFF: curses.A_DIM}
            return

        curses.start_color()
        curses.use_default_colors()
        off = DIM_GRAY if curses.COLORS >= 16 else curses.COLOR_BLACK
        on = CURSES_COLORS[self.color]
        accent = CURSES_COLORS[self.accent]

        curses.init_pair(ROLE_PAIRS[ON], on, on)
        curses.init_pair(ROLE_PAIRS[OFF], off, off)
        curses.init_pair(ROLE_PAIRS[ACCENT], accent, accent)
        self.attrs = {role: curses.color_pair(pair) for role, pair in ROLE_PAIRS.items()}
        log.info("Colors: on=%s accent=%s (%d available)", self.color, self.accent, curses.COLORS)

    def draw(self, stdscr):
        """Draw the current frame centered in the window."""
        height, width = stdscr.getmaxyx()
        layout_width, layout_height = layout_size()
        stdscr.erase()

        # Stay clear of the bottom-right cell, curses raises when writing it
        if width <= layout_width or height <= layout_height:
            stdscr.addstr(0, 0, "Terminal too small"[:width - 1])
            return

        origin = ((width - layout_width) // 2, (height - layout_height) // 2)
        for glyph in self.state.glyphs(origin, self.off_style):
            for block in glyph:
                rect = block.rect
                for row in range(rect.height):
                    stdscr.addstr(rect.y + row, rect.x, " " * rect.width, self.attrs[block.role])

        hint = "q: quit"
        if height > layout_height + 2 and width > len(hint):
            stdscr.addstr(height - 1, (width - len(hint)) // 2, hint, curses.A_DIM)

    def run(self, stdscr):
        """Main frame loop; returns when a quit key is pressed."""
        self.setup_colors()
        try:
            curses.curs_set(0)
        except curses.error:
            log.debug("Cursor visibility not supported")
        stdscr.timeout(1000 // self.fps)
        log.info("Clock started at %d fps", self.fps)

        frame_seconds = 1.0 / self.fps
        while True:
            frame_start = time.monotonic()
            self.state.update()
            self.draw(stdscr)
            stdscr.refresh()

            key = stdscr.getch()
            if key in QUIT_KEYS:
                log.info("Quit requested")
                break

            # A keypress ends getch early; sleep out the rest of the frame
            if key != -1:
                remaining = frame_seconds - (time.monotonic() - frame_start)
                if remaining > 0:
                    curses.napms(int(remaining * 1000))


def render_snapshot(state: ClockState, color: str = DEFAULT_COLOR,
                    accent: Optional[str] = None,
                    off_style: str = OffStyle.DIM) -> List[str]:
    """Render one frame as lines of ANSI-colored text."""
    backgrounds = {
        ON: ANSI_BACKGROUNDS[color],
        ACCENT: ANSI_BACKGROUNDS[accent or color],
        OFF: Back.LIGHTBLACK_EX,
    }
    width, height = layout_size()
    grid = rasterize(state.glyphs((0, 0), off_style), width, height)

    lines = []
    for row in grid:
        line = ""
        for role in row:
            if role is None:
                line += " "
            else:
                line += backgrounds[role] + " " + Style.RESET_ALL
        lines.append(line.rstrip())
    return lines


def setup_logging(log_file: Optional[str], verbose: bool = False):
    """Log to a file when asked; the terminal belongs to curses."""
    if not log_file:
        return

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.FileHandler(log_file)],
        force=True
    )


def frame_rate(value: str) -> int:
    """argparse type for --fps"""
    try:
        fps = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid frame rate: {value!r}")
    if not 1 <= fps <= MAX_FPS:
        raise argparse.ArgumentTypeError(f"frame rate must be between 1 and {MAX_FPS}")
    return fps


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terminal seven-segment clock")
    parser.add_argument("--fps", type=frame_rate, default=DEFAULT_FPS,
                        help=f"Redraws per second (default: {DEFAULT_FPS})")
    parser.add_argument("--color", choices=sorted(CURSES_COLORS), default=DEFAULT_COLOR,
                        help=f"Lit segment color (default: {DEFAULT_COLOR})")
    parser.add_argument("--accent", choices=sorted(CURSES_COLORS),
                        help="Colon color (default: same as --color)")
    parser.add_argument("--off-style", choices=[OffStyle.DIM, OffStyle.HIDDEN],
                        default=OffStyle.DIM,
                        help="Draw unlit segments dimmed or not at all (default: dim)")
    parser.add_argument("--once", action="store_true",
                        help="Print the current time once and exit")
    parser.add_argument("--log-file", help="Write diagnostic logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the clock application"""
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    console = Console(stderr=True)

    if args.once:
        colorama.init()
        state = ClockState()
        state.update()
        for line in render_snapshot(state, args.color, args.accent, args.off_style):
            print(line)
        return 0

    app = ClockApp(fps=args.fps, color=args.color, accent=args.accent,
                   off_style=args.off_style)
    try:
        curses.wrapper(app.run)
    except KeyboardInterrupt:
        log.info("Interrupted")
    except curses.error as e:
        log.error("Terminal setup failed: %s", e)
        console.print(f"[red]Error: could not start the terminal display: {escape(str(e))}[/red]")
        return 1

    log.info("Clock stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
