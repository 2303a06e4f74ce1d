"""
Seven-segment digit encoding and block layout for the terminal clock.

Segments are labelled a-g in the usual order:

     aaaa
    f    b
    f    b
     gggg
    e    c
    e    c
     dddd

A segment mask is a 7-bit int with segment a in the high bit and g in the
low bit, so 0 encodes as 0b1111110.
"""

import time
from datetime import datetime
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple

# Indexed by digit, bits a..g from MSB to LSB
SEGMENT_CODES = (0x7E, 0x30, 0x6D, 0x79, 0x33, 0x5B, 0x5F, 0x70, 0x7F, 0x7B)

# Color roles a block can be drawn with
ON = 'on'
OFF = 'off'
ACCENT = 'accent'


class OffStyle:
    DIM = 'dim'        # unlit segments drawn in the off color
    HIDDEN = 'hidden'  # unlit segments not drawn at all


class Rect(NamedTuple):
    """A rectangle of terminal cells, x/y measured from the top-left corner."""
    x: int
    y: int
    width: int
    height: int

    def moved(self, dx: int, dy: int) -> 'Rect':
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def intersects(self, other: 'Rect') -> bool:
        return (self.x < other.x + other.width and other.x < self.x + self.width
                and self.y < other.y + other.height and other.y < self.y + self.height)

    def cells(self) -> Iterator[Tuple[int, int]]:
        for row in range(self.y, self.y + self.height):
            for col in range(self.x, self.x + self.width):
                yield col, row


class Block(NamedTuple):
    rect: Rect
    role: str


# Segment rectangles relative to the digit anchor, in a..g order
SEGMENT_RECTS = (
    Rect(2, 0, 10, 1),   # a
    Rect(12, 1, 2, 5),   # b
    Rect(12, 7, 2, 5),   # c
    Rect(2, 12, 10, 1),  # d
    Rect(0, 7, 2, 5),    # e
    Rect(0, 1, 2, 5),    # f
    Rect(2, 6, 10, 1),   # g
)

DIGIT_WIDTH = 14
DIGIT_HEIGHT = 13

COLON_RECTS = (Rect(1, 3, 2, 2), Rect(1, 8, 2, 2))
COLON_WIDTH = 4

GLYPH_GAP = 2

# x offset of each glyph: H-tens, H-units, colon, M-tens, M-units
GLYPH_OFFSETS = (
    0,
    DIGIT_WIDTH + GLYPH_GAP,
    2 * (DIGIT_WIDTH + GLYPH_GAP),
    2 * (DIGIT_WIDTH + GLYPH_GAP) + COLON_WIDTH + GLYPH_GAP,
    3 * (DIGIT_WIDTH + GLYPH_GAP) + COLON_WIDTH + GLYPH_GAP,
)
COLON_POSITION = 2


def encode(digit: int) -> int:
    """Return the segment mask for a decimal digit."""
    if not isinstance(digit, int) or isinstance(digit, bool) or not 0 <= digit <= 9:
        raise ValueError(f"not a decimal digit: {digit!r}")
    return SEGMENT_CODES[digit]


def segments_lit(mask: int) -> Tuple[bool, ...]:
    """Expand a mask into seven booleans, segment a first."""
    return tuple(bool((mask >> shift) & 1) for shift in range(6, -1, -1))


def format_mask(mask: int) -> str:
    return format(mask, '07b')


def read_wall_clock(now: Optional[datetime] = None) -> Tuple[str, str]:
    """Current local hour and minute as zero-padded strings."""
    now = now or datetime.now()
    return now.strftime('%H'), now.strftime('%M')


def time_digits(now: Optional[datetime] = None) -> List[int]:
    """Split the wall clock time into its four HHMM digits."""
    hours, minutes = read_wall_clock(now)
    return [int(char) for char in hours + minutes]


def digit_glyph(mask: int, anchor: Tuple[int, int],
                off_style: str = OffStyle.DIM) -> List[Block]:
    """Lay out the seven segment blocks of one digit at ``anchor``.

    Lit segments get the ``on`` role. Unlit segments get the ``off`` role,
    or are left out entirely when ``off_style`` is ``OffStyle.HIDDEN``.
    """
    x, y = anchor
    blocks = []
    for rect, lit in zip(SEGMENT_RECTS, segments_lit(mask)):
        if lit:
            blocks.append(Block(rect.moved(x, y), ON))
        elif off_style != OffStyle.HIDDEN:
            blocks.append(Block(rect.moved(x, y), OFF))
    return blocks


def colon_glyph(visible: bool, anchor: Tuple[int, int]) -> List[Block]:
    """Two colon dots sharing one color; always present in the layout."""
    x, y = anchor
    role = ACCENT if visible else OFF
    return [Block(rect.moved(x, y), role) for rect in COLON_RECTS]


def compose(masks: List[int], colon_visible: bool,
            origin: Tuple[int, int] = (0, 0),
            off_style: str = OffStyle.DIM) -> List[List[Block]]:
    """Build the five glyphs HH:MM left to right starting at ``origin``.

    ``masks`` are the segment masks of the four digits in display order.
    """
    if len(masks) != 4:
        raise ValueError(f"expected four digit masks, got {len(masks)}")

    x, y = origin
    glyphs = []
    for position, offset in enumerate(GLYPH_OFFSETS):
        anchor = (x + offset, y)
        if position == COLON_POSITION:
            glyphs.append(colon_glyph(colon_visible, anchor))
        else:
            mask = masks[position if position < COLON_POSITION else position - 1]
            glyphs.append(digit_glyph(mask, anchor, off_style))
    return glyphs


def layout_size() -> Tuple[int, int]:
    """Width and height in cells of the composed clock."""
    return GLYPH_OFFSETS[-1] + DIGIT_WIDTH, DIGIT_HEIGHT


def rasterize(glyphs: List[List[Block]], width: int,
              height: int) -> List[List[Optional[str]]]:
    """Paint glyph blocks onto a grid of roles; empty cells are None."""
    grid: List[List[Optional[str]]] = [[None] * width for _ in range(height)]
    for glyph in glyphs:
        for block in glyph:
            for col, row in block.rect.cells():
                if 0 <= row < height and 0 <= col < width:
                    grid[row][col] = block.role
    return grid


class ColonBlinker:
    """Colon visibility that flips once every ``interval`` seconds.

    The colon starts visible. ``tick()`` is called every frame and flips the
    state at most once per call. Each flip restarts the interval from the
    time of that flip, so two flips are never less than ``interval`` apart.
    """

    def __init__(self, interval: float = 1.0, visible: bool = True,
                 clock: Callable[[], float] = time.monotonic):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.clock = clock
        self._visible = visible
        self.last_toggle = clock()

    @property
    def visible(self) -> bool:
        return self._visible

    def tick(self, now: Optional[float] = None) -> bool:
        """Flip the colon if a full interval has elapsed. Returns True on a flip."""
        if now is None:
            now = self.clock()
        elapsed = now - self.last_toggle
        if elapsed < self.interval:
            return False
        self._visible = not self._visible
        self.last_toggle = now
        return True
