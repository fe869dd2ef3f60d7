import math
import re
from collections import deque


WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)

NAMED_COLORS = {
    "white": WHITE,
    "black": BLACK,
    "red": (255, 0, 0, 255),
    "green": (0, 255, 0, 255),
    "blue": (0, 0, 255, 255),
    "yellow": (255, 255, 0, 255),
    "transparent": (0, 0, 0, 0),
}

DEBUG_LETTERS = {
    WHITE: "W",
    BLACK: "K",
    (255, 0, 0, 255): "R",
    (0, 255, 0, 255): "G",
    (0, 0, 255, 255): "B",
    (255, 255, 0, 255): "Y",
}

# the 8 neighbours plus the null vector
DIRECTIONS = frozenset((dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1))

HEX_COLOR = re.compile(r"#([0-9A-Fa-f]{6})([0-9A-Fa-f]{2})?")


class CanvasError(ValueError):
    pass


class BrushState:
    # Stand-in for the interpreter's ExecutionState when a canvas is used alone.
    def __init__(self):
        self.cursor_x = 0
        self.cursor_y = 0
        self.brush_color = "Black"
        self.brush_size = 1


def parse_color(value):
    """Resolve a palette name or #RRGGBB[AA] string to an RGBA tuple.

    Returns None when the text is not a color.
    """
    text = value.strip().strip('"')
    named = NAMED_COLORS.get(text.lower())
    if named is not None:
        return named
    m = HEX_COLOR.fullmatch(text)
    if m is None:
        return None
    rgb, alpha = m.groups()
    r, g, b = (int(rgb[i:i + 2], 16) for i in (0, 2, 4))
    a = int(alpha, 16) if alpha else 255
    return (r, g, b, a)


def ensure_direction(dx, dy):
    if (dx, dy) not in DIRECTIONS:
        raise CanvasError(
            f"Invalid direction ({dx}, {dy}): only cardinal or diagonal unit steps are allowed"
        )


class Canvas:
    # Canvas owns a width x height RGBA buffer; pixels[y][x] is an (r, g, b, a) tuple.
    def __init__(self, width, height, state=None, pixels=None):
        if width <= 0 or height <= 0:
            raise CanvasError("Canvas dimensions must be positive")
        self.width = width
        self.height = height
        self.state = state if state is not None else BrushState()
        if pixels is None:
            self.pixels = [[WHITE for x in range(width)] for y in range(height)]
        else:
            if len(pixels) != height or any(len(row) != width for row in pixels):
                raise CanvasError("Pixel rows do not match the canvas size")
            self.pixels = [[tuple(p) for p in row] for row in pixels]
        self.brush_color = BLACK
        self.brush_size = 1
        self.bind(self.state)

    def bind(self, state):
        # cursor and brush text live on the state; resolve the brush from it
        self.state = state
        self.setColor(state.brush_color)
        self.setSize(state.brush_size)

    def inside(self, x, y):
        return 0 <= x < self.width and 0 <= y < self.height

    def getPixel(self, x, y):
        if not self.inside(x, y):
            raise CanvasError(f"Coordinates outside the canvas: ({x}, {y})")
        return self.pixels[y][x]

    def setPixel(self, x, y, color):
        if not self.inside(x, y):
            raise CanvasError(f"Coordinates outside the canvas: ({x}, {y})")
        self.pixels[y][x] = tuple(color)

    def getColorAt(self, x, y):
        r, g, b, a = self.getPixel(x, y)
        return f"#{r:02X}{g:02X}{b:02X}{a:02X}"

    def clear(self):
        for row in self.pixels:
            for x in range(self.width):
                row[x] = WHITE

    def setCursor(self, x, y):
        self.state.cursor_x = x
        self.state.cursor_y = y

    def setColor(self, value):
        color = parse_color(value)
        if color is None:
            raise CanvasError(
                f'Invalid color "{value}". Use a palette name or #RRGGBB[AA]'
            )
        self.brush_color = color
        self.state.brush_color = value.strip().strip('"')

    def setSize(self, size):
        if size <= 0:
            raise CanvasError("Brush size must be positive")
        if size % 2 == 0:
            size -= 1
        self.brush_size = size
        self.state.brush_size = size

    def _paints(self):
        # a fully transparent brush moves the cursor but leaves pixels alone
        return self.brush_color[3] != 0

    def _stamp(self, cx, cy):
        r = self.brush_size // 2
        for y in range(cy - r, cy + r + 1):
            if 0 <= y < self.height:
                row = self.pixels[y]
                for x in range(cx - r, cx + r + 1):
                    if 0 <= x < self.width:
                        row[x] = self.brush_color

    def drawLine(self, dx, dy, length):
        ensure_direction(dx, dy)
        x = self.state.cursor_x
        y = self.state.cursor_y
        paints = self._paints()
        for _ in range(length):
            if paints:
                self._stamp(x, y)
            x += dx
            y += dy
        self.setCursor(x, y)

    def drawRectangle(self, dx, dy, distance, width, height):
        ensure_direction(dx, dy)
        cx = self.state.cursor_x + dx * distance
        cy = self.state.cursor_y + dy * distance
        if self._paints():
            x0 = cx - width // 2
            y0 = cy - height // 2
            for y in range(height):
                for x in range(width):
                    if x == 0 or x == width - 1 or y == 0 or y == height - 1:
                        self._stamp(x0 + x, y0 + y)
        self.setCursor(cx, cy)

    def drawCircle(self, dx, dy, radius):
        ensure_direction(dx, dy)
        if radius <= 0:
            raise CanvasError("Circle radius must be positive")
        cx = self.state.cursor_x + dx
        cy = self.state.cursor_y + dy
        if self._paints():
            for y in range(-radius, radius + 1):
                for x in range(-radius, radius + 1):
                    dist = math.sqrt(x * x + y * y)
                    if radius - 0.5 <= dist <= radius + 0.5:
                        self._stamp(cx + x, cy + y)
        self.setCursor(cx, cy)

    def fill(self):
        # 4-direction flood fill from the cursor
        sx = self.state.cursor_x
        sy = self.state.cursor_y
        if not self.inside(sx, sy) or not self._paints():
            return
        target = self.pixels[sy][sx]
        replacement = self.brush_color
        if target == replacement:
            return
        visited = [[False] * self.width for _ in range(self.height)]
        queue = deque([(sx, sy)])
        while queue:
            x, y = queue.popleft()
            if not self.inside(x, y) or visited[y][x]:
                continue
            visited[y][x] = True
            if self.pixels[y][x] != target:
                continue
            self.pixels[y][x] = replacement
            queue.append((x + 1, y))
            queue.append((x - 1, y))
            queue.append((x, y + 1))
            queue.append((x, y - 1))

    def isBrushColor(self, value):
        color = parse_color(value)
        return color is not None and color == self.brush_color

    def isBrushSize(self, size):
        return self.brush_size == size

    def isCanvasColor(self, value):
        color = parse_color(value)
        if color is None:
            return False
        return all(p == color for row in self.pixels for p in row)

    def getColorCount(self, value, x1, y1, x2, y2):
        color = parse_color(value)
        if color is None:
            return 0
        if not self.inside(x1, y1) or not self.inside(x2, y2):
            return 0
        count = 0
        for y in range(min(y1, y2), max(y1, y2) + 1):
            row = self.pixels[y]
            for x in range(min(x1, x2), max(x1, x2) + 1):
                if row[x] == color:
                    count += 1
        return count

    def getCanvasSize(self):
        return self.width

    def toRGBA(self):
        return bytes(c for row in self.pixels for p in row for c in p)

    def loadRGBA(self, data):
        expected = self.width * self.height * 4
        if len(data) != expected:
            raise CanvasError(f"Expected {expected} bytes of RGBA data, got {len(data)}")
        it = iter(data)
        for y in range(self.height):
            row = self.pixels[y]
            for x in range(self.width):
                row[x] = (next(it), next(it), next(it), next(it))

    def debugView(self):
        return "\n".join(
            "".join(DEBUG_LETTERS.get(p, "X") for p in row) for row in self.pixels
        )
