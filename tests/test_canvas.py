import pytest

from Engine.canvas import BLACK, WHITE, Canvas, CanvasError, parse_color


RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def make(width=10, height=10):
    return Canvas(width, height)


def test_fresh_canvas_is_white_with_black_brush():
    c = make(3, 2)
    assert c.debugView() == "WWW\nWWW"
    assert c.brush_color == BLACK
    assert c.brush_size == 1
    assert c.isCanvasColor("White")


@pytest.mark.parametrize(
    "text, rgba",
    [
        ("Red", RED),
        ("red", RED),
        ("YELLOW", (255, 255, 0, 255)),
        ("transparent", (0, 0, 0, 0)),
        ("#00FF00", (0, 255, 0, 255)),
        ("#0000ff80", (0, 0, 255, 128)),
        ('"Blue"', BLUE),
    ],
)
def test_parse_color(text, rgba):
    assert parse_color(text) == rgba


@pytest.mark.parametrize("text", ["Purple", "#12345", "#GGGGGG", "", "#1234567"])
def test_parse_color_rejects(text):
    assert parse_color(text) is None


def test_set_color_invalid_raises():
    with pytest.raises(CanvasError):
        make().setColor("Purple")


def test_color_round_trip_between_names_and_hex():
    c = make()
    c.setColor("#FF0000FF")
    assert c.isBrushColor("Red")
    c.setColor("Blue")
    assert c.isBrushColor("#0000FFFF")
    assert not c.isBrushColor("Red")
    assert not c.isBrushColor("nonsense")


def test_set_size_normalizes_even_values():
    c = make()
    c.setSize(4)
    assert c.brush_size == 3
    assert c.isBrushSize(3)
    c.setSize(1)
    assert c.brush_size == 1
    with pytest.raises(CanvasError):
        c.setSize(0)
    with pytest.raises(CanvasError):
        c.setSize(-3)


def test_draw_line_stamps_and_moves_cursor():
    c = make()
    c.setColor("Red")
    c.drawLine(1, 0, 3)
    assert [c.getPixel(x, 0) for x in range(4)] == [RED, RED, RED, WHITE]
    assert (c.state.cursor_x, c.state.cursor_y) == (3, 0)


def test_draw_line_diagonal_with_thick_brush_clips():
    c = make(5, 5)
    c.setSize(3)
    c.drawLine(1, 1, 2)
    assert c.debugView().splitlines() == [
        "KKKWW",
        "KKKWW",
        "KKKWW",
        "WWWWW",
        "WWWWW",
    ]
    assert (c.state.cursor_x, c.state.cursor_y) == (2, 2)


def test_draw_line_off_canvas_still_moves_cursor():
    c = make(3, 3)
    c.drawLine(-1, 0, 4)
    assert (c.state.cursor_x, c.state.cursor_y) == (-4, 0)
    assert c.getPixel(0, 0) == BLACK


def test_invalid_direction_is_rejected_before_drawing():
    c = make()
    before = c.debugView()
    with pytest.raises(CanvasError, match="(?i)invalid direction"):
        c.drawCircle(2, 0, 3)
    with pytest.raises(CanvasError, match="(?i)invalid direction"):
        c.drawLine(0, 2, 3)
    with pytest.raises(CanvasError, match="(?i)invalid direction"):
        c.drawRectangle(1, -2, 1, 3, 3)
    assert c.debugView() == before
    assert (c.state.cursor_x, c.state.cursor_y) == (0, 0)


def test_draw_circle_ring():
    c = make(7, 7)
    c.setCursor(3, 3)
    c.drawCircle(0, 0, 2)
    assert c.debugView().splitlines() == [
        "WWWWWWW",
        "WWKKKWW",
        "WKWWWKW",
        "WKWWWKW",
        "WKWWWKW",
        "WWKKKWW",
        "WWWWWWW",
    ]
    assert (c.state.cursor_x, c.state.cursor_y) == (3, 3)


def test_draw_circle_moves_center_by_direction():
    c = make()
    c.setCursor(4, 4)
    c.drawCircle(1, -1, 1)
    assert (c.state.cursor_x, c.state.cursor_y) == (5, 3)


def test_draw_circle_radius_must_be_positive():
    with pytest.raises(CanvasError):
        make().drawCircle(0, 0, 0)


def test_draw_rectangle_border_only():
    c = make(7, 7)
    c.setCursor(1, 3)
    c.drawRectangle(1, 0, 2, 5, 3)
    assert (c.state.cursor_x, c.state.cursor_y) == (3, 3)
    assert c.debugView().splitlines() == [
        "WWWWWWW",
        "WWWWWWW",
        "WKKKKKW",
        "WKWWWKW",
        "WKKKKKW",
        "WWWWWWW",
        "WWWWWWW",
    ]


def test_fill_replaces_connected_region_only():
    c = make(5, 5)
    c.setCursor(2, 0)
    c.drawLine(0, 1, 5)
    c.setColor("Red")
    c.setCursor(0, 0)
    c.fill()
    assert c.debugView().splitlines() == ["RRKWW"] * 5


def test_fill_twice_is_idempotent():
    c = make(6, 6)
    c.setCursor(1, 1)
    c.drawRectangle(0, 0, 0, 3, 3)
    c.setColor("Blue")
    c.fill()
    once = c.debugView()
    c.fill()
    assert c.debugView() == once


def test_fill_same_color_is_noop():
    c = make(3, 3)
    c.setColor("White")
    c.fill()
    assert c.isCanvasColor("White")


def test_fill_off_canvas_is_noop():
    c = make(3, 3)
    c.setCursor(-1, 5)
    c.fill()
    assert c.isCanvasColor("White")


def test_transparent_brush_moves_cursor_without_painting():
    c = make()
    c.setColor("Transparent")
    c.drawLine(1, 0, 5)
    c.drawCircle(1, 0, 2)
    c.fill()
    assert c.isCanvasColor("White")
    assert (c.state.cursor_x, c.state.cursor_y) == (6, 0)


def test_get_color_count():
    c = make()
    c.setColor("Red")
    c.drawLine(1, 0, 4)
    assert c.getColorCount("Red", 0, 0, 9, 9) == 4
    assert c.getColorCount("#FF0000", 9, 9, 0, 0) == 4
    assert c.getColorCount("Red", 0, 0, 1, 0) == 2
    assert c.getColorCount("White", 0, 0, 9, 0) == 6
    assert c.getColorCount("Red", 0, 0, 10, 0) == 0
    assert c.getColorCount("Red", -1, 0, 5, 0) == 0
    assert c.getColorCount("Purple", 0, 0, 9, 9) == 0


def test_is_canvas_color_compares_resolved_values():
    c = make(2, 2)
    assert c.isCanvasColor("#FFFFFFFF")
    c.setPixel(1, 1, RED)
    assert not c.isCanvasColor("White")
    assert not c.isCanvasColor("bogus")


def test_get_canvas_size_is_width():
    assert make(12, 8).getCanvasSize() == 12


def test_bounds_checked_accessors():
    c = make(2, 2)
    with pytest.raises(CanvasError):
        c.getPixel(2, 0)
    with pytest.raises(CanvasError):
        c.setPixel(0, -1, RED)
    assert c.getColorAt(0, 0) == "#FFFFFFFF"


def test_rgba_buffer_hooks():
    c = make(2, 1)
    c.setPixel(1, 0, RED)
    data = c.toRGBA()
    assert data == bytes([255, 255, 255, 255, 255, 0, 0, 255])
    other = make(2, 1)
    other.loadRGBA(data)
    assert other.pixels == c.pixels
    with pytest.raises(CanvasError):
        other.loadRGBA(b"\x00" * 7)
    other.clear()
    assert other.isCanvasColor("White")


def test_debug_view_marks_unknown_colors():
    c = make(2, 1)
    c.setPixel(0, 0, (1, 2, 3, 255))
    assert c.debugView() == "XW"


def test_invalid_dimensions():
    with pytest.raises(CanvasError):
        Canvas(0, 5)
