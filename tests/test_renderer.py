import pytest
from PIL import Image, ImageChops, ImageFont

from pp_citation import defaults, drawing
from pp_citation import renderer as r
from pp_citation.colour import Colour

BG = Colour(*defaults.BG_COLOUR)
FG = Colour(*defaults.FG_COLOUR)
DECO = Colour(*defaults.DECORATION_COLOUR)


def _render(citation_assets, **kwargs):
    return r.CitationRenderer(assets=citation_assets, measure_at_draw_size=False).render(r.CitationData(**kwargs))


def _record_text(monkeypatch):
    calls = []

    def fake_draw_text(canvas, colour, x, y, text, font):
        calls.append({"x": x, "y": y, "text": text, "colour": tuple(colour), "size": font.size})

    monkeypatch.setattr(drawing, "draw_text", fake_draw_text)
    return calls


def test_default_render_size_and_fully_opaque(citation_assets):
    img = _render(citation_assets)
    assert img.size == (366, 160)
    assert img.mode == "RGBA"
    assert img.getchannel("A").getextrema() == (255, 255)


def test_render_is_deterministic(citation_assets):
    a = _render(citation_assets)
    b = _render(citation_assets)
    assert a.tobytes() == b.tobytes()


def test_generate_uses_shared_assets(monkeypatch, citation_assets):
    monkeypatch.setattr(r, "get_assets", lambda: citation_assets)
    assert r.generate().tobytes() == r.generate(r.CitationData()).tobytes()


def test_right_border_and_corners(citation_assets):
    img = _render(citation_assets)
    w, h = img.size
    for y in range(h):
        assert img.getpixel((w - 1, y)) == DECO, y
        assert img.getpixel((w - 2, y)) == DECO, y
    assert img.getpixel((0, 0)) == DECO
    assert img.getpixel((w - 1, 0)) == DECO
    assert img.getpixel((w - 1, h - 1)) == DECO


def test_top_and_bottom_dotted_edges(citation_assets):
    img = _render(citation_assets)
    w, h = img.size
    # Stay left of the barcode; nothing else reaches the top two rows
    for x in range(0, 300):
        expected = DECO if x % 4 in (0, 1) else BG
        assert img.getpixel((x, 0)) == expected, x
        assert img.getpixel((x, 1)) == expected, x
    # Bottom edge starts one dot in
    for x in range(0, 140):
        expected = DECO if x % 4 in (2, 3) else BG
        assert img.getpixel((x, h - 2)) == expected, x
        assert img.getpixel((x, h - 1)) == expected, x


def test_separators_in_foreground_colour(citation_assets):
    img = _render(citation_assets)
    for y in (r.HEADER_SEPARATOR_Y, r.VIOLATION_SEPARATOR_Y):
        assert img.getpixel((16, y)) == FG
        assert img.getpixel((17, y + 1)) == FG
        assert img.getpixel((18, y)) == BG
        assert img.getpixel((15, y)) == BG
        assert img.getpixel((14, y)) == BG


def test_side_indents(citation_assets):
    img = _render(citation_assets)
    for x in r.SIDE_COLUMN_XS:
        assert img.getpixel((x, 6)) == DECO
        assert img.getpixel((x + 5, 11)) == DECO
        assert img.getpixel((x, 12)) == BG
        assert img.getpixel((x, 24)) == DECO


def test_stamp_and_barcode_are_tinted(citation_assets):
    img = _render(citation_assets, violation_text=[None, None, None, None], punishment_text="")
    # Outer ring of the stamp at its left edge, mid height
    sx, sy = r.STAMP_OFFSET
    assert img.getpixel((sx + 2, sy + 32)) == DECO
    bx, by = r.BARCODE_OFFSET
    column = [img.getpixel((bx + 15, by + dy)) for dy in range(100)]
    assert FG in column
    assert set(column) <= {FG, BG}


def test_assets_are_not_mutated(citation_assets):
    stamp_before = citation_assets.stamp.tobytes()
    barcode_before = citation_assets.barcode.tobytes()
    _render(citation_assets, decoration_colour=(255, 0, 0, 255), fg_colour=(0, 0, 255, 128))
    assert citation_assets.stamp.tobytes() == stamp_before
    assert citation_assets.barcode.tobytes() == barcode_before


def test_all_four_violation_slots_use_fixed_pitch(monkeypatch, citation_assets):
    calls = _record_text(monkeypatch)
    lines = ["ONE", "TWO", "THREE", "FOUR"]
    _render(citation_assets, violation_text=lines)

    by_text = {c["text"]: c for c in calls}
    for k, line in enumerate(lines):
        assert by_text[line]["x"] == r.TEXT_X
        assert by_text[line]["y"] == 44 + 18 * k


def test_empty_slots_keep_their_rows(monkeypatch, citation_assets):
    calls = _record_text(monkeypatch)
    _render(citation_assets, violation_text=[None, "SECOND", None, "FOURTH"])
    ys = {c["text"]: c["y"] for c in calls}
    assert ys["SECOND"] == 62
    assert ys["FOURTH"] == 98


def test_violation_ink_lands_in_its_slot(citation_assets):
    base = _render(citation_assets, violation_text=[None] * 4)
    for k in range(4):
        slots = [None] * 4
        slots[k] = "HELLO"
        img = _render(citation_assets, violation_text=slots)
        bbox = ImageChops.difference(img.convert("RGB"), base.convert("RGB")).getbbox()
        assert bbox is not None
        assert 44 + 18 * k <= bbox[1] < 44 + 18 * (k + 1)
        assert bbox[0] >= r.TEXT_X


def test_no_violations_still_draws_header_punishment_and_separators(monkeypatch, citation_assets):
    calls = _record_text(monkeypatch)
    img = _render(citation_assets, violation_text=[None, None, None, None])
    texts = [c["text"] for c in calls]
    assert texts == [defaults.HEADER_TEXT, defaults.PUNISHMENT_TEXT]
    assert calls[0]["x"] == r.TEXT_X and calls[0]["y"] == r.HEADER_Y
    assert calls[1]["y"] == r.PUNISHMENT_Y
    assert all(c["colour"] == FG for c in calls)
    assert img.getpixel((16, r.HEADER_SEPARATOR_Y)) == FG
    assert img.getpixel((16, r.VIOLATION_SEPARATOR_Y)) == FG


def test_no_violation_ink_between_separators(citation_assets):
    img = _render(citation_assets, violation_text=[None] * 4)
    # Text column left of the stamp and side indent, inside the violation block
    region = img.crop((20, r.HEADER_SEPARATOR_Y + 2, 140, r.VIOLATION_SEPARATOR_Y))
    assert region.getcolors() == [(region.width * region.height, tuple(BG))]


def test_punishment_measured_at_reference_size(monkeypatch, citation_assets):
    calls = _record_text(monkeypatch)
    _render(citation_assets)
    width = drawing.text_width(defaults.PUNISHMENT_TEXT, citation_assets.font_at(2.0))
    punishment = calls[-1]
    assert punishment["text"] == defaults.PUNISHMENT_TEXT
    assert punishment["x"] == 66 - width // 2
    assert punishment["size"] == defaults.FONT_SIZE


def test_punishment_measured_at_draw_size_when_enabled(monkeypatch, citation_assets):
    calls = _record_text(monkeypatch)
    renderer = r.CitationRenderer(assets=citation_assets, measure_at_draw_size=True)
    renderer.render(r.CitationData())
    width = drawing.text_width(defaults.PUNISHMENT_TEXT, citation_assets.font_at(defaults.FONT_SIZE))
    assert calls[-1]["x"] == 66 - width // 2


def test_measure_mode_defaults_from_settings(monkeypatch, citation_assets):
    monkeypatch.setattr(r.settings, "MEASURE_AT_DRAW_SIZE", True)
    assert r.CitationRenderer(assets=citation_assets).measure_at_draw_size is True


def test_custom_font_and_size(citation_assets):
    font = ImageFont.truetype(str(defaults.FONT_PATH), 10)
    img = r.CitationRenderer(assets=citation_assets).render(r.CitationData(font=font, font_size=20.0))
    default = _render(citation_assets)
    assert img.size == default.size
    assert img.tobytes() != default.tobytes()


def test_too_many_violation_lines_rejected():
    with pytest.raises(ValueError):
        r.CitationData(violation_text=["a", "b", "c", "d", "e"])


def test_config_normalises_colours_and_is_frozen():
    cfg = r.CitationData(bg_colour=(1, 2, 3), violation_text=["x"])
    assert cfg.bg_colour == Colour(1, 2, 3, 255)
    assert cfg.violation_text == ("x",)
    with pytest.raises(Exception):
        cfg.width = 10


def test_overflowing_text_and_small_canvas_clip(citation_assets):
    long_line = "OVERFLOW " * 80
    img = _render(citation_assets, header_text=long_line, violation_text=[long_line] * 4, punishment_text=long_line)
    assert img.size == (366, 160)

    tiny = _render(citation_assets, width=12, height=12)
    assert tiny.size == (12, 12)
    assert tiny.getpixel((11, 5)) == DECO


def test_translucent_colours_render(citation_assets):
    img = _render(citation_assets, bg_colour=(0, 0, 0, 0), decoration_colour=(255, 0, 0, 128))
    assert img.getpixel((0, 0)) == (255, 0, 0, 128)
    assert img.getpixel((2, 0)) == (0, 0, 0, 0)
