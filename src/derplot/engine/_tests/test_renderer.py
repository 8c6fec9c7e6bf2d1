from __future__ import annotations

import random

import numpy as np
import pytest

from derplot.config.models import RendererConfig, RendererCtx
from derplot.engine.renderer import DrawMode, Renderer
from derplot.geometry.region import Region
from derplot.geometry.vector import Vector4
from derplot.render.commands import (
    Clear,
    DrawLine,
    DrawRawLine,
    PlotPoint,
    PlotRawPoint,
    SetClearColor,
    SetFrontColor,
    SetViewport,
    apply_command,
)
from derplot.render.display_buffer import BufferOwnership, DisplayBuffer
from derplot.render.render_state import MatrixTarget, RenderState

WHITE = 0xFFFFFFFF
BLACK = 0xFF000000


def random_commands(rng: random.Random, count: int, size: int) -> list:
    commands = []
    for _ in range(count):
        roll = rng.random()
        if roll < 0.15:
            commands.append(SetFrontColor(rng.getrandbits(32)))
        elif roll < 0.2:
            commands.append(SetClearColor(rng.getrandbits(32)))
        elif roll < 0.25:
            commands.append(Clear())
        elif roll < 0.5:
            commands.append(PlotRawPoint((rng.randrange(-2, size + 2), rng.randrange(-2, size + 2)), big=rng.random() < 0.3))
        elif roll < 0.75:
            p1 = (rng.randrange(-4, size + 4), rng.randrange(-4, size + 4))
            p2 = (rng.randrange(-4, size + 4), rng.randrange(-4, size + 4))
            commands.append(DrawRawLine(p1, p2))
        elif roll < 0.9:
            a = Vector4(rng.uniform(-1.2, 1.2), rng.uniform(-1.2, 1.2), rng.uniform(-1.2, 1.2))
            b = Vector4(rng.uniform(-1.2, 1.2), rng.uniform(-1.2, 1.2), rng.uniform(-1.2, 1.2))
            commands.append(DrawLine(a, b))
        elif roll < 0.95:
            commands.append(PlotPoint(Vector4(rng.uniform(-1, 1), rng.uniform(-1, 1), 0.0), big=True))
        else:
            x0 = rng.randrange(0, size)
            y0 = rng.randrange(0, size)
            commands.append(SetViewport(Region(x0, rng.randrange(0, size), y0, rng.randrange(0, size))))
    return commands


def test_async_result_matches_synchronous_reference():
    rng = random.Random(1234)
    size = 16
    commands = random_commands(rng, 400, size)

    reference = RenderState(DisplayBuffer(size, size))
    for command in commands:
        apply_command(command, reference)

    with Renderer(size, size) as renderer:
        for command in commands:
            assert renderer.submit(command)
        renderer.drain()
        assert np.array_equal(renderer.snapshot(), reference.buffer.data())
        assert renderer.state.front_color == reference.front_color
        assert renderer.state.viewport == reference.viewport


def test_end_to_end_identity_scene():
    with Renderer(4, 4) as renderer:
        renderer.clear()
        renderer.draw_line(Vector4(-1, -1, 0, 1), Vector4(1, 1, 0, 1))
        renderer.drain()
        frame = renderer.snapshot()
    expected = np.full((4, 4), BLACK, dtype=np.uint32)
    for x, y in [(0, 3), (1, 2), (2, 1), (3, 0)]:
        expected[y, x] = WHITE
    assert np.array_equal(frame, expected)


def test_clear_twice_equals_clear_once():
    with Renderer(3, 3) as renderer:
        renderer.clear_color(0xFF102030)
        renderer.draw_raw_point(1, 1)
        renderer.clear()
        renderer.drain()
        once = renderer.snapshot()
        renderer.clear()
        renderer.drain()
        assert np.array_equal(once, renderer.snapshot())
        assert (once == 0xFF102030).all()


def test_shutdown_applies_everything_queued_before_it():
    renderer = Renderer(2, 2)
    for color in range(1, 101):
        renderer.front_color(color)
    renderer.draw_raw_point(0, 0)
    renderer.shutdown()
    assert renderer.snapshot()[0, 0] == 100
    assert renderer.state.front_color == 100
    assert not renderer.front_color(7)
    assert not renderer.draw_raw_point(1, 1)
    assert renderer.state.front_color == 100
    assert renderer.snapshot()[1, 1] == 0
    assert not renderer.is_ready


def test_shutdown_aliases_and_context_manager():
    renderer = Renderer(2, 2)
    assert renderer.is_ready
    renderer.flush()
    renderer.terminate()
    renderer.shutdown()
    assert not renderer.is_ready
    with Renderer(2, 2) as r2:
        assert r2.is_ready
    assert not r2.is_ready


def test_entry_points_build_matching_commands():
    with Renderer(5, 5) as renderer:
        renderer.front_color(0xFF00FF00)
        renderer.draw_raw_big_point(2, 2)
        renderer.draw_raw_line(0, 0, 4, 0)
        renderer.translate(Vector4(1.0, 0, 0))
        renderer.scale((1, 1, 1), MatrixTarget.PROJECTION)
        renderer.rotate_x(0.0)
        renderer.rotate_y(0.0)
        renderer.rotate_z(0.0)
        renderer.draw_point(Vector4(-1, -1, 0))
        renderer.drain()
        frame = renderer.snapshot()
        state = renderer.state
        assert state.modelview.take_vector().x == 1.0
    green = 0xFF00FF00
    for x, y in [(2, 2), (1, 2), (3, 2), (2, 1), (2, 3)]:
        assert frame[y, x] == green
    assert (frame[0, :] == green).all()
    # translated from the bottom-left corner to the bottom-center pixel
    assert frame[4, 2] == green
    assert frame[4, 0] != green


def test_projection_entry_points():
    with Renderer(4, 4) as renderer:
        renderer.ortho_projection(-2, 2, -2, 2, -1, 1)
        renderer.drain()
        ortho = renderer.state.projection
        assert ortho.get(0, 0) == pytest.approx(0.5)
        renderer.ortho_projection(1, 1, 0, 1, 0, 1)
        renderer.drain()
        assert renderer.state.projection == ortho
        renderer.perspective_projection(90.0, 1.0, 10.0, 1.0)
        renderer.drain()
        assert renderer.state.projection.get(3, 2) == -1.0
        renderer.set_projection_matrix([2] * 16)
        renderer.set_modelview_matrix(np.eye(4) * 3)
        renderer.drain()
        assert renderer.state.projection.get(1, 2) == 2.0
        assert renderer.state.modelview.get(2, 2) == 3.0


def test_set_viewport_entry_point():
    with Renderer(8, 8) as renderer:
        renderer.set_viewport(Region(0, 3, 0, 3))
        renderer.draw_point(Vector4(0.999, 0.999, 0))
        renderer.drain()
        frame = renderer.snapshot()
    assert frame[1, 2] == WHITE
    assert int((frame == WHITE).sum()) == 1


def test_draw_modes_expand_point_lists():
    pts = [Vector4(-1, -1, 0), Vector4(0.5, -1, 0), Vector4(0.5, 0.5, 0)]
    with Renderer(5, 5) as renderer:
        assert renderer.draw(DrawMode.NOTHING, pts) == 0
        assert renderer.draw(DrawMode.POINTS, pts) == 3
        assert renderer.draw(DrawMode.BIG_POINTS, pts[:1]) == 1
        assert renderer.draw(DrawMode.LINES, pts) == 1
        assert renderer.draw(DrawMode.LINE_STRIP, pts) == 2
        assert renderer.draw(DrawMode.LINE_LOOP, pts) == 3
        assert renderer.draw(DrawMode.LINE_LOOP, pts[:2]) == 1
        assert renderer.draw(DrawMode.LINE_STRIP, [(0, 0)]) == 0
        assert renderer.draw(DrawMode.LINES.value, [(0, 0), (0.5, 0.5)]) == 1


def test_line_strip_draws_connected_segments():
    pts = [(-1, 0.5), (0.5, 0.5), (0.5, -1)]
    with Renderer(5, 5) as renderer:
        renderer.draw(DrawMode.LINE_STRIP, pts)
        renderer.drain()
        frame = renderer.snapshot()
    # (-1, 0.5) -> (0, 1), (0.5, 0.5) -> (3, 1), (0.5, -1) -> (3, 4)
    lit = {(int(x), int(y)) for y, x in zip(*np.nonzero(frame == WHITE))}
    assert lit == {(0, 1), (1, 1), (2, 1), (3, 1), (3, 2), (3, 3), (3, 4)}


def test_buffer_copy_into_caller_storage():
    with Renderer(3, 2) as renderer:
        renderer.clear_color(0x11223344)
        renderer.clear()
        renderer.drain()
        dest = bytearray(3 * 2 * 4)
        assert renderer.buffer_copy(dest)
        assert dest[:4] == (0x11223344).to_bytes(4, "little")
        bigger = np.zeros(10, dtype=np.uint32)
        assert renderer.buffer_copy(bigger)
        assert (bigger[:6] == 0x11223344).all()
        assert (bigger[6:] == 0).all()
        assert not renderer.buffer_copy(None)
        with pytest.raises(ValueError):
            renderer.buffer_copy(bytearray(8))


def test_external_buffer_is_rendered_in_place():
    external = np.zeros((2, 2), dtype=np.uint32)
    with Renderer(2, 2, external) as renderer:
        renderer.draw_raw_point(1, 0)
        renderer.drain()
        assert renderer.state.buffer.ownership is BufferOwnership.BORROWED
    assert external[0, 1] == WHITE


def test_zero_sized_renderer_is_inert():
    renderer = Renderer(0, 10)
    assert not renderer.is_ready
    assert not renderer.clear()
    renderer.drain()
    renderer.shutdown()
    assert renderer.snapshot() is None
    assert not renderer.buffer_copy(bytearray(16))


def test_config_colors_seed_the_state():
    ctx = RendererCtx(cfg=RendererConfig(front_color=0xFF0000FF, clear_color=0xFFABCDEF))
    with Renderer(2, 2, ctx=ctx) as renderer:
        renderer.clear()
        renderer.draw_raw_point(0, 0)
        renderer.drain()
        frame = renderer.snapshot()
    assert frame[0, 0] == 0xFF0000FF
    assert frame[1, 1] == 0xFFABCDEF


def test_metrics_are_shared_with_the_engine():
    with Renderer(2, 2) as renderer:
        renderer.clear()
        renderer.drain()
        snap = renderer.metrics.snapshot()
    assert snap["counters"]["derplot_commands_submitted"] == 1
    assert snap["counters"]["derplot_commands_applied"] == 1
