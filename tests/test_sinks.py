"""
Tests for sink backends and the sink factory
"""
import os

import pytest
from PIL import Image

from exr_import.conversion import BaseMode, LdrPixelFormat
from exr_import.errors import CanvasCreationError, LayerAppendError
from exr_import.sink import (
    CanvasSink,
    DirectorySink,
    MemorySink,
    SinkCapabilities,
    create_sink,
    create_sink_from_config,
    get_available_sinks,
    get_sink_info,
    image_from_buffer,
    safe_layer_filename,
    save_image_atomic,
)


# =============================================================================
# Factory
# =============================================================================

class TestSinkFactory:
    """Test sink factory functions"""

    def test_get_available_sinks(self):
        sinks = get_available_sinks()
        assert sinks == ['directory', 'memory']

    def test_create_memory_sink(self):
        sink = create_sink('memory')
        assert isinstance(sink, MemorySink)
        assert isinstance(sink, CanvasSink)

    @pytest.mark.parametrize("alias", ['directory', 'dir', 'files', ' Directory '])
    def test_directory_aliases(self, alias):
        assert isinstance(create_sink(alias), DirectorySink)

    def test_unknown_backend(self):
        with pytest.raises(ValueError) as exc_info:
            create_sink('gimp')
        assert "Unknown sink backend" in str(exc_info.value)

    def test_create_from_config(self, temp_dir):
        sink = create_sink_from_config({'sink': 'memory'})
        assert isinstance(sink, MemorySink)

        sink = create_sink_from_config({'output': {'directory': temp_dir}})
        assert isinstance(sink, DirectorySink)
        assert sink.output_dir == temp_dir

    def test_sink_info(self):
        info = get_sink_info()
        assert set(info) == {'directory', 'memory'}
        assert info['directory']['name'] == "Directory"
        assert sorted(info['directory']['aliases']) == ['dir', 'files']
        assert info['memory']['capabilities']['persists_output'] is False


class TestSinkCapabilities:
    def test_to_dict(self):
        caps = SinkCapabilities(backend_name="Test", persists_output=True,
                                output_formats=['png'])
        assert caps.to_dict() == {
            'backend_name': "Test",
            'persists_output': True,
            'supports_delete': True,
            'output_formats': ['png'],
        }


# =============================================================================
# Utilities
# =============================================================================

class TestImageFromBuffer:
    """Test buffer validation"""

    def test_rgb_image(self):
        image = image_from_buffer(2, 1, BaseMode.COLOR, LdrPixelFormat.RGB,
                                  bytes([255, 0, 0, 0, 255, 0]))
        assert image.mode == "RGB"
        assert image.size == (2, 1)
        assert image.getpixel((1, 0)) == (0, 255, 0)

    def test_graya_image(self):
        image = image_from_buffer(1, 1, BaseMode.GRAYSCALE, LdrPixelFormat.GRAYA, bytes([10, 20]))
        assert image.mode == "LA"
        assert image.getpixel((0, 0)) == (10, 20)

    def test_wrong_size(self):
        with pytest.raises(LayerAppendError):
            image_from_buffer(2, 2, BaseMode.COLOR, LdrPixelFormat.RGB, bytes(11))

    def test_color_layer_on_grayscale_canvas(self):
        with pytest.raises(LayerAppendError):
            image_from_buffer(1, 1, BaseMode.GRAYSCALE, LdrPixelFormat.RGB, bytes(3))

    def test_gray_layer_on_color_canvas(self):
        with pytest.raises(LayerAppendError):
            image_from_buffer(1, 1, BaseMode.COLOR, LdrPixelFormat.GRAY, bytes(1))

    @pytest.mark.parametrize("name,expected", [
        ("", "default"),
        ("AO", "AO"),
        ("diffuse.direct", "diffuse.direct"),
        ("my layer/1", "my_layer_1"),
    ])
    def test_safe_layer_filename(self, name, expected):
        assert safe_layer_filename(name) == expected

    def test_save_image_atomic(self, temp_dir):
        path = os.path.join(temp_dir, "nested", "out.png")
        save_image_atomic(Image.new("RGB", (2, 2), (1, 2, 3)), path, "PNG")

        assert os.path.exists(path)
        leftovers = [f for f in os.listdir(os.path.dirname(path)) if f.endswith('.tmp')]
        assert leftovers == []
        with Image.open(path) as img:
            assert img.getpixel((0, 0)) == (1, 2, 3)


# =============================================================================
# Memory sink
# =============================================================================

class TestMemorySink:
    """Test the in-memory backend"""

    def test_create_and_append(self):
        sink = MemorySink()
        canvas = sink.create_canvas(2, 1, BaseMode.COLOR, name="render")

        layer = sink.append_layer(canvas, "beauty", LdrPixelFormat.RGBA, bytes([255] * 8))

        assert canvas.canvas_id == 1
        assert canvas.layer_count == 1
        assert layer.image.mode == "RGBA"
        assert sink.get_canvas(canvas.canvas_id) is canvas

    def test_canvas_ids_increase(self):
        sink = MemorySink()
        first = sink.create_canvas(1, 1, BaseMode.COLOR)
        second = sink.create_canvas(1, 1, BaseMode.COLOR)
        assert second.canvas_id == first.canvas_id + 1
        assert sink.canvases == [first, second]

    @pytest.mark.parametrize("width,height", [(0, 1), (1, 0), (-1, 5)])
    def test_invalid_canvas_size(self, width, height):
        with pytest.raises(CanvasCreationError):
            MemorySink().create_canvas(width, height, BaseMode.COLOR)

    def test_append_to_unknown_canvas(self):
        sink = MemorySink()
        canvas = sink.create_canvas(1, 1, BaseMode.COLOR)
        sink.delete_canvas(canvas)

        with pytest.raises(LayerAppendError):
            sink.append_layer(canvas, "x", LdrPixelFormat.RGB, bytes(3))

    def test_delete_canvas(self):
        sink = MemorySink()
        canvas = sink.create_canvas(1, 1, BaseMode.COLOR)
        sink.delete_canvas(canvas)
        assert sink.canvases == []
        assert sink.get_canvas(canvas.canvas_id) is None

    def test_composite_stacks_in_append_order(self):
        sink = MemorySink()
        canvas = sink.create_canvas(1, 1, BaseMode.COLOR)
        sink.append_layer(canvas, "bottom", LdrPixelFormat.RGBA, bytes([255, 0, 0, 255]))
        sink.append_layer(canvas, "top", LdrPixelFormat.RGBA, bytes([0, 0, 255, 255]))

        assert sink.composite(canvas).getpixel((0, 0)) == (0, 0, 255, 255)

    def test_composite_grayscale(self):
        sink = MemorySink()
        canvas = sink.create_canvas(1, 1, BaseMode.GRAYSCALE)
        sink.append_layer(canvas, "Y", LdrPixelFormat.GRAY, bytes([200]))

        result = sink.composite(canvas)
        assert result.mode == "LA"
        assert result.getpixel((0, 0)) == (200, 255)

    def test_log_callback(self):
        messages = []
        sink = MemorySink(logger=messages.append)
        sink.create_canvas(1, 1, BaseMode.COLOR, name="x")
        assert any("Created" in m for m in messages)


# =============================================================================
# Directory sink
# =============================================================================

class TestDirectorySink:
    """Test the image file backend"""

    def test_writes_layers_in_order(self, temp_dir):
        sink = DirectorySink({'output': {'directory': temp_dir}})
        canvas = sink.create_canvas(1, 1, BaseMode.COLOR, name="shot")

        sink.append_layer(canvas, "AO", LdrPixelFormat.RGB, bytes([1, 2, 3]))
        sink.append_layer(canvas, "", LdrPixelFormat.RGBA, bytes([4, 5, 6, 7]))

        assert canvas.location == os.path.join(temp_dir, "shot")
        assert sorted(os.listdir(canvas.location)) == ["00_AO.png", "01_default.png"]
        with Image.open(canvas.layers[1].path) as img:
            assert img.mode == "RGBA"
            assert img.getpixel((0, 0)) == (4, 5, 6, 7)

    def test_tiff_format(self, temp_dir):
        sink = DirectorySink({'output': {'directory': temp_dir, 'format': 'tiff'}})
        canvas = sink.create_canvas(1, 1, BaseMode.GRAYSCALE, name="mask")
        layer = sink.append_layer(canvas, "A", LdrPixelFormat.GRAY, bytes([9]))

        assert layer.path.endswith("00_A.tif")
        with Image.open(layer.path) as img:
            assert img.format == "TIFF"
            assert img.getpixel((0, 0)) == 9

    def test_unknown_format(self, temp_dir):
        with pytest.raises(ValueError):
            DirectorySink({'output': {'directory': temp_dir, 'format': 'jpeg'}})

    def test_unnamed_canvas_folder(self, temp_dir):
        sink = DirectorySink({'output': {'directory': temp_dir}})
        canvas = sink.create_canvas(1, 1, BaseMode.COLOR)
        assert os.path.basename(canvas.location) == f"canvas_{canvas.canvas_id}"

    def test_default_output_dir(self, isolated_app_data):
        sink = DirectorySink()
        assert sink.output_dir == os.path.join(str(isolated_app_data), "Layers")

    def test_rejected_layer_writes_nothing(self, temp_dir):
        sink = DirectorySink({'output': {'directory': temp_dir}})
        canvas = sink.create_canvas(1, 1, BaseMode.GRAYSCALE, name="gray")

        with pytest.raises(LayerAppendError):
            sink.append_layer(canvas, "rgb", LdrPixelFormat.RGB, bytes(3))
        assert os.listdir(canvas.location) == []

    def test_delete_canvas(self, temp_dir):
        sink = DirectorySink({'output': {'directory': temp_dir}})
        canvas = sink.create_canvas(1, 1, BaseMode.COLOR, name="partial")
        sink.append_layer(canvas, "AO", LdrPixelFormat.RGB, bytes(3))

        sink.delete_canvas(canvas)

        assert not os.path.exists(os.path.join(temp_dir, "partial"))
        assert canvas.layer_count == 0

    def test_capabilities(self):
        caps = DirectorySink().capabilities
        assert caps.persists_output
        assert caps.output_formats == ['png', 'tiff']

    def test_same_name_gets_own_folder(self, temp_dir):
        sink = DirectorySink({'output': {'directory': temp_dir}})
        first = sink.create_canvas(1, 1, BaseMode.COLOR, name="shot")
        for layer_name in ("a", "b", "c"):
            sink.append_layer(first, layer_name, LdrPixelFormat.RGB, bytes(3))

        second = sink.create_canvas(1, 1, BaseMode.COLOR, name="shot")
        sink.append_layer(second, "z", LdrPixelFormat.RGB, bytes(3))

        assert first.location == os.path.join(temp_dir, "shot")
        assert second.location == os.path.join(temp_dir, "shot_2")
        assert sorted(os.listdir(first.location)) == ["00_a.png", "01_b.png", "02_c.png"]
        assert os.listdir(second.location) == ["00_z.png"]

    def test_existing_folder_not_reused(self, temp_dir):
        os.makedirs(os.path.join(temp_dir, "shot"))
        with open(os.path.join(temp_dir, "shot", "00_old.png"), 'wb') as f:
            f.write(b"stale")

        sink = DirectorySink({'output': {'directory': temp_dir}})
        canvas = sink.create_canvas(1, 1, BaseMode.COLOR, name="shot")
        sink.append_layer(canvas, "new", LdrPixelFormat.RGB, bytes(3))
        sink.delete_canvas(canvas)

        assert os.listdir(os.path.join(temp_dir, "shot")) == ["00_old.png"]
        assert not os.path.exists(os.path.join(temp_dir, "shot_2"))

    def test_missing_output_dir_created(self, temp_dir):
        output_dir = os.path.join(temp_dir, "a", "b")
        sink = DirectorySink({'output': {'directory': output_dir}})
        canvas = sink.create_canvas(1, 1, BaseMode.COLOR, name="shot")
        assert canvas.location == os.path.join(output_dir, "shot")

    def test_output_dir_is_a_file(self, temp_dir):
        blocker = os.path.join(temp_dir, "blocker")
        with open(blocker, 'w') as f:
            f.write("x")

        sink = DirectorySink({'output': {'directory': blocker}})
        with pytest.raises(CanvasCreationError):
            sink.create_canvas(1, 1, BaseMode.COLOR, name="shot")
