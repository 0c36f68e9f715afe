"""Tests for multipart request construction and validation

Run with pytest from project root:
    pytest tests/test_request_builder.py -v
"""

import pytest

from errors import InputFileNotFoundError, ValidationError
from managers.endpoint_registry import EndpointRegistry
from managers.request_builder import (
    RequestBuilder,
    format_number,
    get_mime_type,
    optional_params,
)
from models.operation import Category


@pytest.fixture
def builder():
    return RequestBuilder()


@pytest.fixture
def registry():
    return EndpointRegistry()


def build(builder, registry, category, variant, **params):
    return builder.build(registry.resolve(category, variant), params)


class TestMimeTypes:
    """Tests for extension-based content types"""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("x.jpeg", "image/jpeg"),
            ("x.JPG", "image/jpeg"),
            ("x.webp", "image/webp"),
            ("x.png", "image/png"),
            ("x.unknown_ext", "image/png"),
        ],
    )
    def test_get_mime_type(self, filename, expected):
        assert get_mime_type(filename) == expected

    def test_file_part_uses_extension(self, builder, registry, tmp_path):
        """Test binary parts carry the inferred content type and file name"""
        photo = tmp_path / "photo.JPEG"
        photo.write_bytes(b"jpeg-bytes")
        body = build(builder, registry, Category.EDIT, "remove-background", image=str(photo))

        part = body.get("image")
        assert part.is_file
        assert part.content == b"jpeg-bytes"
        assert part.filename == "photo.JPEG"
        assert part.content_type == "image/jpeg"


class TestGenerationBranching:
    """Tests for the per-model generation rules"""

    def test_sd3_text_to_image(self, builder, registry):
        """Test sd3.5 without an image is sent as text-to-image"""
        body = build(builder, registry, Category.GENERATE, "sd3.5-large", prompt="a fox", strength=0.4)
        fields = body.text_fields()

        assert fields["mode"] == "text-to-image"
        assert fields["model"] == "sd3.5-large"
        assert "image" not in body.names()
        assert "strength" not in body.names()

    def test_sd3_image_to_image(self, builder, registry, image_file):
        """Test an image switches sd3.5 to image-to-image with strength"""
        body = build(
            builder, registry, Category.GENERATE, "sd3.5-medium",
            prompt="a fox", image=str(image_file), strength=0.4,
        )
        fields = body.text_fields()

        assert fields["mode"] == "image-to-image"
        assert fields["model"] == "sd3.5-medium"
        assert fields["strength"] == "0.4"
        assert body.get("image").is_file

    def test_sd3_image_without_strength(self, builder, registry, image_file):
        body = build(builder, registry, Category.GENERATE, "sd3.5-large", prompt="a fox", image=str(image_file))
        assert body.text_fields()["mode"] == "image-to-image"
        assert "strength" not in body.names()

    def test_core_has_no_model_field(self, builder, registry):
        """Test core keeps style presets and never sends model/mode"""
        body = build(builder, registry, Category.GENERATE, "core", prompt="a fox", style_preset="anime")
        fields = body.text_fields()

        assert fields["style_preset"] == "anime"
        assert "model" not in fields
        assert "mode" not in fields

    def test_core_ignores_image(self, builder, registry, image_file):
        """Test core drops image-to-image fields it does not support"""
        body = build(
            builder, registry, Category.GENERATE, "core",
            prompt="a fox", image=str(image_file), strength=0.5,
        )
        assert "image" not in body.names()
        assert "strength" not in body.names()

    def test_core_ignores_missing_image(self, builder, registry, tmp_path):
        """Test an unsupported image is dropped even when the file is missing"""
        body = build(
            builder, registry, Category.GENERATE, "core",
            prompt="a fox", image=str(tmp_path / "gone.png"), strength=7,
        )
        assert set(body.names()) == {"prompt", "output_format"}

    def test_fast_upscale_ignores_out_of_range_creativity(self, builder, registry, image_file):
        body = build(builder, registry, Category.UPSCALE, "fast", image=str(image_file), creativity=0.9)
        assert "creativity" not in body.names()

    def test_ultra_image_to_image(self, builder, registry, image_file):
        """Test ultra attaches image and strength but no mode"""
        body = build(
            builder, registry, Category.GENERATE, "ultra",
            prompt="a fox", image=str(image_file), strength=0.7, style_preset="anime",
        )
        assert body.get("image").is_file
        assert body.text_fields()["strength"] == "0.7"
        assert "mode" not in body.names()
        assert "style_preset" not in body.names()

    def test_default_output_format(self, builder, registry):
        """Test the builder fills in png when no format is given"""
        body = build(builder, registry, Category.GENERATE, "core", prompt="a fox")
        assert body.text_fields()["output_format"] == "png"

    def test_explicit_output_format(self, builder, registry):
        body = build(builder, registry, Category.GENERATE, "core", prompt="a fox", output_format="webp")
        assert body.text_fields()["output_format"] == "webp"


class TestOptionalFields:
    """Tests that only supplied optional fields reach the wire"""

    def test_exactly_supplied_fields(self, builder, registry, image_file):
        """Test an inpaint body holds the supplied fields and nothing else"""
        body = build(
            builder, registry, Category.EDIT, "inpaint",
            image=str(image_file), prompt="a hat", negative_prompt="blurry", seed=42,
        )
        assert set(body.names()) == {"image", "prompt", "negative_prompt", "seed", "output_format"}
        assert body.text_fields()["seed"] == "42"

    def test_none_and_empty_are_unset(self, builder, registry, image_file):
        """Test None and empty strings are omitted rather than sent blank"""
        body = build(
            builder, registry, Category.EDIT, "inpaint",
            image=str(image_file), prompt="a hat", negative_prompt="", seed=None, mask=None,
        )
        assert set(body.names()) == {"image", "prompt", "output_format"}

    def test_outpaint_numbers(self, builder, registry, image_file):
        """Test numeric fields are serialized as decimal strings"""
        body = build(
            builder, registry, Category.EDIT, "outpaint",
            image=str(image_file), left=200, bottom=0, creativity=1.0,
        )
        fields = body.text_fields()
        assert fields["left"] == "200"
        assert fields["bottom"] == "0"
        assert fields["creativity"] == "1"
        assert "right" not in fields
        assert "top" not in fields

    def test_replace_background_fields(self, builder, registry, image_file):
        body = build(
            builder, registry, Category.EDIT, "replace-background-and-relight",
            image=str(image_file), background_prompt="a beach",
            light_source_direction="above", light_source_strength=0.3,
        )
        fields = body.text_fields()
        assert fields["background_prompt"] == "a beach"
        assert fields["light_source_direction"] == "above"
        assert fields["light_source_strength"] == "0.3"
        assert "foreground_prompt" not in fields

    def test_fast_upscale_drops_guidance(self, builder, registry, image_file):
        """Test fast upscale sends only the image and format"""
        body = build(
            builder, registry, Category.UPSCALE, "fast",
            image=str(image_file), prompt="sharper", seed=5, creativity=0.2,
        )
        assert set(body.names()) == {"image", "output_format"}

    def test_creative_upscale_keeps_guidance(self, builder, registry, image_file):
        body = build(
            builder, registry, Category.UPSCALE, "creative",
            image=str(image_file), prompt="sharper", seed=5, creativity=0.2,
        )
        assert set(body.names()) == {"image", "output_format", "prompt", "seed", "creativity"}

    def test_style_transfer_two_images(self, builder, registry, image_file, tmp_path):
        style = tmp_path / "style.webp"
        style.write_bytes(b"webp")
        body = build(
            builder, registry, Category.CONTROL, "style-transfer",
            init_image=str(image_file), style_image=str(style),
        )
        assert body.get("init_image").content_type == "image/png"
        assert body.get("style_image").content_type == "image/webp"
        assert "prompt" not in body.names()

    def test_control_style_fidelity(self, builder, registry, image_file):
        body = build(
            builder, registry, Category.CONTROL, "style",
            image=str(image_file), prompt="a castle", fidelity=0.5,
        )
        assert body.text_fields()["fidelity"] == "0.5"


class TestThreeD:
    """Tests for 3D request bodies"""

    def test_stable_fast_3d_fields(self, builder, registry, image_file):
        body = build(
            builder, registry, Category.THREE_D, "stable-fast-3d",
            image=str(image_file), texture_resolution=1024, foreground_ratio=0.85,
            remesh="quad", guidance_scale=3,
        )
        fields = body.text_fields()
        assert fields == {"texture_resolution": "1024", "foreground_ratio": "0.85", "remesh": "quad"}

    def test_spar3d_fields(self, builder, registry, image_file):
        body = build(
            builder, registry, Category.THREE_D, "spar3d",
            image=str(image_file), foreground_ratio=0.85, remesh="quad", guidance_scale=3,
        )
        assert body.text_fields() == {"guidance_scale": "3"}

    def test_no_output_format(self, builder, registry, image_file):
        """Test 3D requests never carry an output format"""
        body = build(builder, registry, Category.THREE_D, "stable-fast-3d", image=str(image_file))
        assert body.names() == ["image"]


class TestValidation:
    """Tests for rejection before any request is built"""

    def test_missing_required_text(self, builder, registry):
        with pytest.raises(ValidationError, match="prompt is required"):
            build(builder, registry, Category.GENERATE, "core")

    def test_blank_required_text(self, builder, registry):
        with pytest.raises(ValidationError, match="prompt is required"):
            build(builder, registry, Category.GENERATE, "core", prompt="   ")

    def test_missing_required_file(self, builder, registry):
        with pytest.raises(ValidationError, match="image is required"):
            build(builder, registry, Category.EDIT, "erase")

    def test_missing_file_carries_absolute_path(self, builder, registry, tmp_path, monkeypatch):
        """Test a missing file reports the resolved absolute path"""
        monkeypatch.chdir(tmp_path)
        with pytest.raises(InputFileNotFoundError) as exc_info:
            build(builder, registry, Category.EDIT, "erase", image="missing.png")
        assert exc_info.value.path == str((tmp_path / "missing.png").resolve())

    def test_missing_optional_file(self, builder, registry, image_file, tmp_path):
        with pytest.raises(InputFileNotFoundError):
            build(builder, registry, Category.EDIT, "erase", image=str(image_file), mask=str(tmp_path / "nope.png"))

    def test_strength_out_of_range(self, builder, registry, image_file):
        with pytest.raises(ValidationError, match="strength"):
            build(builder, registry, Category.GENERATE, "ultra", prompt="x", image=str(image_file), strength=1.5)

    def test_upscale_creativity_ceiling(self, builder, registry, image_file):
        """Test upscale creativity above 0.35 is rejected"""
        with pytest.raises(ValidationError, match="creativity"):
            build(builder, registry, Category.UPSCALE, "conservative", image=str(image_file), creativity=0.5)

    def test_outpaint_creativity_allows_one(self, builder, registry, image_file):
        body = build(builder, registry, Category.EDIT, "outpaint", image=str(image_file), creativity=0.5)
        assert body.text_fields()["creativity"] == "0.5"

    @pytest.mark.parametrize("seed", [-1, 4294967295, 1.5, True, "7"])
    def test_invalid_seed(self, builder, registry, seed):
        with pytest.raises(ValidationError):
            build(builder, registry, Category.GENERATE, "core", prompt="x", seed=seed)

    def test_invalid_choice(self, builder, registry):
        with pytest.raises(ValidationError, match="aspect_ratio"):
            build(builder, registry, Category.GENERATE, "core", prompt="x", aspect_ratio="7:3")

    def test_remove_background_rejects_jpeg(self, builder, registry, image_file):
        with pytest.raises(ValidationError, match="output_format"):
            build(builder, registry, Category.EDIT, "remove-background", image=str(image_file), output_format="jpeg")

    def test_texture_resolution_choices(self, builder, registry, image_file):
        with pytest.raises(ValidationError):
            build(builder, registry, Category.THREE_D, "stable-fast-3d", image=str(image_file), texture_resolution=768)

    def test_unknown_parameter(self, builder, registry):
        with pytest.raises(ValidationError, match="Unexpected parameter"):
            build(builder, registry, Category.GENERATE, "core", prompt="x", steps=30)


class TestEncoding:
    """Tests for wire encoding helpers"""

    def test_to_requests_files_keeps_order(self, builder, registry, image_file):
        """Test text parts are encoded as filename-less parts in order"""
        body = build(builder, registry, Category.EDIT, "inpaint", image=str(image_file), prompt="a hat")
        encoded = body.to_requests_files()

        assert [name for name, _ in encoded] == ["image", "prompt", "output_format"]
        assert encoded[0][1][0] == "input.png"
        assert encoded[0][1][2] == "image/png"
        assert encoded[1][1] == (None, "a hat")

    def test_format_number(self):
        assert format_number(0.5) == "0.5"
        assert format_number(1.0) == "1"
        assert format_number(2048) == "2048"

    def test_optional_params(self):
        assert optional_params(a=1, b=None, c="", d="x") == {"a": 1, "d": "x"}
