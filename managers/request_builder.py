"""Multipart request construction and input validation"""

import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping

from errors import InputFileNotFoundError, ValidationError
from models.multipart import MultipartBody
from models.operation import Category, FieldKind, FieldSpec, OperationDescriptor

logger = logging.getLogger("MCP_Server")

DEFAULT_OUTPUT_FORMAT = "png"
DEFAULT_MIME_TYPE = "image/png"

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
}

OUTPUT_FORMATS = ("png", "jpeg", "webp")
ASPECT_RATIOS = ("1:1", "16:9", "21:9", "2:3", "3:2", "4:5", "5:4", "9:16", "9:21")
STYLE_PRESETS = (
    "3d-model", "analog-film", "anime", "cinematic", "comic-book",
    "digital-art", "enhance", "fantasy-art", "isometric", "line-art",
    "low-poly", "modeling-compound", "neon-punk", "origami",
    "photographic", "pixel-art", "tile-texture",
)
LIGHT_SOURCE_DIRECTIONS = ("above", "below", "left", "right")
TEXTURE_RESOLUTIONS = (512, 1024, 2048)
REMESH_ALGORITHMS = ("none", "triangle", "quad")
MAX_SEED = 4294967294

SD3_MODELS = frozenset({"sd3.5-large", "sd3.5-large-turbo", "sd3.5-medium"})
IMAGE_TO_IMAGE_MODELS = SD3_MODELS | {"ultra"}
STYLE_PRESET_MODELS = SD3_MODELS | {"core"}
GUIDED_UPSCALE_MODES = frozenset({"conservative", "creative"})

ANY_VARIANT = "*"


def _text(name, required=False, **kwargs):
    return FieldSpec(name=name, kind=FieldKind.TEXT, required=required, **kwargs)


def _file(name, required=False, **kwargs):
    return FieldSpec(name=name, kind=FieldKind.FILE, required=required, **kwargs)


def _choice(name, choices, **kwargs):
    return FieldSpec(name=name, kind=FieldKind.CHOICE, choices=tuple(choices), **kwargs)


def _number(name, minimum, maximum, **kwargs):
    return FieldSpec(name=name, kind=FieldKind.NUMBER, minimum=minimum, maximum=maximum, **kwargs)


def _integer(name, minimum=None, maximum=None, **kwargs):
    return FieldSpec(name=name, kind=FieldKind.INTEGER, minimum=minimum, maximum=maximum, **kwargs)


SEED = _integer("seed", 0, MAX_SEED)
NEGATIVE_PROMPT = _text("negative_prompt")
OUTPUT_FORMAT = _choice("output_format", OUTPUT_FORMATS)


def _control_fields(knob: str) -> List[FieldSpec]:
    return [
        _file("image", required=True),
        _text("prompt", required=True),
        NEGATIVE_PROMPT,
        SEED,
        _number(knob, 0, 1),
        OUTPUT_FORMAT,
    ]


# Ordered field lists per category and variant. ANY_VARIANT covers every
# variant of a category that has no entry of its own.
FIELD_TABLES: Dict[Category, Dict[str, List[FieldSpec]]] = {
    Category.GENERATE: {
        ANY_VARIANT: [
            _text("prompt", required=True),
            NEGATIVE_PROMPT,
            SEED,
            _choice("aspect_ratio", ASPECT_RATIOS),
            OUTPUT_FORMAT,
            _file("image", variants=IMAGE_TO_IMAGE_MODELS),
            _number("strength", 0, 1, variants=IMAGE_TO_IMAGE_MODELS, requires="image"),
            _choice("style_preset", STYLE_PRESETS, variants=STYLE_PRESET_MODELS),
        ],
    },
    Category.EDIT: {
        "erase": [
            _file("image", required=True),
            _file("mask"),
            OUTPUT_FORMAT,
        ],
        "inpaint": [
            _file("image", required=True),
            _text("prompt", required=True),
            _file("mask"),
            NEGATIVE_PROMPT,
            SEED,
            OUTPUT_FORMAT,
        ],
        "outpaint": [
            _file("image", required=True),
            _text("prompt"),
            _integer("left", 0, 2000),
            _integer("right", 0, 2000),
            _integer("top", 0, 2000),
            _integer("bottom", 0, 2000),
            _number("creativity", 0, 1),
            OUTPUT_FORMAT,
        ],
        "search-and-replace": [
            _file("image", required=True),
            _text("prompt", required=True),
            _text("search_prompt", required=True),
            NEGATIVE_PROMPT,
            SEED,
            OUTPUT_FORMAT,
        ],
        "search-and-recolor": [
            _file("image", required=True),
            _text("prompt", required=True),
            _text("select_prompt", required=True),
            NEGATIVE_PROMPT,
            SEED,
            OUTPUT_FORMAT,
        ],
        "remove-background": [
            _file("image", required=True),
            _choice("output_format", ("png", "webp")),
        ],
        "replace-background-and-relight": [
            _file("image", required=True),
            _text("background_prompt", required=True),
            _text("foreground_prompt"),
            NEGATIVE_PROMPT,
            _choice("light_source_direction", LIGHT_SOURCE_DIRECTIONS),
            _number("light_source_strength", 0, 1),
            OUTPUT_FORMAT,
        ],
    },
    Category.UPSCALE: {
        ANY_VARIANT: [
            _file("image", required=True),
            OUTPUT_FORMAT,
            _text("prompt", variants=GUIDED_UPSCALE_MODES),
            _text("negative_prompt", variants=GUIDED_UPSCALE_MODES),
            _integer("seed", 0, MAX_SEED, variants=GUIDED_UPSCALE_MODES),
            _number("creativity", 0, 0.35, variants=GUIDED_UPSCALE_MODES),
        ],
    },
    Category.CONTROL: {
        "sketch": _control_fields("control_strength"),
        "structure": _control_fields("control_strength"),
        "style": _control_fields("fidelity"),
        "style-transfer": [
            _file("init_image", required=True),
            _file("style_image", required=True),
            _text("prompt"),
            NEGATIVE_PROMPT,
            SEED,
            OUTPUT_FORMAT,
        ],
    },
    Category.THREE_D: {
        ANY_VARIANT: [
            _file("image", required=True),
            FieldSpec(name="texture_resolution", kind=FieldKind.CHOICE, choices=TEXTURE_RESOLUTIONS),
            _number("foreground_ratio", 0.1, 1.0, variants=frozenset({"stable-fast-3d"})),
            _choice("remesh", REMESH_ALGORITHMS, variants=frozenset({"stable-fast-3d"})),
            _number("guidance_scale", 1, 10, variants=frozenset({"spar3d"})),
        ],
    },
}


def fields_for(descriptor: OperationDescriptor) -> List[FieldSpec]:
    table = FIELD_TABLES[descriptor.category]
    if descriptor.variant in table:
        return table[descriptor.variant]
    return table[ANY_VARIANT]


def get_mime_type(file_path) -> str:
    """Content type from the file extension only, defaulting to PNG"""
    return MIME_TYPES.get(Path(file_path).suffix.lower(), DEFAULT_MIME_TYPE)


def format_number(value) -> str:
    """Decimal string form; integral floats drop the trailing ``.0``"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_present(value: Any) -> bool:
    # Empty strings count as unset
    return value is not None and value != ""


class RequestBuilder:
    """Validates a parameter set and encodes it as a multipart body.

    Parameter sets are plain dicts keyed by wire field name. ``None`` means
    unset; unset optional fields are left off the request entirely.
    """

    def build(self, descriptor: OperationDescriptor, params: Mapping[str, Any]) -> MultipartBody:
        """Build the request body for ``descriptor``.

        Raises:
            ValidationError: For missing, unknown or out-of-range parameters
            InputFileNotFoundError: If a file parameter points to a missing file
        """
        fields = fields_for(descriptor)
        provided = {key: value for key, value in params.items() if _is_present(value)}
        self.validate(descriptor, fields, provided)

        body = MultipartBody()
        for spec in fields:
            if spec.name not in provided:
                if spec.name == "output_format":
                    body.add_text("output_format", DEFAULT_OUTPUT_FORMAT)
                continue
            if not self._applies(spec, descriptor, provided):
                logger.warning("Ignoring '%s' for %s", spec.name, descriptor.name)
                continue
            self._append(body, spec, provided[spec.name])

        if descriptor.category is Category.GENERATE and descriptor.variant in SD3_MODELS:
            body.add_text("model", descriptor.variant)
            body.add_text("mode", "image-to-image" if "image" in body.names() else "text-to-image")

        logger.debug("Built %s request with parts %s", descriptor.name, body.names())
        return body

    def validate(self, descriptor: OperationDescriptor, fields: List[FieldSpec], provided: Dict[str, Any]):
        known = {spec.name for spec in fields}
        unknown = sorted(set(provided) - known)
        if unknown:
            raise ValidationError(
                f"Unexpected parameter(s) for {descriptor.name}: {', '.join(unknown)}"
            )

        for spec in fields:
            if spec.name not in provided:
                if spec.required:
                    raise ValidationError(f"{spec.name} is required")
                continue
            if not self._supports(spec, descriptor):
                # Dropped in build(), so its value is never read or sent
                continue
            self._check_value(spec, provided[spec.name])

    def _check_value(self, spec: FieldSpec, value: Any):
        if spec.kind in (FieldKind.TEXT, FieldKind.FILE):
            if not isinstance(value, str):
                raise ValidationError(f"{spec.name} must be a string")
            if spec.required and not value.strip():
                raise ValidationError(f"{spec.name} is required")
            if spec.kind is FieldKind.FILE:
                resolved = Path(value).expanduser().resolve()
                if not resolved.is_file():
                    raise InputFileNotFoundError(str(resolved))
            return

        if spec.kind is FieldKind.CHOICE:
            if value not in spec.choices:
                allowed = ", ".join(str(choice) for choice in spec.choices)
                raise ValidationError(f"{spec.name} must be one of: {allowed} (got {value!r})")
            return

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"{spec.name} must be a number")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(f"{spec.name} must be a finite number")
        if spec.kind is FieldKind.INTEGER and not float(value).is_integer():
            raise ValidationError(f"{spec.name} must be an integer")
        if spec.minimum is not None and value < spec.minimum:
            raise ValidationError(f"{spec.name} must be >= {format_number(spec.minimum)} (got {value})")
        if spec.maximum is not None and value > spec.maximum:
            raise ValidationError(f"{spec.name} must be <= {format_number(spec.maximum)} (got {value})")

    @staticmethod
    def _supports(spec: FieldSpec, descriptor: OperationDescriptor) -> bool:
        return spec.variants is None or descriptor.variant in spec.variants

    def _applies(self, spec: FieldSpec, descriptor: OperationDescriptor, provided: Dict[str, Any]) -> bool:
        if not self._supports(spec, descriptor):
            return False
        if spec.requires is not None:
            return spec.requires in provided and self._applies(
                self._spec_named(descriptor, spec.requires), descriptor, provided
            )
        return True

    def _spec_named(self, descriptor: OperationDescriptor, name: str) -> FieldSpec:
        for spec in fields_for(descriptor):
            if spec.name == name:
                return spec
        raise KeyError(name)

    def _append(self, body: MultipartBody, spec: FieldSpec, value: Any):
        if spec.kind is FieldKind.FILE:
            body.add_file(spec.name, *self.load_file(value))
        elif spec.kind is FieldKind.INTEGER:
            body.add_text(spec.name, str(int(value)))
        else:
            body.add_text(spec.name, format_number(value))

    def load_file(self, file_path: str):
        """Read a file fully into memory.

        Returns:
            Tuple of (content, filename, content_type)
        """
        resolved = Path(file_path).expanduser().resolve()
        if not resolved.is_file():
            raise InputFileNotFoundError(str(resolved))
        return resolved.read_bytes(), resolved.name, get_mime_type(resolved)


def optional_params(**kwargs) -> Dict[str, Any]:
    """Drop unset values so only supplied fields reach the builder"""
    return {key: value for key, value in kwargs.items() if _is_present(value)}
