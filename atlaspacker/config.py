"""Build request model and configuration-file loading."""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .core import ImageFormat, MultiFrameMode, OutputEncoding
from .core.errors import UnsupportedFormat, ValidationError
from .utils import file_tools, ron, validators

logger = logging.getLogger(__name__)

DEFAULT_MAX_CANVAS_SIZE = 1024

_ENCODING_ALIASES = {"bin": "binary"}
_IMAGE_FORMAT_ALIASES = {"jpeg": "jpg"}
_MODE_ALIASES = {"separate": "separate_frames", "sheet": "single_sheet"}


class BuildRequest(BaseModel):
    """Fully resolved settings for one atlas build."""

    name: str
    output_directory: Path
    source_folders: list[Path] = Field(default_factory=list)
    max_canvas_size: int = Field(DEFAULT_MAX_CANVAS_SIZE, ge=1)
    preserve_extension_in_name: bool = True
    nine_patch_enabled: bool = False
    multi_frame_enabled: bool = False
    multi_frame_mode: MultiFrameMode = MultiFrameMode.SEPARATE_FRAMES
    output_image_format: ImageFormat = ImageFormat.PNG
    output_encodings: set[OutputEncoding] = Field(default_factory=lambda: {OutputEncoding.JSON})
    template_paths: Optional[Union[Path, list[Path]]] = None
    workers: int = Field(1, ge=1, le=64)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return validators.validate_name(value)

    @field_validator("max_canvas_size")
    @classmethod
    def _check_canvas_size(cls, value: int) -> int:
        return validators.validate_canvas_size(value)

    @field_validator("output_encodings", mode="before")
    @classmethod
    def _parse_encodings(cls, value):
        if value is None:
            return set()
        if isinstance(value, (str, OutputEncoding)):
            value = [value]
        return {_normalize_choice(item, _ENCODING_ALIASES) for item in value}

    @field_validator("output_image_format", mode="before")
    @classmethod
    def _parse_image_format(cls, value):
        return _normalize_choice(value, _IMAGE_FORMAT_ALIASES)

    @field_validator("multi_frame_mode", mode="before")
    @classmethod
    def _parse_mode(cls, value):
        return _normalize_choice(value, _MODE_ALIASES)

    @field_validator("template_paths", mode="before")
    @classmethod
    def _normalize_templates(cls, value):
        if value in (None, "", []):
            return None
        return value

    @property
    def templates(self) -> list[Path]:
        """Configured template paths, always as a list."""

        if self.template_paths is None:
            return []
        if isinstance(self.template_paths, list):
            return list(self.template_paths)
        return [self.template_paths]

    def template_fields(self) -> dict[str, Any]:
        """Request fields exposed to output templates."""

        return {
            "name": self.name,
            "output_directory": file_tools.posix_path(self.output_directory),
            "source_folders": [file_tools.posix_path(folder) for folder in self.source_folders],
            "max_canvas_size": self.max_canvas_size,
            "preserve_extension_in_name": self.preserve_extension_in_name,
            "nine_patch_enabled": self.nine_patch_enabled,
            "multi_frame_enabled": self.multi_frame_enabled,
            "multi_frame_mode": self.multi_frame_mode.value,
            "output_image_format": self.output_image_format.value,
            "output_encodings": sorted(encoding.value for encoding in self.output_encodings),
            "template_paths": [file_tools.posix_path(path) for path in self.templates],
        }


def _normalize_choice(value, aliases: dict[str, str]):
    if isinstance(value, str):
        lowered = value.strip().lower()
        return aliases.get(lowered, lowered)
    return value


def load_request(path: Path) -> BuildRequest:
    """Read a configuration file; its extension selects the format."""

    suffix = path.suffix.lower()
    if suffix not in validators.CONFIG_EXTENSIONS:
        raise UnsupportedFormat(path)

    text = path.read_text(encoding="utf-8")
    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix == ".toml":
            data = tomllib.loads(text)
        else:
            data = ron.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, ron.RonError) as exc:
        raise ValidationError(f"Could not parse configuration {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValidationError(f"Configuration {path} must contain an object")

    try:
        request = BuildRequest.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid configuration {path}: {exc}") from exc

    resolved = resolve_relative_paths(request, path.parent)
    logger.debug("Loaded configuration %s", path)
    return resolved


def resolve_relative_paths(request: BuildRequest, base: Path) -> BuildRequest:
    """Anchor relative folders and templates to the configuration file's directory."""

    def anchor(value: Path) -> Path:
        return value if value.is_absolute() else base / value

    templates = request.template_paths
    if isinstance(templates, list):
        templates = [anchor(template) for template in templates]
    elif templates is not None:
        templates = anchor(templates)

    return request.model_copy(
        update={
            "output_directory": anchor(request.output_directory),
            "source_folders": [anchor(folder) for folder in request.source_folders],
            "template_paths": templates,
        }
    )
