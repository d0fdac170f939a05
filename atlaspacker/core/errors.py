"""Domain-specific exceptions for the atlas packer."""

from pathlib import Path


class InvalidImageError(ValueError):
    """Raised when a source image is missing or cannot be decoded."""

    def __init__(self, path: Path, reason: str | None = None):
        message = f"Invalid image file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path


class ValidationError(ValueError):
    """Raised when build settings fail validation."""


class UnsupportedFormat(ValidationError):
    """Raised when a configuration file has an unknown extension."""

    def __init__(self, path: Path):
        super().__init__(f"Unsupported format: {path.name}. Supported formats: .json, .ron, .toml")


class ProcessingError(RuntimeError):
    """Raised when the build fails and cannot continue."""


class PackingFailed(ProcessingError):
    """Raised when no permitted canvas size fits every rectangle."""

    def __init__(self, item_count: int, max_size: int):
        super().__init__(f"Failed to pack {item_count} image(s) into a canvas of at most {max_size}x{max_size}")
        self.item_count = item_count
        self.max_size = max_size


class CanvasWriteError(ProcessingError):
    """Raised when the composited canvas cannot be saved."""


class NoTemplateFile(ProcessingError):
    """Raised when template output is requested without a template path."""

    def __init__(self):
        super().__init__("No template path is specified.")


class EncodingError(ProcessingError):
    """Raised when a descriptor cannot be serialized or read back."""
