"""Descriptor output: one encoder per format, all reading the same descriptor."""

from __future__ import annotations

import json
import logging
import tomllib
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List

import tomli_w
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from . import AtlasDescriptor, OutputEncoding
from .binary_format import decode_binary, encode_binary
from .descriptor import from_payload, to_payload
from .errors import EncodingError, NoTemplateFile
from ..utils import file_tools, ron

if TYPE_CHECKING:
    from ..config import BuildRequest

logger = logging.getLogger(__name__)

FILE_SUFFIXES = {
    OutputEncoding.JSON: ".json",
    OutputEncoding.RON: ".ron",
    OutputEncoding.TOML: ".toml",
    OutputEncoding.BINARY: ".bin",
}


@dataclass(frozen=True)
class Artifact:
    """Encoded output waiting to be written."""

    path: Path
    data: bytes


def _text_artifact(request: "BuildRequest", encoding: OutputEncoding, text: str) -> Artifact:
    path = file_tools.output_file(request.output_directory, request.name, FILE_SUFFIXES[encoding])
    return Artifact(path, file_tools.normalize_separators(text).encode("utf-8"))


def encode_json(descriptor: AtlasDescriptor, request: "BuildRequest") -> List[Artifact]:
    text = json.dumps(to_payload(descriptor), indent=2, ensure_ascii=False)
    return [_text_artifact(request, OutputEncoding.JSON, text + "\n")]


def encode_ron(descriptor: AtlasDescriptor, request: "BuildRequest") -> List[Artifact]:
    payload = to_payload(descriptor)
    frames = {}
    for name, frame in payload["frames"].items():
        fields = ron.Struct(frame)
        if "nine_patch" in fields:
            fields["nine_patch"] = ron.Some(ron.Struct(fields["nine_patch"]))
        frames[name] = fields
    document = ron.Struct(sheet_path=payload["sheet_path"], frames=frames)
    return [_text_artifact(request, OutputEncoding.RON, ron.dumps(document) + "\n")]


def encode_toml(descriptor: AtlasDescriptor, request: "BuildRequest") -> List[Artifact]:
    try:
        text = tomli_w.dumps(to_payload(descriptor))
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Could not encode TOML descriptor: {exc}") from exc
    return [_text_artifact(request, OutputEncoding.TOML, text)]


def encode_binary_file(descriptor: AtlasDescriptor, request: "BuildRequest") -> List[Artifact]:
    path = file_tools.output_file(request.output_directory, request.name, FILE_SUFFIXES[OutputEncoding.BINARY])
    return [Artifact(path, encode_binary(descriptor, request.nine_patch_enabled))]


def template_context(descriptor: AtlasDescriptor, request: "BuildRequest") -> Dict[str, Any]:
    """Fields available to templates: ``atlas`` and ``config``."""

    return {"atlas": to_payload(descriptor), "config": request.template_fields()}


def template_output_paths(request: "BuildRequest") -> List[Path]:
    """One output path per configured template, in configuration order.

    A single template writes ``<name><suffix>``; several write
    ``<name>_<stem><suffix>``, with the template's position appended when two
    templates share a file name.
    """

    templates = request.templates
    if len(templates) == 1:
        return [file_tools.output_file(request.output_directory, request.name, templates[0].suffix)]

    shared = Counter(template.name for template in templates)
    paths = []
    for idx, template in enumerate(templates):
        stem = template.stem if shared[template.name] == 1 else f"{template.stem}_{idx}"
        paths.append(file_tools.output_file(request.output_directory, f"{request.name}_{stem}", template.suffix))
    duplicates = sorted(str(path) for path, count in Counter(paths).items() if count > 1)
    if duplicates:
        raise EncodingError(f"Templates would overwrite each other: {', '.join(duplicates)}")
    return paths


def encode_template(descriptor: AtlasDescriptor, request: "BuildRequest") -> List[Artifact]:
    templates = request.templates
    if not templates:
        raise NoTemplateFile()

    context = template_context(descriptor, request)
    artifacts = []
    for template, output_path in zip(templates, template_output_paths(request)):
        if not template.is_file():
            raise EncodingError(f"Template not found: {template}")
        environment = Environment(
            loader=FileSystemLoader(str(template.parent)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        try:
            rendered = environment.get_template(template.name).render(**context)
        except TemplateError as exc:
            raise EncodingError(f"Failed to render template {template}: {exc}") from exc
        artifacts.append(Artifact(output_path, file_tools.normalize_separators(rendered).encode("utf-8")))
    return artifacts


ENCODERS: Dict[OutputEncoding, Callable[[AtlasDescriptor, "BuildRequest"], List[Artifact]]] = {
    OutputEncoding.JSON: encode_json,
    OutputEncoding.RON: encode_ron,
    OutputEncoding.TOML: encode_toml,
    OutputEncoding.BINARY: encode_binary_file,
    OutputEncoding.TEMPLATE: encode_template,
}


def encode(kind: OutputEncoding, descriptor: AtlasDescriptor, request: "BuildRequest") -> List[Artifact]:
    """Encode the descriptor in one format without touching the filesystem."""

    return ENCODERS[OutputEncoding(kind)](descriptor, request)


def requested_encodings(request: "BuildRequest") -> List[OutputEncoding]:
    """Encodings to produce, in a fixed order; templates are implied by template paths."""

    kinds = set(request.output_encodings)
    if request.templates:
        kinds.add(OutputEncoding.TEMPLATE)
    return [kind for kind in OutputEncoding if kind in kinds]


def write_outputs(descriptor: AtlasDescriptor, request: "BuildRequest") -> List[Path]:
    """Encode every requested format and write the resulting files."""

    kinds = requested_encodings(request)
    if request.workers > 1 and len(kinds) > 1:
        with ThreadPoolExecutor(max_workers=request.workers) as pool:
            batches = list(pool.map(lambda kind: encode(kind, descriptor, request), kinds))
    else:
        batches = [encode(kind, descriptor, request) for kind in kinds]

    written = []
    file_tools.ensure_directory(request.output_directory)
    for artifact in (artifact for batch in batches for artifact in batch):
        artifact.path.write_bytes(artifact.data)
        logger.info("Wrote descriptor to %s", artifact.path)
        written.append(artifact.path)
    return written


def read_descriptor(path: Path, nine_patch: bool = False) -> AtlasDescriptor:
    """Load a descriptor written by any of the structured or binary encoders."""

    suffix = path.suffix.lower()
    if suffix == ".bin":
        return decode_binary(path.read_bytes(), nine_patch)

    text = path.read_text(encoding="utf-8")
    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix == ".toml":
            data = tomllib.loads(text)
        elif suffix == ".ron":
            data = ron.loads(text)
        else:
            raise EncodingError(f"Unknown descriptor format: {path.name}")
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, ron.RonError) as exc:
        raise EncodingError(f"Could not parse descriptor {path}: {exc}") from exc
    return from_payload(data)
