from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from atlaspacker.config import BuildRequest, load_request
from atlaspacker.core import ImageFormat, MultiFrameMode, OutputEncoding
from atlaspacker.core.errors import UnsupportedFormat, ValidationError


def test_defaults():
    request = BuildRequest(name="atlas", output_directory=Path("out"))
    assert request.max_canvas_size == 1024
    assert request.preserve_extension_in_name is True
    assert request.nine_patch_enabled is False
    assert request.multi_frame_mode is MultiFrameMode.SEPARATE_FRAMES
    assert request.output_image_format is ImageFormat.PNG
    assert request.output_encodings == {OutputEncoding.JSON}
    assert request.templates == []


def test_parses_aliases_and_single_template():
    request = BuildRequest.model_validate(
        {
            "name": "ui",
            "output_directory": "out",
            "output_encodings": ["JSON", "bin"],
            "output_image_format": "jpeg",
            "multi_frame_mode": "sheet",
            "template_paths": "atlas.lua",
        }
    )
    assert request.output_encodings == {OutputEncoding.JSON, OutputEncoding.BINARY}
    assert request.output_image_format is ImageFormat.JPEG
    assert request.multi_frame_mode is MultiFrameMode.SINGLE_SHEET
    assert request.templates == [Path("atlas.lua")]


def test_multiple_templates_keep_order():
    request = BuildRequest(name="ui", output_directory=Path("out"), template_paths=["b.txt", "a.txt"])
    assert request.templates == [Path("b.txt"), Path("a.txt")]


@pytest.mark.parametrize("size", [0, 100, 1000])
def test_rejects_non_power_of_two_canvas(size):
    with pytest.raises(PydanticValidationError):
        BuildRequest(name="atlas", output_directory=Path("out"), max_canvas_size=size)


def test_rejects_name_with_separator():
    with pytest.raises(PydanticValidationError):
        BuildRequest(name="a/b", output_directory=Path("out"))


def test_template_fields_are_plain_values():
    request = BuildRequest(
        name="atlas",
        output_directory=Path("out"),
        source_folders=[Path("art/ui")],
        output_encodings={"toml", "json"},
    )
    fields = request.template_fields()
    assert fields["output_directory"] == "out"
    assert fields["source_folders"] == ["art/ui"]
    assert fields["output_encodings"] == ["json", "toml"]
    assert fields["multi_frame_mode"] == "separate_frames"


def test_load_json_config_resolves_relative_paths(tmp_path):
    config = tmp_path / "project" / "atlas.json"
    config.parent.mkdir()
    config.write_text(
        '{"name": "ui", "output_directory": "build", "source_folders": ["art"], "max_canvas_size": 256}',
        encoding="utf-8",
    )

    request = load_request(config)

    assert request.output_directory == config.parent / "build"
    assert request.source_folders == [config.parent / "art"]
    assert request.max_canvas_size == 256


def test_load_toml_config(tmp_path):
    config = tmp_path / "atlas.toml"
    config.write_text(
        'name = "ui"\noutput_directory = "build"\nsource_folders = ["art"]\n'
        'output_encodings = ["binary"]\nnine_patch_enabled = true\ntemplate_paths = ["a.txt", "b.txt"]\n',
        encoding="utf-8",
    )

    request = load_request(config)

    assert request.output_encodings == {OutputEncoding.BINARY}
    assert request.nine_patch_enabled is True
    assert request.templates == [tmp_path / "a.txt", tmp_path / "b.txt"]


def test_load_ron_config(tmp_path):
    config = tmp_path / "atlas.ron"
    config.write_text(
        'Config(name: "ui", output_directory: "build", source_folders: ["art"], output_image_format: "qoi")',
        encoding="utf-8",
    )

    request = load_request(config)

    assert request.name == "ui"
    assert request.output_image_format is ImageFormat.QOI


def test_load_rejects_unknown_extension(tmp_path):
    config = tmp_path / "atlas.yaml"
    config.write_text("name: ui", encoding="utf-8")
    with pytest.raises(UnsupportedFormat):
        load_request(config)


def test_load_reports_invalid_values(tmp_path):
    config = tmp_path / "atlas.json"
    config.write_text('{"name": "ui", "output_directory": "out", "max_canvas_size": 300}', encoding="utf-8")
    with pytest.raises(ValidationError):
        load_request(config)


def test_load_reports_parse_errors(tmp_path):
    config = tmp_path / "atlas.json"
    config.write_text("{broken", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_request(config)
