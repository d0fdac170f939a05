import json

from atlaspacker import cli
from tests.helpers import write_png


def test_build_parser_creates_pack_arguments():
    parser = cli.build_parser()
    args = parser.parse_args(["pack", "-i", "art", "more", "-o", "out", "-t", "binary", "-n", "ui", "--max-size", "256"])
    assert [p.name for p in args.input] == ["art", "more"]
    assert args.output.name == "out"
    assert args.type == "binary"
    assert args.name == "ui"
    assert args.max_size == 256
    assert args.template_path is None


def test_build_parser_creates_config_arguments():
    args = cli.build_parser().parse_args(["config", "--input", "atlas.toml"])
    assert args.command == "config"
    assert args.input.name == "atlas.toml"


def test_pack_request_defaults_name_to_output_folder(tmp_path):
    args = cli.build_parser().parse_args(["pack", "-i", str(tmp_path), "-o", str(tmp_path / "sprites")])
    request = cli.request_from_args(args)
    assert request.name == "sprites"
    assert request.multi_frame_enabled is False


def test_main_pack_returns_zero(tmp_path):
    write_png(tmp_path / "art" / "a.png", (8, 8))
    out = tmp_path / "out"

    code = cli.main(["pack", "-i", str(tmp_path / "art"), "-o", str(out), "-n", "ui", "--strip-extension"])

    assert code == 0
    assert (out / "ui.png").exists()
    assert list(json.loads((out / "ui.json").read_text(encoding="utf-8"))["frames"]) == ["a"]


def test_main_config_returns_zero(tmp_path):
    write_png(tmp_path / "art" / "a.png", (8, 8))
    config = tmp_path / "atlas.json"
    config.write_text(
        json.dumps({"name": "ui", "output_directory": "out", "source_folders": ["art"], "output_encodings": ["ron"]}),
        encoding="utf-8",
    )

    assert cli.main(["config", "-i", str(config)]) == 0
    assert (tmp_path / "out" / "ui.ron").exists()


def test_main_reports_packing_failure(tmp_path, capsys):
    write_png(tmp_path / "art" / "wide.png", (128, 4))

    code = cli.main(["pack", "-i", str(tmp_path / "art"), "-o", str(tmp_path / "out"), "--max-size", "64"])

    assert code == 1
    assert "Failed to pack" in capsys.readouterr().err


def test_main_reports_bad_config_extension(tmp_path, capsys):
    config = tmp_path / "atlas.yaml"
    config.write_text("", encoding="utf-8")

    assert cli.main(["config", "-i", str(config)]) == 1
    assert "Unsupported format" in capsys.readouterr().err


def test_main_reports_invalid_max_size(tmp_path, capsys):
    code = cli.main(["pack", "-i", str(tmp_path), "-o", str(tmp_path / "out"), "--max-size", "100"])
    assert code == 1
    assert "power of two" in capsys.readouterr().err
