"""Tests for the terratin command line."""

import json
import logging

import numpy as np
import pytest
from typer.testing import CliRunner

from terratin import __version__
from terratin.cli.commands.mesh import create_mesh, resolve_format
from terratin.cli.main import app
from terratin.exceptions import ExportError
from terratin.model.config import ExportConfig

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger("terratin")
    for handler in [h for h in root.handlers if getattr(h, "_terratin", False)]:
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def dem_file(tmp_path):
    rows, cols = np.mgrid[0:9, 0:12]
    values = 20.0 * np.exp(-((cols - 6.0) ** 2 + (rows - 4.0) ** 2) / 8.0)
    path = tmp_path / "dem.npy"
    np.save(path, values)
    return path


def ply_vertex_count(path):
    header = path.read_bytes().split(b"end_header", 1)[0].decode()
    line = next(line for line in header.splitlines() if line.startswith("element vertex"))
    return int(line.split()[-1])


class TestResolveFormat:
    def test_order(self, tmp_path):
        config = ExportConfig(format="stl")
        assert resolve_format(tmp_path / "a.obj", "ply", config) == "ply"
        assert resolve_format(tmp_path / "a.obj", None, config) == "obj"
        assert resolve_format(tmp_path / "a.mesh", None, config) == "stl"
        assert resolve_format(tmp_path / "a", None, config) == "stl"

    def test_unknown_explicit_format(self, tmp_path):
        with pytest.raises(ExportError):
            resolve_format(tmp_path / "a.obj", "fbx", ExportConfig())


class TestCreateMesh:
    def test_create_mesh(self, tmp_path, dem_file):
        stats = create_mesh(dem_file, tmp_path / "out.obj", ExportConfig(max_error=0.5), show_progress=False)

        assert stats["format"] == "obj"
        assert stats["output_file"].endswith("out.obj")
        assert (tmp_path / "out.obj").exists()
        assert stats["final_vertices"] > 4
        assert stats["raster_points"] == 9 * 12

    def test_plot_file(self, tmp_path, dem_file):
        stats = create_mesh(dem_file, tmp_path / "out.stl", ExportConfig(), plot_file=tmp_path / "out.png",
                            show_progress=False)
        assert (tmp_path / "out.png").exists()
        assert stats["plot_file"].endswith("out.png")

    def test_run_is_logged(self, tmp_path, dem_file, caplog):
        with caplog.at_level(logging.INFO, logger="terratin.cli.runs"):
            create_mesh(dem_file, tmp_path / "out.ply", ExportConfig(), show_progress=False)
        assert "mesh written" in caplog.text
        assert '"format": "ply"' in caplog.text


class TestCommands:
    def test_create(self, tmp_path, dem_file):
        output = tmp_path / "mesh.obj"
        result = runner.invoke(app, ["create", str(dem_file), str(output), "-e", "0.5"])

        assert result.exit_code == 0, result.output
        assert output.exists()
        assert "Wrote" in result.output
        assert "Vertices" in result.output
        assert output.read_text().startswith("# OBJ file generated by terratin")

    def test_create_full_detail(self, tmp_path, dem_file):
        output = tmp_path / "mesh.ply"
        result = runner.invoke(app, ["create", str(dem_file), str(output), "--max-error", "0", "--ascii"])

        assert result.exit_code == 0, result.output
        assert ply_vertex_count(output) == 9 * 12
        assert b"format ascii 1.0" in output.read_bytes()

    def test_config_file_and_overrides(self, tmp_path, dem_file):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"max_error": 1e6, "format": "ply"}))

        # Unknown extension falls back to the configured format
        result = runner.invoke(app, ["create", str(dem_file), str(tmp_path / "coarse.mesh"), "-c", str(config)])
        assert result.exit_code == 0, result.output
        assert ply_vertex_count(tmp_path / "coarse.ply") == 4

        # Command line options win over the file
        result = runner.invoke(app, ["create", str(dem_file), str(tmp_path / "fine.mesh"),
                                     "-c", str(config), "-e", "0", "--max-vertices", "20"])
        assert result.exit_code == 0, result.output
        assert "Warning" in result.output
        assert ply_vertex_count(tmp_path / "fine.ply") == 20

    def test_create_errors(self, tmp_path, dem_file):
        result = runner.invoke(app, ["create", str(tmp_path / "missing.npy"), str(tmp_path / "out.obj")])
        assert result.exit_code == 1
        assert "Error" in result.output

        result = runner.invoke(app, ["create", str(dem_file), str(tmp_path / "out.obj"), "--max-error=-1"])
        assert result.exit_code == 1

        result = runner.invoke(app, ["create", str(dem_file), str(tmp_path / "out.obj"), "-f", "fbx"])
        assert result.exit_code == 1
        assert not (tmp_path / "out.obj").exists()

    def test_invalid_config_file(self, tmp_path, dem_file):
        config = tmp_path / "config.json"
        config.write_text("{ broken")
        result = runner.invoke(app, ["create", str(dem_file), str(tmp_path / "out.obj"), "-c", str(config)])
        assert result.exit_code == 1

    def test_verbose_logging(self, tmp_path, dem_file):
        result = runner.invoke(app, ["-v", "create", str(dem_file), str(tmp_path / "out.stl")])
        assert result.exit_code == 0, result.output
        assert logging.getLogger("terratin").level == logging.DEBUG

    def test_info(self, dem_file):
        result = runner.invoke(app, ["info", str(dem_file), "--cell-size", "30"])

        assert result.exit_code == 0, result.output
        assert "Width" in result.output
        assert "12" in result.output
        assert "30" in result.output

    def test_info_missing_file(self, tmp_path):
        result = runner.invoke(app, ["info", str(tmp_path / "missing.asc")])
        assert result.exit_code == 1

    def test_formats(self):
        result = runner.invoke(app, ["formats"])
        assert result.exit_code == 0
        for name in ("obj", "ply", "stl"):
            assert name in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output
