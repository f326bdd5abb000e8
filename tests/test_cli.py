"""Tests for the command-line interface."""

import numpy as np
import pytest
import yaml
from PIL import Image

from pixfeat.cli import main


@pytest.fixture
def square_png(tmp_path):
    img = np.zeros((200, 200), dtype=np.uint8)
    img[50, 50:150] = 255
    img[149, 50:150] = 255
    img[50:150, 50] = 255
    img[50:150, 149] = 255
    path = tmp_path / "square.png"
    Image.fromarray(img).save(path)
    return path


def test_corners_report(square_png, tmp_path):
    """The corner report lists the four square corners."""
    out = tmp_path / "report.yaml"
    main([str(square_png), "--detect", "corners", "--relative-threshold", "0.05", "-o", str(out)])
    report = yaml.safe_load(out.read_text())
    assert report["width"] == 200
    assert report["height"] == 200
    assert len(report["corners"]) == 4
    assert report["corner_distribution"]["total"] == 4
    assert "lines" not in report


def test_lines_report(square_png, capsys):
    """Thresholded edges of the square give its two horizontal sides."""
    main([str(square_png), "--detect", "lines", "--edges", "threshold", "--vote-threshold", "50"])
    report = yaml.safe_load(capsys.readouterr().out)
    rhos = sorted(round(line["rho"]) for line in report["lines"])
    assert rhos == [50, 149]
    assert all(line["score"] == 100 for line in report["lines"])


def test_config_round_trip(square_png, tmp_path):
    """Effective parameters can be saved and reused."""
    config = tmp_path / "params.yaml"
    out = tmp_path / "report.yaml"
    main([str(square_png), "--detect", "corners", "--block-size", "3", "--save-config", str(config),
          "-o", str(out)])
    saved = yaml.safe_load(config.read_text())
    assert saved["harris"]["block_size"] == 3
    main([str(square_png), "--detect", "corners", "-c", str(config), "-o", str(out)])
    assert "corners" in yaml.safe_load(out.read_text())


def test_missing_image_exits(tmp_path, capsys):
    """Unreadable images end with status 1 and a message on stderr."""
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.png")])
    assert excinfo.value.code == 1
    assert "Error" in capsys.readouterr().err


def test_bad_policy_in_config_exits(square_png, tmp_path, capsys):
    """An unknown extractor policy in the config ends with status 1, not a traceback."""
    config = tmp_path / "params.yaml"
    config.write_text(yaml.dump({"harris": {"policy": "bogus"}}))
    with pytest.raises(SystemExit) as excinfo:
        main([str(square_png), "--detect", "corners", "-c", str(config)])
    assert excinfo.value.code == 1
    assert "policy" in capsys.readouterr().err


def test_border_mode_option(square_png, tmp_path):
    """The Harris border mode can be chosen on the command line and is saved."""
    config = tmp_path / "params.yaml"
    out = tmp_path / "report.yaml"
    main([str(square_png), "--detect", "corners", "--border-mode", "reflect",
          "--save-config", str(config), "-o", str(out)])
    assert yaml.safe_load(config.read_text())["harris"]["border_mode"] == "reflect"
    assert len(yaml.safe_load(out.read_text())["corners"]) == 4
