# test_main.py
"""
Command line tests on a small synthetic sky
"""
import json

import numpy as np
import pytest

import main
from envlights.image_source import save_image
from envlights.light import angle_between, equirect_to_direction


def write_sky(path):
    img = np.full((16, 32, 3), 0.5, dtype=np.float32)
    # sun in the upper half
    img[3:5, 20:23] = 50.0
    # bright ground, should never be emitted
    img[12:14, 4:8] = 80.0
    save_image(path, img)
    return path


def test_extracts_lights(tmp_path, capsys):
    path = write_sky(tmp_path / "sky.hdr")

    assert main.main([str(path), '-q', '-n', '6', '-m', '0']) == 0

    records = json.loads(capsys.readouterr().out)
    assert len(records) >= 1
    for record in records:
        assert len(record['direction']) == 3
        assert np.linalg.norm(record['direction']) == pytest.approx(1.0)
        assert record['centroid'][1] < 0.5
        assert record['error'] == 0

    # sun is the strongest light above the horizon
    sun = equirect_to_direction(21.5 / 32, 4 / 16)
    assert angle_between(np.array(records[0]['direction']), sun) < 15.0


def test_light_cap_and_output_file(tmp_path, capsys):
    path = write_sky(tmp_path / "sky.hdr")
    out = tmp_path / "lights.json"

    assert main.main([str(path), '-q', '-n', '5', '-m', '2', '-o', str(out)]) == 0
    assert capsys.readouterr().out == ""

    records = json.loads(out.read_text())
    assert 1 <= len(records) <= 2


def test_debug_files(tmp_path):
    path = write_sky(tmp_path / "sky.hdr")
    debug_dir = tmp_path / "debug"

    assert main.main([str(path), '-q', '-d', '--debug-dir', str(debug_dir),
                      '-o', str(tmp_path / "lights.json")]) == 0

    for suffix in ("regions.png", "lights.png", "luminance.png", "overview.png", "lights.txt"):
        assert (debug_dir / f"sky_{suffix}").exists()


def test_config_file_and_strategy(tmp_path, capsys):
    path = write_sky(tmp_path / "sky.hdr")
    config = tmp_path / "config.json"
    config.write_text(json.dumps({'num_cuts': 3, 'merge_strategy': 'near-merge'}))

    assert main.main([str(path), '-q', '--config', str(config), '-m', '0']) == 0
    assert isinstance(json.loads(capsys.readouterr().out), list)


def test_missing_file(tmp_path, capsys):
    assert main.main([str(tmp_path / "missing.hdr"), '-q']) == 1
    assert "Error:" in capsys.readouterr().err


def test_undecodable_file(tmp_path):
    path = tmp_path / "sky.hdr"
    path.write_text("garbage")
    assert main.main([str(path), '-q']) == 1


def test_usage_errors_exit_with_one(tmp_path):
    with pytest.raises(SystemExit) as e:
        main.main([])
    assert e.value.code == 1

    with pytest.raises(SystemExit) as e:
        main.main(['sky.hdr', '--strategy', 'bogus'])
    assert e.value.code == 1

    path = write_sky(tmp_path / "sky.hdr")
    with pytest.raises(SystemExit) as e:
        main.main([str(path), '-q', '-n', '-2'])
    assert e.value.code == 1


def test_empty_partition_is_fatal(tmp_path, monkeypatch):
    path = write_sky(tmp_path / "sky.hdr")
    monkeypatch.setattr("envlights.light_extractor.median_variance_cut", lambda table, depth: [])

    assert main.main([str(path), '-q']) == 1
