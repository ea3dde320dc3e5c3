"""Tests for the reachability map CLI."""

import json

from tools.generate_reachability_map import main


def test_generate_and_query(tmp_path, capsys):
    out = tmp_path / "planar.json"
    rc = main(["generate", "--samples", "300", "--seed", "3", "--voxel-size", "0.1", "--grow", "1", "-o", str(out)])
    assert rc == 0
    text = capsys.readouterr().out
    assert "Accepted samples:" in text
    data = json.loads(out.read_text())
    assert data["dimension"] == 2
    assert data["attempted_samples"] == 300
    assert 0 < data["accepted_samples"] <= 300

    assert main(["query", str(out), "0.4,0.2"]) == 0
    assert "Score:" in capsys.readouterr().out


def test_query_wrong_dimension(tmp_path, capsys):
    out = tmp_path / "planar.json"
    main(["generate", "--samples", "50", "--seed", "1", "-o", str(out)])
    capsys.readouterr()
    assert main(["query", str(out), "0.1,0.2,0.3"]) == 2


def test_generate_is_reproducible(tmp_path):
    a, b = tmp_path / "a.json", tmp_path / "b.json"
    main(["generate", "--samples", "100", "--seed", "9", "--voxel-size", "0.2", "-o", str(a)])
    main(["generate", "--samples", "100", "--seed", "9", "--voxel-size", "0.2", "-o", str(b)])
    assert json.loads(a.read_text()) == json.loads(b.read_text())


class TestConfigCommand:
    def test_set_then_diff(self, isolated_planner_config, capsys):
        assert main(["config", "set", "reachability.voxel_size", "0.2"]) == 0
        assert main(["config", "set", "reachability.effector_link", "link_3"]) == 0
        capsys.readouterr()
        assert main(["config", "diff"]) == 0
        diff = json.loads(capsys.readouterr().out)
        assert diff == {"reachability": {"voxel_size": 0.2, "effector_link": "link_3"}}
        saved = json.loads((isolated_planner_config / "planner_config.json").read_text())
        assert saved["reachability"]["voxel_size"] == 0.2

    def test_generate_uses_saved_settings(self, tmp_path):
        main(["config", "set", "reachability.voxel_size", "0.3"])
        out = tmp_path / "map.json"
        main(["generate", "--samples", "50", "--seed", "2", "-o", str(out)])
        assert json.loads(out.read_text())["voxel_size"] == 0.3

    def test_unknown_setting(self, capsys):
        assert main(["config", "set", "reachability.voxel", "0.2"]) == 2
        assert "Unknown planner setting" in capsys.readouterr().err

    def test_set_needs_value(self):
        assert main(["config", "set", "reachability.voxel_size"]) == 2

    def test_show_and_reset(self, capsys):
        main(["config", "set", "joint_limits.damping_ratio", "1.0"])
        assert main(["config", "reset"]) == 0
        capsys.readouterr()
        assert main(["config", "show"]) == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["joint_limits"]["damping_ratio"] == 0.7
