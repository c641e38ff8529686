"""Tests for the inspect_armature tool"""

import json

from conftest import chain_payload
from inspect_armature import cli, describe
from skelform import armature_from_dict


def test_describe_lists_everything():
    lines = describe(armature_from_dict(chain_payload()))
    text = "\n".join(lines)

    assert lines[0] == "Bones (3):"
    assert "grandchild" in text
    assert "parent=child" in text
    assert "wave" in text
    assert "10 frames @ 20 fps (0.50s), 1 tracks" in text
    assert "Styles (1):" in text


def test_cli_exit_codes(tmp_path, capsys):
    good = tmp_path / "armature.json"
    good.write_text(json.dumps(chain_payload()), encoding="utf-8")
    assert cli([str(good)]) == 0
    assert "Bones (3):" in capsys.readouterr().out

    bad = tmp_path / "broken.json"
    bad.write_text(json.dumps({"bones": [{"id": 0, "name": "a", "parent_id": 0}]}), encoding="utf-8")
    assert cli([str(bad)]) == 2

    assert cli([str(tmp_path / "missing.json")]) == 1


def test_cli_reports_malformed_fields(tmp_path, capsys):
    no_filename = tmp_path / "atlas.json"
    no_filename.write_text(json.dumps({"atlases": [{"size": [4, 4]}]}), encoding="utf-8")
    assert cli([str(no_filename)]) == 2

    not_utf8 = tmp_path / "binary.json"
    not_utf8.write_bytes(b"\xff")
    assert cli([str(not_utf8)]) == 2
    assert "invalid armature" in capsys.readouterr().err


def test_describe_shows_mesh_bones():
    payload = chain_payload()
    payload["bones"][1]["vertices"] = [{"pos": [0, 0]}, {"pos": [1, 0]}, {"pos": [0, 1]}]
    payload["bones"][1]["indices"] = [0, 1, 2]

    lines = describe(armature_from_dict(payload))

    assert lines[2].endswith("mesh=3v")
    assert "mesh=" not in lines[1]
