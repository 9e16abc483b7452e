import json

from exit_planner.cli import main


def test_valid_response_exits_zero(tmp_path, capsys):
    response = tmp_path / "response.txt"
    response.write_text(
        'Here you go: {"strategies":[{"exitPointName":"Bear Brook Trail","confidence":0.85,'
        '"reasoning":"This is a close and easy exit given current pace."}]}',
        encoding="utf-8",
    )
    code = main([str(response), "--difficulty", "moderate", "--arrival-offset-minutes", "30"])
    output = json.loads(capsys.readouterr().out)
    assert code == 0
    assert output["ok"] is True
    assert output["strategies"][0]["exit_point"]["id"] == "exit1"
    assert output["issues"] == []


def test_unusable_response_exits_one(tmp_path, capsys):
    response = tmp_path / "response.txt"
    response.write_text("I cannot help with that.", encoding="utf-8")
    code = main([str(response)])
    output = json.loads(capsys.readouterr().out)
    assert code == 1
    assert output["failure"]["code"] == "MalformedResponse"
    assert output["strategies"] == []


def test_custom_catalogue(tmp_path, capsys):
    catalogue = tmp_path / "exit_points.json"
    catalogue.write_text(
        json.dumps(
            {
                "exit_points": [
                    {
                        "id": "gate",
                        "name": "Summit Gate",
                        "location": {"lat": 44.0, "lon": -71.0},
                        "accessibility": "difficult",
                        "distance_from_current": 0.4,
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    response = tmp_path / "response.txt"
    response.write_text(
        '{"strategies":[{"exitPointName":"Summit Gate","confidence":0.6,'
        '"reasoning":"Good weather ahead."}]}',
        encoding="utf-8",
    )
    code = main([str(response), "--exit-points", str(catalogue), "--difficulty", "expert"])
    output = json.loads(capsys.readouterr().out)
    assert code == 1
    assert output["issues"][0].startswith("InconsistentReasoning:")
    assert output["issues"][-1].startswith("NoValidStrategies:")
