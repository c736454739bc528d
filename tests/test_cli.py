from __future__ import annotations

import json

import pytest

from rangetrainer.cli import main


def _write(tmp_path, name, payload):
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


@pytest.fixture
def files(tmp_path):
    expected = _write(
        tmp_path,
        "expected.json",
        {
            "data": {"AA": "raise", "KK": "raise", "A5s": {"raise": 62, "fold": 38}, "72o": "black"},
            "notes": {"AA": {"tags": ["core_open"]}, "KK": {"tags": ["core_open"]}},
            "meta": {"position": "BTN"},
        },
    )
    answers = _write(tmp_path, "answers.json", {"AA": "raise", "KK": "fold", "A5s": "raise-fold", "72o": "raise"})
    return expected, answers


def test_grade_json_output(files, capsys):
    expected, answers = files
    assert main(["grade", "--expected", expected, "--answers", answers, "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["attempted"] == 3
    assert data["correct"] == 2
    assert data["wrong"] == 1
    assert [diff["hand"] for diff in data["diffs"]] == ["KK"]


def test_grade_threshold_flag_changes_result(files, capsys):
    expected, answers = files
    main(["grade", "--expected", expected, "--answers", answers, "--json", "--mix-min", "0.5", "--no-diffs"])
    data = json.loads(capsys.readouterr().out)
    assert data["correct"] == 1
    assert data["diffs"] == []


def test_grade_plain_and_rich_output(files, capsys):
    expected, answers = files
    main(["grade", "--expected", expected, "--answers", answers, "--plain"])
    plain = capsys.readouterr().out
    assert plain.startswith("Accuracy: 67% (2/3)")

    main(["grade", "--expected", expected, "--answers", answers, "--no-color"])
    rich_out = capsys.readouterr().out
    assert "Range Grade" in rich_out
    assert "By action" in rich_out


def test_delta_command(tmp_path, capsys):
    start = _write(tmp_path, "start.json", {"AA": "raise", "KK": "raise", "76s": "fold"})
    target = _write(tmp_path, "target.json", {"AA": "raise", "KK": "raise", "76s": "raise"})
    answers = _write(tmp_path, "answers.json", {"answers": {"AA": "fold", "76s": "raise"}})
    assert main(["delta", "--start", start, "--target", target, "--answers", answers, "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert (data["attempted"], data["correct"], data["unanswered"]) == (1, 1, 0)


def test_bad_input_exits_with_usage_error(tmp_path, capsys):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    answers = _write(tmp_path, "answers.json", {})
    with pytest.raises(SystemExit) as excinfo:
        main(["grade", "--expected", str(broken), "--answers", answers])
    assert excinfo.value.code == 2
    assert "not valid JSON" in capsys.readouterr().err

    with pytest.raises(SystemExit) as excinfo:
        main(["grade", "--expected", str(tmp_path / "missing.json"), "--answers", answers])
    assert excinfo.value.code == 2


def test_validate_notes_command(tmp_path, capsys):
    good = _write(tmp_path, "good.json", {"data": {"AA": "raise"}, "notes": {"AA": {"tags": ["core_open"]}}})
    assert main(["validate-notes", good]) == 0
    assert "validation passed" in capsys.readouterr().out

    bad = _write(tmp_path, "bad.json", {"data": {"AA": "raise"}, "notes": {"AA": {"action": "call"}}})
    assert main(["validate-notes", bad]) == 1
    err = capsys.readouterr().err
    assert "Action mismatch for AA" in err
    assert "Tag rule failed for AA" in err

    bare = _write(tmp_path, "bare.json", {"AA": "raise"})
    assert main(["validate-notes", bare]) == 0
    assert "No notes found" in capsys.readouterr().out


def test_score_command(capsys):
    assert main(["score", "--expected", '{"raise": 62, "fold": 38}', "--choice", "fold", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["score"] == 0.5
    assert data["grade_bucket"] == "partial"
    assert "62%" in data["explain"]

    main(["score", "--expected", "Raise", "--choice", "raise-fold"])
    assert capsys.readouterr().out.startswith("miss 0.00:")

    main(["score", "--expected", '{"raise": 62, "fold": 38}', "--choice", "mixed", "--mix-min", "0.5"])
    assert capsys.readouterr().out.startswith("miss")


def test_score_command_rejects_bad_blend(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["score", "--expected", "{raise", "--choice", "raise"])
    assert excinfo.value.code == 2
    assert "not a valid JSON blend" in capsys.readouterr().err
