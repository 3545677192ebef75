from __future__ import annotations

import json

from saju.run import main

ARGS = ["--name", "홍길동", "--birth-date", "1990-05-15", "--birth-time", "14:30",
        "--gender", "male", "--today", "2026-10-17"]


def test_cli_prints_chart_json(capsys) -> None:
    code = main(ARGS + ["--wolwun-from", "2026", "--wolwun-to", "2026", "--no-narrative"])
    data = json.loads(capsys.readouterr().out)

    assert code == 0
    assert data["name"] == "홍길동"
    assert data["pillars"]["year"]["stem"] == "庚"
    assert data["pillars"]["month"]["branch"] == "巳"
    assert sum(data["element_counts"].values()) == 8
    assert len(data["wolwun"]) == 12
    assert data["saewun"][0]["year"] == 1990
    assert data["narrative"] is None


def test_cli_single_bound_window(capsys) -> None:
    code = main(ARGS + ["--wolwun-from", "2030", "--no-narrative"])
    data = json.loads(capsys.readouterr().out)

    assert code == 0
    assert {m["year"] for m in data["wolwun"]} == {2030}


def test_cli_includes_default_narrative(capsys) -> None:
    code = main(ARGS + ["--wolwun-from", "2026", "--wolwun-to", "2026"])
    data = json.loads(capsys.readouterr().out)

    assert code == 0
    assert data["narrative"]["source"] == "default"


def test_cli_rejects_bad_date(capsys) -> None:
    code = main(["--birth-date", "1990/05/15", "--birth-time", "14:30", "--gender", "male"])

    assert code == 2
    assert capsys.readouterr().err.startswith("error:")
