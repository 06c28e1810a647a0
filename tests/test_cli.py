"""
Tests for the command-line run (prospect_radar.main) and its report writer.

What we test
------------
- An offline run over a news file prints white space and high-potential news.
- Engagements loaded from JSON remove offerings from the white space.
- The run directory holds matrix.json, opportunities.json and report.md.
- Running without any news source fails with exit code 1.
"""

from __future__ import annotations

import asyncio
import json

from prospect_radar import main as cli
from prospect_radar.config.settings import settings

NEWS = [
    {
        "title": "Schneider Electric lance une offre Cybersecurity",
        "pubDate": "Sun, 06 Apr 2025 10:00:00 GMT",
        "description": "Nouvelle solution pour les industriels.",
    },
    {"title": "Un concurrent publie ses résultats", "pubDate": "2025-04-01"},
]


def _news_file(tmp_path):
    path = tmp_path / "news.json"
    path.write_text(json.dumps(NEWS), encoding="utf-8")
    return path


def test_offline_run_prints_white_space(tmp_path, capsys) -> None:
    code = asyncio.run(cli.main(["--news-file", str(_news_file(tmp_path)), "--offline", "--no-save"]))
    out = capsys.readouterr().out

    assert code == 0
    assert "Oracle: keywords" in out
    assert "1 relevant news items" in out
    assert "• Cybersecurity (Technology)" in out
    assert "Schneider Electric lance une offre Cybersecurity" in out


def test_engagements_close_white_space(tmp_path, capsys) -> None:
    engagements = tmp_path / "engagements.json"
    engagements.write_text(json.dumps([{"offering": "Cybersecurity", "status": "Active"}]), encoding="utf-8")

    code = asyncio.run(
        cli.main(
            [
                "--news-file",
                str(_news_file(tmp_path)),
                "--offline",
                "--no-save",
                "--engagements",
                str(engagements),
            ]
        )
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "Every offering in the news already has an engagement" in out


def test_run_writes_report(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(settings, "output_dir", tmp_path / "output")
    code = asyncio.run(cli.main(["--news-file", str(_news_file(tmp_path)), "--offline"]))
    capsys.readouterr()

    assert code == 0
    (run_dir,) = list((tmp_path / "output").iterdir())
    matrix = json.loads((run_dir / "matrix.json").read_text())
    assert matrix["oracle"] == "keywords"
    assert matrix["rows"][0]["offer_detail"] == "Cybersecurity"
    opportunities = json.loads((run_dir / "opportunities.json").read_text())
    assert opportunities["white_space"] == ["Cybersecurity"]
    assert "(high potential)" in (run_dir / "report.md").read_text()


def test_nothing_to_analyze(capsys) -> None:
    assert asyncio.run(cli.main(["--offline"])) == 1
    assert "Nothing to analyze" in capsys.readouterr().out
