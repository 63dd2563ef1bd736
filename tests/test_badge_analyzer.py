import json
from pathlib import Path

BASE = "http://openbadges.org/context"
EXT = "http://openbadges.org/extension1"
OBI_SCHEMA = "http://openbadges.org/standard/1.1/OBI/Assertion.json#"

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def extended_assertion() -> dict:
    doc = json.loads((FIXTURES / "assertion_valid.json").read_text(encoding="utf-8"))
    doc["@context"] = [BASE, {"someProp": EXT}]
    doc["someProp"] = {"@context": EXT, "value": "x"}
    return doc


def test_scenario_a_bare_context():
    from badgecheck.badge_analyzer import analyze_sync

    res = analyze_sync({"@context": BASE})
    assert [(s.pointer, s.schema_ref) for s in res.manifest] == [("", OBI_SCHEMA)]
    assert res.report.count("=============================") == 2
    assert "============================= root =============================" in res.report
    assert res.ok is False


def test_scenario_b_extension_passes_in_order():
    from badgecheck.badge_analyzer import analyze_badge_object
    from badgecheck.report import PASS_MARKER

    report = analyze_badge_object(extended_assertion())
    assert report.index(" root ") < report.index(" /someProp ")
    assert report.count(PASS_MARKER) == 2


def test_reports_are_byte_identical_across_runs():
    from badgecheck.badge_analyzer import analyze_badge_object

    doc = extended_assertion()
    doc["someProp"]["value"] = ""
    del doc["uid"]
    assert analyze_badge_object(doc) == analyze_badge_object(doc)


def test_document_is_not_mutated():
    from badgecheck.badge_analyzer import analyze_badge_object

    doc = extended_assertion()
    before = json.dumps(doc, sort_keys=True)
    analyze_badge_object(doc)
    assert json.dumps(doc, sort_keys=True) == before


def test_invalid_context_is_nothing_to_validate(tmp_path: Path):
    from badgecheck.badge_analyzer import analyze_sync
    from badgecheck.report import NOTHING_TO_VALIDATE

    res = analyze_sync({"@context": 7}, log_path=tmp_path / "log.jsonl")
    assert res.report == NOTHING_TO_VALIDATE
    assert res.fatal
    assert res.ok is False

    events = [json.loads(line) for line in (tmp_path / "log.jsonl").read_text(encoding="utf-8").splitlines()]
    assert [e["event"] for e in events] == ["MANIFEST_ENTRY_DROPPED", "BADGE_ANALYZED"]
    assert events[0]["code"] == "E_CONTEXT_DECLARATION"
    assert events[1]["status"] == "ERROR"
    assert events[1]["fatal"]


def test_dropped_entries_are_logged(tmp_path: Path):
    from badgecheck.badge_analyzer import analyze_sync

    doc = extended_assertion()
    doc["@context"][1]["ghost"] = EXT
    log = tmp_path / "log.jsonl"
    res = analyze_sync(doc, log_path=log)
    assert res.ok is True
    assert "ghost" not in res.report

    events = [json.loads(line) for line in log.read_text(encoding="utf-8").splitlines()]
    dropped = [e for e in events if e["event"] == "MANIFEST_ENTRY_DROPPED"]
    assert dropped[0]["code"] == "W_PROPERTY_NOT_FOUND"
    assert dropped[0]["entry"] == {"property": "ghost"}
    summary = events[-1]
    assert summary["event"] == "BADGE_ANALYZED"
    assert summary["stats"] == {"attempted": 3, "structures": 2, "dropped": 1, "failed": 0}


def test_cli_ok_and_warnings(tmp_path: Path, capsys):
    from badgecheck.badge_analyzer import main

    doc = extended_assertion()
    doc["@context"][1]["ghost"] = EXT
    p = tmp_path / "badge.json"
    p.write_text(json.dumps(doc), encoding="utf-8")

    assert main(["--in", str(p), "--log", str(tmp_path / "log.jsonl")]) == 0
    out = capsys.readouterr()
    assert "root" in out.out
    assert "Warning: couldn't find pointer for ghost" in out.err


def test_cli_failure_and_json(tmp_path: Path, capsys):
    from badgecheck.badge_analyzer import main

    p = tmp_path / "badge.json"
    p.write_text(json.dumps({"@context": BASE}), encoding="utf-8")

    assert main(["--in", str(p), "--no-log", "--json"]) == 2
    summary = json.loads(capsys.readouterr().out)
    assert summary["ok"] is False
    assert summary["structures"][0]["pointer"] == ""
    assert "/uid: missing required property 'uid'" in summary["structures"][0]["errors"]


def test_cli_default_log_path(tmp_path: Path, monkeypatch):
    from badgecheck import logger as logger_mod
    from badgecheck.badge_analyzer import main

    log_path = tmp_path / "badge_analyzer.jsonl"
    monkeypatch.setattr(logger_mod, "default_log_path", lambda _name: log_path)

    p = tmp_path / "badge.json"
    p.write_text(json.dumps(extended_assertion()), encoding="utf-8")
    assert main(["--in", str(p)]) == 0
    assert log_path.read_text(encoding="utf-8").strip()


def test_get_iri_for_badge_object():
    from badgecheck.badge_analyzer import get_iri_for_badge_object

    assert get_iri_for_badge_object({}) == OBI_SCHEMA


def test_cli_bad_schema_dir_exits_cleanly(tmp_path: Path):
    import pytest

    from badgecheck.badge_analyzer import main

    cfg = tmp_path / "badgecheck.json"
    cfg.write_text(json.dumps({"schema_dir": "nowhere"}), encoding="utf-8")
    p = tmp_path / "badge.json"
    p.write_text(json.dumps({"@context": BASE}), encoding="utf-8")

    with pytest.raises(SystemExit) as ei:
        main(["--in", str(p), "--config", str(cfg), "--no-log"])
    assert "schema dir not found" in str(ei.value.code)
