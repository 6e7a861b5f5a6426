# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from himark.himarkc import main


def _write_unit(tmp_path: Path, items: list, **extra) -> Path:
	data = {"file": "src/lib.rs", "items": items, **extra}
	path = tmp_path / "unit.json"
	path.write_text(json.dumps(data))
	return path


ARRAY_MARKER = {"kind": "trait", "name": "Array", "line": 1, "annotations": ["marker"]}

TEST_ALL = {
	"kind": "struct",
	"name": "TestAll",
	"line": 5,
	"generics": [{"name": "T", "bounds": ["Default"]}, {"name": "N", "kind": "const", "type": "usize"}],
	"where": [{"subject": "[T; N]", "bounds": ["Sized"]}],
	"annotations": [{"name": "hi::mark", "args": "Array, Send", "line": 4, "column": 10}],
}


def _run_json(argv: list[str], capsys: pytest.CaptureFixture[str]) -> tuple[int, dict]:
	code = main([*argv, "--json"])
	out = capsys.readouterr().out
	payload = json.loads(out)
	assert payload["exit_code"] == code
	return code, payload


def test_generates_stubs_for_marked_types(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	unit = _write_unit(tmp_path, [ARRAY_MARKER, TEST_ALL])
	code, payload = _run_json([str(unit)], capsys)
	assert code == 0
	assert payload["diagnostics"] == []
	assert payload["impls"] == [
		"impl<T: Default, const N: usize> Array for TestAll<T, N> where [T; N]: Sized {}",
		"impl<T: Default, const N: usize> Send for TestAll<T, N> where [T; N]: Sized {}",
	]


def test_human_mode_writes_stubs_to_stdout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	unit = _write_unit(tmp_path, [{"kind": "enum", "name": "E", "annotations": [{"name": "mark", "args": "Sync"}]}])
	assert main([str(unit)]) == 0
	captured = capsys.readouterr()
	assert captured.out == "impl Sync for E {}\n"
	assert captured.err == ""


def test_emit_writes_stub_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	unit = _write_unit(tmp_path, [ARRAY_MARKER, TEST_ALL], mark_as=["u8 as Array"])
	out_path = tmp_path / "gen" / "impls.rs"
	assert main([str(unit), "--emit", str(out_path)]) == 0
	assert capsys.readouterr().out == ""
	lines = out_path.read_text().splitlines()
	assert len(lines) == 3
	assert lines[-1] == "impl Array for u8 {}"


def test_marker_with_items_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	bad = {
		"kind": "trait",
		"name": "Sized2",
		"items": [{"kind": "fn", "name": "size", "line": 3, "column": 5}],
		"annotations": ["hi::marker"],
	}
	code, payload = _run_json([str(_write_unit(tmp_path, [bad]))], capsys)
	assert code == 1
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "E-MARKER-ASSOC-ITEM"
	assert diag["phase"] == "validate"
	assert (diag["file"], diag["line"], diag["column"]) == ("src/lib.rs", 3, 5)


def test_marker_with_ordinary_supertrait_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	plain = {"kind": "trait", "name": "Plain", "items": [{"name": "go"}]}
	tagged = {"kind": "trait", "name": "Tagged", "supertraits": ["Array", "Send", "Plain"], "annotations": ["marker"]}
	code, payload = _run_json([str(_write_unit(tmp_path, [ARRAY_MARKER, plain, tagged]))], capsys)
	assert code == 1
	assert [d["code"] for d in payload["diagnostics"]] == ["E-MARKER-SUPERTRAIT"]
	assert "'Plain'" in payload["diagnostics"][0]["message"]


def test_marker_order_does_not_matter(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	tagged = {"kind": "trait", "name": "Tagged", "supertraits": ["Array"], "annotations": ["marker"]}
	code, payload = _run_json([str(_write_unit(tmp_path, [tagged, ARRAY_MARKER]))], capsys)
	assert code == 0
	assert payload["diagnostics"] == []


def test_unresolved_trait_in_mark(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	item = {"kind": "struct", "name": "S", "annotations": [{"name": "mark", "args": "Send, Ghost", "line": 2, "column": 9}]}
	code, payload = _run_json([str(_write_unit(tmp_path, [item]))], capsys)
	assert code == 1
	assert payload["impls"] == []
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "E-UNRESOLVED-TRAIT"
	assert (diag["line"], diag["column"]) == (2, 15)


def test_marker_flag_registers_external_trait(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	item = {"kind": "struct", "name": "S", "annotations": [{"name": "mark", "args": "ext::Ghost"}]}
	code, payload = _run_json([str(_write_unit(tmp_path, [item])), "--marker", "ext::Ghost"], capsys)
	assert code == 0
	assert payload["impls"] == ["impl ext::Ghost for S {}"]


def test_auto_trait_flag_replaces_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	item = {"kind": "struct", "name": "S", "annotations": [{"name": "mark", "args": "Send"}]}
	unit = _write_unit(tmp_path, [item])
	code, payload = _run_json([str(unit), "--auto-trait", "Freeze"], capsys)
	assert code == 1
	assert [d["code"] for d in payload["diagnostics"]] == ["E-UNRESOLVED-TRAIT"]


def test_config_file_in_cwd_is_used(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	(tmp_path / "himark.json").write_text(json.dumps({"format": "himark-config", "version": 0, "markers": ["Ghost"]}))
	item = {"kind": "struct", "name": "S", "annotations": [{"name": "mark", "args": "Ghost"}]}
	code, payload = _run_json([str(_write_unit(tmp_path, [item]))], capsys)
	assert code == 0
	assert payload["impls"] == ["impl Ghost for S {}"]


def test_missing_explicit_config_is_an_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	unit = _write_unit(tmp_path, [])
	code, payload = _run_json([str(unit), "--config", str(tmp_path / "nope.json")], capsys)
	assert code == 1
	assert [d["code"] for d in payload["diagnostics"]] == ["E-CONFIG"]


def test_unreadable_unit_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.chdir(tmp_path)
	missing = tmp_path / "missing.json"
	assert main([str(missing)]) == 1
	err = capsys.readouterr().err
	assert "E-DECL-LOAD" in err
	assert str(missing) in err


@pytest.mark.parametrize("reverse", [False, True])
def test_failed_marker_does_not_qualify_its_subtraits(
	tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], reverse: bool
) -> None:
	monkeypatch.chdir(tmp_path)
	a = {"kind": "trait", "name": "A", "items": [{"name": "go"}], "annotations": ["marker"]}
	b = {"kind": "trait", "name": "B", "supertraits": ["A"], "annotations": ["marker"]}
	c = {"kind": "trait", "name": "C", "supertraits": ["Send", "B"], "annotations": ["marker"]}
	items = [a, b, c]
	if reverse:
		items.reverse()
	code, payload = _run_json([str(_write_unit(tmp_path, items))], capsys)
	assert code == 1
	got = sorted((d["code"], d["message"]) for d in payload["diagnostics"])
	assert got == [
		("E-MARKER-ASSOC-ITEM", "marker trait 'A' cannot have associated items; found `fn go`"),
		("E-MARKER-SUPERTRAIT", "supertrait 'A' of marker trait 'B' is not a marker trait"),
		("E-MARKER-SUPERTRAIT", "supertrait 'B' of marker trait 'C' is not a marker trait"),
	]
