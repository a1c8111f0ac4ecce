from __future__ import annotations

import json

import pytest

from navfuzz.cli import main


@pytest.fixture
def routes_file(tmp_path):
    path = tmp_path / "routes.json"
    path.write_text(json.dumps({
        "nodes": {"home": {"kind": "tab", "name": "Home"}},
        "routes": [
            {"from": "root", "to": "home", "action": "tap:Home"},
            {"from": "home", "to": "detail", "action": "tap:Item"},
            {"from": "detail", "to": "home", "action": "back"},
            {"from": "island", "to": "home", "action": "deep_link:app://home"},
        ],
    }))
    return path


@pytest.fixture(autouse=True)
def _no_env(monkeypatch, tmp_path):
    # Keep stray .env files and NAVFUZZ_* variables out of the run
    monkeypatch.chdir(tmp_path)
    for var in ("NAVFUZZ_MAX_DEPTH", "NAVFUZZ_MAX_ITERATIONS", "NAVFUZZ_SEED", "NAVFUZZ_CRASH_RATE"):
        monkeypatch.delenv(var, raising=False)


def test_fuzz_writes_report(routes_file, tmp_path):
    output = tmp_path / "report.json"
    code = main([
        "fuzz", str(routes_file),
        "--seed", "42",
        "--iterations", "5",
        "--crash-rate", "0",
        "--output", str(output),
    ])

    assert code == 0
    data = json.loads(output.read_text())
    assert data["seed"] == 42
    assert data["iterations"] == 5
    assert data["crashes"] == []
    assert data["coverage"]["unreachable_nodes"] == ["island"]


def test_fuzz_fail_on_any(routes_file):
    code = main([
        "fuzz", str(routes_file),
        "--seed", "1",
        "--iterations", "3",
        "--crash-rate", "1",
        "--fail-on", "any",
    ])
    assert code == 1


def test_fuzz_low_crashes_pass_by_default(routes_file):
    code = main(["fuzz", str(routes_file), "--seed", "1", "--iterations", "3", "--crash-rate", "1"])
    assert code == 0


def test_fuzz_missing_file(tmp_path):
    assert main(["fuzz", str(tmp_path / "missing.json")]) == 1


def test_fuzz_bad_config(routes_file):
    assert main(["fuzz", str(routes_file), "--crash-rate", "2"]) == 1


def test_graph_mermaid(routes_file, capsys):
    assert main(["graph", str(routes_file), "--mermaid"]) == 0
    out = capsys.readouterr().out
    assert "stateDiagram-v2" in out
    assert "root --> home: tap(Home)" in out


def test_graph_tables(routes_file, capsys):
    assert main(["graph", str(routes_file)]) == 0
    out = capsys.readouterr().out
    assert "island" in out


def test_no_command(capsys):
    assert main([]) == 0
    assert "navfuzz" in capsys.readouterr().out


@pytest.mark.parametrize(
    "data",
    [
        {"nodes": [], "routes": []},
        {"routes": [{"from": "root", "to": "a", "action": {"type": "swipe", "value": 5}}]},
    ],
)
@pytest.mark.parametrize("command", ["graph", "fuzz"])
def test_malformed_route_file(tmp_path, data, command):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(data))
    assert main([command, str(path)]) == 1


@pytest.fixture
def bracket_routes_file(tmp_path):
    path = tmp_path / "brackets.json"
    path.write_text(json.dumps({
        "routes": [
            {"from": "root", "to": "[/oops]", "action": "tap:[bold]"},
            {"from": "[/oops]", "to": "root", "action": "back"},
            {"from": "[red]", "to": "root", "action": "back"},
        ],
    }))
    return path


def test_graph_prints_bracketed_ids_verbatim(bracket_routes_file, capsys):
    assert main(["graph", str(bracket_routes_file)]) == 0
    out = capsys.readouterr().out
    assert "[/oops]" in out
    assert "[red]" in out


def test_fuzz_prints_bracketed_ids_verbatim(bracket_routes_file, capsys):
    code = main([
        "fuzz", str(bracket_routes_file),
        "--seed", "3",
        "--iterations", "2",
        "--crash-rate", "1",
    ])
    assert code == 0
    out = capsys.readouterr().out
    assert "[/oops]" in out
