import json

import pytest

from dbcontroller.cli import check, query
from dbcontroller.cli.query import parse_binding, parse_value


@pytest.fixture()
def config_file(tmp_path, db, sqlite_config):
    path = tmp_path / "db.json"
    path.write_text(json.dumps(sqlite_config), encoding="utf-8")
    return str(path)


@pytest.mark.parametrize("raw,expected", [
    ("null", None),
    ("TRUE", True),
    ("false", False),
    ("42", 42),
    ("-3", -3),
    ("4.5", "4.5"),
    ("ana", "ana"),
])
def test_parse_value(raw, expected):
    assert parse_value(raw) == expected


def test_parse_binding_keeps_equals_in_value():
    assert parse_binding(":expr=a=b") == (":expr", "a=b")


def test_check_ok(config_file):
    assert check.main(["--config", config_file]) == 0


def test_check_fails_without_database(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({
        "VERSION": "sqlite", "HOST": "x", "NAME": str(tmp_path / "no" / "such.db"), "USERNAME": "", "PASSWORD": "",
    }), encoding="utf-8")
    assert check.main(["--config", str(path), "--debug"]) == 1


def test_query_prints_rows(config_file, capsys):
    status = query.main(["SELECT name FROM users WHERE id = :id", "--bind", "id=2", "--config", config_file])
    assert status == 0
    assert json.loads(capsys.readouterr().out) == [{"name": "bob"}]


def test_query_writes_json_file(config_file, tmp_path):
    out = tmp_path / "reports" / "rows.json"
    status = query.main([
        "SELECT id, name FROM users WHERE active = :active ORDER BY id",
        "--bind", ":active=true",
        "--out", str(out),
        "--config", config_file,
    ])
    assert status == 0
    assert json.loads(out.read_text(encoding="utf-8")) == [{"id": 1, "name": "ana"}, {"id": 3, "name": "cy"}]


def test_query_failure_exit_status(config_file):
    assert query.main(["SELECT * FROM missing_table", "--config", config_file]) == 1
