import pytest

from dbcontroller import ConfigurationError
from dbcontroller.infra.db import DsnParams, build_dsn, parse_dsn


def test_build_dsn():
    config = {"VERSION": "mysql", "HOST": "localhost", "PORT": 3306, "NAME": "testdb"}
    assert build_dsn(config) == "mysql:host=localhost;port=3306;dbname=testdb"


def test_build_dsn_without_port():
    config = {"VERSION": "pgsql", "HOST": "db", "NAME": "app"}
    assert build_dsn(config) == "pgsql:host=db;port=;dbname=app"
    assert parse_dsn(build_dsn(config)) == DsnParams("pgsql", "db", None, "app")


def test_parse_dsn_is_case_insensitive():
    assert parse_dsn("MySQL:Host=h; PORT=3307 ;dbname=d") == DsnParams("mysql", "h", 3307, "d")


def test_parse_dsn_keeps_colons_in_database():
    assert parse_dsn("sqlite:host=;port=;dbname=:memory:").database == ":memory:"


def test_parse_dsn_rejects_bad_port():
    with pytest.raises(ConfigurationError, match="port"):
        parse_dsn("mysql:host=h;port=abc;dbname=d")


def test_parse_dsn_requires_driver():
    with pytest.raises(ConfigurationError):
        parse_dsn("host=h;dbname=d")
