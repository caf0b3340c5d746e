import pytest

from dbcontroller import DBController

USERS = [("ana", True), ("bob", False), ("cy", True)]


@pytest.fixture()
def sqlite_config(tmp_path):
    return {
        "VERSION": "sqlite",
        "HOST": "localhost",
        "NAME": str(tmp_path / "test.db"),
        "USERNAME": "",
        "PASSWORD": "",
    }


@pytest.fixture()
def db(sqlite_config):
    controller = DBController(sqlite_config)
    controller.query("CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, active INTEGER)")
    controller.prepare("INSERT INTO users (name, active) VALUES (:name, :active)")
    for name, active in USERS:
        assert controller.bind(":name", name).bind(":active", active).execute()
    controller.free()
    yield controller
    controller.close()
