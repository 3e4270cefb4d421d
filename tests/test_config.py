"""Tests for configuration loading and precedence."""

import argparse

import pytest

from pg_onboard import config as config_module
from pg_onboard.config import Config, create_example_config
from pg_onboard.protocol import DSN


def make_args(**overrides):
    values = dict(
        host=None, port=None, user=None, password=None, database=None,
        sslmode=None, timeout=None, monitor_user=None, monitor_password=None,
        no_create_user=False, json=False, quiet=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


class TestLoad:

    def test_defaults(self):
        config = Config.load(environ={})

        assert config.database.host == "localhost"
        assert config.database.port == 5432
        assert config.monitor.user == "pmm"
        assert config.monitor.create_user is True
        assert config.database.timeout == 10.0

    def test_toml_file(self, tmp_path):
        path = tmp_path / "pg_onboard.toml"
        path.write_text(
            '[database]\nhost = "db01"\nport = 6432\nuser = "admin"\ntimeout = 0\n'
            '[monitor]\nuser = "monitor"\ncreate_user = false\n'
            '[output]\njson = true\n'
        )

        config = Config.load(str(path), environ={})

        assert config.database.host == "db01"
        assert config.database.port == 6432
        assert config.database.user == "admin"
        assert config.database.timeout is None
        assert config.monitor.user == "monitor"
        assert config.monitor.create_user is False
        assert config.output.json is True

    def test_search_paths(self, tmp_path, monkeypatch):
        path = tmp_path / "config.toml"
        path.write_text('[database]\nhost = "found"\n')
        monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [tmp_path / "missing.toml", path])

        config = Config.load(environ={})

        assert config.database.host == "found"
        assert "found" in config.summary()
        assert str(path) in config.summary()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.load(str(tmp_path / "nope.toml"), environ={})

    def test_environment_beats_file(self, tmp_path):
        path = tmp_path / "pg_onboard.toml"
        path.write_text('[database]\nhost = "from-file"\nport = 6432\n')

        config = Config.load(str(path), environ={
            "PGHOST": "from-env",
            "PGPASSWORD": "envsecret",
            "PG_ONBOARD_MONITOR_USER": "envmon",
        })

        assert config.database.host == "from-env"
        assert config.database.port == 6432
        assert config.database.password == "envsecret"
        assert config.monitor.user == "envmon"

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("PGPORT", "6543")
        assert Config.load().database.port == 6543

    def test_args_beat_environment(self):
        config = Config.load(environ={"PGHOST": "from-env", "PGUSER": "envuser"})
        config.override_from_args(make_args(host="from-args", no_create_user=True, timeout=0))

        assert config.database.host == "from-args"
        assert config.database.user == "envuser"
        assert config.monitor.create_user is False
        assert config.database.timeout is None


class TestDerived:

    def test_dsns_share_the_server(self):
        config = Config()
        config.database.host = "db01"
        config.database.password = "admin-secret"
        config.monitor.password = "mon-secret"

        assert config.admin_dsn() == DSN(user="postgres", password="admin-secret", host="db01", connect_timeout=10)
        assert config.monitor_dsn() == DSN(user="pmm", password="mon-secret", host="db01", connect_timeout=10)

    @pytest.mark.parametrize("timeout,expected", [(2.0, 2), (2.5, 3), (None, None)])
    def test_timeout_bounds_connect(self, timeout, expected):
        config = Config()
        config.database.timeout = timeout

        assert config.admin_dsn().connect_kwargs().get("connect_timeout") == expected

    def test_apply_dsn(self):
        config = Config()
        config.database.password = "from-env"

        config.apply_dsn(DSN.from_url("postgres://admin@db02:6432/app?sslmode=require"))

        assert (config.database.host, config.database.port) == ("db02", 6432)
        assert (config.database.user, config.database.name) == ("admin", "app")
        assert config.database.sslmode == "require"
        assert config.database.password == "from-env"

    def test_generates_missing_password_once(self):
        config = Config()

        first = config.ensure_monitor_password()

        assert len(first) >= 16
        assert config.ensure_monitor_password() == first

    def test_keeps_given_password(self):
        config = Config()
        config.monitor.password = "given"
        assert config.ensure_monitor_password() == "given"

    def test_no_password_without_create_user(self):
        config = Config()
        config.monitor.create_user = False
        assert config.ensure_monitor_password() == ""

    def test_summary_hides_password(self):
        config = Config()
        config.database.password = "admin-secret"
        assert "admin-secret" not in config.summary()


class TestValidate:

    def test_valid_defaults(self):
        assert Config().validate() == []

    def test_bad_port(self):
        config = Config()
        config.database.port = 70000
        assert any("port" in e for e in config.validate())

    def test_missing_monitor_user(self):
        config = Config()
        config.monitor.user = ""
        assert config.validate()

    def test_missing_monitor_user_ok_when_not_creating(self):
        config = Config()
        config.monitor.user = ""
        config.monitor.create_user = False
        assert config.validate() == []


class TestExampleConfig:

    def test_written_file_loads(self, tmp_path):
        path = create_example_config(str(tmp_path / "pg_onboard.toml"))

        config = Config.load(str(path), environ={})
        assert config.monitor.user == "pmm"

    def test_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "pg_onboard.toml"
        path.write_text("")
        with pytest.raises(FileExistsError):
            create_example_config(str(path))
