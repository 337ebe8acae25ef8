import importlib

import pytest

import config


@pytest.fixture
def reload_config(monkeypatch):
    def reload(**env):
        for name in ('STUDENT_RECORDS_DB', 'MARK_SCHEME', 'PASS_THRESHOLD', 'TOPPER_LIMIT', 'LOG_DIR'):
            monkeypatch.delenv(name, raising=False)
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(config)

    yield reload
    monkeypatch.undo()
    importlib.reload(config)


def test_defaults(reload_config):
    settings = reload_config()

    assert settings.DATABASE_PATH == 'student_records.db'
    assert settings.LOG_DIR == 'logs'
    assert settings.PASS_THRESHOLD == 40
    assert settings.TOPPER_LIMIT == 3
    assert settings.get_active_scheme().name == 'C'


def test_environment_overrides(reload_config):
    settings = reload_config(MARK_SCHEME='a', PASS_THRESHOLD='35.5', TOPPER_LIMIT='5',
                             STUDENT_RECORDS_DB='/tmp/records.db')

    assert settings.get_active_scheme().name == 'A'
    assert settings.PASS_THRESHOLD == 35.5
    assert settings.TOPPER_LIMIT == 5
    assert settings.DATABASE_PATH == '/tmp/records.db'


def test_invalid_numbers_fall_back(reload_config):
    settings = reload_config(PASS_THRESHOLD='forty', TOPPER_LIMIT='')

    assert settings.PASS_THRESHOLD == 40
    assert settings.TOPPER_LIMIT == 3


def test_command_line_scheme_overrides_setting(reload_config):
    settings = reload_config(MARK_SCHEME='B')

    assert settings.get_active_scheme().name == 'B'
    assert settings.get_active_scheme('a').name == 'A'
    assert settings.get_active_scheme('').name == 'B'
