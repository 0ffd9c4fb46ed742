from prefs_lib import cli
from prefs_lib.values import ValueKind

import pytest


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / 'preferences.yml'
    path.write_text(f'backend: file\ndata_dir: {tmp_path / "data"}\n', encoding='utf-8')
    return str(path)


def test_parse_value():
    assert cli.parse_value(ValueKind.BOOL, 'Yes') is True
    assert cli.parse_value(ValueKind.BOOL, 'off') is False
    assert cli.parse_value(ValueKind.INT, '-3') == -3
    assert cli.parse_value(ValueKind.DOUBLE, '1') == 1.0
    assert cli.parse_value(ValueKind.STRING_LIST, 'a,b') == ['a', 'b']
    assert cli.parse_value(ValueKind.STRING_LIST, '') == []
    with pytest.raises(ValueError):
        cli.parse_value(ValueKind.BOOL, 'maybe')


def test_set_get_list_remove(config_path, capsys):
    assert cli.main(['--config', config_path, 'set', 'count', '5', '--type', 'int']) == 0
    assert cli.main(['--config', config_path, 'set', 'tags', 'a,b', '--type', 'list']) == 0
    assert cli.main(['--config', config_path, 'set', 'on', 'true', '--type', 'bool']) == 0
    capsys.readouterr()

    assert cli.main(['--config', config_path, 'get', 'count']) == 0
    assert capsys.readouterr().out.strip() == '5'

    assert cli.main(['--config', config_path, 'list']) == 0
    assert capsys.readouterr().out.splitlines() == ['count=5', 'on=true', 'tags=a,b']

    assert cli.main(['--config', config_path, 'remove', 'count']) == 0
    assert cli.main(['--config', config_path, 'get', 'count']) == 1


def test_stores_are_separate(config_path, capsys):
    assert cli.main(['--config', config_path, '--store', 'other', 'set', 'k', 'v']) == 0
    assert cli.main(['--config', config_path, 'get', 'k']) == 1
    assert cli.main(['--config', config_path, '--store', 'other', 'clear']) == 0
    assert cli.main(['--config', config_path, '--store', 'other', 'get', 'k']) == 1


def test_bad_value_is_reported(config_path, capsys):
    assert cli.main(['--config', config_path, 'set', 'n', 'many', '--type', 'int']) == 2
    assert 'error' in capsys.readouterr().err
