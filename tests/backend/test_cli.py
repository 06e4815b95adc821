from datastore_lib import cli
from datastore_lib.config import DatastoreConfig, DatastoreOptions, save_config


def test_put_get_has_delete(tmp_path, capsysbinary):
    root = str(tmp_path / 'store')
    assert cli.main(['--root', root, 'put', '/a/b', 'hello']) == 0
    assert (tmp_path / 'store' / 'a' / 'b.data').read_bytes() == b'hello'

    assert cli.main(['--root', root, 'get', '/a/b']) == 0
    assert capsysbinary.readouterr().out == b'hello'

    assert cli.main(['--root', root, 'has', '/a/b']) == 0
    assert capsysbinary.readouterr().out.strip() == b'true'

    assert cli.main(['--root', root, 'delete', '/a/b']) == 0
    assert cli.main(['--root', root, 'has', '/a/b']) == 1
    assert cli.main(['--root', root, 'get', '/a/b']) == 1
    assert b'Not found' in capsysbinary.readouterr().err


def test_put_from_file_and_raw(tmp_path, capsysbinary):
    root = str(tmp_path / 'store')
    src = tmp_path / 'payload.bin'
    src.write_bytes(b'\x00\x01binary')
    assert cli.main(['--root', root, 'put', '/blob', '--file', str(src), '--raw']) == 0
    assert (tmp_path / 'store' / 'blob').read_bytes() == b'\x00\x01binary'
    assert cli.main(['--root', root, 'get', '--raw', '/blob']) == 0
    assert capsysbinary.readouterr().out == b'\x00\x01binary'


def test_query_output(tmp_path, capsys):
    root = str(tmp_path / 'store')
    for key in ('/a/2', '/a/1', '/b/1'):
        assert cli.main(['--root', root, 'put', key, key.upper()]) == 0
    capsys.readouterr()

    assert cli.main(['--root', root, 'query', '--prefix', '/a', '--keys-only', '--sort']) == 0
    assert capsys.readouterr().out.splitlines() == ['/a/1', '/a/2']

    assert cli.main(['--root', root, 'query', '--sort', '--limit', '1']) == 0
    assert capsys.readouterr().out.splitlines() == ['/a/1\t/A/1']


def test_no_create_on_missing_root(tmp_path, capsys):
    root = str(tmp_path / 'missing')
    assert cli.main(['--root', root, '--no-create', 'init']) == 1
    assert 'does not exist' in capsys.readouterr().err


def test_config_file_supplies_path_and_extension(tmp_path, capsys):
    cfg_path = tmp_path / 'datastore.yml'
    save_config(cfg_path, DatastoreConfig(path=str(tmp_path / 'cfgstore'),
                                          options=DatastoreOptions(extension='.blob')))
    assert cli.main(['--config', str(cfg_path), 'put', '/k', 'v']) == 0
    assert (tmp_path / 'cfgstore' / 'k.blob').read_bytes() == b'v'


def test_missing_explicit_config_is_an_error(tmp_path, capsys):
    assert cli.main(['--config', str(tmp_path / 'nope.yml'), 'init']) == 2
    assert 'Configuration error' in capsys.readouterr().err


def test_invalid_extension_is_an_error(tmp_path, capsys):
    assert cli.main(['--root', str(tmp_path), '--extension', 'bad', 'init']) == 2


def test_print_template(capsys):
    assert cli.main(['print-template']) == 0
    out = capsys.readouterr().out
    assert 'extension: .data' in out
    assert 'create_if_missing: true' in out


def test_put_with_missing_value_file_is_an_error(tmp_path, capsys):
    root = str(tmp_path / 'store')
    assert cli.main(['--root', root, 'put', '/k', '--file', str(tmp_path / 'nope')]) == 2
    assert 'I/O error' in capsys.readouterr().err
    assert not (tmp_path / 'store' / 'k.data').exists()
