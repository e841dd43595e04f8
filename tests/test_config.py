import jpkernel
import os
import pytest


connection = b'''{
    "transport": "tcp",
    "ip": "127.0.0.1",
    "shell_port": 53794,
    "iopub_port": 53795,
    "stdin_port": 53796,
    "control_port": 53797,
    "hb_port": 53798,
    "signature_scheme": "hmac-sha256",
    "key": "a0436f6c-1916-498b-8eb9-e81ab9368e84",
    "kernel_name": "ignored"
}'''


def write(tmp_path, contents):
    filename = tmp_path / 'kernel.json'
    filename.write_bytes(contents)
    return str(filename)


def test_load(tmp_path):

    configuration = jpkernel.config.load(write(tmp_path, connection))

    assert configuration.transport == 'tcp'
    assert configuration.ip == '127.0.0.1'
    assert configuration.shell_port == 53794
    assert configuration.iopub_port == 53795
    assert configuration.hb_port == 53798
    assert configuration.stdin_port == 53796
    assert configuration.control_port == 53797
    assert configuration.key == 'a0436f6c-1916-498b-8eb9-e81ab9368e84'
    assert configuration.signature_scheme == 'hmac-sha256'

    assert configuration.protocol_version == '5.0'
    assert configuration.protocol_major == 5
    assert configuration.hide_undefined == False
    assert configuration.working_directory == os.getcwd()
    assert configuration.startup_script is None

    assert configuration.address(configuration.shell_port) == 'tcp://127.0.0.1:53794'

    signer = configuration.signer()
    assert signer.key == b'a0436f6c-1916-498b-8eb9-e81ab9368e84'
    assert signer.scheme == 'hmac-sha256'


def test_overrides(tmp_path):

    configuration = jpkernel.config.load(write(tmp_path, connection),
                                         protocol_version='4.1',
                                         hide_undefined=True,
                                         working_directory=str(tmp_path),
                                         startup_script=None)

    assert configuration.protocol_version == '4.1'
    assert configuration.protocol_major == 4
    assert configuration.hide_undefined == True
    assert configuration.working_directory == str(tmp_path)
    assert configuration.startup_script is None


def test_defaults(tmp_path):

    minimal = b'{"shell_port": 1, "iopub_port": 2, "hb_port": 3}'
    configuration = jpkernel.config.load(write(tmp_path, minimal))

    assert configuration.transport == 'tcp'
    assert configuration.ip == '127.0.0.1'
    assert configuration.key == ''
    assert configuration.signature_scheme == 'hmac-sha256'
    assert configuration.stdin_port is None
    assert bool(configuration.signer()) == False


def test_invalid(tmp_path):

    bad = (b'not json',
           b'[1, 2, 3]',
           b'{"iopub_port": 2, "hb_port": 3}',
           b'{"shell_port": "shell", "iopub_port": 2, "hb_port": 3}',
           b'{"shell_port": true, "iopub_port": 2, "hb_port": 3}',
           b'{"shell_port": 70000, "iopub_port": 2, "hb_port": 3}',
           b'{"shell_port": 2, "iopub_port": 2, "hb_port": 3}',
           b'{"shell_port": 1, "iopub_port": 2, "hb_port": 3, "signature_scheme": "hmac-nonexistent"}',
           b'{"shell_port": 1, "iopub_port": 2, "hb_port": 3, "protocol_version": "five"}')

    for contents in bad:
        with pytest.raises(ValueError):
            jpkernel.config.load(write(tmp_path, contents))


def test_missing_file(tmp_path):

    with pytest.raises(OSError):
        jpkernel.config.load(str(tmp_path / 'nonexistent.json'))


def test_protocol_versions():

    for version in ('5', '5.3', '4.1.0'):
        configuration = jpkernel.config.Configuration(1, 2, 3, protocol_version=version)
        assert configuration.protocol_version == version

    for version in ('', '5.', 'v5', '5.0.0.0'):
        with pytest.raises(ValueError):
            jpkernel.config.Configuration(1, 2, 3, protocol_version=version)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
