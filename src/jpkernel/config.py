""" Load the connection file handed to the kernel by its launcher, along with
    the handful of settings that establish the identity of the kernel.

    A connection file is a JSON object along these lines::

        {
            "transport": "tcp",
            "ip": "127.0.0.1",
            "shell_port": 53794,
            "iopub_port": 53795,
            "hb_port": 53798,
            "stdin_port": 53796,
            "control_port": 53797,
            "signature_scheme": "hmac-sha256",
            "key": "a0436f6c-1916-498b-8eb9-e81ab9368e84"
        }
"""

from __future__ import annotations

import os

from . import json
from . import protocol


default_protocol = '5.0'

# Ports the kernel binds, and ports a connection file may carry that this
# kernel does not serve.

required_ports = ('shell_port', 'iopub_port', 'hb_port')
optional_ports = ('stdin_port', 'control_port')

# Every field that load() will accept from a connection file.

fields = required_ports + optional_ports + ('ip', 'transport', 'key',
         'signature_scheme', 'protocol_version', 'hide_undefined',
         'working_directory', 'startup_script')


class Configuration:
    """ A static description of how the kernel should connect, and how it
        should describe itself. Instances are normally created by
        :func:`load`; the constructor accepts the same fields as keyword
        arguments, and will raise ValueError if any of them are invalid.
    """

    def __init__(self, shell_port=None, iopub_port=None, hb_port=None,
                 ip='127.0.0.1', transport='tcp', key='',
                 signature_scheme=protocol.signing.default_scheme,
                 stdin_port=None, control_port=None,
                 protocol_version=default_protocol, hide_undefined=False,
                 working_directory=None, startup_script=None):

        self.transport = transport
        self.ip = ip
        self.key = key if key is not None else ''
        self.signature_scheme = signature_scheme or protocol.signing.default_scheme

        self.shell_port = _port('shell_port', shell_port)
        self.iopub_port = _port('iopub_port', iopub_port)
        self.hb_port = _port('hb_port', hb_port)
        self.stdin_port = _port('stdin_port', stdin_port, required=False)
        self.control_port = _port('control_port', control_port, required=False)

        ports = (self.shell_port, self.iopub_port, self.hb_port)
        if len(set(ports)) != len(ports):
            raise ValueError("shell_port, iopub_port, and hb_port must be distinct: %s" % (repr(ports)))

        self.protocol_version = _protocol(protocol_version)
        self.hide_undefined = bool(hide_undefined)

        if working_directory is None:
            working_directory = os.getcwd()

        self.working_directory = working_directory
        self.startup_script = startup_script

        # Fail now, rather than at the first request, if the scheme is bad.

        self.signer()


    def __repr__(self):
        return "Configuration(%s, shell=%d, iopub=%d, hb=%d)" % (repr(self.ip), self.shell_port, self.iopub_port, self.hb_port)


    @property
    def protocol_major(self) -> int:
        major = self.protocol_version.split('.')[0]
        return int(major)


    def address(self, port: int) -> str:
        """ Return the full ZeroMQ address for the requested *port*.
        """

        return "%s://%s:%d" % (self.transport, self.ip, port)


    def signer(self) -> protocol.Signer:
        """ Return a :class:`jpkernel.protocol.Signer` for the configured
            key and signature scheme.
        """

        return protocol.Signer(self.key, self.signature_scheme)


# end of class Configuration



def load(filename: str, **overrides) -> Configuration:
    """ Load the connection file *filename* and return a :class:`Configuration`
        instance. Any keyword arguments override the contents of the file;
        arguments with a value of None are ignored.
    """

    raw = open(filename, 'rb').read()

    try:
        contents = json.loads(raw)
    except (ValueError, json.DecodeError) as e:
        raise ValueError("connection file %s is not valid JSON: %s" % (filename, str(e)))

    if isinstance(contents, dict):
        pass
    else:
        raise ValueError("connection file %s does not contain a JSON object" % (filename))

    arguments = dict()

    for field in fields:
        try:
            arguments[field] = contents[field]
        except KeyError:
            pass

    for field,value in overrides.items():
        if value is None:
            continue
        arguments[field] = value

    return Configuration(**arguments)



def _port(name, value, required=True):

    if value is None:
        if required:
            raise ValueError('missing required field: ' + name)
        return None

    if isinstance(value, bool):
        raise ValueError("%s must be an integer, not %s" % (name, repr(value)))

    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ValueError("%s must be an integer, not %s" % (name, repr(value)))

    if port < 0 or port > 65535:
        raise ValueError("%s is out of range: %d" % (name, port))

    return port



def _protocol(version):
    """ Validate a protocol version of the form Major[.minor[.patch]], and
        return it as a string.
    """

    version = str(version).strip()
    pieces = version.split('.')

    if len(pieces) > 3:
        raise ValueError('invalid protocol version: ' + repr(version))

    for piece in pieces:
        if piece.isdigit():
            pass
        else:
            raise ValueError('invalid protocol version: ' + repr(version))

    return version


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
