"""Transport-level exceptions and helpers shared by the ZeroMQ endpoints."""

import zmq


class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportPortError(TransportError):
    """An endpoint could not be bound to its configured address."""


def bind(socket, address):
    """ Bind *socket* to *address*. On failure the socket is closed and a
        :class:`TransportPortError` is raised; a kernel cannot serve with
        a partial set of endpoints.
    """

    try:
        socket.bind(address)
    except zmq.ZMQError as exc:
        socket.close(linger=0)
        raise TransportPortError("cannot bind %s: %s" % (address, str(exc))) from exc


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
