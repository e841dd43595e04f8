""" The heartbeat endpoint: a ZeroMQ REP socket that echoes every message it
    receives, unmodified, so that a client can confirm the kernel is alive.
    The echo runs on its own thread and never waits on execution work.
"""

from __future__ import annotations

import logging
import threading
import zmq

from typing import Optional

from .base import bind

logger = logging.getLogger(__name__)


class Server:
    """ Echo whatever arrives on the ZeroMQ REP socket bound to *address*.
        No parsing or authentication is performed. The socket is bound when
        the :class:`Server` is instantiated; the echo thread begins when
        :func:`start` is called.
    """

    interval = 100

    def __init__(self, address: str, context: Optional[zmq.Context] = None):

        if context is None:
            context = zmq.Context.instance()

        self.address = address
        self.socket = context.socket(zmq.REP)
        self.socket.setsockopt(zmq.LINGER, 0)

        bind(self.socket, address)
        logger.info("heartbeat endpoint bound to %s", address)

        self.shutdown = False
        self.thread = None


    def start(self) -> None:
        self.thread = threading.Thread(target=self.run, name='heartbeat')
        self.thread.daemon = True
        self.thread.start()


    def run(self):

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        while self.shutdown == False:
            sockets = poller.poll(self.interval)
            for active,flag in sockets:
                if self.socket == active:
                    parts = self.socket.recv_multipart()
                    self.socket.send_multipart(parts)

        self.socket.close(linger=0)


    def close(self) -> None:
        """ Stop the echo thread and close the socket.
        """

        self.shutdown = True

        if self.thread is None:
            self.socket.close(linger=0)
        else:
            self.thread.join()


# end of class Server


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
