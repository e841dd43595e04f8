""" The broadcast endpoint: a ZeroMQ PUB socket that fans messages out to
    every connected subscriber. It never receives.
"""

from __future__ import annotations

import logging
import threading
import zmq

from typing import Optional, Sequence

from .base import bind

logger = logging.getLogger(__name__)


class Server:
    """ Send broadcasts via a ZeroMQ PUB socket bound to the requested
        *address*, a full ZeroMQ endpoint such as ``tcp://127.0.0.1:5556``.

        :ivar address: The address this server is bound to.
    """

    def __init__(self, address: str, context: Optional[zmq.Context] = None):

        if context is None:
            context = zmq.Context.instance()

        self.address = address
        self.socket = context.socket(zmq.PUB)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket_lock = threading.Lock()

        bind(self.socket, address)
        logger.info("broadcast endpoint bound to %s", address)


    def send(self, parts: Sequence[bytes]) -> None:
        """ Send the multipart *parts* to any/all subscribers.
        """

        # The lock around the ZeroMQ socket is necessary in a multithreaded
        # application; otherwise, if two different threads both invoke
        # send_multipart(), the message parts can and will get mixed together.

        self.socket_lock.acquire()
        try:
            self.socket.send_multipart(parts)
        finally:
            self.socket_lock.release()


    def close(self) -> None:
        self.socket_lock.acquire()
        try:
            self.socket.close(linger=0)
        finally:
            self.socket_lock.release()


# end of class Server


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
