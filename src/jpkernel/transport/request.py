""" The request/response endpoint: a ZeroMQ ROUTER socket that receives
    requests, prefixed with the routing identities of the requester, and
    sends the replies back along the same route.
"""

from __future__ import annotations

import logging
import queue
import threading
import zmq

from typing import Any, Callable, Optional, Sequence, Tuple

from .base import bind

logger = logging.getLogger(__name__)


class Server:
    """ Receive requests via a ZeroMQ ROUTER socket bound to *address*, and
        send responses. The socket is bound when the :class:`Server` is
        instantiated; requests are processed once :func:`start` is called.

        A single background thread owns the socket: every receive and every
        send happens there. Each arriving request is handed to the *handler*
        provided to :func:`start` and handled to completion before the next
        one is received. Responses may be sent from any thread via
        :func:`send`; they are queued, and the background thread is woken
        up to transmit them in the order they were queued.
    """

    interval = 1000

    def __init__(self, address: str, context: Optional[zmq.Context] = None):

        if context is None:
            context = zmq.Context.instance()

        self.address = address
        self.handler = None

        self.socket = context.socket(zmq.ROUTER)
        self.socket.setsockopt(zmq.LINGER, 0)

        bind(self.socket, address)
        logger.info("request endpoint bound to %s", address)

        # ZeroMQ makes no attempt to be thread-safe; rather than lock the
        # ROUTER socket, responses are queued for the background thread,
        # which is signaled via an inproc socket pair. The lock is for the
        # sending half of the pair, which can be used by any thread.

        self._responses = queue.SimpleQueue()

        internal = "inproc://request.Server:signal:%d" % (id(self))
        self._signal_rx = context.socket(zmq.PAIR)
        self._signal_rx.setsockopt(zmq.LINGER, 0)
        self._signal_rx.bind(internal)
        self._signal_tx = context.socket(zmq.PAIR)
        self._signal_tx.setsockopt(zmq.LINGER, 0)
        self._signal_tx.connect(internal)
        self._signal_lock = threading.Lock()

        self.shutdown = False
        self.thread = None


    def start(self, handler: Callable[[Tuple[bytes, ...]], Any]) -> None:
        """ Begin processing requests. The *handler* will be called with the
            tuple of frames for each request that arrives.
        """

        self.handler = handler

        self.thread = threading.Thread(target=self.run, name='request')
        self.thread.daemon = True
        self.thread.start()


    def _req_incoming(self, parts):
        """ All inbound requests are filtered through this method. An
            exception raised by the handler is logged; it must not stop
            the processing of subsequent requests.
        """

        try:
            self.handler(parts)
        except Exception:
            logger.exception('unhandled exception processing request')


    def send(self, parts: Sequence[bytes]) -> None:
        """ Queue the multipart *parts* for transmission. The leading parts
            are expected to be the routing identities of the recipient.
        """

        self._responses.put(tuple(parts))

        self._signal_lock.acquire()
        try:
            self._signal_tx.send(b'')
        finally:
            self._signal_lock.release()


    def _rep_outgoing(self):
        """ Clear one signal and send one queued response.
        """

        self._signal_rx.recv(flags=zmq.NOBLOCK)
        parts = self._responses.get(block=False)
        self.socket.send_multipart(parts)


    def run(self):

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)
        poller.register(self._signal_rx, zmq.POLLIN)

        while self.shutdown == False:
            sockets = poller.poll(self.interval)
            for active,flag in sockets:
                if active == self._signal_rx:
                    self._rep_outgoing()
                elif active == self.socket:
                    parts = tuple(self.socket.recv_multipart())
                    self._req_incoming(parts)

        # Flush anything that was queued before the shutdown was requested.

        while True:
            try:
                parts = self._responses.get(block=False)
            except queue.Empty:
                break
            self.socket.send_multipart(parts)

        self.socket.close(linger=0)
        self._signal_rx.close(linger=0)


    def close(self) -> None:
        """ Stop the background thread and close the sockets.
        """

        self.shutdown = True

        if self.thread is None:
            self.socket.close(linger=0)
            self._signal_rx.close(linger=0)
        else:
            self.thread.join()

        self._signal_lock.acquire()
        try:
            self._signal_tx.close(linger=0)
        finally:
            self._signal_lock.release()


# end of class Server


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
