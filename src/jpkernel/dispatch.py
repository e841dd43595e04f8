""" Route authenticated requests to the handler registered for their message
    type.
"""

from __future__ import annotations

import logging

from typing import Any, Callable, Sequence

from . import protocol

logger = logging.getLogger(__name__)


class Dispatcher:
    """ Maintain an explicit mapping of message type to handler, and route
        each incoming request accordingly. The *signer* is the
        :class:`jpkernel.protocol.Signer` used to authenticate requests.

        Requests that fail authentication, or that cannot be decoded, are
        dropped without a response; so are requests with a message type that
        has no registered handler.
    """

    def __init__(self, signer: protocol.Signer):

        self.signer = signer
        self.handlers = dict()


    def __contains__(self, type):
        return type in self.handlers


    def register(self, type: str, handler: Callable[[protocol.Message], Any]) -> None:
        """ Register the *handler* to be invoked with the parsed
            :class:`jpkernel.protocol.Message` for every authenticated
            request of the given *type*.
        """

        if isinstance(type, str) and type != '':
            pass
        else:
            raise ValueError('message type must be a non-empty string: ' + repr(type))

        if callable(handler):
            pass
        else:
            raise TypeError('handler must be callable')

        if type in self.handlers:
            raise KeyError('a handler is already registered for ' + repr(type))

        self.handlers[type] = handler


    def incoming(self, parts: Sequence[bytes]) -> Any:
        """ Parse the multipart *parts* of a request and invoke the matching
            handler, if any. Returns the handler's return value, or None if
            the request was dropped.
        """

        try:
            message = protocol.parse(parts, self.signer)
        except protocol.MalformedMessage as e:
            logger.debug("dropping malformed request: %s", str(e))
            return

        if message.authenticated == False:
            logger.debug('dropping request with an invalid signature')
            return

        type = message.type

        try:
            handler = self.handlers[type]
        except (KeyError, TypeError):
            logger.warning("ignoring unsupported request type: %s", repr(type))
            return

        logger.debug("handling %s %s from session %s", type, message.header.get('msg_id'), message.session)
        return handler(message)


# end of class Dispatcher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
