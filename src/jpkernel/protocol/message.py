""" A class representation of a kernel message, and the functions that move
    a message to and from its multipart representation on the wire.

    The multipart layout is the same for the request/response and broadcast
    sockets::

        identities..., <IDS|MSG>, signature, header, parent_header, metadata, content, blob?

    Everything to the left of the delimiter is routing information added by
    the transport; the signature covers the four frames that follow it.
"""

from __future__ import annotations

import logging
import uuid

from typing import Any, Iterable, Optional, Sequence, Tuple

from .. import json
from .fields import DELIMITER
from .signing import Signer

logger = logging.getLogger(__name__)


class MalformedMessage(ValueError):
    """ The multipart frames could not be interpreted as a message: the
        delimiter is missing, frames are missing, or one of the signed
        frames is not a JSON object.
    """


class Message:
    """ The :class:`Message` provides a thin encapsulation of one protocol
        message, inbound or outbound. The fields are largely in order of how
        they are represented on the wire: the routing *identities*, the
        *header*, the *parent_header* of the message being answered, the
        opaque *metadata*, the type-specific *content*, and the optional
        trailing *blob*.

        Inbound messages are constructed by :func:`parse`, which also sets
        the *signature* as received and the *authenticated* flag. Outbound
        messages are typically constructed by :func:`Message.reply`.

        :ivar authenticated: True if the received signature was verified.
        :ivar parts: The cached multipart tuple, once :func:`frames` is called.
        :ivar signature: The signature frame as received, if any.
    """

    def __init__(self, header: Optional[dict] = None, parent_header: Optional[dict] = None,
                 content: Optional[dict] = None, identities: Iterable[bytes] = (),
                 metadata: Optional[dict | str] = None, blob: Optional[bytes] = None):

        if header is None:
            header = dict()
        if parent_header is None:
            parent_header = dict()
        if content is None:
            content = dict()
        if metadata is None:
            metadata = dict()

        self.identities = tuple(identities)
        self.header = header
        self.parent_header = parent_header
        self.metadata = metadata
        self.content = content
        self.blob = blob

        self.authenticated = False
        self.signature = None
        self.parts = None


    def __repr__(self):
        return "Message(%s, authenticated=%s)" % (repr(self.type), self.authenticated)


    @property
    def type(self) -> Optional[str]:
        return self.header.get('msg_type')


    @property
    def session(self) -> Optional[str]:
        return self.header.get('session')


    @classmethod
    def reply(cls, parent: Message, type: str, content: dict) -> Message:
        """ Construct a new :class:`Message` in response to the *parent*
            message. The routing identities are carried over so that the
            response finds its way back to the original requester; the
            username and session are copied from the parent header, and the
            parent header is carried verbatim.
        """

        if parent.authenticated == False:
            raise ValueError('cannot respond to an unauthenticated message')

        header = dict()
        header['msg_id'] = str(uuid.uuid4())
        header['username'] = parent.header.get('username', '')
        header['session'] = parent.header.get('session', '')
        header['msg_type'] = type

        message = cls(header, parent.header, content, parent.identities)
        return message


    def frames(self, signer: Signer) -> Tuple[bytes, ...]:
        """ Serialize the signed fields of this :class:`Message` as JSON,
            sign them with the provided :class:`Signer`, and return the tuple
            that will be used for the multipart transmission on the wire.
            Calling this method multiple times returns the cached tuple.
        """

        parts = self.parts

        if parts is None:

            metadata = self.metadata

            try:
                metadata.encode
            except AttributeError:
                metadata = json.dumps(metadata)
            else:
                metadata = metadata.encode()

            signed = (json.dumps(self.header),
                      json.dumps(self.parent_header),
                      metadata,
                      json.dumps(self.content))

            signature = signer.sign(signed)

            parts = self.identities + (DELIMITER, signature) + signed

            if self.blob is not None:
                parts = parts + (self.blob,)

            self.signature = signature
            self.parts = parts

        return parts


# end of class Message



def parse(parts: Sequence[bytes], signer: Signer) -> Message:
    """ Interpret the multipart *parts* received from a socket as a
        :class:`Message`. The signature is checked against the provided
        :class:`Signer` before anything is decoded; if it does not match, the
        returned message has its *authenticated* attribute set to False and
        its header, parent header and content are left empty.

        :class:`MalformedMessage` is raised if the frames cannot be split into
        the expected fields, or if an authenticated message does not contain
        JSON objects where they are expected.
    """

    try:
        identities, remainder = signer.split(parts)
    except ValueError:
        raise MalformedMessage('message delimiter not found')

    if len(remainder) < 5:
        raise MalformedMessage("expected at least 6 frames after the routing identities, received %d" % (len(remainder) + 1))

    signature = remainder[0]
    signed = remainder[1:5]

    try:
        blob = remainder[5]
    except IndexError:
        blob = None

    message = Message(identities=identities, blob=blob)
    message.signature = signature
    message.authenticated = signer.verify(signature, signed)

    if message.authenticated == False:
        return message

    header, parent_header, metadata, content = signed

    message.header = _decode(header, 'header')
    message.parent_header = _decode(parent_header, 'parent_header')
    message.metadata = metadata.decode('utf-8', errors='replace')
    message.content = _decode(content, 'content')

    return message



def respond(endpoint: Any, parent: Message, type: str, content: dict, signer: Signer) -> Message:
    """ Construct a message of the requested *type* in response to *parent*,
        sign it, and send it via *endpoint*, which can be any object with a
        ``send()`` method accepting a tuple of frames. Any exception raised
        by the endpoint is left for the caller to handle.
    """

    message = Message.reply(parent, type, content)
    endpoint.send(message.frames(signer))

    logger.debug("sent %s in response to %s %s", type, parent.type, parent.header.get('msg_id'))
    return message



def _decode(frame, name):
    """ Decode a single signed frame, which is expected to be a JSON object.
    """

    try:
        decoded = json.loads(frame)
    except (ValueError, json.DecodeError) as e:
        raise MalformedMessage("%s is not valid JSON: %s" % (name, str(e)))

    if isinstance(decoded, dict):
        pass
    else:
        raise MalformedMessage("%s is not a JSON object" % (name))

    return decoded


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
