""" The kernel messaging protocol: the message model, its wire encoding, and
    the signatures that authenticate it. Nothing here depends on ZeroMQ;
    :mod:`jpkernel.transport` moves the encoded frames.
"""

from . import fields
from . import signing
from . import message

from .message import Message, MalformedMessage, parse, respond
from .signing import Signer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
