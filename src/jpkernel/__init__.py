""" Python implementation of the transport and message layer of an
    interactive computing kernel: signed multipart messages over ZeroMQ,
    routed by message type to a per-session execution engine.
"""

# Utility components.

from . import json

# Submodules used by multiple other components.

from . import protocol
from . import transport
from . import config
from . import dispatch
from . import engine

# Primary public-facing interfaces.

from . import kernel
__version__ = kernel.version

from .kernel import Kernel, start
from .engine import Engine, PythonEngine

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
