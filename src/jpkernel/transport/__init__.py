"""ZeroMQ endpoints for the kernel: request/response, broadcast, heartbeat."""

from .base import (
    TransportError,
    TransportPortError,
)

from . import heartbeat
from . import publish
from . import request
