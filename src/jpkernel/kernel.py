""" The :class:`Kernel` ties the endpoints, the message protocol, and the
    execution engine together: it answers ``kernel_info_request`` and
    ``execute_request`` messages, and broadcasts the progress of each
    execution to every subscriber.
"""

from __future__ import annotations

import logging
import platform
import sys

from typing import Any, Optional, Sequence

from . import dispatch
from . import protocol
from . import transport
from .engine import Engine, ExecutionTask, Failure, Success
from .config import Configuration
from .protocol import fields

logger = logging.getLogger(__name__)

version = '0.1.0'


class Kernel:
    """ The :class:`Kernel` holds everything needed to answer requests: the
        *signer* used to authenticate incoming messages and sign outgoing
        ones, the *engine* that runs submitted code, and the endpoints.
        *request* and *publish* can be any objects with a ``send()`` method
        accepting a tuple of frames; the *heartbeat* is only retained so that
        it can be closed along with the rest.

        Use :func:`start` to create a :class:`Kernel` bound to real sockets.

        :ivar dispatcher: The :class:`jpkernel.dispatch.Dispatcher` routing
            incoming requests to the ``req_*`` methods.
    """

    def __init__(self, signer: protocol.Signer, engine: Engine, request: Any, publish: Any,
                 heartbeat: Optional[Any] = None, protocol_version: str = '5.0'):

        self.signer = signer
        self.engine = engine
        self.request = request
        self.publish = publish
        self.heartbeat = heartbeat
        self.protocol_version = protocol_version

        major = int(protocol_version.split('.')[0])

        if major >= 5:
            index = 0
        else:
            index = 1

        self.broadcasts = dict()
        for role,names in fields.BROADCASTS.items():
            self.broadcasts[role] = names[index]

        self.dispatcher = dispatch.Dispatcher(signer)
        self.dispatcher.register(fields.KERNEL_INFO_REQUEST, self.req_kernel_info)
        self.dispatcher.register(fields.EXECUTE_REQUEST, self.req_execute)


    def incoming(self, parts: Sequence[bytes]) -> Any:
        """ Handle the multipart *parts* of one request received on the
            request/response endpoint.
        """

        return self.dispatcher.incoming(parts)


    def respond(self, endpoint, parent, type, content):
        return protocol.respond(endpoint, parent, type, content, self.signer)


    def broadcast(self, parent, role, content):
        type = self.broadcasts[role]
        return self.respond(self.publish, parent, type, content)


    def kernel_info(self) -> dict:
        """ Return the content of a ``kernel_info_reply``. The structure
            changed considerably with version 5.0 of the protocol.
        """

        major = int(self.protocol_version.split('.')[0])

        if major <= 4:
            content = dict()
            content['language'] = 'python'
            content['language_version'] = list(sys.version_info[:3])
            content['protocol_version'] = [int(number) for number in self.protocol_version.split('.')]
            return content

        python_version = platform.python_version()

        language_info = dict()
        language_info['name'] = 'python'
        language_info['version'] = python_version
        language_info['mimetype'] = 'text/x-python'
        language_info['file_extension'] = '.py'

        help_link = dict()
        help_link['text'] = 'Python Reference'
        help_link['url'] = 'https://docs.python.org/3/'

        content = dict()
        content['protocol_version'] = self.protocol_version
        content['implementation'] = 'jpkernel'
        content['implementation_version'] = version
        content['language'] = 'python'
        content['language_version'] = python_version
        content['language_info'] = language_info
        content['banner'] = "jpkernel v%s\nPython %s\n" % (version, python_version)
        content['help_links'] = [help_link]

        return content


    def req_kernel_info(self, request):

        content = self.kernel_info()
        self.respond(self.request, request, fields.KERNEL_INFO_REPLY, content)


    def req_execute(self, request):
        """ Submit the code in the request to the engine. Everything after
            this point happens in the task hooks, which may be invoked
            immediately or at some later time by the engine.
        """

        code = request.content.get('code')

        if isinstance(code, str):
            pass
        else:
            logger.warning("ignoring execute_request without a code string: %s", repr(code))
            return

        task = ExecutionTask(code, request.session, request,
                             before_run=self._execute_before,
                             after_run=self._execute_after,
                             complete=self._execute_complete)

        self.engine.submit(task)


    def _execute_before(self, task, state):

        # The count is incremented when the execution completes; the echo
        # announces the count this execution is going to have.

        content = dict()
        content['execution_count'] = state.execution_count + 1
        content['code'] = task.code

        self.broadcast(task.request, 'input', content)


    def _execute_after(self, task, state):
        pass


    def _execute_complete(self, task, state, result):

        request = task.request
        count = state.execution_count

        if isinstance(result, Success):
            reply = dict()
            reply['status'] = fields.OK
            reply['execution_count'] = count
            reply['payload'] = list()
            reply['user_variables'] = dict()
            reply['user_expressions'] = dict()

            output = dict()
            output['execution_count'] = count
            output['data'] = result.mime
            output['metadata'] = dict()

            self.respond(self.request, request, fields.EXECUTE_REPLY, reply)
            self.broadcast(request, 'output', output)

        elif isinstance(result, Failure):
            reply = dict()
            reply['status'] = fields.ERROR
            reply['execution_count'] = count
            reply['ename'] = result.ename
            reply['evalue'] = result.evalue
            reply['traceback'] = result.traceback

            error = dict()
            error['execution_count'] = count
            error['ename'] = result.ename
            error['evalue'] = result.evalue
            error['traceback'] = result.traceback

            self.respond(self.request, request, fields.EXECUTE_REPLY, reply)
            self.broadcast(request, 'error', error)

        else:
            raise TypeError('unexpected execution result: ' + repr(result))


    def close(self):
        """ Close the endpoints. The engine is left alone, it belongs to
            whoever created it.
        """

        for endpoint in (self.request, self.publish, self.heartbeat):
            if endpoint is None:
                continue

            try:
                endpoint.close
            except AttributeError:
                continue

            endpoint.close()


# end of class Kernel



def start(config: Configuration, engine: Engine) -> Kernel:
    """ Bind the three endpoints described by the
        :class:`jpkernel.config.Configuration` *config*, and begin serving
        requests with the provided *engine*. Returns the running
        :class:`Kernel`.

        If any endpoint cannot be bound, the endpoints already bound are
        closed and :class:`jpkernel.transport.TransportPortError` is raised.
    """

    bound = list()

    try:
        heartbeat = transport.heartbeat.Server(config.address(config.hb_port))
        bound.append(heartbeat)

        publish = transport.publish.Server(config.address(config.iopub_port))
        bound.append(publish)

        request = transport.request.Server(config.address(config.shell_port))
        bound.append(request)
    except transport.TransportPortError:
        for endpoint in bound:
            endpoint.close()
        raise

    kernel = Kernel(config.signer(), engine, request, publish, heartbeat, config.protocol_version)

    heartbeat.start()
    request.start(kernel.incoming)

    return kernel


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
