import jpkernel
import pytest
import socket
import uuid

from jpkernel.engine import Engine, SessionState, Success


class Recorder:
    """ Stand-in for an endpoint: record every multipart message sent, both
        locally and in a log shared with the other endpoints, so that the
        relative order of messages across endpoints can be checked.
    """

    def __init__(self, name, log):
        self.name = name
        self.log = log
        self.sent = list()

    def send(self, parts):
        parts = tuple(parts)
        self.sent.append(parts)
        self.log.append((self.name, parts))


class StubEngine(Engine):
    """ Run tasks immediately on submission, without running anything. Each
        task gets the next result from *results*, or a default success.
        Setting *deferred* holds tasks until :func:`run_pending` is called.
    """

    def __init__(self):
        self.results = list()
        self.sessions = dict()
        self.submitted = list()
        self.pending = list()
        self.deferred = False

    def submit(self, task):
        self.submitted.append(task)

        if self.deferred:
            self.pending.append(task)
        else:
            self.run(task)

    def run(self, task):
        try:
            state = self.sessions[task.session]
        except KeyError:
            state = SessionState(task.session)
            self.sessions[task.session] = state

        task.before_run(state)

        if self.results:
            result = self.results.pop(0)
        else:
            result = Success({'text/plain': '2'})

        state.execution_count += 1
        state.result = result

        task.after_run(state)
        task.complete(state, result)

    def run_pending(self):
        pending = self.pending
        self.pending = list()

        for task in pending:
            self.run(task)


class Harness:
    """ A :class:`jpkernel.Kernel` wired to recording endpoints and a stub
        engine.
    """

    def __init__(self, signer, protocol_version='5.0'):
        self.log = list()
        self.signer = signer
        self.request = Recorder('request', self.log)
        self.publish = Recorder('publish', self.log)
        self.engine = StubEngine()
        self.kernel = jpkernel.Kernel(signer, self.engine, self.request, self.publish, protocol_version=protocol_version)

    def send(self, type, content=None, session='session-1', identities=(b'client-1',), signer=None):
        """ Deliver a signed request to the kernel; return its header.
        """

        if signer is None:
            signer = self.signer

        header = request_header(type, session)
        message = jpkernel.protocol.Message(header, dict(), content, identities)
        self.kernel.incoming(message.frames(signer))
        return header

    def received(self):
        """ Return (endpoint name, parsed message) for everything sent.
        """

        received = list()
        for name, parts in self.log:
            received.append((name, jpkernel.protocol.parse(parts, self.signer)))
        return received


def request_header(type, session='session-1'):
    header = dict()
    header['msg_id'] = str(uuid.uuid4())
    header['username'] = 'tester'
    header['session'] = session
    header['msg_type'] = type
    return header


def free_ports(count):
    """ Ask the operating system for *count* ports that are free right now.
    """

    sockets = list()
    ports = list()

    for number in range(count):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.bind(('127.0.0.1', 0))
        ports.append(sock.getsockname()[1])
        sockets.append(sock)

    for sock in sockets:
        sock.close()

    return ports


@pytest.fixture
def signer():
    return jpkernel.protocol.Signer(b'a0436f6c-1916-498b-8eb9-e81ab9368e84')


@pytest.fixture
def harness(signer):
    return Harness(signer)


@pytest.fixture
def make_harness(signer):

    def factory(protocol_version='5.0'):
        return Harness(signer, protocol_version)

    return factory


@pytest.fixture
def make_request():
    return request_header


@pytest.fixture
def ports():
    return free_ports(5)


@pytest.fixture
def configuration(ports):
    shell, iopub, hb, stdin, control = ports
    return jpkernel.config.Configuration(shell_port=shell, iopub_port=iopub, hb_port=hb,
                                         stdin_port=stdin, control_port=control,
                                         key='a0436f6c-1916-498b-8eb9-e81ab9368e84')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
