import jpkernel
import logging
import pytest

from jpkernel.dispatch import Dispatcher
from jpkernel.protocol import Message


def frames(signer, header, content=None):
    message = Message(header, dict(), content, (b'client-1',))
    return message.frames(signer)


def test_register():

    dispatcher = Dispatcher(jpkernel.protocol.Signer(b'secret'))

    def handler(message):
        pass

    dispatcher.register('kernel_info_request', handler)
    assert 'kernel_info_request' in dispatcher

    with pytest.raises(KeyError):
        dispatcher.register('kernel_info_request', handler)

    with pytest.raises(TypeError):
        dispatcher.register('execute_request', 'not callable')

    for bad in ('', None, 42):
        with pytest.raises(ValueError):
            dispatcher.register(bad, handler)

    assert 'execute_request' not in dispatcher


def test_dispatch(signer, make_request):

    dispatcher = Dispatcher(signer)
    handled = list()

    def handler(message):
        handled.append(message)
        return 'handled'

    dispatcher.register('execute_request', handler)

    header = make_request('execute_request')
    result = dispatcher.incoming(frames(signer, header, {'code': '1+1'}))

    assert result == 'handled'
    assert len(handled) == 1
    assert handled[0].authenticated == True
    assert handled[0].header == header
    assert handled[0].content == {'code': '1+1'}


def test_unauthenticated_never_dispatched(signer, make_request):

    dispatcher = Dispatcher(signer)
    handled = list()

    dispatcher.register('execute_request', handled.append)
    dispatcher.register('kernel_info_request', handled.append)

    forger = jpkernel.protocol.Signer(b'guessing')

    for type in ('execute_request', 'kernel_info_request', 'nonexistent_request'):
        header = make_request(type)
        result = dispatcher.incoming(frames(forger, header))
        assert result is None

    assert handled == list()


def test_unknown_type(signer, make_request, caplog):

    dispatcher = Dispatcher(signer)
    handled = list()
    dispatcher.register('execute_request', handled.append)

    header = make_request('nonexistent_request')

    with caplog.at_level(logging.WARNING, logger='jpkernel.dispatch'):
        result = dispatcher.incoming(frames(signer, header))

    assert result is None
    assert handled == list()
    assert 'nonexistent_request' in caplog.text


def test_missing_type(signer):

    dispatcher = Dispatcher(signer)
    handled = list()
    dispatcher.register('execute_request', handled.append)

    result = dispatcher.incoming(frames(signer, dict()))

    assert result is None
    assert handled == list()


def test_malformed_dropped(signer):

    dispatcher = Dispatcher(signer)
    handled = list()
    dispatcher.register('execute_request', handled.append)

    signed = (b'{"msg_type": "execute_request"', b'{}', b'{}', b'{}')
    parts = (b'client', jpkernel.protocol.fields.DELIMITER, signer.sign(signed)) + signed

    assert dispatcher.incoming(parts) is None
    assert dispatcher.incoming((b'no', b'delimiter')) is None
    assert handled == list()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
