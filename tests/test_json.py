import json
import jpkernel


def test_json_encode_and_decode():
    encode_and_decode(json.dumps, json.loads, dump_is_bytes=False)


def test_jpkernel_encode_and_decode():
    encode_and_decode(jpkernel.json.dumps, jpkernel.json.loads)


def test_compact_and_ordered():

    # The encoded form is what gets signed, the same input must always
    # produce the same bytes.

    header = dict()
    header['msg_id'] = 'abc'
    header['username'] = 'tester'
    header['session'] = 'session-1'
    header['msg_type'] = 'execute_request'

    encoded = jpkernel.json.dumps(header)
    assert encoded == b'{"msg_id":"abc","username":"tester","session":"session-1","msg_type":"execute_request"}'
    assert jpkernel.json.dumps(header) == encoded

    assert jpkernel.json.dumps(dict()) == b'{}'


def encode_and_decode(dumps, loads, dump_is_bytes=True):

    input_dictionary = dict()
    input_dictionary['list'] = [1, 2, 3, 'a', 'b', None, 'c', 'z']
    input_dictionary['dict'] = {'one': 1, 'two': 2}
    input_dictionary['none'] = None
    input_dictionary['true'] = True
    input_dictionary['false'] = False
    input_dictionary['text'] = 'café'

    encoded = dumps(input_dictionary)

    if dump_is_bytes:
        assert isinstance(encoded, bytes)
    else:
        assert isinstance(encoded, str)

    # It won't do to compare the encoded JSON against a pre-set notion of
    # what the encoded output should look like, as there is variance in
    # the handling of whitespace between the different modules.

    decoded = loads(encoded)
    assert isinstance(decoded, dict)
    assert decoded == input_dictionary


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
