""" Message authentication for the signed portion of a kernel message.
    The signature is a keyed MAC over the header, parent header, metadata,
    and content frames, in that order, expressed as a lowercase hex digest.
    The MAC itself is computed by :class:`jupyter_client.session.Session`.
"""

from __future__ import annotations

import hmac

from typing import Iterable, Sequence, Tuple, Union

from jupyter_client.session import Session
from traitlets import TraitError


default_scheme = 'hmac-sha256'


class Signer:
    """ Compute and verify message signatures. The *scheme* is expressed the
        same way it is in a connection file, as 'hmac-' followed by the name
        of a fixed-length :mod:`hashlib` algorithm; the *key* is the shared
        secret, as either a string or bytes.

        An empty *key* puts the :class:`Signer` in unsigned mode: the
        signature of any message is the empty string, and any signature
        is accepted as valid.

        :ivar algorithm: The :mod:`hashlib` algorithm name used for the MAC.
        :ivar scheme: The scheme name, as originally specified.
        :ivar session: The :class:`jupyter_client.session.Session` that
            computes the signatures.
    """

    def __init__(self, key: Union[str, bytes, None] = b'', scheme: Union[str, None] = default_scheme):

        if key is None:
            key = b''

        try:
            key.decode
        except AttributeError:
            key = key.encode()

        if scheme is None or scheme == '':
            scheme = default_scheme

        # Session checks the prefix and the hashlib name. The digest below
        # rejects variable-length algorithms such as shake_128.

        try:
            session = Session(key=key, signature_scheme=scheme)
            hmac.new(b'', digestmod=session.digest_mod).hexdigest()
        except (TraitError, TypeError, ValueError) as e:
            raise ValueError('unsupported signature scheme: ' + repr(scheme)) from e

        self.algorithm = scheme.split('-', 1)[1]
        self.key = key
        self.scheme = scheme
        self.session = session


    def __bool__(self):
        return len(self.key) > 0


    def sign(self, parts: Iterable[bytes]) -> bytes:
        """ Return the hex signature, as bytes, for the sequence of signed
            frames in *parts*.
        """

        return self.session.sign(list(parts))


    def verify(self, signature: Union[str, bytes], parts: Iterable[bytes]) -> bool:
        """ Return True if *signature* matches the signature computed locally
            for the signed frames in *parts*. Any signature, even a missing
            one, is valid in unsigned mode.
        """

        if len(self.key) == 0:
            return True

        try:
            signature.decode
        except AttributeError:
            signature = signature.encode()

        expected = self.sign(parts)
        return hmac.compare_digest(expected, signature)


    def split(self, parts: Sequence[bytes]) -> Tuple[tuple, tuple]:
        """ Split the multipart *parts* at the delimiter, returning the
            routing identities and the remaining frames. ValueError is
            raised if there is no delimiter.
        """

        identities, remainder = self.session.feed_identities(list(parts), copy=True)
        return tuple(identities), tuple(remainder)


# end of class Signer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
