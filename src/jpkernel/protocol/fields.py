""" Constants for the kernel wire protocol: the frame delimiter, message
    types, and reply status values.
"""

DELIMITER = b'<IDS|MSG>'

# Requests handled by the kernel, and their replies.

KERNEL_INFO_REQUEST = 'kernel_info_request'
KERNEL_INFO_REPLY = 'kernel_info_reply'
EXECUTE_REQUEST = 'execute_request'
EXECUTE_REPLY = 'execute_reply'

# Broadcast message types changed names with version 5.0 of the protocol.
# The keys here are the roles; the values are (5.x name, 4.x name).

BROADCASTS = {
    'input':  ('execute_input', 'pyin'),
    'output': ('execute_result', 'pyout'),
    'error':  ('error', 'pyerr'),
}

OK = 'ok'
ERROR = 'error'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
