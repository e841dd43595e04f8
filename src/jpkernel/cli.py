""" Command-line entry point: load a connection file, start the kernel, and
    serve until terminated.
"""

import argparse
import logging
import os
import signal
import sys
import threading

from . import config
from . import engine
from . import kernel
from . import transport

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):

    parser = argparse.ArgumentParser(prog='jpkernel',
        description='Serve a Python kernel on the sockets named in a connection file.')

    parser.add_argument('connection_file',
        help='JSON connection file with the ports and key to use')
    parser.add_argument('--debug', action='store_true', default=False,
        help='log every message handled by the kernel')
    parser.add_argument('--protocol', default=None, metavar='Major[.minor[.patch]]',
        help='messaging protocol version to speak (default: %s)' % (config.default_protocol))
    parser.add_argument('--hide-undefined', dest='hide_undefined', action='store_true', default=None,
        help='do not display a result of None')
    parser.add_argument('--show-undefined', dest='hide_undefined', action='store_false',
        help='display a result of None (default)')
    parser.add_argument('--session-working-dir', dest='working_directory', default=None, metavar='PATH',
        help='working directory for executed code')
    parser.add_argument('--startup-script', dest='startup_script', default=None, metavar='PATH',
        help='Python script to run before serving requests')

    return parser.parse_args(argv)



def setup_logging(debug=False):

    if debug or os.environ.get('DEBUG'):
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format='KERNEL: %(asctime)s %(name)s %(levelname)s %(message)s')



def main(argv=None):

    arguments = parse_arguments(argv)
    setup_logging(arguments.debug)

    try:
        configuration = config.load(arguments.connection_file,
                                    protocol_version=arguments.protocol,
                                    hide_undefined=arguments.hide_undefined,
                                    working_directory=arguments.working_directory,
                                    startup_script=arguments.startup_script)
    except (OSError, ValueError) as e:
        sys.stderr.write("Error: %s\n" % (str(e)))
        return 1

    try:
        os.chdir(configuration.working_directory)
    except OSError as e:
        sys.stderr.write("Error: cannot change to %s: %s\n" % (configuration.working_directory, str(e)))
        return 1

    python = engine.PythonEngine(hide_undefined=configuration.hide_undefined)

    if configuration.startup_script:
        try:
            python.run_startup(configuration.startup_script)
        except Exception as e:
            sys.stderr.write("Error: startup script %s failed: %s\n" % (configuration.startup_script, str(e)))
            python.close()
            return 1

    try:
        running = kernel.start(configuration, python)
    except transport.TransportError as e:
        sys.stderr.write("Error: %s\n" % (str(e)))
        python.close()
        return 1

    stopped = threading.Event()

    def interrupt(signum, frame):
        logger.info('interrupting kernel')
        python.interrupt()

    def terminate(signum, frame):
        stopped.set()

    signal.signal(signal.SIGINT, interrupt)
    signal.signal(signal.SIGTERM, terminate)

    logger.info("kernel running: %s", repr(configuration))

    while stopped.is_set() == False:
        stopped.wait(1)

    running.close()
    python.close()
    return 0



if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
