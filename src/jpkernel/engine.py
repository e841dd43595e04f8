""" The execution engine interface, and a reference engine that runs Python
    source in per-session namespaces.

    The kernel hands each unit of code to an :class:`Engine` as an
    :class:`ExecutionTask`. The engine decides when and where the code runs;
    in return it promises to invoke :func:`ExecutionTask.before_run` before
    running the code, :func:`ExecutionTask.after_run` at most once after,
    and :func:`ExecutionTask.complete` exactly once, with either a
    :class:`Success` or a :class:`Failure` result.
"""

from __future__ import annotations

import ast
import builtins
import ctypes
import logging
import queue
import threading
import traceback

from typing import Callable

logger = logging.getLogger(__name__)


Hook = Callable[["ExecutionTask", "SessionState"], None]


class Success:
    """ The result of code that ran to completion. *mime* is a dictionary
        mapping a MIME type to the rendered value of the result.
    """

    def __init__(self, mime=None):

        if mime is None:
            mime = dict()

        self.mime = mime


    def __repr__(self):
        return 'Success(' + repr(self.mime) + ')'


# end of class Success



class Failure:
    """ The result of code that raised an exception: the exception name
        *ename*, its message *evalue*, and the *traceback* as a list of
        strings.
    """

    def __init__(self, ename, evalue, traceback=None):

        if traceback is None:
            traceback = list()

        self.ename = ename
        self.evalue = evalue
        self.traceback = list(traceback)


    def __repr__(self):
        return "Failure(%s, %s)" % (repr(self.ename), repr(self.evalue))


# end of class Failure



class SessionState:
    """ The execution state the engine keeps for one logical session.

        :ivar execution_count: Incremented once per completed execution
            attempt, whether it succeeded or not.
        :ivar result: The :class:`Success` or :class:`Failure` of the most
            recent execution, or None.
    """

    def __init__(self, session=None):

        self.session = session
        self.execution_count = 0
        self.result = None


# end of class SessionState



class ExecutionTask:
    """ One submitted unit of *code*, bound to a logical *session*. The
        *request* is whatever the submitter needs to act on the outcome;
        the engine does not inspect it.

        The optional *before_run* and *after_run* hooks are called as
        ``hook(task, state)``; the *complete* continuation is called as
        ``complete(task, state, result)``. Repeated invocations of
        :func:`after_run` or :func:`complete` are ignored.
    """

    def __init__(self, code: str, session: str | None = None, request=None,
                 before_run: Hook | None = None, after_run: Hook | None = None,
                 complete: Callable[[ExecutionTask, SessionState, Success | Failure], None] | None = None):

        self.code = code
        self.session = session
        self.request = request

        self._before_run = before_run
        self._after_run = after_run
        self._complete = complete

        self.ran = False
        self.completed = False
        self.lock = threading.Lock()


    def __repr__(self):
        return "ExecutionTask(%s, session=%s)" % (repr(self.code), repr(self.session))


    def before_run(self, state):
        if self._before_run is not None:
            self._before_run(self, state)


    def after_run(self, state):

        self.lock.acquire()
        ran = self.ran
        self.ran = True
        self.lock.release()

        if ran:
            logger.warning("after_run() invoked more than once for %s", repr(self))
            return

        if self._after_run is not None:
            self._after_run(self, state)


    def complete(self, state, result):

        self.lock.acquire()
        completed = self.completed
        self.completed = True
        self.lock.release()

        if completed:
            logger.warning("complete() invoked more than once for %s", repr(self))
            return

        if self._complete is not None:
            self._complete(self, state, result)


# end of class ExecutionTask



class Engine:
    """ The interface the kernel depends on to run code. Subclasses must
        implement :func:`submit`; :func:`interrupt` is optional.
    """

    def submit(self, task: ExecutionTask) -> None:
        """ Accept the :class:`ExecutionTask` for execution, now or later.
        """

        raise NotImplementedError('Engine subclasses must implement submit()')


    def interrupt(self) -> bool:
        """ Interrupt the code currently running, if any. The interrupted
            task still completes, typically with a :class:`Failure`.
        """

        raise NotImplementedError('this engine does not support interruption')


    def close(self):
        pass


# end of class Engine



class PythonEngine(Engine):
    """ Run Python source with the host interpreter, one task at a time, on a
        dedicated background thread. Each session gets its own namespace,
        seeded from the shared namespace populated by :func:`run_startup`.

        If the last statement of the submitted code is an expression, its
        value is the result of the execution, rendered as 'text/plain' via
        :func:`repr`. If *hide_undefined* is True a None result is not
        rendered at all.
    """

    filename = '<input>'

    def __init__(self, hide_undefined: bool = False):

        self.hide_undefined = hide_undefined

        self.namespace = dict()
        self.namespace['__name__'] = '__main__'
        self.namespace['__builtins__'] = builtins

        self.namespaces = dict()
        self.sessions = dict()

        self.running = None
        self.running_lock = threading.Lock()

        self.queue = queue.SimpleQueue()
        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name='engine')
        self.thread.daemon = True
        self.thread.start()


    def session(self, session: str | None) -> SessionState:
        """ Return the :class:`SessionState` for *session*, creating it and
            its namespace if necessary.
        """

        try:
            state = self.sessions[session]
        except KeyError:
            state = SessionState(session)
            self.sessions[session] = state
            self.namespaces[session] = dict(self.namespace)

        return state


    def submit(self, task: ExecutionTask) -> None:

        if self.shutdown:
            raise RuntimeError('engine is closed')

        self.queue.put(task)


    def run(self):

        while True:
            task = self.queue.get()

            if task is None:
                break

            try:
                self.execute(task)
            except (Exception, KeyboardInterrupt):
                logger.exception("unhandled exception executing %s", repr(task))


    def execute(self, task: ExecutionTask) -> None:
        """ Run the *task* to completion on the calling thread, invoking its
            hooks in order. Whatever goes wrong before the completion hook,
            the task is completed exactly once; if the *before_run* hook
            fails the code is not run, and the task completes with a
            :class:`Failure` describing the hook's exception.
        """

        state = self.session(task.session)
        namespace = self.namespaces[task.session]

        try:
            task.before_run(state)
        except Exception as e:
            logger.exception("before_run() failed for %s", repr(task))
            result = self._failure(e)
        else:
            result = self.evaluate(task.code, namespace)

        state.execution_count += 1
        state.result = result

        try:
            task.after_run(state)
        except Exception:
            logger.exception("after_run() failed for %s", repr(task))

        task.complete(state, result)


    def evaluate(self, code: str, namespace: dict) -> Success | Failure:
        """ Run *code* in *namespace*, returning a :class:`Success` or a
            :class:`Failure`. Rendering the result happens after the code
            is no longer interruptible; an exception raised while rendering
            is a :class:`Failure` like any other.
        """

        try:
            value, has_value = self._interruptible(code, namespace)
        except (Exception, KeyboardInterrupt, SystemExit) as e:
            self._set_running(None)
            return self._failure(e)

        try:
            mime = self._render(value, has_value)
        except Exception as e:
            return self._failure(e)

        return Success(mime)


    def _set_running(self, ident):
        with self.running_lock:
            self.running = ident


    def _interruptible(self, code, namespace):

        # interrupt() only targets this thread while self.running is set.
        # Any interrupt delivered before it is cleared is caught by
        # evaluate(), which clears it again.

        self._set_running(threading.get_ident())
        result = self._run(code, namespace)
        self._set_running(None)

        return result


    def _render(self, value, has_value):

        mime = dict()

        if has_value:
            if value is None and self.hide_undefined:
                pass
            else:
                mime['text/plain'] = repr(value)

        return mime


    def _run(self, code, namespace):

        tree = ast.parse(code, self.filename, 'exec')

        last = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            last = ast.Expression(tree.body.pop().value)

        exec(compile(tree, self.filename, 'exec'), namespace)

        if last is None:
            return None, False

        value = eval(compile(last, self.filename, 'eval'), namespace)
        return value, True


    def _failure(self, exception):

        # Skip the frames belonging to this module, they are of no interest
        # to the person who submitted the code.

        frames = exception.__traceback__
        while frames is not None and frames.tb_frame.f_code.co_filename == __file__:
            frames = frames.tb_next

        lines = traceback.format_exception(type(exception), exception, frames)
        lines = [line.rstrip('\n') for line in lines]

        return Failure(type(exception).__name__, str(exception), lines)


    def interrupt(self) -> bool:
        """ Raise KeyboardInterrupt in the engine thread if it is presently
            running submitted code. Returns True if an interrupt was
            delivered.
        """

        self.running_lock.acquire()

        try:
            ident = self.running

            if ident is None:
                return False

            logger.info('interrupting running code')
            delivered = ctypes.pythonapi.PyThreadState_SetAsyncExc(ctypes.c_ulong(ident), ctypes.py_object(KeyboardInterrupt))

            if delivered > 1:
                ctypes.pythonapi.PyThreadState_SetAsyncExc(ctypes.c_ulong(ident), None)

            return delivered == 1
        finally:
            self.running_lock.release()


    def run_startup(self, filename: str) -> None:
        """ Execute the Python script *filename* in the shared namespace that
            seeds every session created afterwards. Any exception is left
            for the caller to handle.
        """

        source = open(filename, 'r').read()
        exec(compile(source, filename, 'exec'), self.namespace)


    def close(self):
        self.shutdown = True
        self.queue.put(None)
        self.thread.join()


# end of class PythonEngine


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
