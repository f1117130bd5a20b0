# lockhinter.process - locker process supervision

import dataclasses
import os
import signal as signal_module
import subprocess

import lockhinter
from lockhinter.logging import log

# -----------------------------------------------------------------------------
# Termination status

class TerminationStatus:
	pass

# The process exited on its own with the given exit code.
@dataclasses.dataclass(frozen=True)
class Exited(TerminationStatus):
	code: int

	def __str__(self):
		return 'exited with code %d' % self.code

# The process was killed by a signal.
@dataclasses.dataclass(frozen=True)
class Signaled(TerminationStatus):
	signal: int

	def __str__(self):
		try:
			name = signal_module.Signals(self.signal).name
		except ValueError:
			name = str(self.signal)
		return 'killed by signal %s' % name

# We could not find out how the process terminated.
@dataclasses.dataclass(frozen=True)
class Unknown(TerminationStatus):
	def __str__(self):
		return 'terminated with unknown status'

# -----------------------------------------------------------------------------
# Ports

# The locker could not be started.
class SpawnError(lockhinter.UserError):
	pass

# Base class for process supervision implementations.
class ProcessPort:
	name = None

	def __init__(self):
		self.log = log.getChild(self.name)

	# Start the given command (a sequence of the program and its
	# arguments), returning a handle for wait(), or raise SpawnError.
	def spawn(self, command):
		raise NotImplementedError()

	# Block until the process started by spawn() terminates, and
	# return its TerminationStatus.
	def wait(self, handle) -> TerminationStatus:
		raise NotImplementedError()

# Runs the locker as a direct child of this process.  Its standard
# streams are inherited.
class SubprocessPort(ProcessPort):
	name = 'process'

	def spawn(self, command):
		self.restore_sigchld()

		self.log.debug('Starting %r...', list(command))
		try:
			process = subprocess.Popen(list(command))
		except OSError as e:
			raise SpawnError('Unable to start command %r: %s' % (command[0], e.strerror or e))
		self.log.debug('Started %s (PID %d).', command[0], process.pid)
		return process

	# A launcher may have started us with SIGCHLD ignored, which
	# survives exec.  The kernel then reaps our children itself and
	# their exit status is lost.
	def restore_sigchld(self):
		if signal_module.getsignal(signal_module.SIGCHLD) != signal_module.SIG_IGN:
			return
		try:
			signal_module.signal(signal_module.SIGCHLD, signal_module.SIG_DFL)
			self.log.debug('SIGCHLD was ignored; restored the default disposition.')
		except ValueError:
			# Not the main thread.  wait() will report Unknown.
			self.log.warning('SIGCHLD is ignored; the locker exit status may be lost.')

	def wait(self, handle):
		# Reap the child ourselves: Popen.wait() reports a child which
		# was already reaped (ECHILD) as having exited with code 0.
		try:
			_, wait_status = os.waitpid(handle.pid, 0)
		except ChildProcessError as e:
			self.log.error('Unable to get return code for PID %d: %s', handle.pid, e)
			return Unknown()

		returncode = os.waitstatus_to_exitcode(wait_status)
		# Keep Popen from trying to reap the PID again.
		handle.returncode = returncode
		if returncode < 0:
			return Signaled(-returncode)
		return Exited(returncode)
