# lockhinter.guard - the lock state guard
# Sets the session's lock hint while a locker runs, and clears it only
# when the locker exits cleanly.

import dataclasses
import enum

import lockhinter
from lockhinter.hint import HintState, PortError
from lockhinter.logging import log
from lockhinter.process import Exited, SpawnError, TerminationStatus

# Note: any failure after the hint was set, and any way the locker can
# terminate other than exiting with code 0, leaves the hint set.  A
# crashed or killed locker is indistinguishable from one that is still
# locking the session, so only a clean exit may clear the hint.

class Mode(enum.Enum):
	RUN = 'run'
	CHECK = 'check'

@dataclasses.dataclass(frozen=True)
class GuardRequest:
	mode: Mode
	force: bool = False
	# Program and arguments of the locker.
	command: tuple = ()

	def __post_init__(self):
		object.__setattr__(self, 'command', tuple(self.command))
		if self.mode is Mode.RUN and not self.command:
			raise lockhinter.UserError('No locker program provided!')

# -----------------------------------------------------------------------------
# Outcomes

class GuardOutcome:
	pass

@dataclasses.dataclass(frozen=True)
class CheckOutcome(GuardOutcome):
	state: HintState

# The hint was already set, and we were not asked to force.  Nothing
# was changed and no locker was started.
@dataclasses.dataclass(frozen=True)
class AlreadyLocked(GuardOutcome):
	pass

# The locker ran and terminated.
@dataclasses.dataclass(frozen=True)
class Completed(GuardOutcome):
	child_status: TerminationStatus
	hint_cleared: bool
	# Set if the locker exited cleanly but clearing the hint failed.
	clear_error: PortError = None

# -----------------------------------------------------------------------------
# Guard

class Guard:
	def __init__(self, hint_port, process_port):
		self.log = log.getChild('guard')
		self.hint = hint_port
		self.process = process_port

	def check(self) -> HintState:
		'''Return the current state of the hint, without changing it.'''
		state = self.hint.get()
		self.log.debug('LockedHint is %s.', state)
		return state

	def run(self, request: GuardRequest) -> GuardOutcome:
		'''Run the locker described by request, keeping the hint set
		while it runs.

		Raises PortError if the hint could not be read or set (in
		which case the locker is not started), and SpawnError if the
		locker could not be started (in which case the hint stays set).
		'''
		if request.mode is not Mode.RUN or not request.command:
			raise lockhinter.UserError('A locker can only be run from a run request with a command')

		current = self.hint.get()
		self.log.debug('LockedHint is %s.', current)

		if current is HintState.LOCKED:
			if not request.force:
				self.log.debug('Session is already locked, not starting %s.', request.command[0])
				return AlreadyLocked()
			self.log.warning('Session is already locked, but forcing a new locker as requested.')

		self.log.debug('Setting LockedHint.')
		self.hint.set(HintState.LOCKED)

		try:
			child = self.process.spawn(request.command)
		except SpawnError:
			self.log.security('Locker could not be started; leaving LockedHint set.')
			raise

		self.log.debug('Waiting for %s to exit...', request.command[0])
		status = self.process.wait(child)

		if status != Exited(0):
			self.log.security('%s %s; leaving LockedHint set.', request.command[0], status)
			return Completed(status, hint_cleared=False)

		self.log.debug('%s exited cleanly, clearing LockedHint.', request.command[0])
		try:
			self.hint.set(HintState.UNLOCKED)
		except PortError as e:
			self.log.security('Unable to clear LockedHint: %s', e)
			return Completed(status, hint_cleared=False, clear_error=e)

		self.log.info('Session unlocked.')
		return Completed(status, hint_cleared=True)
