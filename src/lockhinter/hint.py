# lockhinter.hint - the session's lock indicator
# Defines the interface through which the guard reads and writes the
# session manager's "locked" hint.

import enum

import lockhinter
from lockhinter.logging import log

class HintState(enum.Enum):
	LOCKED = 'locked'
	UNLOCKED = 'unlocked'

	@classmethod
	def from_bool(cls, value):
		return cls.LOCKED if value else cls.UNLOCKED

	def to_bool(self):
		return self is HintState.LOCKED

	def __str__(self):
		return self.value

# The session channel is unreachable, or the hint could not be read
# or written.  Never retried.
class PortError(lockhinter.UserError):
	pass

# Base class for session hint implementations.
class SessionHintPort:
	# All implementations should define their name.
	name = None

	def __init__(self):
		self.log = log.getChild(self.name)

	# Acquire the connection to the session manager.
	def open(self):
		pass

	# Release the connection.  Called once if open() was called.
	def close(self):
		pass

	def __enter__(self):
		self.open()
		return self

	def __exit__(self, *_exc_info):
		self.close()

	# Return the current HintState, or raise PortError.
	def get(self) -> HintState:
		raise NotImplementedError()

	# Change the hint to the given HintState, or raise PortError.
	def set(self, state: HintState):
		raise NotImplementedError()
