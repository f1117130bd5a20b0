# lockhinter.logind - systemd-logind integration
# Reads and writes the LockedHint property of a logind session over
# the D-Bus system bus.

import os

import dbus

from lockhinter.hint import HintState, PortError, SessionHintPort

LOGIND_BUS_NAME = 'org.freedesktop.login1'
LOGIND_PATH = '/org/freedesktop/login1'
MANAGER_INTERFACE = 'org.freedesktop.login1.Manager'
SESSION_INTERFACE = 'org.freedesktop.login1.Session'

class LogindHintPort(SessionHintPort):
	name = 'logind'

	def __init__(self, session=None, timeout=None):
		super().__init__()

		# Parameters:

		# logind session ID to act on (e.g. 'c2' or 'auto').
		# If None, use the session this process belongs to.
		self.session = session

		# D-Bus call timeout, in seconds.  None for the D-Bus default.
		self.timeout = timeout

		# Private state:

		self.system_bus = None

		# Unique bus name of the logind instance we are talking to.
		self.owner = None

		# Object path of our session.
		self.session_path = None

	def open(self):
		try:
			self.system_bus = dbus.SystemBus(private=True)
		except dbus.exceptions.DBusException as e:
			raise PortError('Unable to get a D-Bus connection: %s' % describe(e))

		try:
			if not self.system_bus.name_has_owner(LOGIND_BUS_NAME):
				raise PortError('%s is not available on the system bus (is systemd-logind running?)' %
								LOGIND_BUS_NAME)
			self.owner = self.system_bus.get_name_owner(LOGIND_BUS_NAME)
			self.log.trace('%s is owned by %s.', LOGIND_BUS_NAME, self.owner)

			self.session_path = self.get_session_path()
		except dbus.exceptions.DBusException as e:
			self.close()
			raise PortError('Unable to get object path: %s' % describe(e))
		except PortError:
			self.close()
			raise

		self.log.debug('Using session %s.', self.session_path)

	def close(self):
		if self.system_bus is not None:
			self.system_bus.close()
			self.system_bus = None
		self.owner = None
		self.session_path = None

	def call_kwargs(self, interface):
		kwargs = {'dbus_interface': interface}
		if self.timeout is not None:
			kwargs['timeout'] = self.timeout
		return kwargs

	# Ask logind for the object path of the session we should act on.
	def get_session_path(self):
		manager = self.system_bus.get_object(self.owner, LOGIND_PATH)
		if self.session is None:
			path = manager.GetSessionByPID(
				dbus.UInt32(os.getpid()),
				**self.call_kwargs(MANAGER_INTERFACE),
			)
		else:
			path = manager.GetSession(
				self.session,
				**self.call_kwargs(MANAGER_INTERFACE),
			)
		return str(path)

	def get_session_object(self):
		if self.session_path is None:
			raise PortError('Not connected to logind')
		return self.system_bus.get_object(self.owner, self.session_path)

	def get(self):
		session = self.get_session_object()
		try:
			properties = session.GetAll(
				SESSION_INTERFACE,
				**self.call_kwargs(dbus.PROPERTIES_IFACE),
			)
		except dbus.exceptions.DBusException as e:
			raise PortError('Unable to get session state: %s' % describe(e))

		for key in ('State', 'LockedHint'):
			if key not in properties:
				raise PortError('Unable to get session state: value with key %s is missing' % key)
		self.log.debug('Session state is %s.', properties['State'])

		locked_hint = properties['LockedHint']
		if not isinstance(locked_hint, (dbus.Boolean, bool)):
			raise PortError('Unable to get session state: LockedHint is not of the correct type (got %s)' %
							type(locked_hint).__name__)

		return HintState.from_bool(bool(locked_hint))

	def set(self, state):
		session = self.get_session_object()
		try:
			session.SetLockedHint(
				dbus.Boolean(state.to_bool()),
				**self.call_kwargs(SESSION_INTERFACE),
			)
		except dbus.exceptions.DBusException as e:
			raise PortError('Unable to %s LockedHint: %s' % (
				'set' if state is HintState.LOCKED else 'clear',
				describe(e),
			))
		self.log.trace('LockedHint is now %s.', state)


# Format a D-Bus error for the user.
def describe(e):
	name = e.get_dbus_name()
	message = e.get_dbus_message() or str(e)
	if name is None:
		return message
	return '%s (%s)' % (message, name)
