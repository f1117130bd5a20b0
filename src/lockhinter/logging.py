# lockhinter.logging - logging setup
# Messages go to stderr.  With LOCKHINTER_SYSLOG=1 they are also sent
# to syslog, as lockers are usually started from a compositor key
# binding or an idle daemon whose stderr is not kept anywhere.

import logging
import logging.handlers
import os

# Levels in addition to the standard ones
TRACE = logging.DEBUG - 5
SECURITY = logging.ERROR - 5

logging.addLevelName(TRACE, 'TRACE')
logging.addLevelName(SECURITY, 'SECURITY')

class Logger(logging.getLoggerClass()):
	def trace(self, *args, **kwargs):
		self.log(TRACE, *args, **kwargs)

	# Used for events which affect what other programs are told about
	# the session's lock state.
	def security(self, *args, **kwargs):
		self.log(SECURITY, *args, **kwargs)

logging.setLoggerClass(Logger)

log = logging.getLogger('lockhinter')

# LOCKHINTER_VERBOSE ranges from -4 (only critical errors) to 2
# (trace).  0 is the default.
verbosity_levels = [
	logging.CRITICAL,
	logging.ERROR,
	SECURITY,
	logging.WARNING,
	logging.INFO,
	logging.DEBUG,
	TRACE,
]

def get_level(verbose):
	try:
		index = 4 + int(verbose)
	except ValueError:
		index = 4
	return verbosity_levels[min(max(index, 0), len(verbosity_levels) - 1)]

# SysLogHandler only knows the standard level names, and would send
# everything else as "warning".
class SysLogHandler(logging.handlers.SysLogHandler):
	priority_map = {
		**logging.handlers.SysLogHandler.priority_map,
		'TRACE': 'debug',
		'SECURITY': 'warning',
	}

# Add a handler sending our records to syslog, on the authpriv
# facility like other session and authentication messages.
def add_syslog_handler(address='/dev/log'):
	if isinstance(address, str) and not os.path.exists(address):
		log.warning('Unable to connect to syslog at %r: no such socket', address)
		return None
	try:
		handler = SysLogHandler(address=address, facility=SysLogHandler.LOG_AUTHPRIV)
	except OSError as e:
		log.warning('Unable to connect to syslog at %r: %s', address, e)
		return None

	handler.setLevel(logging.INFO)
	handler.setFormatter(logging.Formatter('lockhinter[%(process)d]: %(name)s: %(message)s'))
	log.addHandler(handler)
	return handler

def setup():
	logging.basicConfig(
		format=os.getenv('LOCKHINTER_LOG_FORMAT', '%(name)s: %(message)s'),
		level=get_level(os.getenv('LOCKHINTER_VERBOSE', '0')),
	)
	if os.getenv('LOCKHINTER_SYSLOG', '0') not in ('', '0'):
		add_syslog_handler(os.getenv('LOCKHINTER_SYSLOG_ADDRESS', '/dev/log'))

setup()
