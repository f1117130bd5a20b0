# lockhinter.config - loads and evaluates the user's configuration

import importlib.util
import numbers
import os
import sys

import lockhinter
from lockhinter.logging import log

# The user config module.
module = None

class Configurator:
	def __init__(self):
		self.reset()

	def reset(self):
		# Default locker command, used when none is given on the
		# command line.
		self.locker = ()

		# logind session ID, or None for the session we are running in.
		self.session = None

		# D-Bus call timeout in seconds, or None for the default.
		self.timeout = None

	# Evaluate the configuration and update our settings to match.
	def evaluate(self):
		self.reset()

		if not module:
			return

		if not hasattr(module, 'config'):
			raise lockhinter.UserError('Configuration file %r does not define a config function' % (
				module.__file__,
			))

		# Evaluate the user-defined configuration function.
		try:
			module.config(self)
		except lockhinter.UserError:
			raise
		except Exception as e:
			raise lockhinter.UserError('Error in configuration file %r: %s' % (module.__file__, e)) from e

	# Public API follows:

	def set_locker(self, program, *args):
		'''Called from the user's configuration to choose the locker
		to run when no program is given on the command line.'''
		command = (program, *args)
		if not all(isinstance(arg, str) for arg in command) or not program:
			raise lockhinter.UserError('Invalid locker - must be a program name followed by string arguments')
		self.locker = command

	def set_session(self, session_id):
		'''Called from the user's configuration to act on the given
		logind session instead of the one lockhinter runs in.'''
		if not isinstance(session_id, str) or not session_id:
			raise lockhinter.UserError('Invalid session - must be a logind session ID such as "auto"')
		self.session = session_id

	def set_timeout(self, seconds):
		'''Called from the user's configuration to limit how long to
		wait for logind to answer.'''
		if isinstance(seconds, bool) or not isinstance(seconds, numbers.Real) or seconds <= 0:
			raise lockhinter.UserError('Invalid timeout - must be a positive number of seconds')
		self.timeout = seconds


configurator = Configurator()

# Return the configuration files to look for, in order of preference.
def get_config_files():
	explicit = os.getenv('LOCKHINTER_CONFIG')
	if explicit:
		return [explicit]

	config_dirs = os.getenv('XDG_CONFIG_DIRS', '/etc').split(':')
	config_dirs = [os.getenv('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))] + config_dirs
	return [d + '/lockhinter/config.py' for d in config_dirs if d]

# Load the configuration file, if any, and evaluate it.
def load():
	global module
	module = None

	config_files = get_config_files()
	for config_file in config_files:
		if os.path.exists(config_file):
			log.debug('Loading configuration from %r.', config_file)

			# https://docs.python.org/3/library/importlib.html#importing-a-source-file-directly
			module_name = 'lockhinter_user_config'
			spec = importlib.util.spec_from_file_location(module_name, config_file)
			module = importlib.util.module_from_spec(spec)
			sys.modules[module_name] = module
			try:
				spec.loader.exec_module(module)
			except Exception as e:
				raise lockhinter.UserError('Error in configuration file %r: %s' % (config_file, e)) from e
			break
	else:
		if os.getenv('LOCKHINTER_CONFIG'):
			raise lockhinter.UserError('Configuration file %r not found' % (config_files[0],))
		log.trace('No configuration file found (looked in: %r).', config_files)

	configurator.evaluate()
