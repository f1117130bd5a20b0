# lockhinter.__init__ - core definitions and entry point
# Runs a screen locker and keeps the systemd-logind LockedHint
# session property set for as long as the locker is running.

import getopt
import sys

# -----------------------------------------------------------------------------
# Exit codes

# Check mode: the session is not locked.  Run mode: the child's own
# exit code is used instead.
EXIT_OK = 0

# Check mode: the session is locked.  Run mode: refusing to start a
# locker because the session is already locked.
EXIT_LOCKED = 1

# Bad command line.
EXIT_USAGE = 2

# Could not talk to logind, could not start the locker, or could not
# determine how the locker exited.
EXIT_FAILURE = 3

# We were interrupted while waiting for the locker.
EXIT_INTERRUPTED = 128 + 2

# -----------------------------------------------------------------------------
# Exceptions

# Represents an expected failure mode, which is unlikely to be due to
# a bug in lockhinter.  In this case, we do not need to print an
# exception stack trace; just print the error message and quit.
class UserError(Exception):
	pass

# A malformed command line.  Reported along with the usage text.
class UsageError(UserError):
	pass

# -----------------------------------------------------------------------------
# Import lockhinter modules
# Placed after the declarations above, so that they can be used by the
# imported modules.

import lockhinter.config
import lockhinter.guard
import lockhinter.hint
import lockhinter.process
from lockhinter.logging import log

# -----------------------------------------------------------------------------
# Ports

# Construct the production session port.  The D-Bus bindings are only
# imported here, so that the rest of the package (and its tests) can
# be used without them.
def make_hint_port(configurator):
	import lockhinter.logind
	return lockhinter.logind.LogindHintPort(
		session=configurator.session,
		timeout=configurator.timeout,
	)

def make_process_port(_configurator):
	return lockhinter.process.SubprocessPort()

# -----------------------------------------------------------------------------
# Outcome -> exit code

def exit_code_for(outcome):
	match outcome:
		case lockhinter.guard.CheckOutcome(state=state):
			return EXIT_LOCKED if state is lockhinter.hint.HintState.LOCKED else EXIT_OK

		case lockhinter.guard.AlreadyLocked():
			return EXIT_LOCKED

		case lockhinter.guard.Completed(clear_error=clear_error) if clear_error is not None:
			return EXIT_FAILURE

		case lockhinter.guard.Completed(child_status=lockhinter.process.Exited(code=code)):
			return code

		case lockhinter.guard.Completed(child_status=lockhinter.process.Signaled(signal=signum)):
			return 128 + signum

		case _:
			return EXIT_FAILURE

# -----------------------------------------------------------------------------
# Entry point

help_text = '''
Usage: lockhinter [options] [--] PROGRAM [ARGS...]
       lockhinter --check

Run PROGRAM (a screen locker, e.g. swaylock) and set the LockedHint
property of the current logind session while it is running.  The hint
is cleared only if PROGRAM exits with status 0.

Options:
  -c, --check  Do not run any locker; print TRUE if LockedHint is set
               (exit status 1) or FALSE if not (exit status 0).
  -f, --force  Run the locker even if LockedHint is already set.
  -h, --help   Print this message.
'''

# Parse the command line.  Returns None if the help text was
# requested, or a (check, force, command) tuple otherwise.
def parse_args(args):
	try:
		# Stop at the first non-option, so that the locker's own
		# options are passed through to it.
		opts, free = getopt.getopt(args, 'cfh', ['check', 'force', 'help'])
	except getopt.GetoptError as e:
		raise UsageError(str(e))

	check = False
	force = False
	for opt, _ in opts:
		match opt:
			case '-h' | '--help':
				return None
			case '-c' | '--check':
				check = True
			case '-f' | '--force':
				force = True

	if check and free:
		raise UsageError('--check does not take a program to run')
	return check, force, tuple(free)

# Build the GuardRequest, falling back to the configured locker.
def make_request(check, force, command, configurator):
	if check:
		return lockhinter.guard.GuardRequest(lockhinter.guard.Mode.CHECK, force=force)

	command = command or configurator.locker
	if not command:
		raise UsageError('no locker program specified')
	return lockhinter.guard.GuardRequest(lockhinter.guard.Mode.RUN, force=force, command=command)

def main(args=None):
	if args is None:
		args = sys.argv[1:]

	try:
		try:
			options = parse_args(args)
			if options is None:
				sys.stdout.write(help_text)
				return EXIT_OK

			lockhinter.config.load()
			configurator = lockhinter.config.configurator
			request = make_request(*options, configurator)
		except UsageError as e:
			log.critical('%s', e)
			sys.stderr.write(help_text)
			return EXIT_USAGE

		with make_hint_port(configurator) as hint_port:
			guard = lockhinter.guard.Guard(hint_port, make_process_port(configurator))

			if request.mode is lockhinter.guard.Mode.CHECK:
				outcome = lockhinter.guard.CheckOutcome(guard.check())
				print('TRUE' if outcome.state is lockhinter.hint.HintState.LOCKED else 'FALSE')
			else:
				outcome = guard.run(request)
				if isinstance(outcome, lockhinter.guard.AlreadyLocked):
					print('This session already has LockedHint set.')

		return exit_code_for(outcome)

	except KeyboardInterrupt:
		log.security('Interrupted; LockedHint was left as it is.')
		return EXIT_INTERRUPTED

	except UserError as e:
		log.critical('Fatal error: %s', e)
		return EXIT_FAILURE
