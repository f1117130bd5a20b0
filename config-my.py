# Sample lockhinter configuration file.
# Install as ~/.config/lockhinter/config.py (or /etc/lockhinter/config.py).

# The configuration file must define a function, config, which is
# called with a configurator object once lockhinter starts.  All
# settings are optional.

import shutil

def config(c):
	# Locker to run when lockhinter is invoked without a program,
	# e.g. from a sway "bindsym" or a swayidle "timeout" command.
	# Prefer swaylock when it is installed.
	if shutil.which('swaylock'):
		c.set_locker('swaylock', '--show-failed-attempts')
	else:
		c.set_locker('i3lock', '--nofork')

	# Act on logind's idea of the caller's graphical session, rather
	# than on the session lockhinter itself was started in.  Useful
	# when running from a systemd user service, which does not belong
	# to any session.
	# c.set_session('auto')

	# Give up if logind does not answer within 10 seconds.
	c.set_timeout(10)
