import pytest

import lockhinter
from lockhinter.guard import Mode
from lockhinter.hint import HintState
from lockhinter.process import Exited, Signaled, Unknown


@pytest.fixture()
def install_ports(monkeypatch, make_ports):
	def install(**kwargs):
		hint, process = make_ports(**kwargs)
		monkeypatch.setattr(lockhinter, 'make_hint_port', lambda _configurator: hint)
		monkeypatch.setattr(lockhinter, 'make_process_port', lambda _configurator: process)
		return hint, process
	return install


@pytest.mark.parametrize('flag', ['-c', '--check'])
def test_check_locked(install_ports, capsys, flag):
	hint, _ = install_ports(state=HintState.LOCKED)
	assert lockhinter.main([flag]) == 1
	assert capsys.readouterr().out == 'TRUE\n'
	assert hint.state is HintState.LOCKED
	assert hint.opened and hint.closed


def test_check_unlocked(install_ports, capsys, events):
	install_ports(state=HintState.UNLOCKED)
	assert lockhinter.main(['--check']) == 0
	assert capsys.readouterr().out == 'FALSE\n'
	assert events == [('get',)]


def test_run_returns_child_exit_code(install_ports, events):
	hint, _ = install_ports(status=Exited(0))
	assert lockhinter.main(['swaylock']) == 0
	assert hint.state is HintState.UNLOCKED

	events.clear()
	hint, _ = install_ports(status=Exited(2))
	assert lockhinter.main(['swaylock']) == 2
	assert hint.state is HintState.LOCKED


def test_run_killed_by_signal(install_ports):
	install_ports(status=Signaled(9))
	assert lockhinter.main(['swaylock']) == 128 + 9


def test_run_unknown_status(install_ports):
	install_ports(status=Unknown())
	assert lockhinter.main(['swaylock']) == lockhinter.EXIT_FAILURE


def test_already_locked(install_ports, capsys, events):
	install_ports(state=HintState.LOCKED)
	assert lockhinter.main(['swaylock']) == lockhinter.EXIT_LOCKED
	assert 'already has LockedHint set' in capsys.readouterr().out
	assert events == [('get',)]


@pytest.mark.parametrize('flag', ['-f', '--force'])
def test_force(install_ports, flag):
	hint, _ = install_ports(state=HintState.LOCKED, status=Exited(0))
	assert lockhinter.main([flag, 'swaylock']) == 0
	assert hint.state is HintState.UNLOCKED


def test_locker_options_are_passed_through(install_ports, events):
	install_ports()
	assert lockhinter.main(['swaylock', '-f', '-c', '000000']) == 0
	assert ('spawn', ('swaylock', '-f', '-c', '000000')) in events


def test_double_dash(install_ports, events):
	install_ports(state=HintState.LOCKED)
	assert lockhinter.main(['-f', '--', '-weird-locker', '--check']) == 0
	assert ('spawn', ('-weird-locker', '--check')) in events


def test_port_failure(install_ports, caplog):
	install_ports(fail_get=True)
	assert lockhinter.main(['swaylock']) == lockhinter.EXIT_FAILURE
	assert 'session bus unreachable' in caplog.text


def test_spawn_failure(install_ports):
	hint, _ = install_ports(spawn_error='Unable to start command')
	assert lockhinter.main(['swaylock']) == lockhinter.EXIT_FAILURE
	assert hint.state is HintState.LOCKED


def test_clear_failure(install_ports):
	hint, _ = install_ports(status=Exited(0), fail_set=[HintState.UNLOCKED])
	assert lockhinter.main(['swaylock']) == lockhinter.EXIT_FAILURE
	assert hint.state is HintState.LOCKED


def test_interrupted_while_waiting(install_ports):
	hint, process = install_ports()

	def interrupted(_handle):
		raise KeyboardInterrupt()
	process.wait = interrupted

	assert lockhinter.main(['swaylock']) == lockhinter.EXIT_INTERRUPTED
	assert hint.state is HintState.LOCKED


def test_help(capsys):
	assert lockhinter.main(['--help']) == 0
	assert 'Usage: lockhinter' in capsys.readouterr().out


@pytest.mark.parametrize('args', [[], ['--bogus'], ['--check', 'swaylock']])
def test_usage_errors(capsys, args):
	assert lockhinter.main(args) == lockhinter.EXIT_USAGE
	assert 'Usage: lockhinter' in capsys.readouterr().err


def test_default_locker_from_config(install_ports, events, monkeypatch, tmp_path):
	config_file = tmp_path / 'config.py'
	config_file.write_text(
		'def config(c):\n'
		'\tc.set_locker("i3lock", "--nofork")\n'
	)
	monkeypatch.setenv('LOCKHINTER_CONFIG', str(config_file))
	install_ports()

	assert lockhinter.main([]) == 0
	assert ('spawn', ('i3lock', '--nofork')) in events


def test_parse_args():
	assert lockhinter.parse_args(['-f', 'swaylock', '-f']) == (False, True, ('swaylock', '-f'))
	assert lockhinter.parse_args(['-c']) == (True, False, ())
	assert lockhinter.parse_args(['-h']) is None


def test_make_request():
	configurator = lockhinter.config.Configurator()

	request = lockhinter.make_request(False, True, ('swaylock', '-f'), configurator)
	assert request.mode is Mode.RUN
	assert request.force is True
	assert request.command == ('swaylock', '-f')

	assert lockhinter.make_request(True, False, (), configurator).mode is Mode.CHECK

	with pytest.raises(lockhinter.UsageError):
		lockhinter.make_request(False, False, (), configurator)

	configurator.set_locker('i3lock')
	assert lockhinter.make_request(False, False, (), configurator).command == ('i3lock',)


def broken_config(monkeypatch, tmp_path, body):
	config_file = tmp_path / 'config.py'
	config_file.write_text(body)
	monkeypatch.setenv('LOCKHINTER_CONFIG', str(config_file))


def test_help_ignores_broken_config(monkeypatch, tmp_path, capsys):
	broken_config(monkeypatch, tmp_path, 'def config(c):\n\tc.set_timeout(0)\n')
	assert lockhinter.main(['--help']) == 0
	assert 'Usage: lockhinter' in capsys.readouterr().out


@pytest.mark.parametrize('body', [
	'import lockhinter_no_such_module\n',
	'def config(c):\n\traise RuntimeError("oops")\n',
])
def test_config_exception_is_fatal_error(install_ports, monkeypatch, tmp_path, caplog, events, body):
	broken_config(monkeypatch, tmp_path, body)
	install_ports()

	assert lockhinter.main(['swaylock']) == lockhinter.EXIT_FAILURE
	assert 'Error in configuration file' in caplog.text
	assert events == []
