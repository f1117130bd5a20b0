# tests/conftest.py - in-memory ports and shared fixtures

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / 'src') not in sys.path:
	sys.path.insert(0, str(ROOT / 'src'))

from lockhinter.hint import HintState, PortError, SessionHintPort  # noqa: E402
from lockhinter.process import Exited, ProcessPort, SpawnError  # noqa: E402


# Session hint kept in memory.  Every call is recorded in events.
class FakeHintPort(SessionHintPort):
	name = 'fake-hint'

	def __init__(self, state, events, fail_get=False, fail_set=()):
		super().__init__()
		self.state = state
		self.events = events
		self.fail_get = fail_get
		# HintStates for which set() fails.
		self.fail_set = set(fail_set)
		self.opened = False
		self.closed = False

	def open(self):
		self.opened = True

	def close(self):
		self.closed = True

	def get(self):
		self.events.append(('get',))
		if self.fail_get:
			raise PortError('session bus unreachable')
		return self.state

	def set(self, state):
		self.events.append(('set', state))
		if state in self.fail_set:
			raise PortError('permission denied')
		self.state = state


# Pretends to run a child which terminates with a preset status.
class FakeProcessPort(ProcessPort):
	name = 'fake-process'

	def __init__(self, events, status=Exited(0), spawn_error=None):
		super().__init__()
		self.events = events
		self.status = status
		self.spawn_error = spawn_error

	def spawn(self, command):
		self.events.append(('spawn', tuple(command)))
		if self.spawn_error is not None:
			raise SpawnError(self.spawn_error)
		return object()

	def wait(self, handle):
		self.events.append(('wait',))
		return self.status


@pytest.fixture()
def events():
	return []


@pytest.fixture()
def make_ports(events):
	def make(state=HintState.UNLOCKED, status=Exited(0), **kwargs):
		hint_kwargs = {k: v for k, v in kwargs.items() if k in ('fail_get', 'fail_set')}
		process_kwargs = {k: v for k, v in kwargs.items() if k == 'spawn_error'}
		return (
			FakeHintPort(state, events, **hint_kwargs),
			FakeProcessPort(events, status=status, **process_kwargs),
		)
	return make


# Keep the user's own configuration out of the tests.
@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
	monkeypatch.delenv('LOCKHINTER_CONFIG', raising=False)
	monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'config-home'))
	monkeypatch.setenv('XDG_CONFIG_DIRS', str(tmp_path / 'config-dirs'))
	os.makedirs(tmp_path / 'config-home', exist_ok=True)
