"""Test mocks for ember-try.

Provides stand-ins for the collaborators with side effects:
- StubDependencyAdapter: records dependency sets instead of installing
- MockRunCommand: records command runs and returns scripted outcomes
- RecordingInvoker: records install commands instead of spawning them
"""

from .mock_run import MockRunCommand, RecordingInvoker
from .stub_adapter import StubDependencyAdapter

__all__ = ["MockRunCommand", "RecordingInvoker", "StubDependencyAdapter"]
