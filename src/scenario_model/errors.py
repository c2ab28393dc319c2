# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Exceptions raised by the scenario evaluation engine."""


class ScenarioModelError(Exception):
    """Base class for all scenario model errors."""


class ValidationError(ScenarioModelError, ValueError):
    """Scenario, goal or configuration input is malformed or out of range.

    Always raised before any simulation work starts.
    """


class ResourceExhaustionError(ScenarioModelError):
    """Requested simulation count or horizon exceeds the configured budget."""


class SimulationCancelled(ScenarioModelError):
    """A batch was abandoned through its cancellation token."""


class UnknownCrisisError(ScenarioModelError, LookupError):
    """Requested crisis id is not part of the catalog."""
