"""Exceptions raised by a single simulation run.

Every error here is local to the run that raised it: the runner catches
``SimulationError`` per policy, reports it and moves on to the next policy.
"""
from __future__ import annotations


class SimulationError(Exception):
    """Base class for errors that abort one policy run."""


class CapacityExceeded(SimulationError):
    """The hosts cannot accommodate the requested VMs."""


class InvalidWorkload(SimulationError, ValueError):
    """A job or the VM pool cannot be simulated (non-positive length, empty pool...)."""


class UnknownPolicy(SimulationError, ValueError):
    """No scheduling policy is registered under the requested name."""
