#!/usr/bin/env python

""" Base interface for event sources.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import abc
from dataclasses import dataclass
import numpy as np
import secrets
from typing import Any, Iterable, Optional, Sequence, Tuple

# Particle record. Charge is in units of e.
DTYPE_PARTICLE = np.dtype([
    ("pid", np.int32), ("charge", np.int32), ("pT", np.float64), ("eta", np.float64), ("phi", np.float64),
])

# Type helpers
Event = Tuple["EventProperties", np.ndarray]

@dataclass(frozen = True)
class EventProperties:
    """ Event level properties.

    Attributes:
        impact_parameter: Impact parameter of the collision in fm.
    """
    impact_parameter: float

def create_particles(values: Sequence[Tuple[int, int, float, float, float]]) -> np.ndarray:
    """ Create a particle array from a sequence of (pid, charge, pT, eta, phi) tuples.

    Args:
        values: Particle properties.
    Returns:
        Structured particle array.
    """
    return np.array([tuple(v) for v in values], dtype = DTYPE_PARTICLE)

class Generator(abc.ABC):
    """ Base generator class.

    Attributes:
        generator: The underlying event generator (or random number generator) object.
        sqrt_s: The center of momentum energy in GeV.
        random_seed: Random seed for the generator.
        initialized: True if the generator has been initialized.
    """
    def __init__(self, generator: Any, sqrt_s: float, random_seed: Optional[int] = None):
        # Store the basic properties.
        self.generator = generator
        self.sqrt_s = sqrt_s

        # Determine the random seed
        self.random_seed = self._determine_random_seed(random_seed)

        # Store the state so we can check it later.
        self.initialized = False

    def _determine_random_seed(self, random_seed: Optional[int] = None) -> int:
        """ Determine the random seed.

        If we pass a valid value, it will just be used. If we pass None, then a random seed will be generated.

        Args:
            random_seed: Value to help determine the random seed.
        Returns:
            Value if passed, or otherwise a random integer between 0 and 1 billion.
        """
        if random_seed is not None:
            return random_seed

        return secrets.randbelow(1000000000)

    @abc.abstractmethod
    def setup(self) -> bool:
        ...

    @abc.abstractmethod
    def __call__(self, n_events: int) -> Iterable[Event]:
        """ Generate events.

        Args:
            n_events: Number of events to generate.
        Returns:
            Event properties and the output particles for each event.
        """
        ...
