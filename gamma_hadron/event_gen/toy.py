#!/usr/bin/env python

""" Toy heavy-ion event generator.

Provides a simple stand in for a full event generator so that the analysis can be run end to end.
The impact parameter is sampled uniformly in the transverse area, and the particle multiplicities
scale with the geometric overlap.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import logging
import numpy as np
from typing import Any, Iterable

from gamma_hadron.base import params
from gamma_hadron.event_gen import generator

logger = logging.getLogger(__name__)

PID_PI_PLUS = 211

class ToyGenerator(generator.Generator):
    """ Toy event generator.

    Args:
        max_impact_parameter: Maximum impact parameter in fm.
        mean_charged_multiplicity: Mean number of charged hadrons in a head-on collision.
        mean_n_photons: Mean number of photons in a head-on collision.
        mean_n_pi0: Mean number of neutral pions in a head-on collision.
        hard_photon_probability: Probability per event to add a photon in the 5-9 GeV range.
        pt_slope: Inverse slope of the exponential pt spectrum in GeV.
        max_abs_eta: Particles are generated uniformly in ``|eta| < max_abs_eta``.
    """
    def __init__(self, max_impact_parameter: float = 14.0, mean_charged_multiplicity: float = 200.0,
                 mean_n_photons: float = 50.0, mean_n_pi0: float = 20.0, hard_photon_probability: float = 0.3,
                 pt_slope: float = 0.5, max_abs_eta: float = 4.0, *args: Any, **kwargs: Any):
        super().__init__(None, *args, **kwargs)
        self.max_impact_parameter = max_impact_parameter
        self.mean_charged_multiplicity = mean_charged_multiplicity
        self.mean_n_photons = mean_n_photons
        self.mean_n_pi0 = mean_n_pi0
        self.hard_photon_probability = hard_photon_probability
        self.pt_slope = pt_slope
        self.max_abs_eta = max_abs_eta

    def setup(self) -> bool:
        """ Setup the random number generator.

        Returns:
            True if setup was successful.
        """
        if self.initialized is True:
            raise RuntimeError("This toy generator has already been initialized")

        self.generator = np.random.default_rng(self.random_seed)
        logger.debug(f"Initialized toy generator with random seed {self.random_seed}")

        self.initialized = True
        return self.initialized

    def _particles(self, n: int, pid: Any, charge: Any) -> np.ndarray:
        """ Generate ``n`` particles with the given identities. """
        particles = np.empty(n, dtype = generator.DTYPE_PARTICLE)
        particles["pid"] = pid
        particles["charge"] = charge
        particles["pT"] = self.generator.exponential(self.pt_slope, size = n)
        particles["eta"] = self.generator.uniform(-self.max_abs_eta, self.max_abs_eta, size = n)
        particles["phi"] = self.generator.uniform(0, 2 * np.pi, size = n)
        return particles

    def _generate_event(self) -> generator.Event:
        """ Generate a single event.

        Returns:
            Event level information and the output particles.
        """
        # Uniform in the transverse area.
        impact_parameter = self.max_impact_parameter * np.sqrt(self.generator.uniform())
        overlap = 1 - (impact_parameter / self.max_impact_parameter) ** 2

        n_charged = self.generator.poisson(self.mean_charged_multiplicity * overlap)
        charges = self.generator.choice([-1, 1], size = n_charged)
        charged = self._particles(n_charged, pid = charges * PID_PI_PLUS, charge = charges)
        photons = self._particles(
            self.generator.poisson(self.mean_n_photons * overlap), pid = params.PID_GAMMA, charge = 0
        )
        pi0s = self._particles(
            self.generator.poisson(self.mean_n_pi0 * overlap), pid = params.PID_PI0, charge = 0
        )
        # Direct photon in the trigger range.
        hard = self._particles(0, pid = params.PID_GAMMA, charge = 0)
        if self.generator.uniform() < self.hard_photon_probability * overlap:
            hard = self._particles(1, pid = params.PID_GAMMA, charge = 0)
            hard["pT"] = self.generator.uniform(5.0, 9.0)

        particles = np.concatenate([charged, photons, pi0s, hard])
        return generator.EventProperties(impact_parameter = impact_parameter), particles

    def __call__(self, n_events: int) -> Iterable[generator.Event]:
        """ Generate events with the toy model.

        Args:
            n_events: Number of events to generate.
        Returns:
            Generator to provide the requested number of events.
        """
        if not self.initialized:
            raise RuntimeError("The toy generator was not yet initialized.")

        for _ in range(n_events):
            yield self._generate_event()
