#!/usr/bin/env python

""" Tests for the toy event generator.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import logging
import numpy as np
import pytest

from gamma_hadron.base import params
from gamma_hadron.event_gen import generator
from gamma_hadron.event_gen import toy

logger = logging.getLogger(__name__)

def test_generate_events(logging_mixin):
    """ Test the generated event contents. """
    gen = toy.ToyGenerator(sqrt_s = 200, random_seed = 42)
    assert gen.setup() is True

    events = list(gen(n_events = 20))

    assert len(events) == 20
    for event_properties, particles in events:
        assert isinstance(event_properties, generator.EventProperties)
        assert 0 <= event_properties.impact_parameter <= gen.max_impact_parameter
        assert particles.dtype == generator.DTYPE_PARTICLE
        assert np.all(particles["pT"] >= 0)
        assert np.all(np.abs(particles["eta"]) <= gen.max_abs_eta)
        assert np.all((particles["phi"] >= 0) & (particles["phi"] <= 2 * np.pi))
        # Neutral particles are only photons and pi0s.
        neutral = particles[particles["charge"] == 0]
        assert np.all(np.isin(neutral["pid"], [params.PID_GAMMA, params.PID_PI0]))
        assert np.all(np.abs(particles[particles["charge"] != 0]["pid"]) == toy.PID_PI_PLUS)

def test_reproducible_with_seed(logging_mixin):
    """ The same seed generates the same events. """
    results = []
    for _ in range(2):
        gen = toy.ToyGenerator(sqrt_s = 200, random_seed = 1234)
        gen.setup()
        results.append(list(gen(n_events = 5)))

    for (props_a, particles_a), (props_b, particles_b) in zip(*results):
        assert props_a == props_b
        np.testing.assert_array_equal(particles_a, particles_b)

def test_random_seed_determination(logging_mixin):
    """ A random seed is generated if none is passed. """
    gen = toy.ToyGenerator(sqrt_s = 200)
    assert 0 <= gen.random_seed < 1000000000
    assert toy.ToyGenerator(sqrt_s = 200, random_seed = 5).random_seed == 5

def test_generator_lifecycle(logging_mixin):
    """ The generator must be setup exactly once before generating. """
    gen = toy.ToyGenerator(sqrt_s = 200, random_seed = 1)
    with pytest.raises(RuntimeError):
        next(iter(gen(n_events = 1)))
    gen.setup()
    with pytest.raises(RuntimeError):
        gen.setup()
