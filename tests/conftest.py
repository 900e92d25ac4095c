#!/usr/bin/env python

""" Shared fixtures for the tests.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import logging
import pytest

from gamma_hadron.event_gen import generator

@pytest.fixture
def logging_mixin(caplog):
    """ Logging mixin to capture logging messages from all logs.

    Note that caplog only captures the logging messages if the test fails.
    """
    caplog.set_level(logging.DEBUG)

@pytest.fixture
def create_event():
    """ Create an event from a list of (pid, charge, pT, eta, phi) particles.

    This function is provided via fixture to allow for use in multiple tests modules.
    """
    def func(particles, impact_parameter = 5.0):
        """ Helper function to create an event.

        Args:
            particles: List of (pid, charge, pT, eta, phi) tuples.
            impact_parameter: Impact parameter of the event.
        Returns:
            Event properties and the particle array.
        """
        return (
            generator.EventProperties(impact_parameter = impact_parameter),
            generator.create_particles(particles),
        )

    return func
