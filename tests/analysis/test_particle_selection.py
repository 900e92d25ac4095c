#!/usr/bin/env python

""" Tests for the trigger and associated particle selection.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import logging
import numpy as np
import pytest

from gamma_hadron.analysis import particle_selection
from gamma_hadron.base import params
from gamma_hadron.event_gen import generator

logger = logging.getLogger(__name__)

@pytest.mark.parametrize("particle, expected", [
    ((22, 0, 6.0, 3.5, 0.1), True),
    ((22, 0, 5.0, 3.5, 0.1), True),
    ((22, 0, 9.0, 3.5, 0.1), True),
    ((22, 0, 4.9, 3.5, 0.1), False),
    ((22, 0, 9.1, 3.5, 0.1), False),
    ((111, 0, 0.14, -3.5, 0.1), True),
    ((111, 0, 0.12, -3.5, 0.1), True),
    ((111, 0, 0.16, -3.5, 0.1), True),
    ((111, 0, 0.11, -3.5, 0.1), False),
    ((111, 0, 0.17, -3.5, 0.1), False),
    ((111, 0, 6.0, 3.5, 0.1), False),
    ((211, 1, 6.0, 3.5, 0.1), False),
], ids = [
    "Photon", "Photon lower edge", "Photon upper edge", "Soft photon", "Hard photon",
    "Pi0", "Pi0 lower edge", "Pi0 upper edge", "Soft pi0", "Hard pi0", "Pi0 with photon pt", "Charged pion",
])
def test_trigger_identity_and_pt(logging_mixin, particle, expected):
    """ Test the trigger identity and pt requirements. """
    particles = generator.create_particles([particle])
    for eta_mode in params.EtaAcceptanceMode:
        selection = params.TriggerSelection(eta_mode = eta_mode)
        assert particle_selection.trigger_mask(particles, selection)[0] == expected

@pytest.mark.parametrize("eta, expected", [
    (0.0, {"union": True, "window": False}),
    (3.5, {"union": True, "window": True}),
    (-3.5, {"union": True, "window": True}),
    (3.1, {"union": True, "window": False}),
    (3.9, {"union": True, "window": False}),
    (5.0, {"union": True, "window": False}),
], ids = ["Mid-rapidity", "In window", "Negative eta in window", "Lower edge", "Upper edge", "Forward"])
def test_trigger_eta_acceptance(logging_mixin, eta, expected):
    """ Test the trigger eta acceptance for both ways of combining the limits. """
    particles = generator.create_particles([(22, 0, 6.0, eta, 0.0)])
    for eta_mode in params.EtaAcceptanceMode:
        selection = params.TriggerSelection(eta_mode = eta_mode)
        assert particle_selection.trigger_eta_mask(particles, selection)[0] == expected[eta_mode.name]

@pytest.mark.parametrize("particle, expected", [
    ((211, 1, 2.0, 0.5, 0.1), True),
    ((-211, -1, 2.0, -0.5, 0.1), True),
    ((211, 1, 1.2, 0.5, 0.1), True),
    ((211, 1, 20.0, 0.5, 0.1), True),
    ((211, 1, 1.1, 0.5, 0.1), False),
    ((211, 1, 20.5, 0.5, 0.1), False),
    ((211, 1, 2.0, 1.0, 0.1), False),
    ((22, 0, 2.0, 0.5, 0.1), False),
], ids = [
    "Positive", "Negative", "Lower pt edge", "Upper pt edge", "Too soft", "Too hard", "Eta edge", "Neutral",
])
def test_associate_mask(logging_mixin, particle, expected):
    """ Test the associated particle selection. """
    particles = generator.create_particles([particle])
    assert particle_selection.associate_mask(particles, params.AssociateSelection())[0] == expected

def test_select_sorted_by_pt(logging_mixin):
    """ Test that the selected particles are sorted by descending pt with a stable sort. """
    particles = generator.create_particles([
        (211, 1, 2.0, 0.1, 0.0),
        (22, 0, 5.5, 3.5, 1.0),
        (211, -1, 3.0, 0.2, 2.0),
        (22, 0, 7.0, 3.5, 3.0),
        (211, 1, 2.0, 0.3, 4.0),
        (22, 0, 5.5, 3.6, 5.0),
    ])

    triggers = particle_selection.select_triggers(particles, params.TriggerSelection())
    associates = particle_selection.select_associates(particles, params.AssociateSelection())

    np.testing.assert_array_equal(triggers["pT"], [7.0, 5.5, 5.5])
    # Ties retain the input order.
    np.testing.assert_array_equal(triggers["phi"], [3.0, 1.0, 5.0])
    np.testing.assert_array_equal(associates["pT"], [3.0, 2.0, 2.0])
    np.testing.assert_array_equal(associates["eta"], [0.2, 0.1, 0.3])

def test_empty_selection(logging_mixin):
    """ Test that no passing particles yields empty arrays rather than an error. """
    empty = generator.create_particles([])
    assert len(particle_selection.select_triggers(empty, params.TriggerSelection())) == 0
    assert len(particle_selection.select_associates(empty, params.AssociateSelection())) == 0

    particles = generator.create_particles([(2212, 1, 0.5, 0.0, 0.0)])
    assert len(particle_selection.select_triggers(particles, params.TriggerSelection())) == 0
    assert len(particle_selection.select_associates(particles, params.AssociateSelection())) == 0
