#!/usr/bin/env python

""" Trigger and associated particle selection.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import logging
import numpy as np

from gamma_hadron.base import params

logger = logging.getLogger(__name__)

def _in_range(values: np.ndarray, selected_range: params.SelectedRange) -> np.ndarray:
    """ Inclusive range check. """
    return (values >= selected_range.min) & (values <= selected_range.max)

def sort_by_pt(particles: np.ndarray) -> np.ndarray:
    """ Sort particles by descending pt.

    A stable sort is used so that particles with equal pt retain their input order.

    Args:
        particles: Particles to be sorted.
    Returns:
        Sorted particles.
    """
    return particles[np.argsort(-particles["pT"], kind = "stable")]

def trigger_eta_mask(particles: np.ndarray, selection: params.TriggerSelection) -> np.ndarray:
    """ Determine which particles pass the trigger eta acceptance.

    Args:
        particles: Particles to check.
        selection: Trigger selection.
    Returns:
        Mask of the particles which are accepted.
    """
    abs_eta = np.abs(particles["eta"])
    if selection.eta_mode == params.EtaAcceptanceMode.union:
        return (abs_eta < selection.eta.max) | (abs_eta > selection.eta.min)
    return (abs_eta > selection.eta.min) & (abs_eta < selection.eta.max)

def trigger_mask(particles: np.ndarray, selection: params.TriggerSelection) -> np.ndarray:
    """ Determine which particles pass the trigger selection.

    Triggers are neutral pions or photons within their respective pt ranges.

    Args:
        particles: Particles to check.
        selection: Trigger selection.
    Returns:
        Mask of the particles which are triggers.
    """
    pid = particles["pid"]
    pt = particles["pT"]
    pi0 = (pid == params.PID_PI0) & _in_range(pt, selection.pi0_pt)
    gamma = (pid == params.PID_GAMMA) & _in_range(pt, selection.gamma_pt)
    return trigger_eta_mask(particles, selection) & (pi0 | gamma)

def associate_mask(particles: np.ndarray, selection: params.AssociateSelection) -> np.ndarray:
    """ Determine which particles pass the associated charged particle selection.

    Args:
        particles: Particles to check.
        selection: Associated particle selection.
    Returns:
        Mask of the particles which are associated particles.
    """
    return (
        (particles["charge"] != 0)
        & (np.abs(particles["eta"]) < selection.max_abs_eta)
        & _in_range(particles["pT"], selection.pt)
    )

def select_triggers(particles: np.ndarray, selection: params.TriggerSelection) -> np.ndarray:
    """ Select trigger particles, sorted by descending pt. """
    return sort_by_pt(particles[trigger_mask(particles, selection)])

def select_associates(particles: np.ndarray, selection: params.AssociateSelection) -> np.ndarray:
    """ Select associated particles, sorted by descending pt. """
    return sort_by_pt(particles[associate_mask(particles, selection)])
