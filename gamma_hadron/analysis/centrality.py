#!/usr/bin/env python

""" Centrality estimation and classification.

The estimators need a calibration sample before they can assign a percentile. During that warm-up
period, they return a negative sentinel value, which leads the classifier to reject the event.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import abc
import logging
import numpy as np
from scipy import stats
from typing import List, Optional, Sequence

from gamma_hadron.base import analysis_objects
from gamma_hadron.base import params
from gamma_hadron.event_gen import generator

logger = logging.getLogger(__name__)

# Returned while the estimator is still being calibrated.
CALIBRATING = -1.0

class CentralityEstimator(abc.ABC):
    """ Base class for estimating the centrality percentile of an event.

    Args:
        calibration_sample_size: Number of events used to calibrate the estimator.

    Attributes:
        calibration_sample_size: Number of events used to calibrate the estimator.
        _calibration: Estimator quantity for each event in the calibration sample.
    """
    def __init__(self, calibration_sample_size: int = 50):
        if calibration_sample_size < 1:
            raise ValueError(calibration_sample_size, "Calibration sample size must be at least 1.")
        self.calibration_sample_size = calibration_sample_size
        self._calibration: List[float] = []

    @property
    def calibrated(self) -> bool:
        return len(self._calibration) >= self.calibration_sample_size

    @abc.abstractmethod
    def quantity(self, event: generator.Event) -> float:
        """ Extract the quantity used to estimate the centrality from the event. """
        ...

    @abc.abstractmethod
    def _percentile(self, value: float) -> float:
        """ Convert the quantity into a centrality percentile using the calibration sample. """
        ...

    def centrality(self, event: generator.Event) -> float:
        """ Estimate the centrality of the event.

        Args:
            event: Event of interest.
        Returns:
            Centrality percentile, or ``CALIBRATING`` if the calibration sample is not yet full.
        """
        value = self.quantity(event)
        if not self.calibrated:
            self._calibration.append(value)
            if self.calibrated:
                logger.info(f"{type(self).__name__} calibrated with {len(self._calibration)} events.")
            return CALIBRATING
        return self._percentile(value)

class ImpactParameterEstimator(CentralityEstimator):
    """ Estimate the centrality from the impact parameter.

    Smaller impact parameters are more central, so the percentile is the fraction of calibration
    events with an impact parameter less than or equal to that of the event.
    """
    def quantity(self, event: generator.Event) -> float:
        event_properties, _ = event
        return float(event_properties.impact_parameter)

    def _percentile(self, value: float) -> float:
        return float(stats.percentileofscore(self._calibration, value, kind = "weak"))

class MultiplicityEstimator(CentralityEstimator):
    """ Estimate the centrality from the charged particle multiplicity.

    Larger multiplicities are more central, so the percentile is the fraction of calibration
    events with a multiplicity greater than or equal to that of the event.
    """
    def quantity(self, event: generator.Event) -> float:
        _, particles = event
        return float(np.count_nonzero(particles["charge"]))

    def _percentile(self, value: float) -> float:
        return 100.0 - float(stats.percentileofscore(self._calibration, value, kind = "strict"))

def create_estimator(estimator_type: params.CentralityEstimatorType,
                     calibration_sample_size: int) -> CentralityEstimator:
    """ Create the centrality estimator corresponding to the requested type. """
    estimators = {
        params.CentralityEstimatorType.impact_parameter: ImpactParameterEstimator,
        params.CentralityEstimatorType.multiplicity: MultiplicityEstimator,
    }
    return estimators[estimator_type](calibration_sample_size = calibration_sample_size)

class CentralityClassifier:
    """ Assign events to centrality bins.

    Args:
        estimator: Centrality estimator.
        centrality_bins: Centrality bins, checked in order.
    """
    def __init__(self, estimator: CentralityEstimator, centrality_bins: Sequence[analysis_objects.CentralityBin]):
        self.estimator = estimator
        self.centrality_bins = list(centrality_bins)

    def find_bin(self, centrality: float) -> Optional[analysis_objects.CentralityBin]:
        """ Find the centrality bin corresponding to the given percentile.

        Args:
            centrality: Centrality percentile.
        Returns:
            The first bin where ``min < centrality <= max``, or None if the value is outside of [0, 100]
            or doesn't fall into any bin.
        """
        if centrality < 0 or centrality > 100:
            return None
        for centrality_bin in self.centrality_bins:
            if centrality_bin.contains(centrality):
                return centrality_bin
        return None

    def classify(self, event: generator.Event) -> Optional[analysis_objects.CentralityBin]:
        """ Determine the centrality bin of an event.

        Args:
            event: Event of interest.
        Returns:
            The centrality bin, or None if the event should be rejected.
        """
        return self.find_bin(self.estimator.centrality(event))
