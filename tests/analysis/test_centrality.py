#!/usr/bin/env python

""" Tests for centrality estimation and classification.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import logging
import pytest

from gamma_hadron.analysis import centrality
from gamma_hadron.base import analysis_objects
from gamma_hadron.base import params

logger = logging.getLogger(__name__)

@pytest.fixture
def centrality_bins():
    return analysis_objects.create_centrality_bins([params.SelectedRange(0, 40)])

def _charged(n):
    """ Create ``n`` charged particles. """
    return [(211, 1, 2.0, 0.0, 0.0)] * n

def test_impact_parameter_calibration(logging_mixin, create_event):
    """ Test that the estimator returns the sentinel value during the calibration period. """
    estimator = centrality.ImpactParameterEstimator(calibration_sample_size = 4)
    for b in [1, 2, 3, 4]:
        assert not estimator.calibrated
        assert estimator.centrality(create_event([], impact_parameter = b)) == centrality.CALIBRATING
    assert estimator.calibrated

    # The calibration sample is fixed after the warm-up.
    assert estimator.centrality(create_event([], impact_parameter = 2.5)) == pytest.approx(50.0)
    assert estimator.centrality(create_event([], impact_parameter = 100)) == pytest.approx(100.0)
    assert estimator.centrality(create_event([], impact_parameter = 0.5)) == pytest.approx(0.0)
    assert estimator.centrality(create_event([], impact_parameter = 1)) == pytest.approx(25.0)

def test_multiplicity_estimator(logging_mixin, create_event):
    """ Test that higher multiplicity events are more central. """
    estimator = centrality.MultiplicityEstimator(calibration_sample_size = 4)
    for n in [10, 20, 30, 40]:
        assert estimator.centrality(create_event(_charged(n))) == centrality.CALIBRATING

    assert estimator.centrality(create_event(_charged(35))) == pytest.approx(25.0)
    assert estimator.centrality(create_event(_charged(40))) == pytest.approx(25.0)
    assert estimator.centrality(create_event(_charged(50))) == pytest.approx(0.0)
    assert estimator.centrality(create_event(_charged(5))) == pytest.approx(100.0)
    # Neutral particles don't contribute.
    assert estimator.quantity(create_event(_charged(3) + [(22, 0, 6.0, 3.5, 0.0)])) == 3

def test_invalid_calibration_sample_size(logging_mixin):
    with pytest.raises(ValueError):
        centrality.ImpactParameterEstimator(calibration_sample_size = 0)

@pytest.mark.parametrize("estimator_type, expected_class", [
    (params.CentralityEstimatorType.impact_parameter, centrality.ImpactParameterEstimator),
    (params.CentralityEstimatorType.multiplicity, centrality.MultiplicityEstimator),
], ids = ["Impact parameter", "Multiplicity"])
def test_create_estimator(logging_mixin, estimator_type, expected_class):
    """ Test creating the estimator from the type. """
    estimator = centrality.create_estimator(estimator_type = estimator_type, calibration_sample_size = 10)
    assert isinstance(estimator, expected_class)
    assert estimator.calibration_sample_size == 10

@pytest.mark.parametrize("value, expected_bin", [
    (-1.0, None),
    (0.0, None),
    (20.0, 0),
    (40.0, 0),
    (55.0, None),
    (100.0, None),
    (100.5, None),
], ids = ["Calibrating", "Zero", "Central", "Upper edge", "Peripheral", "100", "Above 100"])
def test_find_bin(logging_mixin, centrality_bins, mocker, value, expected_bin):
    """ Test assigning centrality values to bins. """
    classifier = centrality.CentralityClassifier(estimator = mocker.MagicMock(), centrality_bins = centrality_bins)
    result = classifier.find_bin(value)

    if expected_bin is None:
        assert result is None
    else:
        assert result == centrality_bins[expected_bin]

def test_find_bin_first_match(logging_mixin, mocker):
    """ Test that the bins are scanned in order. """
    bins = analysis_objects.create_centrality_bins([
        params.SelectedRange(40, 60), params.SelectedRange(0, 10), params.SelectedRange(10, 40)
    ])
    classifier = centrality.CentralityClassifier(estimator = mocker.MagicMock(), centrality_bins = bins)

    assert classifier.find_bin(5).bin == 1
    assert classifier.find_bin(10).bin == 1
    assert classifier.find_bin(10.5).bin == 2
    assert classifier.find_bin(50).bin == 0
    assert classifier.find_bin(75) is None

def test_classify(logging_mixin, centrality_bins, create_event, mocker):
    """ Test classification using the estimator output. """
    estimator = mocker.MagicMock(spec = ["centrality"])
    estimator.centrality.return_value = 20.0
    classifier = centrality.CentralityClassifier(estimator = estimator, centrality_bins = centrality_bins)
    event = create_event([])

    assert classifier.classify(event) == centrality_bins[0]
    estimator.centrality.assert_called_once_with(event)

    estimator.centrality.return_value = centrality.CALIBRATING
    assert classifier.classify(event) is None
