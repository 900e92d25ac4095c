#!/usr/bin/env python

""" Analysis objects for the gamma-hadron analysis.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

from dataclasses import dataclass, field
import logging
import numpy as np
import re
from typing import List, Sequence

from pachyderm import histogram

from gamma_hadron.base import params

# Setup logger
logger = logging.getLogger(__name__)

####################
# Basic data classes
####################
@dataclass
class OutputWrapper:
    """ Simple wrapper to keep track of where outputs should be written.

    Attributes:
        output_prefix: File path to where files should be saved.
    """
    output_prefix: str

###################################
# Iterables for binning (with YAML)
###################################
@dataclass(frozen = True)
class AnalysisBin:
    """ Represent a binned quantity.

    Attributes:
        range: Min and maximum of the bin.
        name: Name of the analysis bin (based on the class name).
    """
    range: params.SelectedRange

    def __str__(self) -> str:
        return str(f"{self.name} Range: ({self.range.min}, {self.range.max})")

    @property
    def name(self) -> str:
        """ Convert class name into capital case. For example: 'CentralityBin' -> 'Centrality Bin'. """
        return re.sub("([a-z])([A-Z])", r"\1 \2", self.__class__.__name__)

@dataclass(frozen = True)
class CentralityBin(AnalysisBin):
    """ A centrality bin, covering the half-open percentile range ``(min, max]``.

    Attributes:
        range: Min and maximum of the bin.
        bin: Index of the bin in the centrality bin table.
    """
    bin: int

    def contains(self, centrality: float) -> bool:
        """ Check whether the centrality value falls within ``(min, max]``. """
        return self.range.min < centrality <= self.range.max

    @property
    def hist_name(self) -> str:
        """ Histogram safe name. For example, "delta_phi_cent_0_40". """
        return f"delta_phi_cent_{self.range.min:g}_{self.range.max:g}".replace(".", "p")

def create_centrality_bins(ranges: Sequence[params.SelectedRange]) -> List[CentralityBin]:
    """ Create the centrality bin table from the configured ranges.

    Args:
        ranges: Centrality percentile ranges, in the order in which they should be checked.
    Returns:
        Centrality bins, indexed from 0.
    Raises:
        ValueError: If a range is invalid or if two ranges overlap.
    """
    if len(ranges) == 0:
        raise ValueError("Must specify at least one centrality bin.")

    bins = []
    for i, r in enumerate(ranges):
        if not (0 <= r.min < r.max <= 100):
            raise ValueError(r, f"Invalid centrality range ({r.min}, {r.max}]. Must satisfy 0 <= min < max <= 100.")
        bins.append(CentralityBin(range = r, bin = i))

    # Check for overlaps by comparing neighbors after sorting by the lower edge.
    sorted_bins = sorted(bins, key = lambda b: b.range.min)
    for lower, upper in zip(sorted_bins[:-1], sorted_bins[1:]):
        if upper.range.min < lower.range.max:
            raise ValueError((lower.range, upper.range), f"Centrality bins {lower} and {upper} overlap.")

    return bins

##################
# Per bin contents
##################
@dataclass
class BinAccumulator:
    """ Accumulates the delta phi distribution and the number of triggers for a centrality bin.

    Attributes:
        centrality_bin: Centrality bin which owns this accumulator.
        bin_edges: Delta phi histogram bin edges.
        counts: Unweighted counts in each delta phi bin.
        n_triggers: Number of trigger particles in events assigned to this bin.
        n_pairs: Number of pairs which were filled.
        n_out_of_range: Number of fills which were outside of the bin edges.
    """
    centrality_bin: CentralityBin
    bin_edges: np.ndarray
    counts: np.ndarray = field(init = False)
    n_triggers: int = 0
    n_pairs: int = 0
    n_out_of_range: int = 0

    def __post_init__(self) -> None:
        self.bin_edges = np.asarray(self.bin_edges, dtype = np.float64)
        self.counts = np.zeros(len(self.bin_edges) - 1, dtype = np.float64)

    def add_triggers(self, n_triggers: int) -> None:
        """ Increment the trigger counter. """
        if n_triggers < 0:
            raise ValueError(n_triggers, "Number of triggers cannot be negative.")
        self.n_triggers += n_triggers

    def fill(self, values: np.ndarray) -> None:
        """ Fill the given values with unit weight.

        Args:
            values: Delta phi values to fill.
        Returns:
            None. The counts are updated in place.
        """
        values = np.asarray(values, dtype = np.float64).ravel()
        if values.size == 0:
            return
        # ``np.histogram`` includes the upper edge in the last bin.
        h, _ = np.histogram(values, bins = self.bin_edges)
        self.counts += h
        n_in_range = int(np.sum(h))
        self.n_pairs += n_in_range
        self.n_out_of_range += values.size - n_in_range

    def merge(self, other: "BinAccumulator") -> None:
        """ Merge the contents of another accumulator for the same bin into this one. """
        if other.centrality_bin != self.centrality_bin:
            raise ValueError(f"Cannot merge accumulators for different bins: {self.centrality_bin}, {other.centrality_bin}")
        if not np.array_equal(other.bin_edges, self.bin_edges):
            raise ValueError("Cannot merge accumulators with different binning.")
        self.counts += other.counts
        self.n_triggers += other.n_triggers
        self.n_pairs += other.n_pairs
        self.n_out_of_range += other.n_out_of_range

    def normalized_histogram(self) -> histogram.Histogram1D:
        """ Create the per-trigger normalized histogram.

        Returns:
            Histogram scaled by ``1 / n_triggers``.
        Raises:
            ValueError: If there are no triggers.
        """
        if self.n_triggers == 0:
            raise ValueError(self.centrality_bin, f"No triggers in {self.centrality_bin}. Cannot normalize.")
        scale_factor = 1.0 / self.n_triggers
        return histogram.Histogram1D(
            bin_edges = np.copy(self.bin_edges),
            y = self.counts * scale_factor,
            errors_squared = self.counts * scale_factor ** 2,
        )
