#!/usr/bin/env python

""" Gamma-hadron medium modification analysis.

Measures the azimuthal correlation between trigger photons (or neutral pions) and associated
charged hadrons in centrality bins, normalized per trigger. Can be invoked via
``python -m gamma_hadron.analysis.medium_modification -c ...``.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import enlighten
import enum
import logging
import numpy as np
import os
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from pachyderm import histogram

from gamma_hadron.base import analysis_config
from gamma_hadron.base import analysis_manager
from gamma_hadron.base import analysis_objects
from gamma_hadron.base import params
from gamma_hadron.analysis import centrality
from gamma_hadron.analysis import particle_selection
from gamma_hadron.event_gen import generator
from gamma_hadron.event_gen import toy

# Output format for the finalized histograms.
DTYPE_HIST = np.dtype([
    ("x", np.float64), ("bin_low", np.float64), ("bin_high", np.float64), ("y", np.float64), ("y_error", np.float64),
])

logger = logging.getLogger(__name__)

class AnalysisState(enum.Enum):
    """ Lifecycle of the analysis. Transitions only go forward.

    Both ``finalized`` and ``merged`` are terminal. An analysis is ``merged`` after its contents
    were merged into another analysis.
    """
    uninitialized = 0
    initialized = 1
    accumulating = 2
    finalized = 3
    merged = 4

    def __str__(self) -> str:
        return self.name

def fold_delta_phi(delta_phi: Union[float, np.ndarray], step: float = 2 * np.pi) -> Union[float, np.ndarray]:
    """ Fold delta phi into a non-negative range.

    The step is repeatedly added to any negative value until it is non-negative. Non-negative
    values are returned unchanged. With a step of 2 pi, values in (-2 pi, 2 pi) are mapped into
    [0, 2 pi).

    Args:
        delta_phi: Delta phi value(s).
        step: Step which is added to negative values.
    Returns:
        Folded delta phi value(s).
    """
    if step <= 0:
        raise ValueError(step, "Fold step must be positive.")
    values = np.asarray(delta_phi, dtype = np.float64)
    n_steps = np.where(values < 0, np.ceil(-values / step), 0)
    folded = values + n_steps * step
    # Rounding can leave a value just below 0.
    folded = np.where(folded < 0, folded + step, folded)
    if folded.ndim == 0:
        return float(folded)
    return folded

def pair_delta_phi(triggers: np.ndarray, associates: np.ndarray, step: float = 2 * np.pi) -> np.ndarray:
    """ Calculate the folded delta phi for all trigger-associated pairs.

    Only pairs where the associated particle has a strictly smaller pt than the trigger are included.

    Args:
        triggers: Trigger particles.
        associates: Associated particles.
        step: Fold step. See ``fold_delta_phi(...)``.
    Returns:
        Folded delta phi values for all accepted pairs.
    """
    if len(triggers) == 0 or len(associates) == 0:
        return np.array([], dtype = np.float64)

    # Shape is (n_triggers, n_associates)
    pair_mask = associates["pT"][np.newaxis, :] < triggers["pT"][:, np.newaxis]
    delta_phi = associates["phi"][np.newaxis, :] - triggers["phi"][:, np.newaxis]
    return fold_delta_phi(delta_phi[pair_mask], step = step)

class MediumModificationAnalysis:
    """ Gamma-hadron medium modification analysis.

    The analysis must be set up, then events are processed one at a time, and finally it is
    finalized exactly once.

    Args:
        classifier: Assigns events to centrality bins.
        trigger_selection: Trigger particle selection.
        associate_selection: Associated particle selection.
        n_delta_phi_bins: Number of delta phi bins between 0 and 2 pi.
        fold_step: Convention for folding negative delta phi values.

    Attributes:
        classifier: Assigns events to centrality bins.
        trigger_selection: Trigger particle selection.
        associate_selection: Associated particle selection.
        fold_step: Convention for folding negative delta phi values.
        bin_edges: Delta phi bin edges.
        state: Current state of the analysis.
        accumulators: Per centrality bin accumulated values.
        hists: Per trigger normalized delta phi hists. Only available after finalization.
        n_accepted_events: Number of events which were assigned to a centrality bin.
        n_rejected_events: Number of events which were rejected by the centrality selection.
    """
    def __init__(self, classifier: centrality.CentralityClassifier,
                 trigger_selection: params.TriggerSelection,
                 associate_selection: params.AssociateSelection,
                 n_delta_phi_bins: int = 36,
                 fold_step: params.AngleFoldStep = params.AngleFoldStep.full_period):
        self.classifier = classifier
        self.trigger_selection = trigger_selection
        self.associate_selection = associate_selection
        self.fold_step = fold_step
        if n_delta_phi_bins < 1:
            raise ValueError(n_delta_phi_bins, "Must have at least one delta phi bin.")
        self.bin_edges = np.linspace(0, 2 * np.pi, n_delta_phi_bins + 1)

        self.state = AnalysisState.uninitialized
        self.accumulators: Dict[analysis_objects.CentralityBin, analysis_objects.BinAccumulator] = {}
        self.hists: Dict[analysis_objects.CentralityBin, histogram.Histogram1D] = {}
        self.n_accepted_events = 0
        self.n_rejected_events = 0

    @classmethod
    def from_config(cls, task_config: Mapping[str, Any]) -> "MediumModificationAnalysis":
        """ Construct the analysis from the task configuration.

        Args:
            task_config: Task configuration. It must already be overridden.
        Returns:
            The analysis object.
        """
        centrality_config = task_config["centrality"]
        estimator_type = centrality_config.get("estimator", "impact_parameter")
        if not isinstance(estimator_type, params.CentralityEstimatorType):
            estimator_type = params.CentralityEstimatorType[estimator_type]
        estimator = centrality.create_estimator(
            estimator_type = estimator_type,
            calibration_sample_size = centrality_config.get("calibration_sample_size", 50),
        )
        classifier = centrality.CentralityClassifier(
            estimator = estimator,
            centrality_bins = analysis_config.centrality_bins_from_config(task_config),
        )

        delta_phi_config = task_config.get("delta_phi", {})
        fold_step = delta_phi_config.get("fold_step", "full_period")
        if not isinstance(fold_step, params.AngleFoldStep):
            fold_step = params.AngleFoldStep[fold_step]

        return cls(
            classifier = classifier,
            trigger_selection = params.TriggerSelection.from_config(task_config.get("trigger", {})),
            associate_selection = params.AssociateSelection.from_config(task_config.get("associate", {})),
            n_delta_phi_bins = delta_phi_config.get("n_bins", 36),
            fold_step = fold_step,
        )

    @property
    def centrality_bins(self) -> Iterable[analysis_objects.CentralityBin]:
        return self.classifier.centrality_bins

    def setup(self) -> bool:
        """ Create the per bin accumulators.

        Returns:
            True if the setup was successful.
        """
        if self.state != AnalysisState.uninitialized:
            raise RuntimeError(f"Cannot setup the analysis in state {self.state}.")

        if self.trigger_selection.eta_mode == params.EtaAcceptanceMode.union \
                and self.trigger_selection.eta.min < self.trigger_selection.eta.max:
            logger.warning(
                f"Trigger eta selection ({self.trigger_selection.eta.min}, {self.trigger_selection.eta.max})"
                f" is combined with {self.trigger_selection.eta_mode}, so it will accept all particles."
            )

        self.accumulators = {
            centrality_bin: analysis_objects.BinAccumulator(
                centrality_bin = centrality_bin, bin_edges = self.bin_edges,
            )
            for centrality_bin in self.centrality_bins
        }
        logger.debug(f"Created accumulators for {[str(b) for b in self.accumulators]}")

        self.state = AnalysisState.initialized
        return True

    def _check_can_accumulate(self) -> None:
        if self.state not in [AnalysisState.initialized, AnalysisState.accumulating]:
            raise RuntimeError(f"Cannot accumulate in state {self.state}.")

    def accumulate(self, centrality_bin: analysis_objects.CentralityBin,
                   triggers: np.ndarray, associates: np.ndarray) -> int:
        """ Accumulate the pairs from one event.

        The trigger counter is incremented once per event by the number of triggers, regardless of
        how many pairs are formed.

        Args:
            centrality_bin: Centrality bin of the event.
            triggers: Trigger particles in the event.
            associates: Associated particles in the event.
        Returns:
            Number of pairs which were filled.
        """
        self._check_can_accumulate()
        self.state = AnalysisState.accumulating

        accumulator = self.accumulators[centrality_bin]
        accumulator.add_triggers(len(triggers))
        delta_phi = pair_delta_phi(triggers, associates, step = self.fold_step.step)
        accumulator.fill(delta_phi)

        return len(delta_phi)

    def process_event(self, event: generator.Event) -> bool:
        """ Process each event.

        Args:
            event: Event level information and the input particles.
        Returns:
            True if the event was assigned to a centrality bin and processed.
        """
        self._check_can_accumulate()

        centrality_bin = self.classifier.classify(event)
        if centrality_bin is None:
            self.n_rejected_events += 1
            return False

        _, particles = event
        triggers = particle_selection.select_triggers(particles, self.trigger_selection)
        associates = particle_selection.select_associates(particles, self.associate_selection)
        self.accumulate(centrality_bin, triggers, associates)
        self.n_accepted_events += 1

        return True

    def event_loop(self, events: Iterable[generator.Event], progress_manager: enlighten._manager.Manager,
                   n_events: Optional[int] = None) -> int:
        """ Loop over the events.

        Args:
            events: Events to be processed.
            progress_manager: Used to display processing progress.
            n_events: Expected number of events. Only used for displaying the progress.
        Returns:
            Number of accepted events.
        """
        n_accepted = 0
        with progress_manager.counter(total = n_events,
                                      desc = "Analyzing", unit = "events") as progress:
            for event in events:
                # Keep track of the number of events which actually passed all of the conditions.
                if self.process_event(event):
                    n_accepted += 1

                # Update the progress bar
                progress.update()

        logger.info(f"n_accepted: {n_accepted}, n_rejected: {self.n_rejected_events}")

        return n_accepted

    def merge(self, other: "MediumModificationAnalysis") -> None:
        """ Merge the accumulated values from an analysis of an independent set of events.

        Args:
            other: Analysis to be merged into this one. It must have the same centrality bins and binning.
                It can't be used afterwards.
        Returns:
            None. This analysis is updated in place.
        """
        if other is self:
            raise ValueError("Cannot merge an analysis into itself.")
        self._check_can_accumulate()
        other._check_can_accumulate()
        if set(other.accumulators) != set(self.accumulators):
            raise ValueError("Cannot merge analyses with different centrality bins.")

        for centrality_bin, accumulator in self.accumulators.items():
            accumulator.merge(other.accumulators[centrality_bin])
        self.n_accepted_events += other.n_accepted_events
        self.n_rejected_events += other.n_rejected_events
        self.state = AnalysisState.accumulating
        other.state = AnalysisState.merged

    def finalize(self) -> Dict[analysis_objects.CentralityBin, histogram.Histogram1D]:
        """ Normalize the delta phi hists by the number of triggers.

        Returns:
            Per trigger normalized hists, keyed by centrality bin.
        Raises:
            ValueError: If any centrality bin doesn't have any triggers. No hists are normalized in that case.
            RuntimeError: If the analysis was not setup or was already finalized.
        """
        self._check_can_accumulate()

        # Check all bins before modifying anything.
        empty_bins = [b for b, accumulator in self.accumulators.items() if accumulator.n_triggers == 0]
        if empty_bins:
            raise ValueError(
                empty_bins,
                f"No triggers in centrality bin(s) {', '.join(str(b) for b in empty_bins)}. Cannot normalize per trigger."
            )

        for centrality_bin, accumulator in self.accumulators.items():
            logger.info(
                f"{centrality_bin}: n_triggers: {accumulator.n_triggers}, n_pairs: {accumulator.n_pairs}"
            )
            if accumulator.n_out_of_range:
                logger.warning(f"{centrality_bin}: {accumulator.n_out_of_range} pairs were outside of the binning.")
            self.hists[centrality_bin] = accumulator.normalized_histogram()

        self.state = AnalysisState.finalized
        return self.hists

def save_hist(output_info: analysis_objects.OutputWrapper, hist: histogram.Histogram1D, output_name: str) -> str:
    """ Write a histogram stored as a structured array to a file.

    Args:
        output_info: Output information.
        hist: Histogram to write out.
        output_name: Filename under which the hist should be saved, but without the file extension.
    Returns:
        The filename under which the hist was written.
    """
    # Determine filename
    if not output_name.endswith(".npy"):
        output_name += ".npy"
    full_path = os.path.join(output_info.output_prefix, output_name)

    arr = np.zeros(len(hist.y), dtype = DTYPE_HIST)
    arr["x"] = hist.x
    arr["bin_low"] = hist.bin_edges[:-1]
    arr["bin_high"] = hist.bin_edges[1:]
    arr["y"] = hist.y
    arr["y_error"] = hist.errors

    # Write
    with open(full_path, "wb") as f:
        np.save(f, arr)

    return full_path

def save_hists(output_info: analysis_objects.OutputWrapper,
               hists: Mapping[analysis_objects.CentralityBin, histogram.Histogram1D]) -> Dict[str, str]:
    """ Write all of the finalized hists.

    Returns:
        Map from hist name to the filename where it was written.
    """
    if not os.path.exists(output_info.output_prefix):
        os.makedirs(output_info.output_prefix)
    return {
        centrality_bin.hist_name: save_hist(output_info, hist, centrality_bin.hist_name)
        for centrality_bin, hist in hists.items()
    }

class MediumModificationManager(analysis_manager.Manager):
    """ Manage running the medium modification analysis over toy events.

    Args:
        config_filename: Path to the configuration filename.
        selected_analysis_options: Selected analysis options.
    """
    def __init__(self, config_filename: str, selected_analysis_options: params.SelectedAnalysisOptions, **kwargs: str):
        super().__init__(
            config_filename = config_filename, selected_analysis_options = selected_analysis_options,
            manager_task_name = "MediumModificationManager", **kwargs,
        )

        # Basic configuration
        self.n_events = self.task_config["n_events"]
        self.random_seed = self.task_config.get("random_seed", None)

        self.analysis = MediumModificationAnalysis.from_config(self.task_config)
        self.generator = toy.ToyGenerator(
            # Energy is specified in TeV in ``params.CollisionEnergy``, but the generator expects GeV.
            sqrt_s = self.selected_analysis_options.collision_energy.value * 1000,
            random_seed = self.random_seed,
            **self.task_config.get("toy_generator", {}),
        )

    def run(self) -> bool:
        """ Setup and run the analysis. """
        logger.info("Setting up")
        if not self.generator.setup() or not self.analysis.setup():
            raise RuntimeError("Setup failed!")

        logger.info(f"Analyzing {self.n_events} events")
        self.analysis.event_loop(
            events = self.generator(n_events = self.n_events),
            progress_manager = self._progress_manager,
            n_events = self.n_events,
        )
        hists = self.analysis.finalize()

        filenames = save_hists(self.output_info, hists)
        for name, filename in filenames.items():
            logger.info(f"Wrote {name} to {filename}")

        return True

def run_from_terminal() -> MediumModificationManager:
    """ Driver function for running the medium modification analysis. """
    # Basic setup
    # Quiet down some pachyderm modules
    logging.getLogger("pachyderm.generic_config").setLevel(logging.INFO)
    logging.getLogger("pachyderm.yaml").setLevel(logging.INFO)
    logging.getLogger("pachyderm.histogram").setLevel(logging.INFO)

    # Setup and run the analysis
    manager: MediumModificationManager = analysis_manager.run_helper(
        manager_class = MediumModificationManager, task_name = "MediumModificationManager",
        description = "Gamma-hadron medium modification analysis.",
    )

    # Return it for convenience.
    return manager

if __name__ == "__main__":
    run_from_terminal()
