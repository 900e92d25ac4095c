#!/usr/bin/env python

""" Gamma-hadron analysis parameters.

Contains the selected analysis options, the enumerations which select between analysis
conventions, and the containers for the trigger and associated particle selections.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

from dataclasses import dataclass
import enum
import logging
import numpy as np
from typing import Any, cast, Iterator, Mapping, Tuple, Union

from pachyderm import yaml

logger = logging.getLogger(__name__)

# PDG codes for the particles which are used in the analysis.
PID_PI0 = 111
PID_GAMMA = 22

########
# Utility functions
########
def _range_from_config(value: Any) -> "SelectedRange":
    """ Convert a configuration value into a ``SelectedRange``.

    Args:
        value: Either an existing ``SelectedRange`` or a two element sequence of (min, max).
    Returns:
        The corresponding selected range.
    """
    if isinstance(value, SelectedRange):
        return value
    return SelectedRange(*value)

#########################
## Helpers and containers
#########################
@dataclass(frozen = True)
class SelectedRange:
    """ Helper for selected ranges. """
    min: float
    max: float

    def __iter__(self) -> Iterator[Tuple[str, float]]:
        for k, v in vars(self).items():
            yield k, v

    @classmethod
    def from_yaml(cls, constructor: yaml.Constructor,
                  data: Union[yaml.ruamel.yaml.nodes.MappingNode, yaml.ruamel.yaml.nodes.SequenceNode]) -> "SelectedRange":
        """ Decode YAML representer.

        Expected block is of the form:

        .. code-block:: yaml

            val: !SelectedRange [0, 40]

        or alternatively (which will be used when YAML is dumping the object):

        .. code-block:: yaml

            val: !SelectedRange
                min: 0
                max: 40

        which will yield:

        .. code-block:: python

            >>> val == SelectedRange(min = 0, max = 40)
        """
        # We've just passed a list, so just reconstruct it assuming that the arguments are in order.
        if isinstance(data, yaml.ruamel.yaml.nodes.SequenceNode):
            values = [constructor.construct_object(v) for v in data.value]
            return cls(*values)

        # Otherwise, we should have received a MappingNode. This is usually used when YAML has
        # written the object.
        # NOTE: Just calling ``dict(...)`` would not be sufficient because the nodes wouldn't be converted
        arguments = {
            constructor.construct_object(key_node): constructor.construct_object(value_node)
            for key_node, value_node in data.value
        }
        return cls(**arguments)

#########
# Classes
#########
class CollisionEnergy(enum.Enum):
    """ Define the available collision system energies.

    Defined in TeV.
    """
    zero_point_two = 0.2
    zero_point_zero_six_two = 0.0624

    def __str__(self) -> str:
        """ Returns a string of the value. """
        return str(self.value)

    # Handle YAML serialization
    to_yaml = classmethod(yaml.enum_to_yaml)

    @classmethod
    def from_yaml(cls, constructor: yaml.Constructor, data: yaml.ruamel.yaml.nodes.ScalarNode) -> "CollisionEnergy":
        """ Decode YAML representer. """
        return cls(float(data.value))

class CollisionSystem(enum.Enum):
    """ Define the collision system """
    pp = "pp"
    dAu = "dAu"
    AuAu = "AuAu"

    def __str__(self) -> str:
        """ Return a string of the name of the system. """
        return self.name

    # Handle YAML serialization
    to_yaml = classmethod(yaml.enum_to_yaml)
    from_yaml = classmethod(yaml.enum_from_yaml)

class CentralityEstimatorType(enum.Enum):
    """ Quantity used to estimate the event centrality. """
    impact_parameter = 0
    multiplicity = 1

    def __str__(self) -> str:
        return self.name

    # Handle YAML serialization
    to_yaml = classmethod(yaml.enum_to_yaml)
    from_yaml = classmethod(yaml.enum_from_yaml)

class EtaAcceptanceMode(enum.Enum):
    """ How the trigger pseudorapidity limits are combined.

    ``union`` accepts a particle if ``|eta| < max or |eta| > min``. For ``min < max``, this
    accepts every particle. ``window`` requires ``min < |eta| < max``.
    """
    union = 0
    window = 1

    def __str__(self) -> str:
        return self.name

    # Handle YAML serialization
    to_yaml = classmethod(yaml.enum_to_yaml)
    from_yaml = classmethod(yaml.enum_from_yaml)

class AngleFoldStep(enum.Enum):
    """ Step which is repeatedly added to a negative delta phi until it is non-negative. """
    full_period = 2 * np.pi
    quarter_period = np.pi / 2

    @property
    def step(self) -> float:
        # Help out mypy...
        return cast(float, self.value)

    def __str__(self) -> str:
        return self.name

    # Handle YAML serialization
    to_yaml = classmethod(yaml.enum_to_yaml)
    from_yaml = classmethod(yaml.enum_from_yaml)

@dataclass(frozen = True)
class TriggerSelection:
    """ Trigger particle selection.

    Attributes:
        eta: Pseudorapidity limits on ``|eta|``.
        eta_mode: How the eta limits are combined.
        pi0_pt: Inclusive pt range for neutral pions in GeV.
        gamma_pt: Inclusive pt range for photons in GeV.
    """
    eta: SelectedRange = SelectedRange(3.1, 3.9)
    eta_mode: EtaAcceptanceMode = EtaAcceptanceMode.union
    pi0_pt: SelectedRange = SelectedRange(0.12, 0.16)
    gamma_pt: SelectedRange = SelectedRange(5.0, 9.0)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TriggerSelection":
        """ Create the selection from the ``trigger`` block of the task config.

        Any missing value falls back to the default.
        """
        kwargs: dict = {}
        for name in ["eta", "pi0_pt", "gamma_pt"]:
            if name in config:
                kwargs[name] = _range_from_config(config[name])
        if "eta_mode" in config:
            eta_mode = config["eta_mode"]
            kwargs["eta_mode"] = eta_mode if isinstance(eta_mode, EtaAcceptanceMode) else EtaAcceptanceMode[eta_mode]
        return cls(**kwargs)

@dataclass(frozen = True)
class AssociateSelection:
    """ Associated charged particle selection.

    Attributes:
        max_abs_eta: Maximum ``|eta|`` (exclusive).
        pt: Inclusive pt range in GeV.
    """
    max_abs_eta: float = 1.0
    pt: SelectedRange = SelectedRange(1.2, 20.0)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "AssociateSelection":
        """ Create the selection from the ``associate`` block of the task config. """
        kwargs: dict = {}
        if "max_abs_eta" in config:
            kwargs["max_abs_eta"] = float(config["max_abs_eta"])
        if "pt" in config:
            kwargs["pt"] = _range_from_config(config["pt"])
        return cls(**kwargs)

@dataclass
class SelectedAnalysisOptions:
    collision_energy: CollisionEnergy
    collision_system: CollisionSystem

    def astuple(self) -> Tuple[Any, ...]:
        """ Tuple of the selected analysis option values. """
        return tuple(dict(self).values())

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        for k, v in vars(self).items():
            yield k, v

# For use with overriding configuration values
SetOfPossibleOptions = SelectedAnalysisOptions(CollisionEnergy,  # type: ignore
                                               CollisionSystem)
