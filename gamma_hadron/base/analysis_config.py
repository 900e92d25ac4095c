#!/usr/bin/env python

""" Manages configuration of the gamma-hadron analysis

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import argparse
import logging
from typing import Any, Dict, List, Optional, Tuple

from pachyderm import generic_config
from pachyderm import yaml

from gamma_hadron.base import analysis_objects
from gamma_hadron.base import params

logger = logging.getLogger(__name__)

def override_options(config: generic_config.DictLike, selected_options: params.SelectedAnalysisOptions,
                     config_containing_override: Optional[generic_config.DictLike] = None) -> generic_config.DictLike:
    """ Override options for the gamma-hadron analysis.

    Selected options include: (energy, collision_system). Note that the order is extremely important!
    If one of them is not specified in the override, then it will be skipped. The overridden values
    are set in ``config``.

    Args:
        config: The dict-like configuration from ruamel.yaml which should be overridden.
        selected_options: The selected analysis options. They will be checked in the order with which
            they are passed, so make certain that it matches the order in the configuration file!
        config_containing_override: The dict-like config containing the override options in
            a map called "override". If it is not specified, it will look for it in the main config.
    Returns:
        The updated configuration
    """
    config = generic_config.override_options(
        config, selected_options.astuple(),
        set_of_possible_options = params.SetOfPossibleOptions.astuple(),
        config_containing_override = config_containing_override,
    )
    config = generic_config.simplify_data_representations(config)

    return config

def determine_selected_options_from_kwargs(
        args: Optional[List[Any]] = None,
        description: str = "Gamma-hadron {task_name}.",
        **kwargs: str) -> Tuple[str, params.SelectedAnalysisOptions]:
    """ Determine the selected analysis options from the command line arguments.

    Defaults are equivalent to None or False so values can be added in the validation
    function if argument values are not specified.

    Args:
        args: Arguments to parse. Default: None (which will then use sys.argv)
        description: Help description for arguments
        kwargs: Additional arguments to format the help description. Often contains ``task_name``
            to specify the task name.
    Returns:
        (config_filename, selected analysis options). The options still need to be validated.
    """
    # Make sure there is always a task name
    if "task_name" not in kwargs:
        kwargs["task_name"] = "analysis"

    # Setup parser
    parser = argparse.ArgumentParser(description = description.format(**kwargs))
    # General options
    parser.add_argument("-c", "--configFilename", metavar="configFilename",
                        type = str, default = "config/analysis_config.yaml",
                        help="Path to config filename")
    parser.add_argument("-e", "--energy", metavar = "energy",
                        type = float, default = 0.0,
                        help = "Collision energy in TeV")
    parser.add_argument("-s", "--collisionSystem", metavar = "collisionSystem",
                        type = str, default = "",
                        help = "Collision system")

    # Parse arguments
    parsed_args = parser.parse_args(args)

    # Even though we will need to create a new selected analysis options object after validation,
    # we store the return values in one for convenience.
    selected_analysis_options = params.SelectedAnalysisOptions(collision_energy = parsed_args.energy,
                                                               collision_system = parsed_args.collisionSystem)
    return (parsed_args.configFilename, selected_analysis_options)

def validate_arguments(selected_args: params.SelectedAnalysisOptions) -> params.SelectedAnalysisOptions:
    """ Validate arguments passed to the analysis task. Converts str and float types to enumerations.

    Note:
        If the selections are not specified, it will default to 200 GeV Au--Au collisions.

    Args:
        selected_args: Selected analysis options from args or otherwise.
    Returns:
        Validated selected options.
    """
    # Energy. Default: 0.2 TeV
    energy = selected_args.collision_energy if selected_args.collision_energy else 0.2
    # Retrieves the enum by value
    energy = energy if type(energy) is params.CollisionEnergy else params.CollisionEnergy(energy)
    # Collision system. Default: AuAu
    collision_system = selected_args.collision_system if selected_args.collision_system else "AuAu"
    collision_system = collision_system if type(collision_system) is params.CollisionSystem else params.CollisionSystem[collision_system]  # type: ignore

    return params.SelectedAnalysisOptions(
        collision_energy = energy,  # type: ignore
        collision_system = collision_system,  # type: ignore
    )

def create_yaml() -> yaml.ruamel.yaml.YAML:
    """ Create the YAML object with the analysis classes registered. """
    # Add in all classes defined in the params module
    return yaml.yaml(modules_to_register = [params])

def read_config_using_selected_options(task_name: str, config_filename: str,
                                       selected_analysis_options: params.SelectedAnalysisOptions) -> generic_config.DictLike:
    """ Read the YAML config and override the values using the task config.

    We combine these steps together because we never want to use a configuration
    without overriding the values based on the selected analysis options.

    Args:
        task_name: Name of the analysis task.
        config_filename: Filename of the YAML config.
        selected_analysis_options: Selected analysis options.
    Returns:
        The YAML configuration.
    """
    yml = create_yaml()

    # Load and override the configuration
    config = generic_config.load_configuration(
        yaml = yml,
        filename = config_filename,
    )
    # The override values are stored in and applied to the task config.
    config[task_name] = override_options(
        config = config[task_name],
        selected_options = selected_analysis_options,
    )

    return config

def determine_formatting_options(task_name: str,
                                 selected_analysis_options: params.SelectedAnalysisOptions) -> Dict[str, Any]:
    """ Determine the formatting dict with the selected analysis options.

    Args:
        task_name: Name of the analysis task.
        selected_analysis_options: Selected analysis options.
    Returns:
        Dict containing the formatting options.
    """
    formatting_options = {}
    formatting_options["task_name"] = task_name

    # We want to convert the enum values into strings for formatting. Performed with a dict comprehension.
    formatting_options.update({k: str(v) for k, v in selected_analysis_options})

    return formatting_options

def centrality_bins_from_config(task_config: generic_config.DictLike) -> List[analysis_objects.CentralityBin]:
    """ Create the centrality bins from the ``centrality`` block of the task config.

    Args:
        task_config: Task configuration.
    Returns:
        Centrality bins.
    """
    ranges = [
        r if isinstance(r, params.SelectedRange) else params.SelectedRange(*r)
        for r in task_config["centrality"]["bins"]
    ]
    return analysis_objects.create_centrality_bins(ranges)
