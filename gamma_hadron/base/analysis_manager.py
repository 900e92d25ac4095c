#!/usr/bin/env python

""" Shared driver for the gamma-hadron analysis managers.

A manager reads the configuration for the selected collision energy and system, knows where to
write the outputs, and keeps the progress bars for the event loop.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

import abc
import coloredlogs
import enlighten
import logging
from typing import Any, Type, TypeVar

from pachyderm import generic_class

from gamma_hadron.base import analysis_config
from gamma_hadron.base import analysis_objects
from gamma_hadron.base import params

logger = logging.getLogger(__name__)

class Manager(generic_class.EqualityMixin, abc.ABC):
    """ Base class for the analysis managers.

    Args:
        config_filename: Path to the YAML configuration.
        selected_analysis_options: Collision energy and system. Values which are not set are filled
            with the defaults during validation.
        manager_task_name: Name of the manager block in the configuration.

    Attributes:
        config_filename: Path to the YAML configuration.
        selected_analysis_options: Validated collision energy and system.
        task_name: Name of the manager block in the configuration.
        config: Full configuration, with the task block already overridden.
        task_config: Overridden configuration of the manager block.
        output_info: Where the outputs are written, with the selected options filled in.
        _progress_manager: Status bars for the event loop.
    """
    def __init__(self, config_filename: str,
                 selected_analysis_options: params.SelectedAnalysisOptions,
                 manager_task_name: str,
                 **kwargs: Any):
        self.config_filename = config_filename
        self.selected_analysis_options = analysis_config.validate_arguments(selected_analysis_options)
        self.task_name = manager_task_name

        self.config = analysis_config.read_config_using_selected_options(
            task_name = self.task_name,
            config_filename = self.config_filename,
            selected_analysis_options = self.selected_analysis_options,
        )
        self.task_config = self.config[self.task_name]

        formatting_options = analysis_config.determine_formatting_options(
            task_name = self.task_name,
            selected_analysis_options = self.selected_analysis_options,
        )
        self.output_info = analysis_objects.OutputWrapper(
            output_prefix = self.config["outputPrefix"].format(**formatting_options),
        )
        logger.debug(f"{self.task_name}: {self.selected_analysis_options}, output: {self.output_info.output_prefix}")

        self._progress_manager = enlighten.get_manager()

    @abc.abstractmethod
    def run(self) -> bool:
        """ Run the analysis.

        Returns:
            True if the analysis was run successfully.
        """
        ...

    def _run(self) -> bool:
        """ Run the analysis, and then release the terminal from the progress bars.

        Returns:
            True if the analysis was run successfully.
        """
        try:
            return self.run()
        finally:
            self._progress_manager.stop()

_T = TypeVar("_T", bound = Manager)

def run_helper(manager_class: Type[_T], **kwargs: str) -> _T:
    """ Create a manager from the terminal arguments and run it.

    Args:
        manager_class: Manager to be created. It is expected to know its own task name.
        task_name: Task name for the argument parsing help.
        description: Description for the argument parsing help.
    Returns:
        The manager, after it has been run.
    """
    coloredlogs.install(
        level = logging.DEBUG,
        fmt = "%(asctime)s %(name)s:%(lineno)d %(levelname)s %(message)s"
    )

    config_filename, selected_analysis_options = analysis_config.determine_selected_options_from_kwargs(
        **kwargs,
    )
    manager = manager_class(
        config_filename = config_filename,
        selected_analysis_options = selected_analysis_options,
        **kwargs,
    )
    manager._run()

    return manager
