#!/usr/bin/env python

""" Base package for the gamma-hadron analysis.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

__all__ = [
    "analysis_config",
    "analysis_manager",
    "analysis_objects",
    "params",
]
