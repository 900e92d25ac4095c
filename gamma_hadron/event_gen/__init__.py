#!/usr/bin/env python

""" Event sources for the gamma-hadron analysis.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

__all__ = [
    "generator",
    "toy",
]
