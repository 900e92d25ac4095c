#!/usr/bin/env python

""" Gamma-hadron medium modification analysis.

.. codeauthor:: Raymond Ehlers <raymond.ehlers@cern.ch>, Yale University
"""

from gamma_hadron.version import __version__  # noqa: F401
