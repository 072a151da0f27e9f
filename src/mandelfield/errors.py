# -*- coding: utf-8 -*-
"""
Exceptions raised by mandelfield.

Validation errors derive from `ValueError` so that callers may catch them
generically, the interruption error from `RuntimeError`.
"""


class Mandelfield_error(Exception):
    """ Base class for all mandelfield errors """


class InvalidRegion(Mandelfield_error, ValueError):
    """ xlim or ylim is not a finite, strictly increasing interval """


class InvalidResolution(Mandelfield_error, ValueError):
    """ The grid size is not a positive integer """


class InvalidIterationBudget(Mandelfield_error, ValueError):
    """ max_iter is not a positive integer """


class UnrecognizedTransform(Mandelfield_error, ValueError):
    """ The renderer was asked for a transform outside TRANSFORM_ENUM """


class ComputationInterrupted(Mandelfield_error, RuntimeError):
    """ The field computation was cancelled before all row blocks ran """
