"""
errors.py
Two failure kinds leave the engine:

  TransactionValidationError : the batch was rejected before any graph was built
                               (client-side problem, maps to HTTP 400)
  AnalysisError              : something blew up while detecting
                               (server-side problem, maps to HTTP 500)
"""


class TransactionValidationError(ValueError):
    """Input batch is malformed or over the size cap."""


class AnalysisError(Exception):
    """A detector or the report step failed. Wraps the original exception."""
