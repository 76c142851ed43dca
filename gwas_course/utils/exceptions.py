"""
Error types raised by the GWAS course pipeline.
Each maps to one failure class of the pipeline and halts the running script.
"""


class DataLoadError(ValueError):
    """Input file missing, unreadable or structurally malformed"""


class ValidationError(ValueError):
    """Requested column absent, too few usable values, or bad parameter"""


class AssociationEngineError(RuntimeError):
    """The external association routine failed or rejected its inputs"""


class PlotPreconditionError(ValueError):
    """P-values that cannot be log-transformed were passed to a plot"""
