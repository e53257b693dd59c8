"""Exceptions that escape the ranking pipeline.

Collaborator failures (extraction, deep scoring) are recovered inside the
pipeline and never surface here.
"""


class PipelineError(Exception):
    """Base class for unrecoverable pipeline failures."""


class PipelineContractError(PipelineError):
    """The pipeline was driven with inputs that violate its contract."""
