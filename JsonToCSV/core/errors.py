# Exceptions raised by the conversion pipeline


class JsonToCSVError(Exception):
    """Base class for errors raised by JsonToCSV."""


class TreeContractError(JsonToCSVError, TypeError):
    """A node was not of the kind a pass expected. Not recoverable."""


class OutputLocationError(JsonToCSVError):
    """The configured output directory cannot be used at all."""
