"""Exceptions raised while building and solving minimum feedback arc set problems."""


class MfasError(ValueError):
    """Base class for all MFAS errors."""


class InvalidGraph(MfasError):
    """The graph references an unknown node, contains a self-loop, or has conflicting edge weights."""


class DegenerateInput(MfasError):
    """A measured or projection direction cannot be normalized."""


class UnknownNode(MfasError, KeyError):
    """A lookup or classification references a node that is not in the node set."""

    def __str__(self) -> str:
        # KeyError quotes its message, which is noisy in logs.
        return ValueError.__str__(self)
