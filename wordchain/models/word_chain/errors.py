"""
Error types raised by the word-level Markov chain.

Every failure the chain can detect has its own class so callers (and tests)
can tell them apart. All of them derive from ``WordChainError``, which is a
``ValueError`` like the rest of the model errors in this project.
"""


class WordChainError(ValueError):
    """Base class for all Markov chain failures."""


class ChainFileError(WordChainError):
    """The chain file could not be opened, read or written."""

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not open Markov chain file {path}: {reason}")


class ChainFormatError(WordChainError):
    """The chain file is not well-formed JSON.

    Attributes:
        kind (str): Parser diagnostic describing the failure
        byte (int): Byte offset in the input where parsing failed
    """

    def __init__(self, kind, byte):
        self.kind = kind
        self.byte = byte
        super().__init__(f"Error reading JSON: {kind} (byte {byte})")


class InvalidOrderError(WordChainError):
    """The order field is missing, not a whole number, or out of range."""

    def __init__(self, order):
        self.order = order
        super().__init__(f"Invalid Markov chain order: {order!r}")


class EmptyChainError(WordChainError):
    """A loaded chain has no elements in its trie."""

    def __init__(self):
        super().__init__("No elements in the Markov chain")


class WordCountRangeError(WordChainError):
    """A context's total count is larger than the random draw can cover."""

    def __init__(self, count, limit):
        self.count = count
        self.limit = limit
        super().__init__(f"Invalid word count: {count} exceeds {limit}")


class ChainConsistencyError(WordChainError):
    """A terminal node's total count disagrees with its successors."""

    def __init__(self, context, detail=""):
        self.context = context
        message = f"Should be impossible to reach here (context {' '.join(context)!r})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
