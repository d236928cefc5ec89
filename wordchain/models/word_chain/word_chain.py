import os
import json
import time
import random
import threading

from wordchain.utils.loggers.json_logger import get_logger
from wordchain.models.word_chain.errors import (
    ChainConsistencyError,
    ChainFileError,
    ChainFormatError,
    EmptyChainError,
    InvalidOrderError,
    WordCountRangeError,
)

# Orders are stored as unsigned 32-bit values in exported chains
ORDER_MAX = 2**32 - 1
# Largest value a single random draw can produce
RANDOM_MAX = 2**31 - 1
DEFAULT_INDENT = 4

ORDER_KEY = "order"
WORDS_KEY = "words"
TOTAL_COUNT_KEY = "total_count"
SUCCESSORS_KEY = "successors"


class WordChain:
    """
    An n-th order word-level Markov chain.

    The chain is a trie keyed by words. Walking ``order + 1`` words down from
    the root reaches a terminal node holding how many times that context was
    seen (``total_count``) and how often each word followed it
    (``successors``)::

        {"the": {"cat": {"total_count": 3, "successors": {"sat": 2, "ran": 1}}}}

    The structure is kept as plain nested dicts so it maps one to one onto the
    exported JSON document.
    """

    def __init__(self, order, logger=None, seed=None, rng=None, indent=DEFAULT_INDENT):
        """
        Create an empty chain.

        Args:
            order (int): Number of context words used to predict the next word
            logger (Logger, optional): Logger for chain activity
            seed (int, optional): Seed for the chain's random source.
                                  Defaults to a time based seed
            rng (random.Random, optional): Random source to use instead of
                                           seeding a new one
            indent (int): Indentation used by to_text()

        Raises:
            InvalidOrderError: If order is not a whole number in [0, 2**32 - 1]
        """
        self.logger = logger or get_logger("wordchain.chain", clear_existing=False)
        self._order = self._validate_order(order, self.logger)
        self.words = {}
        self.indent = indent

        if rng is not None:
            self.seed = None
            self.rng = rng
        else:
            self.seed = seed if seed is not None else time.time_ns()
            self.rng = random.Random(self.seed)

        # One critical section for trie updates and random draws
        self._lock = threading.RLock()

        self.logger.debug("WordChain initialized", extra={
            "metrics": {"order": self._order, "seed": self.seed}
        })

    @staticmethod
    def _validate_order(order, logger):
        if (
            isinstance(order, bool)
            or not isinstance(order, int)
            or order < 0
            or order > ORDER_MAX
        ):
            error = InvalidOrderError(order)
            logger.error(str(error), extra={"metrics": {"order": repr(order)}})
            raise error
        return order

    @property
    def order(self):
        """Number of context words the chain conditions on."""
        return self._order

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    @classmethod
    def load(cls, source, logger=None, seed=None, rng=None, indent=DEFAULT_INDENT):
        """
        Load a chain exported with save() or to_text().

        Args:
            source: Path to the chain file or an open (binary or text) stream
            logger (Logger, optional): Logger for chain activity
            seed (int, optional): Seed for the loaded chain's random source
            rng (random.Random, optional): Random source to use instead
            indent (int): Indentation used by to_text()

        Returns:
            WordChain: The loaded chain

        Raises:
            ChainFileError: If the file cannot be opened or read
            ChainFormatError: If the content is not valid JSON
            InvalidOrderError: If the order is missing or invalid
            EmptyChainError: If the chain holds no elements
        """
        logger = logger or get_logger("wordchain.chain", clear_existing=False)

        if hasattr(source, "read"):
            name = getattr(source, "name", "<stream>")
            try:
                data = source.read()
            except OSError as e:
                error = ChainFileError(name, e.strerror or e)
                logger.error(str(error))
                raise error from e
        else:
            name = os.fspath(source)
            try:
                with open(name, "rb") as f:
                    data = f.read()
            except OSError as e:
                error = ChainFileError(name, e.strerror or e)
                logger.error(str(error), extra={"metrics": {"path": name}})
                raise error from e

        chain = cls.loads(data, logger=logger, seed=seed, rng=rng, indent=indent)
        logger.info("Markov chain loaded", extra={
            "metrics": {"source": str(name), "order": chain.order}
        })
        return chain

    @classmethod
    def loads(cls, text, logger=None, seed=None, rng=None, indent=DEFAULT_INDENT):
        """
        Load a chain from its JSON text (str or UTF-8 bytes).

        See load() for the errors raised.
        """
        logger = logger or get_logger("wordchain.chain", clear_existing=False)

        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("utf-8")
            except UnicodeDecodeError as e:
                error = ChainFormatError(e.reason, e.start)
                logger.error(str(error), extra={
                    "metrics": {"kind": error.kind, "byte": error.byte}
                })
                raise error from e

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            # JSONDecodeError reports a character index, callers get bytes
            error = ChainFormatError(e.msg, len(text[:e.pos].encode("utf-8")))
            logger.error(str(error), extra={
                "metrics": {"kind": error.kind, "byte": error.byte,
                            "line": e.lineno, "column": e.colno}
            })
            raise error from e

        if not isinstance(document, dict) or ORDER_KEY not in document:
            error = InvalidOrderError(None)
            logger.error(str(error), extra={"metrics": {"reason": "order field missing"}})
            raise error

        chain = cls(document[ORDER_KEY], logger=logger, seed=seed, rng=rng, indent=indent)

        words = document.get(WORDS_KEY)
        if not isinstance(words, dict) or not words:
            error = EmptyChainError()
            logger.error(str(error), extra={"metrics": {"order": chain.order}})
            raise error

        # Adopted as-is, deeper shape problems show up when sampling
        chain.words = words
        return chain

    def to_text(self):
        """
        Render the chain as indented JSON.

        Returns:
            str: The JSON document, keys sorted so output is deterministic
        """
        with self._lock:
            return json.dumps(
                {ORDER_KEY: self._order, WORDS_KEY: self.words},
                indent=self.indent,
                sort_keys=True,
                ensure_ascii=False,
            )

    def save(self, path):
        """
        Write the chain's JSON text to a file.

        Args:
            path (str): Destination file

        Raises:
            ChainFileError: If the file cannot be written
        """
        text = self.to_text()
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            error = ChainFileError(path, e.strerror or e)
            self.logger.error(str(error), extra={"metrics": {"path": str(path)}})
            raise error from e

        self.logger.info("Markov chain saved", extra={
            "metrics": {"path": str(path), "order": self._order, "bytes": len(text.encode("utf-8"))}
        })

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    def append(self, words):
        """
        Count every (order + 1 words -> next word) window of a word sequence.

        Sequences shorter than order + 2 words can't form a window and are
        ignored. A string is split on whitespace.

        Args:
            words (sequence of str): One run of text, e.g. a sentence
        """
        if isinstance(words, str):
            words = words.split()
        words = list(words)

        context_size = self._order + 1
        if len(words) < context_size + 1:
            return

        windows = len(words) - context_size
        with self._lock:
            for i in range(windows):
                node = self.words
                for word in words[i:i + context_size]:
                    node = node.setdefault(word, {})

                # total_count and successors always move together
                node[TOTAL_COUNT_KEY] = node.get(TOTAL_COUNT_KEY, 0) + 1
                successors = node.setdefault(SUCCESSORS_KEY, {})
                next_word = words[i + context_size]
                successors[next_word] = successors.get(next_word, 0) + 1

        self.logger.debug("Chain updated", extra={
            "metrics": {"word_count": len(words), "windows": windows}
        })

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------
    def next_word(self, words):
        """
        Pick a word to follow the given words.

        Only the last order + 1 words are used. The pick is weighted by how
        often each successor was seen after that context.

        Args:
            words (sequence of str): Preceding words. A string is split on
                                     whitespace

        Returns:
            str or None: The sampled word, or None if there are too few words
                         or the context was never seen

        Raises:
            WordCountRangeError: If the context's total count exceeds RANDOM_MAX
            ChainConsistencyError: If the context's counts don't add up
        """
        if isinstance(words, str):
            words = words.split()
        words = list(words)

        context_size = self._order + 1
        if len(words) < context_size:
            return None
        context = words[-context_size:]

        with self._lock:
            node = self.words
            for word in context:
                if not isinstance(node, dict) or word not in node:
                    self.logger.debug("Unknown context", extra={
                        "metrics": {"context": context}
                    })
                    return None
                node = node[word]

            total, successors = self._terminal_counts(node, context)

            if total > RANDOM_MAX:
                error = WordCountRangeError(total, RANDOM_MAX)
                self.logger.error(str(error), extra={
                    "metrics": {"context": context, "total_count": total}
                })
                raise error

            position = self.rng.randint(0, RANDOM_MAX) % total

            cumulative = 0
            for word in sorted(successors):
                cumulative += successors[word]
                if cumulative > position:
                    return word

        error = ChainConsistencyError(
            context, f"total_count {total} exceeds successor sum {cumulative}")
        self.logger.error(str(error), extra={
            "metrics": {"context": context, "total_count": total, "successor_sum": cumulative}
        })
        raise error

    def _terminal_counts(self, node, context):
        """Read (total_count, successors) from a terminal node, checking its shape."""
        total = node.get(TOTAL_COUNT_KEY) if isinstance(node, dict) else None
        successors = node.get(SUCCESSORS_KEY) if isinstance(node, dict) else None

        if (
            isinstance(total, bool)
            or not isinstance(total, int)
            or total <= 0
            or not isinstance(successors, dict)
            or not all(
                isinstance(count, int) and not isinstance(count, bool) and count > 0
                for count in successors.values()
            )
        ):
            error = ChainConsistencyError(context, "malformed terminal node")
            self.logger.error(str(error), extra={"metrics": {"context": list(context)}})
            raise error

        return total, successors

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def contexts(self):
        """
        Iterate over every terminal node of the chain.

        Yields:
            tuple: (context words tuple, total_count, successors dict)
        """
        context_size = self._order + 1

        def walk(node, prefix):
            if len(prefix) == context_size:
                total, successors = self._terminal_counts(node, prefix)
                yield tuple(prefix), total, dict(successors)
                return
            if not isinstance(node, dict):
                error = ChainConsistencyError(prefix, "trie is shallower than the order")
                self.logger.error(str(error))
                raise error
            for word in sorted(node):
                yield from walk(node[word], prefix + [word])

        yield from walk(self.words, [])

    def __len__(self):
        return sum(1 for _ in self.contexts())

    def __repr__(self):
        return f"WordChain(order={self._order})"
