#!/usr/bin/env python3
"""
Word Chain Training and Generation Script

This script trains a word-level Markov chain on text files, exports it as
JSON, and generates sentences from an exported chain.

Usage:
    wordchain train --order 2 --output chain.json corpus.txt [more.txt ...]
    wordchain generate --model chain.json --count 5
"""
import os
import sys
import time
import argparse

from wordchain.models.word_chain.word_chain import WordChain
from wordchain.models.word_chain.errors import ChainFileError, EmptyChainError, WordChainError
from wordchain.models.nlps.text_preprocessor import TextPreprocessor
from wordchain.utils.config_loader import load_config
from wordchain.utils.loggers.json_logger import get_logger, log_json


class WordChainTrainer:
    """
    Handles training, exporting and sampling word chains.

    This class manages the full pipeline of:
    1. Loading and preprocessing training text
    2. Splitting it into sentences wrapped in boundary words
    3. Appending every sentence to the chain
    4. Exporting the chain, or generating sentences from it
    """

    def __init__(self, order=None, environment="development", config=None,
                 logger=None, seed=None, chain=None):
        """
        Initialize the trainer with specified parameters.

        Args:
            order (int, optional): Chain order, defaults to the configured one
            environment (str): Environment setting ('development', 'test', 'production')
            config (dict, optional): Settings, loaded from configs/ when omitted
            logger (Logger, optional): Logger instance for pipeline activity
            seed (int, optional): Seed for sampling, defaults to the configured one
            chain (WordChain, optional): Existing chain to continue from
        """
        self.environment = environment
        self.config = config if config is not None else load_config(environment)

        if logger is None:
            logger = get_logger(
                f"wordchain.trainer.{environment}",
                log_file=self.config.get("log_file"),
                level=self.config.get("log_level", "INFO"),
            )
        self.logger = logger

        if seed is None:
            seed = self.config.get("seed")

        self.begin_token = self.config["begin_token"]
        self.end_token = self.config["end_token"]
        self.preprocessor = TextPreprocessor(lowercase=self.config.get("lowercase", True))

        if chain is None:
            chain = WordChain(
                self.config["order"] if order is None else order,
                logger=self.logger,
                seed=seed,
                indent=self.config.get("indent", 4),
            )
        self.chain = chain

        self.logger.info(f"WordChainTrainer initialized with order={self.chain.order}", extra={
            "metrics": {
                "order": self.chain.order,
                "environment": environment,
                "begin_token": self.begin_token,
                "end_token": self.end_token
            }
        })

    @classmethod
    def from_model(cls, model_path, environment="development", config=None,
                   logger=None, seed=None):
        """
        Create a trainer around a previously exported chain.

        Args:
            model_path (str): Path to the exported JSON chain
            environment (str): Environment setting
            config (dict, optional): Settings, loaded from configs/ when omitted
            logger (Logger, optional): Logger instance
            seed (int, optional): Seed for sampling

        Returns:
            WordChainTrainer: Trainer wrapping the loaded chain
        """
        config = config if config is not None else load_config(environment)
        if logger is None:
            logger = get_logger(
                f"wordchain.trainer.{environment}",
                log_file=config.get("log_file"),
                level=config.get("log_level", "INFO"),
            )
        if seed is None:
            seed = config.get("seed")

        chain = WordChain.load(model_path, logger=logger, seed=seed,
                               indent=config.get("indent", 4))
        return cls(environment=environment, config=config, logger=logger, chain=chain)

    @property
    def context_size(self):
        return self.chain.order + 1

    def sentences_to_words(self, text):
        """
        Split raw text into boundary-wrapped word lists.

        Each sentence gets order + 1 begin tokens in front, so its first word
        is learned as following the start of a sentence, and one end token
        at the back.

        Args:
            text (str): Raw text

        Returns:
            list: One list of words per sentence
        """
        text = self.preprocessor.preprocess(text)
        sequences = []
        for sentence in self.preprocessor.sentence_segmentation(text):
            words = self.preprocessor.tokenize(sentence)
            if not words:
                continue
            sequences.append(
                [self.begin_token] * self.context_size + words + [self.end_token])
        return sequences

    def train_text(self, text):
        """
        Train the chain on a block of raw text.

        Args:
            text (str): Raw training text

        Returns:
            dict: Training statistics
        """
        start_time = time.time()
        sequences = self.sentences_to_words(text)

        windows = 0
        for words in sequences:
            self.chain.append(words)
            windows += max(0, len(words) - self.context_size)

        stats = {
            "sentences": len(sequences),
            "windows": windows,
            "contexts": len(self.chain),
            "training_time": time.time() - start_time
        }
        log_json(self.logger, "Training completed", stats)
        return stats

    def _read_text_file(self, file_path):
        """Read a text file as UTF-8, falling back to latin-1."""
        try:
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    return f.read()
            except UnicodeDecodeError:
                self.logger.warning(f"{file_path} is not UTF-8, reading as latin-1")
                with open(file_path, "r", encoding="latin-1") as f:
                    return f.read()
        except OSError as e:
            error = ChainFileError(file_path, e.strerror or e)
            self.logger.error(str(error), extra={"metrics": {"file_path": file_path}})
            raise error from e

    def train_files(self, file_paths):
        """
        Train the chain on a list of text files.

        Args:
            file_paths (list): Paths of UTF-8 (or latin-1) text files

        Returns:
            dict: Training statistics summed over all files
        """
        totals = {"files": 0, "sentences": 0, "windows": 0, "training_time": 0.0}

        for i, file_path in enumerate(file_paths):
            self.logger.info(f"Loading dataset: {file_path}", extra={
                "metrics": {"file_path": file_path, "progress": f"{i + 1}/{len(file_paths)}"},
                "operation": "train"
            })
            stats = self.train_text(self._read_text_file(file_path))
            totals["files"] += 1
            totals["sentences"] += stats["sentences"]
            totals["windows"] += stats["windows"]
            totals["training_time"] += stats["training_time"]

        totals["contexts"] = len(self.chain)
        return totals

    def export_model(self, export_path):
        """
        Export the trained chain to disk.

        Args:
            export_path (str): Path to save the chain

        Returns:
            str: Path to the exported chain file

        Raises:
            EmptyChainError: If the chain was never trained, such a file
                             could not be loaded back
        """
        contexts = len(self.chain)
        if contexts == 0:
            error = EmptyChainError()
            self.logger.error(str(error), extra={
                "metrics": {"export_path": export_path}, "operation": "export"
            })
            raise error

        export_dir = os.path.dirname(os.path.abspath(export_path))
        os.makedirs(export_dir, exist_ok=True)
        self.chain.save(export_path)

        self.logger.info("Model export completed", extra={
            "metrics": {"export_path": export_path, "contexts": contexts},
            "operation": "export"
        })
        return export_path

    def generate_sentence(self, max_words=None):
        """
        Generate one sentence by sampling the chain word by word.

        Args:
            max_words (int, optional): Maximum number of words to generate

        Returns:
            str: The generated sentence, empty if the chain knows no sentence starts
        """
        if max_words is None:
            max_words = self.config.get("max_words", 50)

        words = [self.begin_token] * self.context_size
        generated = []
        while len(generated) < max_words:
            next_word = self.chain.next_word(words)
            if next_word is None or next_word == self.end_token:
                break
            words.append(next_word)
            generated.append(next_word)

        self.logger.debug("Sentence generated", extra={
            "metrics": {"word_count": len(generated)}
        })
        return " ".join(generated)

    def generate_sentences(self, count, max_words=None):
        """Generate several sentences."""
        return [self.generate_sentence(max_words) for _ in range(count)]


def build_parser():
    parser = argparse.ArgumentParser(
        prog="wordchain",
        description="Train word-level Markov chains and generate text from them")
    parser.add_argument("--env", choices=["development", "test", "production"],
                        default="development", help="Environment (default: development)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    train = subparsers.add_parser("train", help="Train a chain on text files")
    train.add_argument("--order", type=int, help="Chain order (default: from config)")
    train.add_argument("--output", required=True, help="Where to write the chain JSON")
    train.add_argument("--model", help="Existing chain to continue training")
    train.add_argument("datasets", nargs="+", help="Paths to text files")

    generate = subparsers.add_parser("generate", help="Generate sentences from a chain")
    generate.add_argument("--model", required=True, help="Chain JSON to sample from")
    generate.add_argument("--count", type=int, default=1,
                          help="Number of sentences (default: 1)")
    generate.add_argument("--max-words", type=int,
                          help="Maximum words per sentence (default: from config)")
    generate.add_argument("--seed", type=int, help="Seed for reproducible output")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        if args.command == "train":
            if args.model:
                trainer = WordChainTrainer.from_model(args.model, environment=args.env)
            else:
                trainer = WordChainTrainer(order=args.order, environment=args.env)
            stats = trainer.train_files(args.datasets)
            trainer.export_model(args.output)
            print(f"Trained order-{trainer.chain.order} chain on {stats['sentences']} "
                  f"sentences ({stats['contexts']} contexts), saved to {args.output}")
        else:
            trainer = WordChainTrainer.from_model(
                args.model, environment=args.env, seed=args.seed)
            for sentence in trainer.generate_sentences(args.count, args.max_words):
                print(sentence)
    except WordChainError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
