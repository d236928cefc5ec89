"""
Text Preprocessor Module

Cleans raw text and splits it into the word sequences a WordChain is trained
on.

### Features:
1. **Cleaning**: lowercasing, removing HTML tags, removing URLs, collapsing
   whitespace.
2. **Normalization**: converting emojis to text, stripping accents.
3. **Segmentation**: splitting text into sentences and sentences into words.

### Dependencies:
- `re`: For regular expressions.
- `unicodedata`: For removing accents (combining marks) from any script.
- `bs4 (BeautifulSoup)`: For removing HTML tags.
- `nltk`: For regex based sentence and word tokenization. Only
  ``RegexpTokenizer`` is used, so no NLTK data downloads are needed.
- `emoji`: For handling emojis.

### Example Usage:

```python
from wordchain.models.nlps.text_preprocessor import TextPreprocessor

preprocessor = TextPreprocessor()
text = "<p>It was a bright cold day in April.</p> The clocks were striking thirteen!"
for sentence in preprocessor.sentence_segmentation(preprocessor.preprocess(text)):
    print(preprocessor.tokenize(sentence))
# ['it', 'was', 'a', 'bright', 'cold', 'day', 'in', 'april', '.']
# ['the', 'clocks', 'were', 'striking', 'thirteen', '!']
```
"""

import re
import unicodedata
from bs4 import BeautifulSoup
from nltk.tokenize import RegexpTokenizer
from emoji import demojize

# Words (keeping inner apostrophes and hyphens) or single punctuation marks
WORD_PATTERN = r"\w+(?:['\-]\w+)*|[^\w\s]"
# A sentence runs up to and including its terminal punctuation
SENTENCE_PATTERN = r"[^.!?\s][^.!?]*(?:[.!?]+|$)"


class TextPreprocessor:
    def __init__(self, lowercase=True, keep_punctuation=True):
        """
        Initializes the TextPreprocessor.

        Args:
            lowercase (bool): Whether preprocess() lowercases text
            keep_punctuation (bool): Whether tokenize() keeps punctuation marks
                                     as separate words
        """
        self.lowercase = lowercase
        self.keep_punctuation = keep_punctuation
        self.word_tokenizer = RegexpTokenizer(WORD_PATTERN)
        self.sentence_tokenizer = RegexpTokenizer(SENTENCE_PATTERN)

    def to_lowercase(self, text):
        """Converts text to lowercase."""
        return text.lower()

    def handle_whitespace(self, text):
        """Removes extra whitespace from text."""
        return " ".join(text.split())

    def remove_html_tags(self, text):
        """Removes HTML tags from text."""
        # Plain text is returned as-is, BeautifulSoup warns on text that looks like a path or URL
        if "<" not in text:
            return text
        return BeautifulSoup(text, "html.parser").get_text(" ")

    def handle_urls(self, text):
        """Removes URLs from text."""
        return re.sub(r"http\S+|www\S+|https\S+", "", text, flags=re.MULTILINE)

    def handle_emojis(self, text):
        """Converts emojis to their textual representation."""
        return demojize(text, delimiters=(" ", " "))

    def normalize(self, text):
        """Normalizes text by removing accents, letters of any script are kept."""
        decomposed = unicodedata.normalize("NFKD", text)
        stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
        return unicodedata.normalize("NFC", stripped)

    def handle_missing_data(self, text):
        """Handles missing data by replacing None with an empty string."""
        return text if text else ""

    def preprocess(self, text):
        """
        Runs the cleaning pipeline over raw text.

        Args:
            text (str): Raw input text

        Returns:
            str: Cleaned text on a single line
        """
        text = self.handle_missing_data(text)
        text = self.remove_html_tags(text)
        text = self.handle_urls(text)
        text = self.handle_emojis(text)
        text = self.normalize(text)
        if self.lowercase:
            text = self.to_lowercase(text)
        return self.handle_whitespace(text)

    def sentence_segmentation(self, text):
        """Segments text into sentences."""
        return [s.strip() for s in self.sentence_tokenizer.tokenize(text) if s.strip()]

    def tokenize(self, text):
        """Tokenizes text into words."""
        tokens = self.word_tokenizer.tokenize(text)
        if not self.keep_punctuation:
            tokens = [t for t in tokens if re.match(r"\w", t)]
        return tokens
