import pytest
from wordchain.models.nlps.text_preprocessor import TextPreprocessor


@pytest.fixture
def preprocessor():
    """Fixture to initialize the TextPreprocessor."""
    return TextPreprocessor()


def test_to_lowercase(preprocessor):
    text = "HELLO WORLD"
    assert preprocessor.to_lowercase(text) == "hello world"


def test_handle_whitespace(preprocessor):
    text = "  This   is \n a   test.  "
    assert preprocessor.handle_whitespace(text) == "This is a test."


def test_remove_html_tags(preprocessor):
    text = "<p>Hello <b>World</b></p>"
    assert preprocessor.handle_whitespace(preprocessor.remove_html_tags(text)) == "Hello World"


def test_remove_html_tags_plain_text(preprocessor):
    text = "No markup here."
    assert preprocessor.remove_html_tags(text) == text


def test_handle_urls(preprocessor):
    text = "Visit https://example.com or www.example.org today"
    assert preprocessor.handle_whitespace(preprocessor.handle_urls(text)) == "Visit or today"


def test_handle_emojis(preprocessor):
    text = "I love 🐍"
    result = preprocessor.handle_emojis(text)
    assert "🐍" not in result
    assert "snake" in result


def test_normalize(preprocessor):
    assert preprocessor.normalize("café naïve") == "cafe naive"


def test_normalize_keeps_non_latin_letters(preprocessor):
    assert preprocessor.normalize("Привет мир") == "Привет мир"
    assert preprocessor.normalize("Ёлка") == "Елка"
    assert preprocessor.normalize("Γειά σου") == "Γεια σου"
    assert preprocessor.normalize("日本語") == "日本語"


def test_preprocess_cyrillic(preprocessor):
    text = preprocessor.preprocess("Привет, мир. Как дела?")
    assert [preprocessor.tokenize(s) for s in preprocessor.sentence_segmentation(text)] == [
        ["привет", ",", "мир", "."],
        ["как", "дела", "?"],
    ]


def test_handle_missing_data(preprocessor):
    assert preprocessor.handle_missing_data(None) == ""
    assert preprocessor.handle_missing_data("text") == "text"


def test_tokenize(preprocessor):
    text = "This is a test."
    assert preprocessor.tokenize(text) == ["This", "is", "a", "test", "."]


def test_tokenize_keeps_contractions(preprocessor):
    text = "don't stop well-known songs"
    assert preprocessor.tokenize(text) == ["don't", "stop", "well-known", "songs"]


def test_tokenize_without_punctuation():
    preprocessor = TextPreprocessor(keep_punctuation=False)
    assert preprocessor.tokenize("Hello, world!") == ["Hello", "world"]


def test_sentence_segmentation(preprocessor):
    text = "It was cold. The clocks struck thirteen! Did they? Yes"
    assert preprocessor.sentence_segmentation(text) == [
        "It was cold.",
        "The clocks struck thirteen!",
        "Did they?",
        "Yes",
    ]


def test_sentence_segmentation_empty(preprocessor):
    assert preprocessor.sentence_segmentation("") == []
    assert preprocessor.sentence_segmentation(" ... ") == []


def test_preprocess(preprocessor):
    raw_text = "<b>It's</b>  COLD in Ápril http://example.com/test?page=1 "
    assert preprocessor.preprocess(raw_text) == "it's cold in april"


def test_preprocess_keeps_case():
    preprocessor = TextPreprocessor(lowercase=False)
    assert preprocessor.preprocess("Hello   World") == "Hello World"
