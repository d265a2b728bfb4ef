from services.speech_service import RelayError
from services.translation_cache import TranslationCache, is_text_in_expected_script


class FakeTranslator:
    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result
        self.error = error

    def __call__(self, texts, target):
        self.calls.append((list(texts), target))
        if self.error:
            raise self.error
        return self.result if self.result is not None else [f"{t}@{target}" for t in texts]


def test_hits_are_keyed_on_text_and_target():
    translator = FakeTranslator()
    cache = TranslationCache(translator)

    assert cache.get("Water daily", "hi")[0] == "Water daily@hi"
    assert cache.get("Water daily", "hi")[0] == "Water daily@hi"
    assert cache.get("Water daily", "kn")[0] == "Water daily@kn"

    assert len(translator.calls) == 2


def test_english_and_empty_text_skip_translation():
    translator = FakeTranslator()
    cache = TranslationCache(translator)

    assert cache.get("Hello", "en") == ("Hello", True)
    assert cache.get("", "hi") == ("", True)
    assert translator.calls == []


def test_failure_returns_source_and_is_not_cached():
    translator = FakeTranslator(error=RelayError("Translation failed"))
    cache = TranslationCache(translator)

    assert cache.get("Hello", "hi") == ("Hello", True)
    assert cache.get("Hello", "hi") == ("Hello", True)
    assert len(translator.calls) == 2


def test_script_check_flags_untranslated_long_text():
    translator = FakeTranslator(result=["This sentence was never translated at all"])
    cache = TranslationCache(translator)

    translated, script_ok = cache.get("This sentence was never translated at all", "kn")
    assert translated == "This sentence was never translated at all"
    assert script_ok is False


def test_expected_script():
    assert is_text_in_expected_script("ರೋಸ್", "kn")
    assert is_text_in_expected_script("ಗುಲಾಬಿ ಗಿಡಕ್ಕೆ ಪ್ರತಿದಿನ ನೀರು ಹಾಕಿ ಮತ್ತು ಬಿಸಿಲಿನಲ್ಲಿ ಇರಿಸಿ", "kn")
    assert not is_text_in_expected_script("Water the rose every day and keep it in sun", "hi")
    assert is_text_in_expected_script("Water the rose every day and keep it in sun", "fr")
