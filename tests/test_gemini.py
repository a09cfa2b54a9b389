import pytest
import requests

from pharmafind.core.config import Settings
from pharmafind.vendors import gemini


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = None
        self.error = None

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append((url, params, json, timeout))
        if self.error:
            raise self.error
        return self.response


def _answer(text):
    return DummyResponse(payload={"candidates": [{"content": {"parts": [{"text": text}]}}]})


@pytest.fixture
def session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(gemini, "_SESSION", session)
    monkeypatch.setattr(gemini, "get_settings", lambda: Settings(gemini_api_key="key"))
    return session


@pytest.fixture
def offline(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(gemini, "_SESSION", session)
    monkeypatch.setattr(gemini, "get_settings", lambda: Settings(gemini_api_key=""))
    return session


def test_generate_content_posts_prompt(session):
    session.response = _answer("  Paracetamol, Ibuprofen \n")

    text = gemini.generate_content("hello", json_response=True)

    assert text == "Paracetamol, Ibuprofen"
    url, params, body, timeout = session.calls[0]
    assert url.endswith("/gemini-2.5-flash:generateContent")
    assert params == {"key": "key"}
    assert body["contents"][0]["parts"][0]["text"] == "hello"
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert timeout == 15


def test_generate_content_http_error(session):
    session.response = DummyResponse(status_code=429, text="quota")

    with pytest.raises(gemini.GeminiError):
        gemini.generate_content("hello")


def test_generate_content_without_candidates(session):
    session.response = DummyResponse(payload={"candidates": []})

    with pytest.raises(gemini.GeminiError):
        gemini.generate_content("hello")


def test_generate_content_requires_key(offline):
    with pytest.raises(gemini.GeminiError):
        gemini.generate_content("hello")
    assert offline.calls == []


def test_validate_medicine_name_parses_json(session):
    session.response = _answer('{"valid": true, "correctedName": "Paracetamol", "reason": "Corrected spelling."}')

    result = gemini.validate_medicine_name("paracetmol")

    assert result == gemini.NameValidation(valid=True, corrected_name="Paracetamol", reason="Corrected spelling.")


def test_validate_medicine_name_lets_search_proceed_on_failure(session):
    session.error = requests.ConnectionError("down")

    result = gemini.validate_medicine_name(" Dolo 650 ")

    assert result.valid is True
    assert result.corrected_name == "Dolo 650"
    assert "proceeding" in result.reason


def test_validate_medicine_name_non_json_answer(session):
    session.response = _answer("sure, that is a medicine")

    result = gemini.validate_medicine_name("aspirin")

    assert result.valid is True
    assert result.corrected_name == "aspirin"


@pytest.mark.parametrize(
    "name,valid,corrected",
    [
        ("dolo 650", True, "Dolo 650"),
        ("IBUPROFEN", True, "Ibuprofen"),
        ("paracetmol", True, "Paracetamol"),
        ("ab", False, ""),
        ("asdfgh", False, ""),
    ],
)
def test_validate_medicine_name_offline(offline, name, valid, corrected):
    result = gemini.validate_medicine_name(name)

    assert result.valid is valid
    assert result.corrected_name == corrected
    assert offline.calls == []


def test_suggestions_online_are_capped(session):
    session.response = _answer('["Paracetamol", "Paracetamol 500mg", "Paracetamol 650mg", "Pantoprazole", "Panadol", "Paroxetine"]')

    assert len(gemini.get_medicine_suggestions("pa")) == 5


def test_suggestions_offline_and_blank(offline):
    assert gemini.get_medicine_suggestions("Ibup") == ["Ibuprofen", "Ibuprofen 400mg"]
    assert gemini.get_medicine_suggestions("zzz") == []
    assert gemini.get_medicine_suggestions("  ") == []


def test_suggestions_empty_on_error(session):
    session.response = DummyResponse(status_code=500, text="boom")

    assert gemini.get_medicine_suggestions("para") == []


def test_recommendations_split_comma_list(session):
    session.response = _answer("Paracetamol, Ibuprofen, ")

    assert gemini.get_medicine_recommendations("headache") == ["Paracetamol", "Ibuprofen"]


def test_recommendations_offline(offline):
    assert gemini.get_medicine_recommendations("High fever") == ["Paracetamol", "Ibuprofen", "Dolo 650"]
    assert gemini.get_medicine_recommendations("rash") == []


def test_description_falls_back_on_error(session):
    session.error = requests.Timeout("slow")

    assert gemini.get_medicine_description("Metformin") == "Could not load information for Metformin."


def test_description_offline(offline):
    assert "fever reducer" in gemini.get_medicine_description("Dolo 650")
    assert gemini.get_medicine_description("") is None
