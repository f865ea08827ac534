import pytest

import config
import speech_listener
from speech_listener import Transcript, final_transcript, speak, stt_available


def test_final_transcript_ignores_interim_results():
    stream = [
        Transcript("tell", False),
        Transcript("tell me", False),
        Transcript("tell me about", True),
        Transcript("tell me about yourself", False),
        Transcript("tell me about yourself", True),
    ]
    assert final_transcript(stream) == "tell me about yourself"


def test_final_transcript_is_empty_without_final_results():
    assert final_transcript([Transcript("um", False)]) == ""


def test_listen_once_streamed_submits_only_final_text(monkeypatch):
    def fake_stream(stt_service="vosk", **kwargs):
        yield Transcript("what is", False)
        yield Transcript("what is your name", True)

    monkeypatch.setattr(speech_listener, "listen_stream", fake_stream)
    assert speech_listener.listen_once_streamed("azure") == "what is your name"


def test_stt_prefers_vosk(monkeypatch):
    monkeypatch.setattr(speech_listener, "_vosk_stt_available", lambda: (True, ""))
    monkeypatch.setattr(speech_listener, "azure_stt_available", lambda: (True, ""))
    assert stt_available() == (True, "vosk")


def test_stt_falls_back_to_azure(monkeypatch):
    monkeypatch.setattr(speech_listener, "_vosk_stt_available", lambda: (False, "no mic"))
    monkeypatch.setattr(speech_listener, "azure_stt_available", lambda: (True, ""))
    assert stt_available() == (True, "azure")


def test_stt_unavailable_reports_both_reasons(monkeypatch):
    monkeypatch.setattr(speech_listener, "_vosk_stt_available", lambda: (False, "no mic"))
    monkeypatch.setattr(speech_listener, "azure_stt_available", lambda: (False, "no key"))
    available, reason = stt_available()
    assert available is False
    assert "no mic" in reason and "no key" in reason


def test_azure_needs_key_and_region(monkeypatch):
    if speech_listener.speechsdk is None:
        pytest.skip("azure speech SDK not importable here")
    monkeypatch.setattr(config, "AZURE_SPEECH_KEY", None)
    available, reason = speech_listener.azure_stt_available()
    assert available is False
    assert "AZURE_SPEECH_KEY" in reason

    monkeypatch.setattr(config, "AZURE_SPEECH_KEY", "key-from-env")
    monkeypatch.setattr(config, "AZURE_SPEECH_REGION", None)
    assert "AZURE_SPEECH_REGION" in speech_listener.azure_stt_available()[1]


def test_speak_is_disabled_without_azure(monkeypatch):
    monkeypatch.setattr(speech_listener, "azure_stt_available", lambda: (False, "no key"))
    assert speak("Hello there") is False
