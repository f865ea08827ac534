import json
import logging
import queue
import time
from typing import Iterable, Iterator, NamedTuple

import config
from setup_vosk import ensure_vosk_model

logger = logging.getLogger(__name__)

try:
    import azure.cognitiveservices.speech as speechsdk
    AZURE_IMPORT_ERROR = None
except Exception as exc:  # pragma: no cover - environment dependent
    speechsdk = None
    AZURE_IMPORT_ERROR = str(exc)

try:
    from vosk import Model, KaldiRecognizer
    VOSK_IMPORT_ERROR = None
except Exception as exc:  # pragma: no cover - environment dependent
    Model = None
    KaldiRecognizer = None
    VOSK_IMPORT_ERROR = str(exc)

try:
    import sounddevice as sd
    STT_IMPORT_ERROR = None
except Exception as exc:  # pragma: no cover - environment dependent
    sd = None
    STT_IMPORT_ERROR = str(exc)

SAMPLE_RATE = 16000
BLOCK_SIZE = 8000

_vosk_model = None


class Transcript(NamedTuple):
    """Recognized speech so far; only final transcripts may be submitted."""
    text: str
    is_final: bool


def azure_stt_available() -> tuple[bool, str]:
    if speechsdk is None:
        return False, f"azure speech import failed: {AZURE_IMPORT_ERROR}"
    if not config.AZURE_SPEECH_KEY:
        return False, "AZURE_SPEECH_KEY is not set in .env"
    if not config.AZURE_SPEECH_REGION:
        return False, "AZURE_SPEECH_REGION is not set in .env"
    return True, ""


def _vosk_stt_available() -> tuple[bool, str]:
    if Model is None or KaldiRecognizer is None:
        return False, f"vosk import failed: {VOSK_IMPORT_ERROR}"
    if sd is None:
        return False, f"sounddevice import failed: {STT_IMPORT_ERROR}"
    return True, ""


def stt_available() -> tuple[bool, str]:
    """Return (available, service name or reason) for live microphone STT."""
    vosk_available, vosk_reason = _vosk_stt_available()
    azure_available, azure_reason = azure_stt_available()

    if vosk_available:
        return True, "vosk"
    elif azure_available:
        return True, "azure"
    else:
        return False, f"Vosk STT unavailable: {vosk_reason}. Azure STT unavailable: {azure_reason}"


def _get_vosk_model():
    global _vosk_model
    if _vosk_model is None:
        _vosk_model = Model(ensure_vosk_model())
    return _vosk_model


def listen_stream(
    stt_service: str = "vosk", silence_timeout: float = 1.2, max_duration: float = 30.0
) -> Iterator[Transcript]:
    if stt_service == "azure":
        yield from _listen_stream_azure(silence_timeout=silence_timeout, max_duration=max_duration)
    else:
        yield from _listen_stream_vosk(silence_timeout=silence_timeout, max_duration=max_duration)


def _listen_stream_vosk(silence_timeout: float = 1.2, max_duration: float = 30.0) -> Iterator[Transcript]:
    available, reason = _vosk_stt_available()
    if not available:
        raise RuntimeError(f"Live STT unavailable: {reason}")

    q = queue.Queue()
    recognizer = KaldiRecognizer(_get_vosk_model(), SAMPLE_RATE)
    recognizer.SetWords(False)

    last_text_time = time.time()
    start_time = time.time()
    final_text = ""

    def callback(indata, frames, time_info, status):
        if status:
            logger.warning("Audio input status: %s", status)
        q.put(bytes(indata))

    with sd.RawInputStream(
        samplerate=SAMPLE_RATE,
        blocksize=BLOCK_SIZE,
        dtype="int16",
        channels=1,
        callback=callback,
    ):
        while True:
            if time.time() - start_time > max_duration:
                break

            try:
                data = q.get(timeout=0.1)
            except queue.Empty:
                if time.time() - last_text_time > silence_timeout:
                    break
                continue

            if recognizer.AcceptWaveform(data):
                result = json.loads(recognizer.Result())
                text = result.get("text", "").strip()
                if text:
                    final_text += " " + text
                    last_text_time = time.time()
                    yield Transcript(final_text.strip(), True)
            else:
                partial = json.loads(recognizer.PartialResult()).get("partial", "").strip()
                if partial:
                    last_text_time = time.time()
                    yield Transcript((final_text + " " + partial).strip(), False)

    result = json.loads(recognizer.FinalResult()).get("text", "").strip()
    if result:
        final_text += " " + result
    if final_text.strip():
        yield Transcript(final_text.strip(), True)


def _listen_stream_azure(silence_timeout: float = 1.2, max_duration: float = 30.0) -> Iterator[Transcript]:
    available, reason = azure_stt_available()
    if not available:
        raise RuntimeError(f"Live STT unavailable: {reason}")

    speech_config = speechsdk.SpeechConfig(subscription=config.AZURE_SPEECH_KEY, region=config.AZURE_SPEECH_REGION)
    audio_config = speechsdk.audio.AudioConfig(use_default_microphone=True)
    speech_recognizer = speechsdk.SpeechRecognizer(speech_config=speech_config, audio_config=audio_config)

    done = False
    final_text = ""
    recognized_queue = queue.Queue()

    def recognized_cb(evt):
        nonlocal final_text
        if evt.result.text:
            final_text += " " + evt.result.text
            recognized_queue.put(Transcript(final_text.strip(), True))

    def recognizing_cb(evt):
        if evt.result.text:
            recognized_queue.put(Transcript((final_text + " " + evt.result.text).strip(), False))

    def stop_cb(evt):
        nonlocal done
        done = True

    speech_recognizer.recognized.connect(recognized_cb)
    speech_recognizer.recognizing.connect(recognizing_cb)
    speech_recognizer.session_started.connect(lambda evt: logger.info("Speech session started: %s", evt))
    speech_recognizer.session_stopped.connect(lambda evt: logger.info("Speech session stopped: %s", evt))
    speech_recognizer.canceled.connect(lambda evt: logger.warning("Speech recognition canceled: %s", evt))

    speech_recognizer.session_stopped.connect(stop_cb)
    speech_recognizer.canceled.connect(stop_cb)

    speech_recognizer.start_continuous_recognition()
    start_time = time.time()
    last_text_time = time.time()

    try:
        while not done:
            if time.time() - start_time > max_duration:
                break
            try:
                transcript = recognized_queue.get(timeout=0.1)
                yield transcript
                last_text_time = time.time()
            except queue.Empty:
                if time.time() - last_text_time > silence_timeout:
                    break
                continue
    finally:
        speech_recognizer.stop_continuous_recognition()

    if final_text.strip():
        yield Transcript(final_text.strip(), True)


def final_transcript(stream: Iterable[Transcript]) -> str:
    """Last finalized transcript of ``stream``; interim results are ignored."""
    final = ""
    for transcript in stream:
        if transcript.is_final:
            final = transcript.text
    return final


def listen_once_streamed(stt_service: str = "vosk") -> str:
    return final_transcript(listen_stream(stt_service=stt_service))


def speak(text: str) -> bool:
    """Read ``text`` aloud through Azure speech synthesis. Returns False when unavailable."""
    available, reason = azure_stt_available()
    if not available:
        logger.info("Voice output disabled: %s", reason)
        return False

    speech_config = speechsdk.SpeechConfig(subscription=config.AZURE_SPEECH_KEY, region=config.AZURE_SPEECH_REGION)
    speech_config.speech_synthesis_voice_name = config.AZURE_SPEECH_VOICE
    audio_config = speechsdk.audio.AudioOutputConfig(use_default_speaker=True)
    synthesizer = speechsdk.SpeechSynthesizer(speech_config=speech_config, audio_config=audio_config)

    result = synthesizer.speak_text_async(text).get()
    if result.reason == speechsdk.ResultReason.SynthesizingAudioCompleted:
        return True
    logger.warning("Speech synthesis did not complete: %s", result.reason)
    return False
