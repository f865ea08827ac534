import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import Optional

from google import genai
from google.genai import types
from google.genai.errors import ServerError, ClientError
from openai import OpenAI, APIConnectionError, APIStatusError

import config
from candidate_context import (
    READY_MESSAGE,
    build_context,
    fallback_answer,
    format_paragraphs,
)
from conversation import ConversationState
from fact_repository import FactRepository
from resume_models import ResumeRecord
from resume_parser import load_resume

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"
POLL_INTERVAL = 0.05
HISTORY_TURNS = 6

_gemini_client = None
_gemini_api_key = None
_openai_client = None
_openai_api_key = None


class AIServiceError(RuntimeError):
    """Raised for user-actionable generation service issues."""


def get_gemini_client():
    """Reuse a live Gemini client across questions."""
    global _gemini_client, _gemini_api_key

    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise AIServiceError("GEMINI_API_KEY is missing. Add a valid API key in your .env file.")

    if _gemini_client is None or _gemini_api_key != api_key:
        _gemini_client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(config.GENERATION_TIMEOUT * 1000)),
        )
        _gemini_api_key = api_key

    return _gemini_client


def get_openai_client():
    """Reuse a live OpenAI client."""
    global _openai_client, _openai_api_key

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise AIServiceError("OPENAI_API_KEY is missing. Add a valid API key in your .env file.")

    if _openai_client is None or _openai_api_key != api_key:
        _openai_client = OpenAI(api_key=api_key, timeout=config.GENERATION_TIMEOUT)
        _openai_api_key = api_key

    return _openai_client


def _format_gemini_client_error(exc: Exception) -> AIServiceError:
    message = str(exc)
    lowered = message.lower()
    if "reported as leaked" in lowered:
        return AIServiceError(
            "Gemini API key is blocked (reported as leaked). Generate a new API key and update GEMINI_API_KEY in .env."
        )
    if "permission_denied" in lowered or "403" in lowered:
        return AIServiceError("Gemini API permission denied. Verify API key validity and project billing/access.")
    if "invalid" in lowered and "api" in lowered and "key" in lowered:
        return AIServiceError("Gemini API key is invalid. Replace GEMINI_API_KEY in .env.")
    return AIServiceError(message)


def _format_openai_client_error(exc: Exception) -> AIServiceError:
    message = str(exc)
    lowered = message.lower()
    if "incorrect api key" in lowered:
        return AIServiceError("OpenAI API key is incorrect. Replace OPENAI_API_KEY in .env.")
    if "exceeded your current quota" in lowered:
        return AIServiceError("OpenAI API quota exceeded. Check your plan and billing details.")
    return AIServiceError(message)


def extract_response_text(response) -> str:
    """Safely extract text from Gemini or OpenAI responses."""
    if hasattr(response, "choices"):
        for choice in response.choices or []:
            content = getattr(choice.message, "content", None)
            if content:
                return content.strip()
        raise ValueError("No text content found in OpenAI response")

    if hasattr(response, "text") and response.text:
        return response.text.strip()

    if hasattr(response, "candidates"):
        for candidate in response.candidates or []:
            if hasattr(candidate, "content") and candidate.content:
                for part in candidate.content.parts or []:
                    if hasattr(part, "text") and part.text:
                        return part.text.strip()

    raise ValueError("No text content found in Gemini response")


def generate_with_fallback(
    system_prompt: str,
    user_prompt: str,
    ai_service: str,
    max_tokens: int,
    temperature: float,
    max_retries: int = 2,
) -> str:
    """Try the primary model with retries, then the fallback model."""
    if ai_service == "gemini":
        generation_config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            max_output_tokens=max_tokens,
            temperature=temperature,
        )
        for attempt in range(1, max_retries + 1):
            try:
                return extract_response_text(get_gemini_client().models.generate_content(
                    model=config.GEMINI_PRIMARY_MODEL,
                    contents=user_prompt,
                    config=generation_config,
                ))
            except ServerError:
                if attempt < max_retries:
                    time.sleep(0.6 * attempt)
                else:
                    break
            except ClientError as exc:
                raise _format_gemini_client_error(exc) from exc

        logger.info("Primary Gemini model unavailable, retrying with %s", config.GEMINI_FALLBACK_MODEL)
        try:
            return extract_response_text(get_gemini_client().models.generate_content(
                model=config.GEMINI_FALLBACK_MODEL,
                contents=user_prompt,
                config=generation_config,
            ))
        except ClientError as exc:
            raise _format_gemini_client_error(exc) from exc
    elif ai_service == "openai":
        try:
            return extract_response_text(get_openai_client().chat.completions.create(
                model=config.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            ))
        except APIConnectionError as exc:
            raise AIServiceError(f"OpenAI API connection error: {exc}") from exc
        except APIStatusError as exc:
            raise _format_openai_client_error(exc) from exc
    else:
        raise ValueError(f"Unknown AI service: {ai_service}")


class GenerationClient:
    """
    Runs one generation call at a time under a deadline.

    The call executes on a worker thread; ``complete`` waits for it until the
    deadline passes or ``cancel`` is called, whichever comes first. A call that
    is abandoned keeps running in the background and its result is dropped;
    its worker is retired so the next call starts on a fresh one.
    """

    def __init__(self, ai_service: Optional[str] = None, timeout: Optional[float] = None):
        self.ai_service = ai_service or config.AI_SERVICE
        self.timeout = config.GENERATION_TIMEOUT if timeout is None else timeout
        self._executor = self._new_executor()
        self._cancelled = threading.Event()

    @staticmethod
    def _new_executor() -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=1, thread_name_prefix="generation")

    def _abandon(self, future) -> None:
        future.cancel()
        self._executor.shutdown(wait=False)
        self._executor = self._new_executor()

    def cancel(self) -> None:
        self._cancelled.set()

    def complete(self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float) -> str:
        self._cancelled.clear()
        future = self._executor.submit(
            generate_with_fallback, system_prompt, user_prompt, self.ai_service, max_tokens, temperature
        )
        deadline = time.monotonic() + self.timeout

        while True:
            done, _ = wait([future], timeout=POLL_INTERVAL)
            if done:
                return future.result()
            if self._cancelled.is_set():
                self._abandon(future)
                raise AIServiceError("Answer generation was cancelled.")
            if time.monotonic() >= deadline:
                self._abandon(future)
                raise AIServiceError(f"Answer generation timed out after {self.timeout:g}s.")


class ResponseGenerator:
    """Turns a question plus the candidate's facts into a spoken-style answer."""

    def __init__(
        self,
        client: Optional[GenerationClient] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self.client = client or GenerationClient()
        self.max_tokens = max_tokens or config.MAX_RESPONSE_TOKENS
        self.temperature = config.RESPONSE_TEMPERATURE if temperature is None else temperature

    def _load_prompt(self, name: str) -> str:
        with open(PROMPTS_DIR / name, "r", encoding="utf-8") as f:
            return f.read()

    def _history_block(self, conversation: ConversationState) -> str:
        # the current question is already the last turn
        earlier = conversation.history[:-1][-HISTORY_TURNS:]
        if not earlier:
            return "(this is the first question)"
        return "\n".join(f"{turn.role.capitalize()}: {turn.content}" for turn in earlier)

    def _generate(self, question: str, repository: FactRepository, conversation: ConversationState) -> str:
        system_prompt = self._load_prompt("candidate_system.txt").strip()
        user_prompt = self._load_prompt("answer_generator.txt").format(
            context=build_context(repository, question),
            history=self._history_block(conversation),
            question=question,
        )
        raw = self.client.complete(system_prompt, user_prompt, self.max_tokens, self.temperature)
        if not raw or not raw.strip():
            raise AIServiceError("The generation service returned an empty answer.")
        return format_paragraphs(raw)

    def _answer_or_fallback(self, question: str, repository: FactRepository, conversation: ConversationState) -> str:
        try:
            return self._generate(question, repository, conversation)
        except Exception as exc:
            logger.warning("Answer generation failed, using a canned answer: %s", exc)
            return fallback_answer(question, repository.resume_details(), repository.skills_or_fallback())

    def answer(self, question: str, repository: FactRepository, conversation: ConversationState) -> str:
        if not question or not question.strip():
            return READY_MESSAGE

        question = question.strip()
        conversation.begin(question)
        try:
            answer = self._answer_or_fallback(question, repository, conversation)
        except BaseException:
            conversation.abort()
            raise
        conversation.finish(answer)
        return answer


class InterviewSession:
    """One interview: the candidate's facts, the conversation, and the generator."""

    def __init__(
        self,
        generator: Optional[ResponseGenerator] = None,
        repository: Optional[FactRepository] = None,
    ):
        self.repository = repository or FactRepository()
        self.conversation = ConversationState()
        self.generator = generator or ResponseGenerator()

    @property
    def record(self) -> Optional[ResumeRecord]:
        return self.repository.record

    def load_record(self, record: ResumeRecord) -> None:
        self.repository.replace(record)
        self.conversation.reset()

    def load_resume(self, document=None, text: Optional[str] = None) -> ResumeRecord:
        record = load_resume(document=document, text=text)
        self.load_record(record)
        return record

    def ask(self, question: str) -> str:
        return self.generator.answer(question, self.repository, self.conversation)

    def cancel(self) -> None:
        self.generator.client.cancel()
