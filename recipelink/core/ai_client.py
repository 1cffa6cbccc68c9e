import logging
from typing import Optional, Type, TypeVar
from datetime import datetime, timezone
from pydantic import BaseModel, ValidationError
from google import genai
from google.genai import types

from ..settings import settings

logger = logging.getLogger("recipelink.ai")

T = TypeVar("T", bound=BaseModel)

class AIClient:
    _instance = None

    def __init__(self, api_key: Optional[str] = None, mode: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.mode = mode or settings.ai_mode  # "mock" or "gemini"
        self.model = model or settings.gemini_text_model
        self._client: Optional[genai.Client] = None
        self.last_error: Optional[str] = None
        self.last_error_at: Optional[datetime] = None

        if self.mode == "gemini" and self.api_key:
            self._client = genai.Client(api_key=self.api_key)

    @classmethod
    def get_instance(cls):
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def is_available(self) -> bool:
        return self.mode == "gemini" and self._client is not None

    def _record_error(self, message: str) -> None:
        self.last_error = message
        self.last_error_at = datetime.now(timezone.utc)

    async def generate_structured(
        self,
        prompt: str,
        response_model: Type[T],
        model: Optional[str] = None,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> Optional[T]:
        """
        Generate structured JSON output using Gemini (Async).
        Returns None if AI is disabled/unavailable, the response is empty,
        or the payload does not fit `response_model`.
        """
        if not self.is_available():
            logger.warning("AI is not available (mode=%s), skipping generation", self.mode)
            return None

        model_id = model or self.model

        try:
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=response_model,
                system_instruction=system_instruction,
                temperature=temperature,
            )

            response = await self._client.aio.models.generate_content(
                model=model_id,
                contents=prompt,
                config=config
            )

            if not response.text:
                self._record_error("Empty response")
                logger.warning("Gemini returned empty response")
                return None

            # The SDK parses when response_schema matches; fall back to the raw text
            if isinstance(response.parsed, response_model):
                return response.parsed
            return response_model.model_validate_json(response.text)

        except ValidationError as e:
            self._record_error(f"Unparseable response: {e}")
            logger.error(f"Gemini response did not match {response_model.__name__}: {e}")
            return None
        except Exception as e:
            self._record_error(f"{e.__class__.__name__}: {str(e)}")
            logger.error(f"Gemini generation failed: {e}")
            return None
