import google.generativeai as genai
from typing import Optional
from ...core.config import settings
from ...application.ports.ai_provider import AIProvider


class GeminiProvider(AIProvider):
    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None) -> None:
        genai.configure(api_key=api_key or settings.GEMINI_API_KEY)
        self.model = genai.GenerativeModel(model_name or settings.GEMINI_MODEL)

    def generate_text(self, prompt: str) -> str:
        result = self.model.generate_content(prompt)
        return getattr(result, "text", str(result))
