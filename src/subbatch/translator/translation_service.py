"""Translation service: prompt building and one backend call per batch."""

import logging
from typing import List, Optional

from subbatch.common.config import settings
from subbatch.common.schemas import BackendConfig
from subbatch.translator.line_codec import (
    SPLIT_DELIMITER,
    DecodeResult,
    decode_payload,
    encode,
)
from subbatch.translator.ollama_client import OllamaClient

logger = logging.getLogger(__name__)


class SubtitleTranslator:
    """Translates batches of subtitle texts through an Ollama backend."""

    def __init__(
        self,
        client: OllamaClient,
        config: BackendConfig,
        source_language: Optional[str] = None,
        target_language: Optional[str] = None,
    ):
        """
        Initialize the translator.

        Args:
            client: Backend client used for generation calls
            config: Backend address and model; read on every call
            source_language: Language of the original subtitles
            target_language: Language to translate into
        """
        self.client = client
        self.config = config
        self.source_language = (
            source_language or settings.translation_source_language
        )
        self.target_language = (
            target_language or settings.translation_target_language
        )

    def build_translation_prompt(self, payload: str) -> str:
        """
        Wrap an encoded payload in the fixed translation instruction.

        Args:
            payload: Delimiter-joined segment texts

        Returns:
            Prompt string for /api/generate
        """
        return (
            f"You are a professional subtitle translator.\n"
            f"Translate the following {self.source_language} subtitle lines "
            f"into {self.target_language}.\n"
            f"Do not output any explanations, notes, or line numbers.\n"
            f"Only output the translated text, line by line.\n"
            f"Maintain the exact same number of lines as the input.\n"
            f"Keep every {SPLIT_DELIMITER} marker on its own line between "
            f"translated lines.\n\n"
            f"Input:\n{payload}"
        )

    async def translate_batch(self, texts: List[str]) -> DecodeResult:
        """
        Translate a batch of subtitle texts.

        Backend errors propagate to the caller; a reply whose segment count
        cannot be reconciled decodes to the original texts.

        Args:
            texts: Original subtitle texts in document order

        Returns:
            DecodeResult with exactly len(texts) segments
        """
        if not texts:
            return decode_payload("", texts)

        prompt = self.build_translation_prompt(encode(texts))

        logger.info(
            f"Translating {len(texts)} segments from {self.source_language} "
            f"to {self.target_language} with model {self.config.model!r}"
        )

        output = await self.client.generate(
            self.config.host, self.config.model, prompt
        )
        return decode_payload(output, texts)
