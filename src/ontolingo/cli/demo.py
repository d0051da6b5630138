"""Demo machine translation provider for using the CLI without API calls."""

from __future__ import annotations

from ontolingo.mt.base import BaseMTProvider, ProviderDescriptor, TranslationResult


class DemoMTProvider(BaseMTProvider):
    """Provider that returns the source text unchanged.

    Takes the descriptor of a real provider so its seed memories are used.
    """

    def __init__(self, descriptor: ProviderDescriptor):
        super().__init__()
        self.descriptor = descriptor
        self.call_count = 0

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
    ) -> TranslationResult:
        self.call_count += 1
        self.total_characters += len(text)
        return TranslationResult(
            text=text,
            source_lang=source_lang or "",
            target_lang=target_lang,
            characters=len(text),
        )
