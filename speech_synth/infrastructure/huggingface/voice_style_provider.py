from __future__ import annotations

from speech_synth.application.errors import AssetLoadError
from speech_synth.domain.vo.voice_style import VoiceStyle
from speech_synth.infrastructure.huggingface.asset_fetcher import HubAssetFetcher


class HubVoiceStyleProvider:
    def __init__(self, fetcher: HubAssetFetcher):
        self.fetcher = fetcher

    def load(self, voice_id: str) -> VoiceStyle:
        document = self.fetcher.fetch_json(self.fetcher.voice_style_file(voice_id))
        if not isinstance(document, dict):
            raise AssetLoadError(f"Voice style {voice_id!r} is not a JSON object")
        try:
            return VoiceStyle.from_document(voice_id, document)
        except ValueError as e:
            raise AssetLoadError(f"Malformed voice style {voice_id!r}: {e}") from e
