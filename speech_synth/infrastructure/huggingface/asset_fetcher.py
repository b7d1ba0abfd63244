from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from huggingface_hub import hf_hub_download
from huggingface_hub.errors import HfHubHTTPError

from speech_synth.application.errors import AssetLoadError
from speech_synth.config import AssetConfig


class HubAssetFetcher:
    """Resolves model repository files to local paths through the Hugging Face cache."""

    def __init__(self, config: AssetConfig):
        self.config = config

    def fetch(self, filename: str) -> Path:
        try:
            local_path = hf_hub_download(
                repo_id=self.config.repo_id,
                filename=filename,
                revision=self.config.revision,
                cache_dir=self.config.cache_dir,
            )
        except (HfHubHTTPError, OSError, ValueError) as e:
            raise AssetLoadError(f"Failed to fetch {filename!r} from {self.config.repo_id}: {e}") from e
        return Path(local_path)

    def fetch_json(self, filename: str) -> Any:
        path = self.fetch(filename)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise AssetLoadError(f"Failed to read {filename!r}: {e}") from e

    def onnx_file(self, name: str) -> str:
        return f"{self.config.onnx_dir}/{name}"

    def voice_style_file(self, voice_id: str) -> str:
        return f"{self.config.voice_styles_dir}/{voice_id}.json"
