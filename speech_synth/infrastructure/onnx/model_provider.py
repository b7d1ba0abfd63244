from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import onnxruntime as ort

from speech_synth.application.errors import AssetLoadError
from speech_synth.application.port.model_assets import STAGE_NAMES
from speech_synth.config import ModelConfig
from speech_synth.infrastructure.huggingface.asset_fetcher import HubAssetFetcher
from speech_synth.utils.logger import Logger

# Input feed names (in call order) and the output picked from each session.
STAGE_SIGNATURES: dict[str, tuple[tuple[str, ...], str]] = {
    "duration_predictor": (("text_ids", "style_dp", "text_mask"), "duration"),
    "text_encoder": (("text_ids", "style_ttl", "text_mask"), "text_emb"),
    "vector_estimator": (
        (
            "noisy_latent",
            "text_emb",
            "style_ttl",
            "latent_mask",
            "text_mask",
            "current_step",
            "total_step",
        ),
        "denoised_latent",
    ),
    "vocoder": (("latent",), "wav_tts"),
}

_INT_INPUTS = frozenset({"text_ids"})


class OnnxStage:
    """Calls one ONNX session with positional arguments mapped to named feeds."""

    def __init__(self, session: Any, *, inputs: Sequence[str], output: str):
        self.session = session
        self.inputs = tuple(inputs)
        self.output = output

    def __call__(self, *args: Any) -> np.ndarray:
        if len(args) != len(self.inputs):
            raise TypeError(f"expected {len(self.inputs)} inputs, got {len(args)}")

        feeds = {
            name: np.ascontiguousarray(
                value, dtype=np.int64 if name in _INT_INPUTS else np.float32
            )
            for name, value in zip(self.inputs, args)
        }
        outputs = self.session.run([self.output], feeds)
        return outputs[0]


class OnnxModelProvider:
    """Loads the model config, symbol table and the four stage sessions."""

    def __init__(
        self,
        fetcher: HubAssetFetcher,
        *,
        providers: Sequence[str] = ("CPUExecutionProvider",),
        logger: Logger | None = None,
    ):
        self.fetcher = fetcher
        self.providers = list(providers)
        self.logger = logger

    def load_config(self) -> ModelConfig:
        return ModelConfig.from_dict(self.fetcher.fetch_json(self.fetcher.onnx_file("tts.json")))

    def load_indexer(self) -> list[int]:
        indexer = self.fetcher.fetch_json(self.fetcher.onnx_file("unicode_indexer.json"))
        if not isinstance(indexer, list):
            raise AssetLoadError("unicode_indexer.json must be a JSON array")
        return indexer

    def load_stage(self, name: str) -> OnnxStage:
        if name not in STAGE_SIGNATURES:
            raise AssetLoadError(f"Unknown stage {name!r}; expected one of {STAGE_NAMES}")

        model_path = self.fetcher.fetch(self.fetcher.onnx_file(f"{name}.onnx"))

        session_options = ort.SessionOptions()
        session_options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL

        try:
            session = ort.InferenceSession(
                str(model_path), session_options, providers=self.providers
            )
        except Exception as e:
            raise AssetLoadError(f"Failed to initialize ONNX session for {name!r}: {e}") from e

        if self.logger:
            self.logger.log(f"Initialized {name} with providers: {self.providers}")

        inputs, output = STAGE_SIGNATURES[name]
        return OnnxStage(session, inputs=inputs, output=output)
