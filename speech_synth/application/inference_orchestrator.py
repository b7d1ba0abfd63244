from __future__ import annotations

import math
from typing import Any, Callable

import numpy as np

from speech_synth.application.errors import InputError, StageInvocationError
from speech_synth.application.port.inference_stages import InferenceStages
from speech_synth.config import ModelConfig
from speech_synth.domain.latent_sampler import LatentSampler
from speech_synth.domain.vo.text_batch import TextBatch
from speech_synth.domain.vo.voice_style import VoiceStyle

DEFAULT_STEPS = 5


def validate_speed(speed: float) -> float:
    speed = float(speed)
    if not math.isfinite(speed) or speed <= 0:
        raise InputError(f"speed must be a positive number, got {speed!r}")
    return speed


def validate_steps(steps: int) -> int:
    if isinstance(steps, bool) or not isinstance(steps, int) or steps < 1:
        raise InputError(f"steps must be a positive integer, got {steps!r}")
    return steps


class InferenceOrchestrator:
    """Runs the four model stages for one encoded batch.

    duration -> text encoding -> `steps` refinement passes -> waveform. Every
    stage failure is raised as StageInvocationError tagged with the stage name.
    """

    def __init__(
        self,
        stages: InferenceStages,
        model_config: ModelConfig,
        sampler: LatentSampler | None = None,
    ):
        self.stages = stages
        self.model_config = model_config
        self.sampler = sampler or LatentSampler()

    def infer(
        self,
        batch: TextBatch,
        style: VoiceStyle,
        *,
        steps: int = DEFAULT_STEPS,
        speed: float = 1.0,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return `(waveform, durations)`.

        waveform: float32 (batch, samples); durations: float32 (batch,) seconds,
        already divided by `speed`.
        """
        speed = validate_speed(speed)
        steps = validate_steps(steps)

        durations = self.predict_duration(batch, style) / np.float32(speed)

        text_emb = self._invoke(
            "text_encoder",
            self.stages.text_encoding,
            batch.ids,
            style.encoding_vector,
            batch.mask,
        )
        if text_emb is None:
            raise StageInvocationError("text_encoder", "returned no embedding")

        latent, latent_mask = self.sampler.sample(
            durations,
            sample_rate=self.model_config.sample_rate,
            chunk_size=self.model_config.chunk_size,
            latent_channels=self.model_config.latent_channels,
        )
        latent = self.refine(
            latent,
            text_emb=text_emb,
            style=style,
            latent_mask=latent_mask,
            text_mask=batch.mask,
            steps=steps,
        )

        waveform = self.generate_waveform(latent)
        return waveform, durations.astype(np.float32)

    def predict_duration(self, batch: TextBatch, style: VoiceStyle) -> np.ndarray:
        raw = self._invoke(
            "duration_predictor",
            self.stages.duration,
            batch.ids,
            style.duration_vector,
            batch.mask,
        )
        durations = self._as_float_array("duration_predictor", raw).reshape(-1)
        if durations.shape[0] != batch.batch_size:
            raise StageInvocationError(
                "duration_predictor",
                f"expected {batch.batch_size} durations, got {durations.shape[0]}",
            )
        if np.any(durations < 0):
            raise StageInvocationError("duration_predictor", "negative duration")
        return durations

    def refine(
        self,
        latent: np.ndarray,
        *,
        text_emb: Any,
        style: VoiceStyle,
        latent_mask: np.ndarray,
        text_mask: np.ndarray,
        steps: int,
    ) -> np.ndarray:
        """Fold the refinement stage over step = 0 .. steps - 1.

        Each pass consumes the previous pass's latent; the fold ends when
        step == steps.
        """
        batch = latent.shape[0]
        total_step = np.full(batch, steps, dtype=np.float32)

        step = 0
        while step < steps:
            current_step = np.full(batch, step, dtype=np.float32)
            refined = self._invoke(
                "vector_estimator",
                self.stages.refinement,
                latent,
                text_emb,
                style.encoding_vector,
                latent_mask,
                text_mask,
                current_step,
                total_step,
            )
            refined = self._as_float_array("vector_estimator", refined)
            # A flat buffer is accepted; any other layout must match exactly.
            if refined.ndim == 1 and refined.size == latent.size:
                refined = refined.reshape(latent.shape)
            if refined.shape != latent.shape:
                raise StageInvocationError(
                    "vector_estimator",
                    f"expected latent of shape {latent.shape}, got {refined.shape}",
                )
            latent = refined
            step += 1

        return latent

    def generate_waveform(self, latent: np.ndarray) -> np.ndarray:
        raw = self._invoke("vocoder", self.stages.waveform, latent)
        waveform = self._as_float_array("vocoder", raw)

        batch = latent.shape[0]
        if waveform.ndim == 3 and waveform.shape[1] == 1:
            waveform = waveform[:, 0, :]
        elif waveform.ndim == 1 and waveform.size % batch == 0:
            waveform = waveform.reshape(batch, -1)

        if waveform.ndim != 2 or waveform.shape[0] != batch:
            raise StageInvocationError(
                "vocoder", f"expected mono waveform per item, got shape {waveform.shape}"
            )
        return waveform

    def _invoke(self, stage: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except StageInvocationError:
            raise
        except Exception as e:
            raise StageInvocationError(stage, str(e) or type(e).__name__) from e

    def _as_float_array(self, stage: str, value: Any) -> np.ndarray:
        if value is None:
            raise StageInvocationError(stage, "returned no output")
        try:
            array = np.asarray(value, dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise StageInvocationError(stage, f"malformed output: {e}") from e
        if not np.all(np.isfinite(array)):
            raise StageInvocationError(stage, "output contains NaN or Infinity")
        return array
