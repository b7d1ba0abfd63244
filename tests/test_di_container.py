"""Unit tests for the dependency container."""
from __future__ import annotations

import unittest

import numpy as np

from speech_synth.config import AppConfig, ModelConfig
from speech_synth.di_container import build_container
from speech_synth.domain.vo.voice_style import VoiceStyle
from speech_synth.presentation.control_channel import ReadAloudService
from speech_synth.utils.logger import Logger


class _ModelProvider:
    def load_config(self):
        return ModelConfig(sample_rate=16_000, base_chunk_size=4, chunk_compress_factor=2, latent_dim=2)

    def load_indexer(self):
        return list(range(128))

    def load_stage(self, name):
        return lambda *args: np.zeros(1, dtype=np.float32)


class _VoiceProvider:
    def load(self, voice_id):
        return VoiceStyle(voice_id, np.zeros((1, 1, 1), np.float32), np.zeros((1, 1, 1), np.float32))


class TestBuildContainer(unittest.TestCase):
    """Test cases for build_container."""

    def setUp(self):
        """Set up a container over in-memory providers."""
        self.logger = Logger()
        self.container = build_container(
            AppConfig(),
            logger=self.logger,
            model_provider=_ModelProvider(),
            voice_provider=_VoiceProvider(),
        )

    def test_keeps_given_providers(self):
        """Test that injected providers are used as-is."""
        self.assertIsInstance(self.container.model_provider, _ModelProvider)
        self.assertIs(self.container.logger, self.logger)

    def test_build_engine(self):
        """Test that the engine picks up the model sample rate."""
        engine = self.container.build_engine()
        self.assertEqual(engine.sample_rate, 16_000)

    def test_build_service(self):
        """Test that the service uses the configured defaults."""
        sent = []
        service = self.container.build_service(sent.append)

        self.assertIsInstance(service, ReadAloudService)
        self.assertEqual(service.defaults, AppConfig().defaults)
        self.assertTrue(service.initialize())
        self.assertEqual(sent[0]["method"], "advertiseVoices")


if __name__ == "__main__":
    unittest.main()
