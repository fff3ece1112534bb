"""Factory for creating DrumCraft components."""

from typing import Optional, Dict, Type

from ..logging_config import get_logger
from ..audio.pitch_estimator import PitchEstimator
from ..audio.audio_input import SoundDeviceInput
from ..services.audio_providers import WavFileAudioSource
from ..services.listening_service import ListeningService
from .config import ConfigManager
from .interfaces import IAudioSource, IPitchEstimator

logger = get_logger(__name__)


class ComponentFactory:
    """Builds estimators, audio sources and listening services from configuration."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        self.pitch_estimator_classes: Dict[str, Type[IPitchEstimator]] = {
            "default": PitchEstimator,
        }

        self.audio_source_classes: Dict[str, Type[IAudioSource]] = {
            "default": SoundDeviceInput,
            "wav": WavFileAudioSource,
        }

    def create_pitch_estimator(self, implementation: str = "default", **kwargs) -> IPitchEstimator:
        """Create a pitch estimator.

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.pitch_estimator_classes:
            raise ValueError(f"Unknown pitch estimator implementation: {implementation}")

        config = self.config_manager.get_config("pitch_estimator")
        config.update(kwargs)

        instance = self.pitch_estimator_classes[implementation](**config)
        logger.info(f"Created pitch estimator: {implementation}")
        return instance

    def create_audio_source(self, implementation: str = "default", **kwargs) -> IAudioSource:
        """Create an audio source.

        The live source takes its settings from the ``audio_input``
        configuration; a file source only takes the window size from it.

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.audio_source_classes:
            raise ValueError(f"Unknown audio source implementation: {implementation}")

        config = self.config_manager.get_config("audio_input")
        if implementation == "wav":
            config = {"window_size": config["window_size"]}
        config.update(kwargs)

        instance = self.audio_source_classes[implementation](**config)
        logger.info(f"Created audio source: {implementation}")
        return instance

    def create_listening_service(
        self,
        audio_source: Optional[IAudioSource] = None,
        estimator: Optional[IPitchEstimator] = None,
        **kwargs,
    ) -> ListeningService:
        """Create a listening service, building default components as needed."""
        config = self.config_manager.get_config("listening")
        config.update(kwargs)

        service = ListeningService(
            audio_source=audio_source or self.create_audio_source(),
            estimator=estimator or self.create_pitch_estimator(),
            **config,
        )
        logger.info("Created listening service")
        return service
