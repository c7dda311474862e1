from abc import ABC, abstractmethod


class AbstractSpeechClient(ABC):
	"""Interface for speech-to-text clients."""

	#: Value recorded as the ``source`` of transcriptions produced by this client.
	name: str

	@abstractmethod
	async def transcribe(
		self,
		audio: bytes,
		*,
		audio_url: str,
		language: str = "en-US",
	) -> str:
		"""Convert raw audio bytes to text.

		Args:
			audio: Downloaded audio payload.
			audio_url: Where the audio came from (used for naming and mocks).
			language: BCP-47 style language tag, e.g. ``en-US``.

		Returns:
			str: Recognized text.

		Raises:
			RuntimeError: If the provider call fails or recognizes no speech.
		"""
		...
