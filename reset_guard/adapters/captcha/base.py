from abc import ABC, abstractmethod


class AbstractChallengeVerifier(ABC):
	"""Interface for human-verification (CAPTCHA) token verifiers."""

	@abstractmethod
	async def verify(self, token: str, *, remote_ip: str | None = None) -> bool:
		"""Ask the provider whether a challenge token is valid.

		Args:
			token: Token produced by the client-side widget.
			remote_ip: Optional client IP forwarded to the provider.

		Returns:
			bool: True when the provider accepted the token.

		Raises:
			ChallengeUnavailableError: If the provider could not give a verdict.
		"""
		...
