"""Best-effort illustration generation."""

from __future__ import annotations

from loguru import logger

from ..app.settings import Settings
from . import prompts
from .client import GeminiClient
from .codec import decode_base64, encode_data_url
from .exceptions import EncodingError

DEFAULT_IMAGE_MIME = "image/png"


class ImagePipeline:
    """Turns a prompt into a displayable image reference.

    Never raises for remote failures: the configured placeholder is returned
    when the call fails or carries no inline image.
    """

    def __init__(self, settings: Settings, client: GeminiClient) -> None:
        self._settings = settings
        self._client = client

    @property
    def placeholder(self) -> str:
        return self._settings.placeholder_image_url

    async def generate_image(self, prompt: str) -> str:
        try:
            payloads = await self._client.generate_image(
                model=self._settings.image_model_id,
                prompt=prompt + prompts.IMAGE_STYLE_SUFFIX,
                aspect_ratio=self._settings.image_aspect_ratio,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Image generation failed, using placeholder: {}", exc)
            return self.placeholder

        for payload in payloads:
            mime_type = payload.mime_type or DEFAULT_IMAGE_MIME
            if not mime_type.startswith("image/"):
                continue
            try:
                data = decode_base64(payload.data) if isinstance(payload.data, str) else payload.data
            except EncodingError as exc:
                logger.warning("Discarding undecodable image payload: {}", exc)
                continue
            return encode_data_url(data, mime_type)

        logger.warning("Image response carried no inline image, using placeholder")
        return self.placeholder
