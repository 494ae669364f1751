"""OpenAI embeddings client"""

from typing import List

from openai import AsyncOpenAI, OpenAIError
import structlog

from app.config import settings
from app.exceptions import ExternalServiceError

logger = structlog.get_logger()


class EmbeddingsClient:
    """Computes one vector per text with the configured embeddings model"""

    def __init__(self, model: str = None, dimensions: int = None, batch_size: int = None):
        self.model = model or settings.embedding_model
        self.dimensions = dimensions or settings.embedding_dimensions
        self.batch_size = batch_size or settings.embedding_batch_size
        try:
            self.client = AsyncOpenAI(api_key=settings.openai_api_key)
        except OpenAIError as e:
            logger.error("Embeddings client misconfigured", error=str(e))
            raise ExternalServiceError("embeddings", "client is not configured") from e

    async def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=texts,
                dimensions=self.dimensions,
            )
        except OpenAIError as e:
            logger.error("Embeddings request failed", model=self.model, error=str(e))
            raise ExternalServiceError("embeddings", str(e)) from e

        logger.debug(
            "Embeddings computed",
            model=self.model,
            count=len(texts),
            tokens=response.usage.total_tokens if response.usage else None,
        )

        # The API may return entries out of order
        return [item.embedding for item in sorted(response.data, key=lambda d: d.index)]

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """Vectors in input order, requested at most batch_size texts at a time"""
        vectors = []
        for start in range(0, len(texts), self.batch_size):
            vectors.extend(await self._embed_batch(texts[start:start + self.batch_size]))
        return vectors

    async def embed_query(self, text: str) -> List[float]:
        vectors = await self.embed_documents([text])
        return vectors[0]


def get_embeddings_client() -> EmbeddingsClient:
    """FastAPI dependency returning the embeddings client"""
    return EmbeddingsClient()
