"""
Knowledge base ingestion and retrieval.

A source (raw text or an uploaded file) is turned into plain text, split into
overlapping chunks and embedded. Source, extracted text and chunks are written
in a single transaction so a failed ingestion leaves nothing queryable.
"""

import io
import math
import zipfile
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import docx
from docx.opc.exceptions import PackageNotFoundError
from langchain_text_splitters import RecursiveCharacterTextSplitter
from pypdf import PdfReader
from pypdf.errors import PyPdfError
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.exceptions import ExternalServiceError, InvalidPayloadError, NotFoundError, UnsupportedDocumentError
from app.models.knowledge import Document, Source, SourceType
from app.services.embeddings import EmbeddingsClient
from app.services.storage import LocalStorage

logger = structlog.get_logger()

MIME_PDF = "application/pdf"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIME_TEXT = "text/plain"
MIME_MARKDOWN = "text/markdown"

SUPPORTED_MIME_TYPES = (MIME_PDF, MIME_DOCX, MIME_TEXT, MIME_MARKDOWN)

# Loader output: (text, extra metadata) per logical page
LoadedPage = Tuple[str, Dict[str, Any]]


# =============================================================================
# Loaders
# =============================================================================

def load_pdf(data: bytes) -> List[LoadedPage]:
    try:
        reader = PdfReader(io.BytesIO(data))
        return [
            (page.extract_text() or "", {"page": number})
            for number, page in enumerate(reader.pages, start=1)
        ]
    except PyPdfError as e:
        raise InvalidPayloadError(f"Could not read PDF: {e}") from e


def load_docx(data: bytes) -> List[LoadedPage]:
    try:
        document = docx.Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile) as e:
        raise InvalidPayloadError(f"Could not read DOCX: {e}") from e
    text = "\n".join(paragraph.text for paragraph in document.paragraphs)
    return [(text, {})]


def load_text(data: bytes) -> List[LoadedPage]:
    return [(data.decode("utf-8", errors="replace"), {})]


LOADERS = {
    MIME_PDF: load_pdf,
    MIME_DOCX: load_docx,
    MIME_TEXT: load_text,
    MIME_MARKDOWN: load_text,
}


def normalize_mime_type(mime_type: Optional[str], filename: Optional[str] = None) -> str:
    """Strip parameters; fall back to the extension for generic uploads"""
    normalized = (mime_type or "").split(";")[0].strip().lower()

    if normalized in ("", "application/octet-stream") and filename:
        lowered = filename.lower()
        if lowered.endswith(".md"):
            return MIME_MARKDOWN
        if lowered.endswith(".txt"):
            return MIME_TEXT
        if lowered.endswith(".pdf"):
            return MIME_PDF
        if lowered.endswith(".docx"):
            return MIME_DOCX

    return normalized


def ensure_supported(mime_type: str) -> None:
    # Legacy Word binaries have no loader
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise UnsupportedDocumentError(mime_type)


def extract_pages(mime_type: str, data: bytes) -> List[LoadedPage]:
    ensure_supported(mime_type)
    return LOADERS[mime_type](data)


# =============================================================================
# Chunking and indexing
# =============================================================================

def split_pages(pages: List[LoadedPage], metadata: Dict[str, Any]) -> List[Tuple[str, Dict[str, Any]]]:
    """Split page texts into overlapping chunks carrying source metadata"""
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=settings.kb_chunk_size,
        chunk_overlap=settings.kb_chunk_overlap,
    )
    chunks = splitter.create_documents(
        [text for text, _ in pages],
        metadatas=[{**extra, **metadata} for _, extra in pages],
    )
    return [(chunk.page_content, chunk.metadata) for chunk in chunks if chunk.page_content.strip()]


def _chunk_metadata(source: Source) -> Dict[str, Any]:
    metadata = {
        "source": source.type,
        "source_id": str(source.id),
        "organization_id": str(source.organization_id),
    }
    if source.file_path:
        metadata["source_path"] = source.file_path
    return metadata


async def _index_source(
    db: AsyncSession,
    embeddings: EmbeddingsClient,
    source: Source,
    pages: List[LoadedPage],
) -> int:
    """Embed the chunks of a flushed source and stage Document rows; returns chunk count"""
    chunks = split_pages(pages, _chunk_metadata(source))
    if not chunks:
        raise InvalidPayloadError("No text could be extracted from the source")

    vectors = await embeddings.embed_documents([content for content, _ in chunks])

    for (content, metadata), vector in zip(chunks, vectors):
        db.add(
            Document(
                source_id=source.id,
                organization_id=source.organization_id,
                content=content,
                metadata_json=metadata,
                embedding=vector,
            )
        )

    return len(chunks)


async def create_text_source(
    db: AsyncSession,
    embeddings: EmbeddingsClient,
    organization_id: UUID,
    title: str,
    content: str,
) -> Source:
    source = Source(
        organization_id=organization_id,
        type=SourceType.TEXT.value,
        name=title,
        content=content,
    )
    db.add(source)

    try:
        await db.flush()
        chunk_count = await _index_source(db, embeddings, source, [(content, {})])
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Text source ingested",
        source_id=str(source.id),
        organization_id=str(organization_id),
        chunks=chunk_count,
    )
    return source


async def _discard_upload(storage: LocalStorage, key: str) -> None:
    """Remove a stored file after a failed ingestion without masking the original error"""
    try:
        await storage.remove(key)
    except ExternalServiceError as e:
        logger.error("Orphaned upload left in storage", key=key, error=e.message)


async def create_file_source(
    db: AsyncSession,
    embeddings: EmbeddingsClient,
    storage: LocalStorage,
    organization_id: UUID,
    filename: str,
    mime_type: Optional[str],
    data: bytes,
) -> Source:
    """
    Store an uploaded file and index its text.

    The extracted text is kept on the source. On failure the transaction is
    rolled back and the stored object removed.
    """
    mime_type = normalize_mime_type(mime_type, filename)
    ensure_supported(mime_type)

    if not data:
        raise InvalidPayloadError("Uploaded file is empty")

    key = await storage.upload(storage.build_key(f"sources/{organization_id}", filename), data)

    source = Source(
        organization_id=organization_id,
        type=SourceType.FILE.value,
        name=filename,
        file_name=filename,
        file_path=key,
        mime_type=mime_type,
        size=len(data),
    )
    db.add(source)

    try:
        await db.flush()
        stored = await storage.download(key)
        pages = extract_pages(mime_type, stored)
        source.content = "\n\n".join(text for text, _ in pages)
        chunk_count = await _index_source(db, embeddings, source, pages)
        await db.commit()
    except Exception:
        await db.rollback()
        await _discard_upload(storage, key)
        raise

    logger.info(
        "File source ingested",
        source_id=str(source.id),
        organization_id=str(organization_id),
        mime_type=mime_type,
        size=len(data),
        chunks=chunk_count,
    )
    return source


# =============================================================================
# Source management
# =============================================================================

async def list_text_sources(
    db: AsyncSession,
    organization_id: UUID,
    page: int = 1,
    page_size: int = 10,
) -> Tuple[List[Source], int, int]:
    """Returns (sources, total, total_pages), newest first"""
    scoped = (Source.organization_id == organization_id, Source.type == SourceType.TEXT.value)

    total = await db.scalar(select(func.count(Source.id)).where(*scoped)) or 0

    result = await db.execute(
        select(Source)
        .where(*scoped)
        .order_by(Source.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total, math.ceil(total / page_size)


async def list_file_sources(db: AsyncSession, organization_id: UUID) -> List[Source]:
    result = await db.execute(
        select(Source)
        .where(Source.organization_id == organization_id, Source.type == SourceType.FILE.value)
        .order_by(Source.created_at.desc())
    )
    return list(result.scalars().all())


async def get_source(db: AsyncSession, organization_id: UUID, source_id: UUID) -> Source:
    result = await db.execute(
        select(Source).where(Source.id == source_id, Source.organization_id == organization_id)
    )
    source = result.scalar_one_or_none()

    if not source:
        raise NotFoundError("Source", source_id)

    return source


async def delete_source(
    db: AsyncSession,
    storage: LocalStorage,
    organization_id: UUID,
    source_id: UUID,
) -> None:
    """Delete a source, its chunks and any stored file"""
    source = await get_source(db, organization_id, source_id)
    file_path = source.file_path

    try:
        await db.execute(delete(Document).where(Document.source_id == source.id))
        await db.delete(source)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    if file_path:
        await storage.remove(file_path)

    logger.info("Source deleted", source_id=str(source_id), organization_id=str(organization_id))


# =============================================================================
# Retrieval
# =============================================================================

async def search_similar_documents(
    db: AsyncSession,
    organization_id: UUID,
    vector: List[float],
    k: int,
) -> List[Tuple[Document, float]]:
    """Nearest chunks of one organization with cosine similarity in [0, 1]"""
    distance = Document.embedding.cosine_distance(vector)

    result = await db.execute(
        select(Document, distance.label("distance"))
        .where(Document.organization_id == organization_id)
        .order_by(distance)
        .limit(k)
    )
    return [(document, 1 - float(dist)) for document, dist in result.all()]


def serialize_documents(documents: List[Document]) -> str:
    return "\n".join(
        f"Source: {(document.metadata_json or {}).get('source')}\nContent: {document.content}"
        for document in documents
    )


async def retrieve_knowledge(
    db: AsyncSession,
    embeddings: EmbeddingsClient,
    organization_id: UUID,
    query: str,
) -> str:
    """Relevant chunks above the similarity threshold, concatenated"""
    if not query or not query.strip():
        return ""

    vector = await embeddings.embed_query(query)
    matches = await search_similar_documents(db, organization_id, vector, settings.kb_search_k)

    relevant = [document for document, score in matches if score > settings.kb_similarity_threshold]

    logger.info(
        "Knowledge retrieved",
        organization_id=str(organization_id),
        matches=len(matches),
        relevant=len(relevant),
    )
    return serialize_documents(relevant)
