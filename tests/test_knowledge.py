"""Tests for knowledge base ingestion"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.exceptions import ExternalServiceError
from app.models.knowledge import Document, Source
from app.services.knowledge import create_file_source, normalize_mime_type, split_pages
from app.services.storage import LocalStorage


class StuckStorage(LocalStorage):
    """Storage whose deletes always fail"""

    async def remove(self, key):
        raise ExternalServiceError("storage", f"remove failed for {key}")


async def count_rows(db, model):
    return await db.scalar(select(func.count(model.id)))


def test_normalize_mime_type():
    """Test MIME normalization and extension fallback"""
    assert normalize_mime_type("text/plain; charset=utf-8") == "text/plain"
    assert normalize_mime_type("application/octet-stream", "notes.md") == "text/markdown"
    assert normalize_mime_type(None, "Menu.PDF") == "application/pdf"
    assert normalize_mime_type("application/msword", "old.doc") == "application/msword"


def test_split_pages_carries_metadata():
    """Test chunks carry page and source metadata"""
    text = "Opening hours. " * 200
    chunks = split_pages([(text, {"page": 2})], {"source": "file", "source_id": "abc"})

    assert len(chunks) > 1
    for content, metadata in chunks:
        assert content.strip()
        assert metadata == {"page": 2, "source": "file", "source_id": "abc"}


@pytest.mark.asyncio
async def test_create_text_source_indexes_chunks(
    test_db, test_org, fake_embeddings, authenticated_client: AsyncClient
):
    """Test adding text creates embedded chunks"""
    response = await authenticated_client.post(
        f"/organizations/{test_org.id}/sources/text",
        json={"title": "Hours", "content": "We open at 7am and close at 6pm. Dogs welcome on the patio."},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["type"] == "text"
    assert data["name"] == "Hours"

    documents = (await test_db.execute(select(Document))).scalars().all()
    assert len(documents) == 1
    assert documents[0].metadata_json["source"] == "text"
    assert documents[0].metadata_json["source_id"] == data["id"]
    assert len(fake_embeddings.calls) == 1


@pytest.mark.asyncio
async def test_embedding_failure_leaves_nothing(
    test_db, test_org, fake_embeddings, authenticated_client: AsyncClient
):
    """Test an embeddings outage rolls back the source"""
    organization_id = test_org.id
    fake_embeddings.fail = True

    response = await authenticated_client.post(
        f"/organizations/{organization_id}/sources/text",
        json={"title": "Hours", "content": "We open at 7am."},
    )

    assert response.status_code == 502
    assert await count_rows(test_db, Source) == 0
    assert await count_rows(test_db, Document) == 0


@pytest.mark.asyncio
async def test_upload_text_file(test_db, test_org, test_storage, authenticated_client: AsyncClient):
    """Test uploading a text file and listing it"""
    response = await authenticated_client.post(
        f"/organizations/{test_org.id}/sources/files",
        files={"file": ("faq.txt", b"Do you have oat milk? Yes, at no extra charge.", "text/plain")},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["type"] == "file"
    assert data["file_name"] == "faq.txt"
    assert data["mime_type"] == "text/plain"
    assert data["content"] == "Do you have oat milk? Yes, at no extra charge."

    response = await authenticated_client.get(f"/organizations/{test_org.id}/sources/files")
    assert response.status_code == 200
    files = response.json()
    assert len(files) == 1
    assert files[0]["name"] == "faq.txt"
    assert files[0]["url"].startswith(f"http://test/storage/sources/{test_org.id}/")
    assert files[0]["size"] == len(b"Do you have oat milk? Yes, at no extra charge.")


@pytest.mark.asyncio
async def test_legacy_word_upload_rejected(test_db, test_org, authenticated_client: AsyncClient):
    """Test legacy Word uploads are unsupported"""
    response = await authenticated_client.post(
        f"/organizations/{test_org.id}/sources/files",
        files={"file": ("old.doc", b"\xd0\xcf\x11\xe0", "application/msword")},
    )

    assert response.status_code == 415
    assert await count_rows(test_db, Source) == 0


@pytest.mark.asyncio
async def test_text_sources_are_paginated(test_org, authenticated_client: AsyncClient):
    """Test text sources are paginated"""
    for number in range(3):
        response = await authenticated_client.post(
            f"/organizations/{test_org.id}/sources/text",
            json={"title": f"Note {number}", "content": f"Fact number {number}."},
        )
        assert response.status_code == 201

    response = await authenticated_client.get(
        f"/organizations/{test_org.id}/sources/text",
        params={"page": 2, "page_size": 2},
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data["data"]) == 1
    assert data["pagination"] == {"page": 2, "page_size": 2, "total": 3, "total_pages": 2}


@pytest.mark.asyncio
async def test_delete_file_source(test_db, test_org, test_storage, authenticated_client: AsyncClient):
    """Test deleting a file source removes chunks and file"""
    response = await authenticated_client.post(
        f"/organizations/{test_org.id}/sources/files",
        files={"file": ("notes.md", b"# Allergens\nAll pastries contain gluten.", "text/markdown")},
    )
    source_id = response.json()["id"]
    file_path = (await test_db.execute(select(Source.file_path))).scalar_one()

    response = await authenticated_client.delete(f"/organizations/{test_org.id}/sources/{source_id}")

    assert response.status_code == 204
    assert await count_rows(test_db, Source) == 0
    assert await count_rows(test_db, Document) == 0
    assert not (test_storage.root / file_path).exists()


@pytest.mark.asyncio
async def test_sources_are_scoped_to_organization(test_db, test_org, other_org, authenticated_client: AsyncClient):
    """Test sources cannot be deleted through another restaurant"""
    response = await authenticated_client.post(
        f"/organizations/{test_org.id}/sources/text",
        json={"title": "Hours", "content": "We open at 7am."},
    )
    source_id = response.json()["id"]

    response = await authenticated_client.delete(f"/organizations/{other_org.id}/sources/{source_id}")

    assert response.status_code == 403
    assert await count_rows(test_db, Source) == 1


@pytest.mark.asyncio
async def test_failed_cleanup_keeps_ingestion_error(test_db, test_org, fake_embeddings, tmp_path):
    """Test a storage cleanup failure does not hide why ingestion failed"""
    organization_id = test_org.id
    storage = StuckStorage(str(tmp_path / "stuck"), "http://test/storage")
    fake_embeddings.fail = True

    with pytest.raises(ExternalServiceError) as exc_info:
        await create_file_source(
            test_db, fake_embeddings, storage, organization_id,
            "faq.txt", "text/plain", b"Do you have oat milk? Yes.",
        )

    assert exc_info.value.service == "embeddings"
    assert await count_rows(test_db, Source) == 0
