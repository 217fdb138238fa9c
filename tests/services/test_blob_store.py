import builtins
import io

import pytest
from fastapi import UploadFile

from society_ledgers.core.exceptions import UpstreamFailure, ValidationError
from society_ledgers.services import blob_store as blob_store_module
from society_ledgers.services.blob_store import LocalBlobStore, safe_filename


def _upload(name: str, data: bytes) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=name)


def test_safe_filename():
    assert safe_filename("my invoice (1).pdf") == "my_invoice__1_.pdf"
    assert safe_filename("../../etc/passwd") == ".._.._etc_passwd"
    assert safe_filename("") == "file"


@pytest.mark.asyncio
async def test_save_all_writes_files(tmp_path):
    store = LocalBlobStore(root=str(tmp_path), url_prefix="/files/", max_size=1024)

    urls = await store.save_all([_upload("invoice.pdf", b"%PDF-1.4"), _upload("photo.jpg", b"jpg")])

    assert len(urls) == 2
    assert all(url.startswith("/files/") for url in urls)
    assert urls[0].endswith("-invoice.pdf")
    stored = tmp_path / urls[0].rsplit("/", 1)[1]
    assert stored.read_bytes() == b"%PDF-1.4"


@pytest.mark.asyncio
async def test_save_all_rejects_oversized_file(tmp_path):
    store = LocalBlobStore(root=str(tmp_path), url_prefix="/files", max_size=4)
    with pytest.raises(ValidationError):
        await store.save_all([_upload("big.pdf", b"0123456789")])


@pytest.mark.asyncio
async def test_save_all_rejects_empty_upload(tmp_path):
    store = LocalBlobStore(root=str(tmp_path))
    with pytest.raises(ValidationError):
        await store.save_all([])


@pytest.mark.asyncio
async def test_rejected_batch_writes_nothing(tmp_path):
    store = LocalBlobStore(root=str(tmp_path), url_prefix="/files", max_size=10)

    with pytest.raises(ValidationError):
        await store.save_all([_upload("a.pdf", b"12345"), _upload("b.pdf", b"x" * 100)])

    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_failed_write_removes_partial_batch(tmp_path, monkeypatch):
    real_open = builtins.open
    calls = []

    def flaky_open(path, mode="r", *args, **kwargs):
        calls.append(path)
        if len(calls) == 2:
            raise OSError("disk full")
        return real_open(path, mode, *args, **kwargs)

    monkeypatch.setattr(blob_store_module, "open", flaky_open, raising=False)
    store = LocalBlobStore(root=str(tmp_path), url_prefix="/files", max_size=1024)

    with pytest.raises(UpstreamFailure):
        await store.save_all([_upload("a.pdf", b"aaa"), _upload("b.pdf", b"bbb")])

    assert len(calls) == 2
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_oversized_file_is_not_read_in_full(tmp_path):
    upload = _upload("huge.bin", b"x" * 4096)
    store = LocalBlobStore(root=str(tmp_path), url_prefix="/files", max_size=8)

    with pytest.raises(ValidationError):
        await store.save_all([upload])

    # Only max_size + 1 bytes were consumed from the stream
    assert upload.file.tell() == 9
