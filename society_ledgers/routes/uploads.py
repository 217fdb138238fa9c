from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from society_ledgers.core.auth import get_current_principal
from society_ledgers.models.user import Principal
from society_ledgers.services.blob_store import LocalBlobStore

router = APIRouter(prefix="/uploads", tags=["uploads"])


class UploadResponse(BaseModel):
    urls: List[str]


def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore()


@router.post("", response_model=UploadResponse)
async def upload_files(
    files: List[UploadFile] = File(...),
    principal: Principal = Depends(get_current_principal),
    store: LocalBlobStore = Depends(get_blob_store)
):
    """Store bill attachments; the returned URLs go into ``attachments``."""
    return UploadResponse(urls=await store.save_all(files))
