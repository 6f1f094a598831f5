from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from qadesk.api.deps import get_current_user, get_db, get_storage
from qadesk.db.models.user import User
from qadesk.services import attachment as attachment_service
from qadesk.services.storage import LocalBlobStorage

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{attachment_id}")
def download_file(
    attachment_id: int,
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Download an attachment. Same group access as its question."""
    attachment, data = attachment_service.download_attachment(
        db, storage, attachment_id, current_user
    )
    return Response(
        content=data,
        media_type=attachment.content_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(attachment.file_name)}",
        },
    )
