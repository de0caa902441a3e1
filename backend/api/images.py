from fastapi import APIRouter, Depends, HTTPException, Response

from core.image_store import ImageStore, get_image_store

router = APIRouter(prefix="/images", tags=["images"])

@router.get("/{image_id}")
async def get_image(image_id: str, image_store: ImageStore = Depends(get_image_store)):
    """Serve an uploaded image by its display URL"""
    image = image_store.get(image_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found or released")

    return Response(
        content=image.data,
        media_type=image.mime_type,
        headers={"Cache-Control": "no-store"}
    )
