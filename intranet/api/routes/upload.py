"""
Upload Routes
Image uploads proxied to Cloudinary
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from intranet.api.routes.auth import get_current_employee
from intranet.errors import BadRequestError
from intranet.services.upload import upload_service
from intranet.utils.response import success_response


router = APIRouter(dependencies=[Depends(get_current_employee)])


@router.post("/image", status_code=status.HTTP_201_CREATED)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    folder: Optional[str] = Form(None),
):
    """Upload a single image (multipart field "image")"""
    if image is None or not image.filename:
        raise BadRequestError("No file uploaded")

    staged = upload_service.stage(image)
    result = await upload_service.upload_image(staged, folder or "announce")
    return success_response(result, "Image uploaded successfully", status.HTTP_201_CREATED)


@router.post("/images", status_code=status.HTTP_201_CREATED)
async def upload_images(
    images: Optional[List[UploadFile]] = File(None),
    folder: Optional[str] = Form(None),
):
    """Upload up to five images (multipart field "images")"""
    if not images:
        raise BadRequestError("No files uploaded")

    staged = upload_service.stage_all(images)
    results = await upload_service.upload_multiple_images(staged, folder or "announcements")
    return success_response(results, "Images uploaded successfully", status.HTTP_201_CREATED)


@router.delete("/{public_id:path}")
async def delete_image(public_id: str):
    """Delete an image from Cloudinary by public ID"""
    if not public_id:
        raise BadRequestError("Public ID is required")

    await upload_service.delete_image(public_id)
    return success_response(None, "Image deleted successfully")
