"""
DrawCalc Backend - Calculate Route Handler
==========================================

What:  Handles POST /calculate: a multipart upload with a `drawing` file field.
How:   Parses the form, reads the drawing into memory, asks the inference
       client for results, shapes them (one → object, otherwise → array).
Who:   Called by the drawing canvas frontend.

Request Flow:
    1. Content-Type must be multipart/form-data            (else 400)
    2. Body must fit in max_upload_size (10 MiB)           (else 400)
    3. Form must parse and contain a `drawing` file        (else 400)
       whose spooled size fits in max_upload_size          (else 400)
    4. Drawing is read fully into memory                   (else 500)
    5. Inference client obtained from the provider         (else 500)
    6. process_drawing()                                   (else 500)
    7. JSON response                                       (else 500)

The client is obtained only after step 4, so a malformed upload never
triggers client construction or a model call.
"""

import logging
from typing import Any, Dict, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from drawcalc.config import Settings
from drawcalc.exceptions import (
    ClientInputError,
    DrawCalcError,
    ResponseEncodingError,
    UploadReadError,
)
from drawcalc.schemas.result import shape_results
from drawcalc.services.client_provider import InferenceClientProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Calculate"])

DRAWING_FIELD = "drawing"


def get_client_provider(request: Request) -> InferenceClientProvider:
    return request.app.state.client_provider


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.post(
    "/calculate",
    responses={
        200: {"description": "One result object, or an array of results"},
        400: {"description": "Bad multipart form or missing `drawing` field"},
        405: {"description": "Method not allowed"},
        500: {"description": "Read, inference or encoding failure"},
    },
    summary="Solve a handwritten drawing",
    description=(
        "Upload a drawing (multipart field `drawing`, PNG, max 10 MiB). "
        "Returns {expression, result} when the model finds exactly one result, "
        "otherwise an array of {expression, result, assign?} objects."
    ),
)
async def calculate(
    request: Request,
    provider: InferenceClientProvider = Depends(get_client_provider),
    app_settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    image_data, upload_info = await read_drawing(request, app_settings.max_upload_size)

    logger.info(
        "Received file: %s, size: %d bytes, type: %s",
        upload_info["filename"],
        upload_info["size"],
        upload_info["content_type"],
    )

    try:
        client = provider.get()
        results = await client.process_drawing(image_data)
    except DrawCalcError as e:
        # The provider hands every caller the same error object; leave it untouched
        logger.error(
            "Failed to process %s (%s bytes, %s): %s",
            upload_info["filename"],
            upload_info["size"],
            upload_info["content_type"],
            e.message,
        )
        raise

    payload = shape_results(results)
    try:
        response = JSONResponse(content=payload)
    except (TypeError, ValueError) as e:
        raise ResponseEncodingError(
            context={"error": str(e), "results": len(results), **upload_info},
        ) from e

    logger.info("Sending %d result(s) as %s", len(results), type(payload).__name__)
    return response


async def read_drawing(request: Request, max_size: int) -> Tuple[bytes, Dict[str, Any]]:
    """
    Parse the multipart body and return the `drawing` bytes plus upload metadata.

    Raises:
        ClientInputError: wrong content type, oversized or unparsable form,
            missing or non-file `drawing` field.
        UploadReadError: the spooled upload could not be read back.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise ClientInputError(
            message="Error parsing form: request Content-Type isn't multipart/form-data",
            context={"content_type": content_type},
        )

    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_size:
        raise ClientInputError(
            message=f"Error parsing form: request body too large (limit {max_size} bytes)",
            context={"content_length": int(declared), "limit": max_size},
        )

    try:
        form = await request.form()
    except MultiPartException as e:
        raise ClientInputError(
            message=f"Error parsing form: {e.message}",
            context={"content_type": content_type},
        ) from e
    except StarletteHTTPException as e:
        # Starlette re-raises multipart errors as HTTPException(400) inside an app
        raise ClientInputError(
            message=f"Error parsing form: {e.detail}",
            context={"content_type": content_type},
        ) from e

    try:
        upload = form.get(DRAWING_FIELD)
        if upload is None:
            raise ClientInputError(
                message=f"Error retrieving file: no file in form field '{DRAWING_FIELD}'",
                field=DRAWING_FIELD,
                context={"fields": list(form.keys())},
            )
        if not isinstance(upload, UploadFile):
            raise ClientInputError(
                message=f"Error retrieving file: form field '{DRAWING_FIELD}' is not a file",
                field=DRAWING_FIELD,
            )

        upload_info: Dict[str, Any] = {
            "filename": upload.filename or "unknown",
            "content_type": upload.content_type or "unknown",
            "size": upload.size,
        }
        request.state.upload = upload_info

        # Without a Content-Length the body was only spooled, never capped;
        # reject on the spooled size before pulling it into memory
        if upload.size is not None and upload.size > max_size:
            raise ClientInputError(
                message=f"Error parsing form: file too large (limit {max_size} bytes)",
                field=DRAWING_FIELD,
                context=dict(upload_info),
            )

        try:
            image_data = await upload.read()
        except OSError as e:
            raise UploadReadError(
                message=f"Error reading file: {e}",
                context=upload_info,
            ) from e
    finally:
        await form.close()

    upload_info["size"] = len(image_data)
    if len(image_data) > max_size:
        raise ClientInputError(
            message=f"Error parsing form: file too large (limit {max_size} bytes)",
            field=DRAWING_FIELD,
            context=dict(upload_info),
        )

    return image_data, upload_info
