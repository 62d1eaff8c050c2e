from fastapi import APIRouter, HTTPException, status

from cipherstack.core.exceptions import LayerError, ValidationError
from cipherstack.dependencies import OrchestratorDep, SettingsDep
from cipherstack.models.schemas import ErrorResponse, ProcessRequest, ProcessResponse

router = APIRouter()


@router.post(
    "",
    response_model=ProcessResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or a layer failed"},
        500: {"model": ErrorResponse, "description": "Processing failed"},
    },
    summary="Encrypt or decrypt through cipher layers",
    description=(
        "Run text through up to three cipher layers (AES, RSA, Autokey). "
        "Encryption walks the layers in order, decryption in reverse."
    ),
)
def process_text(
    request: ProcessRequest,
    settings: SettingsDep,
    orchestrator: OrchestratorDep,
) -> ProcessResponse:
    """
    Encrypt or decrypt text with a layered cipher pipeline.

    On a layer failure the response carries the steps that completed
    before the failing layer.
    """
    # Validate text length
    if len(request.text) > settings.max_text_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Text exceeds maximum length of {settings.max_text_length}",
        )

    try:
        result = orchestrator.process(request.text, request.action, request.layers)

        return ProcessResponse(result=result.result, steps=result.steps)

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except LayerError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": e.message,
                "layer": e.layer_index,
                "family": e.family,
                "steps": [step.model_dump(mode="json") for step in e.steps],
            },
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server error: {str(e)}",
        )
