from fastapi import APIRouter, HTTPException, status

from cipherstack.core.exceptions import ValidationError
from cipherstack.dependencies import CryptanalysisDep, SettingsDep
from cipherstack.models.schemas import AnalyzeRequest, AnalyzeResponse, ErrorResponse

router = APIRouter()


@router.post(
    "",
    response_model=AnalyzeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        500: {"model": ErrorResponse, "description": "Analysis failed"},
    },
    summary="Analyze ciphertext",
    description=(
        "Report entropy, Index of Coincidence, repeating patterns and "
        "key-strength heuristics for AES, RSA or Autokey ciphertext."
    ),
)
def analyze_ciphertext(
    request: AnalyzeRequest,
    settings: SettingsDep,
    engine: CryptanalysisDep,
) -> AnalyzeResponse:
    """
    Analyze ciphertext produced by a declared cipher family.

    The analysis:
    1. Detects format and encoding of the ciphertext
    2. Computes entropy and Index of Coincidence
    3. Looks for repeating sequences or blocks
    4. Adds heuristic interpretations and recommendations

    Too little data yields an ``error`` result rather than a failure.
    """
    # Validate ciphertext length
    if len(request.text) > settings.max_text_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Text exceeds maximum length of {settings.max_text_length}",
        )

    try:
        report = engine.analyze(request.text, request.algorithm)

        return AnalyzeResponse(algorithm=request.algorithm, result=report)

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Analysis error: {str(e)}",
        )
