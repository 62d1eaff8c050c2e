from fastapi import APIRouter, HTTPException, status

from cipherstack.core.exceptions import KeyGenerationError, ValidationError
from cipherstack.dependencies import KeyServiceDep, SettingsDep
from cipherstack.models.schemas import ErrorResponse, KeyPairRequest, KeyPairResponse

router = APIRouter()


@router.post(
    "/rsa",
    response_model=KeyPairResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported key size"},
        500: {"model": ErrorResponse, "description": "Key generation failed"},
    },
    summary="Generate an RSA key pair",
    description="Generate a PEM-encoded RSA key pair of 1024, 2048 or 4096 bits.",
)
def generate_rsa_key_pair(
    request: KeyPairRequest,
    settings: SettingsDep,
    keys: KeyServiceDep,
) -> KeyPairResponse:
    """Generate a fresh RSA key pair for an RSA layer."""
    key_size = request.key_size or settings.default_rsa_key_size

    try:
        pair = keys.generate_rsa_keypair(key_size)

        return KeyPairResponse(
            public_key=pair.public_key,
            private_key=pair.private_key,
            key_size=pair.key_size,
        )

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except KeyGenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )
