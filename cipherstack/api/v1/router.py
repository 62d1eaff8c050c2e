from fastapi import APIRouter

from cipherstack.api.v1.endpoints import analyze, keys, process

api_router = APIRouter()

api_router.include_router(
    process.router,
    prefix="/process",
    tags=["Encryption"],
)

api_router.include_router(
    analyze.router,
    prefix="/analyze",
    tags=["Analysis"],
)

api_router.include_router(
    keys.router,
    prefix="/keys",
    tags=["Keys"],
)
