from fastapi import APIRouter

from boarddoc.api.v1.generator import router as generator_router

v1_router = APIRouter()

v1_router.include_router(generator_router)
