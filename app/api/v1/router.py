from fastapi import APIRouter
from app.api.v1 import auth, brands, docs, export, integrations, websocket

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(brands.router, prefix="/brands", tags=["brands"])
api_router.include_router(docs.router, prefix="/docs", tags=["docs"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
api_router.include_router(integrations.router, prefix="/integrations", tags=["integrations"])
api_router.include_router(websocket.router, prefix="/ws", tags=["websocket"])
