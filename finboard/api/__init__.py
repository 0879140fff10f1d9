from fastapi import APIRouter
from finboard.api.endpoints import transactions, auth

api_router = APIRouter()

api_router.include_router(transactions.router)
api_router.include_router(auth.router)
