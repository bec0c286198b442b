# app/api/api.py
from fastapi import APIRouter
from app.api.endpoints import assessment_router

api_router = APIRouter()
api_router.include_router(assessment_router.router, tags=["Diabetes Risk Assessment"])
