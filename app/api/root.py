from fastapi import APIRouter

router = APIRouter()

@router.get("/")
def root():
    return {
        "name": "Cart Service",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }
