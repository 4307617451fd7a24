"""FastAPI application - serves the practice analysis API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cajoncoach.api.history import router as history_router
from cajoncoach.api.upload import router as upload_router

app = FastAPI(title="Cajon Coach", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload_router, prefix="/api")
app.include_router(history_router, prefix="/api")


@app.get("/api/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn
    from cajoncoach.config import settings
    uvicorn.run(
        "cajoncoach.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
