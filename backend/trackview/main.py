import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from trackview.api.sessions import router as sessions_router
from trackview.api.export import router as export_router
from trackview.core.config import settings
from trackview.store import SessionStore

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="Trackview")

# Allow CORS for local frontend
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Loaded activity files live here for the life of the process
app.state.sessions = SessionStore()

app.include_router(sessions_router)
app.include_router(export_router)


@app.get("/")
def root():
    return {"message": "Trackview backend is running"}
