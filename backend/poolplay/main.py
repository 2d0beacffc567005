import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from poolplay.database import init_db
from poolplay.routes import playoffs, runtime, schedule, teams, tournaments

logger = logging.getLogger(__name__)

app = FastAPI(title="Pool Play Tournament API")

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(teams.router, prefix="/api", tags=["teams"])
app.include_router(schedule.router, prefix="/api", tags=["schedule"])
app.include_router(playoffs.router, prefix="/api", tags=["playoffs"])
# Result entry + bracket advancement
app.include_router(runtime.router, prefix="/api", tags=["runtime"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("Registered %d routes", len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": "Pool Play Tournament API", "status": "healthy"}
