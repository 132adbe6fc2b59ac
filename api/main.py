from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ownertrace import __version__
from ownertrace.settings import API_DEBUG

app = FastAPI(
    title="ownertrace API",
    version=__version__,
    description="Ultimate-owner resolution over the ownership tracing API.",
    debug=API_DEBUG,
)

# --- CORS ----------------------------------------------------------
# Dev-only origins for the visualisation frontend.
origins = [
    "http://localhost:5173",    # Vite dev server default port
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# --- Include Routers ----------------------------------------------------------
from .ownership import router as ownership_router

app.include_router(ownership_router)


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "ownertrace API is alive"}


if __name__ == "__main__":
    import uvicorn

    from ownertrace.settings import API_HOST, API_PORT

    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT, reload=API_DEBUG)
