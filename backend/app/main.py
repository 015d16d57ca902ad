from fastapi import FastAPI
import logging
from fastapi.middleware.cors import CORSMiddleware

app = FastAPI(title="Graph Layout Engine API",
              description="API for computing 2D drawings of undirected graphs",
              version="1.0.0")

# Configure logging to show info-level logs from routers and layout algorithms
logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {"message": "Welcome to Graph Layout Engine API"}


@app.get("/health")
async def health():
    """Health endpoint for local checks.

    Returns a small JSON with service status and available layout endpoints.
    """
    return {
        "status": "ok",
        "service": "graph-layout-engine",
        "version": "1.0.0",
        "routes": [
            "/api/layouts",
            "/api/layouts/{algorithm}"
        ]
    }

# Import routers
from .routers import layouts
app.include_router(layouts.router, prefix="/api/layouts", tags=["layouts"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backend.app.main:app", host="0.0.0.0", port=8000, reload=True)
