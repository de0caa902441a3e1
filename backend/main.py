from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os

# Only load .env file if not running on Heroku
if not os.getenv("DYNO"):  # DYNO is a Heroku-specific environment variable
    from dotenv import load_dotenv
    load_dotenv()
    print("🔧 Local development: Loaded .env file")
else:
    print("☁️ Running on Heroku: Using environment variables")

from config.settings import settings
from core.image_store import ImageStore, get_image_store
from api import image_edit, images, sessions
from services.session_service import SessionService, get_session_service

settings.warn_if_unconfigured()

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, debug=settings.DEBUG)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(image_edit.router, prefix=settings.API_V1_STR)
app.include_router(sessions.router, prefix=settings.API_V1_STR)
app.include_router(images.router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

@app.get("/api/health")
async def api_health_check(
    image_store: ImageStore = Depends(get_image_store),
    session_service: SessionService = Depends(get_session_service)
):
    return {
        "status": "healthy",
        "service": "api",
        "gemini_configured": settings.is_gemini_configured,
        "image_store": image_store.get_stats(),
        "active_sessions": session_service.session_count()
    }

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", settings.PORT))
    uvicorn.run(app, host="0.0.0.0", port=port)
