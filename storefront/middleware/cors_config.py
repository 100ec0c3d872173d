from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings


def configure_cors(app, origins=None):
    # storefront UI and admin panel are served from a separate origin
    origins = origins or settings.cors_origins() or ["http://localhost:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )
