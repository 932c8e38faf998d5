# amee_layer/main.py
from typing import Dict, List

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .carbon_store import CarbonStore
from .database import SessionLocal
from .errors import ExternalApiError
from .schemas import CacheRefreshOut, UnitOut
from .units import Unit


def create_app(stores: Dict[str, CarbonStore], session_factory=SessionLocal):
    """Admin API over the registered stores, keyed by model name."""
    app = FastAPI(title="AMEE Carbon Store Admin")
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    # Dependency to get DB session
    def get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    @app.get("/units", response_model=List[UnitOut])
    def list_units():
        return [{"key": u.key, "name": u.name, "amee_api_unit": u.amee_api_unit} for u in Unit.all()]

    @app.post("/admin/carbon-caches/{model}", response_model=CacheRefreshOut)
    def refresh_carbon_caches(model: str, db: Session = Depends(get_db)):
        store = stores.get(model)
        if store is None:
            raise HTTPException(status_code=404, detail=f"No carbon store registered for '{model}'")
        try:
            updated = store.update_carbon_caches(db)
        except ExternalApiError as e:
            raise HTTPException(status_code=502, detail=str(e))
        return {"model": model, "updated": updated}

    return app
