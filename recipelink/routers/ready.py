from fastapi import APIRouter, Depends

from ..deps import get_store
from ..services.association_store import AssociationStore

router = APIRouter()


@router.get("/ready")
def ready(store: AssociationStore = Depends(get_store)):
    return {"ok": True, "store_ok": store.ping()}
