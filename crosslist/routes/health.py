from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Basic health check with adapter and scheduler state"""
    state = request.app.state
    scheduler = getattr(state, "scheduler", None)
    return {
        "status": "healthy",
        "service": "Crosslist Engine",
        "items": len(state.store.all()),
        "pending_writes": len(state.store.dirty_ids),
        "adapters": {name: adapter.state.value for name, adapter in state.adapters.items()},
        "scheduler": scheduler.status()["status"] if scheduler else "disabled",
    }
