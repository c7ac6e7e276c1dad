from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from matchledger.platform.health import HealthChecker, get_health_checker

router = APIRouter()


@router.get("/health")
def health(checker: HealthChecker = Depends(get_health_checker)):
    """Liveness plus store connectivity; 503 when the store is unreachable."""
    result = checker.get_health_status()
    status_code = 200 if result["checks"]["database"]["status"] == "ok" else 503
    return JSONResponse(status_code=status_code, content=result)
