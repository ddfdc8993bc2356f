from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from blogo.dependencies import get_health_service
from blogo.services.health_service import HealthService

router = APIRouter()


@router.get("/health")
async def health(service: HealthService = Depends(get_health_service)):
    report = (await service.check_health()).unwrap()
    status_code = 503 if report.status == "unhealthy" else 200
    return JSONResponse(report.model_dump(), status_code=status_code)
