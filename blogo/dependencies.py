from fastapi import Depends, Request

from blogo.container import Container
from blogo.services.content_service import ContentService
from blogo.services.health_service import HealthService
from blogo.settings import Settings


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_settings(container: Container = Depends(get_container)) -> Settings:
    return container.settings


def get_content_service(container: Container = Depends(get_container)) -> ContentService:
    return container.content_service


def get_health_service(container: Container = Depends(get_container)) -> HealthService:
    return container.health_service
