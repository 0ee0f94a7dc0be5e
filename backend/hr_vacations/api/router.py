from fastapi import APIRouter

from hr_vacations.api.employees import employees_router
from hr_vacations.api.vacations import vacations_router

api_router = APIRouter()
api_router.include_router(vacations_router)
api_router.include_router(employees_router)
