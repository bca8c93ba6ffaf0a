# backend/routers/settings_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.session import get_db
from routers.dependencies import get_current_account
from schemas.settings import CompletionDateOut
from services.auth_service import AuthenticatedAccount
from services.settings_service import SettingsStore

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/completion-date", response_model=CompletionDateOut)
def get_completion_date(
    _: AuthenticatedAccount = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    """תאריך השלמה צפוי להזמנה חדשה - לכל משתמש מחובר"""
    return CompletionDateOut(defaultCompletionDate=SettingsStore(db).get_default_completion_date())
