import hmac
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session

from ciao import config
from ciao.database import get_session
from ciao.mailer import Mailer, get_mailer
from ciao.services.notifier import send_deadline_reminders

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/deadline-reminders")
def deadline_reminders(request: Request, session: Session = Depends(get_session), mailer: Mailer = Depends(get_mailer)):
    if not config.CRON_SECRET:
        return JSONResponse({"detail": "CRON_SECRET not set"}, status_code=503)
    header = request.headers.get("Authorization", "")
    provided = header[len("Bearer "):].strip() if header.startswith("Bearer ") else ""
    if not provided or not hmac.compare_digest(provided.encode(), config.CRON_SECRET.encode()):
        logger.warning("Rejected deadline sweep trigger")
        return JSONResponse({"detail": "Unauthorized"}, status_code=401)
    return {"sent": send_deadline_reminders(session, mailer)}
