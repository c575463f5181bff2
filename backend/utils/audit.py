# backend/utils/audit.py
import logging
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)

# Persist one audit row in its own commit; call after the business transaction has settled
def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
    level = logging.INFO if status == "SUCCESS" else logging.WARNING
    logger.log(level, "audit %s %s %s user=%s meta=%s", action, resource, status, user_id, meta or {})
