import logging
from functools import wraps
from typing import Callable
from sqlalchemy.ext.asyncio import AsyncSession
from freightdesk.models.audit import Audit
from freightdesk.core.metrics import audit_logs_created
from freightdesk.utils.hashing import payload_hash

logger = logging.getLogger(__name__)

SCALAR_TYPES = (int, float, str, bool)


def audit_log(endpoint_name: str) -> Callable:

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)

            db: AsyncSession = kwargs.get("db")
            if not db:
                return result

            try:
                payload = kwargs.get("payload")

                if hasattr(payload, "model_dump"):
                    payload_dict = payload.model_dump(exclude_unset=True, mode="json")
                elif isinstance(payload, dict):
                    payload_dict = payload
                else:
                    payload_dict = {}

                # path parameters identify the record being mutated
                for key, value in kwargs.items():
                    if key.endswith("_id") or key.endswith("_index"):
                        if isinstance(value, SCALAR_TYPES):
                            payload_dict[key] = value

                audit_record = Audit(
                    actor=kwargs.get("x_actor"),
                    endpoint=str(endpoint_name),
                    payload_hash=payload_hash(payload_dict),
                )
                db.add(audit_record)
                await db.commit()
                audit_logs_created.labels(action=str(endpoint_name)).inc()

            except Exception as e:
                await db.rollback()
                logger.error(f"Audit logging failed for {endpoint_name}: {e}")

            return result

        return wrapper
    return decorator
