from fastapi import HTTPException, Request
from freightdesk.core.redis import get_redis
from freightdesk.core.config import settings
from freightdesk.core.metrics import rate_limit_exceeded

async def check_rate_limit(request: Request):
    redis = get_redis()
    if redis is None:
        return
    client_id = request.client.host if request.client else "anonymous"
    key = f"rl:{client_id}"
    current = await redis.get(key)
    if current is None:
        await redis.set(key, "1", ex=settings.RATE_LIMIT_WINDOW)
        return
    count = int(current)
    if count >= settings.RATE_LIMIT:
        rate_limit_exceeded.labels(client=client_id).inc()
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    await redis.incr(key)
