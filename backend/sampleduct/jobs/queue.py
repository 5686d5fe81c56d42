from __future__ import annotations

from redis import Redis
from rq import Queue
from rq.job import Job

from sampleduct.config.settings import settings
from sampleduct.jobs.extract import run_extract


def get_redis_connection() -> Redis:
    return Redis.from_url(settings.redis_url)


def get_queue(name: str | None = None) -> Queue:
    queue_name = name or settings.extract_queue_name
    return Queue(name=queue_name, connection=get_redis_connection())


def enqueue_extract(requests: list[dict], queue_name: str | None = None) -> Job:
    queue = get_queue(queue_name)
    return queue.enqueue(
        run_extract,
        requests=requests,
        job_timeout=settings.extract_job_timeout_seconds,
        result_ttl=settings.extract_result_ttl_seconds,
        description=f"extract {len(requests)} sample(s)",
    )
