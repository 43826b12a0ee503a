import asyncio
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import structlog

from src.config import Settings
from src.services.normalizer import normalize_image
from src.services.object_store import ObjectStore, build_public_url

logger = structlog.get_logger()


@dataclass(frozen=True)
class StoredObject:
    namespace: str
    filename: str
    url: str


class UploadPipeline:
    def __init__(self, store: ObjectStore, settings: Settings, executor: ThreadPoolExecutor | None = None) -> None:
        self.store = store
        self.settings = settings
        self._executor = executor or ThreadPoolExecutor(
            max_workers=settings.normalize_workers,
            thread_name_prefix="normalize",
        )

    async def store_one(self, namespace: str, data: bytes) -> StoredObject:
        loop = asyncio.get_running_loop()
        normalized = await loop.run_in_executor(
            self._executor,
            normalize_image,
            data,
            self.settings.max_dimension,
            self.settings.jpeg_quality,
        )
        filename = await loop.run_in_executor(self._executor, self.store.save, namespace, normalized)
        url = build_public_url(self.settings.domain, namespace, filename)
        return StoredObject(namespace=namespace, filename=filename, url=url)

    async def store_many(self, namespace: str, blobs: list[bytes]) -> list[StoredObject]:
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_writes)
        stored: list[StoredObject] = []

        async def _store(data: bytes) -> StoredObject:
            async with semaphore:
                result = await self.store_one(namespace, data)
                stored.append(result)
                return result

        tasks = [asyncio.create_task(_store(data)) for data in blobs]
        try:
            return list(await asyncio.gather(*tasks))
        except Exception:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error(
                "upload_batch_aborted",
                namespace=namespace,
                requested=len(blobs),
                written=[obj.filename for obj in stored],
            )
            raise

    def close(self) -> None:
        self._executor.shutdown(wait=True)
